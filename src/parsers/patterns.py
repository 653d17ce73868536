"""
Task-line regex composition.

Three families are built from the current keyword set, each as a
(test, capture) pair:

    standard: plain, quoted and callout lines
    footnote: ``[^n]: KEYWORD text`` definitions
    code:     per-language comment lines inside fenced code blocks

Capture groups are named and always present in the same order:
``indent`` (or ``footnote``), ``marker``, ``keyword``, ``text`` and, for the
code family, ``comment`` before the marker and ``tail`` after the text.

Alternation order inside each fragment is significant: the first alternative
that lets the whole line match wins (bullet before numbered before lettered
list markers, single-line before multi-line comment starts). Do not reorder.
"""

import logging
import re
import threading
from typing import Dict, Hashable, Iterable, NamedTuple, Optional, Union

from parsers.keywords import KeywordSet, escape_keywords
from parsers.languages import LanguageCommentPatterns, LanguageDefinition

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------

BULLET_LIST = r"[-*+]"
NUMBERED_LIST = r"\d+[.)]"
LETTER_LIST = r"[A-Za-z][.)]"
CUSTOM_LIST = r"\([A-Za-z0-9]+\)"
CHECKBOX = r"\[[ \S]\]"

# List marker with an optional checkbox, e.g. "- ", "1. ", "a) ", "(A1) ", "- [x] "
LIST_MARKER = (
    rf"(?:{BULLET_LIST}|{NUMBERED_LIST}|{LETTER_LIST}|{CUSTOM_LIST})"
    rf"[ \t]+(?:{CHECKBOX}[ \t]+)?"
)

PLAIN_PREFIX = r"[ \t]*"
# One or more '>' (nested quotes), optionally followed by a callout header "[!type]" / "[!type]-"
QUOTE_PREFIX = r"[ \t]*(?:>[ \t]*)+(?:\[![^\]]+\][-+]?[ \t]*)?"

FOOTNOTE_PREFIX = r"\[\^\d+\]:[ \t]+"

# Used when a language defines no continuation pattern for comment bodies.
# Empty, or any text ending in a non-blank, so the blanks before the keyword
# are only ever matched by the separator that follows.
DEFAULT_MID_COMMENT = r"(?:.*?\S)?"

# Greedy to end of line; trailing whitespace and comment ends are trimmed
# afterwards in extract_task_line(), which keeps matching linear in line length
TASK_TEXT = r"\S.*"


class RegexPair(NamedTuple):
    """
    ``test`` answers "is this a task line"; ``capture`` extracts the parts.

    ``tail`` (code family only) finds a closing comment marker at the end of
    the captured text.
    """

    test: re.Pattern
    capture: re.Pattern
    tail: Optional[re.Pattern] = None


def _alternation(keywords: Iterable[str]) -> str:
    escaped = escape_keywords(keywords)
    if not escaped:
        # No keywords: a pattern that never matches
        return r"(?!)"
    return escaped


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_task_regex(keywords: Iterable[str]) -> RegexPair:
    """Standard task line: ``<prefix><list-marker>?<KEYWORD> <text>``."""
    kw = _alternation(keywords)
    prefix = f"(?:{PLAIN_PREFIX}|{QUOTE_PREFIX})"
    test = re.compile(rf"^{prefix}(?:{LIST_MARKER})??(?:{kw})[ \t]+\S")
    capture = re.compile(
        rf"^(?P<indent>{PLAIN_PREFIX}|{QUOTE_PREFIX})"
        rf"(?P<marker>{LIST_MARKER})??"
        rf"(?P<keyword>{kw})[ \t]+"
        rf"(?P<text>{TASK_TEXT})$"
    )
    return RegexPair(test, capture)


def build_footnote_regex(keywords: Iterable[str]) -> RegexPair:
    """Footnote definition task: ``[^n]: <KEYWORD> <text>``."""
    kw = _alternation(keywords)
    test = re.compile(rf"^{FOOTNOTE_PREFIX}(?:{kw})[ \t]+\S")
    capture = re.compile(
        rf"^(?P<footnote>{FOOTNOTE_PREFIX})"
        rf"(?P<keyword>{kw})[ \t]+"
        rf"(?P<text>{TASK_TEXT})$"
    )
    return RegexPair(test, capture)


def build_code_regex(
    keywords: Iterable[str],
    language: Union[LanguageDefinition, LanguageCommentPatterns],
) -> RegexPair:
    """
    Task inside a code comment for one language.

    The comment prefix alternates the language's single-line start, its
    multi-line start and its mid-comment continuation (DEFAULT_MID_COMMENT
    when the language has none). The indent always takes every leading
    blank, which keeps matching linear on padded lines. A trailing
    multi-line comment end is located by the ``tail`` pattern and split off
    the text so it can be preserved on write-back.
    """
    patterns = language.patterns if isinstance(language, LanguageDefinition) else language
    kw = _alternation(keywords)

    starts = []
    if patterns.single_line:
        starts.append(rf".*?(?:{patterns.single_line})")
    if patterns.multi_line_start:
        starts.append(rf".*?(?:{patterns.multi_line_start})")
    starts.append(rf"(?:{patterns.multiline_mid or DEFAULT_MID_COMMENT})")
    comment = "|".join(starts)

    tail = None
    if patterns.multi_line_end:
        tail = re.compile(rf"(?:{patterns.multi_line_end})\Z")

    test = re.compile(
        rf"^[ \t]*(?![ \t])(?:(?:{comment})[ \t]*)?(?:{LIST_MARKER})??(?<!\w)(?:{kw})[ \t]+\S"
    )
    capture = re.compile(
        rf"^(?P<indent>[ \t]*)(?![ \t])"
        rf"(?P<comment>(?:{comment})[ \t]*)?"
        rf"(?P<marker>{LIST_MARKER})??"
        rf"(?<!\w)(?P<keyword>{kw})[ \t]+"
        rf"(?P<text>{TASK_TEXT})$"
    )
    return RegexPair(test, capture, tail)


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class PatternCache:
    """
    Compiled regexes for one KeywordSet.

    Entries are keyed by family (and language for the code family) and are
    dropped as a whole when the keyword set's version moves. Built patterns
    are never mutated, so readers on other threads can use them freely.
    """

    def __init__(self, keywords: KeywordSet) -> None:
        self._keywords = keywords
        self._lock = threading.Lock()
        self._version = keywords.version
        self._entries: Dict[Hashable, RegexPair] = {}

    @property
    def keywords(self) -> KeywordSet:
        return self._keywords

    def _get(self, key: Hashable, build) -> RegexPair:
        with self._lock:
            if self._version != self._keywords.version:
                log.debug(
                    "Keyword set changed (v%d -> v%d); dropping %d cached patterns",
                    self._version, self._keywords.version, len(self._entries),
                )
                self._entries.clear()
                self._version = self._keywords.version
            pair = self._entries.get(key)
            if pair is None:
                pair = build(self._keywords.as_tuple())
                self._entries[key] = pair
            return pair

    def task(self) -> RegexPair:
        return self._get("task", build_task_regex)

    def footnote(self) -> RegexPair:
        return self._get("footnote", build_footnote_regex)

    def code(self, language: LanguageDefinition) -> RegexPair:
        return self._get(
            ("code", language), lambda keywords: build_code_regex(keywords, language)
        )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
