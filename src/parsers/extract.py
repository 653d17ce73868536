"""
Low-level helpers that turn one matched task line into Task fields.

    extract_task_line(line, capture)  → TaskLineParts
    normalize_content(text)           → TaskContent
    apply_checkbox(line, ...)         → (state, completed, list_marker)
    quote_nesting_level(line)         → int
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from models.task import PRIORITY_LETTERS, Priority


class TaskLineMismatch(RuntimeError):
    """The capture regex failed on a line its test regex accepted."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"Task line passed the test regex but not the capture regex: {line!r}")


@dataclass(frozen=True)
class TaskLineParts:
    indent: str
    list_marker: str
    keyword: str
    text: str
    tail: str = ""
    footnote_marker: Optional[str] = None


@dataclass(frozen=True)
class TaskContent:
    text: str
    priority: Optional[Priority] = None
    tags: Tuple[str, ...] = ()
    embed_reference: Optional[str] = None
    footnote_reference: Optional[str] = None


# ---------------------------------------------------------------------------
# Token patterns
# ---------------------------------------------------------------------------

_FOOTNOTE_REFERENCE = re.compile(r"\[\^[^\]\s]+\]")
# Trailing "^block-id", optionally followed only by priority/tag tokens
_EMBED_REFERENCE = re.compile(
    r"(?:^|(?<=\s))(?P<ref>\^[A-Za-z0-9-]+)(?P<trailer>(?:\s+(?:\[#[ABC]\]|#[\w/-]+))*)\s*$"
)
_PRIORITY = re.compile(r"\[#([ABC])\]")
_TAG = re.compile(r"(?<![\w#])#([\w/-]+)")
_SPACES = re.compile(r"[ \t]+")
_WHITESPACE = re.compile(r"\s+")

# "- [x] KEYWORD text", tolerating one leading '>' for quoted lines
_CHECKBOX_LINE = re.compile(r"^(\s*)([-*+]\s*\[( |x|X)\])\s+(\S+)\s+(.+)$")
_QUOTE_RUN = re.compile(r"^[ \t]*((?:>[ \t]*)+)")


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def extract_task_line(
    line: str, capture: re.Pattern, tail: Optional[re.Pattern] = None
) -> TaskLineParts:
    """
    Split a task line into prefix, marker, keyword, text and tail.

    A code-comment prefix is folded into ``indent``; together with
    ``list_marker`` it is the exact text before the keyword. ``capture`` takes
    the text greedily to end of line; trailing whitespace is dropped here and,
    when ``tail`` finds a closing comment marker at the end of the text, that
    marker and the blanks before it become ``tail``.

    Raises:
        TaskLineMismatch: if ``capture`` does not match
    """
    m = capture.match(line)
    if m is None:
        raise TaskLineMismatch(line)
    groups = m.groupdict()
    text, end = _split_tail(m.group("text").rstrip(), tail)
    return TaskLineParts(
        indent=(groups.get("indent") or "") + (groups.get("comment") or ""),
        list_marker=groups.get("marker") or "",
        keyword=m.group("keyword"),
        text=text,
        tail=end,
        footnote_marker=groups.get("footnote"),
    )


def _split_tail(text: str, tail: Optional[re.Pattern]) -> Tuple[str, str]:
    if tail is None:
        return text, ""
    m = tail.search(text)
    if m is None:
        return text, ""
    body = text[: m.start()].rstrip()
    if not body:
        return text, ""
    return body, text[len(body):]


def quote_nesting_level(line: str) -> int:
    m = _QUOTE_RUN.match(line)
    return m.group(1).count(">") if m else 0


def _extract_priority(text: str) -> Tuple[str, Optional[Priority]]:
    m = _PRIORITY.search(text)
    if not m:
        return text, None
    priority = PRIORITY_LETTERS[m.group(1)]
    cleaned = text[: m.start()] + " " + text[m.end():]
    return _SPACES.sub(" ", cleaned).lstrip(), priority


def _extract_tags(text: str) -> Tuple[str, ...]:
    tags: List[str] = []
    for m in _TAG.finditer(text):
        tag = m.group(1)
        # "#A" inside "[#A]" is a priority cookie
        if tag in PRIORITY_LETTERS:
            continue
        if tag not in tags:
            tags.append(tag)
    return tuple(tags)


def normalize_content(text: str) -> TaskContent:
    """
    Pull footnote reference, block embed, priority and tags out of task text.

    Footnote references and the trailing block id are removed from the text,
    as is the first ``[#A]``/``[#B]``/``[#C]`` cookie. Hashtags stay in the
    text and are also reported in ``tags``.
    """
    tags = _extract_tags(text)

    footnote = _FOOTNOTE_REFERENCE.search(text)
    footnote_reference = footnote.group(0) if footnote else None
    body = _FOOTNOTE_REFERENCE.sub(" ", text)

    embed_reference = None
    trailer = ""
    embed = _EMBED_REFERENCE.search(body)
    if embed:
        embed_reference = embed.group("ref")
        trailer = embed.group("trailer")
        body = body[: embed.start()]

    body, priority = _extract_priority(body)
    if priority is None and trailer:
        priority = _extract_priority(trailer)[1]

    return TaskContent(
        text=_WHITESPACE.sub(" ", body).strip(),
        priority=priority,
        tags=tags,
        embed_reference=embed_reference,
        footnote_reference=footnote_reference,
    )


def apply_checkbox(
    line: str, state: str, completed: bool, list_marker: str
) -> Tuple[str, bool, str]:
    """
    Let an explicit checkbox decide completion.

    ``- [x] KEYWORD`` is completed and ``- [ ] KEYWORD`` is not, whatever
    group the keyword belongs to. Lines without a checkbox keep the
    keyword-derived values.
    """
    m = _CHECKBOX_LINE.match(line)
    if m is None and line.startswith(">"):
        m = _CHECKBOX_LINE.match(line[1:])
    if m is None:
        return state, completed, list_marker
    return m.group(4), m.group(3) in "xX", m.group(2).rstrip()
