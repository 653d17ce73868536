"""
Single-pass block tracking for task parsing.

BlockTracker is fed every line of one file, in order, and answers which regex
family (if any) applies to that line. It owns the only state that carries over
between lines: fenced code, ``$$`` math and ``%%`` comment blocks. Footnote
definitions and quote depth are recomputed per line.

A tracker belongs to exactly one parse_file() call. Unterminated blocks are
not an error: the remaining lines simply stay inside the block.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from models.settings import ParserSettings
from parsers.languages import LanguageDefinition, LanguageRegistry

# ```lang / ~~~lang (three or more fence chars, optional info token)
_FENCE = re.compile(r"^[ \t]*(`{3,}|~{3,})[ \t]*([^\s`]*)")
# $$ opening or closing a math block; "$$ x $$" on one line is inline math
_MATH_FENCE = re.compile(r"^[ \t]*\$\$")
_MATH_INLINE = re.compile(r"^[ \t]*\$\$.*\$\$[ \t]*$")
_COMMENT_FENCE = re.compile(r"^[ \t]*%%")
_FOOTNOTE_DEFINITION = re.compile(r"^\[\^\d+\]:")
_QUOTE_RUN = re.compile(r"^[ \t]*((?:>[ \t]*)+)")
_CALLOUT_HEADER = re.compile(r"\[![^\]]+\]")


class BlockKind(str, Enum):
    NONE = "none"
    CODE = "code"
    MATH = "math"
    COMMENT = "comment"


class LineFamily(str, Enum):
    """Which regex family a line is matched against."""

    SKIP = "skip"
    STANDARD = "standard"
    FOOTNOTE = "footnote"
    CODE = "code"
    INLINE_COMMENT = "inline_comment"


class LineContext(NamedTuple):
    family: LineFamily
    language: Optional[LanguageDefinition] = None
    quote_depth: int = 0
    # (start, end) of the body of a single-line %% comment
    comment_span: Optional[Tuple[int, int]] = None


SKIP = LineContext(LineFamily.SKIP)


@dataclass
class BlockState:
    kind: BlockKind = BlockKind.NONE
    fence_char: Optional[str] = None
    language: Optional[LanguageDefinition] = None
    in_footnote: bool = False
    quote_depth: int = 0
    quote_kind: Optional[str] = None  # "quote" or "callout"


def quote_depth(line: str) -> Tuple[int, Optional[str]]:
    """Return (number of leading '>' markers, "quote" | "callout" | None)."""
    m = _QUOTE_RUN.match(line)
    if not m:
        return 0, None
    depth = m.group(1).count(">")
    kind = "callout" if _CALLOUT_HEADER.match(line, m.end()) else "quote"
    return depth, kind


def single_line_comment_span(line: str) -> Optional[Tuple[int, int]]:
    """Return the (start, end) body span of a ``%% ... %%`` line, or None."""
    opener = _COMMENT_FENCE.match(line)
    if opener is None:
        return None
    start = opener.end()
    end = len(line.rstrip(" \t")) - 2
    if end < start or not line.startswith("%%", end):
        return None
    end = len(line[:end].rstrip(" \t"))
    if end <= start or not line[start:end].strip():
        return None
    return start, end


class BlockTracker:
    """
    Per-file block state machine.

    Usage:
        tracker = BlockTracker(settings, registry)
        for line in lines:
            ctx = tracker.advance(line)
            if ctx.family is LineFamily.SKIP:
                continue
            ...
    """

    def __init__(
        self,
        settings: ParserSettings,
        languages: Optional[LanguageRegistry] = None,
    ) -> None:
        self._settings = settings
        self._languages = languages
        self._use_languages = (
            settings.include_code_blocks
            and settings.language_comment_support.enabled
            and languages is not None
        )
        self.state = BlockState()

    # ------------------------------------------------------------------
    # Per-kind handlers
    # ------------------------------------------------------------------

    def _in_code(self, line: str) -> LineContext:
        fence = _FENCE.match(line)
        if fence and fence.group(1)[0] == self.state.fence_char:
            self.state.kind = BlockKind.NONE
            self.state.fence_char = None
            self.state.language = None
            return SKIP
        if not self._settings.include_code_blocks:
            return SKIP
        depth = quote_depth(line)[0]
        if depth and not self._settings.include_callout_blocks:
            return SKIP
        if self.state.language is not None:
            return LineContext(LineFamily.CODE, language=self.state.language)
        return LineContext(LineFamily.STANDARD, quote_depth=depth)

    def _in_math(self, line: str) -> LineContext:
        if _MATH_FENCE.match(line):
            self.state.kind = BlockKind.NONE
        return SKIP

    def _in_comment(self, line: str) -> LineContext:
        stripped = line.strip()
        if stripped.startswith("%%") or stripped.endswith("%%"):
            self.state.kind = BlockKind.NONE
            return SKIP
        if not self._settings.include_comment_blocks:
            return SKIP
        depth = quote_depth(line)[0]
        if depth and not self._settings.include_callout_blocks:
            return SKIP
        return LineContext(LineFamily.STANDARD, quote_depth=depth)

    def _open_code(self, fence: re.Match) -> LineContext:
        self.state.kind = BlockKind.CODE
        self.state.fence_char = fence.group(1)[0]
        self.state.language = None
        if self._use_languages:
            self.state.language = self._languages.resolve(fence.group(2))
        return SKIP

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def advance(self, line: str) -> LineContext:
        """Consume one line and classify it."""
        self.state.in_footnote = False
        self.state.quote_depth = 0
        self.state.quote_kind = None

        if self.state.kind is BlockKind.CODE:
            return self._in_code(line)
        if self.state.kind is BlockKind.MATH:
            return self._in_math(line)
        if self.state.kind is BlockKind.COMMENT:
            return self._in_comment(line)

        fence = _FENCE.match(line)
        if fence:
            return self._open_code(fence)

        if _MATH_FENCE.match(line):
            if not _MATH_INLINE.match(line):
                self.state.kind = BlockKind.MATH
            return SKIP

        if _COMMENT_FENCE.match(line):
            span = single_line_comment_span(line)
            if span is None:
                self.state.kind = BlockKind.COMMENT
                return SKIP
            if not self._settings.include_comment_blocks:
                return SKIP
            return LineContext(LineFamily.INLINE_COMMENT, comment_span=span)

        if _FOOTNOTE_DEFINITION.match(line):
            self.state.in_footnote = True
            return LineContext(LineFamily.FOOTNOTE)

        depth, kind = quote_depth(line)
        self.state.quote_depth = depth
        self.state.quote_kind = kind
        if depth and not self._settings.include_callout_blocks:
            return SKIP
        return LineContext(LineFamily.STANDARD, quote_depth=depth)
