"""
Parser configuration.

Settings are a plain value handed to TaskParser.create(); nothing in the
parsing core reads environment variables or module globals. The server builds
a ParserSettings from the environment via settings_from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

# Lines scanned after a task when looking for SCHEDULED:/DEADLINE: lines
DEFAULT_DATE_LOOKAHEAD = 8

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class LanguageCommentSupport:
    """Use per-language comment regexes inside fenced code blocks."""

    enabled: bool = True


@dataclass(frozen=True)
class ParserSettings:
    include_callout_blocks: bool = True
    include_code_blocks: bool = False
    include_comment_blocks: bool = False
    language_comment_support: LanguageCommentSupport = field(
        default_factory=LanguageCommentSupport
    )
    # Flat list kept for older settings files; merged into the inactive group
    additional_task_keywords: List[str] = field(default_factory=list)
    additional_inactive_keywords: List[str] = field(default_factory=list)
    additional_active_keywords: List[str] = field(default_factory=list)
    additional_waiting_keywords: List[str] = field(default_factory=list)
    additional_completed_keywords: List[str] = field(default_factory=list)
    additional_archived_keywords: List[str] = field(default_factory=list)
    date_lookahead: int = DEFAULT_DATE_LOOKAHEAD
    daily_note_format: str = "%Y-%m-%d"


def _parse_list(raw: Optional[str]) -> List[str]:
    """Parse a comma-separated list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> ParserSettings:
    """
    Build ParserSettings from environment variables.

    Recognised variables:
        INCLUDE_CALLOUT_BLOCKS, INCLUDE_CODE_BLOCKS, INCLUDE_COMMENT_BLOCKS,
        LANGUAGE_COMMENT_SUPPORT: booleans (true/1/yes/on)
        ADDITIONAL_KEYWORDS, ADDITIONAL_ACTIVE_KEYWORDS,
        ADDITIONAL_WAITING_KEYWORDS, ADDITIONAL_COMPLETED_KEYWORDS,
        ADDITIONAL_ARCHIVED_KEYWORDS: comma-separated keyword lists
        DATE_LOOKAHEAD: integer
        DAILY_NOTE_FORMAT: strftime format of daily note file names

    Keyword lists are not validated here; TaskParser.create() does that.
    """
    env = os.environ if environ is None else environ
    defaults = ParserSettings()

    lookahead_raw = env.get("DATE_LOOKAHEAD", "")
    try:
        lookahead = int(lookahead_raw) if lookahead_raw.strip() else defaults.date_lookahead
    except ValueError:
        raise ValueError(f"DATE_LOOKAHEAD must be an integer, got {lookahead_raw!r}") from None

    return ParserSettings(
        include_callout_blocks=_parse_bool(
            env.get("INCLUDE_CALLOUT_BLOCKS"), defaults.include_callout_blocks
        ),
        include_code_blocks=_parse_bool(
            env.get("INCLUDE_CODE_BLOCKS"), defaults.include_code_blocks
        ),
        include_comment_blocks=_parse_bool(
            env.get("INCLUDE_COMMENT_BLOCKS"), defaults.include_comment_blocks
        ),
        language_comment_support=LanguageCommentSupport(
            enabled=_parse_bool(
                env.get("LANGUAGE_COMMENT_SUPPORT"),
                defaults.language_comment_support.enabled,
            )
        ),
        additional_inactive_keywords=_parse_list(env.get("ADDITIONAL_KEYWORDS")),
        additional_active_keywords=_parse_list(env.get("ADDITIONAL_ACTIVE_KEYWORDS")),
        additional_waiting_keywords=_parse_list(env.get("ADDITIONAL_WAITING_KEYWORDS")),
        additional_completed_keywords=_parse_list(env.get("ADDITIONAL_COMPLETED_KEYWORDS")),
        additional_archived_keywords=_parse_list(env.get("ADDITIONAL_ARCHIVED_KEYWORDS")),
        date_lookahead=lookahead,
        daily_note_format=env.get("DAILY_NOTE_FORMAT") or defaults.daily_note_format,
    )
