"""
Core task data models.

A Task is created once per matched line by parsers.task_parser and is not
mutated afterwards. Everything the host needs to locate, render or rank the
task is captured here; the raw line is kept alongside the cleaned fields so
callers can rewrite the line without re-parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Optional, Tuple

Priority = Literal["high", "med", "low"]

# Priority letter inside a ``[#X]`` token → priority
PRIORITY_LETTERS = {
    "A": "high",
    "B": "med",
    "C": "low",
}


@dataclass(frozen=True)
class Task:
    """
    A single task line extracted from a note.

    ``path`` and ``line`` (0-based) identify the task within one parse of one
    file. ``indent`` and ``list_marker`` hold the structural text preceding the
    keyword (comment markers, quote arrows, bullets, checkbox markup). A
    checkbox marker is stored without its trailing whitespace.
    """

    path: str
    line: int
    raw_text: str
    state: str
    text: str
    indent: str = ""
    list_marker: str = ""
    completed: bool = False
    priority: Optional[Priority] = None
    tail: str = ""
    scheduled_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None
    tags: Tuple[str, ...] = ()
    embed_reference: Optional[str] = None
    footnote_reference: Optional[str] = None
    footnote_marker: Optional[str] = None
    quote_nesting_level: int = 0
    urgency: Optional[float] = None
    is_daily_note: bool = False
    daily_note_date: Optional[datetime] = None
    file: Any = field(default=None, compare=False, repr=False)

    @property
    def ref(self) -> str:
        """Task reference in 'path:line' format."""
        return f"{self.path}:{self.line}"

    @property
    def has_dates(self) -> bool:
        """True if a SCHEDULED or DEADLINE line was attached."""
        return self.scheduled_date is not None or self.deadline_date is not None


@dataclass(frozen=True)
class FileContext:
    """Host-side facts about the file a task came from."""

    is_daily_note: bool = False
    daily_note_date: Optional[datetime] = None
