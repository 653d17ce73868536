"""
Daily-note detection for the files being parsed.

A FileContextResolver maps an opaque file handle (a path, or any object with
a ``path``/``basename``/``stem`` attribute) to a FileContext. ``None`` means
"no context available", which the parser treats the same as "not a daily note".
"""

import os
from datetime import datetime
from pathlib import PurePath
from typing import Any, Optional, Protocol, runtime_checkable

from models.task import FileContext


@runtime_checkable
class FileContextResolver(Protocol):
    def resolve(self, file_ref: Any) -> Optional[FileContext]:
        ...


def file_stem(file_ref: Any) -> Optional[str]:
    """Best-effort file name without extension for a path-like handle."""
    if file_ref is None:
        return None
    if isinstance(file_ref, (str, os.PathLike)):
        return PurePath(file_ref).stem or None
    for attr in ("basename", "stem"):
        value = getattr(file_ref, attr, None)
        if isinstance(value, str) and value:
            return value
    path = getattr(file_ref, "path", None)
    if isinstance(path, (str, os.PathLike)):
        return PurePath(path).stem or None
    return None


class DailyNoteResolver:
    """
    Treat files whose stem parses with ``date_format`` as daily notes.

    Example:
        DailyNoteResolver("%Y-%m-%d").resolve("journal/2024-03-05.md")
        → FileContext(is_daily_note=True, daily_note_date=datetime(2024, 3, 5))
    """

    def __init__(self, date_format: str = "%Y-%m-%d") -> None:
        self.date_format = date_format

    def resolve(self, file_ref: Any) -> Optional[FileContext]:
        stem = file_stem(file_ref)
        if stem is None:
            return None
        try:
            note_date = datetime.strptime(stem, self.date_format)
        except ValueError:
            return FileContext(is_daily_note=False, daily_note_date=None)
        return FileContext(is_daily_note=True, daily_note_date=note_date)
