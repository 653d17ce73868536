"""
SCHEDULED:/DEADLINE: lines that follow a task.

    TODO write report
      SCHEDULED: <2024-01-01 Mon>
      DEADLINE: <2024-01-05 Fri>

A date line belongs to the task above it when its indentation equals or
extends the task's indentation. Inside a quote or callout the date line is
accepted behind a leading '>' without an indentation check.
"""

import logging
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional

log = logging.getLogger(__name__)

SCHEDULED = "scheduled"
DEADLINE = "deadline"

_PREFIXES = {SCHEDULED: "SCHEDULED:", DEADLINE: "DEADLINE:"}

DateParser = Callable[[str], Optional[datetime]]


class TaskDates(NamedTuple):
    scheduled: Optional[datetime] = None
    deadline: Optional[datetime] = None


def _kind_of(content: str) -> Optional[str]:
    for kind, prefix in _PREFIXES.items():
        if content.startswith(prefix):
            return kind
    return None


def date_line_type(line: str, task_indent: str) -> Optional[str]:
    """Return "scheduled", "deadline" or None for a candidate date line."""
    stripped = line.strip()
    if stripped.startswith(">"):
        kind = _kind_of(stripped[1:].strip())
        if kind:
            return kind

    kind = _kind_of(stripped)
    if kind is None:
        return None
    line_indent = line[: len(line) - len(line.lstrip())]
    if not line_indent.startswith(task_indent):
        return None
    return kind


def date_payload(line: str, kind: str) -> str:
    """The text after the SCHEDULED:/DEADLINE: prefix."""
    content = line.strip()
    if content.startswith(">"):
        content = content[1:].strip()
    return content[len(_PREFIXES[kind]):].strip()


def extract_task_dates(
    lines: List[str],
    start: int,
    task_indent: str,
    date_parser: DateParser,
    *,
    in_quote: bool = False,
    lookahead: int = 8,
    path: str = "",
) -> TaskDates:
    """
    Scan ``lines[start:]`` for the task's SCHEDULED/DEADLINE dates.

    Blank lines are skipped. Scanning stops at the first non-date line, once
    both dates are found, or after ``lookahead`` lines. The first valid date
    of each kind wins; an unparseable payload is logged and skipped.
    """
    found = {SCHEDULED: None, DEADLINE: None}
    end = min(len(lines), start + max(lookahead, 0))

    for index in range(start, end):
        line = lines[index]
        if not line.strip():
            continue
        if in_quote and not line.lstrip().startswith(">"):
            break

        kind = date_line_type(line, task_indent)
        if kind is None:
            break

        if found[kind] is None:
            payload = date_payload(line, kind)
            parsed = date_parser(payload)
            if parsed is None:
                log.warning(
                    "Invalid %s date at %s:%d: %r", kind, path or "<text>", index + 1, payload
                )
            else:
                found[kind] = parsed

        if found[SCHEDULED] is not None and found[DEADLINE] is not None:
            break

    return TaskDates(found[SCHEDULED], found[DEADLINE])
