"""
Date parsing for SCHEDULED:/DEADLINE: payloads.

Pure functions, no external dependencies.
"""

import re
from datetime import datetime, timedelta
from typing import Optional

# <2024-01-01>, <2024-01-01 Mon>, <2024-01-01 10:30>, <2024-01-01 Mon 10:30>,
# the same without brackets; a trailing repeater/warning ("+1w", "-2d") is ignored
_ORG_DATE = re.compile(
    r"^(?P<open><)?"
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:\s+(?P<dow>[A-Za-z]{2,3}\.?))?"
    r"(?:\s+(?P<hour>\d{1,2}):(?P<minute>\d{2}))?"
    r"(?:\s+[-+.]{1,2}\d+[hdwmy])*"
    r"\s*(?P<close>>)?$"
)


def parse_date(date_str: str) -> Optional[datetime]:
    """
    Parse a date payload into a datetime.

    Supports:
    - Org-style: "<2026-02-15>", "<2026-02-15 Sun>", "<2026-02-15 Sun 09:30>"
    - Bare: "2026-02-15", "2026-02-15 09:30"
    - Relative: "today", "tomorrow", "yesterday"

    Returns:
        datetime (midnight when no time is given) or None if unparseable
    """
    if not date_str:
        return None

    date_str = date_str.strip()
    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)

    lowered = date_str.lower()
    if lowered == "today":
        return today
    if lowered == "tomorrow":
        return today + timedelta(days=1)
    if lowered == "yesterday":
        return today - timedelta(days=1)

    m = _ORG_DATE.match(date_str)
    if not m or bool(m.group("open")) != bool(m.group("close")):
        return None

    hour = int(m.group("hour")) if m.group("hour") else 0
    minute = int(m.group("minute")) if m.group("minute") else 0
    try:
        return datetime(
            int(m.group("year")), int(m.group("month")), int(m.group("day")), hour, minute
        )
    except ValueError:
        return None
