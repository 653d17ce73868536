"""
Urgency scoring contract.

The parser never computes urgency itself. Hosts inject an UrgencyScorer and
the coefficients it should use; the parser calls it once per incomplete task.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol, runtime_checkable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UrgencyCoefficients:
    priority_high: float = 6.0
    priority_medium: float = 3.9
    priority_low: float = 1.8
    scheduled: float = 5.0
    deadline: float = 12.0
    active: float = 4.0
    age: float = 2.0
    tags: float = 1.0
    waiting: float = -3.0


@runtime_checkable
class UrgencyScorer(Protocol):
    def score(
        self, task: Any, coefficients: UrgencyCoefficients, context: Any
    ) -> Optional[float]:
        ...


# urgency.<category>[.<subcategory>].coefficient = <number>
_COEFFICIENT_LINE = re.compile(
    r"^urgency\.(\w+)(?:\.(\w+))?\.coefficient\s*=\s*([-+]?\d+(?:\.\d*)?|[-+]?\.\d+)"
)

_FIELDS = {
    ("priority", "high"): "priority_high",
    ("priority", "medium"): "priority_medium",
    ("priority", "low"): "priority_low",
    ("scheduled", None): "scheduled",
    ("deadline", None): "deadline",
    ("due", None): "deadline",
    ("active", None): "active",
    ("age", None): "age",
    ("tags", None): "tags",
    ("waiting", None): "waiting",
}


def parse_urgency_coefficients(content: str) -> UrgencyCoefficients:
    """
    Read coefficients from urgency.ini-style text.

    Unknown categories and comment lines (``#``) are ignored; anything not
    mentioned keeps its default.
    """
    values = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = _COEFFICIENT_LINE.match(line)
        if not m:
            continue
        name = _FIELDS.get((m.group(1), m.group(2)))
        if name is None:
            log.debug("Ignoring unknown urgency coefficient: %s", line)
            continue
        values[name] = float(m.group(3))
    return replace(UrgencyCoefficients(), **values)
