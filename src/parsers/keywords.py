"""
Task keyword validation, escaping and group classification.

Keywords are user-supplied and end up inside a regex alternation that is
evaluated on every line of every file, so validate_keywords() rejects anything
that could make that alternation backtrack badly. Validation happens once,
when a parser or KeywordSet is configured, never per line.
"""

import re
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


MAX_KEYWORD_LENGTH = 50

# ---------------------------------------------------------------------------
# Built-in keyword groups
# ---------------------------------------------------------------------------

BUILTIN_ACTIVE_KEYWORDS: Tuple[str, ...] = ("DOING", "NOW", "IN-PROGRESS")
BUILTIN_INACTIVE_KEYWORDS: Tuple[str, ...] = ("TODO", "LATER")
BUILTIN_WAITING_KEYWORDS: Tuple[str, ...] = ("WAIT", "WAITING")
BUILTIN_COMPLETED_KEYWORDS: Tuple[str, ...] = ("DONE", "CANCELED", "CANCELLED")
BUILTIN_ARCHIVED_KEYWORDS: Tuple[str, ...] = ("ARCHIVED",)

KEYWORD_GROUPS = ("active", "inactive", "waiting", "completed", "archived")

_BUILTIN_GROUPS: Dict[str, Tuple[str, ...]] = {
    "active": BUILTIN_ACTIVE_KEYWORDS,
    "inactive": BUILTIN_INACTIVE_KEYWORDS,
    "waiting": BUILTIN_WAITING_KEYWORDS,
    "completed": BUILTIN_COMPLETED_KEYWORDS,
    "archived": BUILTIN_ARCHIVED_KEYWORDS,
}


class InvalidKeyword(ValueError):
    """Raised when a task keyword is empty or could compile into an unsafe regex."""

    def __init__(self, keyword: str, reason: str) -> None:
        self.keyword = keyword
        self.reason = reason
        super().__init__(f"Invalid task keyword {keyword!r}: {reason}")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

# Each entry: (pattern, description). Any hit rejects the keyword.
_DANGEROUS_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\*.*\*|\+.*\+|\?.*\?"), "nested quantifiers"),
    (re.compile(r"[*+?]{3,}"), "repeated quantifiers"),
    (re.compile(r"\\\d"), "backreference"),
    (re.compile(r"\(\?<?[=!]"), "lookahead/lookbehind"),
]

_REPETITION_BOUND = re.compile(r"\{\s*(\d*)\s*(?:,\s*(\d*)\s*)?\}")


def _has_large_repetition(keyword: str) -> bool:
    for m in _REPETITION_BOUND.finditer(keyword):
        for bound in m.groups():
            if bound and int(bound) >= 10:
                return True
    return False


def _check_keyword(keyword: str) -> None:
    if keyword == "":
        raise InvalidKeyword(keyword, "empty keyword")
    if not keyword.strip():
        raise InvalidKeyword(keyword, "whitespace-only keyword")
    if len(keyword) > MAX_KEYWORD_LENGTH:
        raise InvalidKeyword(
            keyword,
            f"dangerous regex pattern (longer than {MAX_KEYWORD_LENGTH} characters)",
        )
    for pattern, description in _DANGEROUS_PATTERNS:
        if pattern.search(keyword):
            raise InvalidKeyword(keyword, f"dangerous regex pattern ({description})")
    if _has_large_repetition(keyword):
        raise InvalidKeyword(keyword, "dangerous regex pattern (repetition bound >= 10)")


def validate_keywords(keywords: Iterable[str]) -> None:
    """
    Reject keywords that are empty or look like regex attack patterns.

    Raises:
        InvalidKeyword: on the first offending keyword
    """
    for keyword in keywords:
        if not isinstance(keyword, str):
            raise InvalidKeyword(repr(keyword), "keyword must be a string")
        _check_keyword(keyword)


def escape_keywords(keywords: Iterable[str]) -> str:
    """Escape keywords and join them into a regex alternation, order preserved."""
    return "|".join(re.escape(k) for k in keywords)


# ---------------------------------------------------------------------------
# KeywordSet
# ---------------------------------------------------------------------------

class KeywordSet:
    """
    Ordered collection of distinct, validated keywords.

    ``version`` increases on every effective mutation; compiled patterns are
    cached against it, so add()/remove() force a rebuild on next use.
    """

    def __init__(self, keywords: Iterable[str] = ()) -> None:
        items = list(keywords)
        validate_keywords(items)
        self._keywords: List[str] = []
        for keyword in items:
            if keyword not in self._keywords:
                self._keywords.append(keyword)
        self.version = 0

    def add(self, keyword: str) -> None:
        validate_keywords([keyword])
        if keyword in self._keywords:
            return
        self._keywords.append(keyword)
        self.version += 1

    def remove(self, keyword: str) -> None:
        if keyword not in self._keywords:
            return
        self._keywords.remove(keyword)
        self.version += 1

    def as_tuple(self) -> Tuple[str, ...]:
        return tuple(self._keywords)

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._keywords

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keywords))

    def __len__(self) -> int:
        return len(self._keywords)

    def __repr__(self) -> str:
        return f"KeywordSet({self._keywords!r}, version={self.version})"


# ---------------------------------------------------------------------------
# KeywordManager
# ---------------------------------------------------------------------------

def _normalize(keywords: Optional[Sequence[str]]) -> List[str]:
    """Trim user keywords and drop blanks, keeping non-strings for validation."""
    result = []
    for keyword in keywords or []:
        if isinstance(keyword, str):
            keyword = keyword.strip()
            if not keyword:
                continue
        result.append(keyword)
    return result


class KeywordManager:
    """
    Built-in keyword groups merged with user additions.

    Provides the ordered keyword list the regexes are built from and the
    completion predicate used when a line carries no checkbox.
    """

    def __init__(
        self,
        *,
        active: Optional[Sequence[str]] = None,
        inactive: Optional[Sequence[str]] = None,
        waiting: Optional[Sequence[str]] = None,
        completed: Optional[Sequence[str]] = None,
        archived: Optional[Sequence[str]] = None,
    ) -> None:
        additions = {
            "active": _normalize(active),
            "inactive": _normalize(inactive),
            "waiting": _normalize(waiting),
            "completed": _normalize(completed),
            "archived": _normalize(archived),
        }
        for group_keywords in additions.values():
            validate_keywords(group_keywords)

        self._custom: Dict[str, Tuple[str, ...]] = {
            group: tuple(words) for group, words in additions.items()
        }
        self._groups: Dict[str, Tuple[str, ...]] = {}
        for group in KEYWORD_GROUPS:
            merged: List[str] = []
            for keyword in (*_BUILTIN_GROUPS[group], *self._custom[group]):
                if keyword not in merged:
                    merged.append(keyword)
            self._groups[group] = tuple(merged)

    @classmethod
    def from_settings(cls, settings) -> "KeywordManager":
        """Build from a ParserSettings value."""
        return cls(
            active=settings.additional_active_keywords,
            inactive=[
                *settings.additional_task_keywords,
                *settings.additional_inactive_keywords,
            ],
            waiting=settings.additional_waiting_keywords,
            completed=settings.additional_completed_keywords,
            archived=settings.additional_archived_keywords,
        )

    def all_keywords(self) -> List[str]:
        """All keywords, active first, then inactive, waiting, completed, archived."""
        result: List[str] = []
        for group in KEYWORD_GROUPS:
            for keyword in self._groups[group]:
                if keyword not in result:
                    result.append(keyword)
        return result

    def keyword_set(self) -> KeywordSet:
        return KeywordSet(self.all_keywords())

    def keywords_for_group(self, group: str) -> List[str]:
        if group not in self._groups:
            raise KeyError(f"Unknown keyword group: {group!r}")
        return list(self._groups[group])

    def add(self, keyword: str, group: str = "inactive") -> None:
        """Record a user keyword in a group at runtime."""
        if group not in self._groups:
            raise KeyError(f"Unknown keyword group: {group!r}")
        validate_keywords([keyword])
        if keyword not in self._custom[group]:
            self._custom[group] += (keyword,)
        if keyword not in self._groups[group]:
            self._groups[group] += (keyword,)

    def remove(self, keyword: str) -> None:
        """Forget a keyword in every group, built-in or not."""
        for group in KEYWORD_GROUPS:
            self._custom[group] = tuple(k for k in self._custom[group] if k != keyword)
            self._groups[group] = tuple(k for k in self._groups[group] if k != keyword)

    def custom_keywords(self) -> List[str]:
        """User additions across all groups, in group order."""
        return [k for group in KEYWORD_GROUPS for k in self._custom[group]]

    def group_of(self, keyword: str) -> Optional[str]:
        for group in ("inactive", "active", "waiting", "completed", "archived"):
            if keyword in self._groups[group]:
                return group
        return None

    def is_completed(self, keyword: str) -> bool:
        return keyword in self._groups["completed"]

    def is_active(self, keyword: str) -> bool:
        return keyword in self._groups["active"]

    def is_waiting(self, keyword: str) -> bool:
        return keyword in self._groups["waiting"]

    def is_inactive(self, keyword: str) -> bool:
        return keyword in self._groups["inactive"]

    def is_archived(self, keyword: str) -> bool:
        return keyword in self._groups["archived"]

    def is_known(self, keyword: str) -> bool:
        return self.group_of(keyword) is not None

    @staticmethod
    def is_builtin(keyword: str) -> bool:
        return any(keyword in words for words in _BUILTIN_GROUPS.values())
