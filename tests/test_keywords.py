"""
Tests for parsers/keywords.py.

Covers:
- validate_keywords: accepted keywords, every rejection rule
- escape_keywords: metacharacter escaping and alternation order
- KeywordSet: dedup, add/remove, version bumps
- KeywordManager: built-in groups, user additions, completion predicate
"""

import re
import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from models.settings import ParserSettings
from parsers.keywords import (
    InvalidKeyword,
    KeywordManager,
    KeywordSet,
    escape_keywords,
    validate_keywords,
)
from parsers.patterns import build_task_regex


# ---------------------------------------------------------------------------
# validate_keywords
# ---------------------------------------------------------------------------

class TestValidateKeywords:
    @pytest.mark.parametrize(
        "keyword",
        ["TODO", "FIXME", "IN-PROGRESS", "REVIEW.ME", "A+", "WHY?", "X{2}", "K" * 50],
    )
    def test_accepts_safe_keywords(self, keyword):
        validate_keywords([keyword])

    @pytest.mark.parametrize(
        "keyword",
        ["TODO", "FIXME", "IN-PROGRESS", "REVIEW.ME", "A+", "WHY?", "[X]", "K" * 50],
    )
    def test_safe_keyword_round_trips_through_regex(self, keyword):
        validate_keywords([keyword])
        pair = build_task_regex([keyword])
        line = f"{keyword} sample text"
        assert pair.test.match(line)
        m = pair.capture.match(line)
        assert m.group("keyword") == keyword
        assert m.group("text") == "sample text"

    def test_empty_keyword(self):
        with pytest.raises(InvalidKeyword) as exc:
            validate_keywords([""])
        assert exc.value.reason == "empty keyword"

    def test_whitespace_only_keyword(self):
        with pytest.raises(InvalidKeyword) as exc:
            validate_keywords(["   "])
        assert exc.value.reason == "whitespace-only keyword"

    def test_too_long(self):
        with pytest.raises(InvalidKeyword) as exc:
            validate_keywords(["K" * 51])
        assert "dangerous regex pattern" in exc.value.reason

    @pytest.mark.parametrize(
        "keyword",
        [
            "A*B*",        # nested star
            "(a+)+",       # nested plus
            "A?B?",        # nested optional
            "A+++",        # repeated quantifiers
            "X{10}",       # large repetition bound
            "X{2,15}",     # large upper bound
            r"(A)\1",      # backreference
            "(?=TODO)",    # lookahead
            "(?!TODO)",    # negative lookahead
            "(?<=A)B",     # lookbehind
            "(?<!A)B",     # negative lookbehind
        ],
    )
    def test_rejects_dangerous_patterns(self, keyword):
        with pytest.raises(InvalidKeyword) as exc:
            validate_keywords([keyword])
        assert exc.value.keyword == keyword
        assert "dangerous regex pattern" in exc.value.reason

    def test_stops_at_first_bad_keyword(self):
        with pytest.raises(InvalidKeyword) as exc:
            validate_keywords(["OK", "", "(?=X)"])
        assert exc.value.keyword == ""

    def test_invalid_keyword_is_value_error(self):
        with pytest.raises(ValueError, match="Invalid task keyword"):
            validate_keywords(["(?=X)"])


# ---------------------------------------------------------------------------
# escape_keywords
# ---------------------------------------------------------------------------

class TestEscapeKeywords:
    def test_escapes_metacharacters(self):
        pattern = escape_keywords(["A.B", "C+"])
        assert re.fullmatch(pattern, "A.B")
        assert re.fullmatch(pattern, "C+")
        assert not re.fullmatch(pattern, "AXB")
        assert not re.fullmatch(pattern, "CC")

    def test_preserves_order(self):
        assert escape_keywords(["TODO", "DONE"]) == "TODO|DONE"

    def test_empty(self):
        assert escape_keywords([]) == ""


# ---------------------------------------------------------------------------
# KeywordSet
# ---------------------------------------------------------------------------

class TestKeywordSet:
    def test_deduplicates_in_order(self):
        ks = KeywordSet(["TODO", "DONE", "TODO"])
        assert ks.as_tuple() == ("TODO", "DONE")
        assert len(ks) == 2

    def test_add_bumps_version(self):
        ks = KeywordSet(["TODO"])
        ks.add("FIXME")
        assert "FIXME" in ks
        assert ks.version == 1

    def test_add_existing_is_noop(self):
        ks = KeywordSet(["TODO"])
        ks.add("TODO")
        assert ks.version == 0

    def test_remove_bumps_version(self):
        ks = KeywordSet(["TODO", "DONE"])
        ks.remove("DONE")
        assert list(ks) == ["TODO"]
        assert ks.version == 1

    def test_remove_missing_is_noop(self):
        ks = KeywordSet(["TODO"])
        ks.remove("NOPE")
        assert ks.version == 0

    def test_add_validates(self):
        ks = KeywordSet(["TODO"])
        with pytest.raises(InvalidKeyword):
            ks.add("(?=X)")
        assert ks.version == 0

    def test_constructor_validates(self):
        with pytest.raises(InvalidKeyword):
            KeywordSet(["TODO", ""])


# ---------------------------------------------------------------------------
# KeywordManager
# ---------------------------------------------------------------------------

class TestKeywordManager:
    def test_builtin_order(self):
        km = KeywordManager()
        assert km.all_keywords() == [
            "DOING", "NOW", "IN-PROGRESS",
            "TODO", "LATER",
            "WAIT", "WAITING",
            "DONE", "CANCELED", "CANCELLED",
            "ARCHIVED",
        ]

    def test_completed_predicate(self):
        km = KeywordManager()
        assert km.is_completed("DONE")
        assert km.is_completed("CANCELLED")
        assert not km.is_completed("TODO")
        assert not km.is_completed("UNKNOWN")

    def test_group_predicates(self):
        km = KeywordManager()
        assert km.is_active("NOW")
        assert km.is_inactive("LATER")
        assert km.is_waiting("WAIT")
        assert km.is_archived("ARCHIVED")
        assert km.group_of("DOING") == "active"
        assert km.group_of("NOPE") is None

    def test_user_additions(self):
        km = KeywordManager(inactive=["FIXME"], completed=[" SHIPPED "])
        assert "FIXME" in km.all_keywords()
        assert km.is_completed("SHIPPED")
        assert km.custom_keywords() == ["FIXME", "SHIPPED"]
        assert not km.is_builtin("FIXME")
        assert km.is_builtin("TODO")

    def test_blank_additions_are_dropped(self):
        km = KeywordManager(inactive=["", "  "])
        assert km.custom_keywords() == []

    def test_invalid_addition_fails_fast(self):
        with pytest.raises(InvalidKeyword):
            KeywordManager(active=["A*B*"])

    def test_from_settings_merges_legacy_list(self):
        settings = ParserSettings(
            additional_task_keywords=["FIXME"],
            additional_waiting_keywords=["BLOCKED"],
        )
        km = KeywordManager.from_settings(settings)
        assert km.is_inactive("FIXME")
        assert km.is_waiting("BLOCKED")

    def test_duplicate_of_builtin_keeps_first_group(self):
        km = KeywordManager(completed=["TODO"])
        assert km.all_keywords().count("TODO") == 1

    def test_unknown_group(self):
        with pytest.raises(KeyError):
            KeywordManager().keywords_for_group("someday")

    def test_add_to_group(self):
        km = KeywordManager(inactive=["FIXME"])
        km.add("SHIPPED", "completed")
        assert km.is_completed("SHIPPED")
        assert km.group_of("SHIPPED") == "completed"
        assert km.custom_keywords() == ["FIXME", "SHIPPED"]
        assert "SHIPPED" in km.all_keywords()

    def test_add_defaults_to_inactive(self):
        km = KeywordManager()
        km.add("REVIEW")
        assert km.is_inactive("REVIEW")

    def test_add_twice_keeps_one(self):
        km = KeywordManager()
        km.add("REVIEW")
        km.add("REVIEW")
        assert km.custom_keywords() == ["REVIEW"]

    def test_remove(self):
        km = KeywordManager(completed=["SHIPPED"])
        km.remove("SHIPPED")
        assert not km.is_completed("SHIPPED")
        assert km.group_of("SHIPPED") is None
        assert km.custom_keywords() == []

    def test_add_rejects_bad_input(self):
        km = KeywordManager()
        with pytest.raises(KeyError):
            km.add("REVIEW", "someday")
        with pytest.raises(InvalidKeyword):
            km.add("A*B*")
        assert km.custom_keywords() == []
