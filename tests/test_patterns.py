"""
Tests for parsers/patterns.py and parsers/languages.py.

Covers:
- build_task_regex: prefixes, list markers, checkboxes, quotes, callouts
- build_footnote_regex
- build_code_regex: per-language comment prefixes and trailing comment ends
- PatternCache: reuse and invalidation on keyword-set changes
- LanguageRegistry: names, aliases, registration
"""

import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from parsers.extract import extract_task_line
from parsers.keywords import KeywordManager, KeywordSet
from parsers.languages import (
    LanguageCommentPatterns,
    LanguageDefinition,
    LanguageRegistry,
)
from parsers.patterns import (
    PatternCache,
    build_code_regex,
    build_footnote_regex,
    build_task_regex,
)

KEYWORDS = KeywordManager().all_keywords()


@pytest.fixture
def registry():
    return LanguageRegistry()


def _code(registry, language):
    return build_code_regex(KEYWORDS, registry.resolve(language))


# ---------------------------------------------------------------------------
# Standard task regex
# ---------------------------------------------------------------------------

class TestTaskRegex:
    @pytest.fixture
    def pair(self):
        return build_task_regex(KEYWORDS)

    @pytest.mark.parametrize(
        "line,indent,marker",
        [
            ("TODO task text", "", ""),
            ("  TODO task text", "  ", ""),
            ("- TODO task text", "", "- "),
            ("  * TODO task text", "  ", "* "),
            ("1. [ ] TODO task text", "", "1. [ ] "),
            ("2) TODO task text", "", "2) "),
            ("a) TODO task text", "", "a) "),
            ("(A1) TODO task text", "", "(A1) "),
            ("- [x] TODO task text", "", "- [x] "),
            ("- [-] TODO task text", "", "- [-] "),
            ("> TODO task text", "> ", ""),
            (">TODO task text", ">", ""),
            ("> > - TODO task text", "> > ", "- "),
            (">[!info] TODO task text", ">[!info] ", ""),
        ],
    )
    def test_captures_prefix_parts(self, pair, line, indent, marker):
        assert pair.test.match(line)
        m = pair.capture.match(line)
        assert m.group("indent") == indent
        assert (m.group("marker") or "") == marker
        assert m.group("keyword") == "TODO"
        assert m.group("text") == "task text"

    @pytest.mark.parametrize(
        "line",
        [
            "# TODO heading",
            "A1) TODO invalid",
            "1/ TODO invalid",
            "- [] TODO invalid",
            "- [  ] TODO invalid",
            "TODOs are not tasks",
            "TODO",
            "some text TODO later",
        ],
    )
    def test_rejects_non_tasks(self, pair, line):
        assert not pair.test.match(line)

    def test_trailing_whitespace_trimmed(self, pair):
        parts = extract_task_line("  > TODO task text   ", pair.capture)
        assert parts.text == "task text"

    def test_padded_line_matches_in_linear_time(self, pair):
        line = "- TODO a" + " " * 50_000 + "b   "
        start = time.perf_counter()
        assert pair.test.match(line)
        parts = extract_task_line(line, pair.capture)
        assert time.perf_counter() - start < 1.0
        assert parts.text.startswith("a ")
        assert parts.text.endswith(" b")

    def test_padded_non_task_rejected_quickly(self, pair):
        line = " " * 50_000 + "- " + " " * 50_000 + "x"
        start = time.perf_counter()
        assert not pair.test.match(line)
        assert time.perf_counter() - start < 1.0

    def test_empty_keyword_list_never_matches(self):
        pair = build_task_regex([])
        assert not pair.test.match("TODO task")


class TestFootnoteRegex:
    def test_captures_footnote_marker(self):
        pair = build_footnote_regex(KEYWORDS)
        line = "[^3]: DONE completed task"
        assert pair.test.match(line)
        m = pair.capture.match(line)
        assert m.group("footnote") == "[^3]: "
        assert m.group("keyword") == "DONE"
        assert m.group("text") == "completed task"

    def test_plain_line_is_not_footnote(self):
        pair = build_footnote_regex(KEYWORDS)
        assert not pair.test.match("TODO task")


# ---------------------------------------------------------------------------
# Code-comment regex
# ---------------------------------------------------------------------------

class TestCodeRegex:
    @pytest.mark.parametrize(
        "language,line,indent,comment,text",
        [
            ("javascript", "// TODO single line", "", "// ", "single line"),
            ("js", "        // TODO indented", "        ", "// ", "indented"),
            ("js", "function f() {  // TODO inline", "", "function f() {  // ", "inline"),
            ("javascript", "    /* TODO block start", "    ", "/* ", "block start"),
            ("javascript", "    * TODO block middle", "    ", "* ", "block middle"),
            ("javascript", "    /** TODO jsdoc", "    ", "/** ", "jsdoc"),
            ("javascript", "    //    TODO spaced", "    ", "//    ", "spaced"),
            ("python", "# TODO hash comment", "", "# ", "hash comment"),
            ("py", "def test():  # TODO trailing", "", "def test():  # ", "trailing"),
            ("sql", "        -- TODO dashes", "        ", "-- ", "dashes"),
            ("sql", "SELECT 1  -- TODO inline sql", "", "SELECT 1  -- ", "inline sql"),
            ("sql", "    # TODO mysql style", "    ", "# ", "mysql style"),
            ("ini", "; TODO semicolon", "", "; ", "semicolon"),
            ("rust", "/// TODO doc comment", "", "/// ", "doc comment"),
            ("shell", "echo hi # TODO shell", "", "echo hi # ", "shell"),
        ],
    )
    def test_comment_prefixes(self, registry, language, line, indent, comment, text):
        pair = _code(registry, language)
        assert pair.test.match(line)
        m = pair.capture.match(line)
        assert m.group("indent") == indent
        assert m.group("comment") == comment
        assert m.group("keyword") == "TODO"
        assert m.group("text") == text

    def test_trailing_block_end_is_tail(self, registry):
        pair = _code(registry, "javascript")
        parts = extract_task_line("    /* TODO one line block */  ", pair.capture, pair.tail)
        assert parts.text == "one line block"
        assert parts.tail == " */"

    def test_block_end_alone_stays_text(self, registry):
        pair = _code(registry, "javascript")
        parts = extract_task_line("/* TODO */", pair.capture, pair.tail)
        assert parts.text == "*/"
        assert parts.tail == ""

    def test_python_docstring_end(self, registry):
        pair = _code(registry, "python")
        parts = extract_task_line('    """ TODO in docstring """', pair.capture, pair.tail)
        assert parts.text == "in docstring"
        assert parts.tail == ' """'

    def test_language_without_block_end_has_empty_tail(self, registry):
        pair = _code(registry, "yaml")
        assert pair.tail is None
        parts = extract_task_line("key: value  # TODO yaml */", pair.capture, pair.tail)
        assert parts.text == "yaml */"
        assert parts.tail == ""

    def test_keyword_inside_word_is_not_matched(self, registry):
        pair = _code(registry, "python")
        assert not pair.test.match("x = NOTODO thing")

    def test_accepts_bare_patterns(self):
        pair = build_code_regex(["TODO"], LanguageCommentPatterns(single_line=r"%"))
        m = pair.capture.match("% TODO latex")
        assert m.group("comment") == "% "


# ---------------------------------------------------------------------------
# PatternCache
# ---------------------------------------------------------------------------

class TestPatternCache:
    def test_reuses_compiled_patterns(self, registry):
        cache = PatternCache(KeywordSet(["TODO"]))
        assert cache.task() is cache.task()
        python = registry.resolve("python")
        assert cache.code(python) is cache.code(python)
        assert len(cache) == 2

    def test_rebuilds_after_keyword_change(self):
        keywords = KeywordSet(["TODO"])
        cache = PatternCache(keywords)
        before = cache.task()
        assert not before.test.match("FIXME thing")

        keywords.add("FIXME")
        after = cache.task()
        assert after is not before
        assert after.test.match("FIXME thing")

    def test_rebuilds_after_keyword_removal(self):
        keywords = KeywordSet(["TODO", "FIXME"])
        cache = PatternCache(keywords)
        assert cache.footnote().test.match("[^1]: FIXME x")
        keywords.remove("FIXME")
        assert not cache.footnote().test.match("[^1]: FIXME x")

    def test_clear(self):
        cache = PatternCache(KeywordSet(["TODO"]))
        cache.task()
        cache.clear()
        assert len(cache) == 0


# ---------------------------------------------------------------------------
# LanguageRegistry
# ---------------------------------------------------------------------------

class TestLanguageRegistry:
    def test_resolves_names_and_aliases(self, registry):
        assert registry.resolve("python").name == "python"
        assert registry.resolve("PY").name == "python"
        assert registry.resolve("ts").name == "typescript"
        assert registry.resolve("c++").name == "cpp"
        assert registry.resolve("bash").name == "shell"

    def test_unknown_language(self, registry):
        assert registry.resolve("bogus") is None
        assert registry.resolve("") is None

    def test_default_language_names(self, registry):
        names = registry.names()
        assert len(names) == 20
        assert "rust" in names and "yaml" in names

    def test_register_bumps_version(self, registry):
        version = registry.version
        registry.register(
            LanguageDefinition("lua", LanguageCommentPatterns(single_line="--"), ("luau",))
        )
        assert registry.version == version + 1
        assert registry.resolve("luau").name == "lua"

    def test_get_ignores_aliases(self, registry):
        assert registry.get("py") is None
        assert registry.get("Python").name == "python"
