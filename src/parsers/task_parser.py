"""
Task extraction from note text.

Main API:
    TaskParser.create(settings)               → TaskParser
    parser.parse_file(text, path, file_ref)   → List[Task]
    parser.parse_line(line, line_number, path) → Optional[Task]

parse_file() walks the text once, line by line. A fresh BlockTracker decides
for every line whether it can hold a task and which regex family applies; the
matched line is split by extract.py, its trailing SCHEDULED/DEADLINE lines are
read by date_lines.py, and file context and urgency are attached last.

parse_line() is the stateless variant for editors: no block carry-over and no
date lines, but the same regexes and the same normalisation order, so a line
parses identically in both paths.

A TaskParser holds no per-call state and can be shared across threads. Only
the compiled-pattern cache is shared, and it is lock-protected.
"""

import logging
from dataclasses import replace
from typing import Any, List, Optional, Tuple

from models.settings import ParserSettings
from models.task import FileContext, Task
from parsers.block_state import BlockTracker, LineContext, LineFamily
from parsers.date_lines import DateParser, TaskDates, extract_task_dates
from parsers.extract import (
    TaskLineParts,
    apply_checkbox,
    extract_task_line,
    normalize_content,
    quote_nesting_level,
)
from parsers.keywords import KeywordManager, KeywordSet
from parsers.languages import LanguageRegistry
from parsers.patterns import PatternCache, RegexPair, build_code_regex
from utils.daily_notes import DailyNoteResolver, FileContextResolver
from utils.dates import parse_date
from utils.urgency import UrgencyCoefficients, UrgencyScorer

log = logging.getLogger(__name__)

_STANDARD = LineContext(LineFamily.STANDARD)


def split_lines(text: str) -> List[str]:
    """
    Split note text on ``\\n`` only, dropping one trailing ``\\r`` per line.

    Form feeds, ``\\u2028`` and other characters str.splitlines() breaks on
    stay inside their line, so indices match the editor's line numbers.
    """
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


class TaskParser:
    def __init__(
        self,
        settings: ParserSettings,
        keywords: KeywordManager,
        *,
        languages: Optional[LanguageRegistry] = None,
        date_parser: DateParser = parse_date,
        file_context: Optional[FileContextResolver] = None,
        urgency_scorer: Optional[UrgencyScorer] = None,
        urgency_coefficients: Optional[UrgencyCoefficients] = None,
    ) -> None:
        self.settings = settings
        self.keywords = keywords
        self.languages = languages if languages is not None else LanguageRegistry()
        self.keyword_set: KeywordSet = keywords.keyword_set()
        self.patterns = PatternCache(self.keyword_set)
        self._date_parser = date_parser
        self._file_context = file_context
        self._urgency_scorer = urgency_scorer
        self._urgency_coefficients = urgency_coefficients or UrgencyCoefficients()

    @classmethod
    def create(
        cls,
        settings: Optional[ParserSettings] = None,
        *,
        languages: Optional[LanguageRegistry] = None,
        date_parser: DateParser = parse_date,
        file_context: Optional[FileContextResolver] = None,
        urgency_scorer: Optional[UrgencyScorer] = None,
        urgency_coefficients: Optional[UrgencyCoefficients] = None,
    ) -> "TaskParser":
        """
        Build a parser from settings.

        Keywords are validated here; an unsafe keyword raises InvalidKeyword
        and no parser is returned. When no resolver is given, daily notes are
        detected from file names using ``settings.daily_note_format``.

        Raises:
            InvalidKeyword: if any configured keyword is rejected
        """
        settings = settings or ParserSettings()
        keywords = KeywordManager.from_settings(settings)
        if file_context is None:
            file_context = DailyNoteResolver(settings.daily_note_format)
        log.debug("Creating TaskParser with %d keywords", len(keywords.all_keywords()))
        return cls(
            settings,
            keywords,
            languages=languages,
            date_parser=date_parser,
            file_context=file_context,
            urgency_scorer=urgency_scorer,
            urgency_coefficients=urgency_coefficients,
        )

    # ------------------------------------------------------------------
    # Keyword set
    # ------------------------------------------------------------------

    def add_keyword(self, keyword: str, group: str = "inactive") -> None:
        """
        Recognise an extra keyword; cached patterns are rebuilt on next use.

        ``group`` decides completion: a keyword added to "completed" marks
        its tasks done unless a checkbox says otherwise.

        Raises:
            InvalidKeyword: if the keyword is rejected
            KeyError: if ``group`` is not a keyword group
        """
        self.keywords.add(keyword, group)
        self.keyword_set.add(keyword)

    def remove_keyword(self, keyword: str) -> None:
        self.keywords.remove(keyword)
        self.keyword_set.remove(keyword)

    def code_regex(self, language: str) -> Optional[RegexPair]:
        """Code-comment regex pair for a language name or alias, or None if unknown."""
        definition = self.languages.resolve(language)
        if definition is None:
            return None
        return build_code_regex(self.keyword_set.as_tuple(), definition)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _pair_for(self, ctx: LineContext) -> RegexPair:
        if ctx.family is LineFamily.FOOTNOTE:
            return self.patterns.footnote()
        if ctx.family is LineFamily.CODE:
            return self.patterns.code(ctx.language)
        return self.patterns.task()

    def _match(self, line: str, ctx: LineContext) -> Optional[Tuple[TaskLineParts, str, str]]:
        """
        Match one classified line.

        Returns (parts, raw_text, checkbox_source) or None. For a single-line
        ``%%`` comment the body is matched on its own and the parts are shifted
        back so ``indent`` covers everything before the keyword.
        """
        if ctx.family is LineFamily.INLINE_COMMENT:
            start, end = ctx.comment_span
            body = line[start:end]
            matched = self._match(body, _STANDARD)
            if matched is None:
                return None
            parts = matched[0]
            parts = replace(parts, indent=line[:start] + parts.indent, tail=line[end:])
            return parts, body.strip(), body

        pair = self._pair_for(ctx)
        if not pair.test.match(line):
            return None
        return extract_task_line(line, pair.capture, pair.tail), line, line

    def _build_task(
        self,
        matched: Tuple[TaskLineParts, str, str],
        line: str,
        line_number: int,
        path: str,
        ctx: LineContext,
        dates: TaskDates = TaskDates(),
        context: Optional[FileContext] = None,
        file_ref: Any = None,
    ) -> Task:
        parts, raw_text, checkbox_source = matched

        content = normalize_content(parts.text)
        state, completed, list_marker = apply_checkbox(
            checkbox_source,
            parts.keyword,
            self.keywords.is_completed(parts.keyword),
            parts.list_marker,
        )

        task = Task(
            path=path,
            line=line_number,
            raw_text=raw_text,
            state=state,
            text=content.text,
            indent=parts.indent,
            list_marker=list_marker,
            completed=completed,
            priority=content.priority,
            tail=parts.tail,
            scheduled_date=dates.scheduled,
            deadline_date=dates.deadline,
            tags=content.tags,
            embed_reference=content.embed_reference,
            footnote_reference=content.footnote_reference,
            footnote_marker=parts.footnote_marker,
            quote_nesting_level=(
                0 if ctx.family is LineFamily.FOOTNOTE else quote_nesting_level(line)
            ),
            is_daily_note=context.is_daily_note if context else False,
            daily_note_date=context.daily_note_date if context else None,
            file=file_ref,
        )

        if not task.completed and self._urgency_scorer is not None:
            task = replace(
                task,
                urgency=self._urgency_scorer.score(task, self._urgency_coefficients, context),
            )
        return task

    def _resolve_file_context(self, file_ref: Any) -> Optional[FileContext]:
        if file_ref is None or self._file_context is None:
            return None
        try:
            return self._file_context.resolve(file_ref)
        except Exception as e:
            log.warning("File context lookup failed for %r: %s", file_ref, e)
            return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_file(self, text: str, path: str, file_ref: Any = None) -> List[Task]:
        """
        Parse a whole note into tasks, in line order.

        Args:
            text: Full file content
            path: Source path stored on each Task
            file_ref: Optional host file handle, passed to the file context
                resolver and stored on each Task

        Returns:
            One Task per matched line; line numbers are 0-based
        """
        lines = split_lines(text)
        tracker = BlockTracker(self.settings, self.languages)
        context = self._resolve_file_context(file_ref)
        tasks: List[Task] = []

        for line_number, line in enumerate(lines):
            ctx = tracker.advance(line)
            if ctx.family is LineFamily.SKIP:
                continue

            matched = self._match(line, ctx)
            if matched is None:
                continue
            parts = matched[0]

            dates = extract_task_dates(
                lines,
                line_number + 1,
                parts.indent,
                self._date_parser,
                in_quote=ctx.quote_depth > 0,
                lookahead=self.settings.date_lookahead,
                path=path,
            )
            tasks.append(
                self._build_task(matched, line, line_number, path, ctx, dates, context, file_ref)
            )

        log.debug("Parsed %d tasks from %s", len(tasks), path)
        return tasks

    def parse_line(self, line: str, line_number: int, path: str) -> Optional[Task]:
        """
        Parse a single line with no surrounding context.

        Fence, math and comment delimiters never yield a task here, and no
        SCHEDULED/DEADLINE lines are attached.
        """
        ctx = BlockTracker(self.settings, self.languages).advance(line)
        if ctx.family is LineFamily.SKIP:
            return None
        matched = self._match(line, ctx)
        if matched is None:
            return None
        return self._build_task(matched, line, line_number, path, ctx)
