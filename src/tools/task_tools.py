"""
Task parsing tool handlers.

Core logic lives in handle_* functions (return dicts).
MCP wrappers in register_task_tools() serialize to JSON strings.
"""

import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from parsers.keywords import InvalidKeyword, validate_keywords

log = logging.getLogger(__name__)


def _date_to_str(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _task_to_dict(task) -> dict:
    """Serialize a Task to a JSON-serializable dict."""
    return {
        "ref": task.ref,
        "path": task.path,
        "line": task.line,
        "raw_text": task.raw_text,
        "state": task.state,
        "text": task.text,
        "completed": task.completed,
        "priority": task.priority,
        "indent": task.indent,
        "list_marker": task.list_marker,
        "tail": task.tail,
        "tags": list(task.tags),
        "scheduled_date": _date_to_str(task.scheduled_date),
        "deadline_date": _date_to_str(task.deadline_date),
        "embed_reference": task.embed_reference,
        "footnote_reference": task.footnote_reference,
        "footnote_marker": task.footnote_marker,
        "quote_nesting_level": task.quote_nesting_level,
        "urgency": task.urgency,
        "is_daily_note": task.is_daily_note,
        "daily_note_date": _date_to_str(task.daily_note_date),
    }


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_parse_text(
    parser,
    *,
    text: str,
    path: str = "",
    state: Optional[str] = None,
    completed: Optional[bool] = None,
) -> list[dict]:
    """Parse note text; optionally keep only given states or completion."""
    tasks = parser.parse_file(text, path, file_ref=path or None)
    if state:
        wanted = set(_split_csv(state))
        tasks = [t for t in tasks if t.state in wanted]
    if completed is not None:
        tasks = [t for t in tasks if t.completed == completed]
    return [_task_to_dict(t) for t in tasks]


def handle_parse_line(parser, *, line: str, line_number: int = 0, path: str = "") -> dict:
    task = parser.parse_line(line, line_number, path)
    if task is None:
        return {"error": "Line is not a task"}
    return _task_to_dict(task)


def handle_keywords_validate(*, keywords: List[str]) -> dict:
    try:
        validate_keywords(keywords)
    except InvalidKeyword as e:
        return {"valid": False, "keyword": e.keyword, "error": e.reason}
    return {"valid": True, "keywords": list(keywords)}


def handle_code_regex(parser, *, language: str) -> dict:
    pair = parser.code_regex(language)
    if pair is None:
        return {"error": f"Unknown language '{language}'"}
    return {
        "language": parser.languages.resolve(language).name,
        "test": pair.test.pattern,
        "capture": pair.capture.pattern,
    }


def handle_parser_status(parser) -> dict:
    settings = parser.settings
    return {
        "keywords": list(parser.keyword_set),
        "keyword_set_version": parser.keyword_set.version,
        "completed_keywords": parser.keywords.keywords_for_group("completed"),
        "custom_keywords": parser.keywords.custom_keywords(),
        "languages": parser.languages.names(),
        "cached_patterns": len(parser.patterns),
        "include_callout_blocks": settings.include_callout_blocks,
        "include_code_blocks": settings.include_code_blocks,
        "include_comment_blocks": settings.include_comment_blocks,
        "language_comment_support": settings.language_comment_support.enabled,
        "date_lookahead": settings.date_lookahead,
    }


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def register_task_tools(mcp: FastMCP, parser) -> None:
    """Register all task-parsing MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def task_parse_text(
        text: str,
        path: str = "",
        state: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> str:
        """
        Extract tasks from markdown note text.

        Recognises keyword task lines (TODO, DOING, DONE, ...) with optional
        list markers, checkboxes, quote/callout prefixes and footnote syntax,
        plus SCHEDULED:/DEADLINE: lines beneath a task.

        Args:
            text: Full note content
            path: Note path, stored on each task and used for daily-note detection
            state: Comma-separated keywords to keep (e.g. "TODO,DOING")
            completed: True = only completed tasks, False = only open, omit = all

        Returns:
            JSON array of task objects in line order
        """
        try:
            return json.dumps(
                handle_parse_text(
                    parser, text=text, path=path, state=state, completed=completed
                ),
                indent=2,
            )
        except Exception as e:
            log.exception("task_parse_text failed")
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_parse_line(line: str, line_number: int = 0, path: str = "") -> str:
        """
        Parse a single line without surrounding context.

        Args:
            line: The line to parse
            line_number: 0-based line number to store on the task
            path: Note path to store on the task

        Returns:
            JSON task object, or error if the line is not a task
        """
        return json.dumps(
            handle_parse_line(parser, line=line, line_number=line_number, path=path),
            indent=2,
        )

    @mcp.tool()
    def keywords_validate(keywords: str) -> str:
        """
        Check custom task keywords before configuring them.

        Args:
            keywords: Comma-separated keywords (e.g. "FIXME,REVIEW")

        Returns:
            JSON object with "valid" and, on failure, the rejected keyword and reason
        """
        return json.dumps(
            handle_keywords_validate(keywords=_split_csv(keywords)), indent=2
        )

    @mcp.tool()
    def code_regex(language: str) -> str:
        """
        Show the regex used for tasks in code-block comments of a language.

        Args:
            language: Language name or alias (e.g. "python", "js")

        Returns:
            JSON object with "test" and "capture" patterns, or error
        """
        return json.dumps(handle_code_regex(parser, language=language), indent=2)

    @mcp.tool()
    def parser_status() -> str:
        """
        Get parser configuration: keywords, languages and block settings.

        Returns:
            JSON object with parser statistics
        """
        return json.dumps(handle_parser_status(parser), indent=2)
