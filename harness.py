"""
Interactive harness for testing the task parser without MCP integration.

Usage:
    python harness.py <NOTE.md> [--code] [--comments] [--no-callouts]

Parses the note, prints a summary of the extracted tasks, then drops you into
an interactive REPL where you can inspect tasks or parse single lines.
"""

import json
import sys
from pathlib import Path

# Add src/ to path so imports work
sys.path.insert(0, str(Path(__file__).parent / "src"))

from models.settings import ParserSettings
from parsers.task_parser import TaskParser
from tools.task_tools import _task_to_dict


def smoke_test(parser: TaskParser, tasks: list, path: Path) -> None:
    """Quick summary after parsing."""
    print("\n=== Smoke Test ===")
    print(f"  File:           {path}")
    print(f"  Keywords:       {len(parser.keyword_set)}")
    print(f"  Tasks found:    {len(tasks)}")

    open_tasks = [t for t in tasks if not t.completed]
    print(f"\n  Open tasks (first 10): {len(open_tasks)}")
    for t in open_tasks[:10]:
        print(f"    {t.line:5d} [{t.state:8s}] {t.text}")

    done_tasks = [t for t in tasks if t.completed]
    print(f"\n  Completed tasks: {len(done_tasks)}")
    for t in done_tasks[:5]:
        print(f"    {t.line:5d} [{t.state:8s}] {t.text}")

    dated = [t for t in tasks if t.has_dates]
    print(f"\n  Tasks with dates: {len(dated)}")
    for t in dated[:5]:
        print(f"    {t.line:5d} {t.text}  scheduled={t.scheduled_date} deadline={t.deadline_date}")

    print("\n=== Smoke Test Complete ===\n")


def repl(parser: TaskParser, tasks: list, path: Path) -> None:
    """Simple REPL for interactive exploration."""
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":     "Show this help",
        "tasks":    "List tasks. Usage: tasks [state=TODO,DOING] [completed=true]",
        "task":     "Full detail for the task on a line. Usage: task <line>",
        "line":     "Parse a single line. Usage: line <text>",
        "find":     "Search task text. Usage: find <substring>",
        "keywords": "Show configured keywords",
        "quit":     "Exit",
    }

    while True:
        try:
            line = input("todoseq> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        if cmd == "quit" or cmd == "exit":
            break

        elif cmd == "help":
            for k, v in commands.items():
                print(f"  {k:12s} {v}")

        elif cmd == "tasks":
            results = tasks
            for arg in parts[1:]:
                if "=" not in arg:
                    continue
                k, v = arg.split("=", 1)
                if k == "state":
                    wanted = set(v.split(","))
                    results = [t for t in results if t.state in wanted]
                elif k == "completed":
                    flag = v.lower() in ("true", "1", "yes")
                    results = [t for t in results if t.completed == flag]
            print(f"Found {len(results)} tasks:")
            for t in results:
                prio = f"[{t.priority}] " if t.priority else ""
                tags = " ".join(f"#{tag}" for tag in t.tags)
                print(f"  {t.line:5d} [{t.state:8s}] {prio}{t.text}  {tags}")

        elif cmd == "task":
            if len(parts) < 2 or not parts[1].isdigit():
                print("Usage: task <line>")
                continue
            wanted_line = int(parts[1])
            matches = [t for t in tasks if t.line == wanted_line]
            if matches:
                print(json.dumps(_task_to_dict(matches[0]), indent=2))
            else:
                print(f"  No task on line {wanted_line}")

        elif cmd == "line":
            text = line[len(parts[0]):].strip()
            task = parser.parse_line(text, 0, str(path))
            if task:
                print(json.dumps(_task_to_dict(task), indent=2))
            else:
                print("  Not a task")

        elif cmd == "find":
            if len(parts) < 2:
                print("Usage: find <substring>")
                continue
            needle = " ".join(parts[1:]).lower()
            matches = [t for t in tasks if needle in t.text.lower()]
            print(f"Found {len(matches)} matching tasks:")
            for t in matches:
                print(f"  {t.line:5d} [{t.state:8s}] {t.text}")

        elif cmd == "keywords":
            for group in ("active", "inactive", "waiting", "completed", "archived"):
                print(f"  {group:10s} {', '.join(parser.keywords.keywords_for_group(group))}")

        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <NOTE.md> [--code] [--comments] [--no-callouts]")
        sys.exit(1)

    path = Path(sys.argv[1]).resolve()
    if not path.is_file():
        print(f"Error: {path} is not a file")
        sys.exit(1)

    flags = set(sys.argv[2:])
    settings = ParserSettings(
        include_code_blocks="--code" in flags,
        include_comment_blocks="--comments" in flags,
        include_callout_blocks="--no-callouts" not in flags,
    )

    parser = TaskParser.create(settings)
    print(f"Parsing {path}...")
    tasks = parser.parse_file(path.read_text(encoding="utf-8"), str(path), file_ref=path)

    smoke_test(parser, tasks, path)
    repl(parser, tasks, path)


if __name__ == "__main__":
    main()
