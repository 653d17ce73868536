"""
Comment syntax for the languages recognised in fenced code blocks.

Patterns are regex *source fragments* (no anchors, no groups) that the pattern
composer splices into the per-language task regex. A language may leave any
fragment unset; unset fragments simply drop out of the alternation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageCommentPatterns:
    single_line: Optional[str] = None
    multi_line_start: Optional[str] = None
    multiline_mid: Optional[str] = None
    multi_line_end: Optional[str] = None


@dataclass(frozen=True)
class LanguageDefinition:
    name: str
    patterns: LanguageCommentPatterns
    aliases: Tuple[str, ...] = ()


# Base comment styles
C_STYLE = LanguageCommentPatterns(
    single_line=r"//",
    multi_line_start=r"/\*{1,2}",
    multiline_mid=r"\*",
    multi_line_end=r"\*/",
)
HASH_STYLE = LanguageCommentPatterns(single_line=r"#")

DEFAULT_LANGUAGES: Tuple[LanguageDefinition, ...] = (
    LanguageDefinition("c", C_STYLE),
    LanguageDefinition("cpp", C_STYLE, ("c++",)),
    LanguageDefinition("csharp", replace(C_STYLE, single_line=r"///?"), ("cs",)),
    LanguageDefinition("dockerfile", HASH_STYLE),
    LanguageDefinition("go", C_STYLE, ("golang",)),
    LanguageDefinition("ini", LanguageCommentPatterns(single_line=r"[;#]")),
    LanguageDefinition("java", C_STYLE),
    LanguageDefinition("javascript", C_STYLE, ("js",)),
    LanguageDefinition("kotlin", C_STYLE, ("kt",)),
    LanguageDefinition(
        "powershell",
        LanguageCommentPatterns(
            single_line=r"#", multi_line_start=r"<#", multi_line_end=r"#>"
        ),
        ("ps1",),
    ),
    LanguageDefinition(
        "python",
        LanguageCommentPatterns(
            single_line=r"#",
            multi_line_start=r"'''|\"\"\"",
            multi_line_end=r"'''|\"\"\"",
        ),
        ("py",),
    ),
    LanguageDefinition("r", HASH_STYLE),
    LanguageDefinition(
        "ruby",
        LanguageCommentPatterns(
            single_line=r"#", multi_line_start=r"=begin", multi_line_end=r"=end"
        ),
        ("rb",),
    ),
    LanguageDefinition(
        "rust",
        LanguageCommentPatterns(
            single_line=r"//[/!]?",
            multi_line_start=r"/\*\*?",
            multiline_mid=r"\*",
            multi_line_end=r"\*/",
        ),
        ("rs",),
    ),
    LanguageDefinition("shell", HASH_STYLE, ("sh", "bash", "zsh")),
    LanguageDefinition(
        "sql",
        LanguageCommentPatterns(
            single_line=r"--|#",
            multi_line_start=r"/\*+",
            multiline_mid=r"\*",
            multi_line_end=r"\*/",
        ),
    ),
    LanguageDefinition("swift", replace(C_STYLE, single_line=r"///?")),
    LanguageDefinition("toml", HASH_STYLE),
    LanguageDefinition("typescript", C_STYLE, ("ts",)),
    LanguageDefinition("yaml", HASH_STYLE, ("yml",)),
)


class LanguageRegistry:
    """
    Name-or-alias lookup of language comment patterns.

    Lookups are case-insensitive. ``version`` increases on every register()
    so cached per-language regexes can tell when a definition was replaced.
    """

    def __init__(self, languages: Optional[Iterable[LanguageDefinition]] = None) -> None:
        self._lock = threading.Lock()
        self._by_name: Dict[str, LanguageDefinition] = {}
        self._by_alias: Dict[str, LanguageDefinition] = {}
        self.version = 0
        for language in DEFAULT_LANGUAGES if languages is None else languages:
            self.register(language)

    def register(self, language: LanguageDefinition) -> None:
        with self._lock:
            self._by_name[language.name.lower()] = language
            for alias in language.aliases:
                self._by_alias[alias.lower()] = language
            self.version += 1
        log.debug("Registered language %s (aliases: %s)", language.name, language.aliases)

    def get(self, name: str) -> Optional[LanguageDefinition]:
        if not name:
            return None
        return self._by_name.get(name.lower())

    def resolve(self, identifier: str) -> Optional[LanguageDefinition]:
        """Resolve a fence info token (name or alias) to a language, or None."""
        if not identifier:
            return None
        key = identifier.strip().lower()
        return self._by_name.get(key) or self._by_alias.get(key)

    def names(self) -> List[str]:
        return sorted(self._by_name)
