from .task import FileContext, PRIORITY_LETTERS, Priority, Task
from .settings import LanguageCommentSupport, ParserSettings, settings_from_env

__all__ = [
    "Task",
    "FileContext",
    "Priority",
    "PRIORITY_LETTERS",
    "ParserSettings",
    "LanguageCommentSupport",
    "settings_from_env",
]
