from .keywords import InvalidKeyword, KeywordManager, KeywordSet, validate_keywords
from .languages import LanguageDefinition, LanguageRegistry
from .patterns import RegexPair, build_code_regex
from .task_parser import TaskParser

__all__ = [
    "TaskParser",
    "InvalidKeyword",
    "KeywordManager",
    "KeywordSet",
    "validate_keywords",
    "LanguageDefinition",
    "LanguageRegistry",
    "RegexPair",
    "build_code_regex",
]
