"""Parsers package - source file symbol extraction and markdown term parsing.

Source parsers never raise on malformed input; see base.ParseResult.
"""

from .base import ExportInfo, ImportInfo, LanguageParser, ParseError, ParseResult
from .factory import ParserFactory
from .python_parser import PythonParser
from .term_parser import TermParser, code_block_lines, is_global_scope, term_name
from .typescript_parser import TypeScriptParser

__all__ = [
    "ExportInfo",
    "ImportInfo",
    "LanguageParser",
    "ParseError",
    "ParseResult",
    "ParserFactory",
    "PythonParser",
    "TypeScriptParser",
    "TermParser",
    "code_block_lines",
    "is_global_scope",
    "term_name",
]
