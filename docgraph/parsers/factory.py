"""Parser registry keyed by file extension."""

from .base import LanguageParser, ParseError, ParseResult
from .python_parser import PythonParser
from .typescript_parser import TypeScriptParser


class ParserFactory:
    """Map file extensions to language parsers.

    An explicit instance replaces process-wide registration so tests can build
    factories with custom parsers.
    """

    def __init__(self, parsers: list[LanguageParser] | None = None):
        self._by_extension: dict[str, LanguageParser] = {}
        for parser in parsers if parsers is not None else [TypeScriptParser(), PythonParser()]:
            self.register(parser)

    def register(self, parser: LanguageParser) -> None:
        for ext in parser.supported_extensions:
            self._by_extension[ext.lower()] = parser

    def get_parser(self, file_path: str) -> LanguageParser | None:
        lower = file_path.lower()
        dot = lower.rfind(".")
        if dot == -1:
            return None
        return self._by_extension.get(lower[dot:])

    @property
    def supported_extensions(self) -> list[str]:
        return sorted(self._by_extension)

    def parse(self, content: str, file_path: str) -> ParseResult:
        """Parse ``content`` with the parser registered for ``file_path``.

        Never raises: unsupported files and parser crashes come back as
        ParseResult errors.
        """
        parser = self.get_parser(file_path)
        if parser is None:
            return ParseResult(errors=[ParseError(message=f"No parser for {file_path}", code="PARSER_NOT_FOUND")])
        try:
            return parser.parse(content, file_path)
        except Exception as e:  # parsers must not take the batch down
            return ParseResult(errors=[ParseError(message=f"{type(e).__name__}: {e}", code="PARSE_ERROR")])
