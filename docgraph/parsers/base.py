"""Shared data structures for the source parsers.

Every parser returns a ParseResult and never raises on malformed input:
problems are reported as ParseError entries so callers can keep going.
"""

from dataclasses import dataclass, field


@dataclass
class ImportInfo:
    """An import statement: the module/package being imported."""

    source: str
    names: list[str] = field(default_factory=list)
    line: int = 0
    is_type_only: bool = False


@dataclass
class ExportInfo:
    """An exported (module-level, public) symbol."""

    name: str
    kind: str  # function | class | interface | type | const | variable | enum
    line: int = 0
    is_default: bool = False


@dataclass
class ParseError:
    """A recoverable parse problem."""

    message: str
    code: str = "PARSE_ERROR"
    line: int | None = None


@dataclass
class ParseResult:
    imports: list[ImportInfo] = field(default_factory=list)
    exports: list[ExportInfo] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class LanguageParser:
    """Base class for language parsers registered in the parser factory."""

    language_name: str = ""
    supported_extensions: tuple[str, ...] = ()

    def can_parse(self, file_path: str) -> bool:
        return any(file_path.lower().endswith(ext) for ext in self.supported_extensions)

    def parse(self, content: str, file_path: str) -> ParseResult:
        raise NotImplementedError
