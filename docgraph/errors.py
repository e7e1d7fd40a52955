"""Exception hierarchy for docgraph.

Fatal conditions raise one of these; per-document validation problems are
collected as findings instead (see docgraph.findings).
"""


class DocGraphError(Exception):
    """Base class for fatal docgraph errors.

    Attributes:
        message: Human-readable error description
        details: Dict with extra context (file, line, suggestion, ...)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(DocGraphError):
    """Raised when configuration is unusable (e.g. a malformed collection path)."""


class TermConflictError(DocGraphError):
    """Raised when a canonical term name is defined more than once."""

    def __init__(self, term: str, existing_file: str, new_file: str):
        if existing_file == new_file:
            message = f'Term "{term}" defined more than once in {new_file}'
        else:
            message = f'Term "{term}" defined in multiple files: {existing_file}, {new_file}'
        super().__init__(message, {"term": term, "files": [existing_file, new_file]})
        self.term = term
        self.existing_file = existing_file
        self.new_file = new_file


class IndexNotFoundError(DocGraphError):
    """Raised when the persisted reference index has not been built yet."""
