"""Term definition / reference records."""

from dataclasses import dataclass, field
from typing import Literal

TermScope = Literal["global", "document"]
SCOPES: tuple[str, ...] = ("global", "document")


@dataclass
class TermDefinition:
    """A glossary-style term parsed from a ``## [[Term]]`` heading."""

    term: str
    file: str
    line: int
    scope: str = "document"
    heading: str = ""
    type: str | None = None
    aliases: list[str] = field(default_factory=list)
    related: list[str] = field(default_factory=list)
    parent: str | None = None
    not_to_confuse: str | None = None
    definition: str = ""


@dataclass
class TermReference:
    """A ``[[Term]]`` usage inside a document."""

    term: str
    file: str
    line: int
    context: str = ""
