"""Term package - glossary definitions, references and their registry."""

from .glossary import render_glossary
from .registry import TermRegistry, TermValidationResult
from .similarity import DUPLICATE_THRESHOLD, SimilarityScorer, definition_similarity, name_similarity, token_overlap
from .types import SCOPES, TermDefinition, TermReference

__all__ = [
    "render_glossary",
    "TermRegistry",
    "TermValidationResult",
    "DUPLICATE_THRESHOLD",
    "SimilarityScorer",
    "definition_similarity",
    "name_similarity",
    "token_overlap",
    "SCOPES",
    "TermDefinition",
    "TermReference",
]
