"""Similarity scoring for near-duplicate term detection.

Scorers take two term definitions and return a ratio in [0.0, 1.0]. The registry
flags a pair as a likely duplicate when the score is strictly greater than
the threshold.
"""

import re
from collections.abc import Callable

from .types import TermDefinition

DUPLICATE_THRESHOLD = 0.8

SimilarityScorer = Callable[[TermDefinition, TermDefinition], float]

_TOKEN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> set[str]:
    """Lower-cased alphanumeric tokens; splits camelCase and snake_case."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", text)
    return set(_TOKEN.findall(spaced.lower()))


def token_overlap(a: str, b: str) -> float:
    """Jaccard ratio of the token sets of ``a`` and ``b``."""
    left, right = tokenize(a), tokenize(b)
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


def name_similarity(a: TermDefinition, b: TermDefinition) -> float:
    """Token overlap of the term names, aliases included.

    Returns the best ratio over every (name-or-alias, name-or-alias) pairing,
    so ``Reference Index`` and ``Index Reference`` score 1.0 while
    ``Reference Index`` and ``Reference Graph`` score 1/3.
    """
    left = [a.term, *a.aliases]
    right = [b.term, *b.aliases]
    return max(token_overlap(x, y) for x in left for y in right)


def definition_similarity(a: TermDefinition, b: TermDefinition) -> float:
    """Default scorer: token overlap of the definition texts.

    Falls back to name_similarity only when neither term has a definition
    paragraph; one-sided definitions score 0.0.
    """
    if not a.definition.strip() and not b.definition.strip():
        return name_similarity(a, b)
    return token_overlap(a.definition, b.definition)
