"""``NN--NN`` pair identifiers shared by interface and shared-type documents."""

import re

PAIR_PATTERN = re.compile(r"^[0-9]{2}--[0-9]{2}$")
PAIR_SEPARATOR = "--"
SHARED_SEPARATOR = "_"


def normalize_pair(pair: str) -> str:
    """Return ``pair`` with the lexicographically smaller code first.

    Strings that are not exactly two ``--``-separated codes come back unchanged.

    >>> normalize_pair("02--01")
    '01--02'
    """
    parts = pair.split(PAIR_SEPARATOR)
    if len(parts) != 2:
        return pair
    a, b = parts
    return pair if a <= b else f"{b}{PAIR_SEPARATOR}{a}"


def is_pair(value: str) -> bool:
    return bool(PAIR_PATTERN.match(value))


def split_shared_id(shared_id: str) -> list[str]:
    return shared_id.split(SHARED_SEPARATOR)


def canonical_shared_id(pairs: list[str]) -> str:
    """Canonical shared-type id: normalized pairs, sorted, ``_``-joined."""
    return SHARED_SEPARATOR.join(sorted(normalize_pair(p) for p in pairs))
