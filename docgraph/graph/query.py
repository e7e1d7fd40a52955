"""Read-only queries over a loaded reference index."""

from collections import Counter
from typing import Any

from docgraph.errors import DocGraphError
from docgraph.utils.helpers import normalize_path

from .types import ReferenceIndex


def feature_details(index: ReferenceIndex, feature_id: str) -> dict[str, Any]:
    """A feature's edges, with interface endpoints resolved."""
    feature = index.features.get(feature_id)
    if feature is None:
        raise DocGraphError(f'Feature "{feature_id}" not found', {"feature": feature_id})

    def describe(interface_ids: list[str]) -> list[dict[str, str]]:
        described = []
        for interface_id in interface_ids:
            interface = index.interfaces.get(interface_id)
            described.append(
                {
                    "id": interface_id,
                    "from": interface.from_feature if interface else "",
                    "to": interface.to_feature if interface else "",
                    "documented": interface is not None,
                }
            )
        return described

    data = {"id": feature.id, **feature.to_dict()}
    data["interfaces"] = {
        "provides": describe(feature.interfaces_provided),
        "uses": describe(feature.interfaces_used),
    }
    return data


def code_references(index: ReferenceIndex, path: str) -> dict[str, Any]:
    """Reverse lookup: which features document ``path`` and what it imports."""
    code_path = normalize_path(path)
    code = index.code.get(code_path)
    if code is None:
        raise DocGraphError(f'Code file "{code_path}" not found in index', {"path": code_path})
    return {
        "path": code_path,
        **code.to_dict(),
        "documented_in": [
            {"feature": f, "file": index.features[f].file if f in index.features else ""}
            for f in code.documented_in
        ],
    }


def term_usage(index: ReferenceIndex, term: str, limit: int | None = None) -> dict[str, Any]:
    """A term's definition and references (at most ``limit`` of them)."""
    usage = index.terms.get(term)
    if usage is None:
        raise DocGraphError(f'Term "[[{term}]]" not found', {"term": term})
    references = usage.references if limit is None else usage.references[:limit]
    return {
        "term": term,
        **usage.to_dict(),
        "references": references,
        "hidden_references": usage.usage_count - len(references),
    }


def top_terms(index: ReferenceIndex, count: int = 5) -> list[tuple[str, int]]:
    """Most referenced terms, ties broken by name."""
    ranked = sorted(index.terms.values(), key=lambda t: (-t.usage_count, t.term))
    return [(t.term, t.usage_count) for t in ranked[:count]]


def overview(index: ReferenceIndex) -> dict[str, Any]:
    kinds = Counter(c.kind for c in index.code.values())
    global_terms = sum(1 for t in index.terms.values() if t.scope == "global")
    return {
        "version": index.version,
        "generated": index.generated,
        "features": {
            "total": len(index.features),
            "with_tests": sum(1 for f in index.features.values() if f.tested_by),
        },
        "code": {
            "total": len(index.code),
            "source": kinds.get("source", 0),
            "test": kinds.get("test", 0),
            "config": kinds.get("config", 0),
        },
        "interfaces": {
            "total": len(index.interfaces),
            "shared": sum(1 for i in index.interfaces.values() if i.kind == "shared"),
        },
        "terms": {
            "total": len(index.terms),
            "global": global_terms,
            "document": len(index.terms) - global_terms,
            "top": [{"term": t, "usage_count": n} for t, n in top_terms(index)],
        },
    }
