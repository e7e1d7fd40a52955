"""Interface link validation over the persisted reference index.

Two checks:
- bidirectional: every used interface has a provider (error otherwise);
  every provided interface has a user (warning otherwise)
- sibling coverage: a feature providing some, but not all, interfaces under
  one parent namespace (``auth/login`` and ``auth/logout`` share ``auth``)
  gets a warning naming the missing siblings
"""

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docgraph.errors import DocGraphError
from docgraph.findings import Finding, error, warning
from docgraph.graph.store import load_project_index
from docgraph.graph.types import Feature, ReferenceIndex


@dataclass
class InterfaceHierarchy:
    namespace: str
    path: list[str]
    level: int
    parent: str
    name: str


def parse_interface_hierarchy(interface_id: str) -> InterfaceHierarchy:
    parts = interface_id.split("/")
    return InterfaceHierarchy(
        namespace=parts[0],
        path=parts,
        level=len(parts) - 1,
        parent="/".join(parts[:-1]),
        name=parts[-1],
    )


def get_siblings(interface_id: str, all_interfaces: list[str]) -> list[str]:
    """Interfaces sharing ``interface_id``'s parent (top-level ids have none)."""
    parent = parse_interface_hierarchy(interface_id).parent
    if not parent:
        return []
    return [i for i in all_interfaces if i != interface_id and parse_interface_hierarchy(i).parent == parent]


def group_by_namespace(interfaces: list[str]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = defaultdict(list)
    for interface_id in interfaces:
        groups[parse_interface_hierarchy(interface_id).namespace].append(interface_id)
    return dict(groups)


@dataclass
class MissingProvider:
    interface_id: str
    used_by: list[str]


@dataclass
class UnusedInterface:
    interface_id: str
    provided_by: list[str]


@dataclass
class BidirectionalLinkResult:
    missing_providers: list[MissingProvider] = field(default_factory=list)
    unused_interfaces: list[UnusedInterface] = field(default_factory=list)


@dataclass
class SiblingCoverage:
    namespace: str
    feature: str
    all_siblings: list[str]
    provided: list[str]
    missing: list[str]


@dataclass
class InterfaceValidationResult:
    bidirectional: BidirectionalLinkResult
    incomplete_coverage: list[SiblingCoverage]
    summary: dict[str, int]

    @property
    def success(self) -> bool:
        return self.summary["error_count"] == 0

    def findings(self) -> list[Finding]:
        """The result flattened into error/warning findings."""
        found = [
            error(
                "missing_provider",
                f"Interface {m.interface_id} is used by {', '.join(m.used_by)} but no feature provides it",
                subject=m.interface_id,
                details={"used_by": m.used_by},
            )
            for m in self.bidirectional.missing_providers
        ]
        found += [
            warning(
                "unused_interface",
                f"Interface {u.interface_id} is provided by {', '.join(u.provided_by)} but never used",
                subject=u.interface_id,
                details={"provided_by": u.provided_by},
            )
            for u in self.bidirectional.unused_interfaces
        ]
        found += [
            warning(
                "incomplete_coverage",
                f"{c.feature} provides {len(c.provided)}/{len(c.all_siblings)} interfaces in "
                f"{c.namespace}/ (missing: {', '.join(c.missing)})",
                subject=c.namespace,
                details={"feature": c.feature, "missing": c.missing},
            )
            for c in self.incomplete_coverage
        ]
        return found

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "bidirectional": {
                "missing_providers": [vars(m) for m in self.bidirectional.missing_providers],
                "unused_interfaces": [vars(u) for u in self.bidirectional.unused_interfaces],
            },
            "incomplete_coverage": [vars(c) for c in self.incomplete_coverage],
            "summary": self.summary,
        }


def check_bidirectional_links(features: dict[str, Feature]) -> BidirectionalLinkResult:
    providers: dict[str, list[str]] = defaultdict(list)
    users: dict[str, list[str]] = defaultdict(list)
    for feature_id, feature in features.items():
        for interface_id in feature.interfaces_provided:
            providers[interface_id].append(feature_id)
        for interface_id in feature.interfaces_used:
            users[interface_id].append(feature_id)

    return BidirectionalLinkResult(
        missing_providers=[
            MissingProvider(interface_id=i, used_by=u) for i, u in sorted(users.items()) if i not in providers
        ],
        unused_interfaces=[
            UnusedInterface(interface_id=i, provided_by=p) for i, p in sorted(providers.items()) if i not in users
        ],
    )


def check_sibling_coverage(features: dict[str, Feature], all_interfaces: list[str]) -> list[SiblingCoverage]:
    results = []
    for feature_id, feature in features.items():
        by_parent: dict[str, list[str]] = defaultdict(list)
        for interface_id in dict.fromkeys(feature.interfaces_provided):
            parent = parse_interface_hierarchy(interface_id).parent
            if parent:
                by_parent[parent].append(interface_id)

        for parent, provided in by_parent.items():
            siblings = [i for i in all_interfaces if parse_interface_hierarchy(i).parent == parent]
            missing = [i for i in siblings if i not in provided]
            if missing:
                results.append(
                    SiblingCoverage(
                        namespace=parent,
                        feature=feature_id,
                        all_siblings=siblings,
                        provided=provided,
                        missing=missing,
                    )
                )
    return results


def _in_namespace(interface_id: str, namespace: str) -> bool:
    return interface_id == namespace or interface_id.startswith(namespace + "/")


def validate_interface_links(
    index: ReferenceIndex,
    feature: str | None = None,
    namespace: str | None = None,
) -> InterfaceValidationResult:
    """Run both checks on ``index``, optionally restricted to one feature/namespace.

    Sibling candidates are every interface id the (filtered) graph knows:
    documented interfaces plus every id a feature provides or uses.

    Raises:
        DocGraphError: ``feature`` is not in the index
    """
    features = index.features
    interface_ids = list(index.interfaces)

    if feature:
        if feature not in features:
            raise DocGraphError(f'Feature "{feature}" not found in index', {"feature": feature})
        features = {feature: features[feature]}

    if namespace:
        interface_ids = [i for i in interface_ids if _in_namespace(i, namespace)]
        features = {
            fid: Feature(
                id=f.id,
                file=f.file,
                interfaces_provided=[i for i in f.interfaces_provided if _in_namespace(i, namespace)],
                interfaces_used=[i for i in f.interfaces_used if _in_namespace(i, namespace)],
            )
            for fid, f in features.items()
        }

    known = list(dict.fromkeys(interface_ids))
    for f in index.features.values():
        for interface_id in [*f.interfaces_provided, *f.interfaces_used]:
            if interface_id not in known and (not namespace or _in_namespace(interface_id, namespace)):
                known.append(interface_id)

    bidirectional = check_bidirectional_links(features)
    coverage = check_sibling_coverage(features, sorted(known))

    return InterfaceValidationResult(
        bidirectional=bidirectional,
        incomplete_coverage=coverage,
        summary={
            "total_interfaces": len(interface_ids),
            "error_count": len(bidirectional.missing_providers),
            "warning_count": len(bidirectional.unused_interfaces) + len(coverage),
        },
    )


def validate_project_interface_links(
    project_root: str | Path = ".",
    feature: str | None = None,
    namespace: str | None = None,
    cfg: dict[str, Any] | None = None,
) -> InterfaceValidationResult:
    """Load the project's snapshot and validate it.

    Raises:
        IndexNotFoundError: the snapshot has not been built
        DocGraphError: ``feature`` is not in the index
    """
    index = load_project_index(project_root, cfg)
    return validate_interface_links(index, feature=feature, namespace=namespace)
