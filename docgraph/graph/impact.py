"""Cross-feature readiness and impact, from task checkboxes in feature documents.

A feature's progress is the share of checked ``- [x]`` boxes in its document.
Interfaces carry the provider (``from``) and consumer (``to``) feature, so:

- dependency readiness asks, per consumer, whether every provider it relies
  on is far enough along to build against
- interface impact asks, per provider, which consumers are held back by it
"""

import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from docgraph import frontmatter
from docgraph.errors import DocGraphError
from docgraph.utils.helpers import read_text
from docgraph.utils.logging import logger

from .types import ReferenceIndex

CHECKBOX_RE = re.compile(r"^\s*[-*+]?\s*\[([ xX])\]", re.MULTILINE)

READY, PARTIAL, BLOCKED = "ready", "partial", "blocked"


@dataclass
class FeatureProgress:
    feature: str
    status: str = "unknown"
    progress: int = 0
    checked: int = 0
    total: int = 0


def count_checkboxes(text: str) -> tuple[int, int]:
    """(checked, total) task checkboxes in a markdown document."""
    marks = CHECKBOX_RE.findall(text)
    return sum(1 for m in marks if m in "xX"), len(marks)


def percent(checked: int, total: int) -> int:
    return int(checked / total * 100 + 0.5) if total else 0


def load_feature_progress(project_root: str | Path, index: ReferenceIndex) -> dict[str, FeatureProgress]:
    """Status and checkbox progress for every indexed feature.

    Unreadable documents count as ``unknown`` at 0%.
    """
    root = Path(project_root)
    progress = {}
    for feature_id, feature in index.features.items():
        entry = FeatureProgress(feature=feature_id)
        try:
            text = read_text(root / feature.file)
        except OSError as e:
            logger.warning(f"Cannot read {feature.file}: {e}")
            progress[feature_id] = entry
            continue
        try:
            entry.status = frontmatter.extract(text).get_str("status") or "unknown"
        except frontmatter.FrontmatterError as e:
            logger.debug(f"{feature.file}: {e.message}")
        entry.checked, entry.total = count_checkboxes(text)
        entry.progress = percent(entry.checked, entry.total)
        progress[feature_id] = entry
    return progress


def _provider_ready(provider: FeatureProgress, ready_at: int) -> bool:
    return provider.progress >= ready_at or provider.status == "implemented"


@dataclass
class Dependency:
    interface: str
    provider: str
    progress: int
    status: str
    ready: bool


@dataclass
class FeatureReadiness:
    feature: str
    readiness: str
    progress: int
    dependencies: list[Dependency] = field(default_factory=list)

    @property
    def blockers(self) -> list[str]:
        return [d.provider for d in self.dependencies if not d.ready]


@dataclass
class ReadinessResult:
    features: list[FeatureReadiness] = field(default_factory=list)

    @property
    def blocked(self) -> list[FeatureReadiness]:
        return [f for f in self.features if f.readiness == BLOCKED]

    @property
    def success(self) -> bool:
        return not self.blocked

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "blocked_count": len(self.blocked),
            "features": [{**asdict(f), "blockers": f.blockers} for f in self.features],
        }


def dependency_readiness(
    index: ReferenceIndex,
    progress: dict[str, FeatureProgress],
    feature: str | None = None,
    ready_at: int = 80,
) -> ReadinessResult:
    """Readiness of every feature that consumes at least one interface.

    A provider is ready at ``ready_at`` percent or once its status is
    ``implemented``. A consumer is ``ready`` when all its providers are,
    ``blocked`` when none are and ``partial`` otherwise.

    Raises:
        DocGraphError: ``feature`` is not in the index
    """
    if feature is not None and feature not in index.features:
        raise DocGraphError(f"Unknown feature: {feature}")

    result = ReadinessResult()
    for feature_id in sorted(index.features):
        if feature is not None and feature_id != feature:
            continue
        dependencies = []
        for interface_id in index.features[feature_id].interfaces_used:
            interface = index.interfaces.get(interface_id)
            if interface is None or interface.from_feature not in progress:
                continue
            provider = progress[interface.from_feature]
            dependencies.append(
                Dependency(
                    interface=interface_id,
                    provider=provider.feature,
                    progress=provider.progress,
                    status=provider.status,
                    ready=_provider_ready(provider, ready_at),
                )
            )
        if not dependencies:
            continue
        ready = sum(1 for d in dependencies if d.ready)
        readiness = READY if ready == len(dependencies) else BLOCKED if ready == 0 else PARTIAL
        own = progress.get(feature_id)
        result.features.append(
            FeatureReadiness(
                feature=feature_id,
                readiness=readiness,
                progress=own.progress if own else 0,
                dependencies=dependencies,
            )
        )
    return result


@dataclass
class Consumer:
    feature: str
    progress: int
    status: str
    blocked: bool
    at_risk: bool


@dataclass
class InterfaceImpact:
    interface: str
    provider: str
    provider_progress: int
    provider_status: str
    consumers: list[Consumer] = field(default_factory=list)

    @property
    def blocked_count(self) -> int:
        return sum(1 for c in self.consumers if c.blocked)

    @property
    def at_risk_count(self) -> int:
        return sum(1 for c in self.consumers if c.at_risk)


@dataclass
class ImpactResult:
    interfaces: list[InterfaceImpact] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "interfaces": [
                {**asdict(i), "blocked_count": i.blocked_count, "at_risk_count": i.at_risk_count}
                for i in self.interfaces
            ],
        }


def interface_impact(
    index: ReferenceIndex,
    progress: dict[str, FeatureProgress],
    interface: str | None = None,
    blocked_below: int = 50,
) -> ImpactResult:
    """Which consumers each provider holds back.

    An ``active`` consumer is blocked while its provider is under
    ``blocked_below`` percent; any consumer ahead of its provider is at risk.

    Raises:
        DocGraphError: ``interface`` is not in the index
    """
    if interface is not None and interface not in index.interfaces:
        raise DocGraphError(f"Unknown interface: {interface}")

    result = ImpactResult()
    for interface_id in sorted(index.interfaces):
        if interface is not None and interface_id != interface:
            continue
        entry = index.interfaces[interface_id]
        provider = progress.get(entry.from_feature)
        if provider is None:
            continue
        impact = InterfaceImpact(
            interface=interface_id,
            provider=provider.feature,
            provider_progress=provider.progress,
            provider_status=provider.status,
        )
        consumer = progress.get(entry.to_feature)
        if consumer is not None:
            impact.consumers.append(
                Consumer(
                    feature=consumer.feature,
                    progress=consumer.progress,
                    status=consumer.status,
                    blocked=provider.progress < blocked_below and consumer.status == "active",
                    at_risk=consumer.progress > provider.progress,
                )
            )
        result.interfaces.append(impact)
    return result
