"""Graph package - the feature/code/interface/term reference index.

Core modules:
- types: entity dataclasses and the persisted JSON shape
- builder: full rebuild from the documentation tree
- store: snapshot save/load
- query: read-only lookups over a loaded index
- impact: checkbox progress, dependency readiness and interface impact
"""

from .builder import BuildResult, ReferenceIndexBuilder, build_reference_index, classify_code_file
from .impact import dependency_readiness, interface_impact, load_feature_progress
from .query import code_references, feature_details, overview, term_usage, top_terms
from .store import load_index, load_project_index, save_index
from .types import BuildStats, CodeFile, Feature, Interface, ReferenceIndex, TermUsage

__all__ = [
    "BuildResult",
    "ReferenceIndexBuilder",
    "build_reference_index",
    "classify_code_file",
    "dependency_readiness",
    "interface_impact",
    "load_feature_progress",
    "code_references",
    "feature_details",
    "overview",
    "term_usage",
    "top_terms",
    "load_index",
    "load_project_index",
    "save_index",
    "BuildStats",
    "CodeFile",
    "Feature",
    "Interface",
    "ReferenceIndex",
    "TermUsage",
]
