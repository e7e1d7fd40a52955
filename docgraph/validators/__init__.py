"""Validators package - naming, orphans, interface links, terminology, structure
and export coverage.

Every validator returns a result whose ``success`` is true exactly when it
found no errors; warnings never fail a run.
"""

from .exports import ExportCoverageResult, detect_undocumented_exports
from .interface_links import (
    InterfaceValidationResult,
    parse_interface_hierarchy,
    validate_interface_links,
    validate_project_interface_links,
)
from .naming import NamingValidationResult, normalize_pair, validate_naming
from .orphans import OrphanOptions, OrphanResult, detect_orphans
from .structure import StructureResult, validate_structure
from .terms import load_term_registry, validate_terms

__all__ = [
    "ExportCoverageResult",
    "detect_undocumented_exports",
    "InterfaceValidationResult",
    "parse_interface_hierarchy",
    "validate_interface_links",
    "validate_project_interface_links",
    "NamingValidationResult",
    "normalize_pair",
    "validate_naming",
    "OrphanOptions",
    "OrphanResult",
    "detect_orphans",
    "StructureResult",
    "validate_structure",
    "load_term_registry",
    "validate_terms",
]
