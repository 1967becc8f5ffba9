"""Skill catalog and the activation pipeline.

This module provides the decision engine: categorization of scored
candidates, admission under capacity, affinity expansion, dependency
resolution and rendering of the final activation set.
"""

from skillgate.skills.catalog import Catalog, CatalogError, load_catalog
from skillgate.skills.engine import ActivationEngine
from skillgate.skills.models import ActivationResult, Diagnostic, ScoredCandidate, SkillRule

__all__ = [
    "ActivationEngine",
    "ActivationResult",
    "Catalog",
    "CatalogError",
    "Diagnostic",
    "ScoredCandidate",
    "SkillRule",
    "load_catalog",
]
