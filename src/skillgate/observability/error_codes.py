"""Standardized diagnostic codes for the skill activation engine.

Diagnostics are a side channel: they are logged and attached to the
activation result, but they never abort a turn. Each code carries:
1. A severity level for prioritization
2. A category naming the stage that produced it
3. A recovery hint for catalog authors and operators
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class DiagnosticSeverity(str, Enum):
    """Severity levels for diagnostics."""

    ERROR = "error"  # Part of the input was dropped
    WARNING = "warning"  # Degraded result, turn continues
    INFO = "info"  # Informational, no action needed


class DiagnosticInfo(NamedTuple):
    """Structured information about a diagnostic code."""

    code: str
    severity: DiagnosticSeverity
    category: str
    description: str
    recovery_hint: str


class DiagnosticCode(str, Enum):
    """Standardized diagnostic codes.

    Format: CATEGORY_SPECIFIC_CONDITION
    Categories:
    - CATALOG: Catalog loading and validation
    - SCORE: Scorer output and backends
    - AFFINITY: Affinity expansion
    - DEPENDENCY: Dependency resolution and ordering
    - LEDGER: Session ledger persistence
    - CACHE: Scoring cache persistence
    - CONTENT: Skill payload loading
    """

    # ---- Catalog ----
    CATALOG_UNREADABLE = "CATALOG_UNREADABLE"
    CATALOG_INVALID_ENTRY = "CATALOG_INVALID_ENTRY"
    CATALOG_UNKNOWN_REFERENCE = "CATALOG_UNKNOWN_REFERENCE"

    # ---- Scoring ----
    SCORE_CONFIDENCE_CLAMPED = "SCORE_CONFIDENCE_CLAMPED"
    SCORE_DUPLICATE_CANDIDATE = "SCORE_DUPLICATE_CANDIDATE"
    SCORER_UNAVAILABLE = "SCORER_UNAVAILABLE"

    # ---- Affinity ----
    AFFINITY_UNKNOWN = "AFFINITY_UNKNOWN"

    # ---- Dependency ----
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"
    DEPENDENCY_CYCLE = "DEPENDENCY_CYCLE"
    DEPENDENCY_PRIORITY_INVERSION = "DEPENDENCY_PRIORITY_INVERSION"

    # ---- Ledger ----
    LEDGER_CORRUPT = "LEDGER_CORRUPT"
    LEDGER_WRITE_FAILED = "LEDGER_WRITE_FAILED"

    # ---- Cache ----
    CACHE_CORRUPT = "CACHE_CORRUPT"

    # ---- Content ----
    CONTENT_MISSING = "CONTENT_MISSING"


DIAGNOSTIC_METADATA: dict[DiagnosticCode, DiagnosticInfo] = {
    DiagnosticCode.CATALOG_UNREADABLE: DiagnosticInfo(
        code="CATALOG_UNREADABLE",
        severity=DiagnosticSeverity.ERROR,
        category="catalog",
        description="Catalog file is missing or could not be parsed",
        recovery_hint="Check SKILLGATE_CATALOG_PATH and validate the file with `skillgate catalog`",
    ),
    DiagnosticCode.CATALOG_INVALID_ENTRY: DiagnosticInfo(
        code="CATALOG_INVALID_ENTRY",
        severity=DiagnosticSeverity.ERROR,
        category="catalog",
        description="A catalog entry failed validation and was quarantined",
        recovery_hint="Fix the listed field; the rest of the catalog is still active",
    ),
    DiagnosticCode.CATALOG_UNKNOWN_REFERENCE: DiagnosticInfo(
        code="CATALOG_UNKNOWN_REFERENCE",
        severity=DiagnosticSeverity.WARNING,
        category="catalog",
        description="A requiredSkills or affinity entry names a skill absent from the catalog",
        recovery_hint="Add the missing skill or remove the reference",
    ),
    DiagnosticCode.SCORE_CONFIDENCE_CLAMPED: DiagnosticInfo(
        code="SCORE_CONFIDENCE_CLAMPED",
        severity=DiagnosticSeverity.INFO,
        category="score",
        description="Scorer returned a confidence outside [0, 1]; it was clamped",
        recovery_hint="No action needed unless it happens on every turn",
    ),
    DiagnosticCode.SCORE_DUPLICATE_CANDIDATE: DiagnosticInfo(
        code="SCORE_DUPLICATE_CANDIDATE",
        severity=DiagnosticSeverity.INFO,
        category="score",
        description="Scorer returned the same skill more than once; the highest confidence was kept",
        recovery_hint="No action needed",
    ),
    DiagnosticCode.SCORER_UNAVAILABLE: DiagnosticInfo(
        code="SCORER_UNAVAILABLE",
        severity=DiagnosticSeverity.WARNING,
        category="score",
        description="Primary scorer failed; keyword fallback was used",
        recovery_hint="Check the LiteLLM gateway URL, key and model",
    ),
    DiagnosticCode.AFFINITY_UNKNOWN: DiagnosticInfo(
        code="AFFINITY_UNKNOWN",
        severity=DiagnosticSeverity.WARNING,
        category="affinity",
        description="Affinity partner is not in the catalog and was skipped",
        recovery_hint="Fix the affinity list of the named skill",
    ),
    DiagnosticCode.DEPENDENCY_MISSING: DiagnosticInfo(
        code="DEPENDENCY_MISSING",
        severity=DiagnosticSeverity.ERROR,
        category="dependency",
        description="Required skill is not in the catalog; the edge was dropped",
        recovery_hint="Add the missing skill or fix requiredSkills",
    ),
    DiagnosticCode.DEPENDENCY_CYCLE: DiagnosticInfo(
        code="DEPENDENCY_CYCLE",
        severity=DiagnosticSeverity.ERROR,
        category="dependency",
        description="Circular requiredSkills chain; the closing edge was dropped",
        recovery_hint="Break the cycle in requiredSkills",
    ),
    DiagnosticCode.DEPENDENCY_PRIORITY_INVERSION: DiagnosticInfo(
        code="DEPENDENCY_PRIORITY_INVERSION",
        severity=DiagnosticSeverity.WARNING,
        category="dependency",
        description="Priority ordering placed a dependency after its dependent",
        recovery_hint="Give dependencies a lower injectionOrder, or use ordering=topological",
    ),
    DiagnosticCode.LEDGER_CORRUPT: DiagnosticInfo(
        code="LEDGER_CORRUPT",
        severity=DiagnosticSeverity.WARNING,
        category="ledger",
        description="Session ledger could not be read; treated as empty",
        recovery_hint="Previously activated skills may be activated again this turn",
    ),
    DiagnosticCode.LEDGER_WRITE_FAILED: DiagnosticInfo(
        code="LEDGER_WRITE_FAILED",
        severity=DiagnosticSeverity.WARNING,
        category="ledger",
        description="Session ledger could not be written",
        recovery_hint="Check permissions on SKILLGATE_STATE_DIR",
    ),
    DiagnosticCode.CACHE_CORRUPT: DiagnosticInfo(
        code="CACHE_CORRUPT",
        severity=DiagnosticSeverity.INFO,
        category="cache",
        description="Score cache could not be read; treated as empty",
        recovery_hint="Run `skillgate cache-sweep` or delete the cache directory",
    ),
    DiagnosticCode.CONTENT_MISSING: DiagnosticInfo(
        code="CONTENT_MISSING",
        severity=DiagnosticSeverity.WARNING,
        category="content",
        description="No content payload found for an activated skill",
        recovery_hint="Create <skills_dir>/<name>/SKILL.md",
    ),
}


def get_diagnostic_info(code: DiagnosticCode) -> DiagnosticInfo:
    """Get metadata for a diagnostic code."""
    return DIAGNOSTIC_METADATA[code]


def format_diagnostic_for_ai(code: DiagnosticCode, context: str | None = None) -> dict[str, str]:
    """Format a diagnostic for machine consumption.

    Args:
        code: The diagnostic code.
        context: Optional additional context.

    Returns:
        Machine-readable diagnostic dictionary.
    """
    info = get_diagnostic_info(code)
    result = {
        "diagnostic_code": info.code,
        "severity": info.severity.value,
        "category": info.category,
        "description": info.description,
        "recovery_hint": info.recovery_hint,
    }
    if context:
        result["context"] = context
    return result


__all__ = [
    "DiagnosticSeverity",
    "DiagnosticInfo",
    "DiagnosticCode",
    "DIAGNOSTIC_METADATA",
    "get_diagnostic_info",
    "format_diagnostic_for_ai",
]
