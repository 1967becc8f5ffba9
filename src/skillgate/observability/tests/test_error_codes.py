"""Tests for the diagnostic code registry."""

from __future__ import annotations

from skillgate.observability.error_codes import (
    DIAGNOSTIC_METADATA,
    DiagnosticCode,
    DiagnosticSeverity,
    format_diagnostic_for_ai,
    get_diagnostic_info,
)
from skillgate.skills.models import Diagnostic


def test_every_code_has_metadata() -> None:
    assert set(DIAGNOSTIC_METADATA) == set(DiagnosticCode)


def test_metadata_is_consistent() -> None:
    for code in DiagnosticCode:
        info = get_diagnostic_info(code)
        assert info.code == code.value
        assert info.recovery_hint


def test_format_includes_context() -> None:
    formatted = format_diagnostic_for_ai(DiagnosticCode.DEPENDENCY_CYCLE, "a -> b -> a")

    assert formatted["diagnostic_code"] == "DEPENDENCY_CYCLE"
    assert formatted["context"] == "a -> b -> a"
    assert "context" not in format_diagnostic_for_ai(DiagnosticCode.DEPENDENCY_CYCLE)


def test_diagnostic_severity_comes_from_registry() -> None:
    diagnostic = Diagnostic(code=DiagnosticCode.CATALOG_INVALID_ENTRY, message="bad entry")
    assert diagnostic.severity == get_diagnostic_info(DiagnosticCode.CATALOG_INVALID_ENTRY).severity
    assert isinstance(diagnostic.severity, DiagnosticSeverity)
