"""Data models shared by every stage of the activation pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from skillgate.observability.error_codes import (
    DiagnosticCode,
    DiagnosticSeverity,
    get_diagnostic_info,
)

DEFAULT_PRIORITY = 50
MAX_AFFINITIES = 2

# Older catalogs classify skills by domain/guardrail.
_LEGACY_KINDS = {"domain": "advisory", "guardrail": "enforced"}


def _unique(values: Any) -> Any:
    if not isinstance(values, list | tuple):
        return values
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


class SkillRule(BaseModel):
    """Validated catalog entry.

    Source records use the catalog's camelCase field names (``autoInject``,
    ``requiredSkills``, ``affinity``, ``injectionOrder``, ``promptTriggers``);
    the Python names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    kind: Literal["advisory", "enforced"] = Field(default="advisory", alias="type")
    auto_activate: bool = Field(default=True, alias="autoInject")
    dependencies: tuple[str, ...] = Field(default=(), alias="requiredSkills")
    affinities: tuple[str, ...] = Field(default=(), alias="affinity")
    priority: int = Field(default=DEFAULT_PRIORITY, ge=0, le=100, alias="injectionOrder")
    description: str = ""
    keywords: tuple[str, ...] = ()
    intent_patterns: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _flatten_source(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        triggers = data.pop("promptTriggers", None)
        if isinstance(triggers, dict):
            data.setdefault("keywords", triggers.get("keywords") or ())
            data.setdefault("intent_patterns", triggers.get("intentPatterns") or ())
        elif triggers is not None:
            raise ValueError("promptTriggers must be an object")
        for key in ("type", "kind"):
            kind = data.get(key)
            if isinstance(kind, str):
                data[key] = _LEGACY_KINDS.get(kind.lower(), kind.lower())
        return data

    @field_validator("dependencies", "affinities", "keywords", "intent_patterns", mode="before")
    @classmethod
    def _dedupe(cls, value: Any) -> Any:
        return _unique(value)

    @model_validator(mode="after")
    def _check_references(self) -> SkillRule:
        if len(self.affinities) > MAX_AFFINITIES:
            raise ValueError(
                f"affinity lists at most {MAX_AFFINITIES} skills, got {len(self.affinities)}"
            )
        if self.name in self.affinities:
            raise ValueError("a skill cannot declare affinity to itself")
        if self.name in self.dependencies:
            raise ValueError("a skill cannot require itself")
        return self


class ScoredCandidate(BaseModel):
    """One scorer opinion. Untrusted: names and confidences are checked downstream."""

    name: str
    confidence: float
    reason: str = ""


class Diagnostic(BaseModel):
    """Side-channel record of a corrected or dropped input."""

    code: DiagnosticCode
    message: str
    subject: str | None = None

    @property
    def severity(self) -> DiagnosticSeverity:
        return get_diagnostic_info(self.code).severity


class ActivationResult(BaseModel):
    """Outcome of one turn of the activation engine."""

    admitted: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
    affinity_added: list[str] = Field(default_factory=list)
    dependency_added: list[str] = Field(default_factory=list)
    final_order: list[str] = Field(default_factory=list)
    suggested: list[str] = Field(default_factory=list)
    manual_only: list[str] = Field(default_factory=list)
    capacity: int = 0
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.final_order


class TurnEvent(BaseModel):
    """Structured log event emitted once per processed turn."""

    conversation_id: str
    scorer: str
    cached: bool = False
    candidate_count: int = 0
    admitted: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
    affinity_added: list[str] = Field(default_factory=list)
    final_order: list[str] = Field(default_factory=list)
    suggested: list[str] = Field(default_factory=list)
    diagnostic_codes: list[str] = Field(default_factory=list)
    duration_ms: float | None = None


__all__ = [
    "DEFAULT_PRIORITY",
    "MAX_AFFINITIES",
    "ActivationResult",
    "Diagnostic",
    "ScoredCandidate",
    "SkillRule",
    "TurnEvent",
]
