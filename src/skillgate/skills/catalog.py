"""Skill catalog with load-time validation.

The catalog is rebuilt from its source file on every turn. Entries are
validated into immutable :class:`SkillRule` objects; malformed entries are
quarantined (skipped and reported) so one bad record never takes the rest of
the catalog down with it.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.models import DEFAULT_PRIORITY, Diagnostic, SkillRule

LOGGER = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class CatalogError(RuntimeError):
    """Raised when the catalog source cannot be read or parsed at all."""


class Catalog:
    """Read-only mapping from skill name to :class:`SkillRule`.

    Usage:
        catalog = load_catalog(Path(".skills/skill-rules.json"))
        rule = catalog.get("backend-guidelines")
        partners = catalog.declaring_affinity_to("backend-guidelines")
    """

    def __init__(
        self,
        rules: Mapping[str, SkillRule] | None = None,
        *,
        diagnostics: list[Diagnostic] | None = None,
        quarantined: list[str] | None = None,
        fingerprint: str | None = None,
    ) -> None:
        self._rules: dict[str, SkillRule] = dict(rules or {})
        self.diagnostics: list[Diagnostic] = list(diagnostics or [])
        self.quarantined: list[str] = list(quarantined or [])
        self.fingerprint = fingerprint or _fingerprint(
            {name: rule.model_dump(mode="json") for name, rule in self._rules.items()}
        )

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        *,
        default_priority: int = DEFAULT_PRIORITY,
    ) -> Catalog:
        """Validate a raw catalog record.

        Accepts either ``{"skills": {name: entry}}`` or the bare
        ``{name: entry}`` mapping.

        Args:
            raw: Parsed catalog document.
            default_priority: Priority for entries without ``injectionOrder``.

        Returns:
            Catalog of every entry that passed validation.
        """
        entries = raw.get("skills", raw) if isinstance(raw, Mapping) else None
        if not isinstance(entries, Mapping):
            raise CatalogError("catalog must map skill names to rule objects")

        rules: dict[str, SkillRule] = {}
        diagnostics: list[Diagnostic] = []
        quarantined: list[str] = []

        for name, entry in entries.items():
            if not isinstance(entry, Mapping):
                quarantined.append(str(name))
                diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.CATALOG_INVALID_ENTRY,
                        message=f"Skill '{name}' is not an object",
                        subject=str(name),
                    )
                )
                continue

            data = dict(entry)
            data["name"] = str(name)
            if "injectionOrder" not in data and "priority" not in data:
                data["injectionOrder"] = default_priority
            try:
                rules[str(name)] = SkillRule.model_validate(data)
            except ValidationError as exc:
                quarantined.append(str(name))
                problems = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}"
                    for err in exc.errors()
                )
                diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.CATALOG_INVALID_ENTRY,
                        message=f"Skill '{name}' quarantined: {problems}",
                        subject=str(name),
                    )
                )

        for rule in rules.values():
            for target in rule.dependencies:
                if target not in rules:
                    diagnostics.append(
                        Diagnostic(
                            code=DiagnosticCode.CATALOG_UNKNOWN_REFERENCE,
                            message=f"Skill '{rule.name}' requires unknown skill '{target}'",
                            subject=rule.name,
                        )
                    )
            for target in rule.affinities:
                if target not in rules:
                    diagnostics.append(
                        Diagnostic(
                            code=DiagnosticCode.CATALOG_UNKNOWN_REFERENCE,
                            message=f"Skill '{rule.name}' declares affinity to unknown skill '{target}'",
                            subject=rule.name,
                        )
                    )

        catalog = cls(
            rules,
            diagnostics=diagnostics,
            quarantined=quarantined,
            fingerprint=_fingerprint(entries),
        )
        catalog._log_load_summary()
        return catalog

    def _log_load_summary(self) -> None:
        LOGGER.info(
            "Catalog loaded: %d valid skills, %d quarantined",
            len(self._rules),
            len(self.quarantined),
        )

        max_warnings = 10
        for diagnostic in self.diagnostics[:max_warnings]:
            LOGGER.warning(diagnostic.message)
        if len(self.diagnostics) > max_warnings:
            LOGGER.warning(
                "... and %d more catalog warnings", len(self.diagnostics) - max_warnings
            )

    def get(self, name: str) -> SkillRule | None:
        return self._rules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[SkillRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def names(self) -> list[str]:
        """List skill names in catalog order."""
        return list(self._rules)

    def priority_of(self, name: str, default: int = DEFAULT_PRIORITY) -> int:
        rule = self._rules.get(name)
        return rule.priority if rule else default

    def is_auto_activatable(self, name: str) -> bool:
        rule = self._rules.get(name)
        return bool(rule and rule.auto_activate)

    def declaring_affinity_to(self, name: str) -> list[str]:
        """Names of every other entry whose affinity list contains ``name``."""
        return [
            rule.name
            for rule in self._rules.values()
            if rule.name != name and name in rule.affinities
        ]

    def get_index(self) -> str:
        """Get formatted skill index for LLM prompts.

        Returns:
            Bulleted markdown list of skills with descriptions.
        """
        if not self._rules:
            return "(No skills loaded)"

        lines = []
        for rule in sorted(self._rules.values(), key=lambda r: r.name):
            desc = rule.description or "No description"
            lines.append(f"* [{rule.name}]: {desc}")

        return "\n".join(lines)


def _fingerprint(raw: Any) -> str:
    canonical = json.dumps(raw, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_catalog(path: Path, *, default_priority: int = DEFAULT_PRIORITY) -> Catalog:
    """Load and validate a catalog file.

    Args:
        path: JSON catalog, or YAML when the suffix is ``.yaml``/``.yml``.
        default_priority: Priority for entries without ``injectionOrder``.

    Returns:
        Validated catalog.

    Raises:
        CatalogError: If the file is missing or is not a parseable mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"cannot read catalog {path}: {exc}") from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CatalogError(f"cannot parse catalog {path}: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise CatalogError(f"catalog {path} must contain an object at the top level")

    return Catalog.from_mapping(raw, default_priority=default_priority)


__all__ = ["Catalog", "CatalogError", "load_catalog"]
