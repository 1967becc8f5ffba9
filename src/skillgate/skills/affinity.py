"""Affinity expansion.

Affinity is stored one-way (at most two names per rule) but means "pairs well
with" in both directions, so each admitted skill pulls in the partners it
declares and every rule that declares it. Partners never consume capacity.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.catalog import Catalog
from skillgate.skills.models import Diagnostic

LOGGER = logging.getLogger(__name__)


@dataclass
class AffinityResolution:
    added: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class AffinityResolver:
    def resolve(
        self,
        to_inject: Sequence[str],
        activated: Collection[str],
        catalog: Catalog,
    ) -> AffinityResolution:
        resolution = AffinityResolution()
        injected = set(to_inject)

        def consider(partner: str, source: str) -> None:
            if partner not in catalog:
                resolution.diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.AFFINITY_UNKNOWN,
                        message=f"Skill '{source}' declares affinity to unknown skill '{partner}'",
                        subject=source,
                    )
                )
                return
            if partner in activated or partner in injected or partner in resolution.added:
                return
            if not catalog.is_auto_activatable(partner):
                LOGGER.debug("Affinity partner %s is manual-only, skipped", partner)
                return
            resolution.added.append(partner)

        for name in to_inject:
            rule = catalog.get(name)
            if rule is None:
                continue
            for partner in rule.affinities:
                consider(partner, name)
            for partner in catalog.declaring_affinity_to(name):
                consider(partner, partner)

        if resolution.added:
            LOGGER.debug("Affinity added %s for %s", resolution.added, list(to_inject))
        return resolution


__all__ = ["AffinityResolution", "AffinityResolver"]
