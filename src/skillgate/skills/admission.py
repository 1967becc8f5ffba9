"""Admission and promotion: pick this turn's directly activated skills.

Capacity is a conversation-scoped budget. Admit-tier skills that were already
activated in an earlier turn are still "in force" and keep occupying budget,
even though they are never emitted again. Whatever budget remains is filled
from the admit tier first and then by promoting consider-tier candidates.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field

from skillgate.skills.catalog import Catalog
from skillgate.skills.categorizer import TierSplit

LOGGER = logging.getLogger(__name__)


@dataclass
class Admission:
    to_inject: list[str] = field(default_factory=list)
    promoted: list[str] = field(default_factory=list)
    suggested: list[str] = field(default_factory=list)
    manual_only: list[str] = field(default_factory=list)
    capacity: int = 0
    already_admitted: int = 0


class AdmissionEngine:
    """Apply the session ledger and per-turn capacity to both tiers."""

    def __init__(self, capacity: int = 2) -> None:
        self.capacity = capacity

    def admit(self, tiers: TierSplit, activated: Collection[str], catalog: Catalog) -> Admission:
        """Choose the names to inject this turn.

        Args:
            tiers: Output of the categorizer.
            activated: Names already activated in this conversation.
            catalog: Catalog used for ``auto_activate`` checks.

        Returns:
            Admission with ``to_inject`` (admit tier first, then promoted names).
        """
        admission = Admission()

        def eligible(name: str) -> bool:
            return name not in activated and catalog.is_auto_activatable(name)

        admit_names = [c.name for c in tiers.admit]
        consider_names = [c.name for c in tiers.consider]

        for name in [*admit_names, *consider_names]:
            if name not in activated and not catalog.is_auto_activatable(name):
                admission.manual_only.append(name)

        admit_open = [name for name in admit_names if eligible(name)]
        consider_open = [name for name in consider_names if eligible(name)]

        # Counted on the unfiltered tier: in-force skills from earlier turns.
        admission.already_admitted = sum(1 for name in admit_names if name in activated)
        admission.capacity = max(0, self.capacity - admission.already_admitted)

        admission.to_inject = admit_open[: admission.capacity]
        overflow = admit_open[admission.capacity :]

        free = admission.capacity - len(admission.to_inject)
        if free > 0:
            admission.promoted = consider_open[:free]
            admission.to_inject.extend(admission.promoted)

        admission.suggested = overflow + [
            name for name in consider_open if name not in admission.promoted
        ]

        LOGGER.debug(
            "Admission: capacity=%d (in force %d) inject=%s promoted=%s suggested=%s",
            admission.capacity,
            admission.already_admitted,
            admission.to_inject,
            admission.promoted,
            admission.suggested,
        )
        return admission


__all__ = ["Admission", "AdmissionEngine"]
