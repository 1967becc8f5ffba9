"""Pure per-turn activation pipeline.

Categorizer -> admission/promotion -> affinity -> dependency resolution.
The engine performs no I/O and holds no conversation state: the ledger's
``activated`` names come in as an argument and the caller persists whatever
the emitter returns.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from skillgate.core.config import Settings
from skillgate.skills.admission import AdmissionEngine
from skillgate.skills.affinity import AffinityResolver
from skillgate.skills.catalog import Catalog
from skillgate.skills.categorizer import Categorizer
from skillgate.skills.dependencies import DependencyResolver, OrderingMode
from skillgate.skills.models import ActivationResult, ScoredCandidate


class ActivationEngine:
    """Decide which skills to activate for one turn.

    Usage:
        engine = ActivationEngine.from_settings(settings)
        result = engine.plan(candidates, catalog, activated={"backend-guidelines"})
        result.final_order  # names to render, dependencies first
    """

    def __init__(
        self,
        *,
        categorizer: Categorizer | None = None,
        admission: AdmissionEngine | None = None,
        affinity: AffinityResolver | None = None,
        dependencies: DependencyResolver | None = None,
    ) -> None:
        self.categorizer = categorizer or Categorizer()
        self.admission = admission or AdmissionEngine()
        self.affinity = affinity or AffinityResolver()
        self.dependencies = dependencies or DependencyResolver()

    @classmethod
    def from_settings(cls, settings: Settings) -> ActivationEngine:
        ordering: OrderingMode = settings.ordering
        return cls(
            categorizer=Categorizer(
                high_threshold=settings.high_threshold,
                low_threshold=settings.low_threshold,
                max_admit=settings.max_admit,
                max_consider=settings.max_consider,
            ),
            admission=AdmissionEngine(capacity=settings.capacity),
            affinity=AffinityResolver(),
            dependencies=DependencyResolver(
                ordering=ordering,
                default_priority=settings.default_priority,
            ),
        )

    def plan(
        self,
        candidates: Iterable[ScoredCandidate],
        catalog: Catalog,
        activated: Collection[str] = (),
    ) -> ActivationResult:
        activated_set = set(activated)

        tiers = self.categorizer.categorize(candidates, catalog)
        admission = self.admission.admit(tiers, activated_set, catalog)
        affinity = self.affinity.resolve(admission.to_inject, activated_set, catalog)
        resolution = self.dependencies.resolve(
            [*admission.to_inject, *affinity.added], activated_set, catalog
        )

        return ActivationResult(
            admitted=list(admission.to_inject),
            promoted=list(admission.promoted),
            affinity_added=list(affinity.added),
            dependency_added=list(resolution.added),
            final_order=list(resolution.order),
            suggested=list(admission.suggested),
            manual_only=list(admission.manual_only),
            capacity=admission.capacity,
            diagnostics=[*tiers.diagnostics, *affinity.diagnostics, *resolution.diagnostics],
        )


__all__ = ["ActivationEngine"]
