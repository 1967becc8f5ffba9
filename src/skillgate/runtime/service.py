"""One activation turn, end to end.

catalog load -> ledger read -> scoring (cache, primary, keyword fallback)
-> engine plan -> render -> ledger write.

Every recoverable failure becomes a diagnostic; the worst case is an empty
activation. The ledger is written only after the output text exists, and only
when the turn emitted something.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from skillgate.core.config import Settings
from skillgate.observability.error_codes import DiagnosticCode
from skillgate.observability.logging import log_event
from skillgate.routing.cache import ScoreCache, make_cache_key
from skillgate.routing.keyword import KeywordScorer
from skillgate.routing.llm import LLMScorer
from skillgate.routing.scoring import Scorer, ScorerUnavailableError
from skillgate.session.ledger import FileLedgerStore, LedgerStore
from skillgate.skills.catalog import Catalog, CatalogError, load_catalog
from skillgate.skills.content import SkillContentLoader
from skillgate.skills.emitter import ActivationEmitter
from skillgate.skills.engine import ActivationEngine
from skillgate.skills.models import ActivationResult, Diagnostic, ScoredCandidate, TurnEvent

LOGGER = logging.getLogger(__name__)


@dataclass
class ScoringOutcome:
    candidates: list[ScoredCandidate]
    scorer: str
    cached: bool = False
    diagnostic: Diagnostic | None = None


@dataclass
class TurnOutcome:
    conversation_id: str
    result: ActivationResult
    text: str
    scorer: str
    cached: bool = False


class SkillActivationService:
    """Wire the engine to its collaborators for one conversation turn."""

    def __init__(
        self,
        settings: Settings,
        *,
        engine: ActivationEngine | None = None,
        ledger: LedgerStore | None = None,
        scorer: Scorer | None = None,
        fallback: Scorer | None = None,
        cache: ScoreCache | None = None,
        emitter: ActivationEmitter | None = None,
    ) -> None:
        self._settings = settings
        self.engine = engine or ActivationEngine.from_settings(settings)
        self.ledger: LedgerStore = ledger or FileLedgerStore(settings.state_dir)
        self.scorer: Scorer = scorer or KeywordScorer()
        self.fallback = fallback
        self.cache = cache
        self.emitter = emitter or ActivationEmitter(SkillContentLoader(settings.skills_dir))

    @classmethod
    def from_settings(cls, settings: Settings, *, scorer_mode: str | None = None) -> SkillActivationService:
        """Build the service with the scorer chain selected by ``settings.scorer``.

        ``keyword`` scores locally; ``llm`` uses the gateway only; ``auto``
        uses the gateway and falls back to keywords when it is unavailable.
        """
        mode = scorer_mode or settings.scorer
        scorer: Scorer
        fallback: Scorer | None = None
        if mode == "keyword":
            scorer = KeywordScorer()
        else:
            scorer = LLMScorer(settings)
            if mode == "auto":
                fallback = KeywordScorer()

        cache = None
        if settings.cache_enabled:
            cache = ScoreCache(
                settings.cache_dir,
                ttl_seconds=settings.cache_ttl_seconds,
                sweep_interval_seconds=settings.cache_sweep_interval_seconds,
            )
        return cls(settings, scorer=scorer, fallback=fallback, cache=cache)

    async def aclose(self) -> None:
        for scorer in (self.scorer, self.fallback):
            close = getattr(scorer, "aclose", None)
            if close is not None:
                await close()

    def load_catalog(self) -> tuple[Catalog, list[Diagnostic]]:
        """Load the catalog; an unreadable catalog degrades to an empty one."""
        try:
            catalog = load_catalog(
                self._settings.catalog_path,
                default_priority=self._settings.default_priority,
            )
        except CatalogError as exc:
            LOGGER.warning("Catalog unavailable, activating nothing: %s", exc)
            return Catalog(), [
                Diagnostic(code=DiagnosticCode.CATALOG_UNREADABLE, message=str(exc))
            ]
        return catalog, list(catalog.diagnostics)

    async def score(self, prompt: str, catalog: Catalog) -> ScoringOutcome:
        """Score ``prompt`` against ``catalog`` using the cache and scorer chain."""
        key = None
        if self.cache is not None:
            key = make_cache_key(prompt, catalog.fingerprint, self.scorer.name)
            cached = self.cache.get(key)
            if cached is not None:
                LOGGER.debug("Score cache hit for %s", key[:12])
                return ScoringOutcome(candidates=cached, scorer=self.scorer.name, cached=True)

        try:
            candidates = await self.scorer.score(prompt, catalog)
        except ScorerUnavailableError as exc:
            diagnostic = Diagnostic(
                code=DiagnosticCode.SCORER_UNAVAILABLE,
                message=f"{self.scorer.name} scorer unavailable: {exc}",
            )
            LOGGER.warning(diagnostic.message)
            if self.fallback is None:
                return ScoringOutcome(candidates=[], scorer=self.scorer.name, diagnostic=diagnostic)
            candidates = await self.fallback.score(prompt, catalog)
            return ScoringOutcome(
                candidates=candidates, scorer=self.fallback.name, diagnostic=diagnostic
            )

        if self.cache is not None and key is not None:
            try:
                self.cache.put(key, candidates)
            except OSError as exc:
                LOGGER.warning("Failed to store scoring result: %s", exc)
        return ScoringOutcome(candidates=candidates, scorer=self.scorer.name)

    async def run_turn(
        self,
        conversation_id: str,
        prompt: str,
        *,
        dry_run: bool = False,
    ) -> TurnOutcome:
        """Process one request.

        Args:
            conversation_id: Host conversation identifier; keys the ledger.
            prompt: The user request to score.
            dry_run: Compute and render without updating the ledger.

        Returns:
            TurnOutcome with the activation result and the text for the host.
        """
        started = time.perf_counter()
        catalog, diagnostics = self.load_catalog()
        activated, ledger_diagnostic = self.ledger.read_checked(conversation_id)
        if ledger_diagnostic is not None:
            diagnostics.append(ledger_diagnostic)

        if prompt.strip() and len(catalog) > 0:
            scoring = await self.score(prompt, catalog)
        else:
            scoring = ScoringOutcome(candidates=[], scorer=self.scorer.name)
        if scoring.diagnostic is not None:
            diagnostics.append(scoring.diagnostic)

        result = self.engine.plan(scoring.candidates, catalog, activated)
        rendered = self.emitter.render(result)
        result.diagnostics = [*diagnostics, *result.diagnostics, *rendered.diagnostics]

        if not dry_run:
            result.diagnostics.extend(
                self.emitter.commit(self.ledger, conversation_id, activated, result)
            )

        log_event(
            TurnEvent(
                conversation_id=conversation_id,
                scorer=scoring.scorer,
                cached=scoring.cached,
                candidate_count=len(scoring.candidates),
                admitted=result.admitted,
                promoted=result.promoted,
                affinity_added=result.affinity_added,
                final_order=result.final_order,
                suggested=result.suggested,
                diagnostic_codes=[d.code.value for d in result.diagnostics],
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        )
        return TurnOutcome(
            conversation_id=conversation_id,
            result=result,
            text=rendered.text,
            scorer=scoring.scorer,
            cached=scoring.cached,
        )


__all__ = ["ScoringOutcome", "SkillActivationService", "TurnOutcome"]
