"""Split scored candidates into the admit tier and the consider tier."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.catalog import Catalog
from skillgate.skills.models import Diagnostic, ScoredCandidate

LOGGER = logging.getLogger(__name__)


@dataclass
class TierSplit:
    """Admit and consider tiers, each sorted by confidence descending."""

    admit: list[ScoredCandidate] = field(default_factory=list)
    consider: list[ScoredCandidate] = field(default_factory=list)
    # Known candidates below the low threshold, kept for diagnostics only.
    dropped: list[ScoredCandidate] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def names(self) -> tuple[list[str], list[str]]:
        return [c.name for c in self.admit], [c.name for c in self.consider]


class Categorizer:
    """Turn raw confidences into two disjoint, capped tiers.

    ``admit`` holds candidates with ``confidence > high_threshold``;
    ``consider`` holds ``low_threshold <= confidence <= high_threshold``.
    """

    def __init__(
        self,
        *,
        high_threshold: float = 0.65,
        low_threshold: float = 0.50,
        max_admit: int = 2,
        max_consider: int = 2,
    ) -> None:
        if high_threshold <= low_threshold:
            raise ValueError("high_threshold must be greater than low_threshold")
        self.high_threshold = high_threshold
        self.low_threshold = low_threshold
        self.max_admit = max_admit
        self.max_consider = max_consider

    def categorize(self, candidates: Iterable[ScoredCandidate], catalog: Catalog) -> TierSplit:
        split = TierSplit()
        known = self._sanitize(candidates, catalog, split.diagnostics)

        # sorted() is stable, so equal confidences keep scorer order.
        ranked = sorted(known, key=lambda c: c.confidence, reverse=True)
        for candidate in ranked:
            if candidate.confidence > self.high_threshold:
                split.admit.append(candidate)
            elif candidate.confidence >= self.low_threshold:
                split.consider.append(candidate)
            else:
                split.dropped.append(candidate)

        split.admit = split.admit[: self.max_admit]
        split.consider = split.consider[: self.max_consider]

        LOGGER.debug(
            "Categorized %d candidates: admit=%s consider=%s",
            len(known),
            [c.name for c in split.admit],
            [c.name for c in split.consider],
        )
        return split

    def _sanitize(
        self,
        candidates: Iterable[ScoredCandidate],
        catalog: Catalog,
        diagnostics: list[Diagnostic],
    ) -> list[ScoredCandidate]:
        """Drop unknown names, clamp confidences and collapse duplicates."""
        best: dict[str, ScoredCandidate] = {}

        for candidate in candidates:
            if candidate.name not in catalog:
                LOGGER.debug("Ignoring candidate outside the catalog: %s", candidate.name)
                continue

            confidence = candidate.confidence
            if math.isnan(confidence):
                confidence = 0.0
            clamped = min(1.0, max(0.0, confidence))
            if clamped != candidate.confidence:
                diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.SCORE_CONFIDENCE_CLAMPED,
                        message=(
                            f"Confidence {candidate.confidence} for '{candidate.name}' "
                            f"clamped to {clamped}"
                        ),
                        subject=candidate.name,
                    )
                )
                candidate = candidate.model_copy(update={"confidence": clamped})

            previous = best.get(candidate.name)
            if previous is None:
                best[candidate.name] = candidate
                continue

            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.SCORE_DUPLICATE_CANDIDATE,
                    message=f"Candidate '{candidate.name}' scored more than once",
                    subject=candidate.name,
                )
            )
            if candidate.confidence > previous.confidence:
                # Replace in place so the first-seen position is kept.
                best[candidate.name] = candidate

        return list(best.values())


__all__ = ["Categorizer", "TierSplit"]
