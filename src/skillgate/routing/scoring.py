"""Scorer interface shared by every scoring backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from skillgate.skills.catalog import Catalog
    from skillgate.skills.models import ScoredCandidate


class ScorerUnavailableError(RuntimeError):
    """Raised when a scorer cannot produce candidates for this turn."""


class Scorer(Protocol):
    """Produce one confidence per catalog skill the backend has an opinion on.

    The engine treats the output as untrusted: unknown names are dropped and
    confidences are clamped downstream.
    """

    name: str

    async def score(self, prompt: str, catalog: Catalog) -> list[ScoredCandidate]:
        ...


__all__ = ["Scorer", "ScorerUnavailableError"]
