"""Keyword and intent-pattern scorer.

Used directly when no LLM is configured and as the fallback when the LLM
scorer is unavailable. Each rule's ``keywords`` are matched as whole words,
case-insensitively; ``intent_patterns`` are regular expressions.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from skillgate.skills.catalog import Catalog
from skillgate.skills.models import ScoredCandidate

LOGGER = logging.getLogger(__name__)

INTENT_CONFIDENCE = 0.9
# Confidence by number of distinct keyword hits; more hits saturate at the last value.
KEYWORD_CONFIDENCE = (0.6, 0.75, 0.85)


@lru_cache(maxsize=512)
def _keyword_regex(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword.lower())}(?!\w)")


@lru_cache(maxsize=512)
def _intent_regex(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        LOGGER.warning("Invalid intent pattern %r: %s", pattern, exc)
        return None


class KeywordScorer:
    name = "keyword"

    async def score(self, prompt: str, catalog: Catalog) -> list[ScoredCandidate]:
        return self.score_sync(prompt, catalog)

    def score_sync(self, prompt: str, catalog: Catalog) -> list[ScoredCandidate]:
        text = prompt.lower()
        candidates: list[ScoredCandidate] = []

        for rule in catalog:
            hits = [kw for kw in rule.keywords if kw.strip() and _keyword_regex(kw.strip()).search(text)]
            intents = [
                pattern
                for pattern in rule.intent_patterns
                if (regex := _intent_regex(pattern)) is not None and regex.search(prompt)
            ]
            if not hits and not intents:
                continue

            confidence = 0.0
            reasons: list[str] = []
            if hits:
                confidence = KEYWORD_CONFIDENCE[min(len(hits), len(KEYWORD_CONFIDENCE)) - 1]
                reasons.append("keywords: " + ", ".join(hits))
            if intents:
                confidence = max(confidence, INTENT_CONFIDENCE)
                reasons.append("intent: " + intents[0])

            candidates.append(
                ScoredCandidate(name=rule.name, confidence=confidence, reason="; ".join(reasons))
            )

        LOGGER.debug("Keyword scorer matched %s", [(c.name, c.confidence) for c in candidates])
        return candidates


__all__ = ["INTENT_CONFIDENCE", "KEYWORD_CONFIDENCE", "KeywordScorer"]
