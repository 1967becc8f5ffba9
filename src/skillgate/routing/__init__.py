"""Scoring backends and the score cache."""

from skillgate.routing.cache import ScoreCache, make_cache_key
from skillgate.routing.keyword import KeywordScorer
from skillgate.routing.llm import LLMScorer, LLMScorerError
from skillgate.routing.scoring import Scorer, ScorerUnavailableError

__all__ = [
    "KeywordScorer",
    "LLMScorer",
    "LLMScorerError",
    "ScoreCache",
    "Scorer",
    "ScorerUnavailableError",
    "make_cache_key",
]
