"""Memoized scoring results.

Entries are keyed by a hash of the request text, the catalog fingerprint and
the scorer name, and expire after a fixed TTL. Expired entries are removed by
a sweep that runs on write at most once per sweep interval. The whole cache
lives in one JSON document replaced atomically on every write.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from skillgate.core.files import atomic_write_json, read_json
from skillgate.observability.error_codes import DiagnosticCode, format_diagnostic_for_ai
from skillgate.skills.models import ScoredCandidate

LOGGER = logging.getLogger(__name__)

CACHE_FILENAME = "scores.json"


def make_cache_key(prompt: str, catalog_fingerprint: str, scorer: str) -> str:
    digest = hashlib.sha256()
    for part in (scorer, catalog_fingerprint, prompt.strip()):
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class ScoreCache:
    def __init__(
        self,
        cache_dir: Path,
        *,
        ttl_seconds: float = 3600.0,
        sweep_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(cache_dir) / CACHE_FILENAME
        self._ttl = ttl_seconds
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        empty: dict[str, Any] = {"entries": {}, "last_sweep": 0.0}
        if not self._path.exists():
            return empty
        try:
            document = read_json(self._path)
        except (OSError, ValueError) as exc:
            LOGGER.warning(
                "Score cache unreadable, starting empty",
                extra={"diagnostic": format_diagnostic_for_ai(DiagnosticCode.CACHE_CORRUPT, str(exc))},
            )
            return empty
        if not isinstance(document, dict) or not isinstance(document.get("entries"), dict):
            LOGGER.warning(
                "Score cache has an unexpected layout, starting empty",
                extra={"diagnostic": format_diagnostic_for_ai(DiagnosticCode.CACHE_CORRUPT)},
            )
            return empty
        if not isinstance(document.get("last_sweep"), int | float):
            document["last_sweep"] = 0.0
        return document

    def _is_fresh(self, entry: Any, now: float) -> bool:
        if not isinstance(entry, dict):
            return False
        stored_at = entry.get("stored_at")
        if not isinstance(stored_at, int | float):
            return False
        return now - stored_at < self._ttl

    def get(self, key: str) -> list[ScoredCandidate] | None:
        """Return cached candidates, or None when missing or expired."""
        entry = self._load()["entries"].get(key)
        if not self._is_fresh(entry, self._clock()):
            return None
        try:
            return [ScoredCandidate.model_validate(item) for item in entry["candidates"]]
        except (KeyError, TypeError, ValidationError):
            LOGGER.debug("Discarding malformed cache entry %s", key)
            return None

    def put(self, key: str, candidates: list[ScoredCandidate]) -> None:
        document = self._load()
        now = self._clock()
        document["entries"][key] = {
            "stored_at": now,
            "candidates": [c.model_dump(mode="json") for c in candidates],
        }
        if now - float(document["last_sweep"]) >= self._sweep_interval:
            self._sweep_entries(document, now)
        atomic_write_json(self._path, document)

    def sweep(self) -> int:
        """Remove expired entries now; returns how many were dropped."""
        document = self._load()
        removed = self._sweep_entries(document, self._clock())
        if self._path.exists() or document["entries"]:
            atomic_write_json(self._path, document)
        return removed

    def _sweep_entries(self, document: dict[str, Any], now: float) -> int:
        entries: dict[str, Any] = document["entries"]
        expired = [key for key, entry in entries.items() if not self._is_fresh(entry, now)]
        for key in expired:
            del entries[key]
        document["last_sweep"] = now
        if expired:
            LOGGER.debug("Swept %d expired score cache entries", len(expired))
        return len(expired)


__all__ = ["CACHE_FILENAME", "ScoreCache", "make_cache_key"]
