"""Tests for the score cache."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from skillgate.routing.cache import ScoreCache, make_cache_key
from skillgate.skills.models import ScoredCandidate


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path: Path, clock: FakeClock) -> ScoreCache:
    return ScoreCache(tmp_path / "cache", ttl_seconds=60, sweep_interval_seconds=30, clock=clock)


CANDIDATES = [ScoredCandidate(name="a", confidence=0.7, reason="kw")]


def test_key_depends_on_every_part() -> None:
    base = make_cache_key("hello", "fp1", "llm")
    assert make_cache_key(" hello ", "fp1", "llm") == base
    assert make_cache_key("hello", "fp2", "llm") != base
    assert make_cache_key("hello", "fp1", "keyword") != base
    assert make_cache_key("hello!", "fp1", "llm") != base


def test_put_then_get(cache: ScoreCache) -> None:
    assert cache.get("k") is None

    cache.put("k", CANDIDATES)

    assert cache.get("k") == CANDIDATES


def test_entries_expire_after_ttl(cache: ScoreCache, clock: FakeClock) -> None:
    cache.put("k", CANDIDATES)

    clock.now += 59
    assert cache.get("k") == CANDIDATES
    clock.now += 1
    assert cache.get("k") is None


def test_put_sweeps_at_most_once_per_interval(cache: ScoreCache, clock: FakeClock) -> None:
    cache.put("old", CANDIDATES)
    clock.now += 61
    # First put after 61s is past the sweep interval: "old" is swept.
    cache.put("new", CANDIDATES)

    document = json.loads(cache.path.read_text(encoding="utf-8"))
    assert set(document["entries"]) == {"new"}
    assert document["last_sweep"] == clock.now


def test_expired_entries_survive_until_next_sweep(cache: ScoreCache, clock: FakeClock) -> None:
    cache.put("first", CANDIDATES)  # sweeps, last_sweep = 1000
    clock.now += 20
    cache.put("second", CANDIDATES)  # within interval, no sweep

    document = json.loads(cache.path.read_text(encoding="utf-8"))
    assert set(document["entries"]) == {"first", "second"}


def test_explicit_sweep(cache: ScoreCache, clock: FakeClock) -> None:
    cache.put("a", CANDIDATES)
    clock.now += 30
    cache.put("b", CANDIDATES)
    clock.now += 40

    assert cache.sweep() == 1
    assert cache.get("a") is None
    assert cache.get("b") == CANDIDATES


def test_sweep_without_file_creates_nothing(cache: ScoreCache) -> None:
    assert cache.sweep() == 0
    assert not cache.path.exists()


def test_corrupt_file_is_treated_as_empty(cache: ScoreCache) -> None:
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text("not json", encoding="utf-8")

    assert cache.get("k") is None
    cache.put("k", CANDIDATES)
    assert cache.get("k") == CANDIDATES


def test_undecodable_file_is_treated_as_empty(cache: ScoreCache) -> None:
    cache.path.parent.mkdir(parents=True)
    cache.path.write_bytes(b"\xff\xfe{}")

    assert cache.get("k") is None
    cache.put("k", CANDIDATES)
    assert cache.get("k") == CANDIDATES


def test_unexpected_layout_is_treated_as_empty(cache: ScoreCache) -> None:
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text('{"entries": [], "last_sweep": "soon"}', encoding="utf-8")

    assert cache.get("k") is None
    cache.put("k", CANDIDATES)
    assert cache.get("k") == CANDIDATES


def test_malformed_entry_is_a_miss(cache: ScoreCache, clock: FakeClock) -> None:
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(
        json.dumps({"entries": {"k": {"stored_at": clock.now, "candidates": [{"nope": 1}]}}}),
        encoding="utf-8",
    )

    assert cache.get("k") is None
