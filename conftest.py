from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from skillgate.core.config import Settings  # noqa: E402
from skillgate.skills.catalog import Catalog  # noqa: E402


@pytest.fixture
def make_catalog() -> Callable[[dict[str, Any]], Catalog]:
    """Build a validated catalog from a ``{name: entry}`` mapping."""

    def _make(entries: dict[str, Any]) -> Catalog:
        return Catalog.from_mapping({"skills": entries})

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary directory, keyword scoring, no cache."""

    skills_dir = tmp_path / "skills"
    skills_dir.mkdir()
    return Settings(
        catalog_path=skills_dir / "skill-rules.json",
        skills_dir=skills_dir,
        state_dir=tmp_path / "state",
        cache_dir=tmp_path / "cache",
        cache_enabled=False,
        scorer="keyword",
    )


@pytest.fixture
def write_skills(settings: Settings) -> Callable[..., Path]:
    """Write a catalog file plus one SKILL.md per entry into ``settings.skills_dir``."""

    def _write(entries: dict[str, Any], *, with_content: bool = True) -> Path:
        settings.catalog_path.write_text(
            json.dumps({"version": "1.0", "skills": entries}), encoding="utf-8"
        )
        if with_content:
            for name in entries:
                skill_dir = settings.skills_dir / name
                skill_dir.mkdir(exist_ok=True)
                (skill_dir / "SKILL.md").write_text(
                    f"---\nname: {name}\n---\n# {name}\n\nGuidance for {name}.\n",
                    encoding="utf-8",
                )
        return settings.catalog_path

    return _write
