"""Load skill content payloads from markdown files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONTENT_FILENAME = "SKILL.md"


@dataclass
class SkillContent:
    """Skill body with its frontmatter stripped."""

    name: str
    path: Path
    body: str
    metadata: dict[str, Any] = field(default_factory=dict)


def _split_frontmatter(path: Path, content: str) -> tuple[dict[str, Any], str]:
    if not content.startswith("---"):
        return {}, content
    parts = content.split("---", 2)
    if len(parts) < 3:
        LOGGER.warning("Malformed frontmatter in %s", path)
        return {}, content
    try:
        metadata = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError as exc:
        LOGGER.warning("Unparseable frontmatter in %s: %s", path, exc)
        return {}, parts[2]
    if not isinstance(metadata, dict):
        metadata = {}
    return metadata, parts[2]


class SkillContentLoader:
    """Resolve a skill name to its payload.

    Looks for ``<skills_dir>/<name>/SKILL.md`` first, then
    ``<skills_dir>/<name>.md``.
    """

    def __init__(self, skills_dir: Path) -> None:
        self._skills_dir = Path(skills_dir)

    def candidates(self, name: str) -> list[Path]:
        return [
            self._skills_dir / name / CONTENT_FILENAME,
            self._skills_dir / f"{name}.md",
        ]

    def load(self, name: str) -> SkillContent | None:
        """Load one skill payload.

        Args:
            name: Catalog name of the skill.

        Returns:
            SkillContent, or None when no payload file exists or it is unreadable.
        """
        for path in self.candidates(name):
            if not path.is_file():
                continue
            try:
                raw = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.warning("Failed to read skill file %s: %s", path, exc)
                return None
            metadata, body = _split_frontmatter(path, raw)
            return SkillContent(name=name, path=path, body=body.strip(), metadata=metadata)
        return None


__all__ = ["CONTENT_FILENAME", "SkillContent", "SkillContentLoader"]
