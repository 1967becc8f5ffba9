"""Per-conversation session ledger.

The ledger records every skill name emitted in a conversation so that a skill
is never activated twice. It is read once at the start of a turn and written
once at the end. Reads never fail: a missing or corrupt ledger means "nothing
activated yet". Writes replace the whole file atomically; overlapping writers
for the same conversation resolve as last-writer-wins.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from skillgate.core.files import atomic_write_json, read_json
from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.models import Diagnostic

LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LedgerState(BaseModel):
    """Persisted ledger document."""

    activated: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class LedgerStore(Protocol):
    """Storage interface consumed by the activation service."""

    def read(self, conversation_id: str) -> list[str]:
        """Return activated names in insertion order (empty when unknown)."""
        ...

    def read_checked(self, conversation_id: str) -> tuple[list[str], Diagnostic | None]:
        """Like :meth:`read`, also reporting why the ledger was ignored."""
        ...

    def write(self, conversation_id: str, activated: Iterable[str]) -> None:
        """Replace the ledger with ``activated``."""
        ...

    def clear(self, conversation_id: str) -> None:
        """Forget a conversation."""
        ...


def merge_activated(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Append ``new`` to ``existing`` keeping first-insertion order."""
    return list(dict.fromkeys([*existing, *new]))


class FileLedgerStore:
    """One JSON file per conversation under ``state_dir``."""

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = Path(state_dir)

    def path_for(self, conversation_id: str) -> Path:
        safe = _UNSAFE_CHARS.sub("_", conversation_id.strip())[:100] or "default"
        if safe != conversation_id:
            digest = hashlib.sha256(conversation_id.encode("utf-8")).hexdigest()[:10]
            safe = f"{safe}-{digest}"
        return self._state_dir / f"{safe}.json"

    def load(self, conversation_id: str) -> LedgerState | None:
        """Return the stored document, ``None`` when missing.

        Raises:
            ValueError: If the file exists but is not a valid ledger.
        """
        path = self.path_for(conversation_id)
        if not path.exists():
            return None
        try:
            return LedgerState.model_validate(read_json(path))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"unreadable ledger {path}: {exc}") from exc

    def read_checked(self, conversation_id: str) -> tuple[list[str], Diagnostic | None]:
        try:
            state = self.load(conversation_id)
        except ValueError as exc:
            LOGGER.warning("Ignoring session ledger for %s: %s", conversation_id, exc)
            return [], Diagnostic(
                code=DiagnosticCode.LEDGER_CORRUPT,
                message=str(exc),
                subject=conversation_id,
            )
        return (list(dict.fromkeys(state.activated)) if state else []), None

    def read(self, conversation_id: str) -> list[str]:
        activated, _ = self.read_checked(conversation_id)
        return activated

    def write(self, conversation_id: str, activated: Iterable[str]) -> None:
        created_at = _utcnow()
        try:
            previous = self.load(conversation_id)
        except ValueError:
            previous = None
        if previous is not None:
            created_at = previous.created_at

        state = LedgerState(
            activated=list(dict.fromkeys(activated)),
            created_at=created_at,
            updated_at=_utcnow(),
        )
        atomic_write_json(self.path_for(conversation_id), state.model_dump(mode="json"))
        LOGGER.debug("Ledger for %s now holds %s", conversation_id, state.activated)

    def clear(self, conversation_id: str) -> None:
        self.path_for(conversation_id).unlink(missing_ok=True)


class InMemoryLedgerStore:
    """Process-local ledger store for tests and embedding."""

    def __init__(self) -> None:
        self._states: dict[str, list[str]] = {}

    def read(self, conversation_id: str) -> list[str]:
        return list(self._states.get(conversation_id, []))

    def read_checked(self, conversation_id: str) -> tuple[list[str], Diagnostic | None]:
        return self.read(conversation_id), None

    def write(self, conversation_id: str, activated: Iterable[str]) -> None:
        self._states[conversation_id] = list(dict.fromkeys(activated))

    def clear(self, conversation_id: str) -> None:
        self._states.pop(conversation_id, None)


__all__ = [
    "FileLedgerStore",
    "InMemoryLedgerStore",
    "LedgerState",
    "LedgerStore",
    "merge_activated",
]
