"""Tests for session ledger stores."""

from __future__ import annotations

import json
from pathlib import Path

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.session.ledger import (
    FileLedgerStore,
    InMemoryLedgerStore,
    LedgerState,
    merge_activated,
)


def test_merge_keeps_first_insertion_order() -> None:
    assert merge_activated(["a", "b"], ["c", "a", "d"]) == ["a", "b", "c", "d"]


class TestFileLedgerStore:
    def test_missing_ledger_reads_empty(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "state")

        assert store.read("conv-1") == []
        assert store.read_checked("conv-1") == ([], None)

    def test_write_then_read(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path / "state")

        store.write("conv-1", ["a", "b", "a"])

        assert store.read("conv-1") == ["a", "b"]
        document = json.loads(store.path_for("conv-1").read_text(encoding="utf-8"))
        assert document["activated"] == ["a", "b"]
        assert "created_at" in document and "updated_at" in document

    def test_rewrite_keeps_created_at(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)

        store.write("conv-1", ["a"])
        first = store.load("conv-1")
        store.write("conv-1", ["a", "b"])
        second = store.load("conv-1")

        assert first is not None and second is not None
        assert second.created_at == first.created_at
        assert second.activated == ["a", "b"]

    def test_corrupt_ledger_is_reported_and_ignored(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)
        path = store.path_for("conv-1")
        path.write_text("{broken", encoding="utf-8")

        activated, diagnostic = store.read_checked("conv-1")

        assert activated == []
        assert diagnostic is not None
        assert diagnostic.code == DiagnosticCode.LEDGER_CORRUPT
        assert store.read("conv-1") == []

    def test_undecodable_ledger_is_reported_and_ignored(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)
        store.path_for("conv-1").write_bytes(b"\xff\xfe{}")

        activated, diagnostic = store.read_checked("conv-1")

        assert activated == []
        assert diagnostic is not None
        assert diagnostic.code == DiagnosticCode.LEDGER_CORRUPT

    def test_corrupt_ledger_is_replaced_on_write(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)
        store.path_for("conv-1").write_text('{"activated": "nope"}', encoding="utf-8")

        store.write("conv-1", ["a"])

        assert store.read("conv-1") == ["a"]

    def test_unsafe_conversation_ids_are_sanitized(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)

        path = store.path_for("../../etc/passwd")
        other = store.path_for("..__etc_passwd")

        assert path.parent == tmp_path
        assert path.name.startswith(".._.._etc_passwd-")
        assert path != other
        assert store.path_for("plain-id").name == "plain-id.json"

    def test_clear(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)
        store.write("conv-1", ["a"])

        store.clear("conv-1")
        store.clear("conv-1")

        assert store.read("conv-1") == []

    def test_conversations_are_isolated(self, tmp_path: Path) -> None:
        store = FileLedgerStore(tmp_path)
        store.write("one", ["a"])
        store.write("two", ["b"])

        assert store.read("one") == ["a"]
        assert store.read("two") == ["b"]


class TestInMemoryLedgerStore:
    def test_roundtrip_and_clear(self) -> None:
        store = InMemoryLedgerStore()
        store.write("s", ["a", "a", "b"])

        assert store.read("s") == ["a", "b"]
        assert store.read_checked("s") == (["a", "b"], None)

        store.clear("s")
        assert store.read("s") == []


def test_ledger_state_defaults() -> None:
    state = LedgerState()
    assert state.activated == []
    assert state.created_at.tzinfo is not None
