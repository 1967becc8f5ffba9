"""File helpers shared by the ledger and the score cache."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def atomic_write_json(path: Path, payload: Any) -> None:
    """Write JSON so readers see either the old file or the complete new one.

    The payload goes to a temporary file in the target directory, is flushed
    to disk, then renamed over ``path``.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> Any:
    """Read and decode a JSON file; errors propagate to the caller."""

    return json.loads(path.read_text(encoding="utf-8"))


__all__ = ["atomic_write_json", "read_json"]
