"""Shared plumbing for the JSON-file repositories.

Each repository owns one file holding a JSON list. Every
read-check-write sequence runs under the store's re-entrant lock and
the file is replaced atomically, so a reader never sees a half-written
list. The lock is per process: two processes sharing a data directory
are not coordinated.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from bazaar.domain.model.value_objects import Money


class JsonFileStore:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self.lock = threading.RLock()
        self._ensure_file()

    def load_raw(self) -> list[dict]:
        with self.lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist_raw(self, records: list[dict]) -> None:
        with self.lock:
            tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
            tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


# --- Field codecs -------------------------------------------------------------


def money_to_raw(money: Money | None) -> dict | None:
    if money is None:
        return None
    return {"amount": str(money.amount), "currency": money.currency}


def money_from_raw(raw: dict | None) -> Money | None:
    if raw is None:
        return None
    return Money(Decimal(raw["amount"]), raw.get("currency", "USD"))


def time_to_raw(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def time_from_raw(raw: str | None) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(raw)
