"""
Single-slot, expiring store for the scan outcome that is still waiting for
the user (resume / dismiss).

One slot only: a save overwrites whatever was there. Records older than the
TTL are dropped when read. Nothing here raises to the caller; storage errors
are logged to the status store and treated as "absent" / no-op.

PENDING_STORE_PATH env var selects the file used by FileSlot.
"""
import os
import time
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError
from paddock.services.models import PendingScanResult, StoredScannerRecord

PENDING_TTL_MS = 24 * 60 * 60 * 1000
DEFAULT_PATH = Path.home() / ".paddock" / "scanner_pending.json"


def now_ms() -> int:
    return int(time.time() * 1000)


class MemorySlot:
    """In-process slot. Share one instance between stores to simulate a restart."""

    def __init__(self, data: str | None = None):
        self.data = data

    def read(self) -> str | None:
        return self.data

    def write(self, data: str):
        self.data = data

    def delete(self):
        self.data = None


class FileSlot:
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or os.getenv("PENDING_STORE_PATH") or DEFAULT_PATH).expanduser()

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, data: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(data, encoding="utf-8")
        os.replace(tmp, self.path)

    def delete(self):
        self.path.unlink(missing_ok=True)


class PendingResultStore:
    def __init__(self, slot, status_store, clock: Callable[[], int] = now_ms, ttl_ms: int = PENDING_TTL_MS):
        self.slot = slot
        self.status = status_store
        self._clock = clock
        self.ttl_ms = ttl_ms
        self.has_pending = False
        self.pending: Optional[PendingScanResult] = None

    def save(self, result: PendingScanResult):
        record = StoredScannerRecord(result=result, stored_at_epoch_ms=self._clock())
        try:
            self.slot.write(record.model_dump_json())
        except OSError as e:
            self.status.log(f"pending_store: save failed: {e}")
            return
        self.has_pending = True
        self.pending = result
        self.status.log("pending_store: saved pending result")

    def load(self) -> Optional[PendingScanResult]:
        try:
            raw = self.slot.read()
        except UnicodeDecodeError:
            self.status.log("pending_store: corrupt record (not utf-8), clearing")
            self._delete_slot()
            return self._absent()
        except OSError as e:
            self.status.log(f"pending_store: read failed: {e}")
            return self._absent()
        if raw is None:
            return self._absent()

        try:
            record = StoredScannerRecord.model_validate_json(raw)
        except ValidationError as e:
            self.status.log(f"pending_store: corrupt record, clearing ({e.error_count()} errors)")
            self._delete_slot()
            return self._absent()

        age = self._clock() - record.stored_at_epoch_ms
        if age > self.ttl_ms:
            self.status.log(f"pending_store: record expired (age={age}ms), clearing")
            self._delete_slot()
            return self._absent()

        self.has_pending = True
        self.pending = record.result
        self.status.log("pending_store: restored pending result")
        return record.result

    def clear(self):
        self._delete_slot()
        self._absent()
        self.status.log("pending_store: cleared pending result")

    def _delete_slot(self):
        try:
            self.slot.delete()
        except OSError as e:
            self.status.log(f"pending_store: delete failed: {e}")

    def _absent(self) -> None:
        self.has_pending = False
        self.pending = None
        return None
