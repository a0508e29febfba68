"""
Style-profile store - append-only JSONL file.

One JSON object per line, newest last:

    {"id": "...", "created_at": "...", "user_id": null, "description": "...", "analysis": {...}}

Writes are O(1) appends under a lock; `fetch_latest()` returns the last
readable record.
"""

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from .errors import StoreError
from .telemetry import logger


class JSONLStyleStore:
    """Thread-safe JSONL store for analysed style profiles."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._log = logger.bind(source="store")

    def insert(self, description: str, analysis: dict, user_id: str | None = None) -> dict:
        """Append a record and return it.

        Raises:
            StoreError: the file could not be written
        """
        record = {
            "id": uuid.uuid4().hex,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "user_id": user_id,
            "description": description,
            "analysis": analysis,
        }
        line = json.dumps(record, ensure_ascii=False)
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as e:
            raise StoreError(f"Style store write failed for {self.path}: {e}") from e

        self._log.info(f"Stored style {record['id']}")
        return record

    def fetch_latest(self) -> dict | None:
        """Most recently inserted record, or None if the store is empty.

        Raises:
            StoreError: the file exists but could not be read
        """
        if not self.path.exists():
            return None
        try:
            with self._lock:
                lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StoreError(f"Style store read failed for {self.path}: {e}") from e

        for line in reversed(lines):
            if not line.strip():
                continue
            try:
                return json.loads(line)
            except json.JSONDecodeError:
                self._log.warning(f"Skipping unreadable line in {self.path.name}")
        return None


__all__ = ["JSONLStyleStore"]
