"""Append-only JSONL audit trail.

Every access event is written as one JSON object per line, stamped with a
UTC ISO-8601 ``timestamp`` and the ``session_id`` of the writer.  Writes
and reads share a threading.Lock so a logger can be shared by the
threads of one process.

Example
-------
>>> from pathlib import Path
>>> audit = AuditLogger(Path("/tmp/access_audit.jsonl"))
>>> audit.log("access_denied", {"principal": "frogo", "path": "/data"})
>>> audit.count()
1
"""
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only JSONL audit logger.

    Parameters
    ----------
    log_path:
        Path to the ``.jsonl`` file.  Parent directories are created on
        first write.
    session_id:
        Identifier stamped on every record.  A random UUID when omitted.
    """

    def __init__(self, log_path: Path | str, session_id: str | None = None) -> None:
        self._log_path = Path(log_path)
        self._session_id: str = session_id or str(uuid.uuid4())
        self._lock = threading.Lock()

    @property
    def log_path(self) -> Path:
        return self._log_path

    @property
    def session_id(self) -> str:
        return self._session_id

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def log(self, event: str, fields: dict[str, object] | None = None) -> dict[str, object]:
        """Append one *event* record and return it.

        ``timestamp``, ``session_id`` and ``event`` always win over keys of
        the same name in *fields*.
        """
        record: dict[str, object] = {
            **(fields or {}),
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "session_id": self._session_id,
            "event": event,
        }
        line = json.dumps(record, default=str)
        with self._lock:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._log_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        return record

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def read_all(self) -> list[dict[str, object]]:
        """Return every record in write order (``[]`` if the file is absent)."""
        return list(self._iter_records())

    def query(self, **filters: object) -> list[dict[str, object]]:
        """Return records whose top-level fields equal every given filter."""
        return [
            record
            for record in self._iter_records()
            if all(record.get(key) == value for key, value in filters.items())
        ]

    def count(self) -> int:
        return sum(1 for _ in self._iter_records())

    def last_n(self, n: int) -> list[dict[str, object]]:
        """Return at most the *n* most recent records."""
        if n <= 0:
            return []
        return self.read_all()[-n:]

    def _iter_records(self) -> Iterator[dict[str, object]]:
        if not self._log_path.exists():
            return
        with self._lock:
            with self._log_path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed audit record at %s:%d", self._log_path, number)


__all__ = ["AuditLogger"]
