"""Filtering over the access audit trail.

Example
-------
>>> from pathlib import Path
>>> search = AuditSearch(AuditLogger(Path("/tmp/access_audit.jsonl")))
>>> denials = search.by_event("access_denied")
>>> under_data = search.by_path_prefix("/data")
"""
from __future__ import annotations

from datetime import datetime, timezone

from accesstree.audit.logger import AuditLogger


class AuditSearch:
    """Search helpers over the records of an :class:`AuditLogger`.

    Parameters
    ----------
    audit:
        The audit logger whose records are searched.
    """

    def __init__(self, audit: AuditLogger) -> None:
        self._audit = audit

    def by_event(self, event: str) -> list[dict[str, object]]:
        return [r for r in self._audit.read_all() if r.get("event") == event]

    def by_principal(self, name: str) -> list[dict[str, object]]:
        """Return records where *name* is the subject or the actor."""
        return [
            r
            for r in self._audit.read_all()
            if r.get("principal") == name or r.get("actor") == name
        ]

    def by_path_prefix(self, prefix: str) -> list[dict[str, object]]:
        """Return records whose ``path`` lies at or below *prefix*.

        Matching is per segment: ``/data`` matches ``/data`` and
        ``/data/log`` but not ``/database``.
        """
        prefix = "/" + prefix.strip("/")
        results: list[dict[str, object]] = []
        for record in self._audit.read_all():
            path = record.get("path")
            if not isinstance(path, str):
                continue
            if prefix == "/" or path == prefix or path.startswith(prefix + "/"):
                results.append(record)
        return results

    def by_date_range(self, start: datetime, end: datetime) -> list[dict[str, object]]:
        """Return records with a timestamp in ``[start, end]``.

        Naive datetimes (and naive stored timestamps) are taken as UTC.
        """
        start, end = _as_utc(start), _as_utc(end)
        results: list[dict[str, object]] = []
        for record in self._audit.read_all():
            stamp = _parse_timestamp(record.get("timestamp"))
            if stamp is not None and start <= stamp <= end:
                results.append(record)
        return results


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _parse_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return _as_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


__all__ = ["AuditSearch"]
