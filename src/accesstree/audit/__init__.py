"""Audit trail package for accesstree.

Provides the append-only JSONL logger, the AuditLog implementations used
by the engine, and search over recorded events.
"""
from __future__ import annotations

from accesstree.audit.access_log import (
    EVENT_DENIED,
    EVENT_GRANTED,
    EVENT_REMOVED,
    EVENT_RESET,
    AccessAuditLog,
    NullAuditLog,
)
from accesstree.audit.logger import AuditLogger
from accesstree.audit.search import AuditSearch

__all__ = [
    "AccessAuditLog",
    "AuditLogger",
    "AuditSearch",
    "EVENT_DENIED",
    "EVENT_GRANTED",
    "EVENT_REMOVED",
    "EVENT_RESET",
    "NullAuditLog",
]
