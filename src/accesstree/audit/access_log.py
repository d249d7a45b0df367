"""AuditLog implementations for access decisions and grant changes.

Two events are recorded by :class:`AccessAuditLog`:

- ``access_denied``: a check fell short of the required level;
- ``access_granted`` / ``access_removed``: an actor changed a player's tree.

Changes to group trees are not audited, and neither is anything done to or
by a fake user.
"""
from __future__ import annotations

from pathlib import Path

from accesstree.audit.logger import AuditLogger
from accesstree.principals.classification import PrincipalKind, PrincipalRules
from accesstree.tree.levels import AccessLevel

EVENT_DENIED = "access_denied"
EVENT_GRANTED = "access_granted"
EVENT_REMOVED = "access_removed"
EVENT_RESET = "access_reset"


class AccessAuditLog(AuditLogger):
    """JSONL-backed AuditLog.

    Parameters
    ----------
    log_path:
        Path to the ``.jsonl`` file.
    session_id:
        Identifier stamped on every record.
    rules:
        Principal rules used to skip group and fake-user events.
    """

    def __init__(
        self,
        log_path: Path | str,
        session_id: str | None = None,
        rules: PrincipalRules | None = None,
    ) -> None:
        super().__init__(log_path, session_id)
        self._rules = rules or PrincipalRules()

    def record_denial(
        self, principal: str, path: str, required: AccessLevel, actual: AccessLevel
    ) -> None:
        if self._rules.is_fake(principal):
            return
        self.log(
            EVENT_DENIED,
            {
                "principal": principal,
                "path": path,
                "required": AccessLevel(required).display_name,
                "actual": AccessLevel(actual).display_name,
            },
        )

    def record_grant_change(
        self, acting: str, target: str, path: str, level: AccessLevel | None
    ) -> None:
        if self._rules.kind_of(target) is not PrincipalKind.PLAYER:
            return
        if level is None or level == AccessLevel.NO_ACCESS:
            self.log(EVENT_REMOVED, {"actor": acting, "principal": target, "path": path})
            return
        self.log(
            EVENT_GRANTED,
            {
                "actor": acting,
                "principal": target,
                "path": path,
                "level": AccessLevel(level).display_name,
            },
        )

    def record_reset(self, acting: str, target: str, previous: dict[str, object] | None) -> None:
        """Record that *target*'s tree was reset, keeping the previous tree."""
        self.log(EVENT_RESET, {"actor": acting, "principal": target, "previous": previous})


class NullAuditLog:
    """AuditLog that records nothing."""

    def record_denial(
        self, principal: str, path: str, required: AccessLevel, actual: AccessLevel
    ) -> None:
        return None

    def record_grant_change(
        self, acting: str, target: str, path: str, level: AccessLevel | None
    ) -> None:
        return None

    def record_reset(self, acting: str, target: str, previous: dict[str, object] | None) -> None:
        return None


__all__ = [
    "AccessAuditLog",
    "EVENT_DENIED",
    "EVENT_GRANTED",
    "EVENT_REMOVED",
    "EVENT_RESET",
    "NullAuditLog",
]
