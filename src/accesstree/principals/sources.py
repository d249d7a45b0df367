"""Collaborator interfaces consumed by the authorization engine.

The engine never looks up players, sessions, or affiliations itself.  It
asks an :class:`IdentityProvider` and a :class:`GroupAffiliationSource`,
and reports to an :class:`AuditLog`.  :class:`StaticDirectory` implements
the first two from a plain in-memory roster, which is what the CLI
(via the ``identity`` config section) and the tests use.

Example
-------
>>> directory = StaticDirectory()
>>> directory.add_player("aedil", level=45, affiliations=["docs"])
>>> directory.privilege_level("aedil")
45
>>> directory.affiliations_of("aedil")
['docs']
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from accesstree.tree.levels import AccessLevel


class IdentityProvider(Protocol):
    def current_principal(self) -> str | None: ...

    def working_directory(self, name: str) -> str | None: ...

    def privilege_level(self, name: str) -> int: ...

    def player_exists(self, name: str) -> bool: ...


class GroupAffiliationSource(Protocol):
    def affiliations_of(self, name: str) -> list[str]: ...


class AuditLog(Protocol):
    def record_denial(
        self, principal: str, path: str, required: AccessLevel, actual: AccessLevel
    ) -> None: ...

    def record_grant_change(
        self, acting: str, target: str, path: str, level: AccessLevel | None
    ) -> None: ...

    def record_reset(self, acting: str, target: str, previous: dict[str, object] | None) -> None: ...


@dataclass
class PlayerRecord:
    """One player known to a :class:`StaticDirectory`.

    Attributes
    ----------
    level:
        Privilege level (archwizards are 45 by default).
    affiliations:
        Raw external affiliation names, not yet mapped to group names.
    cwd:
        Current working directory, used for relative paths.
    """

    level: int = 0
    affiliations: list[str] = field(default_factory=list)
    cwd: str | None = None


class StaticDirectory:
    """In-memory IdentityProvider and GroupAffiliationSource.

    Parameters
    ----------
    players:
        Initial roster keyed by player name.
    current:
        Name returned by :meth:`current_principal`.
    """

    def __init__(
        self,
        players: dict[str, PlayerRecord] | None = None,
        current: str | None = None,
    ) -> None:
        self._players: dict[str, PlayerRecord] = dict(players or {})
        self._current = current

    def add_player(
        self,
        name: str,
        level: int = 0,
        affiliations: list[str] | None = None,
        cwd: str | None = None,
    ) -> PlayerRecord:
        record = PlayerRecord(level=level, affiliations=list(affiliations or []), cwd=cwd)
        self._players[name] = record
        return record

    def remove_player(self, name: str) -> None:
        self._players.pop(name, None)

    def set_current(self, name: str | None) -> None:
        self._current = name

    def players(self) -> list[str]:
        return sorted(self._players)

    # IdentityProvider

    def current_principal(self) -> str | None:
        return self._current

    def working_directory(self, name: str) -> str | None:
        record = self._players.get(name)
        return record.cwd if record is not None else None

    def privilege_level(self, name: str) -> int:
        record = self._players.get(name)
        return record.level if record is not None else 0

    def player_exists(self, name: str) -> bool:
        return name in self._players

    # GroupAffiliationSource

    def affiliations_of(self, name: str) -> list[str]:
        record = self._players.get(name)
        return list(record.affiliations) if record is not None else []


__all__ = [
    "AuditLog",
    "GroupAffiliationSource",
    "IdentityProvider",
    "PlayerRecord",
    "StaticDirectory",
]
