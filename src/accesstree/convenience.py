"""Convenience API for accesstree: 3-line quickstart.

Example
-------
::

    from accesstree import AccessGovernor
    governor = AccessGovernor(players={"aedil": 45, "frogo": 1})
    governor.grant("aedil", "frogo", "/d/Elandar", "write")
    print(governor.check("/d/Elandar/castle.c", "frogo", "write"))  # True

"""
from __future__ import annotations

from typing import Any

from accesstree.engine.results import GrantResult, MembershipResult
from accesstree.tree.levels import AccessLevel


class AccessGovernor:
    """Zero-config access control for the 80% use case.

    Wraps AuthorizationService over a seeded in-memory database and a
    static player roster.  Nothing touches the filesystem.

    Parameters
    ----------
    players:
        Optional ``{name: privilege_level}`` roster.

    Example
    -------
    ::

        governor = AccessGovernor()
        governor.add_player("frogo")
        governor.check("/players/frogo/workroom.c", "frogo", "write")  # True
    """

    def __init__(self, players: dict[str, int] | None = None) -> None:
        from accesstree.engine.service import AuthorizationService
        from accesstree.principals.sources import StaticDirectory
        from accesstree.storage.store import InMemoryStore

        self._directory = StaticDirectory()
        for name, level in (players or {}).items():
            self._directory.add_player(name, level=level)
        self._store = InMemoryStore()
        self._service = AuthorizationService(
            store=self._store, identity=self._directory, affiliations=self._directory
        )

    def add_player(self, name: str, level: int = 0, affiliations: list[str] | None = None) -> None:
        """Register a player so it can be granted access and join groups."""
        self._directory.add_player(name, level=level, affiliations=affiliations)

    def check(self, path: str, principal: str, level: str | int | AccessLevel = "read") -> bool:
        """Return True if *principal* holds at least *level* at *path*."""
        return self._service.check(path, principal, AccessLevel.parse(level)).allowed

    def level_of(self, path: str, principal: str) -> AccessLevel:
        """Return the effective level of *principal* at *path*."""
        return self._service.effective_level(path, principal).level

    def grant(
        self, actor: str, target: str, path: str, level: str | int | AccessLevel
    ) -> GrantResult:
        """Grant *target* *level* at *path* on behalf of *actor*."""
        return self._service.grant(actor, target, path, AccessLevel.parse(level))

    def join(self, actor: str, target: str, group: str) -> MembershipResult:
        """Add *target* to *group* on behalf of *actor*."""
        return self._service.set_group_membership(actor, target, group, add=True)

    @property
    def service(self) -> Any:
        """The underlying AuthorizationService instance."""
        return self._service

    def __repr__(self) -> str:
        return f"AccessGovernor(players={len(self._directory.players())})"
