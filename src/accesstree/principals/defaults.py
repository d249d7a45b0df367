"""Seed content for a new access database.

Three raw maps live here:

- :data:`BOOTSTRAP_MAP` is the minimal map in force before a stored
  database is loaded.  It denies everything except what ``root`` needs to
  read the database itself.
- :data:`DEFAULT_SCHEMA` is the global default tree (owned by ``*``).
  Resetting ``*`` restores exactly this tree.
- :data:`SEED_MAP` is the full first-run database: the default schema,
  the system principals, and the built-in arch groups.

Levels are stored as raw ints, the same form the stores persist.
"""
from __future__ import annotations

import copy

from accesstree.tree.levels import AccessLevel

_REVOKED = int(AccessLevel.REVOKED)
_READ = int(AccessLevel.READ)
_WRITE = int(AccessLevel.WRITE)
_GRANT_WRITE = int(AccessLevel.GRANT_WRITE)

BOOTSTRAP_MAP: dict[str, dict[str, object]] = {
    "*": {"*": _REVOKED},
    "root": {"dgd": {"sys": {"data": _READ}}},
}

DEFAULT_SCHEMA: dict[str, object] = {
    "*": _READ,
    "characters": _REVOKED,
    "d": {"*": _REVOKED, ".": _READ},
    "players": {"*": _REVOKED, ".": _READ},
    "data": _REVOKED,
    "tmp": _WRITE,
    "log": {"*": _READ, "Driver": _REVOKED, "old": _REVOKED},
    "banish": _REVOKED,
    "accounts": _REVOKED,
    "dgd": _REVOKED,
}

SEED_MAP: dict[str, dict[str, object]] = {
    "*": DEFAULT_SCHEMA,
    "backbone": {"*": _WRITE},
    "root": {"*": _WRITE},
    "Arch_full": {"*": _GRANT_WRITE},
    "Arch_junior": {"d": _WRITE, "players": _WRITE},
    "Arch_docs": {"help": _WRITE, "doc": _WRITE},
    "Arch_law": {"data": {"Law": _WRITE}},
    "Arch_qc": {"data": {"qc": _WRITE}},
    "Arch_web": {"data": {"www_docs": _WRITE}},
}


def bootstrap_map() -> dict[str, dict[str, object]]:
    """Return a private copy of :data:`BOOTSTRAP_MAP`."""
    return copy.deepcopy(BOOTSTRAP_MAP)


def default_schema() -> dict[str, object]:
    """Return a private copy of :data:`DEFAULT_SCHEMA`."""
    return copy.deepcopy(DEFAULT_SCHEMA)


def seed_map() -> dict[str, dict[str, object]]:
    """Return a private copy of :data:`SEED_MAP`."""
    return copy.deepcopy(SEED_MAP)


__all__ = [
    "BOOTSTRAP_MAP",
    "DEFAULT_SCHEMA",
    "SEED_MAP",
    "bootstrap_map",
    "default_schema",
    "seed_map",
]
