"""The in-memory access database.

AuthorizationDatabase maps principal names to their :class:`AccessTree`.
It is plain mutable state: it does no locking and no I/O.  Callers that
share one database between threads serialize access themselves (see
:class:`~accesstree.engine.service.AuthorizationService`), and stores
persist it through :meth:`snapshot` / :meth:`from_raw`.

Example
-------
>>> db = AuthorizationDatabase.seeded()
>>> db.all_groups()[:2]
['Arch_full', 'Arch_docs']
>>> db.default_tree.root.default_level
<AccessLevel.READ: 1>
"""
from __future__ import annotations

import logging
from typing import Iterator

from accesstree.principals.classification import DEFAULT_PRINCIPAL, PrincipalKind, PrincipalRules
from accesstree.principals.defaults import bootstrap_map, default_schema, seed_map
from accesstree.tree.nodes import AccessTree

logger = logging.getLogger(__name__)


class AuthorizationDatabase:
    """Principal name to access tree mapping.

    Parameters
    ----------
    trees:
        Initial trees.  The database takes ownership of them.
    rules:
        Principal naming rules (fake users, static groups).
    """

    def __init__(
        self,
        trees: dict[str, AccessTree] | None = None,
        rules: PrincipalRules | None = None,
    ) -> None:
        self._trees: dict[str, AccessTree] = dict(trees or {})
        self._rules = rules or PrincipalRules()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def bootstrap(cls, rules: PrincipalRules | None = None) -> AuthorizationDatabase:
        """Return the minimal database used before a stored one is loaded."""
        return cls.from_raw(bootstrap_map(), rules)

    @classmethod
    def seeded(cls, rules: PrincipalRules | None = None) -> AuthorizationDatabase:
        """Return the first-run database with default schema and arch groups."""
        db = cls.from_raw(seed_map(), rules)
        logger.info("Seeded access database with %d principals", len(db))
        return db

    @classmethod
    def from_raw(
        cls,
        raw: dict[str, object],
        rules: PrincipalRules | None = None,
    ) -> AuthorizationDatabase:
        """Build a database from ``{principal: raw_tree}``.

        Raises
        ------
        ValueError
            If *raw* is not a mapping or any tree is malformed.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Access map must be a mapping, got {type(raw).__name__}")
        trees = {str(name): AccessTree.from_raw(tree, owner=str(name)) for name, tree in raw.items()}
        return cls(trees, rules)

    def snapshot(self) -> dict[str, dict[str, object]]:
        """Return the raw ``{principal: raw_tree}`` form of the database."""
        return {name: tree.to_raw() for name, tree in self._trees.items()}

    def copy(self) -> AuthorizationDatabase:
        """Return a deep copy sharing no nodes with this database."""
        return AuthorizationDatabase(
            {name: tree.clone() for name, tree in self._trees.items()}, self._rules
        )

    # ------------------------------------------------------------------
    # Tree access
    # ------------------------------------------------------------------

    @property
    def rules(self) -> PrincipalRules:
        return self._rules

    def get(self, name: str) -> AccessTree | None:
        return self._trees.get(name)

    def ensure(self, name: str) -> AccessTree:
        """Return the tree for *name*, creating an empty one if needed."""
        tree = self._trees.get(name)
        if tree is None:
            tree = self._trees[name] = AccessTree()
        return tree

    def set_tree(self, name: str, tree: AccessTree) -> None:
        self._trees[name] = tree

    def remove(self, name: str) -> bool:
        """Delete the entry for *name*.  Returns False if there was none."""
        return self._trees.pop(name, None) is not None

    def discard_if_empty(self, name: str) -> bool:
        """Delete *name* if its tree holds neither paths nor memberships."""
        tree = self._trees.get(name)
        if tree is not None and tree.is_empty:
            del self._trees[name]
            return True
        return False

    def principals(self) -> list[str]:
        return list(self._trees)

    def __contains__(self, name: object) -> bool:
        return name in self._trees

    def __len__(self) -> int:
        return len(self._trees)

    def __iter__(self) -> Iterator[str]:
        return iter(self._trees)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthorizationDatabase):
            return NotImplemented
        return self._trees == other._trees

    # ------------------------------------------------------------------
    # Default tree
    # ------------------------------------------------------------------

    @property
    def default_tree(self) -> AccessTree:
        """The global default tree (an empty tree if none is stored)."""
        return self._trees.get(DEFAULT_PRINCIPAL) or AccessTree()

    def reset_default_tree(self) -> AccessTree:
        """Restore the ``*`` tree to the seed default schema."""
        tree = AccessTree.from_raw(default_schema(), owner=DEFAULT_PRINCIPAL)
        self._trees[DEFAULT_PRINCIPAL] = tree
        logger.info("Default access tree restored to the seed schema")
        return tree

    # ------------------------------------------------------------------
    # Groups and memberships
    # ------------------------------------------------------------------

    def all_groups(self) -> list[str]:
        """Return every group: static groups first, then stored ones."""
        groups = list(self._rules.static_groups)
        for name in self._trees:
            if self._rules.kind_of(name) is not PrincipalKind.GROUP:
                continue
            if name not in groups:
                groups.append(name)
        return groups

    def memberships(self, name: str) -> list[str]:
        """Return the explicit, persisted group list of *name*."""
        tree = self._trees.get(name)
        return list(tree.groups) if tree is not None else []

    def set_memberships(self, name: str, groups: list[str]) -> None:
        """Replace the explicit group list of *name*.

        An empty list drops the memberships; an entry left with neither
        paths nor memberships is removed.
        """
        if groups:
            self.ensure(name).groups = list(groups)
            return
        tree = self._trees.get(name)
        if tree is None:
            return
        tree.groups = []
        self.discard_if_empty(name)


__all__ = ["AuthorizationDatabase"]
