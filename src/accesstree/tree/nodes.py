"""Access tree node model.

An access tree is a sparse tree over path segments.  Every position is one
of two variants:

- :class:`Leaf` -- a scalar level.  The segment and everything below it
  inherit the level unless a higher-priority tree says otherwise.
- :class:`Branch` -- named children plus two optional modifiers:

  - ``self_level`` (the ``"."`` entry): access to the directory entry itself.
  - ``default_level`` (the ``"*"`` entry): access for any child that is not
    named explicitly.

A principal's tree is an :class:`AccessTree` whose root is always a Branch
(the path root ``/``).  A player's tree may also carry an ordered list of
explicit group memberships, persisted under the reserved ``"?"`` key.

Raw form
--------
Trees round-trip through plain nested mappings, which is what the stores
persist::

    {
        ".": 1,
        "*": 1,
        "data": -1,
        "players": {".": 1, "*": -1, "aedil": 5},
        "?": ["Arch_docs"],
    }

An int is a Leaf, a mapping is a Branch.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from accesstree.tree.levels import AccessLevel

SELF_KEY = "."
DEFAULT_KEY = "*"
GROUPS_KEY = "?"

RESERVED_KEYS: frozenset[str] = frozenset([SELF_KEY, DEFAULT_KEY, GROUPS_KEY])


@dataclass(frozen=True)
class Leaf:
    """A scalar access level covering a whole subtree."""

    level: AccessLevel

    def __post_init__(self) -> None:
        if not AccessLevel(self.level).is_storable:
            raise ValueError("NO_ACCESS cannot be stored in an access tree")
        object.__setattr__(self, "level", AccessLevel(self.level))

    def clone(self) -> Leaf:
        return self


@dataclass
class Branch:
    """An interior node: named children plus ``.`` / ``*`` modifiers.

    Attributes
    ----------
    children:
        Maps a path segment name to the child node.  Children are owned
        exclusively by their parent; nodes are never shared between trees.
    self_level:
        Level of the directory entry itself (``"."``), or ``None``.
    default_level:
        Level for unnamed children (``"*"``), or ``None``.
    """

    children: dict[str, AccessNode] = field(default_factory=dict)
    self_level: AccessLevel | None = None
    default_level: AccessLevel | None = None

    # ------------------------------------------------------------------
    # Entry view: "." and "*" behave like entries alongside the children
    # ------------------------------------------------------------------

    def get_entry(self, key: str) -> AccessNode | None:
        """Return the entry at *key*, exposing modifiers as leaves."""
        if key == SELF_KEY:
            return Leaf(self.self_level) if self.self_level is not None else None
        if key == DEFAULT_KEY:
            return Leaf(self.default_level) if self.default_level is not None else None
        return self.children.get(key)

    def set_entry(self, key: str, node: AccessNode) -> None:
        """Store *node* at *key*.  Modifiers only accept leaves."""
        if key in (SELF_KEY, DEFAULT_KEY):
            if not isinstance(node, Leaf):
                raise TypeError(f"{key!r} modifier must be a scalar level")
            if key == SELF_KEY:
                self.self_level = node.level
            else:
                self.default_level = node.level
            return
        self.children[key] = node

    def delete_entry(self, key: str) -> bool:
        """Remove the entry at *key*.  Returns False if nothing was there."""
        if key == SELF_KEY:
            present = self.self_level is not None
            self.self_level = None
            return present
        if key == DEFAULT_KEY:
            present = self.default_level is not None
            self.default_level = None
            return present
        return self.children.pop(key, None) is not None

    def entry_keys(self) -> list[str]:
        keys = list(self.children)
        if self.self_level is not None:
            keys.append(SELF_KEY)
        if self.default_level is not None:
            keys.append(DEFAULT_KEY)
        return keys

    @property
    def entry_count(self) -> int:
        return len(self.entry_keys())

    @property
    def is_empty(self) -> bool:
        return not self.children and self.self_level is None and self.default_level is None

    def folded_level(self) -> AccessLevel | None:
        """Return the scalar this branch is equivalent to, if any.

        Only a branch with no named children whose ``.`` and ``*`` agree is
        exactly equivalent to a Leaf of that level.
        """
        if self.children:
            return None
        if self.self_level is not None and self.self_level == self.default_level:
            return self.self_level
        return None

    def clone(self) -> Branch:
        return Branch(
            children={name: child.clone() for name, child in self.children.items()},
            self_level=self.self_level,
            default_level=self.default_level,
        )


AccessNode = Union[Leaf, Branch]


@dataclass
class AccessTree:
    """The tree owned by one principal, rooted at ``/``."""

    root: Branch = field(default_factory=Branch)
    groups: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the tree carries neither paths nor memberships."""
        return self.root.is_empty and not self.groups

    def clone(self) -> AccessTree:
        return AccessTree(root=self.root.clone(), groups=list(self.groups))

    # ------------------------------------------------------------------
    # Raw round-trip
    # ------------------------------------------------------------------

    def to_raw(self) -> dict[str, object]:
        """Return the nested-mapping form of this tree."""
        raw = node_to_raw(self.root)
        assert isinstance(raw, dict)
        if self.groups:
            raw[GROUPS_KEY] = list(self.groups)
        return raw

    @classmethod
    def from_raw(cls, raw: object, owner: str = "<tree>") -> AccessTree:
        """Build a tree from its nested-mapping form.

        Raises
        ------
        ValueError
            If *raw* is not a mapping or contains malformed entries.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Tree for {owner!r} must be a mapping, got {type(raw).__name__}")

        groups_raw = raw.get(GROUPS_KEY, [])
        if groups_raw is None:
            groups_raw = []
        if not isinstance(groups_raw, list) or not all(isinstance(g, str) for g in groups_raw):
            raise ValueError(f"Group list for {owner!r} must be a list of names")

        body = {k: v for k, v in raw.items() if k != GROUPS_KEY}
        root = node_from_raw(body, path="/")
        assert isinstance(root, Branch)
        return cls(root=root, groups=list(groups_raw))


def node_to_raw(node: AccessNode) -> int | dict[str, object]:
    match node:
        case Leaf(level=level):
            return int(level)
        case Branch():
            raw: dict[str, object] = {}
            if node.self_level is not None:
                raw[SELF_KEY] = int(node.self_level)
            if node.default_level is not None:
                raw[DEFAULT_KEY] = int(node.default_level)
            for name, child in node.children.items():
                raw[name] = node_to_raw(child)
            return raw
    raise TypeError(f"Not an access node: {node!r}")


def node_from_raw(raw: object, path: str) -> AccessNode:
    if isinstance(raw, dict):
        branch = Branch()
        for key, value in raw.items():
            key = str(key)
            if key in (SELF_KEY, DEFAULT_KEY):
                level = _level_from_raw(value, f"{path}{key}")
                if key == SELF_KEY:
                    branch.self_level = level
                else:
                    branch.default_level = level
            elif key == GROUPS_KEY:
                raise ValueError(f"Group list is only allowed at the tree root, found at {path!r}")
            else:
                branch.children[key] = node_from_raw(value, f"{path}{key}/")
        return branch
    return Leaf(_level_from_raw(raw, path.rstrip("/") or "/"))


def _level_from_raw(value: object, where: str) -> AccessLevel:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Access level at {where!r} must be an integer, got {value!r}")
    try:
        level = AccessLevel(value)
    except ValueError:
        raise ValueError(f"Unknown access level {value!r} at {where!r}") from None
    if not level.is_storable:
        raise ValueError(f"NO_ACCESS (0) cannot be stored, found at {where!r}")
    return level


__all__ = [
    "AccessNode",
    "AccessTree",
    "Branch",
    "DEFAULT_KEY",
    "GROUPS_KEY",
    "Leaf",
    "RESERVED_KEYS",
    "SELF_KEY",
    "node_from_raw",
    "node_to_raw",
]
