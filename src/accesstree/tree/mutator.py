"""In-place grant and revoke on a single access tree.

TreeMutator keeps trees minimal as it writes.  A Leaf met on the way down
is split into a Branch whose ``.`` and ``*`` both carry the old level, so
the split changes nothing the evaluator can observe.  On the way back a
branch that has become redundant is compacted:

- a non-root Branch with no named children whose ``.`` and ``*`` agree is
  folded into a Leaf of that level;
- an empty non-root Branch is deleted, and the check repeats on its parent.

The root is never folded or deleted.  Callers are responsible for
persisting the tree afterwards.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import DEFAULT_KEY, SELF_KEY, AccessTree, Branch, Leaf

logger = logging.getLogger(__name__)


class RevokeOutcome(str, Enum):
    """Result of :meth:`TreeMutator.revoke`."""

    NOT_FOUND = "not_found"
    REMOVED = "removed"
    PRINCIPAL_REMOVED = "principal_removed"


class TreeMutator:
    """Grants and revokes entries in one principal's tree."""

    def grant(self, tree: AccessTree, segments: Sequence[str], level: AccessLevel) -> AccessTree:
        """Set *level* at *segments*, splitting and compacting as needed.

        Parameters
        ----------
        tree:
            The tree to mutate in place.
        segments:
            Resolved, non-empty path segments.  Only the final segment may
            be ``*`` (set the branch default) or ``.`` (set the branch's own
            level).
        level:
            A storable level (anything but NO_ACCESS; use :meth:`revoke`).

        Returns
        -------
        AccessTree
            The same *tree*, for chaining.
        """
        level = AccessLevel(level)
        if not segments:
            raise ValueError("Cannot grant on an empty path")
        if not level.is_storable:
            raise ValueError("NO_ACCESS is not a grantable level; use revoke()")

        chain = self._descend_creating(tree.root, segments[:-1])
        node = chain[-1][2]
        key = segments[-1]

        if key == DEFAULT_KEY:
            for name in [n for n, child in node.children.items() if child == Leaf(level)]:
                del node.children[name]
            node.default_level = level
        elif key == SELF_KEY:
            node.self_level = level
        elif node.default_level == level:
            node.delete_entry(key)
            self._compact(chain)
        else:
            node.children[key] = Leaf(level)

        logger.debug("Granted %s at /%s", level.display_name, "/".join(segments))
        return tree

    def revoke(self, tree: AccessTree, segments: Sequence[str]) -> RevokeOutcome:
        """Remove the explicit entry at *segments*.

        Returns
        -------
        RevokeOutcome
            NOT_FOUND when nothing is stored there (the tree is untouched),
            PRINCIPAL_REMOVED when the tree is left with neither paths nor
            memberships, REMOVED otherwise.
        """
        if not segments:
            return RevokeOutcome.NOT_FOUND

        chain: list[tuple[Branch | None, str | None, Branch]] = [(None, None, tree.root)]
        node = tree.root
        for segment in segments[:-1]:
            child = node.children.get(segment)
            if not isinstance(child, Branch):
                return RevokeOutcome.NOT_FOUND
            chain.append((node, segment, child))
            node = child

        if not node.delete_entry(segments[-1]):
            return RevokeOutcome.NOT_FOUND

        self._compact(chain)
        logger.debug("Revoked /%s", "/".join(segments))

        if tree.is_empty:
            return RevokeOutcome.PRINCIPAL_REMOVED
        return RevokeOutcome.REMOVED

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _descend_creating(
        self, root: Branch, segments: Sequence[str]
    ) -> list[tuple[Branch | None, str | None, Branch]]:
        """Walk to the branch at *segments*, creating or splitting on the way.

        Returns the visited chain as ``(parent, key, branch)`` triples,
        starting with ``(None, None, root)``.
        """
        chain: list[tuple[Branch | None, str | None, Branch]] = [(None, None, root)]
        node = root
        for segment in segments:
            child = node.children.get(segment)
            match child:
                case Branch():
                    pass
                case Leaf(level=level):
                    child = Branch(self_level=level, default_level=level)
                    node.children[segment] = child
                case _:
                    child = Branch()
                    node.children[segment] = child
            chain.append((node, segment, child))
            node = child
        return chain

    def _compact(self, chain: list[tuple[Branch | None, str | None, Branch]]) -> None:
        """Fold or delete redundant branches from the bottom of *chain* up."""
        for parent, key, branch in reversed(chain):
            if parent is None or key is None:
                return
            if branch.is_empty:
                del parent.children[key]
                continue
            folded = branch.folded_level()
            if folded is not None:
                parent.children[key] = Leaf(folded)
            return


__all__ = [
    "RevokeOutcome",
    "TreeMutator",
]
