"""Flattening of prioritized trees into one effective view.

TreeMerger folds lower-priority trees into a target tree wherever the
target does not already answer.  It is an inspection tool: the result
describes what a principal can do, but authorization decisions always go
through :class:`~accesstree.tree.evaluator.TreeEvaluator`.
"""
from __future__ import annotations

from typing import Sequence

from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import DEFAULT_KEY, AccessTree, Branch, Leaf


class TreeMerger:
    """Merges trees in priority order into a fresh Branch."""

    def merge(self, target: Branch, source: Branch, inherited: AccessLevel | None = None) -> Branch:
        """Merge *source* into *target* in place and return *target*.

        Parameters
        ----------
        target:
            The higher-priority branch.  Existing answers here are kept.
        source:
            The lower-priority branch.  Never mutated; copied entries are
            cloned.
        inherited:
            Default level in force above *target*.  When set, *source*'s
            ``*`` is not copied up, because *target* already inherits one.
        """
        next_default = target.default_level or inherited
        for key in source.entry_keys():
            if key == DEFAULT_KEY:
                continue
            mine = target.get_entry(key)
            theirs = source.get_entry(key)
            assert theirs is not None
            if mine is not None:
                if isinstance(mine, Leaf):
                    continue
                if isinstance(theirs, Leaf):
                    if mine.default_level is None:
                        mine.default_level = theirs.level
                else:
                    self.merge(mine, theirs, next_default)
            elif target.default_level is not None:
                continue
            elif isinstance(theirs, Branch):
                child = Branch()
                target.set_entry(key, child)
                self.merge(child, theirs, next_default)
            else:
                target.set_entry(key, theirs)

        if target.default_level is None and not inherited and source.default_level is not None:
            target.default_level = source.default_level
        return target

    def flatten(self, trees: Sequence[AccessTree]) -> AccessTree:
        """Merge *trees* (highest priority first) into a new tree."""
        result = AccessTree()
        for tree in trees:
            self.merge(result.root, tree.root)
        return result


__all__ = ["TreeMerger"]
