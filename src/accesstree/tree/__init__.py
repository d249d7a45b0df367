"""Access tree package for accesstree.

Provides the tree model, path resolution, prioritized evaluation, and the
grant / revoke / merge algorithms that keep trees minimal.
"""
from __future__ import annotations

from accesstree.tree.evaluator import (
    RULED_SOURCE,
    EvaluationResult,
    SegmentStep,
    TreeEvaluator,
    step,
)
from accesstree.tree.levels import REQUIRED_GRANTER_LEVELS, AccessLevel, may_grant
from accesstree.tree.merger import TreeMerger
from accesstree.tree.mutator import RevokeOutcome, TreeMutator
from accesstree.tree.nodes import (
    DEFAULT_KEY,
    GROUPS_KEY,
    RESERVED_KEYS,
    SELF_KEY,
    AccessNode,
    AccessTree,
    Branch,
    Leaf,
)
from accesstree.tree.resolver import InvalidPathError, PathResolver, collapse_segments

__all__ = [
    "AccessLevel",
    "AccessNode",
    "AccessTree",
    "Branch",
    "DEFAULT_KEY",
    "EvaluationResult",
    "GROUPS_KEY",
    "InvalidPathError",
    "Leaf",
    "PathResolver",
    "REQUIRED_GRANTER_LEVELS",
    "RESERVED_KEYS",
    "RULED_SOURCE",
    "RevokeOutcome",
    "SELF_KEY",
    "SegmentStep",
    "TreeEvaluator",
    "TreeMerger",
    "TreeMutator",
    "collapse_segments",
    "may_grant",
    "step",
]
