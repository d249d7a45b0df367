"""Shared bootstrap for accesstree benchmarks."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_BENCHMARKS = _REPO_ROOT / "benchmarks"

for _path in [str(_SRC), str(_BENCHMARKS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from accesstree.engine.service import AuthorizationService
from accesstree.principals.database import AuthorizationDatabase
from accesstree.principals.sources import StaticDirectory
from accesstree.tree.levels import AccessLevel
from accesstree.tree.merger import TreeMerger
from accesstree.tree.mutator import TreeMutator
from accesstree.tree.nodes import AccessTree

__all__ = [
    "AccessLevel",
    "AccessTree",
    "AuthorizationDatabase",
    "AuthorizationService",
    "StaticDirectory",
    "TreeMerger",
    "TreeMutator",
]
