"""Display package for accesstree."""
from __future__ import annotations

from accesstree.display.renderer import TreeRenderer, tree_rows

__all__ = [
    "TreeRenderer",
    "tree_rows",
]
