"""Tests for TreeMerger."""
from __future__ import annotations

import pytest

from accesstree.tree.levels import AccessLevel
from accesstree.tree.merger import TreeMerger
from accesstree.tree.nodes import AccessTree, Branch


@pytest.fixture()
def merger() -> TreeMerger:
    return TreeMerger()


class TestFlatten:
    def test_higher_priority_entries_win(self, merger: TreeMerger) -> None:
        own = AccessTree.from_raw({"data": -1})
        group = AccessTree.from_raw({"data": 3, "tmp": 3})
        default = AccessTree.from_raw({"*": 1, "log": {"*": 1, "Driver": -1}})

        merged = merger.flatten([own, group, default])

        assert merged.to_raw() == {
            "*": 1,
            "data": -1,
            "tmp": 3,
            "log": {"*": 1, "Driver": -1},
        }

    def test_target_default_shadows_unnamed_source_entries(self, merger: TreeMerger) -> None:
        merged = merger.flatten(
            [AccessTree.from_raw({"*": 3}), AccessTree.from_raw({"*": 1, "data": -1})]
        )
        assert merged.to_raw() == {"*": 3}

    def test_source_leaf_becomes_branch_default(self, merger: TreeMerger) -> None:
        merged = merger.flatten(
            [AccessTree.from_raw({"d": {"x": 1}}), AccessTree.from_raw({"d": 3})]
        )
        assert merged.to_raw() == {"d": {"*": 3, "x": 1}}

    def test_self_levels_are_carried(self, merger: TreeMerger) -> None:
        merged = merger.flatten([AccessTree(), AccessTree.from_raw({"players": {".": 1, "*": -1}})])
        assert merged.to_raw() == {"players": {".": 1, "*": -1}}

    def test_sources_are_not_mutated_or_shared(self, merger: TreeMerger) -> None:
        default = AccessTree.from_raw({"*": 1, "log": {"*": 1, "Driver": -1}})
        snapshot = default.to_raw()
        merged = merger.flatten([AccessTree.from_raw({"tmp": 3}), default])

        assert default.to_raw() == snapshot
        assert merged.root.children["log"] is not default.root.children["log"]

    def test_flatten_nothing(self, merger: TreeMerger) -> None:
        assert merger.flatten([]).is_empty

    def test_memberships_are_not_merged(self, merger: TreeMerger) -> None:
        merged = merger.flatten([AccessTree.from_raw({"tmp": 3, "?": ["Coders"]})])
        assert merged.groups == []


class TestMerge:
    def test_inherited_default_suppresses_source_default(self, merger: TreeMerger) -> None:
        target = Branch()
        merger.merge(target, Branch(default_level=AccessLevel.READ), inherited=AccessLevel.WRITE)
        assert target.default_level is None

    def test_merge_returns_target(self, merger: TreeMerger) -> None:
        target = Branch()
        assert merger.merge(target, Branch()) is target
