"""Tests for the step primitive and TreeEvaluator."""
from __future__ import annotations

import pytest

from accesstree.tree.evaluator import RULED_SOURCE, TreeEvaluator, step
from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import AccessTree, Branch, Leaf
from accesstree.tree.resolver import PathResolver

READ = AccessLevel.READ
WRITE = AccessLevel.WRITE
REVOKED = AccessLevel.REVOKED
NO_ACCESS = AccessLevel.NO_ACCESS


@pytest.fixture()
def evaluator() -> TreeEvaluator:
    return TreeEvaluator()


@pytest.fixture()
def example_tree() -> AccessTree:
    return AccessTree.from_raw(
        {
            ".": 1,
            "*": 1,
            "data": -1,
            "log": 3,
            "players": {".": 1, "*": -1, "aedil": 5, "frogo": {".": 1, "*": -1}},
        }
    )


def _segments(path: str) -> list[str]:
    return PathResolver().resolve(path)


# ---------------------------------------------------------------------------
# step
# ---------------------------------------------------------------------------


class TestStep:
    def test_exhausted_cursor_keeps_inherited(self) -> None:
        assert step(None, "x", READ, False) == (READ, None)

    def test_leaf_cursor_yields_its_level(self) -> None:
        assert step(Leaf(WRITE), "x", READ, True) == (WRITE, None)

    def test_unnamed_child_uses_branch_default(self) -> None:
        branch = Branch(default_level=REVOKED)
        assert step(branch, "x", READ, False) == (REVOKED, None)

    def test_unnamed_child_without_default_inherits(self) -> None:
        assert step(Branch(), "x", READ, False) == (READ, None)

    def test_named_leaf_child(self) -> None:
        branch = Branch(children={"x": Leaf(WRITE)}, default_level=REVOKED)
        assert step(branch, "x", READ, True) == (WRITE, None)

    def test_named_branch_child_with_nothing_inherited(self) -> None:
        child = Branch(self_level=WRITE, default_level=REVOKED)
        branch = Branch(children={"x": child})
        assert step(branch, "x", NO_ACCESS, True) == (REVOKED, child)

    def test_named_branch_child_final_uses_self(self) -> None:
        child = Branch(self_level=WRITE, default_level=REVOKED)
        branch = Branch(children={"x": child})
        assert step(branch, "x", READ, True) == (WRITE, child)

    def test_named_branch_child_not_final_uses_default(self) -> None:
        child = Branch(self_level=WRITE, default_level=REVOKED)
        branch = Branch(children={"x": child})
        assert step(branch, "x", READ, False) == (REVOKED, child)

    def test_named_branch_child_without_modifiers_inherits(self) -> None:
        child = Branch(children={"y": Leaf(WRITE)})
        branch = Branch(children={"x": child})
        assert step(branch, "x", READ, True) == (READ, child)


# ---------------------------------------------------------------------------
# Single-tree evaluation
# ---------------------------------------------------------------------------


class TestExampleTree:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/", AccessLevel.READ),
            ("/characters", AccessLevel.READ),
            ("/data/notes", AccessLevel.REVOKED),
            ("/log/driver", AccessLevel.WRITE),
            ("/players", AccessLevel.READ),
            ("/players/aedil/com/access.c", AccessLevel.GRANT_GRANT),
            ("/players/dios/workroom.c", AccessLevel.REVOKED),
            ("/players/frogo", AccessLevel.READ),
            ("/players/frogo/workroom.c", AccessLevel.REVOKED),
        ],
    )
    def test_levels(
        self,
        evaluator: TreeEvaluator,
        example_tree: AccessTree,
        path: str,
        expected: AccessLevel,
    ) -> None:
        result = evaluator.evaluate(_segments(path), [("*", example_tree)])
        assert result.level is expected
        assert result.source == "*"

    def test_self_and_default_are_independent(self, evaluator: TreeEvaluator) -> None:
        tree = AccessTree.from_raw({"*": 1, "pub": {".": 3, "*": -1}})
        assert evaluator.evaluate(["pub"], [("*", tree)]).level is WRITE
        assert evaluator.evaluate(["pub", "x"], [("*", tree)]).level is REVOKED

    def test_no_decision(self, evaluator: TreeEvaluator) -> None:
        result = evaluator.evaluate(["tmp"], [("*", AccessTree())])
        assert result.level is NO_ACCESS
        assert result.source is None
        assert not result.allows(READ)

    def test_root_prefers_self_level(self, evaluator: TreeEvaluator) -> None:
        first = AccessTree.from_raw({"*": -1})
        second = AccessTree.from_raw({".": 3, "*": 1})
        assert evaluator.evaluate([], [("a", AccessTree()), ("b", second)]).level is WRITE
        result = evaluator.evaluate([], [("a", first), ("b", second)])
        assert result.level is REVOKED
        assert result.source == "a"

    def test_root_with_no_trees(self, evaluator: TreeEvaluator) -> None:
        result = evaluator.evaluate([], [])
        assert result.level is NO_ACCESS
        assert result.source is None


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


class TestPriority:
    def test_own_revoked_beats_group_write(self, evaluator: TreeEvaluator) -> None:
        trees = [
            ("bob", AccessTree.from_raw({"data": -1})),
            ("Coders", AccessTree.from_raw({"data": 3})),
            ("*", AccessTree.from_raw({"*": 1})),
        ]
        result = evaluator.evaluate(["data"], trees, requester="bob", has_own_tree=True)
        assert result.level is REVOKED
        assert result.source == "bob"

    def test_group_beats_default(self, evaluator: TreeEvaluator) -> None:
        trees = [
            ("Coders", AccessTree.from_raw({"data": 3})),
            ("*", AccessTree.from_raw({"*": 1, "data": -1})),
        ]
        result = evaluator.evaluate(["data", "x"], trees)
        assert result.level is WRITE
        assert result.source == "Coders"

    def test_lower_tree_answers_when_higher_is_silent(self, evaluator: TreeEvaluator) -> None:
        trees = [
            ("bob", AccessTree.from_raw({"tmp": 3})),
            ("*", AccessTree.from_raw({"*": 1})),
        ]
        result = evaluator.evaluate(["data"], trees)
        assert result.level is READ
        assert result.source == "*"

    def test_check(self, evaluator: TreeEvaluator) -> None:
        trees = [("*", AccessTree.from_raw({"*": 3}))]
        assert evaluator.check(["x"], trees, WRITE)
        assert not evaluator.check(["x"], trees, AccessLevel.GRANT_WRITE)


# ---------------------------------------------------------------------------
# Traversal state
# ---------------------------------------------------------------------------


class TestTrace:
    def test_trees_after_the_decider_keep_their_cursor(self, evaluator: TreeEvaluator) -> None:
        upper = AccessTree.from_raw({"x": 3})
        lower = AccessTree.from_raw({"x": {"y": -1}})
        steps = evaluator.trace(["x", "y"], [("upper", upper), ("lower", lower)])

        assert [s.winner for s in steps] == [0, 0]
        # The lower tree was never consulted, so it is still at its root.
        assert steps[0].cursors[1] is lower.root
        assert steps[1].cursors[1] is lower.root
        assert steps[1].defaults[1] is NO_ACCESS
        assert evaluator.evaluate(["x", "y"], [("upper", upper), ("lower", lower)]).level is WRITE

    def test_trees_consulted_before_the_decider_advance(self, evaluator: TreeEvaluator) -> None:
        upper = AccessTree.from_raw({"x": {"z": 5}})
        lower = AccessTree.from_raw({"*": 1})
        steps = evaluator.trace(["x", "y"], [("upper", upper), ("lower", lower)])

        assert steps[0].winner == 1
        assert steps[0].cursors[0] is upper.root.children["x"]
        assert steps[0].defaults[0] is NO_ACCESS
        assert steps[1].winner == 1
        assert steps[1].cursors[0] is None

    def test_empty_path_has_no_steps(self, evaluator: TreeEvaluator) -> None:
        assert evaluator.trace([], [("*", AccessTree())]) == []


# ---------------------------------------------------------------------------
# Ruled overrides
# ---------------------------------------------------------------------------


class TestRuledOverrides:
    def test_self_home_is_grant_grant(self, evaluator: TreeEvaluator, example_tree: AccessTree) -> None:
        result = evaluator.evaluate(["players", "frogo"], [("*", example_tree)], requester="frogo")
        assert result.level is AccessLevel.GRANT_GRANT
        assert result.source == RULED_SOURCE
        assert result.is_ruled

    def test_self_home_in_domain_root(self, evaluator: TreeEvaluator, example_tree: AccessTree) -> None:
        result = evaluator.evaluate(["d", "frogo", "x.c"], [("*", example_tree)], requester="frogo")
        assert result.level is AccessLevel.GRANT_GRANT

    def test_open_directory_is_readable(self, evaluator: TreeEvaluator, example_tree: AccessTree) -> None:
        result = evaluator.evaluate(
            ["players", "dios", "open", "notes.txt"], [("*", example_tree)], requester="frogo"
        )
        assert result.level is READ
        assert result.is_ruled

    def test_own_tree_decision_blocks_rules(self, evaluator: TreeEvaluator, example_tree: AccessTree) -> None:
        own = AccessTree.from_raw({"players": {"frogo": -1}})
        result = evaluator.evaluate(
            ["players", "frogo", "x"],
            [("frogo", own), ("*", example_tree)],
            requester="frogo",
            has_own_tree=True,
        )
        assert result.level is REVOKED
        assert result.source == "frogo"

    def test_group_decision_does_not_block_rules(self, evaluator: TreeEvaluator) -> None:
        trees = [
            ("Coders", AccessTree.from_raw({"players": -1})),
            ("*", AccessTree.from_raw({"*": 1})),
        ]
        result = evaluator.evaluate(["players", "frogo"], trees, requester="frogo")
        assert result.level is AccessLevel.GRANT_GRANT

    def test_rules_need_a_requester(self, evaluator: TreeEvaluator, example_tree: AccessTree) -> None:
        result = evaluator.evaluate(["players", "frogo", "x"], [("*", example_tree)])
        assert result.level is REVOKED

    def test_rules_only_below_home_roots(self, evaluator: TreeEvaluator) -> None:
        tree = AccessTree.from_raw({"*": -1})
        result = evaluator.evaluate(["tmp", "frogo"], [("*", tree)], requester="frogo")
        assert result.level is REVOKED
        assert not result.is_ruled

    def test_custom_home_roots(self) -> None:
        evaluator = TreeEvaluator(home_roots=("home",), open_dir="pub")
        tree = AccessTree.from_raw({"*": -1})
        assert evaluator.evaluate(["home", "frogo"], [("*", tree)], requester="frogo").is_ruled
        assert evaluator.evaluate(["home", "x", "pub"], [("*", tree)], requester="frogo").level is READ
        assert not evaluator.evaluate(["players", "frogo"], [("*", tree)], requester="frogo").is_ruled
