"""Prioritized multi-tree evaluation.

TreeEvaluator answers "what single access level applies to this path" for
an ordered list of trees (highest priority first: the requester's own tree,
its groups in membership order, then the global default tree).

Evaluation is lazy and per segment.  Each tree keeps its own cursor (the
node reached so far) and its own running default.  For every segment the
trees are tried in priority order with :func:`step`, and the first nonzero
decision settles that segment.  Trees after the deciding one are not
consulted, so their cursors stay where they were and lag behind the
real path depth.  :meth:`TreeEvaluator.trace` exposes that state.

After the generic pass two ruled overrides apply, unless the requester's
own tree decided:

- ``/<domain|players>/<requester>/...`` is always GRANT_GRANT.
- ``/<domain|players>/<any>/open/...`` is always READ.

Both are tagged with the synthetic source :data:`RULED_SOURCE`.

Example
-------
>>> tree = AccessTree.from_raw({"*": 1, "data": -1})
>>> evaluator = TreeEvaluator()
>>> evaluator.evaluate(["data", "notes"], [("*", tree)]).level
<AccessLevel.REVOKED: -1>
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import AccessNode, AccessTree, Branch, Leaf

logger = logging.getLogger(__name__)

RULED_SOURCE = "!"

NO_ACCESS = AccessLevel.NO_ACCESS


def step(
    node: AccessNode | None,
    segment: str,
    inherited: AccessLevel,
    final: bool,
) -> tuple[AccessLevel, AccessNode | None]:
    """Advance one tree cursor by one path segment.

    Parameters
    ----------
    node:
        The tree's current cursor, or ``None`` once the tree is exhausted.
    segment:
        The path segment being evaluated.
    inherited:
        The tree's running default before this segment.
    final:
        True for the last segment of the path.  The ``.`` modifier only
        applies there; ``*`` applies to every other segment.

    Returns
    -------
    tuple[AccessLevel, AccessNode | None]
        The decision for this segment (NO_ACCESS = undecided) and the new
        cursor (``None`` ends this tree's walk).
    """
    match node:
        case None:
            return inherited, None
        case Leaf(level=level):
            return level, None
        case Branch():
            decision = node.default_level or inherited
            child = node.children.get(segment)
            match child:
                case Leaf(level=level):
                    return level, None
                case Branch():
                    if not inherited:
                        decision = child.default_level or NO_ACCESS
                    elif final and child.self_level:
                        decision = child.self_level
                    elif not final and child.default_level:
                        decision = child.default_level
                    else:
                        decision = inherited
                    return AccessLevel(decision), child
                case _:
                    return AccessLevel(decision), None
    raise TypeError(f"Not an access node: {node!r}")


@dataclass(frozen=True)
class SegmentStep:
    """Traversal state after one segment.

    Attributes
    ----------
    segment:
        The segment just evaluated.
    winner:
        Index of the tree that decided it, or ``None``.
    defaults:
        Running default of every tree, in priority order.
    cursors:
        Cursor of every tree, in priority order.
    """

    segment: str
    winner: int | None
    defaults: tuple[AccessLevel, ...]
    cursors: tuple[AccessNode | None, ...]


@dataclass(frozen=True)
class EvaluationResult:
    """Effective access for a path, tagged with the deciding principal.

    Attributes
    ----------
    level:
        The effective access level.
    source:
        Name of the principal whose tree decided, :data:`RULED_SOURCE`
        for a hard-coded rule, or ``None`` when nothing decided.
    segments:
        The resolved segments that were evaluated.
    """

    level: AccessLevel
    source: str | None
    segments: tuple[str, ...] = ()

    @property
    def is_ruled(self) -> bool:
        return self.source == RULED_SOURCE

    def allows(self, required: AccessLevel) -> bool:
        """Return True if this result satisfies *required*."""
        return self.level >= required


class TreeEvaluator:
    """Evaluates resolved paths against prioritized trees.

    Parameters
    ----------
    home_roots:
        First segments under which home directories live.  The ruled
        overrides only fire below these (default ``("d", "players")``).
    open_dir:
        Name of the world-readable subdirectory of a home (default ``"open"``).
    """

    def __init__(
        self,
        home_roots: Sequence[str] = ("d", "players"),
        open_dir: str = "open",
    ) -> None:
        self._home_roots = frozenset(home_roots)
        self._open_dir = open_dir

    def evaluate(
        self,
        segments: Sequence[str],
        trees: Sequence[tuple[str, AccessTree]],
        requester: str | None = None,
        has_own_tree: bool = False,
    ) -> EvaluationResult:
        """Compute the effective level for *segments*.

        Parameters
        ----------
        segments:
            Resolved path segments.
        trees:
            ``(principal, tree)`` pairs, highest priority first.
        requester:
            The principal the check is for.  Enables the ruled overrides.
        has_own_tree:
            True when ``trees[0]`` is the requester's own tree.

        Returns
        -------
        EvaluationResult
        """
        segments = tuple(segments)
        if not segments:
            return self._evaluate_root(trees)

        last_step = self.trace(segments, trees)[-1]
        winner = last_step.winner
        if winner is None:
            result = EvaluationResult(NO_ACCESS, None, segments)
        else:
            result = EvaluationResult(
                last_step.defaults[winner], trees[winner][0], segments
            )

        if requester is not None and (winner != 0 or not has_own_tree):
            result = self._apply_rules(result, requester)

        logger.debug(
            "Evaluated /%s for %s: %s (source=%s)",
            "/".join(segments),
            requester,
            result.level.display_name,
            result.source,
        )
        return result

    def trace(
        self,
        segments: Sequence[str],
        trees: Sequence[tuple[str, AccessTree]],
    ) -> list[SegmentStep]:
        """Walk *segments* and return the traversal state after each one.

        Trees after the deciding one keep the cursor and running default
        they had before the segment.
        """
        cursors: list[AccessNode | None] = [tree.root for _, tree in trees]
        defaults: list[AccessLevel] = [
            tree.root.default_level or NO_ACCESS for _, tree in trees
        ]
        steps: list[SegmentStep] = []
        last = len(segments) - 1
        for index, segment in enumerate(segments):
            winner: int | None = None
            for position in range(len(trees)):
                decision, cursors[position] = step(
                    cursors[position], segment, defaults[position], index == last
                )
                defaults[position] = decision
                if decision:
                    winner = position
                    break
            steps.append(SegmentStep(segment, winner, tuple(defaults), tuple(cursors)))
        return steps

    def check(
        self,
        segments: Sequence[str],
        trees: Sequence[tuple[str, AccessTree]],
        required: AccessLevel,
        requester: str | None = None,
        has_own_tree: bool = False,
    ) -> bool:
        """Standalone allow/deny decision against *required*."""
        return self.evaluate(segments, trees, requester, has_own_tree).allows(required)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evaluate_root(self, trees: Sequence[tuple[str, AccessTree]]) -> EvaluationResult:
        for name, tree in trees:
            level = tree.root.self_level or tree.root.default_level
            if level:
                return EvaluationResult(level, name, ())
        return EvaluationResult(NO_ACCESS, None, ())

    def _apply_rules(self, result: EvaluationResult, requester: str) -> EvaluationResult:
        segments = result.segments
        if len(segments) < 2 or segments[0] not in self._home_roots:
            return result
        if segments[1] == requester:
            return EvaluationResult(AccessLevel.GRANT_GRANT, RULED_SOURCE, segments)
        if len(segments) >= 3 and segments[2] == self._open_dir:
            return EvaluationResult(AccessLevel.READ, RULED_SOURCE, segments)
        return result


__all__ = [
    "EvaluationResult",
    "RULED_SOURCE",
    "SegmentStep",
    "TreeEvaluator",
    "step",
]
