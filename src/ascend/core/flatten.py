# src/ascend/core/flatten.py
"""Depth-tagged pre-order flattening of a forest into a display list."""

from dataclasses import dataclass
from typing import List

from .tree import Forest, GoalNode


@dataclass(frozen=True)
class FlatGoal:
    """One display row: a node and its depth (roots are depth 0)."""

    node: GoalNode
    depth: int

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def title(self) -> str:
        return self.node.title


def flatten_forest(forest: Forest) -> List[FlatGoal]:
    """
    Walk a forest pre-order into a flat, depth-tagged list.

    Children follow their parent immediately, one level deeper, and only
    when the parent is expanded; a collapsed node's subtree is omitted
    entirely. The output depends only on the forest, so repeated calls give
    identical sequences and indexes stay stable for keyboard navigation.
    """
    flat: List[FlatGoal] = []
    stack = [(root_id, 0) for root_id in reversed(forest.roots)]
    while stack:
        node_id, depth = stack.pop()
        node = forest.nodes[node_id]
        flat.append(FlatGoal(node=node, depth=depth))
        if node.expanded and node.children:
            stack.extend((child_id, depth + 1) for child_id in reversed(node.children))
    return flat


def visible_ids(flat: List[FlatGoal]) -> List[str]:
    return [entry.id for entry in flat]
