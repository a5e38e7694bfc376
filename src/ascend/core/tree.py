# src/ascend/core/tree.py
"""
Forest construction and bottom-up progress propagation.

Goal records are flat; ``build_forest`` links them into an arena of
:class:`GoalNode` objects keyed by goal id, with each node holding its
children as an ordered list of ids. Children appear in the order their
records appear in the input, and each node's ``computed_progress`` is
derived bottom-up:

- a leaf is 100 when completed, otherwise its manual progress;
- an internal node is the unweighted mean of its direct children.

Parent links that would close a cycle are refused and the offending record
is promoted to a root, so construction never recurses unboundedly and no
record is dropped. Dangling parent ids also produce roots.

Example:
    from ascend.core.tree import build_forest

    forest = build_forest(goals)
    for node in forest.root_nodes():
        print(node.title, round(node.computed_progress))
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from ..models import Goal

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class GoalNode:
    """
    A derived tree node wrapping a goal record.

    Attributes:
        goal: The wrapped record (shared, never copied).
        children: Ordered ids of the direct children.
        computed_progress: Derived 0-100 completion figure.
        is_leaf: True iff the node had no children at construction time.
        expanded: Display flag; children are only listed when True.
    """

    goal: Goal
    children: List[str] = field(default_factory=list)
    computed_progress: float = 0.0
    is_leaf: bool = True
    expanded: bool = False

    @property
    def id(self) -> str:
        return self.goal.id

    @property
    def title(self) -> str:
        return self.goal.title


@dataclass
class Forest:
    """
    An arena of goal nodes plus the ordered ids of its roots.

    Attributes:
        nodes: Every node of the forest keyed by goal id.
        roots: Root ids in display order.
        broken_links: Ids whose parent link was refused to break a cycle.
    """

    nodes: Dict[str, GoalNode] = field(default_factory=dict)
    roots: List[str] = field(default_factory=list)
    broken_links: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, goal_id: object) -> bool:
        return goal_id in self.nodes

    def get(self, goal_id: str) -> Optional[GoalNode]:
        return self.nodes.get(goal_id)

    def root_nodes(self) -> List[GoalNode]:
        return [self.nodes[root_id] for root_id in self.roots]

    def children_of(self, node: GoalNode) -> List[GoalNode]:
        return [self.nodes[child_id] for child_id in node.children]

    def walk(self) -> Iterator[GoalNode]:
        """Pre-order over every node reachable from the roots, ignoring expansion."""
        stack = list(reversed(self.roots))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))


# =============================================================================
# Construction
# =============================================================================


def build_forest(goals: Iterable[Goal]) -> Forest:
    """
    Build a forest from flat goal records and compute progress bottom-up.

    Args:
        goals: Goal records in storage order.

    Returns:
        A new Forest. Empty input yields an empty forest.
    """
    forest = Forest()
    ordered: List[Goal] = []

    for goal in goals:
        if goal.id in forest.nodes:
            logger.warning("Duplicate goal id %s ignored during tree construction", goal.id)
            continue
        forest.nodes[goal.id] = GoalNode(
            goal=goal,
            computed_progress=float(goal.progress),
            expanded=bool(goal.expanded),
        )
        ordered.append(goal)

    # child id -> parent id, for links accepted so far
    linked: Dict[str, str] = {}

    for goal in ordered:
        parent_id = goal.parent_id
        if parent_id is None or parent_id not in forest.nodes:
            forest.roots.append(goal.id)
            continue

        if _is_ancestor_or_self(goal.id, parent_id, linked):
            logger.warning(
                "Goal %s refers to parent %s which would close a cycle; treating it as a root",
                goal.id,
                parent_id,
            )
            forest.broken_links.append(goal.id)
            forest.roots.append(goal.id)
            continue

        linked[goal.id] = parent_id
        parent = forest.nodes[parent_id]
        parent.children.append(goal.id)
        parent.is_leaf = False

    _compute_progress(forest)

    logger.debug(
        "Built forest: %d nodes, %d roots, %d broken links",
        len(forest.nodes),
        len(forest.roots),
        len(forest.broken_links),
    )
    return forest


def _is_ancestor_or_self(candidate: str, start: str, linked: Dict[str, str]) -> bool:
    """Check whether ``candidate`` is ``start`` or one of its linked ancestors."""
    current: Optional[str] = start
    while current is not None:
        if current == candidate:
            return True
        current = linked.get(current)
    return False


def _compute_progress(forest: Forest) -> None:
    """Post-order pass setting every node's computed progress in place."""
    for root_id in forest.roots:
        stack = [(root_id, False)]
        while stack:
            node_id, children_done = stack.pop()
            node = forest.nodes[node_id]

            if not node.children:
                node.computed_progress = 100.0 if node.goal.is_completed else float(node.goal.progress)
                continue

            if not children_done:
                stack.append((node_id, True))
                stack.extend((child_id, False) for child_id in reversed(node.children))
                continue

            total = sum(forest.nodes[child_id].computed_progress for child_id in node.children)
            node.computed_progress = total / len(node.children)
