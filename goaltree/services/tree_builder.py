"""
Materializes the flat goal/task tables into a nested forest.

``build_tree`` reads both tables once and hands the snapshot to
``assemble_forest``, which is pure and iterative. A container reached
twice, or a record that no root can reach (a detached cycle or a dangling
``parent_id``), raises ``CorruptTreeError`` instead of looping.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from goaltree.core.exceptions import CorruptTreeError
from goaltree.models.enums import RecordKind
from goaltree.models.goal import Goal
from goaltree.models.task import Task
from goaltree.repositories.goal_repository import GoalRepository, Record, sibling_sort_key
from goaltree.schemas.tree import TreeNode

logger = logging.getLogger(__name__)


def goal_to_node(goal: Goal) -> TreeNode:
    return TreeNode(
        id=goal.id,
        node_type=goal.kind.value,
        title=goal.title,
        description=goal.description,
        parent_id=goal.parent_id,
        order=goal.order,
        created_at=goal.created_at,
        updated_at=goal.updated_at,
        status=goal.status,
    )


def task_to_node(task: Task) -> TreeNode:
    return TreeNode(
        id=task.id,
        node_type="task",
        title=task.title,
        description=task.description,
        parent_id=task.parent_id,
        order=task.order,
        created_at=task.created_at,
        updated_at=task.updated_at,
        frequency=task.frequency,
        weekly_days=list(task.weekly_days or []),
        is_completed=task.is_completed,
        scheduled_date=task.scheduled_date,
        measurement=task.measurement,
    )


def assemble_forest(goals: Sequence[Goal], tasks: Sequence[Task]) -> List[TreeNode]:
    children: Dict[Optional[int], List[Record]] = defaultdict(list)
    for record in [*goals, *tasks]:
        children[record.parent_id].append(record)
    for siblings in children.values():
        siblings.sort(key=sibling_sort_key)

    # Tasks can never be roots; a NULL-parent task is corrupt and is caught below
    roots = [record for record in children.get(None, []) if isinstance(record, Goal)]
    forest = [goal_to_node(goal) for goal in roots]

    visited = set()
    stack = list(forest)
    for node in forest:
        visited.add(node.id)

    while stack:
        node = stack.pop()
        for child in children.get(node.id, []):
            if isinstance(child, Task):
                node.children.append(task_to_node(child))
                continue
            if child.id in visited:
                logger.error("Goal %s reached twice while building tree", child.id)
                raise CorruptTreeError(
                    f"Cycle detected at goal {child.id}",
                    {"id": child.id, "parent_id": child.parent_id},
                )
            visited.add(child.id)
            child_node = goal_to_node(child)
            node.children.append(child_node)
            stack.append(child_node)

    unreachable_goals = sorted(goal.id for goal in goals if goal.id not in visited)
    unreachable_tasks = sorted(task.id for task in tasks if task.parent_id not in visited)
    if unreachable_goals or unreachable_tasks:
        logger.error(
            "Tree has unreachable records: goals=%s tasks=%s", unreachable_goals, unreachable_tasks
        )
        raise CorruptTreeError(
            "Records not reachable from any root (cycle or dangling parent)",
            {"goal_ids": unreachable_goals, "task_ids": unreachable_tasks},
        )

    return forest


async def build_tree(repository: GoalRepository) -> List[TreeNode]:
    goals = await repository.list_all_goals()
    tasks = await repository.list_all_tasks()
    return assemble_forest(goals, tasks)


def iter_nodes(forest: Sequence[TreeNode]):
    """Yield every node depth first, in tree order."""
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def index_forest(forest: Sequence[TreeNode]) -> Dict[Tuple[RecordKind, int], TreeNode]:
    return {(node.record_kind, node.id): node for node in iter_nodes(forest)}
