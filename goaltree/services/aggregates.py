"""Derived task stats over a built tree node. Never stored."""
from typing import Optional, Tuple

from goaltree.schemas.tree import TreeNode


def _task_totals(node: TreeNode) -> Tuple[int, int]:
    total = completed = 0
    stack = list(node.children)
    while stack:
        current = stack.pop()
        if current.is_task:
            total += 1
            if current.is_completed:
                completed += 1
        else:
            stack.extend(current.children)
    return total, completed


def count_tasks(node: TreeNode) -> int:
    return _task_totals(node)[0]


def count_completed_tasks(node: TreeNode) -> int:
    return _task_totals(node)[1]


def completion_percentage(node: TreeNode) -> Optional[float]:
    """Completed task descendants as a percentage, ``None`` when there are none."""
    total, completed = _task_totals(node)
    if total == 0:
        return None
    return completed / total * 100
