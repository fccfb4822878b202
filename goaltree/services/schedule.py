"""
Weekly calendar projection over a built forest.

weekly_days uses 0-6 for Sunday-Saturday; weeks start on Monday.
"""
from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence, Union

from goaltree.models.enums import TaskFrequency
from goaltree.schemas.tree import TreeNode
from goaltree.services.tree_builder import iter_nodes


def sunday_first_weekday(day: date) -> int:
    # date.weekday() is Monday=0
    return (day.weekday() + 1) % 7


def week_start(day: Union[date, datetime]) -> date:
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


def is_task_scheduled_on(task: TreeNode, day: date) -> bool:
    if task.frequency in (TaskFrequency.daily, TaskFrequency.custom):
        # custom recurrences have no rule yet, so they show every day
        return True
    if task.frequency == TaskFrequency.weekly:
        return sunday_first_weekday(day) in (task.weekly_days or [])
    if task.frequency == TaskFrequency.once and task.scheduled_date is not None:
        return task.scheduled_date.date() == day
    return False


def tasks_for_week(forest: Sequence[TreeNode], start: Union[date, datetime]) -> Dict[date, List[TreeNode]]:
    first = week_start(start)
    days = [first + timedelta(days=offset) for offset in range(7)]
    tasks = [node for node in iter_nodes(forest) if node.is_task]
    return {day: [task for task in tasks if is_task_scheduled_on(task, day)] for day in days}
