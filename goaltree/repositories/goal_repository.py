"""
GoalRepository - the hierarchical entity store.

The goal tree is kept as two flat tables, ``goals`` (containers) and
``tasks`` (leaves), linked only by ``parent_id``. Every method that writes
runs inside a single transaction on the wrapped session: it either fully
commits or rolls back and re-raises. All invariant checks (parent exists,
no cycles) run before the first write.

Usage:
    async with AsyncSessionLocal() as session:
        repo = GoalRepository(session)
        goal_id = await repo.add_goal(GoalCreate(title="Buy a House"))
        await repo.add_task(TaskCreate(parent_id=goal_id, title="Save"))
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Type, TypeVar, Union

import pydantic
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from goaltree.core.exceptions import (
    CyclicMoveError,
    InvalidParent,
    NotFound,
    ParentNotFound,
    ValidationError,
)
from goaltree.models.enums import ContainerKind, NodeStatus, RecordKind
from goaltree.models.goal import Goal
from goaltree.models.task import Task
from goaltree.schemas.goal import GoalCreate, GoalUpdate
from goaltree.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

Record = Union[Goal, Task]
SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)

# Columns an update may explicitly clear
GOAL_NULLABLE = {"description"}
TASK_NULLABLE = {"description", "scheduled_date", "measurement"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sibling_sort_key(record: Record) -> tuple:
    """Sort key shared by every sibling listing.

    Ascending ``order``; ties fall back to insertion order, containers
    before tasks, then ascending id.
    """
    return (record.order, 0 if isinstance(record, Goal) else 1, record.id)


def _coerce(schema: Type[SchemaT], data: Union[SchemaT, dict]) -> SchemaT:
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {schema.__name__} payload", {"errors": e.errors(include_url=False, include_context=False)}) from e


def _clean_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required", {"field": "title"})
    return title.strip()


class GoalRepository:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self._clock = clock

    @asynccontextmanager
    async def _atomic(self):
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    # ============================================
    # Add
    # ============================================

    async def add(self, data: Union[GoalCreate, TaskCreate]) -> int:
        if isinstance(data, TaskCreate):
            return await self.add_task(data)
        return await self.add_goal(data)

    async def add_goal(self, data: Union[GoalCreate, dict]) -> int:
        data = _coerce(GoalCreate, data)
        title = _clean_title(data.title)
        if data.parent_id is not None:
            await self._require_parent(data.parent_id)

        order = data.order if data.order is not None else await self._next_order(data.parent_id)
        now = self._clock()
        goal = Goal(
            title=title,
            description=data.description,
            parent_id=data.parent_id,
            kind=data.kind,
            status=data.status,
            order=order,
            created_at=now,
            updated_at=now,
        )
        async with self._atomic():
            self.session.add(goal)

        logger.debug("Added %s %s under %s", goal.kind.value, goal.id, goal.parent_id)
        return goal.id

    async def add_milestone(self, data: Union[GoalCreate, dict]) -> int:
        data = _coerce(GoalCreate, data)
        return await self.add_goal(data.model_copy(update={"kind": ContainerKind.milestone}))

    async def add_requirement(self, data: Union[GoalCreate, dict]) -> int:
        data = _coerce(GoalCreate, data)
        return await self.add_goal(data.model_copy(update={"kind": ContainerKind.requirement}))

    async def add_task(self, data: Union[TaskCreate, dict]) -> int:
        data = _coerce(TaskCreate, data)
        if data.parent_id is None:
            raise ValidationError("Task requires a parent", {"field": "parent_id"})
        title = _clean_title(data.title)
        await self._require_parent(data.parent_id)

        order = data.order if data.order is not None else await self._next_order(data.parent_id)
        now = self._clock()
        task = Task(
            parent_id=data.parent_id,
            title=title,
            description=data.description,
            frequency=data.frequency,
            weekly_days=list(data.weekly_days),
            is_completed=False,
            scheduled_date=data.scheduled_date,
            measurement=data.measurement,
            order=order,
            created_at=now,
            updated_at=now,
        )
        async with self._atomic():
            self.session.add(task)

        logger.debug("Added task %s under %s", task.id, task.parent_id)
        return task.id

    # ============================================
    # Read
    # ============================================

    async def get_goal(self, goal_id: int) -> Optional[Goal]:
        return await self.session.get(Goal, goal_id)

    async def get_task(self, task_id: int) -> Optional[Task]:
        return await self.session.get(Task, task_id)

    async def get(self, record_id: int, kind: RecordKind) -> Optional[Record]:
        if kind is RecordKind.task:
            return await self.get_task(record_id)
        return await self.get_goal(record_id)

    async def list_roots(self) -> List[Goal]:
        result = await self.session.execute(select(Goal).where(Goal.parent_id.is_(None)))
        return sorted(result.scalars().all(), key=sibling_sort_key)

    async def list_child_goals(self, parent_id: int) -> List[Goal]:
        result = await self.session.execute(select(Goal).where(Goal.parent_id == parent_id))
        return sorted(result.scalars().all(), key=sibling_sort_key)

    async def list_child_tasks(self, parent_id: int) -> List[Task]:
        result = await self.session.execute(select(Task).where(Task.parent_id == parent_id))
        return sorted(result.scalars().all(), key=sibling_sort_key)

    async def list_children(self, parent_id: Optional[int]) -> List[Record]:
        """Containers and tasks under ``parent_id`` in one sibling order."""
        if parent_id is None:
            return list(await self.list_roots())
        goals = await self.list_child_goals(parent_id)
        tasks = await self.list_child_tasks(parent_id)
        return sorted([*goals, *tasks], key=sibling_sort_key)

    async def list_all_goals(self) -> List[Goal]:
        result = await self.session.execute(select(Goal).order_by(Goal.id))
        return list(result.scalars().all())

    async def list_all_tasks(self) -> List[Task]:
        result = await self.session.execute(select(Task).order_by(Task.id))
        return list(result.scalars().all())

    async def count_goals(self) -> int:
        result = await self.session.execute(select(func.count(Goal.id)))
        return result.scalar_one()

    # ============================================
    # Update
    # ============================================

    async def update_goal(self, goal_id: int, changes: Union[GoalUpdate, dict]) -> Goal:
        changes = _coerce(GoalUpdate, changes).model_dump(exclude_unset=True)
        goal = await self._require_goal(goal_id)
        self._check_changes(changes, GOAL_NULLABLE)

        async with self._atomic():
            for field, value in changes.items():
                setattr(goal, field, value)
            goal.updated_at = self._clock()

        logger.debug("Updated goal %s: %s", goal_id, sorted(changes))
        return goal

    async def update_goal_status(self, goal_id: int, status: NodeStatus) -> Goal:
        return await self.update_goal(goal_id, GoalUpdate(status=status))

    async def update_task(self, task_id: int, changes: Union[TaskUpdate, dict]) -> Task:
        changes = _coerce(TaskUpdate, changes).model_dump(exclude_unset=True)
        task = await self._require_task(task_id)
        self._check_changes(changes, TASK_NULLABLE)

        async with self._atomic():
            for field, value in changes.items():
                setattr(task, field, value)
            task.updated_at = self._clock()

        logger.debug("Updated task %s: %s", task_id, sorted(changes))
        return task

    async def toggle_task_completion(self, task_id: int) -> bool:
        task = await self._require_task(task_id)
        new_value = not task.is_completed
        await self.update_task(task_id, TaskUpdate(is_completed=new_value))
        return new_value

    @staticmethod
    def _check_changes(changes: dict, nullable: set) -> None:
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        for field, value in changes.items():
            if value is None and field not in nullable:
                raise ValidationError(f"{field} cannot be cleared", {"field": field})

    # ============================================
    # Delete
    # ============================================

    async def delete(self, record_id: int, kind: RecordKind) -> int:
        """Delete a record and, for containers, everything below it.

        Returns the number of removed records. A missing id is a no-op
        returning 0.
        """
        if kind is RecordKind.task:
            task = await self.get_task(record_id)
            if task is None:
                return 0
            async with self._atomic():
                await self.session.delete(task)
            logger.info("Deleted task %s", record_id)
            return 1

        if await self.get_goal(record_id) is None:
            return 0

        # Snapshot the subtree before touching anything
        goal_ids = await self.collect_subtree_ids(record_id)
        result = await self.session.execute(select(Task.id).where(Task.parent_id.in_(goal_ids)))
        task_ids = list(result.scalars().all())

        async with self._atomic():
            if task_ids:
                await self.session.execute(delete(Task).where(Task.id.in_(task_ids)))
            await self.session.execute(delete(Goal).where(Goal.id.in_(goal_ids)))

        count = len(goal_ids) + len(task_ids)
        logger.info(
            "Cascade deleted goal %s: %s containers, %s tasks", record_id, len(goal_ids), len(task_ids)
        )
        return count

    async def collect_subtree_ids(self, goal_id: int) -> List[int]:
        """Ids of ``goal_id`` and every container below it, depth first."""
        seen = {goal_id}
        stack = [goal_id]
        collected = []
        while stack:
            current = stack.pop()
            collected.append(current)
            for child_id in await self._child_goal_ids(current):
                if child_id in seen:
                    continue
                seen.add(child_id)
                stack.append(child_id)
        return collected

    # ============================================
    # Move
    # ============================================

    async def move(
        self,
        record_id: int,
        kind: RecordKind,
        new_parent_id: Optional[int],
        new_order: Optional[int] = None,
    ) -> Record:
        if kind is RecordKind.task:
            record = await self._require_task(record_id)
            if new_parent_id is None:
                raise InvalidParent("Tasks must have a parent", {"id": record_id})
            await self._require_parent(new_parent_id)
        else:
            record = await self._require_goal(record_id)
            if new_parent_id is not None:
                await self._require_parent(new_parent_id)
                if await self.is_descendant(record_id, new_parent_id):
                    logger.warning("Rejected cyclic move of goal %s under %s", record_id, new_parent_id)
                    raise CyclicMoveError(record_id, new_parent_id)

        async with self._atomic():
            record.parent_id = new_parent_id
            if new_order is not None:
                record.order = new_order
            record.updated_at = self._clock()

        logger.info("Moved %s %s under %s", kind.value, record_id, new_parent_id)
        return record

    async def is_descendant(self, goal_id: int, candidate_id: int) -> bool:
        """True when ``candidate_id`` is ``goal_id`` or sits anywhere below it."""
        if goal_id == candidate_id:
            return True
        seen = {goal_id}
        stack = [goal_id]
        while stack:
            for child_id in await self._child_goal_ids(stack.pop()):
                if child_id == candidate_id:
                    return True
                if child_id not in seen:
                    seen.add(child_id)
                    stack.append(child_id)
        return False

    # ============================================
    # Reorder
    # ============================================

    async def reorder(self, parent_id: Optional[int], ordered_ids: Sequence[int], kind: RecordKind) -> int:
        """Set ``order`` to each id's position in ``ordered_ids``.

        Every listed record of ``kind`` gets its position, whatever its
        parent; anything not listed keeps its current order. Unknown ids
        are skipped.
        """
        model = Task if kind is RecordKind.task else Goal
        result = await self.session.execute(select(model).where(model.id.in_(list(ordered_ids))))
        records = {record.id: record for record in result.scalars().all()}

        missing = [record_id for record_id in ordered_ids if record_id not in records]
        if missing:
            logger.warning("Reorder under %s skipped unknown %s ids: %s", parent_id, kind.value, missing)

        now = self._clock()
        async with self._atomic():
            for position, record_id in enumerate(ordered_ids):
                record = records.get(record_id)
                if record is None:
                    continue
                record.order = position
                record.updated_at = now

        logger.info("Reordered %s %s records under %s", len(records), kind.value, parent_id)
        return len(records)

    # ============================================
    # Helpers
    # ============================================

    async def _child_goal_ids(self, goal_id: int) -> Iterable[int]:
        result = await self.session.execute(select(Goal.id).where(Goal.parent_id == goal_id))
        return result.scalars().all()

    async def _next_order(self, parent_id: Optional[int]) -> int:
        if parent_id is None:
            result = await self.session.execute(select(func.max(Goal.order)).where(Goal.parent_id.is_(None)))
            highest = result.scalar_one()
        else:
            goals = await self.session.execute(select(func.max(Goal.order)).where(Goal.parent_id == parent_id))
            tasks = await self.session.execute(select(func.max(Task.order)).where(Task.parent_id == parent_id))
            candidates = [value for value in (goals.scalar_one(), tasks.scalar_one()) if value is not None]
            highest = max(candidates) if candidates else None
        return 0 if highest is None else highest + 1

    async def _require_goal(self, goal_id: int) -> Goal:
        goal = await self.get_goal(goal_id)
        if goal is None:
            raise NotFound("goal", goal_id)
        return goal

    async def _require_task(self, task_id: int) -> Task:
        task = await self.get_task(task_id)
        if task is None:
            raise NotFound("task", task_id)
        return task

    async def _require_parent(self, parent_id: int) -> Goal:
        parent = await self.get_goal(parent_id)
        if parent is None:
            raise ParentNotFound(parent_id)
        return parent
