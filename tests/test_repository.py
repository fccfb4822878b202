"""
Repository primitives: add, get, update, toggle and sibling listings.
"""
import pytest

from goaltree.core.exceptions import NotFound, ParentNotFound, ValidationError
from goaltree.models.enums import ContainerKind, NodeStatus, RecordKind, TaskFrequency
from goaltree.models.goal import Goal
from goaltree.models.task import Task
from goaltree.schemas.goal import GoalCreate, GoalUpdate
from goaltree.schemas.task import TaskCreate, TaskUpdate

from conftest import naive


class TestAdd:
    async def test_add_goal_assigns_id_and_defaults(self, repo, clock):
        goal_id = await repo.add_goal(GoalCreate(title="Learn Spanish"))

        goal = await repo.get_goal(goal_id)
        assert goal.title == "Learn Spanish"
        assert goal.parent_id is None
        assert goal.kind == ContainerKind.goal
        assert goal.status == NodeStatus.active
        assert goal.order == 0
        assert naive(goal.created_at) == naive(goal.updated_at) == naive(clock.now)

    async def test_add_task_defaults(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Learn Spanish"))
        task_id = await repo.add_task(TaskCreate(parent_id=goal_id, title="Duolingo", frequency=TaskFrequency.daily))

        task = await repo.get_task(task_id)
        assert task.parent_id == goal_id
        assert task.is_completed is False
        assert task.frequency == TaskFrequency.daily
        assert task.weekly_days == []

    async def test_generic_add_dispatches_on_input_type(self, repo):
        goal_id = await repo.add(GoalCreate(title="Run a marathon"))
        task_id = await repo.add(TaskCreate(parent_id=goal_id, title="Long run", frequency=TaskFrequency.weekly, weekly_days=[6, 0, 6]))

        assert isinstance(await repo.get(goal_id, RecordKind.container), Goal)
        task = await repo.get(task_id, RecordKind.task)
        assert isinstance(task, Task)
        assert task.weekly_days == [0, 6]

    async def test_milestone_and_requirement_helpers_force_kind(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Buy a House"))
        milestone_id = await repo.add_milestone(GoalCreate(title="House Hunting", parent_id=goal_id))
        requirement_id = await repo.add_requirement({"title": "Budget", "parent_id": goal_id})

        assert (await repo.get_goal(milestone_id)).kind == ContainerKind.milestone
        assert (await repo.get_goal(requirement_id)).kind == ContainerKind.requirement

    async def test_task_without_parent_is_rejected(self, repo):
        with pytest.raises(ValidationError):
            await repo.add_task(TaskCreate(title="Orphan"))
        assert await repo.list_all_tasks() == []

    @pytest.mark.parametrize("title", ["", "   "])
    async def test_empty_title_is_rejected(self, repo, title):
        with pytest.raises(ValidationError):
            await repo.add_goal(GoalCreate(title=title))

        goal_id = await repo.add_goal(GoalCreate(title="Parent"))
        with pytest.raises(ValidationError):
            await repo.add_task(TaskCreate(parent_id=goal_id, title=title))

    async def test_long_titles_are_kept_whole(self, repo):
        title = "Save " + "a little more every month " * 20

        goal_id = await repo.add_goal(GoalCreate(title=title))
        task_id = await repo.add_task({"parent_id": goal_id, "title": title})

        assert (await repo.get_goal(goal_id)).title == title.strip()
        assert (await repo.get_task(task_id)).title == title.strip()

    async def test_missing_parent_is_rejected(self, repo):
        with pytest.raises(ParentNotFound):
            await repo.add_goal(GoalCreate(title="Sub goal", parent_id=999))
        with pytest.raises(ParentNotFound):
            await repo.add_task(TaskCreate(parent_id=999, title="Task"))
        assert await repo.list_all_goals() == []

    async def test_any_container_kind_may_parent_another(self, repo):
        requirement_id = await repo.add_requirement(GoalCreate(title="Budget"))
        milestone_id = await repo.add_milestone(GoalCreate(title="Nested", parent_id=requirement_id))

        assert (await repo.get_goal(milestone_id)).parent_id == requirement_id

    async def test_order_defaults_to_append_across_kinds(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        first = await repo.add_task(TaskCreate(parent_id=goal_id, title="first"))
        second = await repo.add_goal(GoalCreate(title="second", parent_id=goal_id))
        third = await repo.add_task(TaskCreate(parent_id=goal_id, title="third", order=10))
        fourth = await repo.add_goal(GoalCreate(title="fourth", parent_id=goal_id))

        assert (await repo.get_task(first)).order == 0
        assert (await repo.get_goal(second)).order == 1
        assert (await repo.get_task(third)).order == 10
        assert (await repo.get_goal(fourth)).order == 11


class TestGet:
    async def test_missing_ids_return_none(self, repo):
        assert await repo.get_goal(1) is None
        assert await repo.get_task(1) is None
        assert await repo.get(1, RecordKind.container) is None


class TestUpdate:
    async def test_update_merges_fields_and_stamps_updated_at(self, repo, clock):
        goal_id = await repo.add_goal(GoalCreate(title="Buy a House", description="first home"))
        created = naive((await repo.get_goal(goal_id)).created_at)

        goal = await repo.update_goal(goal_id, GoalUpdate(title="Buy a Flat"))

        assert goal.title == "Buy a Flat"
        assert goal.description == "first home"
        assert naive(goal.created_at) == created
        assert naive(goal.updated_at) == naive(clock.now)
        assert naive(goal.updated_at) > created

    async def test_update_status(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        goal = await repo.update_goal_status(goal_id, NodeStatus.archived)
        assert goal.status == NodeStatus.archived

    async def test_update_missing_raises_not_found(self, repo):
        with pytest.raises(NotFound):
            await repo.update_goal(42, GoalUpdate(title="x"))
        with pytest.raises(NotFound):
            await repo.update_task(42, TaskUpdate(title="x"))

    @pytest.mark.parametrize("field", ["parent_id", "order"])
    async def test_update_cannot_touch_parent_or_order(self, repo, field):
        root = await repo.add_goal(GoalCreate(title="Root"))
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))

        with pytest.raises(ValidationError):
            await repo.update_goal(goal_id, {field: root})

        goal = await repo.get_goal(goal_id)
        assert goal.parent_id is None
        assert goal.order == 1

    async def test_update_rejects_blank_title_and_cleared_required_fields(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        with pytest.raises(ValidationError):
            await repo.update_goal(goal_id, GoalUpdate(title=" "))
        with pytest.raises(ValidationError):
            await repo.update_goal(goal_id, {"status": None})
        assert (await repo.get_goal(goal_id)).title == "Goal"

    async def test_update_task_fields(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        task_id = await repo.add_task(TaskCreate(parent_id=goal_id, title="Task", measurement="5 km"))

        task = await repo.update_task(task_id, {"frequency": "weekly", "weekly_days": [3, 1], "measurement": None})

        assert task.frequency == TaskFrequency.weekly
        assert task.weekly_days == [1, 3]
        assert task.measurement is None

    async def test_weekly_days_out_of_range_rejected(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        with pytest.raises(ValidationError):
            await repo.add_task({"parent_id": goal_id, "title": "Task", "weekly_days": [7]})


class TestToggle:
    async def test_toggle_flips_and_returns_new_value(self, repo, clock):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        task_id = await repo.add_task(TaskCreate(parent_id=goal_id, title="Task"))

        assert await repo.toggle_task_completion(task_id) is True
        assert (await repo.get_task(task_id)).is_completed is True
        assert naive((await repo.get_task(task_id)).updated_at) == naive(clock.now)

        assert await repo.toggle_task_completion(task_id) is False
        assert (await repo.get_task(task_id)).is_completed is False

    async def test_toggle_missing_task_fails(self, repo):
        with pytest.raises(NotFound):
            await repo.toggle_task_completion(7)


class TestListing:
    async def test_list_children_mixes_kinds_by_order(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        t_late = await repo.add_task(TaskCreate(parent_id=goal_id, title="late task", order=2))
        m = await repo.add_milestone(GoalCreate(title="milestone", parent_id=goal_id, order=1))
        t_early = await repo.add_task(TaskCreate(parent_id=goal_id, title="early task", order=0))

        children = await repo.list_children(goal_id)

        assert [(type(c), c.id) for c in children] == [(Task, t_early), (Goal, m), (Task, t_late)]

    async def test_ties_fall_back_to_insertion(self, repo):
        goal_id = await repo.add_goal(GoalCreate(title="Goal"))
        t1 = await repo.add_task(TaskCreate(parent_id=goal_id, title="t1", order=0))
        g1 = await repo.add_goal(GoalCreate(title="g1", parent_id=goal_id, order=0))
        t2 = await repo.add_task(TaskCreate(parent_id=goal_id, title="t2", order=0))

        children = await repo.list_children(goal_id)

        # containers before tasks at equal order, then by id
        assert [c.id for c in children] == [g1, t1, t2]
        assert isinstance(children[0], Goal)

    async def test_list_roots_only_returns_parentless_goals(self, repo, sample_tree):
        second = await repo.add_goal(GoalCreate(title="Learn Spanish"))

        roots = await repo.list_roots()

        assert [r.id for r in roots] == [sample_tree["g"], second]
        assert await repo.list_children(None) == roots
