from fastapi import APIRouter, Depends, Query
from datetime import date
from typing import List, Optional
from goaltree.core.deps import get_repository
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.tree import TreeNode, TreeNodeResponse, WeekDay, WeekResponse, SeedResponse
from goaltree.services.aggregates import count_tasks, completion_percentage
from goaltree.services.schedule import tasks_for_week, week_start
from goaltree.services.seed import seed_demo_tree
from goaltree.services.tree_builder import build_tree

router = APIRouter(tags=["tree"])


def to_response(node: TreeNode) -> TreeNodeResponse:
    return TreeNodeResponse(
        **node.model_dump(exclude={"children", "created_at", "updated_at"}),
        task_count=count_tasks(node),
        completion_percentage=completion_percentage(node),
        children=[to_response(child) for child in node.children],
    )


@router.get("/tree", response_model=List[TreeNodeResponse])
async def get_tree(repo: GoalRepository = Depends(get_repository)):
    forest = await build_tree(repo)
    return [to_response(root) for root in forest]


@router.get("/tree/week", response_model=WeekResponse)
async def get_week(
    start: Optional[date] = Query(None, description="Any day of the wanted week; defaults to today"),
    repo: GoalRepository = Depends(get_repository)
):
    start = start or date.today()
    forest = await build_tree(repo)
    schedule = tasks_for_week(forest, start)
    return WeekResponse(
        week_start=week_start(start),
        days=[WeekDay(day=day, tasks=tasks) for day, tasks in schedule.items()],
    )


@router.post("/seed", response_model=SeedResponse)
async def seed(force: bool = False, repo: GoalRepository = Depends(get_repository)):
    return await seed_demo_tree(repo, force=force)
