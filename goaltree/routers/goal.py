from fastapi import APIRouter, Depends, status
from typing import List
from goaltree.core.deps import get_repository
from goaltree.core.exceptions import NotFound
from goaltree.models.enums import RecordKind
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.goal import (
    GoalCreate, GoalUpdate, GoalResponse, MoveRequest,
    ReorderRequest, ReorderResponse, DeleteResponse
)
from goaltree.models.task import Task
from goaltree.schemas.tree import TreeNode
from goaltree.services.tree_builder import goal_to_node, task_to_node

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    repo: GoalRepository = Depends(get_repository)
):
    goal_id = await repo.add_goal(goal_in)
    return await repo.get_goal(goal_id)


@router.get("/roots", response_model=List[GoalResponse])
async def list_root_goals(repo: GoalRepository = Depends(get_repository)):
    return await repo.list_roots()


@router.post("/reorder", response_model=ReorderResponse)
async def reorder_goals(
    reorder_in: ReorderRequest,
    repo: GoalRepository = Depends(get_repository)
):
    reordered = await repo.reorder(reorder_in.parent_id, reorder_in.ordered_ids, RecordKind.container)
    return ReorderResponse(reordered=reordered)


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(goal_id: int, repo: GoalRepository = Depends(get_repository)):
    goal = await repo.get_goal(goal_id)
    if goal is None:
        raise NotFound("goal", goal_id)
    return goal


@router.get("/{goal_id}/children", response_model=List[TreeNode])
async def list_goal_children(goal_id: int, repo: GoalRepository = Depends(get_repository)):
    if await repo.get_goal(goal_id) is None:
        raise NotFound("goal", goal_id)
    return [
        task_to_node(child) if isinstance(child, Task) else goal_to_node(child)
        for child in await repo.list_children(goal_id)
    ]


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: int,
    changes: GoalUpdate,
    repo: GoalRepository = Depends(get_repository)
):
    return await repo.update_goal(goal_id, changes)


@router.delete("/{goal_id}", response_model=DeleteResponse)
async def delete_goal(goal_id: int, repo: GoalRepository = Depends(get_repository)):
    return DeleteResponse(deleted=await repo.delete(goal_id, RecordKind.container))


@router.post("/{goal_id}/move", response_model=GoalResponse)
async def move_goal(
    goal_id: int,
    move_in: MoveRequest,
    repo: GoalRepository = Depends(get_repository)
):
    return await repo.move(goal_id, RecordKind.container, move_in.new_parent_id, move_in.new_order)
