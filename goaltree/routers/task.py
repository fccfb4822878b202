from fastapi import APIRouter, Depends, status
from goaltree.core.deps import get_repository
from goaltree.core.exceptions import NotFound
from goaltree.models.enums import RecordKind
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.goal import MoveRequest, ReorderRequest, ReorderResponse, DeleteResponse
from goaltree.schemas.task import TaskCreate, TaskUpdate, TaskResponse, ToggleResponse

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    repo: GoalRepository = Depends(get_repository)
):
    task_id = await repo.add_task(task_in)
    return await repo.get_task(task_id)


@router.post("/reorder", response_model=ReorderResponse)
async def reorder_tasks(
    reorder_in: ReorderRequest,
    repo: GoalRepository = Depends(get_repository)
):
    reordered = await repo.reorder(reorder_in.parent_id, reorder_in.ordered_ids, RecordKind.task)
    return ReorderResponse(reordered=reordered)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, repo: GoalRepository = Depends(get_repository)):
    task = await repo.get_task(task_id)
    if task is None:
        raise NotFound("task", task_id)
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    changes: TaskUpdate,
    repo: GoalRepository = Depends(get_repository)
):
    return await repo.update_task(task_id, changes)


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(task_id: int, repo: GoalRepository = Depends(get_repository)):
    return DeleteResponse(deleted=await repo.delete(task_id, RecordKind.task))


@router.post("/{task_id}/move", response_model=TaskResponse)
async def move_task(
    task_id: int,
    move_in: MoveRequest,
    repo: GoalRepository = Depends(get_repository)
):
    return await repo.move(task_id, RecordKind.task, move_in.new_parent_id, move_in.new_order)


@router.post("/{task_id}/toggle", response_model=ToggleResponse)
async def toggle_task(task_id: int, repo: GoalRepository = Depends(get_repository)):
    is_completed = await repo.toggle_task_completion(task_id)
    return ToggleResponse(id=task_id, is_completed=is_completed)
