from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from goaltree.models.enums import ContainerKind, NodeStatus


class GoalCreate(BaseModel):
    title: str
    description: Optional[str] = None
    parent_id: Optional[int] = None  # None → root
    kind: ContainerKind = ContainerKind.goal
    status: NodeStatus = NodeStatus.active
    order: Optional[int] = None  # None → append after existing siblings


class GoalUpdate(BaseModel):
    # parent_id and order are deliberately absent: use move / reorder
    title: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[ContainerKind] = None
    status: Optional[NodeStatus] = None

    model_config = {"extra": "forbid"}


class GoalResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    parent_id: Optional[int]
    kind: ContainerKind
    status: NodeStatus
    order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MoveRequest(BaseModel):
    new_parent_id: Optional[int] = None
    new_order: Optional[int] = None


class ReorderRequest(BaseModel):
    parent_id: Optional[int] = None
    ordered_ids: List[int]


class ReorderResponse(BaseModel):
    reordered: int


class DeleteResponse(BaseModel):
    deleted: int
