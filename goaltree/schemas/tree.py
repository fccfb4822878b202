from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Literal, Optional
from goaltree.models.enums import NodeStatus, RecordKind, TaskFrequency

NodeType = Literal["goal", "milestone", "requirement", "task"]


class TreeNode(BaseModel):
    """A record plus its recursively built children.

    Container fields (``status``) are ``None`` on task nodes and task fields
    (``frequency`` and friends) are ``None`` on container nodes.
    """

    id: int
    node_type: NodeType
    title: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    status: Optional[NodeStatus] = None

    frequency: Optional[TaskFrequency] = None
    weekly_days: Optional[List[int]] = None
    is_completed: Optional[bool] = None
    scheduled_date: Optional[datetime] = None
    measurement: Optional[str] = None

    children: List["TreeNode"] = Field(default_factory=list)

    @property
    def record_kind(self) -> RecordKind:
        return RecordKind.task if self.node_type == "task" else RecordKind.container

    @property
    def is_task(self) -> bool:
        return self.node_type == "task"


TreeNode.model_rebuild()


class TreeNodeResponse(BaseModel):
    """API view of a tree node, decorated with derived task stats."""

    id: int
    node_type: NodeType
    title: str
    description: Optional[str]
    parent_id: Optional[int]
    order: int
    status: Optional[NodeStatus]
    frequency: Optional[TaskFrequency]
    weekly_days: Optional[List[int]]
    is_completed: Optional[bool]
    scheduled_date: Optional[datetime]
    measurement: Optional[str]
    task_count: int
    completion_percentage: Optional[float]
    children: List["TreeNodeResponse"]


TreeNodeResponse.model_rebuild()


class WeekDay(BaseModel):
    day: date
    tasks: List[TreeNode]


class WeekResponse(BaseModel):
    week_start: date
    days: List[WeekDay]


class SeedResponse(BaseModel):
    goals_created: int = 0
    tasks_created: int = 0

