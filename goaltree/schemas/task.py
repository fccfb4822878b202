from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
from goaltree.models.enums import TaskFrequency


def _normalize_weekly_days(days: Optional[List[int]]) -> Optional[List[int]]:
    if days is None:
        return None
    for day in days:
        if not 0 <= day <= 6:
            raise ValueError("weekly_days entries must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(days))


class TaskCreate(BaseModel):
    # Optional here so the repository can report a missing parent as a ValidationError
    parent_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    frequency: TaskFrequency = TaskFrequency.once
    weekly_days: List[int] = Field(default_factory=list)
    scheduled_date: Optional[datetime] = None
    measurement: Optional[str] = None
    order: Optional[int] = None

    @field_validator("weekly_days")
    @classmethod
    def check_weekly_days(cls, v):
        return _normalize_weekly_days(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[TaskFrequency] = None
    weekly_days: Optional[List[int]] = None
    is_completed: Optional[bool] = None
    scheduled_date: Optional[datetime] = None
    measurement: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("weekly_days")
    @classmethod
    def check_weekly_days(cls, v):
        return _normalize_weekly_days(v)


class TaskResponse(BaseModel):
    id: int
    parent_id: int
    title: str
    description: Optional[str]
    frequency: TaskFrequency
    weekly_days: List[int]
    is_completed: bool
    scheduled_date: Optional[datetime]
    measurement: Optional[str]
    order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ToggleResponse(BaseModel):
    id: int
    is_completed: bool
