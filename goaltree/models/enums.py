import enum


class ContainerKind(str, enum.Enum):
    goal = "goal"
    milestone = "milestone"
    requirement = "requirement"


class NodeStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    archived = "archived"


class TaskFrequency(str, enum.Enum):
    once = "once"
    daily = "daily"
    weekly = "weekly"
    custom = "custom"


class RecordKind(str, enum.Enum):
    """Which table an operation targets."""

    container = "container"
    task = "task"
