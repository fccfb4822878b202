from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional
from goaltree.models.enums import RecordKind, TaskFrequency


class SuggestedNode(BaseModel):
    """One node of an AI-proposed sub-tree, optionally nested."""

    type: Literal["goal", "requirement", "milestone", "task"]
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    frequency: Optional[TaskFrequency] = None
    children: List["SuggestedNode"] = Field(default_factory=list)

    @model_validator(mode="after")
    def tasks_are_leaves(self):
        if self.type == "task" and self.children:
            raise ValueError("A task suggestion cannot have children")
        return self


SuggestedNode.model_rebuild()


class ParseSuggestionRequest(BaseModel):
    text: str


class ParseSuggestionResponse(BaseModel):
    suggestion: Optional[SuggestedNode]
    total_nodes: int


class ApplySuggestionRequest(BaseModel):
    suggestion: SuggestedNode
    parent_id: Optional[int] = None


class CreatedRecord(BaseModel):
    kind: RecordKind
    id: int


class ApplySuggestionResponse(BaseModel):
    created: List[CreatedRecord]
