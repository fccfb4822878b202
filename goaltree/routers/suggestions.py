from fastapi import APIRouter, Depends
from goaltree.core.deps import get_repository
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.schemas.suggestion import (
    ParseSuggestionRequest, ParseSuggestionResponse,
    ApplySuggestionRequest, ApplySuggestionResponse, CreatedRecord
)
from goaltree.services.suggestions import apply_suggestion, count_suggested_nodes, parse_suggestion_from_text

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("/parse", response_model=ParseSuggestionResponse)
async def parse_suggestion(request: ParseSuggestionRequest):
    suggestion = parse_suggestion_from_text(request.text)
    total = count_suggested_nodes(suggestion) if suggestion else 0
    return ParseSuggestionResponse(suggestion=suggestion, total_nodes=total)


@router.post("/apply", response_model=ApplySuggestionResponse)
async def apply(
    request: ApplySuggestionRequest,
    repo: GoalRepository = Depends(get_repository)
):
    created = await apply_suggestion(repo, request.suggestion, request.parent_id)
    return ApplySuggestionResponse(created=[CreatedRecord(kind=kind, id=record_id) for kind, record_id in created])
