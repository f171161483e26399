from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from study_assistant.api.v1.auth import require_learner, require_service_auth
from study_assistant.api.v1.errors import ERROR_RESPONSES
from study_assistant.core.dependencies import get_activity_repository
from study_assistant.infrastructure.repositories.in_memory import InMemoryActivityRepository

router = APIRouter(prefix="/activities", tags=["activities"], dependencies=[Depends(require_service_auth)])


class ActivityResponse(BaseModel):
    id: str
    activity_type: str
    description: str
    created_at: datetime


@router.get("", response_model=List[ActivityResponse], responses={401: ERROR_RESPONSES[401]})
async def list_activities(
    limit: int = Query(50, ge=1, le=200),
    learner_id: str = Depends(require_learner),
    activities: InMemoryActivityRepository = Depends(get_activity_repository),
) -> List[ActivityResponse]:
    entries = await activities.list_for(learner_id, limit=limit)
    return [
        ActivityResponse(
            id=entry.id,
            activity_type=entry.activity_type.value,
            description=entry.description,
            created_at=entry.created_at,
        )
        for entry in entries
    ]
