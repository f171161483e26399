from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from study_assistant.api.v1.auth import optional_learner, require_learner, require_service_auth
from study_assistant.api.v1.errors import ERROR_RESPONSES
from study_assistant.application.services.topic_content_service import TopicContentService
from study_assistant.application.use_cases.progress_use_case import (
    RecordProgressCommand,
    RecordProgressUseCase,
)
from study_assistant.core.dependencies import (
    get_curriculum,
    get_record_progress_use_case,
    get_topic_content_service,
)
from study_assistant.domain.curriculum.catalog import CurriculumCatalog

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/syllabus", tags=["syllabus"], dependencies=[Depends(require_service_auth)])


class TermResponse(BaseModel):
    term: int
    subject_count: int


class SubjectResponse(BaseModel):
    code: str
    name: str


class UnitResponse(BaseModel):
    number: int
    title: str


class TopicListResponse(BaseModel):
    title: str
    topics: List[str]


class TopicContentResponse(BaseModel):
    subject: str
    unit: str
    topic: str
    content: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "subject": "CIRCUIT ANALYSIS",
                "unit": "DC CIRCUIT ANALYSIS",
                "topic": "Ohm's Law",
                "content": "**1. 📘 Detailed Explanation**\nOhm's law relates voltage, current and resistance...",
            }
        }
    }


class ProgressRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=16)
    unit: int = Field(..., ge=1)
    topic: int = Field(..., ge=0)

    model_config = {"json_schema_extra": {"example": {"code": "EC3251", "unit": 1, "topic": 0}}}


class ProgressResponse(BaseModel):
    message: str
    created: bool


@router.get("/terms", response_model=List[TermResponse], responses={500: ERROR_RESPONSES[500]})
async def list_terms(curriculum: CurriculumCatalog = Depends(get_curriculum)) -> List[TermResponse]:
    return [TermResponse(term=t.term, subject_count=t.subject_count) for t in curriculum.list_terms()]


@router.get(
    "/terms/{term}/subjects",
    response_model=List[SubjectResponse],
    responses={404: ERROR_RESPONSES[404]},
)
async def list_subjects(
    term: int = Path(..., ge=1),
    curriculum: CurriculumCatalog = Depends(get_curriculum),
) -> List[SubjectResponse]:
    return [SubjectResponse(code=s.code, name=s.name) for s in curriculum.get_term(term).subjects]


@router.get(
    "/subjects/{code}/units",
    response_model=List[UnitResponse],
    responses={404: ERROR_RESPONSES[404]},
)
async def list_units(
    code: str,
    curriculum: CurriculumCatalog = Depends(get_curriculum),
) -> List[UnitResponse]:
    return [UnitResponse(number=u.number, title=u.title) for u in curriculum.get_subject(code).units]


@router.get(
    "/subjects/{code}/units/{unit}/topics",
    response_model=TopicListResponse,
    responses={404: ERROR_RESPONSES[404]},
)
async def list_topics(
    code: str,
    unit: int,
    curriculum: CurriculumCatalog = Depends(get_curriculum),
) -> TopicListResponse:
    listing = curriculum.list_topics(code, unit)
    return TopicListResponse(title=listing.title, topics=list(listing.topics))


@router.get(
    "/subjects/{code}/units/{unit}/topics/{index}/content",
    response_model=TopicContentResponse,
    responses={404: ERROR_RESPONSES[404], 502: ERROR_RESPONSES[502]},
)
async def get_topic_content(
    code: str,
    unit: int,
    index: int,
    learner_id: Optional[str] = Depends(optional_learner),
    service: TopicContentService = Depends(get_topic_content_service),
) -> TopicContentResponse:
    content = await service.get_topic_content(code, unit, index, learner_id=learner_id)
    return TopicContentResponse(
        subject=content.subject,
        unit=content.unit,
        topic=content.topic,
        content=content.content,
    )


@router.post(
    "/progress",
    response_model=ProgressResponse,
    responses={
        401: ERROR_RESPONSES[401],
        404: ERROR_RESPONSES[404],
        422: ERROR_RESPONSES[422],
    },
)
async def record_progress(
    request: ProgressRequest,
    learner_id: str = Depends(require_learner),
    use_case: RecordProgressUseCase = Depends(get_record_progress_use_case),
) -> ProgressResponse:
    result = await use_case.execute(
        RecordProgressCommand(
            learner_id=learner_id,
            subject_code=request.code,
            unit_number=request.unit,
            topic_index=request.topic,
        )
    )
    return ProgressResponse(message=result.message, created=result.created)
