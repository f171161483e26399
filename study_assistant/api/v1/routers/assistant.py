from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import structlog
from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from study_assistant.api.v1.auth import require_learner, require_service_auth
from study_assistant.api.v1.errors import ERROR_RESPONSES
from study_assistant.application.use_cases.assistant_query_use_case import (
    AssistantQueryCommand,
    AssistantQueryUseCase,
    plan_metadata,
)
from study_assistant.core.dependencies import get_assistant_query_use_case, get_reference_catalog
from study_assistant.domain.sourcing.catalog import ReferenceCatalog
from study_assistant.domain.sourcing.models import KNOWLEDGE_LEVELS, NONE_SENTINEL

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/assistant", tags=["assistant"], dependencies=[Depends(require_service_auth)])


class AssistantQueryRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "topic": "Thevenin's theorem",
                "knowledge_level": "AP",
                "subject": "EC3251",
                "reference": "Engineering Circuit Analysis",
                "include_resources": False,
                "has_image": False,
            }
        },
    )

    topic: str = Field(..., min_length=1, max_length=2000)
    knowledge_level: Optional[str] = Field(
        None, validation_alias=AliasChoices("knowledge_level", "knowledgeLevel")
    )
    subject: Optional[str] = Field(None, max_length=16)
    reference: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("reference", "book")
    )
    include_resources: bool = Field(
        False,
        validation_alias=AliasChoices("include_resources", "includeResources", "showRecommendedResources"),
    )
    has_image: bool = Field(False, validation_alias=AliasChoices("has_image", "hasImage"))
    image_data: Optional[str] = Field(None, validation_alias=AliasChoices("image_data", "imageData"))

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("topic must not be blank")
        return text

    @field_validator("knowledge_level", mode="before")
    @classmethod
    def _known_level(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip().upper()
        if not text or text == NONE_SENTINEL.upper():
            return None
        if text not in KNOWLEDGE_LEVELS:
            raise ValueError(f"knowledge_level must be one of {', '.join(KNOWLEDGE_LEVELS)}")
        return text

    def to_command(self, learner_id: str) -> AssistantQueryCommand:
        return AssistantQueryCommand(
            learner_id=learner_id,
            topic=self.topic,
            knowledge_level=self.knowledge_level,
            subject=self.subject,
            reference=self.reference,
            include_resources=self.include_resources,
            has_image=self.has_image,
            image_data=self.image_data,
        )


class AssistantResponseBody(BaseModel):
    content: str
    metadata: Dict[str, Any]


class AssistantQueryResponse(BaseModel):
    message: str
    response: AssistantResponseBody


class AssistantHistoryItem(BaseModel):
    id: str
    message: str
    query: Dict[str, Any]
    response: Union[str, AssistantResponseBody]
    created_at: datetime


class SourcePlanResponse(BaseModel):
    uses_internet: bool
    uses_references: bool
    reference_scope: str
    citations: List[str]
    rationale: str
    resources_override: bool


class KnowledgeLevelOption(BaseModel):
    code: str
    label: str
    description: str
    example: str


class ReferenceOption(BaseModel):
    title: str
    authors: str
    citation: str


class SubjectOption(BaseModel):
    code: str
    name: str
    references: List[ReferenceOption]


class AssistantOptionsResponse(BaseModel):
    knowledge_levels: List[KnowledgeLevelOption]
    subjects: List[SubjectOption]


@router.post(
    "/query",
    response_model=AssistantQueryResponse,
    responses={
        401: ERROR_RESPONSES[401],
        422: ERROR_RESPONSES[422],
        502: ERROR_RESPONSES[502],
    },
)
async def query_assistant(
    request: AssistantQueryRequest,
    learner_id: str = Depends(require_learner),
    use_case: AssistantQueryUseCase = Depends(get_assistant_query_use_case),
) -> AssistantQueryResponse:
    result = await use_case.execute(request.to_command(learner_id))
    return AssistantQueryResponse(
        message=result.message,
        response=AssistantResponseBody(**result.response),
    )


@router.get("/history", response_model=List[AssistantHistoryItem], responses={401: ERROR_RESPONSES[401]})
async def assistant_history(
    learner_id: str = Depends(require_learner),
    use_case: AssistantQueryUseCase = Depends(get_assistant_query_use_case),
) -> List[AssistantHistoryItem]:
    entries = await use_case.history(learner_id)
    return [
        AssistantHistoryItem(
            id=entry.id,
            message=entry.message,
            query=entry.query,
            response=entry.response,
            created_at=entry.created_at,
        )
        for entry in entries
    ]


@router.get("/options", response_model=AssistantOptionsResponse)
async def assistant_options(
    catalog: ReferenceCatalog = Depends(get_reference_catalog),
) -> AssistantOptionsResponse:
    return AssistantOptionsResponse(
        knowledge_levels=[
            KnowledgeLevelOption(
                code=level.code,
                label=level.label,
                description=level.description,
                example=level.example,
            )
            for level in KNOWLEDGE_LEVELS.values()
        ],
        subjects=[
            SubjectOption(
                code=entry.code,
                name=entry.name,
                references=[
                    ReferenceOption(title=ref.title, authors=ref.authors, citation=ref.citation)
                    for ref in entry.references
                ],
            )
            for entry in catalog.subjects
        ],
    )


@router.post("/plan", response_model=SourcePlanResponse, responses={422: ERROR_RESPONSES[422]})
async def plan_sources(
    request: AssistantQueryRequest,
    use_case: AssistantQueryUseCase = Depends(get_assistant_query_use_case),
) -> SourcePlanResponse:
    plan = use_case.plan(request.to_command(learner_id="anonymous").to_query())
    return SourcePlanResponse(**plan_metadata(plan), resources_override=plan.resources_override)
