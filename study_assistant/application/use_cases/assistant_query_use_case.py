from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from study_assistant.application.ports import (
    ActivityRepositoryPort,
    AssistantQueryRepositoryPort,
    TextGeneratorPort,
)
from study_assistant.domain.content.markup import normalize_markup
from study_assistant.domain.content.sections import (
    ASSISTANT_ANSWER_MARKERS,
    SectionMap,
    extract_sections,
    render_sections,
)
from study_assistant.domain.learner.models import ActivityEntry, ActivityType, AssistantQueryEntry
from study_assistant.domain.sourcing.models import ContentQuery, SourcePlan
from study_assistant.domain.sourcing.policies import SourceSelectionEngine
from study_assistant.domain.sourcing.request_builder import build_generation_request

logger = structlog.get_logger(__name__)

_ACTIVITY_PREVIEW_CHARS = 30


@dataclass(frozen=True)
class AssistantQueryCommand:
    learner_id: str
    topic: str
    knowledge_level: Optional[str] = None
    subject: Optional[str] = None
    reference: Optional[str] = None
    include_resources: bool = False
    has_image: bool = False
    image_data: Optional[str] = None

    def to_query(self) -> ContentQuery:
        return ContentQuery.build(
            topic=self.topic,
            knowledge_level=self.knowledge_level,
            subject=self.subject,
            reference=self.reference,
            include_resources=self.include_resources,
            has_image=self.has_image or bool(self.image_data),
        )


@dataclass(frozen=True)
class AssistantQueryResult:
    entry: AssistantQueryEntry
    plan: SourcePlan
    sections: SectionMap

    @property
    def message(self) -> str:
        return self.entry.message

    @property
    def response(self) -> dict[str, Any]:
        return dict(self.entry.response) if isinstance(self.entry.response, dict) else {}


def plan_metadata(plan: SourcePlan) -> dict[str, Any]:
    return {
        "uses_internet": plan.allow_internet,
        "uses_references": plan.uses_references,
        "reference_scope": plan.reference_scope.value,
        "citations": list(plan.citations),
        "rationale": plan.rationale,
    }


def _compose_content(raw_sections: SectionMap, rendered: SectionMap, raw_text: str) -> str:
    blocks = [
        f"<h3>{name}</h3>\n\n{rendered[name]}"
        for name, value in raw_sections.items()
        if value
    ]
    if not blocks:
        # No headings recognized; keep the whole answer as one normalized body.
        return normalize_markup(raw_text)
    return "\n\n".join(blocks)


class AssistantQueryUseCase:
    """Decide sources, generate, split and normalize, then persist the answer."""

    def __init__(
        self,
        engine: SourceSelectionEngine,
        generator: TextGeneratorPort,
        queries: AssistantQueryRepositoryPort,
        activities: ActivityRepositoryPort,
    ):
        self._engine = engine
        self._generator = generator
        self._queries = queries
        self._activities = activities

    def plan(self, query: ContentQuery) -> SourcePlan:
        return self._engine.decide(query)

    async def execute(self, cmd: AssistantQueryCommand) -> AssistantQueryResult:
        query = cmd.to_query()
        plan = self._engine.decide(query)
        logger.info(
            "assistant_query_planned",
            reference_scope=plan.reference_scope.value,
            allow_internet=plan.allow_internet,
            resources_override=plan.resources_override,
            citations=len(plan.citations),
        )

        request = build_generation_request(query, plan, image_data=cmd.image_data)
        raw_text = await self._generator.generate(request)

        raw_sections = extract_sections(raw_text, ASSISTANT_ANSWER_MARKERS)
        rendered = render_sections(raw_sections)
        response = {
            "content": _compose_content(raw_sections, rendered, raw_text),
            "metadata": {
                "topic": query.topic,
                "knowledge_level": query.knowledge_level,
                "subject": query.subject,
                "reference": query.reference,
                "include_resources": query.include_resources,
                "has_image": query.has_image,
                "sources": plan_metadata(plan),
                "sections": rendered,
            },
        }
        entry = AssistantQueryEntry(
            learner_id=cmd.learner_id,
            query={
                "topic": query.topic,
                "knowledge_level": query.knowledge_level,
                "subject": query.subject,
                "reference": query.reference,
                "include_resources": query.include_resources,
                "has_image": query.has_image,
            },
            response=response,
        )
        await self._queries.add(entry)

        preview = query.topic[:_ACTIVITY_PREVIEW_CHARS]
        if len(query.topic) > _ACTIVITY_PREVIEW_CHARS:
            preview += "..."
        await self._activities.add(
            ActivityEntry(
                learner_id=cmd.learner_id,
                activity_type=ActivityType.CHAT,
                description=f"Used academic assistant: {preview}",
            )
        )
        logger.info("assistant_query_answered", entry_id=entry.id, chars=len(raw_text))
        return AssistantQueryResult(entry=entry, plan=plan, sections=rendered)

    async def history(self, learner_id: str) -> list[AssistantQueryEntry]:
        return await self._queries.list_for(learner_id)
