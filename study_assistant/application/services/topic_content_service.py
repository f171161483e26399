from __future__ import annotations

from typing import Optional

import structlog

from study_assistant.application.ports import ActivityRepositoryPort, TextGeneratorPort
from study_assistant.domain.content.prompts import TOPIC_CONTENT_SYSTEM_PROMPT, build_topic_content_prompt
from study_assistant.domain.curriculum.catalog import CurriculumCatalog
from study_assistant.domain.curriculum.models import TopicContent
from study_assistant.domain.learner.models import ActivityEntry, ActivityType
from study_assistant.domain.sourcing.request_builder import GenerationRequest

logger = structlog.get_logger(__name__)


class TopicContentService:
    """Generates the explanatory document for one curriculum topic."""

    def __init__(
        self,
        curriculum: CurriculumCatalog,
        generator: TextGeneratorPort,
        activities: Optional[ActivityRepositoryPort] = None,
    ):
        self._curriculum = curriculum
        self._generator = generator
        self._activities = activities

    async def get_topic_content(
        self,
        subject_code: str,
        unit_number: int,
        topic_index: int,
        learner_id: Optional[str] = None,
    ) -> TopicContent:
        location = self._curriculum.locate_topic(subject_code, unit_number, topic_index)
        subject, unit, topic = location.subject, location.unit, location.topic

        logger.info(
            "topic_content_requested",
            subject_code=subject.code,
            unit_number=unit.number,
            topic_index=topic_index,
        )
        prompt = build_topic_content_prompt(
            subject=subject.name,
            unit=f"Unit {unit.number}: {unit.title}",
            topic=topic,
        )
        content = await self._generator.generate(
            GenerationRequest(
                prompt=prompt,
                system_prompt=TOPIC_CONTENT_SYSTEM_PROMPT,
                allow_internet=True,
            )
        )
        logger.info("topic_content_generated", subject_code=subject.code, chars=len(content))

        if learner_id and self._activities is not None:
            await self._activities.add(
                ActivityEntry(
                    learner_id=learner_id,
                    activity_type=ActivityType.SYLLABUS_NAVIGATOR,
                    description=f"Explored {subject.name} - {topic}",
                )
            )

        return TopicContent(subject=subject.name, unit=unit.title, topic=topic, content=content)
