from __future__ import annotations

from dataclasses import dataclass

import structlog

from study_assistant.application.ports import ActivityRepositoryPort, ProgressRepositoryPort
from study_assistant.domain.curriculum.catalog import CurriculumCatalog
from study_assistant.domain.learner.models import ActivityEntry, ActivityType, ProgressEntry

logger = structlog.get_logger(__name__)

PROGRESS_SAVED_MESSAGE = "Progress saved successfully"


@dataclass(frozen=True)
class RecordProgressCommand:
    learner_id: str
    subject_code: str
    unit_number: int
    topic_index: int


@dataclass(frozen=True)
class RecordProgressResult:
    created: bool
    message: str = PROGRESS_SAVED_MESSAGE


class RecordProgressUseCase:
    """
    Records a topic completion once per learner. Repeated submissions are
    acknowledged without creating a second record or activity entry.
    """

    def __init__(
        self,
        curriculum: CurriculumCatalog,
        progress: ProgressRepositoryPort,
        activities: ActivityRepositoryPort,
    ):
        self._curriculum = curriculum
        self._progress = progress
        self._activities = activities

    async def execute(self, cmd: RecordProgressCommand) -> RecordProgressResult:
        location = self._curriculum.locate_topic(cmd.subject_code, cmd.unit_number, cmd.topic_index)
        code = location.subject.code

        created = await self._progress.add(
            ProgressEntry(
                learner_id=cmd.learner_id,
                subject_code=code,
                unit_number=cmd.unit_number,
                topic_index=cmd.topic_index,
            )
        )
        if created:
            await self._activities.add(
                ActivityEntry(
                    learner_id=cmd.learner_id,
                    activity_type=ActivityType.TOPIC_COMPLETED,
                    description=f"Completed {code} - Unit {cmd.unit_number} - Topic {cmd.topic_index}",
                )
            )
        logger.info(
            "topic_progress_recorded",
            subject_code=code,
            unit_number=cmd.unit_number,
            topic_index=cmd.topic_index,
            created=created,
        )
        return RecordProgressResult(created=created)
