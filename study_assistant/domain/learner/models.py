from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union
from uuid import uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class ActivityType(str, Enum):
    SYLLABUS_NAVIGATOR = "SYLLABUS_NAVIGATOR"
    TOPIC_COMPLETED = "TOPIC_COMPLETED"
    CHAT = "CHAT"


@dataclass(frozen=True)
class ActivityEntry:
    learner_id: str
    activity_type: ActivityType
    description: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ProgressEntry:
    learner_id: str
    subject_code: str
    unit_number: int
    topic_index: int
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[str, str, int, int]:
        return (self.learner_id, self.subject_code, self.unit_number, self.topic_index)


# Legacy entries stored a plain string; structured ones carry content + metadata.
AssistantResponse = Union[str, dict[str, Any]]


@dataclass(frozen=True)
class AssistantQueryEntry:
    learner_id: str
    query: dict[str, Any]
    response: AssistantResponse
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def message(self) -> str:
        return str(self.query.get("topic") or "")
