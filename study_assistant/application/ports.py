from __future__ import annotations

from typing import Protocol

from study_assistant.domain.learner.models import ActivityEntry, AssistantQueryEntry, ProgressEntry
from study_assistant.domain.sourcing.request_builder import GenerationRequest


class TextGeneratorPort(Protocol):
    async def generate(self, request: GenerationRequest) -> str: ...


class ProgressRepositoryPort(Protocol):
    async def add(self, entry: ProgressEntry) -> bool: ...

    async def list_for(self, learner_id: str) -> list[ProgressEntry]: ...


class ActivityRepositoryPort(Protocol):
    async def add(self, entry: ActivityEntry) -> None: ...

    async def list_for(self, learner_id: str, limit: int = 50) -> list[ActivityEntry]: ...


class AssistantQueryRepositoryPort(Protocol):
    async def add(self, entry: AssistantQueryEntry) -> None: ...

    async def list_for(self, learner_id: str) -> list[AssistantQueryEntry]: ...
