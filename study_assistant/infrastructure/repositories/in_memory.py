from __future__ import annotations

import asyncio
from collections import defaultdict

from study_assistant.domain.learner.models import ActivityEntry, AssistantQueryEntry, ProgressEntry


class InMemoryProgressRepository:
    """Progress records keyed by (learner, subject, unit, topic)."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str, int, int], ProgressEntry] = {}
        self._lock = asyncio.Lock()

    async def add(self, entry: ProgressEntry) -> bool:
        async with self._lock:
            if entry.key in self._entries:
                return False
            self._entries[entry.key] = entry
            return True

    async def list_for(self, learner_id: str) -> list[ProgressEntry]:
        return [entry for entry in self._entries.values() if entry.learner_id == learner_id]


class InMemoryActivityRepository:
    def __init__(self) -> None:
        self._entries: dict[str, list[ActivityEntry]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def add(self, entry: ActivityEntry) -> None:
        async with self._lock:
            self._entries[entry.learner_id].append(entry)

    async def list_for(self, learner_id: str, limit: int = 50) -> list[ActivityEntry]:
        entries = sorted(self._entries.get(learner_id, []), key=lambda e: e.created_at, reverse=True)
        return entries[: max(0, limit)]


class InMemoryAssistantQueryRepository:
    def __init__(self) -> None:
        self._entries: dict[str, list[AssistantQueryEntry]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def add(self, entry: AssistantQueryEntry) -> None:
        async with self._lock:
            self._entries[entry.learner_id].append(entry)

    async def list_for(self, learner_id: str) -> list[AssistantQueryEntry]:
        return list(self._entries.get(learner_id, []))
