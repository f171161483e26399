from __future__ import annotations

from typing import Iterable, Iterator

from study_assistant.domain.navigation.models import CompletionRecord


class CompletionTracker:
    """Set of completed (subject, unit, topic) triples."""

    def __init__(self, records: Iterable[CompletionRecord] = ()):
        self._records: set[CompletionRecord] = set(records)

    def is_completed(self, record: CompletionRecord) -> bool:
        return record in self._records

    def add(self, record: CompletionRecord) -> bool:
        """Adds the record; returns False when it was already present."""
        if record in self._records:
            return False
        self._records.add(record)
        return True

    def __contains__(self, record: object) -> bool:
        return record in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CompletionRecord]:
        return iter(self._records)
