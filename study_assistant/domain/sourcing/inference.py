from __future__ import annotations

from typing import Optional, Protocol

from study_assistant.domain.curriculum.catalog import CurriculumCatalog


class SubjectInferenceStrategy(Protocol):
    def infer(self, topic: str) -> Optional[str]: ...


class NoSubjectInference:
    """Never guesses a subject, so unmatched queries get the generic citation."""

    def infer(self, topic: str) -> Optional[str]:
        return None


class CurriculumTopicInference:
    """
    Resolves a subject when exactly one curriculum subject has a topic, unit
    title or name containing the query text (or contained in it). Ambiguous or
    empty matches yield None.
    """

    def __init__(self, curriculum: CurriculumCatalog, min_length: int = 4):
        self._curriculum = curriculum
        self._min_length = min_length

    def infer(self, topic: str) -> Optional[str]:
        needle = str(topic or "").strip().casefold()
        if len(needle) < self._min_length:
            return None

        matches: set[str] = set()
        for subject in self._curriculum.iter_subjects():
            candidates = [subject.name]
            for unit in subject.units:
                candidates.append(unit.title)
                candidates.extend(unit.topics)
            for candidate in candidates:
                text = candidate.casefold()
                if len(text) < self._min_length:
                    continue
                if needle in text or text in needle:
                    matches.add(subject.code)
                    break
        if len(matches) == 1:
            return matches.pop()
        return None
