"""Read-only curriculum tree (term → subject → unit → topic)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from study_assistant.domain.curriculum.models import (
    Subject,
    Term,
    TermSummary,
    TopicListing,
    TopicLocation,
    Unit,
)
from study_assistant.domain.exceptions import CurriculumLookupError


class CurriculumCatalog:
    """
    Immutable curriculum configuration injected into the API layer and the
    in-process hierarchy provider. Lookups raise CurriculumLookupError.
    """

    def __init__(self, terms: tuple[Term, ...]):
        self._terms = terms
        self._subjects_by_code: dict[str, Subject] = {}
        for term in terms:
            for subject in term.subjects:
                self._subjects_by_code.setdefault(subject.code, subject)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CurriculumCatalog":
        raw_terms = payload.get("terms") if isinstance(payload, dict) else None
        if not isinstance(raw_terms, list):
            raise ValueError("Curriculum payload must contain a 'terms' list")

        terms: list[Term] = []
        for raw_term in raw_terms:
            subjects = tuple(
                Subject(
                    code=str(raw_subject["code"]).strip(),
                    name=str(raw_subject.get("name") or "").strip(),
                    units=tuple(
                        Unit(
                            number=int(raw_unit["number"]),
                            title=str(raw_unit.get("title") or "").strip(),
                            topics=tuple(str(t) for t in raw_unit.get("topics") or []),
                        )
                        for raw_unit in raw_subject.get("units") or []
                    ),
                )
                for raw_subject in raw_term.get("subjects") or []
            )
            terms.append(Term(number=int(raw_term["term"]), subjects=subjects))
        return cls(tuple(terms))

    @classmethod
    def from_json(cls, path: str | Path) -> "CurriculumCatalog":
        with Path(path).open("r", encoding="utf-8") as fp:
            return cls.from_dict(json.load(fp))

    @property
    def terms(self) -> tuple[Term, ...]:
        return self._terms

    def iter_subjects(self) -> Iterator[Subject]:
        yield from self._subjects_by_code.values()

    def list_terms(self) -> list[TermSummary]:
        return [TermSummary(term=t.number, subject_count=len(t.subjects)) for t in self._terms]

    def get_term(self, number: int) -> Term:
        for term in self._terms:
            if term.number == number:
                return term
        raise CurriculumLookupError(f"Term {number} not found", level="term")

    def get_subject(self, code: str) -> Subject:
        subject = self._subjects_by_code.get(str(code or "").strip())
        if subject is None:
            raise CurriculumLookupError(f"Subject {code} not found", level="subject")
        return subject

    def get_unit(self, code: str, unit_number: int) -> Unit:
        subject = self.get_subject(code)
        for unit in subject.units:
            if unit.number == unit_number:
                return unit
        raise CurriculumLookupError(f"Unit {unit_number} of {code} not found", level="unit")

    def list_topics(self, code: str, unit_number: int) -> TopicListing:
        unit = self.get_unit(code, unit_number)
        return TopicListing(title=unit.title, topics=unit.topics)

    def locate_topic(self, code: str, unit_number: int, topic_index: int) -> TopicLocation:
        subject = self.get_subject(code)
        unit = self.get_unit(code, unit_number)
        if topic_index < 0 or topic_index >= len(unit.topics):
            raise CurriculumLookupError(
                f"Topic {topic_index} of {code} unit {unit_number} not found", level="topic"
            )
        return TopicLocation(subject=subject, unit=unit, topic_index=topic_index)
