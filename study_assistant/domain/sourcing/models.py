from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

NONE_SENTINEL = "none"


@dataclass(frozen=True)
class KnowledgeLevel:
    code: str
    label: str
    description: str
    example: str


KNOWLEDGE_LEVELS: dict[str, KnowledgeLevel] = {
    level.code: level
    for level in (
        KnowledgeLevel(
            code="R",
            label="Remember",
            description="Recall facts and basic concepts",
            example=(
                "Example: 'Define Ohm's Law and write its mathematical expression.' "
                "Focuses on basic recall of definitions, formulas, and concepts."
            ),
        ),
        KnowledgeLevel(
            code="U",
            label="Understand",
            description="Explain ideas or concepts",
            example=(
                "Example: 'Explain the significance of Ohm's Law in circuit analysis.' "
                "Emphasizes understanding meaning and interpreting concepts."
            ),
        ),
        KnowledgeLevel(
            code="AP",
            label="Apply",
            description="Use information in new situations",
            example=(
                "Example: 'Use Ohm's Law to calculate the resistance in a circuit with 12V and "
                "2A current.' Applies knowledge to solve problems."
            ),
        ),
        KnowledgeLevel(
            code="AN",
            label="Analyze",
            description="Connect ideas and break them into parts",
            example=(
                "Example: 'Analyze how Ohm's Law relates to Kirchhoff's Laws.' "
                "Breaks down concepts and explores relationships between ideas."
            ),
        ),
        KnowledgeLevel(
            code="E",
            label="Evaluate",
            description="Justify a stand or decision",
            example=(
                "Example: 'Evaluate the limitations of Ohm's Law in semiconductor materials.' "
                "Makes judgments based on criteria and standards."
            ),
        ),
        KnowledgeLevel(
            code="C",
            label="Create",
            description="Produce new or original work",
            example=(
                "Example: 'Design a circuit to demonstrate Ohm's Law with variable resistance.' "
                "Creates new ideas or approaches using existing knowledge."
            ),
        ),
    )
}


class ReferenceScope(str, Enum):
    SPECIFIC_REFERENCE = "specific-reference"
    ALL_REFERENCES_IN_SUBJECT = "all-references-in-subject"
    ALL_REFERENCES = "all-references"
    TOPIC_INFERRED_SUBJECT_REFERENCES = "topic-inferred-subject-references"


@dataclass(frozen=True)
class Reference:
    title: str
    authors: str = ""

    @property
    def citation(self) -> str:
        return f"{self.title} ({self.authors})" if self.authors else self.title


def _optional(value: Optional[str]) -> Optional[str]:
    text = str(value or "").strip()
    if not text or text.lower() == NONE_SENTINEL:
        return None
    return text


@dataclass(frozen=True)
class ContentQuery:
    topic: str
    knowledge_level: Optional[str] = None
    subject: Optional[str] = None
    reference: Optional[str] = None
    include_resources: bool = False
    has_image: bool = False

    @classmethod
    def build(
        cls,
        topic: str,
        knowledge_level: Optional[str] = None,
        subject: Optional[str] = None,
        reference: Optional[str] = None,
        include_resources: bool = False,
        has_image: bool = False,
    ) -> "ContentQuery":
        """Normalizes blank values and the "none" sentinel to absent."""
        level = _optional(knowledge_level)
        if level is not None:
            level = level.upper()
            if level not in KNOWLEDGE_LEVELS:
                raise ValueError(f"Unknown knowledge level: {knowledge_level}")
        subject_code = _optional(subject)
        return cls(
            topic=str(topic or "").strip(),
            knowledge_level=level,
            subject=subject_code.upper() if subject_code else None,
            reference=_optional(reference),
            include_resources=bool(include_resources),
            has_image=bool(has_image),
        )

    @property
    def level(self) -> Optional[KnowledgeLevel]:
        return KNOWLEDGE_LEVELS.get(self.knowledge_level) if self.knowledge_level else None


@dataclass(frozen=True)
class SourcePlan:
    allow_internet: bool
    reference_scope: ReferenceScope
    citations: tuple[str, ...]
    rationale: str
    resources_override: bool = False

    @property
    def uses_references(self) -> bool:
        return bool(self.citations)
