from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from study_assistant.domain.content.sections import ASSISTANT_ANSWER_MARKERS
from study_assistant.domain.sourcing.models import ContentQuery, SourcePlan

ASSISTANT_SYSTEM_PROMPT = (
    "You are an Academic Assistant for the ECE (Electronics and Communication Engineering) "
    "department at Anna University. You specialize in the 2021 regulation syllabus and answer "
    "with structured, textbook-based explanations formatted like short research notes. Always "
    "mention the course code and unit when possible. If a question falls outside the ECE "
    "curriculum, politely redirect the learner to the curriculum."
)


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    system_prompt: str = ASSISTANT_SYSTEM_PROMPT
    allow_internet: bool = False
    citations: tuple[str, ...] = ()
    image_data: Optional[str] = None


def _depth_instructions(query: ContentQuery) -> str:
    level = query.level
    if level is None:
        return "Depth: pitch the answer at a standard undergraduate level."
    return (
        f"Knowledge level: {level.label} ({level.code}) - {level.description}.\n"
        f"Shape the answer for this level. {level.example}"
    )


def _sourcing_instructions(plan: SourcePlan) -> str:
    numbered = "\n".join(f"{i}. {citation}" for i, citation in enumerate(plan.citations, start=1))
    if plan.allow_internet and not plan.resources_override:
        access = (
            "You may draw on general and internet knowledge, and you must stay consistent "
            "with these references:"
        )
    elif plan.resources_override:
        access = (
            "Answer the core question strictly from these references. Internet knowledge may "
            "be used only to recommend supplementary resources:"
        )
    else:
        access = "Answer strictly from these references; do not use internet sources:"
    return f"Sourcing: {plan.rationale}\n{access}\n{numbered}"


def _layout_instructions(query: ContentQuery) -> str:
    headings = []
    for marker in ASSISTANT_ANSWER_MARKERS:
        if marker.name == "Recommended Resources" and not query.include_resources:
            continue
        headings.append(marker.start_token)
    return (
        "Structure the answer with exactly these headings, in this order:\n"
        + "\n".join(headings)
        + "\nWrite formulas in bold on their own line (for example **V = I × R**) followed by "
        "their variables as dash items such as '- V: Voltage (Volts)'. Separate paragraphs "
        "with a blank line. Under the References heading cite only the sources listed above."
    )


def build_generation_request(
    query: ContentQuery,
    plan: SourcePlan,
    image_data: Optional[str] = None,
) -> GenerationRequest:
    parts = [
        "Explain the following topic for an ECE student.",
        f"Topic: {query.topic}",
        _depth_instructions(query),
    ]
    if query.subject:
        parts.append(f"Subject: {query.subject}")
    parts.append(_sourcing_instructions(plan))
    if query.include_resources:
        parts.append(
            "Recommended resources: under the Recommended Resources heading list two to four "
            "supplementary learning resources (videos, lecture notes, articles) as dash items "
            "with links."
        )
    if query.has_image:
        parts.append(
            "Image: the learner attached an image. Analyze it first and relate the explanation "
            "to what it shows."
        )
    parts.append(_layout_instructions(query))

    return GenerationRequest(
        prompt="\n\n".join(parts),
        allow_internet=plan.allow_internet,
        citations=plan.citations,
        image_data=image_data if query.has_image else None,
    )
