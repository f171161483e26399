from __future__ import annotations

from study_assistant.domain.content.sections import TOPIC_CONTENT_MARKERS

TOPIC_CONTENT_SYSTEM_PROMPT = (
    "You are an expert lecturer for the Anna University ECE (Electronics and Communication "
    "Engineering) curriculum, regulation 2021. You write accurate, exam-oriented study material."
)

_SECTION_GUIDANCE = {
    "Detailed Explanation": (
        "Start with a simple explanation a beginner could follow, using an analogy when it helps. "
        "Then give the technical depth with proper terminology, covering every relevant concept, "
        "type and important function. Explain the methodology and working principles, any "
        "classifications, and finish with a one or two sentence summary of the key takeaway."
    ),
    "Key Formulas": (
        "Write every formula in bold on its own line, for example **V = I × R**. Directly below "
        "each formula list its variables as dash items in the form '- V: Voltage (Volts)'. "
        "Close with the steps needed to apply the formulas."
    ),
    "Visuals & Diagrams": (
        "Describe the diagrams a student should draw: circuit layouts, graphs or process flows, "
        "one paragraph per diagram."
    ),
    "IEEE Paper References": (
        "List two or three relevant IEEE papers as dash items: Author, Title, Journal/Conference, Year."
    ),
    "Prerequisite & Related Topics": (
        "List the prerequisites and then the related topics within the ECE syllabus as dash items."
    ),
}

_FORMATTING_RULES = """FORMATTING RULES:
1. Write formulas in plain text with proper symbols: × for multiplication, π for pi. Never use $$, \\( \\) or LaTeX environments.
2. Use <sub>text</sub> for subscripts and <sup>text</sup> for superscripts.
3. Separate paragraphs with a blank line and start list items with "- ".
4. Keep every heading exactly as given, in the given order, and do not add other headings."""


def build_topic_content_prompt(subject: str, unit: str, topic: str) -> str:
    layout = "\n\n".join(
        f"{marker.start_token}\n{_SECTION_GUIDANCE.get(marker.name, '')}"
        for marker in TOPIC_CONTENT_MARKERS
    )
    return (
        "Provide a comprehensive educational explanation of the following topic from the "
        "Anna University ECE syllabus.\n\n"
        f"Subject: {subject}\n"
        f"Unit: {unit}\n"
        f"Topic: {topic}\n\n"
        "Structure the answer with exactly these headings:\n\n"
        f"{layout}\n\n"
        f"{_FORMATTING_RULES}\n\n"
        "Be accurate and comprehensive. The material is used for exam preparation in "
        "electronics and communication engineering."
    )
