"""
Normalization of loosely structured generated text into a small, fixed set
of markup patterns: formula blocks, variable lists, bullet lists, links and
paragraphs.

`normalize_markup` is pure and idempotent. Every step recognizes its own
output and leaves it alone, so applying the pipeline twice yields the same
text as applying it once.
"""

from __future__ import annotations

import re

FORMULA_OPEN = '<div class="formula"><strong>'
FORMULA_CLOSE = "</strong></div>"

_MATH_RE = re.compile(r"[+*/=×÷∑∫√∂∆∇≈≠≤≥^−]| - ")

_MD_BOLD_RE = re.compile(r"\*\*(?!\s)(.+?)(?<!\s)\*\*")
_HTML_STRONG_RE = re.compile(r'(?<!<div class="formula">)(?<!<li>)<strong>([^<]+?)</strong>')

# "- label: description", label optionally bold; at most 40 characters.
_VAR_ITEM_RE = re.compile(
    r"^[ \t]*-[ \t]+"
    r"(?:<strong>(?P<strong>[^<\n:]{1,40})</strong>|\**(?P<plain>[^:\n<>*]{1,40}?)\**)"
    r"[ \t]*:[ \t]*(?P<desc>[^\n]*)$"
)
_VAR_LINE = r"[ \t]*-[ \t]+(?:<strong>[^<\n:]{1,40}</strong>|\**[^:\n<>*]{1,40}?\**)[ \t]*:[^\n]*"
_VAR_RUN_RE = re.compile(r"</strong></div>[ \t]*\n\s*((?:" + _VAR_LINE + r"(?:\n|$))+)")
_VAR_UL_RE = re.compile(r"(</strong></div>\s*)<ul>(\s*<li><strong>[^<\n:]{1,40}</strong>\s*:)")

_DASH_RUN_RE = re.compile(r"(?:^[ \t]*-[ \t]+[^\n]*(?:\n|\Z))+", re.MULTILINE)
_DASH_PREFIX_RE = re.compile(r"^[ \t]*-[ \t]+")

_MD_LINK_RE = re.compile(r"\[([^\]\n]+)\]\((https?://[^\s)]+)\)")
_BARE_URL_RE = re.compile(r'(?<!href=")(?<!">)(?<![\w/])(https?://[^\s<>"\'*]*[^\s<>"\'*.,;:!?)\]])')

_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
_BLOCK_TAG_RE = re.compile(
    r"^</?(?:p|div|ul|ol|li|h[1-6]|section|table|thead|tbody|tr|pre|blockquote|hr|br)\b",
    re.IGNORECASE,
)


def _looks_like_formula(text: str) -> bool:
    return "://" not in text and bool(_MATH_RE.search(text))


def _wrap_formula(text: str) -> str:
    return f"{FORMULA_OPEN}{text}{FORMULA_CLOSE}"


def wrap_formulas(text: str) -> str:
    def _markdown(match: re.Match[str]) -> str:
        inner = match.group(1)
        if _looks_like_formula(inner):
            return _wrap_formula(inner)
        return f"<strong>{inner}</strong>"

    def _html(match: re.Match[str]) -> str:
        inner = match.group(1)
        if _looks_like_formula(inner):
            return _wrap_formula(inner)
        return match.group(0)

    text = _MD_BOLD_RE.sub(_markdown, text)
    return _HTML_STRONG_RE.sub(_html, text)


def build_variable_lists(text: str) -> str:
    def _dash_run(match: re.Match[str]) -> str:
        items: list[str] = []
        for line in match.group(1).splitlines():
            item = _VAR_ITEM_RE.match(line)
            if item is None:
                continue
            label = (item.group("strong") or item.group("plain") or "").strip()
            description = item.group("desc").strip()
            items.append(f"<li><strong>{label}</strong>: {description}</li>")
        return f'{FORMULA_CLOSE}\n\n<ul class="var-list">{"".join(items)}</ul>\n\n'

    text = _VAR_RUN_RE.sub(_dash_run, text)
    return _VAR_UL_RE.sub(r'\1<ul class="var-list">\2', text)


def build_bullet_lists(text: str) -> str:
    def _run(match: re.Match[str]) -> str:
        items = [
            _DASH_PREFIX_RE.sub("", line).strip()
            for line in match.group(0).splitlines()
            if line.strip()
        ]
        return "\n\n<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>\n\n"

    return _DASH_RUN_RE.sub(_run, text)


def link_urls(text: str) -> str:
    text = _MD_LINK_RE.sub(r'<a href="\2">\1</a>', text)
    return _BARE_URL_RE.sub(r'<a href="\1">\1</a>', text)


def wrap_paragraphs(text: str) -> str:
    blocks = [block.strip() for block in _BLOCK_SPLIT_RE.split(text)]
    return "\n\n".join(
        block if _BLOCK_TAG_RE.match(block) else f"<p>{block}</p>"
        for block in blocks
        if block
    )


def normalize_markup(text: str) -> str:
    if not text:
        return ""
    normalized = text.replace("\r\n", "\n")
    normalized = wrap_formulas(normalized)
    normalized = build_variable_lists(normalized)
    normalized = build_bullet_lists(normalized)
    normalized = link_urls(normalized)
    return wrap_paragraphs(normalized)
