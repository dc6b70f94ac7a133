# src/prompts/builder.py — v1
"""Prompt assembly for single-image analysis and multi-image comparison.

Pure string building: vocabularies come from the taxonomy so user
overrides reach the model. Comparison answers are turned back into
markdown by ``format_compare_markdown``.
"""

from __future__ import annotations

import re

from m2md.parsing.taxonomy import Taxonomy, build_taxonomy

_ANALYSIS_SYSTEM_PROMPT = """You are an expert image analyst producing structured descriptions that AI agents will search.

Your answer is stored in a searchable index. Later, a language model will match user queries (for example "the minimalist Japanese packaging with the kraft paper texture") against your fields, so consistency and specificity matter.

Format your response with exactly these sections:

TYPE:
[Exactly one of: {types}]

CATEGORY:
[1-2 from: {categories}]
Comma-separated if more than one.

STYLE:
[2-5 from: {styles}]
Prefer the list. You may add one unlisted term if nothing fits. Comma-separated, hyphenated compounds.

MOOD:
[2-4 from: {moods}]
Prefer the list. You may add one unlisted term if nothing fits. Comma-separated.

MEDIUM:
[Exactly one from: {mediums}]

COMPOSITION:
[1-3 from: {compositions}]
Comma-separated if more than one.

PALETTE:
[3-6 descriptive hyphenated color names, comma-separated]
Use specific compound names such as kraft-brown, matte-black, warm-white, navy-blue, forest-green, coral-pink.
Not generic names like "brown" or "blue". Not hex values.

SUBJECT:
[One-line summary, at most 80 characters, like an email subject line]

TAGS:
[5-15 hyphenated keywords, comma-separated]
Be specific: "japanese-typography" rather than "typography".
Seed terms: {tags}
Do not repeat values already used in style, mood, category or palette.

DESCRIPTION:
[Flat bullet points only, no headings and no prose paragraphs. One concrete visual observation per bullet. 5-12 bullets.]

EXTRACTED_TEXT:
[All visible text, minimally formatted. Use bold labels for grouping, e.g.
**Brand:** Name Here
**Heading:** Main text
If no text is visible, write "None"]

Rules:
- All list values are hyphenated lowercase: "packaging-design", not "packaging design"
- TYPE and CATEGORY come from their closed sets
- STYLE, MOOD, MEDIUM, COMPOSITION: prefer the suggested vocabulary, extend only when necessary
- Screenshots: describe UI components, layout structure and interactive elements
- Photos: describe subject, setting and notable details
- Diagrams: describe nodes, relationships and flow direction
- Documents: describe structure, headings and content organization
- Mark partially obscured or unclear text with [unclear]"""

_ANALYSIS_USER_PROMPT = (
    "Analyze this {format} image ({filename}). Respond with TYPE:, CATEGORY:, "
    "STYLE:, MOOD:, MEDIUM:, COMPOSITION:, PALETTE:, SUBJECT:, TAGS:, "
    "DESCRIPTION:, and EXTRACTED_TEXT: sections as specified."
)

_COMPARE_SYSTEM_PROMPT = """You are an expert image analyst comparing images. Produce a structured comparison.

Format your response with exactly these sections:

SUMMARY:
[One or two sentences on how the images relate: versions of the same thing, unrelated, before/after, and so on]

SIMILARITIES:
[Bullet points listing what the images share]

DIFFERENCES:
[Bullet points grouped by aspect (layout, content, color, typography). Refer to images as "Image A", "Image B".]

VERDICT:
[A short assessment of which is clearer or more effective and why, or that neither is clearly better]

Guidelines:
- Be specific and reference concrete visual elements
- Use bullet points, not prose
- If one image is clearly a revision of another, say what changed"""

_FOCUS_DIRECTIVE = "Focus directive: pay special attention to the following in your analysis:\n{note}"

COMPARE_SECTIONS: tuple[tuple[str, str], ...] = (
    ("SUMMARY", "## Summary"),
    ("SIMILARITIES", "## Similarities"),
    ("DIFFERENCES", "## Differences"),
    ("VERDICT", "## Verdict"),
)

_COMPARE_LABELS = "|".join(key for key, _ in COMPARE_SECTIONS)


def build_system_prompt(
    custom_prompt: str | None = None,
    note: str | None = None,
    taxonomy: Taxonomy | None = None,
) -> str:
    """System prompt for single-image analysis.

    Args:
        custom_prompt: Extra instructions appended after the base prompt.
        note: Focus directive appended last.
        taxonomy: Vocabularies to advertise; defaults when None.
    """
    vocab = taxonomy or build_taxonomy()
    prompt = _ANALYSIS_SYSTEM_PROMPT.format(
        types=", ".join(vocab.types),
        categories=", ".join(vocab.categories),
        styles=", ".join(vocab.styles),
        moods=", ".join(vocab.moods),
        mediums=", ".join(vocab.mediums),
        compositions=", ".join(vocab.compositions),
        tags=", ".join(vocab.tags),
    )
    if custom_prompt:
        prompt += f"\n\n{custom_prompt}"
    if note:
        prompt += "\n\n" + _FOCUS_DIRECTIVE.format(note=note)
    return prompt


def build_user_prompt(filename: str, image_format: str) -> str:
    return _ANALYSIS_USER_PROMPT.format(format=image_format, filename=filename)


def build_compare_system_prompt(note: str | None = None) -> str:
    prompt = _COMPARE_SYSTEM_PROMPT
    if note:
        prompt += "\n\n" + _FOCUS_DIRECTIVE.format(note=note)
    return prompt


def image_label(index: int) -> str:
    """0 → "Image A", 1 → "Image B", …"""
    return f"Image {chr(ord('A') + index)}"


def build_compare_user_prompt(filenames: list[str]) -> str:
    labels = "\n".join(f"{image_label(i)}: {name}" for i, name in enumerate(filenames))
    return (
        f"Compare these {len(filenames)} images:\n{labels}\n\n"
        "Respond with SUMMARY:, SIMILARITIES:, DIFFERENCES:, and VERDICT: "
        "sections as specified."
    )


def format_compare_markdown(raw_text: str, filenames: list[str]) -> str:
    """Render a comparison answer as markdown.

    Falls back to the raw answer when none of the sections are found.
    """
    labels = "\n".join(f"- **{image_label(i)}:** {name}" for i, name in enumerate(filenames))
    header = f"# Comparison\n\n{labels}\n\n"

    body = ""
    for key, heading in COMPARE_SECTIONS:
        pattern = rf"^{key}:[ \t]*\n?(.*?)(?=^(?:{_COMPARE_LABELS}):|\Z)"
        match = re.search(pattern, raw_text, re.MULTILINE | re.DOTALL)
        if match and match.group(1).strip():
            body += f"{heading}\n\n{match.group(1).strip()}\n\n"

    if not body.strip():
        body = raw_text
    return header + body.rstrip() + "\n"
