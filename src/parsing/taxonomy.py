# src/parsing/taxonomy.py — v1
"""Controlled vocabularies for image classification and post-parse validation.

Strict fields (``type``, ``category``) are corrected when the model strays
outside the vocabulary. Suggested fields (``style``, ``mood``, ``medium``,
``composition``, ``palette``) are accepted as-is. ``tags`` only get
whitespace normalised to hyphens.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

TYPES: tuple[str, ...] = (
    "photo", "illustration", "painting", "sketch", "diagram", "chart",
    "screenshot", "render-3d", "collage", "pattern", "document",
    "whiteboard", "mockup", "other",
)

CATEGORIES: tuple[str, ...] = (
    "branding", "packaging-design", "typography", "ui-design",
    "web-design", "product-design", "interior-design", "architecture",
    "fashion", "illustration", "photography", "motion-design",
    "print-design", "signage", "data-visualization", "icon-design",
    "editorial", "advertising", "art",
    "furniture-design", "textile-design", "ceramics", "jewelry-design",
    "landscape-design", "film", "street-art", "calligraphy", "sculpture",
    "other",
)

STYLES: tuple[str, ...] = (
    "minimalist", "maximalist", "brutalist", "organic", "geometric",
    "retro", "futuristic", "vintage", "art-deco", "swiss",
    "japanese", "scandinavian", "industrial", "handmade", "editorial",
    "corporate", "luxurious", "rustic", "experimental",
    "flat", "skeuomorphic", "glassmorphism", "neomorphism",
    "abstract", "figurative", "monochrome", "colorful", "muted",
    "mid-century", "art-nouveau", "gothic", "baroque", "psychedelic", "grunge",
    "memphis", "constructivist", "de-stijl", "bauhaus", "pop-art", "surrealist",
    "wabi-sabi", "tropical", "cottagecore", "cyberpunk",
)

MOODS: tuple[str, ...] = (
    "calm", "energetic", "playful", "serious", "elegant",
    "raw", "warm", "cool", "nostalgic", "modern",
    "whimsical", "dramatic", "intimate", "grand",
    "tense", "light", "dark", "cheerful", "somber",
    "confident", "delicate", "bold", "subtle", "serene",
)

MEDIUMS: tuple[str, ...] = (
    "photography", "product-photography", "illustration", "vector",
    "pixel-art", "3d-render", "collage", "mixed-media",
    "watercolor", "ink", "pencil", "digital-painting",
    "screen-capture", "technical-drawing", "infographic",
    "data-viz", "typographic-composition", "print-scan",
    "film-photography",
    "linocut", "lithograph", "screen-print", "etching", "letterpress", "risograph",
    "woodblock", "oil-painting", "gouache", "pastel", "charcoal", "acrylic",
)

COMPOSITIONS: tuple[str, ...] = (
    "centered", "asymmetric", "grid", "layered", "diagonal",
    "radial", "full-bleed", "negative-space", "flat-lay",
    "isometric", "perspective", "split-screen", "modular",
    "stacked", "overlapping", "framed", "cropped", "panoramic",
    "rule-of-thirds", "symmetrical", "triptych", "diptych", "golden-ratio",
)

# Seed tag terms, grouped by domain for the prompt. Models may still coin
# tags outside this list.
TAG_VOCABULARY: dict[str, tuple[str, ...]] = {
    "materials": (
        "kraft-paper", "newsprint", "cardstock", "vellum", "linen", "cotton",
        "silk", "leather", "suede", "denim", "canvas", "plywood", "bamboo",
        "marble", "terrazzo", "concrete", "brushed-metal", "brass", "copper",
        "glass", "enamel", "resin", "cork",
    ),
    "techniques": (
        "letterpress", "screen-print", "risograph", "foil-stamp", "emboss",
        "deboss", "die-cut", "laser-cut", "engraving", "etching", "linocut",
        "woodblock", "cyanotype", "overprint", "duotone", "halftone", "stipple",
        "crosshatch", "hand-drawn", "hand-painted", "blind-emboss", "spot-uv",
    ),
    "finishes": (
        "matte-finish", "glossy-finish", "satin-finish", "soft-touch",
        "uncoated-stock", "spot-gloss", "textured-stock", "distressed",
        "weathered", "patina",
    ),
    "effects": (
        "gradient", "drop-shadow", "noise-texture", "film-grain", "bokeh",
        "lens-flare", "double-exposure", "long-exposure", "motion-blur", "glitch",
    ),
    "photography": (
        "natural-light", "studio-lighting", "golden-hour", "harsh-shadow",
        "soft-shadow", "shallow-depth-of-field", "macro", "aerial-view",
    ),
    "production": (
        "saddle-stitch", "perfect-bind", "french-fold", "gatefold", "tip-in",
        "belly-band", "deckle-edge", "dust-jacket",
    ),
}

TAGS: tuple[str, ...] = tuple(t for group in TAG_VOCABULARY.values() for t in group)

FALLBACK_VALUE = "other"


class TaxonomyOverrides(BaseModel):
    """User-supplied additions to the default vocabularies."""

    types: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    moods: list[str] = Field(default_factory=list)
    mediums: list[str] = Field(default_factory=list)
    compositions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class Taxonomy(BaseModel):
    """Effective vocabularies (defaults plus overrides). Immutable."""

    model_config = ConfigDict(frozen=True)

    types: tuple[str, ...] = TYPES
    categories: tuple[str, ...] = CATEGORIES
    styles: tuple[str, ...] = STYLES
    moods: tuple[str, ...] = MOODS
    mediums: tuple[str, ...] = MEDIUMS
    compositions: tuple[str, ...] = COMPOSITIONS
    tags: tuple[str, ...] = TAGS


class ValidationResult(BaseModel):
    """Corrected field values plus one warning per strict-field correction."""

    corrections: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


def build_taxonomy(overrides: TaxonomyOverrides | None = None) -> Taxonomy:
    """Extend the default vocabularies with overrides, deduplicated, order kept."""
    if overrides is None:
        return Taxonomy()
    return Taxonomy(
        types=_dedupe(TYPES, overrides.types),
        categories=_dedupe(CATEGORIES, overrides.categories),
        styles=_dedupe(STYLES, overrides.styles),
        moods=_dedupe(MOODS, overrides.moods),
        mediums=_dedupe(MEDIUMS, overrides.mediums),
        compositions=_dedupe(COMPOSITIONS, overrides.compositions),
        tags=_dedupe(TAGS, overrides.tags),
    )


def validate_parsed(parsed: Mapping[str, str], taxonomy: Taxonomy) -> ValidationResult:
    """Check parsed fields against the vocabulary. Does not modify ``parsed``."""
    result = ValidationResult()

    type_value = parsed.get("type", "")
    if type_value and type_value not in taxonomy.types:
        result.warnings.append(
            f'type "{type_value}" not in vocabulary, defaulting to "{FALLBACK_VALUE}"'
        )
        result.corrections["type"] = FALLBACK_VALUE

    category_value = parsed.get("category", "")
    if category_value:
        allowed = set(taxonomy.categories)
        tokens = split_field(category_value)
        valid = [t for t in tokens if t in allowed]
        invalid = [t for t in tokens if t not in allowed]
        if invalid:
            result.warnings.append(
                f"category: unknown values removed: {', '.join(invalid)}"
            )
            result.corrections["category"] = join_field(valid) if valid else FALLBACK_VALUE

    tags_value = parsed.get("tags", "")
    if tags_value:
        tokens = split_field(tags_value)
        if any(re.search(r"\s", t) for t in tokens):
            result.corrections["tags"] = join_field(re.sub(r"\s+", "-", t) for t in tokens)

    return result


def split_field(value: str) -> list[str]:
    """Comma-separated field → trimmed, non-empty tokens."""
    if not value:
        return []
    return [t.strip() for t in value.split(",") if t.strip()]


def join_field(tokens: Iterable[str]) -> str:
    return ", ".join(tokens)


def _dedupe(defaults: Iterable[str], extra: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*defaults, *extra]))
