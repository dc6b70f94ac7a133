# src/pipeline/processor.py — v1
"""Single-image pipeline: metadata → cache → provider → parse → validate → render.

Steps run strictly in order for one item:

1. Format pre-flight (extension only, no I/O).
2. Single read of the source, metadata and content hash.
3. Cache lookup. A hit returns the stored render with no provider call and
   no validation warnings.
4. On a miss: prompts → provider call → refusal check.
5. Parse → validate → merge corrections → render → store.

Provider errors and refusals propagate unchanged; the pipeline never retries.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from m2md.cache.base_cache_store import BaseCacheStore
from m2md.cache.json_store import JsonCacheStore
from m2md.cache.key import build_cache_key
from m2md.cache.models import CacheEntry
from m2md.config.options import ProcessOptions
from m2md.core.sizes import MIB
from m2md.extraction.metadata import (
    ImageMetadata,
    check_supported,
    extract_metadata,
    extract_metadata_from_bytes,
    mime_type_from_extension,
)
from m2md.llm.base_client import BaseProvider
from m2md.llm.models import AnalyzeOptions, ImageInput, TokenUsage
from m2md.parsing.parser import parse_response
from m2md.parsing.taxonomy import build_taxonomy, validate_parsed
from m2md.prompts.builder import (
    build_compare_system_prompt,
    build_compare_user_prompt,
    build_system_prompt,
    build_user_prompt,
    format_compare_markdown,
)
from m2md.templates.builtins import DEFAULT_TEMPLATE
from m2md.templates.engine import render_template

logger = logging.getLogger(__name__)

LARGE_FILE_WARNING_BYTES = 15 * MIB

# Refusals are short; a real description is longer than this
REFUSAL_MAX_CHARS = 300
REFUSAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^i'?m sorry,? i can'?t",
        r"^i cannot assist",
        r"^i'?m unable to",
        r"^i can'?t (help|provide|assist|describe|analyze)",
        r"^sorry,? but i (can'?t|cannot|am unable)",
        r"^i'?m not able to",
        r"^i apologize,? but",
    )
)


class RefusalError(Exception):
    """The provider declined to describe the image."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(
            f"Model refused to process {filename}: content may have been "
            "flagged by the provider's safety filter"
        )


class ProcessResult(BaseModel):
    """Rendered markdown plus the validated fields it was rendered from."""

    type: str = "other"
    category: str = ""
    style: str = ""
    mood: str = ""
    medium: str = ""
    composition: str = ""
    palette: str = ""
    subject: str = ""
    description: str = ""
    extracted_text: str = ""
    colors: str = ""
    tags: str = ""
    metadata: ImageMetadata
    markdown: str
    cached: bool = False
    usage: TokenUsage | None = None
    model: str | None = None
    warnings: list[str] = Field(default_factory=list)


class CompareResult(BaseModel):
    filenames: list[str]
    markdown: str
    usage: TokenUsage | None = None
    model: str | None = None


def is_refusal(text: str) -> bool:
    trimmed = text.strip()
    if len(trimmed) > REFUSAL_MAX_CHARS:
        return False
    return any(p.search(trimmed) for p in REFUSAL_PATTERNS)


async def process_file(
    path: str | Path,
    options: ProcessOptions,
    store: BaseCacheStore | None = None,
    large_file_warning_bytes: int = LARGE_FILE_WARNING_BYTES,
) -> ProcessResult:
    """Process one local image file.

    Raises:
        UnsupportedFormatError: Extension not supported (before any I/O).
        ImageNotFoundError: File does not exist.
        RefusalError: Provider declined the image.
    """
    check_supported(path)
    metadata, data = extract_metadata(path)
    if metadata.size_bytes > large_file_warning_bytes:
        logger.warning(
            "%s is %s; large images may be rejected by the provider",
            metadata.filename, metadata.size_human,
        )
    return await _process_core(metadata, data, options, store)


async def process_bytes(
    data: bytes,
    filename: str,
    options: ProcessOptions,
    mime_type: str | None = None,
    store: BaseCacheStore | None = None,
) -> ProcessResult:
    """Process an in-memory image (URL download). Same pipeline, no file read."""
    metadata = extract_metadata_from_bytes(data, filename, mime_type)
    return await _process_core(metadata, data, options, store)


async def _process_core(
    metadata: ImageMetadata,
    data: bytes,
    options: ProcessOptions,
    store: BaseCacheStore | None,
) -> ProcessResult:
    cache = store or JsonCacheStore()
    cache_key = build_cache_key(metadata.sha256, options.cache_key_options())

    if not options.no_cache:
        entry = await cache.get(cache_key)
        if entry is not None:
            logger.debug("Cache hit for %s", metadata.filename)
            return _result_from_cache(entry, metadata)
        logger.debug("Cache miss for %s", metadata.filename)

    taxonomy = options.taxonomy or build_taxonomy()
    system_prompt = build_system_prompt(options.prompt, options.note, taxonomy)
    user_prompt = build_user_prompt(metadata.filename, metadata.format)

    logger.info(
        "Analyzing %s with %s", metadata.filename, options.effective_provider_name
    )
    response = await options.provider.analyze(
        ImageInput(
            data=data,
            mime_type=mime_type_from_extension(metadata.extension),
            filename=metadata.filename,
        ),
        AnalyzeOptions(
            model=options.model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
        ),
    )

    if is_refusal(response.text):
        raise RefusalError(metadata.filename)

    parsed = parse_response(response.text).fields()
    validation = validate_parsed(parsed, taxonomy)
    for warning in validation.warnings:
        logger.warning("%s: %s", metadata.filename, warning)
    fields = {**parsed, **validation.corrections}

    now = datetime.now(timezone.utc)
    model_label = options.model or "default"
    markdown = render_template(
        options.template or DEFAULT_TEMPLATE,
        build_template_vars(fields, metadata, now, model_label, options.note),
    )

    if not options.no_cache:
        await cache.put(
            cache_key,
            CacheEntry(
                hash=metadata.sha256,
                markdown=markdown,
                model=model_label,
                cached_at=now,
                **fields,
            ),
        )

    return ProcessResult(
        **fields,
        metadata=metadata,
        markdown=markdown,
        cached=False,
        usage=response.usage,
        model=response.model,
        warnings=validation.warnings,
    )


def build_template_vars(
    fields: dict[str, str],
    metadata: ImageMetadata,
    processed_at: datetime,
    model: str,
    note: str | None = None,
) -> dict[str, str]:
    """Flat variable map exposed to templates."""
    return {
        "type": fields["type"],
        "category": fields["category"],
        "style": fields["style"],
        "mood": fields["mood"],
        "medium": fields["medium"],
        "composition": fields["composition"],
        "palette": fields["palette"],
        "subject": fields["subject"].replace('"', '\\"'),
        "filename": metadata.filename,
        "basename": metadata.basename,
        "format": metadata.format,
        "dimensions": metadata.dimensions,
        "width": str(metadata.width) if metadata.width else "unknown",
        "height": str(metadata.height) if metadata.height else "unknown",
        "sizeHuman": metadata.size_human,
        "sizeBytes": str(metadata.size_bytes),
        "sha256": metadata.sha256,
        "processedDate": processed_at.date().isoformat(),
        "datetime": processed_at.isoformat(timespec="seconds"),
        "model": model,
        "note": note or "",
        "sourcePath": f"./{metadata.filename}",
        "description": fields["description"],
        "extractedText": fields["extracted_text"],
        "colors": fields["colors"],
        "tags": fields["tags"],
    }


def _result_from_cache(entry: CacheEntry, metadata: ImageMetadata) -> ProcessResult:
    return ProcessResult(
        type=entry.type,
        category=entry.category,
        style=entry.style,
        mood=entry.mood,
        medium=entry.medium,
        composition=entry.composition,
        palette=entry.palette,
        subject=entry.subject,
        description=entry.description,
        extracted_text=entry.extracted_text,
        colors=entry.colors,
        tags=entry.tags,
        metadata=metadata,
        markdown=entry.markdown,
        cached=True,
    )


async def compare_images(
    paths: list[str | Path],
    provider: BaseProvider,
    note: str | None = None,
    model: str | None = None,
) -> CompareResult:
    """Compare two or more local images in a single provider call.

    Raises:
        ValueError: Fewer than two images.
        UnsupportedFormatError / ImageNotFoundError: Pre-flight failures.
    """
    if len(paths) < 2:
        raise ValueError("Compare requires at least 2 images.")

    images: list[ImageInput] = []
    for path in paths:
        check_supported(path)
        metadata, data = extract_metadata(path)
        images.append(
            ImageInput(
                data=data,
                mime_type=mime_type_from_extension(metadata.extension),
                filename=metadata.filename,
            )
        )

    filenames = [img.filename for img in images]
    logger.info("Comparing %s with %s", ", ".join(filenames), provider.provider_name)
    response = await provider.compare(
        images,
        AnalyzeOptions(
            model=model,
            system_prompt=build_compare_system_prompt(note),
            user_prompt=build_compare_user_prompt(filenames),
        ),
    )
    return CompareResult(
        filenames=filenames,
        markdown=format_compare_markdown(response.text, filenames),
        usage=response.usage,
        model=response.model,
    )
