# src/batch/runner.py — v1
"""Bounded-concurrency batch execution with size-based provider fallback.

``plan_work_items`` decides routing once, before any network call: files
over the primary provider's payload limit go to the alternate provider when
its credential is set and the file fits its limit, and are skipped
otherwise. ``BatchOrchestrator`` then drives the planned items through the
single-image pipeline on a shared work queue.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import TypeVar

import httpx

from m2md.batch.models import BatchSummary, ItemResult, SkippedFile, WorkItem, WorkPlan
from m2md.cache.base_cache_store import BaseCacheStore
from m2md.config.options import ProcessOptions
from m2md.config.settings import Settings
from m2md.core.sizes import megabytes
from m2md.extraction.url import fetch_image
from m2md.llm.client_factory import (
    alternate_provider_name,
    default_model_for,
    has_credentials,
)
from m2md.logging.context import set_batch_context, set_item_context
from m2md.pipeline.processor import (
    LARGE_FILE_WARNING_BYTES,
    ProcessResult,
    RefusalError,
    process_bytes,
    process_file,
)
from m2md.storage.writer import (
    format_output_path,
    sidecar_path,
    write_image,
    write_markdown,
)
from m2md.templates.engine import strip_frontmatter

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_batch(
    items: Sequence[T],
    concurrency: int,
    fn: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Apply ``fn`` to every item with at most ``concurrency`` in flight.

    ``min(concurrency, len(items))`` workers pull from one shared queue
    until it is empty. Results are returned in input order regardless of
    completion order. An exception raised by ``fn`` cancels the remaining
    workers and propagates; callers that need per-item isolation handle
    errors inside ``fn``.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
    for index, item in enumerate(items):
        queue.put_nowait((index, item))
    results: list[R | None] = [None] * len(items)

    async def worker() -> None:
        while True:
            try:
                index, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await fn(item)

    workers = [asyncio.create_task(worker()) for _ in range(min(concurrency, len(items)))]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for task in workers:
            task.cancel()
        raise
    return results  # type: ignore[return-value]


def plan_work_items(
    paths: Sequence[str | Path],
    urls: Sequence[str],
    primary_provider: str,
    settings: Settings,
) -> WorkPlan:
    """Route local files by size. URLs always use the primary provider.

    Files that cannot be stat'd are kept; they fail later with a
    not-found error of their own.
    """
    primary_limit = settings.max_image_bytes_for(primary_provider)
    alt_name = alternate_provider_name(primary_provider)
    alt_available = alt_name is not None and has_credentials(alt_name, settings)
    alt_limit = settings.max_image_bytes_for(alt_name) if alt_name else None

    plan = WorkPlan(
        primary_provider=primary_provider,
        primary_limit=primary_limit,
        alt_provider=alt_name if alt_available else None,
        alt_model=default_model_for(alt_name) if alt_available else None,
        alt_limit=alt_limit if alt_available else None,
    )

    oversized: list[WorkItem] = []
    for raw in paths:
        path = str(raw)
        try:
            size = Path(path).stat().st_size
        except OSError:
            size = None
        item = WorkItem(kind="file", source=path, size_bytes=size)
        if size is not None and size > primary_limit:
            oversized.append(item)
        plan.items.append(item)

    if oversized:
        logger.warning(
            "%d file(s) exceed %s's %s MB limit: %s",
            len(oversized), primary_provider, megabytes(primary_limit, 0),
            ", ".join(f"{i.label} ({megabytes(i.size_bytes or 0)} MB)" for i in oversized),
        )

    for item in oversized:
        size = item.size_bytes or 0
        if alt_available and alt_limit is not None and size <= alt_limit:
            item.use_alt = True
            continue
        if alt_available:
            reason = f"exceeds {alt_name}'s {megabytes(alt_limit or 0, 0)} MB limit"
        elif alt_name:
            reason = f"set {alt_name.upper()}_API_KEY to fall back to {alt_name}"
        else:
            reason = f"exceeds {primary_provider}'s {megabytes(primary_limit, 0)} MB limit"
        plan.skipped.append(
            SkippedFile(path=item.source, filename=item.label, size_bytes=size, reason=reason)
        )

    skipped_paths = {s.path for s in plan.skipped}
    plan.items = [i for i in plan.items if i.source not in skipped_paths]
    plan.items.extend(WorkItem(kind="url", source=u) for u in urls)

    rerouted = sum(1 for i in plan.items if i.use_alt)
    if rerouted:
        logger.info("Routing %d oversized file(s) through %s", rerouted, alt_name)
    if plan.skipped:
        logger.warning("Skipping %d file(s) too large for any provider", len(plan.skipped))
    return plan


class BatchOrchestrator:
    """Runs a WorkPlan through the single-image pipeline.

    Each item's outcome is recorded in an ItemResult; one item's failure
    never stops the others.
    """

    def __init__(
        self,
        options: ProcessOptions,
        alt_options: ProcessOptions | None = None,
        store: BaseCacheStore | None = None,
        concurrency: int = 5,
        output_dir: str | Path | None = None,
        name_pattern: str | None = None,
        to_stdout: bool = False,
        no_frontmatter: bool = False,
        large_file_warning_bytes: int = LARGE_FILE_WARNING_BYTES,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._options = options
        self._alt_options = alt_options
        self._store = store
        self._concurrency = concurrency
        self._output_dir = Path(output_dir) if output_dir else None
        self._name_pattern = name_pattern
        self._to_stdout = to_stdout
        self._no_frontmatter = no_frontmatter
        self._large_file_warning_bytes = large_file_warning_bytes
        self._http_client = http_client

    async def run(self, plan: WorkPlan) -> BatchSummary:
        """Process every planned item and aggregate the outcomes."""
        if plan.needs_alt and self._alt_options is None:
            raise ValueError("plan routes items to an alternate provider but none was given")

        set_batch_context(uuid.uuid4().hex[:8])
        t0 = time.perf_counter()
        results = await run_batch(plan.items, self._concurrency, self._run_item)
        summary = BatchSummary(
            results=results,
            skipped=plan.skipped,
            elapsed_seconds=time.perf_counter() - t0,
        )
        logger.info(
            "Batch complete: %d succeeded, %d failed, %d cached, %d skipped in %.1fs",
            summary.succeeded, summary.failed, summary.cached,
            len(summary.skipped), summary.elapsed_seconds,
        )
        return summary

    async def _run_item(self, item: WorkItem) -> ItemResult:
        options = self._alt_options if item.use_alt and self._alt_options else self._options
        set_item_context(item.label, options.effective_provider_name)
        try:
            if item.kind == "file":
                return await self._run_file(item, options)
            return await self._run_url(item, options)
        except Exception as e:
            logger.error("%s: %s", item.label, e)
            return ItemResult(
                source=item.source,
                success=False,
                use_alt=item.use_alt,
                refused=isinstance(e, RefusalError),
                error=str(e),
            )

    async def _run_file(self, item: WorkItem, options: ProcessOptions) -> ItemResult:
        result = await process_file(
            item.source, options, self._store, self._large_file_warning_bytes
        )
        if self._to_stdout:
            return self._item_result(item, result)
        out_path = self._output_path(Path(item.source), result, self._output_dir)
        await write_markdown(self._finalize(result.markdown), out_path)
        return self._item_result(item, result, output_path=out_path)

    async def _run_url(self, item: WorkItem, options: ProcessOptions) -> ItemResult:
        fetched = await fetch_image(item.source, client=self._http_client)
        result = await process_bytes(
            fetched.data, fetched.filename, options, fetched.mime_type, self._store
        )
        if self._to_stdout:
            return self._item_result(item, result)

        out_dir = self._output_dir or Path(".")
        image_path = await write_image(fetched.data, out_dir / result.metadata.filename)
        out_path = self._output_path(image_path, result, out_dir)
        await write_markdown(self._finalize(result.markdown), out_path)
        return self._item_result(item, result, output_path=out_path, image_path=image_path)

    def _output_path(self, image_path: Path, result: ProcessResult, out_dir: Path | None) -> Path:
        if self._name_pattern:
            return format_output_path(
                image_path,
                self._name_pattern,
                image_type=result.type,
                subject=result.subject,
                output_dir=out_dir,
            )
        return sidecar_path(image_path, out_dir)

    def _finalize(self, markdown: str) -> str:
        return strip_frontmatter(markdown) if self._no_frontmatter else markdown

    def _item_result(
        self,
        item: WorkItem,
        result: ProcessResult,
        output_path: Path | None = None,
        image_path: Path | None = None,
    ) -> ItemResult:
        return ItemResult(
            source=item.source,
            success=True,
            output_path=str(output_path) if output_path else None,
            image_path=str(image_path) if image_path else None,
            markdown=self._finalize(result.markdown),
            cached=result.cached,
            use_alt=item.use_alt,
            usage=result.usage,
            model=result.model,
        )
