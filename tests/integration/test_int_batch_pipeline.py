# tests/integration/test_int_batch_pipeline.py — v1
"""End-to-end batch run: config file → discovery → size routing → pipeline → files.

Providers are scripted; everything else (Pillow, cache, templates, writer)
is real.
"""

from __future__ import annotations

import pytest

from m2md.batch.runner import BatchOrchestrator, plan_work_items
from m2md.batch.scanner import discover_images
from m2md.cache.json_store import JsonCacheStore
from m2md.config.loader import ConfigLoader
from m2md.config.options import ProcessOptions
from m2md.parsing.taxonomy import build_taxonomy
from m2md.templates.loader import load_template

HOLOGRAM_RESPONSE = """TYPE: hologram
CATEGORY: art
SUBJECT: Floating cube
TAGS: light field
DESCRIPTION:
- A glowing cube"""


@pytest.mark.asyncio
async def test_mixed_batch_with_fallback(tmp_path, settings, provider_factory, png_factory):
    project = tmp_path / "project"
    images = project / "assets"
    (images / "nested").mkdir(parents=True)
    (project / ".m2mdrc.yaml").write_text(
        "template: detailed\ntaxonomy:\n  types: [hologram]\n", encoding="utf-8"
    )
    small = images / "small.png"
    small.write_bytes(png_factory(4, 4))
    large = images / "nested" / "large.png"
    large.write_bytes(png_factory(400, 400, (10, 200, 30)))
    (images / "readme.txt").write_text("not an image", encoding="utf-8")

    file_config = ConfigLoader(project).load()
    settings = settings.model_copy(update={
        "openai_api_key": "sk-test",
        "anthropic_max_image_bytes": small.stat().st_size + 1,
    })

    paths = discover_images([images], recursive=True)
    assert [p.name for p in paths] == ["large.png", "small.png"]

    plan = plan_work_items(paths, [], "anthropic", settings)
    assert [i.use_alt for i in plan.items] == [True, False]

    primary = provider_factory([HOLOGRAM_RESPONSE], name="anthropic")
    alt = provider_factory([HOLOGRAM_RESPONSE], name="openai", model="gpt-4o")
    shared = dict(
        template=load_template(file_config.template),
        template_name=file_config.template,
        taxonomy=build_taxonomy(file_config.taxonomy),
    )
    out = tmp_path / "docs"
    orchestrator = BatchOrchestrator(
        ProcessOptions(provider=primary, **shared),
        alt_options=ProcessOptions(provider=alt, model=plan.alt_model, **shared),
        store=JsonCacheStore(tmp_path / "cache"),
        concurrency=2,
        output_dir=out,
        name_pattern="{type}-{filename}",
    )
    summary = await orchestrator.run(plan)

    assert summary.succeeded == 2
    assert len(primary.calls) == 1
    assert len(alt.calls) == 1

    written = sorted(p.name for p in out.iterdir())
    assert written == ["hologram-large.md", "hologram-small.md"]
    markdown = (out / "hologram-large.md").read_text(encoding="utf-8")
    assert "type: hologram" in markdown
    assert "tags: [light-field]" in markdown
    assert "| Property | Value |" in markdown
