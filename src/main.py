# src/main.py — v3
"""CLI entry point: convert images, compare images, manage the cache.

Usage:
    m2md <files|dirs|urls...> [options]
    m2md compare <a> <b> [...] [options]
    m2md cache stats|clear

Exit codes: 0 success, 1 usage or configuration error, 2 at least one item
failed, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from m2md.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_ITEM_FAILED = 2
EXIT_INTERRUPTED = 130

_SUBCOMMANDS = ("compare", "cache")

_EPILOG = """\
examples:
  m2md screenshot.png                  writes screenshot.md next to it
  m2md screenshot.png -o ./docs/       writes to docs/screenshot.md
  m2md screenshot.png --stdout         print to stdout
  m2md ./assets/ -r -o ./docs/         recursive batch into an output dir
  m2md diagram.png --template minimal  minimal output
  m2md photo.jpg --provider openai     use OpenAI GPT-4o
  m2md photo.jpg --tier fast           quick and cheap (gpt-4o-mini)
  m2md compare v1.png v2.png           side-by-side comparison

templates: default, minimal, alt-text, detailed, or a path to a .md file

environment:
  ANTHROPIC_API_KEY    required for the anthropic provider
  OPENAI_API_KEY       required for the openai provider
  M2MD_CACHE_DIR       cache location (default: $XDG_CACHE_HOME/m2md or ~/.cache/m2md)
"""


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] in _SUBCOMMANDS:
        parser = _build_subcommand_parser()
    else:
        parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help/--version exit 0; argparse usage errors exit 2
        return EXIT_OK if exc.code in (0, None) else EXIT_USAGE

    try:
        settings = _load_settings()
    except Exception as exc:
        _setup_logging(args.verbose)
        logger.error("Invalid configuration: %s", exc)
        return EXIT_USAGE

    _setup_logging(args.verbose, settings)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_USAGE


def _build_parser() -> argparse.ArgumentParser:
    """Build the default (convert) argument parser."""
    parser = argparse.ArgumentParser(
        prog="m2md",
        description=f"m2md v{__version__}: convert images to structured markdown with AI vision",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument("files", nargs="*", help="Image files, directories or URLs")
    _add_provider_arguments(parser)
    parser.add_argument(
        "-p", "--prompt", default=None,
        help="Custom instructions for the model",
    )
    parser.add_argument(
        "-t", "--template", default=None,
        help="Template: default, minimal, alt-text, detailed, or path",
    )
    parser.add_argument(
        "-o", "--output", default=None,
        help="Output directory for .md files (default: next to image)",
    )
    parser.add_argument(
        "--name", default=None,
        help="Output filename pattern: {filename}, {date}, {type}, {subject}",
    )
    parser.add_argument(
        "-r", "--recursive", action="store_true", default=None,
        help="Recursively scan directories",
    )
    parser.add_argument(
        "--stdout", action="store_true",
        help="Print markdown to stdout instead of writing files",
    )
    parser.add_argument(
        "--no-frontmatter", action="store_true",
        help="Strip YAML frontmatter from output",
    )
    parser.add_argument(
        "--no-cache", action="store_true", default=None,
        help="Skip cache, force re-processing",
    )
    parser.add_argument(
        "--estimate", action="store_true",
        help="Show estimated cost without processing",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Show what would be processed without calling the API",
    )
    parser.add_argument(
        "--concurrency", type=_positive_int, default=None,
        help="Max concurrent API calls (default: 5)",
    )
    parser.set_defaults(func=_cmd_convert)
    return parser


def _build_subcommand_parser() -> argparse.ArgumentParser:
    """Build the parser for ``compare`` and ``cache``."""
    parser = argparse.ArgumentParser(prog="m2md")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- compare ---
    p_compare = subparsers.add_parser(
        "compare", help="Compare two or more images side by side",
    )
    p_compare.add_argument("files", nargs="+", help="Image files to compare (2 or more)")
    _add_provider_arguments(p_compare)
    p_compare.add_argument(
        "-o", "--output", default=None,
        help="Output file path (default: stdout)",
    )
    p_compare.set_defaults(func=_cmd_compare)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Manage the result cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)
    p_stats = cache_sub.add_parser("stats", aliases=["status"], help="Show cache stats")
    p_stats.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p_stats.set_defaults(func=_cmd_cache_stats)
    p_clear = cache_sub.add_parser("clear", help="Clear all cached results")
    p_clear.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p_clear.set_defaults(func=_cmd_cache_clear)

    return parser


def _add_provider_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--provider", default=None,
        help="AI provider: anthropic, openai",
    )
    parser.add_argument("-m", "--model", default=None, help="AI model to use")
    parser.add_argument(
        "--tier", default=None,
        help="Preset tier: fast (gpt-4o-mini), quality (claude-sonnet)",
    )
    parser.add_argument(
        "-n", "--note", default=None,
        help="Focus directive: additional aspects for the model to note",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


# --- Commands ---


async def _cmd_convert(args: argparse.Namespace, settings: Any) -> int:
    """Convert images (files, directories, URLs) to markdown."""
    from m2md.batch.runner import BatchOrchestrator, plan_work_items
    from m2md.batch.scanner import discover_images, resolve_file_args
    from m2md.cache.json_store import JsonCacheStore
    from m2md.config.loader import ConfigLoader, UnknownTierError, merge_options, resolve_tier
    from m2md.config.options import ProcessOptions
    from m2md.extraction.url import is_url
    from m2md.llm.client_factory import (
        MissingCredentialError,
        UnsupportedProviderError,
        create_provider,
    )
    from m2md.parsing.taxonomy import build_taxonomy
    from m2md.templates.loader import TemplateNotFoundError, load_template

    loader = ConfigLoader()
    file_config = loader.load()
    try:
        opts = resolve_tier(merge_options(_cli_options(args), file_config))
        provider_name, model = _resolve_provider_and_model(opts, settings)
    except (UnknownTierError, UnsupportedProviderError) as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if not args.files:
        logger.error("No input specified. Provide image files, directories or URLs.")
        return EXIT_USAGE

    inputs = resolve_file_args(args.files)
    urls = [i for i in inputs if is_url(i)]
    paths = discover_images([i for i in inputs if not is_url(i)], recursive=bool(opts.get("recursive")))
    if not paths and not urls:
        logger.warning("No supported images found.")
        return EXIT_OK

    store = JsonCacheStore(settings.resolved_cache_dir())
    no_cache = bool(opts.get("no_cache")) or not settings.cache_enabled

    if args.estimate or args.dry_run:
        return await _estimate(paths, opts, provider_name, model, store, no_cache, args.dry_run)

    try:
        template = load_template(opts.get("template"))
    except TemplateNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    try:
        provider = create_provider(provider_name, settings)
    except MissingCredentialError as exc:
        logger.error("No API key found: %s", exc)
        print(f"  Set it in your shell profile, e.g. export {exc.env_var}=...", file=sys.stderr)
        return EXIT_USAGE

    plan = plan_work_items(paths, urls, provider_name, settings)
    if not plan.items and plan.skipped:
        logger.error("All files exceed the provider size limit.")
        return EXIT_USAGE

    taxonomy = build_taxonomy(file_config.taxonomy)
    shared = {
        "prompt": opts.get("prompt"),
        "note": opts.get("note"),
        "template": template,
        "template_name": opts.get("template"),
        "no_cache": no_cache,
        "taxonomy": taxonomy,
    }
    options = ProcessOptions(provider=provider, provider_name=provider_name, model=model, **shared)
    alt_options = None
    if plan.needs_alt and plan.alt_provider:
        alt_options = ProcessOptions(
            provider=create_provider(plan.alt_provider, settings),
            provider_name=plan.alt_provider,
            model=plan.alt_model,
            **shared,
        )

    orchestrator = BatchOrchestrator(
        options,
        alt_options=alt_options,
        store=store,
        concurrency=opts.get("concurrency") or settings.concurrency,
        output_dir=opts.get("output"),
        name_pattern=opts.get("name"),
        to_stdout=args.stdout,
        no_frontmatter=args.no_frontmatter,
        large_file_warning_bytes=settings.large_file_warning_bytes,
    )
    summary = await orchestrator.run(plan)

    if args.stdout:
        outputs = [r.markdown for r in summary.results if r.success and r.markdown]
        sys.stdout.write("\n---\n\n".join(outputs))
        sys.stdout.flush()

    _print_summary(summary, model, verbose=args.verbose)
    return EXIT_ITEM_FAILED if summary.any_failure else EXIT_OK


async def _estimate(
    paths: list[Path],
    opts: dict[str, Any],
    provider_name: str,
    model: str,
    store: Any,
    no_cache: bool,
    dry_run: bool,
) -> int:
    """Cost preview (and per-file table for --dry-run); no provider calls."""
    from m2md.cache.key import build_cache_key
    from m2md.cache.models import CacheKeyOptions
    from m2md.extraction.metadata import extract_metadata
    from m2md.tracking.cost_calculator import estimate_cost, estimate_image_tokens, format_cost
    from m2md.tracking.models import EstimateItem

    key_options = CacheKeyOptions(
        model=model,
        prompt=opts.get("prompt"),
        template_name=opts.get("template"),
        note=opts.get("note"),
        provider=provider_name,
    )
    items: list[EstimateItem] = []
    for path in paths:
        metadata, _ = extract_metadata(path)
        cached = False
        if not no_cache:
            cached = await store.get(build_cache_key(metadata.sha256, key_options)) is not None
        items.append(EstimateItem(path=str(path), metadata=metadata, cached=cached))

    if dry_run:
        print("\n  Dry run\n", file=sys.stderr)
        for item in items:
            status = "cached" if item.cached else "new"
            tokens = "-" if item.cached else f"~{estimate_image_tokens(item.metadata):,}"
            print(
                f"  {item.metadata.filename:<40} {status:<7} "
                f"{item.metadata.size_human:>10} {tokens:>10}",
                file=sys.stderr,
            )
        print(file=sys.stderr)

    print(format_cost(estimate_cost(items, model)), file=sys.stderr)
    if not dry_run:
        print("\n  Run without --estimate to process.", file=sys.stderr)
    return EXIT_OK


async def _cmd_compare(args: argparse.Namespace, settings: Any) -> int:
    """Compare two or more images in one provider call."""
    from m2md.config.loader import ConfigLoader, UnknownTierError, merge_options, resolve_tier
    from m2md.llm.client_factory import (
        MissingCredentialError,
        UnsupportedProviderError,
        create_provider,
    )
    from m2md.pipeline.processor import compare_images
    from m2md.storage.writer import write_markdown
    from m2md.tracking.cost_calculator import format_model, format_tokens

    if len(args.files) < 2:
        logger.error("Compare requires at least 2 images.")
        return EXIT_USAGE

    cli = {"provider": args.provider, "model": args.model, "tier": args.tier, "note": args.note}
    try:
        opts = resolve_tier(merge_options(cli, ConfigLoader().load()))
        provider_name, model = _resolve_provider_and_model(opts, settings)
        provider = create_provider(provider_name, settings)
    except (UnknownTierError, UnsupportedProviderError, MissingCredentialError) as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    try:
        result = await compare_images(args.files, provider, note=opts.get("note"), model=model)
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if args.output:
        path = await write_markdown(result.markdown, Path(args.output).resolve())
        print(f"  Written to {path}", file=sys.stderr)
    else:
        sys.stdout.write(result.markdown)
        sys.stdout.flush()

    if result.usage:
        label = format_model(result.model or model)
        print(f"  {label} · {format_tokens(result.usage.total_tokens)} tokens", file=sys.stderr)
    return EXIT_OK


async def _cmd_cache_stats(args: argparse.Namespace, settings: Any) -> int:
    """Show cache entry count, size and location."""
    from m2md.cache.json_store import JsonCacheStore

    stats = await JsonCacheStore(settings.resolved_cache_dir()).stats()
    print("\n  Cache", file=sys.stderr)
    print(f"  Entries   {stats.count}", file=sys.stderr)
    print(f"  Size      {stats.human_size}", file=sys.stderr)
    print(f"  Location  {stats.location}\n", file=sys.stderr)
    return EXIT_OK


async def _cmd_cache_clear(args: argparse.Namespace, settings: Any) -> int:
    """Delete every cached result."""
    from m2md.cache.json_store import JsonCacheStore

    count = await JsonCacheStore(settings.resolved_cache_dir()).clear()
    if count:
        print(f"  Cleared {count} cached result{'s' if count > 1 else ''}.", file=sys.stderr)
    else:
        print("  Cache is already empty.", file=sys.stderr)
    return EXIT_OK


# --- Helpers ---


def _cli_options(args: argparse.Namespace) -> dict[str, Any]:
    """Options that a project config file may fill in when unset."""
    keys = (
        "provider", "model", "tier", "prompt", "note", "template",
        "output", "name", "recursive", "no_cache", "concurrency",
    )
    return {key: getattr(args, key, None) for key in keys}


def _resolve_provider_and_model(opts: dict[str, Any], settings: Any) -> tuple[str, str]:
    """Provider: CLI/config → settings. Model: CLI/config → settings → provider default.

    Raises:
        UnsupportedProviderError: Unknown provider name.
    """
    from m2md.llm.client_factory import default_model_for

    provider_name = opts.get("provider") or settings.provider
    default_model = default_model_for(provider_name)
    model = opts.get("model") or (settings.model if provider_name == settings.provider else "")
    return provider_name, model or default_model


def _print_summary(summary: Any, model: str, verbose: bool = False) -> None:
    """One-line run summary on stderr."""
    from m2md.tracking.cost_calculator import calculate_cost, format_model, format_tokens

    if summary.any_failure:
        print(
            f"\n  {summary.succeeded} processed, {summary.failed} failed"
            f" · {summary.elapsed_seconds:.1f}s\n",
            file=sys.stderr,
        )
        return

    used_model = summary.model or model
    parts = [f"{summary.succeeded} file{'' if summary.succeeded == 1 else 's'} processed"]
    if summary.skipped:
        parts.append(f"{len(summary.skipped)} skipped (too large)")
    if summary.cached:
        parts.append(f"{summary.cached} from cache")
    parts.append(format_model(used_model))
    if verbose and summary.input_tokens:
        total = summary.input_tokens + summary.output_tokens
        parts.append(f"{format_tokens(total)} tokens")
        cost = calculate_cost(summary.input_tokens, summary.output_tokens, used_model)
        parts.append(f"${cost:.2f}")
    parts.append(f"{summary.elapsed_seconds:.1f}s")
    print(f"\n  {' · '.join(parts)}\n", file=sys.stderr)


def _load_settings() -> Any:
    """Load settings; raises ConfigurationError or a pydantic ValidationError."""
    from m2md.config.settings import load_settings

    return load_settings()


def _setup_logging(verbose: bool, settings: Any = None) -> None:
    """Configure logging for CLI usage."""
    from m2md.logging.logger import setup_logging

    if settings is None:
        setup_logging(level="DEBUG" if verbose else "WARNING")
        return
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
