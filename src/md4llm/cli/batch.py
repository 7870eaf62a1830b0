"""Batch URL conversion command."""

import time
from pathlib import Path

import click

from md4llm.cli._common import (
    app,
    build_config,
    configure_logging,
    conversion_options,
    format_result,
    is_url,
)
from md4llm.exceptions import Md4llmError, ValidationError
from md4llm.utils import get_domain_from_url, sanitize_filename

DEFAULT_OUTPUT_DIR = Path("./md4llm-output")


def read_url_list(path: Path) -> list[str]:
    """
    Read URLs from a file, one per line.

    Blank lines, ``#`` comments and lines that are not http(s) URLs are skipped.

    Raises:
        ValidationError: If the file holds no usable URL.
    """
    urls = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = line.strip()
        if line and not line.startswith("#") and is_url(line):
            urls.append(line)
    if not urls:
        raise ValidationError("No valid URLs found in batch file", field="file", value=str(path))
    return urls


def output_path(directory: Path, url: str, output_format: str) -> Path:
    """Build ``<domain>_<timestamp>.<ext>`` for a converted URL.

    The timestamp is in milliseconds; a numeric suffix is added if two pages
    from the same domain land on the same millisecond.
    """
    ext = "json" if output_format == "json" else "md"
    stem = sanitize_filename(f"{get_domain_from_url(url)}_{time.time_ns() // 1_000_000}")
    path = directory / f"{stem}.{ext}"
    counter = 2
    while path.exists():
        path = directory / f"{stem}_{counter}.{ext}"
        counter += 1
    return path


@app.command("batch", help="Fetch and convert every URL listed in a file.")
@click.argument("file", type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory.",
)
@click.option(
    "--concurrency",
    "-c",
    type=click.IntRange(min=1),
    default=None,
    help="Max concurrent requests. Defaults to MD4LLM_CONCURRENCY or 3.",
)
@conversion_options
def batch_cmd(
    file: Path,
    output: Path,
    concurrency: int | None,
    selector: str,
    output_format: str,
    clean: bool,
    tables: bool,
    links: bool,
    strip_media: bool,
    meta: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Fetch URLs concurrently and write one markdown (or JSON) file per page.

    Failed URLs are reported and skipped; the rest of the batch continues.

    Examples:
        md4llm batch urls.txt
        md4llm batch urls.txt -o ./docs -c 5 --format json
    """
    import asyncio
    import logging

    from md4llm.services.converter import convert
    from md4llm.services.fetcher import FetchService

    configure_logging(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(__name__)

    try:
        urls = read_url_list(file)
        fetcher = FetchService()
    except Md4llmError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1) from e

    limit = concurrency or fetcher.config.concurrency
    logger.info(f"Processing {len(urls)} URLs with concurrency {limit}...")

    def on_progress(url: str, index: int, total: int, result) -> None:
        if result.error:
            logger.error(f"[{index + 1}/{total}] Failed: {url} - {result.error}")
        else:
            logger.info(f"[{index + 1}/{total}] Fetched: {url}")

    async def run():
        async with fetcher:
            return await fetcher.fetch_all(urls, on_progress=on_progress, concurrency=limit)

    results = asyncio.run(run())

    output.mkdir(parents=True, exist_ok=True)
    converted = 0
    for fetched in results:
        if not fetched.success:
            continue
        config = build_config(
            selector=selector,
            clean=clean,
            tables=tables,
            links=links,
            strip_media=strip_media,
            meta=meta,
            base_url=fetched.final_url or fetched.url,
        )
        try:
            result = convert(fetched.html, config)
        except Md4llmError as e:
            logger.error(f"Conversion failed for {fetched.url}: {e.message}")
            continue

        path = output_path(output, fetched.url, output_format)
        content = format_result(result, output_format, config, fetched.url)
        path.write_text(content if content.endswith("\n") else content + "\n", encoding="utf-8")
        logger.info(f"Saved to {path}")
        converted += 1

    click.echo(f"Batch complete: {converted}/{len(urls)} URLs converted", err=True)
