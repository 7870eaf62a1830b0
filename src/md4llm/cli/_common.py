"""Common CLI utilities and the main app group."""

import asyncio
import json
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from md4llm.exceptions import ValidationError
from md4llm.models import ConversionConfig, ConversionResult
from md4llm.services.fetcher import FetchService
from md4llm.utils import is_valid_selector

LOGGER = logging.getLogger(__name__)

console = Console(stderr=True)
_configured = False

STDIN_SOURCE = "-"


def _load_env_file(env_path: Path | None = None) -> None:
    """
    Load environment variables from .env file if it exists.

    Args:
        env_path: Optional path to .env file. If None, looks for .env in current directory.
    """
    if env_path is None:
        env_path = Path.cwd() / ".env"

    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        # Existing environment wins
        if key and key not in os.environ:
            os.environ[key] = value


# Load .env file when CLI module is imported
_load_env_file()


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler. Call once at startup."""
    global _configured
    if _configured:
        return

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
            )
        ],
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _configured = True


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


@dataclass
class InputDocument:
    """HTML read from a URL, file or stdin."""

    html: str
    # Final URL after redirects, used to resolve relative links
    base_url: str | None = None
    # Requested URL, reported as sourceUrl in JSON output
    source_url: str | None = None


async def _fetch_one(url: str):
    async with FetchService() as fetcher:
        return await fetcher.fetch(url)


def read_input(source: str) -> InputDocument:
    """
    Read HTML from a URL, a file path, or ``-`` for stdin.

    Raises:
        ValidationError: If a file path does not exist.
        FetchError: If a URL cannot be fetched.
    """
    if source == STDIN_SOURCE:
        return InputDocument(html=sys.stdin.read())

    if is_url(source):
        LOGGER.info(f"Fetching {source}...")
        result = asyncio.run(_fetch_one(source))
        LOGGER.info(f"Fetched {len(result.html or '') / 1024:.1f} KB")
        return InputDocument(html=result.html or "", base_url=result.final_url or source, source_url=source)

    path = Path(source).resolve()
    if not path.is_file():
        raise ValidationError(f"File not found: {path}", field="input", value=source)
    LOGGER.info(f"Reading {path}...")
    return InputDocument(html=path.read_text(encoding="utf-8", errors="replace"))


def conversion_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every converting command."""
    options = [
        click.option("--selector", "-s", default="body", show_default=True, help="CSS selector to extract."),
        click.option(
            "--format",
            "-f",
            "output_format",
            type=click.Choice(["md", "json"], case_sensitive=False),
            default="md",
            show_default=True,
            help="Output format: md (markdown only) or json (result with stats and options).",
        ),
        click.option("--clean/--no-clean", default=True, show_default=True, help="Remove navigation, ads and other page chrome."),
        click.option("--tables/--no-tables", default=True, show_default=True, help="Align markdown table columns."),
        click.option("--links/--no-links", default=True, show_default=True, help="Keep hyperlinks (--no-links keeps text only)."),
        click.option("--strip-media", is_flag=True, default=False, help="Remove images and video; keep image alt text."),
        click.option("--meta", is_flag=True, default=False, help="Extract page metadata (title, description, Open Graph)."),
        click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress progress output."),
        click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    *,
    selector: str,
    clean: bool,
    tables: bool,
    links: bool,
    strip_media: bool,
    meta: bool,
    base_url: str | None = None,
) -> ConversionConfig:
    """Map CLI flags onto a ConversionConfig."""
    if not is_valid_selector(selector):
        LOGGER.warning(f"Selector '{selector}' contains unusual characters; it may fall back to the body")
    return ConversionConfig(
        selector=selector,
        base_url=base_url,
        align_tables=tables,
        clean_noise=clean,
        strip_media=strip_media,
        preserve_links=links,
        extract_meta=meta,
    )


def format_result(
    result: ConversionResult,
    output_format: str,
    config: ConversionConfig,
    source_url: str | None = None,
) -> str:
    """
    Render a conversion result for output.

    ``md`` returns the markdown alone. ``json`` returns the full result plus
    ``sourceUrl``, an ISO 8601 UTC ``timestamp`` and the ``options`` used.
    """
    if output_format != "json":
        return result.markdown

    payload = result.model_dump()
    payload["sourceUrl"] = source_url
    payload["timestamp"] = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    payload["options"] = config.model_dump(by_alias=True, exclude={"base_url"})
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_output(content: str, output: Path | None) -> None:
    """Write to a file, or to stdout when no path is given."""
    if output is None:
        click.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(content)
        if not content.endswith("\n"):
            f.write("\n")
    LOGGER.info(f"Saved to {output}")


def log_conversion(result: ConversionResult) -> None:
    if result.used_fallback:
        LOGGER.warning("Selector matched nothing, converted the whole body instead")
    LOGGER.info(f"Converted: {result.stats.characters:,} chars, {result.stats.words:,} words")


@click.group(help="Convert HTML into clean markdown for LLM pipelines.")
@click.version_option(package_name="md4llm")
def app() -> None:
    """
    Entry point for the md4llm CLI.

    Provides commands for single conversions, batch URL conversion and
    interactive selector drill-down.
    """
