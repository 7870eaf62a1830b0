"""HTML to Markdown conversion pipeline.

Every entry point (CLI, batch fetcher, drill-down explorer) goes through
``convert``:

1. BeautifulSoup parses the HTML (lxml tree builder)
2. The projector selects the target element, clones it and resolves URLs
3. Noise removal and content transforms rewrite the clone in place
4. The rule-based renderer turns the clone's inner HTML into markdown
5. Pipe tables are aligned and excess blank lines collapsed

The caller's document is never mutated: all in-place passes work on the
clone produced in step 2.
"""

import logging
from typing import Any

from bs4 import BeautifulSoup, ParserRejectedMarkup

from md4llm.exceptions import ConversionError, ValidationError
from md4llm.models import ConversionConfig, ConversionResult, ConversionStats
from md4llm.services.noise import remove_noise
from md4llm.services.projector import extract_metadata, project
from md4llm.services.renderer import collapse_newlines, render
from md4llm.services.tables import align_markdown_tables
from md4llm.services.transform import strip_links, strip_media

LOGGER = logging.getLogger(__name__)

PARSER = "lxml"


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML document.

    Raises:
        ValidationError: If html is not a string
        ConversionError: If the parser rejects the markup
    """
    if not isinstance(html, str):
        raise ValidationError("HTML input must be a string", field="html", value=type(html).__name__)
    try:
        return BeautifulSoup(html, PARSER)
    except ParserRejectedMarkup as e:
        raise ConversionError(f"Could not parse HTML: {e}") from e


def _resolve_config(config: ConversionConfig | None, options: dict[str, Any]) -> ConversionConfig:
    if config is None:
        return ConversionConfig.model_validate(options)
    if options:
        return config.model_copy(update=ConversionConfig.model_validate(options).model_dump(exclude_unset=True))
    return config


def convert_document(document: BeautifulSoup, config: ConversionConfig | None = None) -> ConversionResult:
    """Convert an already parsed document without mutating it.

    Args:
        document: Parsed HTML document
        config: Conversion options (defaults apply when None)

    Returns:
        ConversionResult with markdown, metadata, selector used and stats
    """
    config = config or ConversionConfig()

    metadata = extract_metadata(document) if config.extract_meta else {}

    projection = project(document, config.selector, config.base_url)
    subtree = projection.subtree

    if config.clean_noise:
        remove_noise(subtree)
    if config.strip_media:
        strip_media(subtree)
    if not config.preserve_links:
        strip_links(subtree)

    markdown = render(subtree.decode_contents())

    if config.align_tables:
        markdown = align_markdown_tables(markdown)

    markdown = collapse_newlines(markdown)

    return ConversionResult(
        markdown=markdown,
        metadata=metadata,
        selector=projection.selector_used,
        stats=ConversionStats.from_markdown(markdown),
    )


def convert(html: str, config: ConversionConfig | None = None, **options: Any) -> ConversionResult:
    """Convert HTML to markdown.

    Options may be given as a ConversionConfig, as keyword arguments
    (snake_case or camelCase), or both; keywords override the config.

    Args:
        html: Raw HTML document or fragment
        config: Conversion options
        **options: Individual ConversionConfig fields

    Returns:
        ConversionResult with markdown, metadata, selector used and stats

    Raises:
        ValidationError: If html is not a string or an option is unknown
        ConversionError: If the HTML cannot be parsed
    """
    try:
        resolved = _resolve_config(config, options)
    except ValueError as e:
        raise ValidationError(f"Invalid conversion options: {e}", field="options") from e

    document = parse_html(html)
    result = convert_document(document, resolved)
    LOGGER.debug(
        f"Converted {len(html)} chars of HTML to {result.stats.characters} chars of markdown "
        f"(selector: {result.selector})"
    )
    return result


class MarkdownConverter:
    """Convert HTML to clean markdown with a fixed configuration.

    Usage:
        converter = MarkdownConverter(ConversionConfig(strip_media=True))
        result = converter.convert(html)
        print(result.markdown)
    """

    def __init__(self, config: ConversionConfig | None = None, **options: Any):
        """Initialize with conversion options."""
        self.config = _resolve_config(config, options)

    def convert(self, html: str) -> ConversionResult:
        """Convert one HTML document."""
        return convert(html, self.config)

    def convert_document(self, document: BeautifulSoup) -> ConversionResult:
        """Convert an already parsed document."""
        return convert_document(document, self.config)
