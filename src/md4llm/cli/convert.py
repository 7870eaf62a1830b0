"""Single document conversion command."""

from pathlib import Path

import click

from md4llm.cli._common import (
    app,
    build_config,
    configure_logging,
    conversion_options,
    format_result,
    log_conversion,
    read_input,
    write_output,
)
from md4llm.exceptions import Md4llmError


@app.command("convert", help="Convert a URL, HTML file or stdin (-) to markdown.")
@click.argument("source", metavar="INPUT")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Output file. If omitted, prints to stdout.",
)
@conversion_options
def convert_cmd(
    source: str,
    output: Path | None,
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
    """Convert one HTML document to markdown.

    Examples:
        md4llm convert https://example.com
        md4llm convert page.html -s article -o article.md
        curl -s https://example.com | md4llm convert - --format json
        md4llm convert https://example.com --no-links --strip-media --meta
    """
    from md4llm.services.converter import convert

    configure_logging(verbose=verbose, quiet=quiet)

    try:
        document = read_input(source)
        config = build_config(
            selector=selector,
            clean=clean,
            tables=tables,
            links=links,
            strip_media=strip_media,
            meta=meta,
            base_url=document.base_url,
        )
        result = convert(document.html, config)
    except Md4llmError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1) from e

    log_conversion(result)
    write_output(format_result(result, output_format, config, document.source_url), output)
