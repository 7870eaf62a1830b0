"""Interactive selector drill-down command."""

from pathlib import Path

import click
from rich.markup import escape

from md4llm.cli._common import (
    app,
    build_config,
    configure_logging,
    console,
    conversion_options,
    format_result,
    log_conversion,
    read_input,
    write_output,
)
from md4llm.exceptions import Md4llmError
from md4llm.services.explorer import DrillSession

QUIT_COMMANDS = ("q", "quit")
BACK_COMMANDS = ("b", "back")
ACCEPT_COMMANDS = ("a", "accept")


def show_children(session: DrillSession) -> int:
    """Print the current path and its numbered children. Returns the child count."""
    console.print(f"\n[white]Current:[/white] [yellow]{escape(session.breadcrumb)}[/yellow]")
    children = session.children()
    if not children:
        console.print("  No child elements. Press [b] to go back or [a] to accept.", style="dim", markup=False)
        return 0

    console.print(f"[dim]  {len(children)} child element(s):[/dim]\n")
    for child in children:
        count = f" [blue]({child.child_count} children)[/blue]" if child.child_count else ""
        preview = f' [dim]"{escape(child.text_preview)}"[/dim]' if child.text_preview else ""
        console.print(f"  [green]\\[{child.index}][/green] {escape(child.label)}{count}{preview}")
    return len(children)


@app.command("drill", help="Interactively drill into the DOM to pick a selector, then convert.")
@click.argument("source", metavar="INPUT")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Output file. If omitted, prints to stdout.",
)
@conversion_options
def drill_cmd(
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
    """Navigate child elements from <body> down, then accept to convert.

    Commands at the prompt: a child number to drill in, [b]ack, [a]ccept, [q]uit.
    The --selector option is ignored; the drilled path becomes the selector.

    Examples:
        md4llm drill https://example.com
        md4llm drill page.html --format json -o page.json
    """
    from md4llm.services.converter import parse_html

    configure_logging(verbose=verbose, quiet=quiet)

    try:
        document = read_input(source)
        session = DrillSession(parse_html(document.html))
    except Md4llmError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1) from e

    console.print("\n[cyan]=== Interactive Selector Drilling ===[/cyan]\n")
    console.print("Navigate through the DOM by selecting child elements.", style="dim")
    console.print("Commands: number to drill, [b]ack, [a]ccept, [q]uit", style="dim", markup=False)

    while True:
        child_count = show_children(session)
        cmd = click.prompt("\nSelect", default="", show_default=False, err=True).strip().lower()

        if cmd in QUIT_COMMANDS:
            console.print("[yellow]Aborted.[/yellow]")
            return

        if cmd in BACK_COMMANDS:
            if session.back():
                console.print("  Went back one level.", style="dim")
            else:
                console.print("  Already at root.", style="dim")
            continue

        if cmd in ACCEPT_COMMANDS:
            break

        if cmd.isdigit() and int(cmd) < child_count:
            selected = session.drill(int(cmd))
            console.print(f"  Drilled into: {escape(selected.label)}", style="dim")
        elif cmd:
            console.print(
                "  Invalid input. Enter a number, [b]ack, [a]ccept, or [q]uit.", style="red", markup=False
            )

    console.print(f"\n[green]Accepted selector: {escape(session.selector)}[/green]")

    config = build_config(
        selector=session.selector,
        clean=clean,
        tables=tables,
        links=links,
        strip_media=strip_media,
        meta=meta,
        base_url=document.base_url,
    )
    try:
        result = session.accept(config)
    except Md4llmError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1) from e

    log_conversion(result)
    write_output(format_result(result, output_format, config, document.source_url), output)
