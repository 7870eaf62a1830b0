"""Column alignment for markdown pipe tables."""

import re

# Split on pipes that are not escaped as \|
_CELL_SPLIT = re.compile(r"(?<!\\)\|")
_SEPARATOR_CELL = re.compile(r"^[:\-\s]+$")

MIN_COLUMN_WIDTH = 3


def _split_row(line: str) -> list[str]:
    """Split a pipe table line into trimmed cells, dropping the outer fragments."""
    fragments = [cell.strip() for cell in _CELL_SPLIT.split(line)]
    return fragments[1:-1]


def format_table(rows: list[str]) -> str:
    """Pad the cells of one pipe table block so columns line up.

    The separator row (detected from its first cell) is rewritten as plain
    dashes, so alignment colons are not kept.

    Args:
        rows: Raw table lines, each starting with '|'

    Returns:
        The aligned table, rows joined by newlines
    """
    matrix = [_split_row(row) for row in rows]
    if not any(matrix):
        return "\n".join(rows)

    col_count = max(len(row) for row in matrix)
    widths = [
        max([MIN_COLUMN_WIDTH] + [len(row[col]) for row in matrix if col < len(row)])
        for col in range(col_count)
    ]

    lines = []
    for raw, row in zip(rows, matrix):
        # Nothing between the outer pipes to align
        if not row:
            lines.append(raw)
            continue
        is_separator = bool(_SEPARATOR_CELL.match(row[0]))
        if is_separator:
            cells = ["-" * widths[i] for i in range(len(row))]
        else:
            cells = [cell.ljust(widths[i]) for i, cell in enumerate(row)]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def align_markdown_tables(markdown: str) -> str:
    """Align every contiguous pipe table block in a markdown document.

    Lines whose stripped form starts with '|' form a table block; all other
    lines pass through unchanged. Applying this twice gives the same result
    as applying it once.
    """
    result: list[str] = []
    table: list[str] = []

    for line in markdown.split("\n"):
        if line.strip().startswith("|"):
            table.append(line.strip())
            continue
        if table:
            result.append(format_table(table))
            table = []
        result.append(line)

    if table:
        result.append(format_table(table))

    return "\n".join(result)
