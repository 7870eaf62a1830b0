"""Rule-based Markdown rendering on top of markdownify.

markdownify walks the DOM bottom-up: every element is converted from its
already-rendered children plus the raw element. This module layers an
ordered table of custom rules over markdownify's default ``convert_<tag>``
handlers. For each element the custom rules are tried first; the first one
that claims the element wins, otherwise the default handler runs.

Custom Rules
============
The rule table is built once at import and never mutated. To add a rule:
1. Write a replacement function: _render_<name>(el, content) -> str
2. Optionally write a predicate: _is_<name>(el) -> bool
3. Register it in RENDER_RULES (earlier entries take priority)
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import Tag
from markdownify import ATX
from markdownify import MarkdownConverter as BaseMarkdownConverter

LOGGER = logging.getLogger(__name__)

_WHITESPACE_RUNS = re.compile(r"\s+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_LANGUAGE_CLASS = re.compile(r"^(?:language|lang)-(\S+)$")
_HIGHLIGHT_CLASS = re.compile(r"^highlight-(?:text|source)-([a-z0-9]+)")


def _always(el: Tag) -> bool:
    return True


@dataclass(frozen=True)
class RenderRule:
    """A custom rendering rule.

    Attributes:
        name: Short identifier (e.g., "flat_tables")
        description: What the rule renders and how
        tags: Tag names the rule may claim
        replacement: Builds markdown from the element and its rendered content
        matches: Extra predicate on the element; the rule applies only if true
    """

    name: str
    description: str
    tags: frozenset[str]
    replacement: Callable[[Tag, str], str]
    matches: Callable[[Tag], bool] = _always

    def applies_to(self, el: Tag) -> bool:
        """Check whether this rule claims the element."""
        return el.name in self.tags and self.matches(el)


# =============================================================================
# Rule implementations
# =============================================================================


def _render_transparent(el: Tag, content: str) -> str:
    """Inline containers contribute nothing but their content."""
    return content


def _cell_text(cell: Tag) -> str:
    """Flatten a table cell to a single escaped line of text."""
    text = _WHITESPACE_RUNS.sub(" ", cell.get_text().strip())
    return text.replace("|", "\\|")


def table_rows(table: Tag) -> list[list[str]]:
    """Collect the flattened cell text of every row in a table.

    Rows without cells are skipped. Rows are returned ragged; see
    _render_flat_table for padding.
    """
    rows = []
    for tr in table.find_all("tr"):
        cells = [_cell_text(cell) for cell in tr.find_all(["td", "th"])]
        if cells:
            rows.append(cells)
    return rows


def _render_flat_table(el: Tag, content: str) -> str:
    """Render a table as a rectangular GFM pipe table.

    Nested markup inside cells collapses to plain text. Ragged rows are
    right-padded with empty cells; rowspan/colspan are not reconstructed.
    """
    rows = table_rows(el)
    if not rows:
        return ""

    col_count = max(len(row) for row in rows)
    lines = []
    for idx, row in enumerate(rows):
        padded = row + [""] * (col_count - len(row))
        lines.append("| " + " | ".join(padded) + " |")
        if idx == 0:
            lines.append("| " + " | ".join(["---"] * col_count) + " |")

    return "\n\n" + "\n".join(lines) + "\n\n"


def _render_strikethrough(el: Tag, content: str) -> str:
    """GFM strikethrough."""
    stripped = content.strip()
    if not stripped:
        return ""
    prefix = " " if content[:1].isspace() else ""
    suffix = " " if content[-1:].isspace() else ""
    return f"{prefix}~~{stripped}~~{suffix}"


def _is_task_checkbox(el: Tag) -> bool:
    return (el.get("type") or "").lower() == "checkbox" and el.find_parent("li") is not None


def _render_task_checkbox(el: Tag, content: str) -> str:
    """GFM task list marker."""
    marker = "[x]" if el.has_attr("checked") else "[ ]"
    following = el.next_sibling
    if isinstance(following, str) and following[:1].isspace():
        return marker
    return marker + " "


# =============================================================================
# Rule Registry
# =============================================================================

RENDER_RULES: tuple[RenderRule, ...] = (
    RenderRule(
        name="transparent_containers",
        description="span, font and small render as their content only.",
        tags=frozenset({"span", "font", "small"}),
        replacement=_render_transparent,
    ),
    RenderRule(
        name="flat_tables",
        description=(
            "Tables render as one GFM pipe table with plain-text cells, a '---' separator "
            "after the first row, and ragged rows padded to the widest row."
        ),
        tags=frozenset({"table"}),
        replacement=_render_flat_table,
    ),
    RenderRule(
        name="strikethrough",
        description="del, s and strike render as ~~text~~.",
        tags=frozenset({"del", "s", "strike"}),
        replacement=_render_strikethrough,
    ),
    RenderRule(
        name="task_list_items",
        description="Checkbox inputs inside list items render as [x] / [ ] markers.",
        tags=frozenset({"input"}),
        replacement=_render_task_checkbox,
        matches=_is_task_checkbox,
    ),
)


def code_language(el: Tag) -> str | None:
    """Detect a fenced code block language from class names.

    Looks for ``language-*``/``lang-*`` on the <pre> or its <code> child,
    then for ``highlight-source-*``/``highlight-text-*`` on the parent.
    """
    candidates = [el]
    code = el.find("code")
    if code is not None:
        candidates.append(code)
    for node in candidates:
        for cls in node.get("class") or []:
            match = _LANGUAGE_CLASS.match(cls)
            if match:
                return match.group(1)

    parent = el.parent
    if parent is not None:
        for cls in parent.get("class") or []:
            match = _HIGHLIGHT_CLASS.match(cls)
            if match:
                return match.group(1)
    return None


class RuleBasedConverter(BaseMarkdownConverter):
    """Markdownify converter that consults a custom rule table first.

    Key features:
    - ATX headings, '-' bullets, '*' emphasis, fenced code blocks
    - Custom rules take priority over markdownify's handlers
    - Falls back to the default handler when no rule claims an element
    """

    def __init__(self, rules: tuple[RenderRule, ...] = RENDER_RULES, **kwargs):
        """Initialize with a rule table and markdownify options."""
        options = {
            "heading_style": ATX,
            "bullets": "-",
            "strong_em_symbol": "*",
            "code_language_callback": code_language,
            "wrap": False,
        }
        options.update(kwargs)
        super().__init__(**options)
        self.rules = rules

    def get_conv_fn(self, tag_name):
        """Return a dispatcher for tags claimed by a custom rule.

        markdownify caches the returned function per tag name; the
        dispatcher still evaluates each rule's predicate per element.
        """
        tag_name = tag_name.lower()
        candidates = [rule for rule in self.rules if tag_name in rule.tags]
        default_fn = super().get_conv_fn(tag_name)
        if not candidates:
            return default_fn

        def dispatch(el, text, parent_tags):
            for rule in candidates:
                if rule.applies_to(el):
                    return rule.replacement(el, text)
            if default_fn is None:
                return text
            return default_fn(el, text, parent_tags=parent_tags)

        return dispatch


def collapse_newlines(markdown: str) -> str:
    """Collapse runs of 3+ newlines to a blank line and trim."""
    return _EXCESS_NEWLINES.sub("\n\n", markdown).strip()


def render(inner_html: str, rules: tuple[RenderRule, ...] = RENDER_RULES) -> str:
    """Render an HTML fragment to markdown.

    Args:
        inner_html: Inner HTML of the conversion root
        rules: Custom rule table (defaults to RENDER_RULES)

    Returns:
        Markdown with excess blank lines collapsed and outer whitespace trimmed
    """
    converter = RuleBasedConverter(rules=rules)
    return collapse_newlines(converter.convert(inner_html))
