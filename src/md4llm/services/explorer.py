"""Interactive selector refinement over a parsed document.

A DrillSession starts at the document body and walks down one child
element at a time. Each step records a short CSS selector for the chosen
child; the accumulated steps form the extraction selector that is reported
when the user accepts the current element.
"""

import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from md4llm.models import ConversionConfig, ConversionResult
from md4llm.services.converter import convert
from md4llm.services.projector import document_body

LOGGER = logging.getLogger(__name__)

SKIPPED_TAGS = frozenset({"script", "style", "noscript", "meta", "link"})
CONTENT_TAGS = frozenset({"article", "main", "section", "div", "aside", "header", "footer", "nav"})

# Framework/state classes that make poor extraction selectors
_UTILITY_CLASS = re.compile(r"^(js-|is-|has-|ng-|v-|_)")
_WHITESPACE_RUNS = re.compile(r"\s+")

PREVIEW_LENGTH = 40
ROOT_SELECTOR = "body"


@dataclass
class ChildElement:
    """A direct child offered as the next drill-down step."""

    selector: str
    label: str
    tag: str
    text_preview: str
    child_count: int
    index: int
    element: Tag = field(repr=False)


@dataclass
class SelectorSuggestions:
    """Candidate selectors found in a document, each list sorted."""

    ids: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.ids) + len(self.classes) + len(self.tags)


def _element_children(element: Tag) -> list[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def _text_preview(element: Tag) -> str:
    text = element.get_text().strip()
    preview = text[:PREVIEW_LENGTH]
    if len(preview) >= PREVIEW_LENGTH:
        preview += "..."
    return _WHITESPACE_RUNS.sub(" ", preview)


def get_child_elements(parent: Tag) -> list[ChildElement]:
    """List the content-bearing direct children of an element.

    Selectors prefer ``#id``, then ``.first-class``, then
    ``tag:nth-child(n)`` where n counts every element child of the parent.

    Args:
        parent: Element whose children are listed

    Returns:
        ChildElement entries, numbered from 0 in document order
    """
    children: list[ChildElement] = []
    for position, el in enumerate(_element_children(parent)):
        tag = el.name.lower()
        if tag in SKIPPED_TAGS:
            continue

        element_id = el.get("id")
        classes = el.get("class") or []
        if element_id:
            selector = label = f"#{element_id}"
        elif classes:
            selector = label = f".{classes[0]}"
        else:
            selector = f"{tag}:nth-child({position + 1})"
            label = f"{tag}[{position + 1}]"

        children.append(
            ChildElement(
                selector=selector,
                label=label,
                tag=tag,
                text_preview=_text_preview(el),
                child_count=len(_element_children(el)),
                index=len(children),
                element=el,
            )
        )
    return children


def extract_selectors(document: BeautifulSoup) -> SelectorSuggestions:
    """Collect ids, meaningful classes and content tags used in the body."""
    ids: set[str] = set()
    classes: set[str] = set()
    tags: set[str] = set()

    for el in document_body(document).find_all(True):
        element_id = el.get("id")
        if element_id:
            ids.add(element_id)
        for cls in el.get("class") or []:
            if cls and not _UTILITY_CLASS.match(cls):
                classes.add(cls)
        if el.name in CONTENT_TAGS:
            tags.add(el.name)

    return SelectorSuggestions(ids=sorted(ids), classes=sorted(classes), tags=sorted(tags))


class DrillSession:
    """Drill-down state: the current element and the path that led to it.

    Usage:
        session = DrillSession(document)
        for child in session.children():
            print(child.label)
        session.drill(0)
        result = session.accept(ConversionConfig())
    """

    def __init__(self, document: BeautifulSoup):
        self.document = document
        self.root = document_body(document)
        self._path: list[ChildElement] = []

    @property
    def current(self) -> Tag:
        """Element the session currently points at."""
        return self._path[-1].element if self._path else self.root

    @property
    def path(self) -> list[ChildElement]:
        return list(self._path)

    @property
    def depth(self) -> int:
        return len(self._path)

    @property
    def selector(self) -> str:
        """Accumulated descendant selector, or ``body`` at the root."""
        return " ".join(step.selector for step in self._path) or ROOT_SELECTOR

    @property
    def breadcrumb(self) -> str:
        return " > ".join([ROOT_SELECTOR] + [step.label for step in self._path])

    def children(self) -> list[ChildElement]:
        return get_child_elements(self.current)

    def drill(self, index: int) -> ChildElement:
        """Step into the child at ``index`` of the current element.

        Raises:
            IndexError: If index is not a valid child number
        """
        children = self.children()
        if not 0 <= index < len(children):
            raise IndexError(f"No child element [{index}] (have {len(children)})")
        selected = children[index]
        self._path.append(selected)
        LOGGER.debug(f"Drilled into {selected.label} (selector: {self.selector})")
        return selected

    def back(self) -> bool:
        """Go up one level. Returns False when already at the root."""
        if not self._path:
            return False
        self._path.pop()
        return True

    def accept(self, config: ConversionConfig | None = None) -> ConversionResult:
        """Convert the current element and report the accumulated selector.

        The element's own HTML is converted as a standalone document, so the
        configured selector is replaced by ``body``.
        """
        config = (config or ConversionConfig()).model_copy(update={"selector": ROOT_SELECTOR})
        result = convert(str(self.current), config)
        return result.model_copy(update={"selector": self.selector})
