"""Target selection, URL resolution and head metadata extraction.

The projector is the first stage of the conversion pipeline. It never
mutates the document it is given: the selected element is cloned and
every later stage works on that clone.
"""

import copy
import logging
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from md4llm.models import FALLBACK_SELECTOR

LOGGER = logging.getLogger(__name__)

# <meta name|property="..."> fields copied into the metadata mapping
META_FIELDS = [
    "description",
    "author",
    "keywords",
    "og:title",
    "og:description",
    "og:image",
    "twitter:title",
    "twitter:description",
]

URL_ATTRIBUTES = ("href", "src")


@dataclass
class Projection:
    """The subtree selected for conversion.

    Attributes:
        subtree: Detached clone of the selected element
        selector_used: The requested selector, or "body (fallback)"
        urls_resolved: Number of href/src attributes made absolute
    """

    subtree: Tag
    selector_used: str
    urls_resolved: int = 0


def document_body(document: BeautifulSoup) -> Tag:
    """Return the document's body, or the document itself when it has none."""
    return document.body or document


def select_target(document: BeautifulSoup, selector: str) -> tuple[Tag, str]:
    """Find the element matching selector, falling back to the body.

    A malformed selector is treated as a miss.

    Returns:
        Tuple of (element, selector actually used)
    """
    try:
        target = document.select_one(selector)
    except Exception as e:
        LOGGER.debug(f"Selector '{selector}' could not be evaluated: {e}")
        target = None

    if target is None:
        LOGGER.debug(f"Selector '{selector}' matched nothing, using body")
        return document_body(document), FALLBACK_SELECTOR
    return target, selector


def project(document: BeautifulSoup, selector: str = "body", base_url: str | None = None) -> Projection:
    """Select, clone and prepare the conversion subtree.

    Args:
        document: Parsed HTML document (left untouched)
        selector: CSS selector for the conversion root
        base_url: Optional base URL for resolving relative links

    Returns:
        Projection holding a detached clone of the selected element
    """
    target, selector_used = select_target(document, selector)
    subtree = copy.copy(target)

    resolved = 0
    if base_url:
        resolved = resolve_urls(subtree, base_url)

    return Projection(subtree=subtree, selector_used=selector_used, urls_resolved=resolved)


def _is_absolute_base(base_url: str) -> bool:
    try:
        parts = urlsplit(base_url)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def resolve_urls(element: Tag, base_url: str) -> int:
    """Rewrite href and src attributes under element to absolute URLs.

    Attributes that cannot be resolved keep their original value.

    Args:
        element: Subtree to modify in-place
        base_url: Absolute URL to resolve against

    Returns:
        Number of attributes rewritten
    """
    if not _is_absolute_base(base_url):
        LOGGER.warning(f"Ignoring base URL '{base_url}': not an absolute URL")
        return 0

    rewritten = 0
    skipped = 0
    for attr in URL_ATTRIBUTES:
        for tag in element.find_all(attrs={attr: True}):
            value = tag[attr]
            if isinstance(value, list):
                value = " ".join(value)
            try:
                absolute = urljoin(base_url, value.strip())
            except ValueError as e:
                LOGGER.debug(f"Could not resolve {attr}='{value}': {e}")
                skipped += 1
                continue
            if absolute != value:
                tag[attr] = absolute
                rewritten += 1

    if skipped:
        LOGGER.debug(f"Left {skipped} unresolvable URL attribute(s) untouched")
    return rewritten


def _text(tag: Tag | None) -> str | None:
    if tag is None:
        return None
    return tag.get_text().strip()


def extract_metadata(document: BeautifulSoup) -> dict[str, str]:
    """Extract title, meta tags, canonical link and first h1.

    Fields missing from the document are omitted.

    Args:
        document: Parsed HTML document

    Returns:
        Mapping of metadata field to value
    """
    meta: dict[str, str] = {}

    title = _text(document.select_one("title"))
    if title is not None:
        meta["title"] = title

    for name in META_FIELDS:
        el = document.select_one(f'meta[name="{name}"], meta[property="{name}"]')
        if el is not None:
            meta[name.replace(":", "_")] = el.get("content", "")

    canonical = document.select_one('link[rel="canonical"]')
    if canonical is not None:
        meta["canonical"] = canonical.get("href", "")

    h1 = _text(document.select_one("h1"))
    if h1 is not None:
        meta["h1"] = h1

    return meta
