"""Boilerplate removal.

Strips page chrome (scripts, navigation, ads, cookie banners, comment
sections) and hidden elements from a cloned subtree before rendering.
"""

import logging

from bs4 import Tag

LOGGER = logging.getLogger(__name__)

# Applied in order; each selector is evaluated independently
NOISE_SELECTORS = [
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    ".ad",
    ".ads",
    ".advertisement",
    ".social-share",
    ".nav",
    "nav",
    "footer",
    ".footer",
    # Article headers are content, page headers are not
    "header:not(article header)",
    ".sidebar",
    ".cookie-banner",
    ".popup",
    ".modal",
    "[role='banner']",
    "[role='navigation']",
    ".comments",
    "#comments",
    ".related-posts",
]

HIDDEN_SELECTORS = [
    "[style*='display: none']",
    "[style*='display:none']",
    "[hidden]",
]


def _remove_matching(element: Tag, selector: str) -> int:
    """Remove every element matching selector, returning how many went."""
    removed = 0
    for match in element.select(selector):
        # Already gone with a removed ancestor
        if match.decomposed:
            continue
        match.decompose()
        removed += 1
    return removed


def remove_noise(element: Tag) -> int:
    """Remove boilerplate and hidden elements in-place.

    A selector that fails to evaluate is skipped; the remaining selectors
    still run.

    Args:
        element: Subtree to clean (must be a clone, not caller-owned)

    Returns:
        Number of elements removed
    """
    removed = 0
    skipped: list[str] = []

    for selector in NOISE_SELECTORS + HIDDEN_SELECTORS:
        try:
            removed += _remove_matching(element, selector)
        except Exception as e:
            LOGGER.debug(f"Skipping noise selector '{selector}': {e}")
            skipped.append(selector)

    if skipped:
        LOGGER.debug(f"Noise removal skipped {len(skipped)} selector(s)")
    LOGGER.debug(f"Removed {removed} noise element(s)")
    return removed
