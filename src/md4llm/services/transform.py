"""In-place content rewrites applied before rendering."""

import logging

from bs4 import NavigableString, Tag

LOGGER = logging.getLogger(__name__)

MEDIA_SELECTOR = "img, video, audio, picture, figure, canvas"


def strip_media(element: Tag) -> int:
    """Remove media elements, keeping image alt text as a placeholder.

    An ``<img>`` with non-empty alt text becomes the text ``[Image: <alt>]``;
    every other media element is removed outright.

    Args:
        element: Subtree to modify in-place

    Returns:
        Number of media elements replaced or removed
    """
    count = 0
    for media in element.select(MEDIA_SELECTOR):
        # Removed together with an enclosing <figure> or <picture>
        if media.decomposed:
            continue
        alt = media.get("alt") if media.name == "img" else None
        if alt:
            media.replace_with(NavigableString(f"[Image: {alt}]"))
        else:
            media.decompose()
        count += 1

    LOGGER.debug(f"Stripped {count} media element(s)")
    return count


def strip_links(element: Tag) -> int:
    """Replace every anchor with its plain text content.

    Args:
        element: Subtree to modify in-place

    Returns:
        Number of anchors replaced
    """
    anchors = element.find_all("a")
    for anchor in anchors:
        anchor.replace_with(NavigableString(anchor.get_text()))

    LOGGER.debug(f"Stripped {len(anchors)} link(s)")
    return len(anchors)
