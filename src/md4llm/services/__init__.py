"""Service layer for md4llm.

This module provides the core services:
- convert / MarkdownConverter: HTML to Markdown conversion pipeline
- FetchService: Concurrent URL fetching with retries
- DrillSession: Interactive selector refinement
"""

from md4llm.services.converter import MarkdownConverter, convert
from md4llm.services.explorer import DrillSession, extract_selectors
from md4llm.services.fetcher import FetchService

__all__ = [
    "DrillSession",
    "FetchService",
    "MarkdownConverter",
    "convert",
    "extract_selectors",
]
