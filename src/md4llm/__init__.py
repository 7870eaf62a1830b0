"""Convert HTML into clean markdown for LLM and RAG pipelines."""

from md4llm.models import ConversionConfig, ConversionResult, ConversionStats
from md4llm.services.converter import MarkdownConverter, convert

__version__ = "1.0.0"

__all__ = [
    "ConversionConfig",
    "ConversionResult",
    "ConversionStats",
    "MarkdownConverter",
    "__version__",
    "convert",
]
