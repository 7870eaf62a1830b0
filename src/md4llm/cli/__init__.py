"""Command-line interface for md4llm.

Commands are organized into modules by functionality:

- convert: Single URL, file or stdin conversion
- batch: Concurrent conversion of a URL list
- drill: Interactive selector drill-down
"""

# Import all command modules to register them with the app
from md4llm.cli import (
    batch,  # noqa: F401
    convert,  # noqa: F401
    drill,  # noqa: F401
)
from md4llm.cli._common import app

__all__ = ["app"]
