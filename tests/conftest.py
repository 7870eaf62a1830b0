"""Pytest configuration and shared fixtures for md4llm tests."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests with no I/O or network")
    config.addinivalue_line("markers", "integration: Filesystem or CLI tests using mocked HTTP transports")
    config.addinivalue_line("markers", "e2e: End-to-end tests with live network")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Apply default markers to tests without explicit markers.

    Tests should use explicit markers (@pytest.mark.unit, @pytest.mark.e2e).
    Unmarked tests default to unit.
    """
    for item in items:
        marker_names = [m.name for m in item.iter_markers()]
        if any(m in marker_names for m in ("unit", "integration", "e2e")):
            continue
        item.add_marker(pytest.mark.unit)


ARTICLE_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Test Article</title>
  <meta name="description" content="A page used in tests">
  <meta property="og:title" content="OG Test Article">
  <link rel="canonical" href="https://example.com/articles/test">
</head>
<body>
  <header class="site-header"><a href="/">Home</a></header>
  <nav><a href="/about">About us</a></nav>
  <main id="content">
    <article class="post">
      <h1>Main Heading</h1>
      <p>First paragraph with a <a href="/docs/intro">relative link</a>.</p>
      <img src="/images/chart.png" alt="Sales chart">
      <div class="ad">Buy now</div>
    </article>
  </main>
  <footer>Copyright notice</footer>
  <script>console.log("tracking")</script>
</body>
</html>
"""


@pytest.fixture
def article_html() -> str:
    """A small but complete page with chrome, content and metadata."""
    return ARTICLE_PAGE


@pytest.fixture
def article_doc(article_html: str) -> BeautifulSoup:
    """The article page parsed the way the converter parses documents."""
    return BeautifulSoup(article_html, "lxml")


@pytest.fixture
def urls_file(tmp_path: Path) -> Path:
    """Create a temporary URL list for batch tests.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        Path to created URLs file.
    """
    urls_file = tmp_path / "urls.txt"
    urls_file.write_text(
        "# docs to ingest\nhttps://www.example.com/a\n\nnot-a-url\nhttps://example.org/b\n",
        encoding="utf-8",
    )
    return urls_file
