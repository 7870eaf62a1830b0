"""Tests for the HTML to markdown conversion pipeline."""

import pytest
from bs4 import BeautifulSoup

from md4llm import ConversionConfig, MarkdownConverter, convert
from md4llm.exceptions import ValidationError
from md4llm.models import FALLBACK_SELECTOR
from md4llm.services.converter import convert_document, parse_html

TABLE_HTML = "<table><tr><th>A</th><th>Longer</th></tr><tr><td>1</td><td>2</td></tr></table>"


class TestConvertBasics:
    """Tests for the core conversion behaviour."""

    def test_plain_text_survives(self):
        """Test that body text appears in the markdown."""
        result = convert("<p>Hello   world,\n  plain text.</p>")
        assert " ".join(result.markdown.split()) == "Hello world, plain text."

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_headings_use_atx(self, level):
        """Test that <hN> renders as N hashes, a space and the text."""
        result = convert(f"<h{level}>Section title</h{level}>")
        assert result.markdown == "#" * level + " Section title"

    def test_bold_and_italic(self):
        """Test asterisk emphasis."""
        result = convert("<p><strong>bold</strong> and <em>italic</em></p>")
        assert result.markdown == "**bold** and *italic*"

    def test_bullets_use_dash(self):
        """Test that unordered lists use '-' bullets."""
        result = convert("<ul><li>one</li><li>two</li></ul>")
        assert result.markdown == "- one\n- two"

    def test_fenced_code_with_language(self):
        """Test that <pre><code class=language-x> becomes a fenced block."""
        result = convert('<pre><code class="language-python">print(1)</code></pre>')
        assert result.markdown == "```python\nprint(1)\n```"

    def test_preserves_links(self):
        """Test that links are kept by default."""
        result = convert('<p><a href="https://example.com/page">Link</a></p>')
        assert result.markdown == "[Link](https://example.com/page)"

    def test_no_triple_newlines(self):
        """Test that runs of blank lines collapse."""
        html = "<p>a</p><div></div><div><br><br><br></div><p></p><p>b</p>"
        result = convert(html)
        assert "\n\n\n" not in result.markdown
        assert result.markdown.startswith("a")
        assert result.markdown.endswith("b")

    def test_empty_body(self):
        """Test that a body without content converts to empty markdown."""
        result = convert("<html><body><div></div></body></html>")
        assert result.markdown == ""
        assert result.stats.characters == 0
        assert result.stats.words == 0


class TestConvertOptions:
    """Tests for ConversionConfig options."""

    def test_strip_media_keeps_alt_text(self):
        """Test that images with alt text become [Image: alt] placeholders."""
        html = '<p>Intro</p><img src="chart.png" alt="Sales chart"><video src="a.mp4"></video>'
        result = convert(html, strip_media=True)
        assert "[Image: Sales chart]" in result.markdown
        assert "![" not in result.markdown
        assert "a.mp4" not in result.markdown

    def test_images_kept_by_default(self):
        """Test that images render as markdown images without strip_media."""
        result = convert('<img src="https://example.com/chart.png" alt="Sales chart">')
        assert result.markdown == "![Sales chart](https://example.com/chart.png)"

    def test_strip_links_keeps_text(self):
        """Test that preserve_links=False keeps link text but drops the URL."""
        html = '<p>See <a href="https://example.com/secret">the docs</a> now.</p>'
        result = convert(html, preserve_links=False)
        assert result.markdown == "See the docs now."
        assert "example.com" not in result.markdown

    def test_metadata_empty_when_disabled(self, article_html):
        """Test that metadata is empty unless extract_meta is set."""
        result = convert(article_html)
        assert result.metadata == {}

    def test_metadata_extracted(self, article_html):
        """Test metadata extraction from head and first h1."""
        result = convert(article_html, extract_meta=True)
        assert result.metadata["title"] == "Test Article"
        assert result.metadata["description"] == "A page used in tests"
        assert result.metadata["og_title"] == "OG Test Article"
        assert result.metadata["canonical"] == "https://example.com/articles/test"
        assert result.metadata["h1"] == "Main Heading"
        assert "author" not in result.metadata

    def test_noise_removed_by_default(self, article_html):
        """Test that navigation, footer, ads and scripts are removed."""
        result = convert(article_html)
        assert "Main Heading" in result.markdown
        assert "About us" not in result.markdown
        assert "Copyright notice" not in result.markdown
        assert "Buy now" not in result.markdown
        assert "tracking" not in result.markdown

    def test_noise_kept_without_clean(self, article_html):
        """Test that clean_noise=False keeps page chrome."""
        result = convert(article_html, clean_noise=False)
        assert "About us" in result.markdown
        assert "Copyright notice" in result.markdown

    def test_base_url_resolves_links(self, article_html):
        """Test that relative href/src values become absolute."""
        result = convert(article_html, selector="article", base_url="https://example.com/blog/post")
        assert "[relative link](https://example.com/docs/intro)" in result.markdown
        assert "![Sales chart](https://example.com/images/chart.png)" in result.markdown

    def test_camel_case_options(self):
        """Test that camelCase option names are accepted."""
        result = convert('<p><a href="https://example.com">x</a></p>', preserveLinks=False)
        assert result.markdown == "x"

    def test_keyword_overrides_config(self):
        """Test that keyword options override a given config."""
        config = ConversionConfig(strip_media=True)
        result = convert('<img src="a.png" alt="A">', config, strip_media=False)
        assert result.markdown == "![A](a.png)"

    def test_unknown_option_rejected(self):
        """Test that unknown options raise ValidationError."""
        with pytest.raises(ValidationError, match="Invalid conversion options"):
            convert("<p>x</p>", remove_everything=True)

    def test_non_string_input_rejected(self):
        """Test that non-string HTML raises ValidationError."""
        with pytest.raises(ValidationError):
            convert(b"<p>bytes</p>")  # type: ignore[arg-type]


class TestSelectors:
    """Tests for selector projection through the pipeline."""

    def test_selector_limits_output(self, article_html):
        """Test that only the selected subtree is converted."""
        result = convert(article_html, selector="article", clean_noise=False)
        assert result.selector == "article"
        assert result.markdown.startswith("# Main Heading")
        assert "Copyright notice" not in result.markdown

    def test_missing_selector_falls_back_to_body(self, article_html):
        """Test that a selector matching nothing converts the whole body."""
        result = convert(article_html, selector="#does-not-exist")
        assert result.selector == FALLBACK_SELECTOR
        assert result.used_fallback
        assert "Main Heading" in result.markdown

    def test_malformed_selector_falls_back_to_body(self, article_html):
        """Test that an invalid selector is treated as a miss."""
        result = convert(article_html, selector="[[[")
        assert result.selector == FALLBACK_SELECTOR
        assert "Main Heading" in result.markdown


class TestTables:
    """Tests for table conversion and alignment."""

    def test_table_aligned(self):
        """Test the header, separator and data rows of an aligned table."""
        result = convert(TABLE_HTML)
        assert result.markdown == "| A   | Longer |\n| --- | ------ |\n| 1   | 2      |"

    def test_table_unaligned(self):
        """Test the flattened table without the alignment pass."""
        result = convert(TABLE_HTML, align_tables=False)
        assert result.markdown == "| A | Longer |\n| --- | --- |\n| 1 | 2 |"

    def test_table_is_rectangular(self):
        """Test that short rows are padded to the widest row."""
        html = "<table><tr><td>a</td><td>b</td><td>c</td></tr><tr><td>d</td></tr></table>"
        result = convert(html, align_tables=False)
        lines = result.markdown.split("\n")
        assert lines == ["| a | b | c |", "| --- | --- | --- |", "| d |  |  |"]

    def test_pipe_in_cell_escaped(self):
        """Test that literal pipes in cells are escaped and stay in their column."""
        html = "<table><tr><th>Expr</th><th>Note</th></tr><tr><td>a|b</td><td>or</td></tr></table>"
        result = convert(html)
        lines = result.markdown.split("\n")
        assert lines[2] == "| a\\|b | or   |"
        assert all(line.count(" | ") == 1 for line in lines)

    def test_nested_markup_flattened(self):
        """Test that cell markup collapses to plain text."""
        html = "<table><tr><td><b>Bold</b>\n  cell</td></tr></table>"
        result = convert(html, align_tables=False)
        assert result.markdown.startswith("| Bold cell |")


class TestGfmRules:
    """Tests for strikethrough, task lists and transparent containers."""

    def test_strikethrough(self):
        """Test that del/s/strike render as ~~text~~."""
        for tag in ("del", "s", "strike"):
            result = convert(f"<p><{tag}>old</{tag}> new</p>")
            assert result.markdown == "~~old~~ new"

    def test_task_list(self):
        """Test that checkboxes in list items render as task markers."""
        html = '<ul><li><input type="checkbox" checked> Done</li><li><input type="checkbox"> Todo</li></ul>'
        result = convert(html)
        assert result.markdown == "- [x] Done\n- [ ] Todo"

    def test_transparent_span(self):
        """Test that span and small contribute only their content."""
        result = convert("<p><span>Hello</span> <small>small print</small></p>")
        assert result.markdown == "Hello small print"


class TestStats:
    """Tests for ConversionStats."""

    def test_stats_counts(self):
        """Test character, word and line counts."""
        result = convert("<h1>Title</h1><p>Two words</p>")
        assert result.markdown == "# Title\n\nTwo words"
        assert result.stats.characters == len(result.markdown)
        assert result.stats.words == 4
        assert result.stats.lines == 3


class TestNoMutation:
    """Tests that conversion never modifies the caller's document."""

    def test_convert_document_leaves_document_unchanged(self, article_doc):
        """Test that every in-place pass works on a clone."""
        before = str(article_doc)
        config = ConversionConfig(
            selector="main",
            strip_media=True,
            preserve_links=False,
            base_url="https://example.com/",
            extract_meta=True,
        )
        result = convert_document(article_doc, config)
        assert "[Image: Sales chart]" in result.markdown
        assert str(article_doc) == before

    def test_parse_html_returns_document(self):
        """Test that parse_html always yields a body for documents."""
        doc = parse_html("<p>x</p>")
        assert isinstance(doc, BeautifulSoup)
        assert doc.body is not None


class TestMarkdownConverter:
    """Tests for the MarkdownConverter façade."""

    def test_reuses_config(self):
        """Test that the façade applies its config to every call."""
        converter = MarkdownConverter(strip_media=True)
        assert converter.config.strip_media is True
        result = converter.convert('<img src="x.png" alt="X">')
        assert result.markdown == "[Image: X]"

    def test_convert_document(self, article_doc):
        """Test converting a pre-parsed document."""
        converter = MarkdownConverter(ConversionConfig(selector="article"))
        result = converter.convert_document(article_doc)
        assert result.selector == "article"
        assert "Main Heading" in result.markdown
