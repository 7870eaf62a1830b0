"""Tests for the rule-based markdown renderer."""

from bs4 import BeautifulSoup

from md4llm.services.renderer import (
    RENDER_RULES,
    RenderRule,
    code_language,
    collapse_newlines,
    render,
    table_rows,
)


def _tag(html: str, name: str):
    return BeautifulSoup(html, "html.parser").find(name)


class TestRuleTable:
    """Tests for the rule registry."""

    def test_rule_order(self):
        """Test that rules are consulted in their registered order."""
        assert [rule.name for rule in RENDER_RULES] == [
            "transparent_containers",
            "flat_tables",
            "strikethrough",
            "task_list_items",
        ]

    def test_rule_predicate(self):
        """Test that a rule only claims elements its predicate accepts."""
        task_rule = RENDER_RULES[-1]
        assert task_rule.applies_to(_tag('<li><input type="checkbox"></li>', "input"))
        assert not task_rule.applies_to(_tag('<p><input type="checkbox"></p>', "input"))
        assert not task_rule.applies_to(_tag('<li><input type="text"></li>', "input"))

    def test_custom_rule_takes_priority(self):
        """Test that a caller-supplied rule overrides the default handler."""
        shout = RenderRule(
            name="shout",
            description="Upper-case emphasis",
            tags=frozenset({"em"}),
            replacement=lambda el, content: content.upper(),
        )
        assert render("<p>say <em>hello</em></p>", rules=(shout,)) == "say HELLO"

    def test_default_handler_when_no_rule(self):
        """Test that unclaimed tags fall through to markdownify."""
        assert render("<p>say <em>hello</em></p>") == "say *hello*"

    def test_unmatched_input_renders_nothing(self):
        """Test that inputs outside list items produce no text."""
        assert render('<p>a <input type="checkbox"> b</p>') == "a  b"


class TestRendering:
    """Tests for individual render rules."""

    def test_blockquote(self):
        """Test '> ' blockquotes."""
        assert render("<blockquote><p>quoted</p></blockquote>") == "> quoted"

    def test_inline_code(self):
        """Test backtick inline code."""
        assert render("<p>run <code>make</code></p>") == "run `make`"

    def test_font_is_transparent(self):
        """Test that <font> contributes only its content."""
        assert render('<p><font color="red">warning</font></p>') == "warning"

    def test_empty_strikethrough(self):
        """Test that empty strikethrough renders nothing."""
        assert render("<p>a<del> </del>b</p>") == "ab"

    def test_empty_table(self):
        """Test that a table without cells renders nothing."""
        assert render("<p>x</p><table><tr></tr></table><p>y</p>") == "x\n\ny"

    def test_ordered_list(self):
        """Test numbered lists."""
        assert render("<ol><li>first</li><li>second</li></ol>") == "1. first\n2. second"


class TestTableRows:
    """Tests for table_rows."""

    def test_collects_header_and_body_rows(self):
        """Test rows from thead and tbody in document order."""
        table = _tag(
            "<table><thead><tr><th> Name </th></tr></thead>"
            "<tbody><tr><td>a  b</td></tr><tr></tr></tbody></table>",
            "table",
        )
        assert table_rows(table) == [["Name"], ["a b"]]

    def test_escapes_pipes(self):
        """Test that pipes in cell text are escaped."""
        table = _tag("<table><tr><td>x|y</td></tr></table>", "table")
        assert table_rows(table) == [["x\\|y"]]


class TestCodeLanguage:
    """Tests for fenced code language detection."""

    def test_language_on_pre(self):
        assert code_language(_tag('<pre class="lang-js">x</pre>', "pre")) == "js"

    def test_language_on_code(self):
        assert code_language(_tag('<pre><code class="hl language-rust">x</code></pre>', "pre")) == "rust"

    def test_highlight_parent(self):
        """Test GitHub-style highlight wrappers."""
        html = '<div class="highlight highlight-source-python"><pre>x</pre></div>'
        assert code_language(_tag(html, "pre")) == "python"

    def test_no_language(self):
        assert code_language(_tag("<pre>x</pre>", "pre")) is None

    def test_fence_uses_detected_language(self):
        html = '<div class="highlight-text-shell"><pre>ls -la</pre></div>'
        assert render(html) == "```shell\nls -la\n```"


class TestCollapseNewlines:
    """Tests for collapse_newlines."""

    def test_collapses_and_trims(self):
        assert collapse_newlines("\n\na\n\n\n\nb\n\n\n") == "a\n\nb"

    def test_keeps_single_blank_line(self):
        assert collapse_newlines("a\n\nb") == "a\n\nb"
