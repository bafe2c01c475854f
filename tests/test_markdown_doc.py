import logging
from concurrent.futures import ThreadPoolExecutor

from rich.color import Color

from render.break_marker import BR_PLACEHOLDER, BreakMode, upper_placeholder
from render.events import End, Start, Tag, markdown_events
from render import events as ev
from render.markdown_doc import (
    CELL_SEPARATOR,
    CODE_FOOTER,
    CODE_HEADER,
    ROW_END,
    ROW_START,
    MarkdownRenderer,
    render_markdown,
)
from render.theme import ANSI, GITHUB_DARK


def _plain(doc):
    return [line.plain for line in doc]


def _texts(line):
    return [span.text for span in line.spans]


class TestBlocks:
    """Block structure and the blank lines between blocks."""

    def test_heading_then_paragraph(self):
        # Headings open with a blank line and paragraphs close with one, so none sits between them
        doc = render_markdown("# Title\n\nHello **world**.")
        assert _plain(doc) == ["", "Title", "Hello world.", ""]
        title = doc[1].spans[0]
        assert title.style.bold
        assert title.style.color == Color.parse(GITHUB_DARK.heading)
        assert _texts(doc[2]) == ["Hello ", "world", "."]
        assert doc[2].spans[1].style.bold
        assert not doc[2].spans[0].style.bold

    def test_heading_levels_have_distinct_styles(self):
        doc = render_markdown("# a\n## b\n### c")
        styles = {line.plain: line.spans[0].style for line in doc if line.spans}
        assert styles["a"].color == Color.parse(GITHUB_DARK.heading)
        assert styles["b"].color == Color.parse(GITHUB_DARK.heading_alt)
        assert styles["c"].dim

    def test_block_quote_marker_and_style(self):
        doc = render_markdown("> quote")
        assert _plain(doc) == ["▎ quote", ""]
        marker, space, text = doc[0].spans
        assert marker.style == GITHUB_DARK.quote_border_style
        assert text.style.italic
        assert text.style.color == Color.parse(GITHUB_DARK.quote_fg)

    def test_rule_uses_configured_width(self):
        assert _plain(render_markdown("a\n\n***\n\nb")) == ["a", "", "─" * 80, "", "b", ""]
        assert _plain(render_markdown("***", rule_width=10)) == ["─" * 10, ""]

    def test_soft_and_hard_breaks(self):
        assert _plain(render_markdown("a\nb")) == ["a b", ""]
        assert _plain(render_markdown("a  \nb")) == ["a", "b", ""]

    def test_raw_html_block(self):
        doc = render_markdown("<div>\nhi\n</div>\n")
        assert _plain(doc) == ["<div>", "hi", "</div>"]
        assert all(line.spans[0].style == GITHUB_DARK.raw_html_style for line in doc)

    def test_raw_html_keeps_break_tags(self):
        doc = render_markdown("<div>\nA<br>B<BR>C\n</div>\n")
        assert _plain(doc) == ["<div>", "A<br>B<BR>C", "</div>"]
        assert BR_PLACEHOLDER not in doc.plain
        assert upper_placeholder() not in doc.plain

    def test_empty_source(self):
        assert render_markdown("").height == 0


class TestInline:
    """Inline scopes merge onto the enclosing style."""

    def test_nested_emphasis_merges(self):
        doc = render_markdown("*a **b** c*")
        spans = {span.text: span.style for span in doc[0].spans}
        assert spans["a "].italic and not spans["a "].bold
        assert spans["b"].italic and spans["b"].bold

    def test_link_style(self):
        span = render_markdown("[t](http://example.com)")[0].spans[0]
        assert span.text == "t"
        assert span.style.underline
        assert span.style.color == Color.parse(GITHUB_DARK.link)

    def test_strikethrough(self):
        span = render_markdown("~~gone~~")[0].spans[0]
        assert span.text == "gone"
        assert span.style.strike

    def test_inline_code_is_padded(self):
        doc = render_markdown("use `x` now")
        assert _texts(doc[0]) == ["use ", " x ", " now"]
        assert doc[0].spans[1].style.bgcolor == Color.parse(GITHUB_DARK.inline_code_bg)

    def test_inline_html_kept_raw(self):
        doc = render_markdown("a<Br>b")
        assert _texts(doc[0]) == ["a", "<Br>", "b"]
        assert doc[0].spans[1].style == GITHUB_DARK.raw_html_style


class TestLists:
    def test_bullets(self):
        doc = render_markdown("- a\n- b")
        assert _plain(doc) == ["• a", "• b", ""]

    def test_numbering_starts_at_first_number(self):
        doc = render_markdown("3. a\n4. b\n5. c")
        assert [line.spans[0].text for line in doc.lines[:3]] == ["3. ", "4. ", "5. "]
        assert doc[3].is_blank

    def test_nested_list_numbering_is_independent(self):
        doc = render_markdown("1. a\n   1. x\n   2. y\n2. b")
        assert _plain(doc) == ["1. a", "  1. x", "  2. y", "", "2. b", ""]


class TestCodeBlocks:
    def test_header_body_footer(self):
        doc = render_markdown("```rust\nfn main() {}\n```")
        assert _plain(doc) == ["", CODE_HEADER + "rust", "│ fn main() {}", CODE_FOOTER, ""]
        assert doc[1].spans[1].style == GITHUB_DARK.code_label_style
        body = doc[2].spans[1]
        assert body.style.bgcolor == Color.parse(GITHUB_DARK.code_bg)

    def test_no_language_label(self):
        doc = render_markdown("```\nx\n```")
        assert _texts(doc[1]) == [CODE_HEADER]

    def test_code_is_verbatim(self):
        doc = render_markdown("```\n**bold** <br> `x`\n```")
        body = doc[2].spans[1]
        assert body.text == "**bold** <br> `x`"
        assert not body.style.bold

    def test_blank_code_lines_keep_border(self):
        doc = render_markdown("```\na\n\nb\n```")
        assert _plain(doc)[2:5] == ["│ a", "│ ", "│ b"]


class TestTables:
    def test_two_column_table(self):
        doc = render_markdown("| A | B |\n|---|---|\n| 1 | 2 |")
        assert doc.height == 6
        assert _texts(doc[0]) == ["┌", "─" * 14, "┬", "─" * 14, "┐"]
        assert _texts(doc[1]) == [ROW_START, "A", " " * 11, CELL_SEPARATOR, "B", " " * 11, ROW_END]
        assert doc[1].spans[1].style.bold
        assert _texts(doc[2]) == ["├", "─" * 14, "┼", "─" * 14, "┤"]
        assert _texts(doc[3]) == [ROW_START, "1", " " * 11, CELL_SEPARATOR, "2", " " * 11, ROW_END]
        assert not doc[3].spans[1].style.bold
        assert _texts(doc[4]) == ["└", "─" * 14, "┴", "─" * 14, "┘"]
        assert doc[5].is_blank

    def test_alignment_separator(self):
        doc = render_markdown("| a | b | c | d |\n|:--|:-:|--:|---|\n| 1 | 2 | 3 | 4 |")
        segments = _texts(doc[2])[1::2]
        assert segments == [
            ":" + "─" * 13,
            ":" + "─" * 12 + ":",
            "─" * 13 + ":",
            "─" * 14,
        ]

    def test_border_column_counts_match(self):
        doc = render_markdown("| a | b | c |\n|---|---|---|\n| 1 | 2 | 3 |\n| 4 | 5 | 6 |")
        top = doc[0]
        bottom = [line for line in doc if line.plain.startswith("└")][0]
        assert len(top.spans[1::2]) == len(bottom.spans[1::2]) == 3
        rows = [line for line in doc if line.plain.startswith(ROW_START)]
        assert len(rows) == 3
        assert all(line.plain.count("│") == 4 for line in rows)

    def test_wide_cell_is_not_truncated(self):
        doc = render_markdown("| abcdefghijklmnop |\n|---|\n| x |")
        assert _texts(doc[1]) == [ROW_START, "abcdefghijklmnop", ROW_END]

    def test_custom_column_width(self):
        doc = render_markdown("| A |\n|---|\n| 1 |", table_column_width=4)
        assert _texts(doc[0]) == ["┌", "─" * 6, "┐"]
        assert doc[3].plain == "│ 1    │"


class TestBreakMarkers:
    def test_break_marker_in_table_cell(self):
        doc = render_markdown("| h |\n|---|\n| a<br>b |")
        row = doc[3]
        assert _texts(row)[1:4] == ["a", "<br>", "b"]
        assert row.spans[2].style == GITHUB_DARK.break_marker_style
        assert row.spans[1].style != row.spans[2].style
        assert row.plain == ROW_START + "a<br>b" + " " * 6 + ROW_END

    def test_uppercase_break_in_paragraph(self):
        assert _plain(render_markdown("one<BR>two")) == ["one<br>two", ""]

    def test_newline_mode_flushes(self):
        assert _plain(render_markdown("one<br>two", break_mode=BreakMode.NEWLINE)) == ["one", "two", ""]

    def test_newline_mode_in_table_pads_continuation(self):
        doc = render_markdown("| h |\n|---|\n| a<br>b |", break_mode=BreakMode.NEWLINE)
        lines = _plain(doc)
        index = lines.index("│ a")
        assert lines[index + 1] == "b" + " " * 11 + ROW_END

    def test_break_restored_in_inline_code(self):
        doc = render_markdown("`a<br>b`")
        assert doc[0].spans[0].text == " a<br>b "

    def test_uppercase_break_survives_in_code(self):
        block = render_markdown("```\nx<BR>y<br>z\n```")
        assert block[2].spans[1].text == "x<BR>y<br>z"
        assert render_markdown("`<BR>`")[0].spans[0].text == " <BR> "

    def test_uppercase_break_in_table_cell_is_a_marker(self):
        row = render_markdown("| h |\n|---|\n| a<BR>b |")[3]
        assert _texts(row)[1:4] == ["a", "<br>", "b"]
        assert row.spans[2].style == GITHUB_DARK.break_marker_style


class TestRendererProperties:
    SOURCE = (
        "# Doc\n\n> quote *em* [link](u)\n\n1. one\n   - two\n\n"
        "| a | b |\n|:-:|--:|\n| x<br>y | **z** |\n\n```py\ncode\n```\n\n***\n"
    )

    def test_context_is_balanced_after_render(self):
        ctx = MarkdownRenderer().run(markdown_events(self.SOURCE))
        assert ctx.is_balanced()

    def test_rendering_is_idempotent(self):
        assert render_markdown(self.SOURCE) == render_markdown(self.SOURCE)

    def test_renderer_can_be_shared_between_threads(self):
        renderer = MarkdownRenderer()
        expected = renderer.render(markdown_events(self.SOURCE))
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: renderer.render(markdown_events(self.SOURCE)), range(8)))
        assert all(result == expected for result in results)

    def test_every_tag_has_handlers(self):
        renderer = MarkdownRenderer()
        assert set(renderer._open_handlers) == set(Tag)
        assert set(renderer._close_handlers) == set(Tag)

    def test_theme_changes_styles_not_text(self):
        assert render_markdown(self.SOURCE).plain == render_markdown(self.SOURCE, theme=ANSI).plain


class TestStyledDocument:
    def test_plain_and_height(self):
        doc = render_markdown("# T\n\nbody")
        assert doc.height == len(doc) == 4
        assert doc.plain == "\nT\nbody\n"

    def test_to_text_keeps_styles(self):
        text = render_markdown("**b**").to_text()
        assert text.plain == "b\n"
        assert any(span.style.bold for span in text.spans)

    def test_window(self):
        doc = render_markdown("a\n\nb\n\nc")
        assert doc.window(2, 2).plain == "b\n"
        assert doc.window(-3, 1).plain == "a"
        assert doc.window(50, 5).plain == ""


class TestMalformedStreams:
    def test_unmatched_close_is_ignored(self):
        ctx = MarkdownRenderer().run([End(Tag.STRONG), ev.Text("x")])
        assert [line.plain for line in ctx.lines] == ["x"]
        assert ctx.is_balanced()

    def test_mismatched_close_is_ignored(self):
        events = [Start(Tag.PARAGRAPH), ev.Text("a"), End(Tag.HEADING), End(Tag.PARAGRAPH)]
        doc = MarkdownRenderer().render(events)
        assert _plain(doc) == ["a", ""]

    def test_unclosed_scopes_are_closed_at_end(self, caplog):
        with caplog.at_level(logging.WARNING, logger="render.markdown_doc"):
            ctx = MarkdownRenderer().run([Start(Tag.STRONG), ev.Text("a")])
        assert ctx.is_balanced()
        assert ctx.lines[0].spans[0].style.bold
        assert "open scope" in caplog.text
