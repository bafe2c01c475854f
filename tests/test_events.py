from render import events as ev
from render.events import Alignment, End, Start, Tag, markdown_events


def _events(source):
    return list(markdown_events(source))


def test_heading_and_paragraph():
    assert _events("# Title\n\nHello **world**.") == [
        Start(Tag.HEADING, level=1),
        ev.Text("Title"),
        End(Tag.HEADING),
        Start(Tag.PARAGRAPH),
        ev.Text("Hello "),
        Start(Tag.STRONG),
        ev.Text("world"),
        End(Tag.STRONG),
        ev.Text("."),
        End(Tag.PARAGRAPH),
    ]


def test_tight_list_has_no_paragraph_scopes():
    assert _events("- a\n- b") == [
        Start(Tag.LIST),
        Start(Tag.ITEM),
        ev.Text("a"),
        End(Tag.ITEM),
        Start(Tag.ITEM),
        ev.Text("b"),
        End(Tag.ITEM),
        End(Tag.LIST),
    ]


def test_ordered_list_start_number():
    assert _events("3. x\n4. y")[0] == Start(Tag.LIST, start=3)
    assert _events("1. x")[0] == Start(Tag.LIST, start=1)


def test_table_alignments_from_delimiter_row():
    source = "| a | b | c | d |\n|:--|:-:|--:|---|\n| 1 | 2 | 3 | 4 |"
    first = _events(source)[0]
    assert first.tag is Tag.TABLE
    assert first.alignments == (Alignment.LEFT, Alignment.CENTER, Alignment.RIGHT, Alignment.NONE)


def test_table_event_structure():
    tags = [
        (type(event).__name__, event.tag)
        for event in _events("| A |\n|---|\n| 1 |")
        if isinstance(event, (Start, End))
    ]
    assert tags == [
        ("Start", Tag.TABLE),
        ("Start", Tag.TABLE_HEAD),
        ("Start", Tag.TABLE_ROW),
        ("Start", Tag.TABLE_CELL),
        ("End", Tag.TABLE_CELL),
        ("End", Tag.TABLE_ROW),
        ("End", Tag.TABLE_HEAD),
        ("Start", Tag.TABLE_ROW),
        ("Start", Tag.TABLE_CELL),
        ("End", Tag.TABLE_CELL),
        ("End", Tag.TABLE_ROW),
        ("End", Tag.TABLE),
    ]


def test_fenced_code_keeps_language_and_content():
    assert _events("```python\nx = 1\n```") == [
        Start(Tag.CODE_BLOCK, language="python"),
        ev.Text("x = 1\n"),
        End(Tag.CODE_BLOCK),
    ]


def test_indented_code_has_no_language():
    events = _events("    code\n")
    assert events[0] == Start(Tag.CODE_BLOCK, language="")
    assert events[1] == ev.Text("code\n")


def test_html_block_yields_one_line_per_row():
    assert _events("<div>\nhi\n</div>\n") == [
        ev.Html("<div>"),
        ev.HardBreak(),
        ev.Html("hi"),
        ev.HardBreak(),
        ev.Html("</div>"),
        ev.HardBreak(),
    ]


def test_inline_leaves():
    events = _events("a `x` <span>b</span>\nc  \nd")
    assert ev.Code("x") in events
    assert ev.Html("<span>") in events
    assert ev.SoftBreak() in events
    assert ev.HardBreak() in events


def test_link_image_and_strikethrough():
    events = _events("[t](http://example.com) ![alt](x.png) ~~gone~~")
    assert Start(Tag.LINK, href="http://example.com") in events
    image_index = events.index(Start(Tag.IMAGE, href="x.png"))
    assert events[image_index + 1:image_index + 3] == [ev.Text("alt"), End(Tag.IMAGE)]
    assert Start(Tag.STRIKETHROUGH) in events


def test_thematic_break():
    assert ev.Rule() in _events("a\n\n***\n\nb")


def test_stream_is_balanced():
    source = "> quote with *em*\n\n1. one\n   - nested\n\n| a |\n|---|\n| b |\n"
    depth = 0
    for event in markdown_events(source):
        if isinstance(event, Start):
            depth += 1
        elif isinstance(event, End):
            depth -= 1
        assert depth >= 0
    assert depth == 0
