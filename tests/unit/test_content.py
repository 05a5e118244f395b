"""Unit tests for the block content tree: parsing, rendering, positions."""

from adsmith.content.nodes import Document, Element, Image, Link, TextRun, common_prefix
from adsmith.content.parser import parse_html
from adsmith.content.renderer import offset_of, position_at, render_html, render_with_spans
from adsmith.models.selection import Position


class TestParseHtml:
    """Tests for parse_html."""

    def test_parse_nested_inline_content(self):
        """Test elements, text runs and images become typed nodes."""
        doc = parse_html('<p>Hello <b>world</b><img src="a.png"></p>')

        assert len(doc.children) == 1
        paragraph = doc.children[0]
        assert isinstance(paragraph, Element)
        assert paragraph.tag == "p"
        assert isinstance(paragraph.children[0], TextRun)
        assert paragraph.children[0].text == "Hello "
        assert paragraph.children[1].tag == "b"
        assert isinstance(paragraph.children[2], Image)
        assert paragraph.children[2].src == "a.png"

    def test_parse_link(self):
        """Test <a> becomes a Link wrapper around its children."""
        doc = parse_html('<a href="https://wa.me/911234" target="_blank"><img src="a.png"></a>')

        link = doc.children[0]
        assert isinstance(link, Link)
        assert link.href == "https://wa.me/911234"
        assert link.attrs["target"] == "_blank"
        assert isinstance(link.children[0], Image)

    def test_parse_empty_content(self):
        """Test empty content gives an empty document."""
        doc = parse_html("")

        assert doc.children == []
        assert doc.revision == 0
        assert doc.is_blank()

    def test_parse_decodes_entities(self):
        """Test entities are decoded into text."""
        doc = parse_html("<p>a &amp; b&nbsp;c</p>")

        assert doc.text_content() == "a & b\xa0c"

    def test_parse_drops_comments(self):
        """Test comments do not become nodes."""
        doc = parse_html("<!-- draft --><p>Ad</p>")

        assert len(doc.children) == 1
        assert doc.children[0].tag == "p"


class TestRenderHtml:
    """Tests for render_html."""

    def test_render_reproduces_normalized_input(self):
        """Test rendering a parsed document gives back the same markup."""
        html = '<p>Call <a href="https://t.me/shop" target="_blank"><img src="a.png" style="width:200px;"></a> now<br></p>'

        assert render_html(parse_html(html)) == html

    def test_render_escapes_text(self):
        """Test text is escaped and non-breaking spaces stay entities."""
        doc = Document(children=[TextRun("1 < 2 & a\xa0b")])

        assert render_html(doc) == "1 &lt; 2 &amp; a&nbsp;b"

    def test_render_escapes_attribute_values(self):
        """Test quotes in attribute values are escaped."""
        doc = Document(children=[Image(attrs={"src": 'a".png'})])

        assert render_html(doc) == '<img src="a&quot;.png">'

    def test_render_single_node(self):
        """Test a single node can be rendered on its own."""
        assert render_html(Element(tag="b", children=[TextRun("x")])) == "<b>x</b>"


class TestDocument:
    """Tests for Document tree helpers."""

    def test_node_at_and_path_of(self):
        """Test paths address nodes and nodes find their paths by identity."""
        doc = parse_html('<p>Hi <img src="a.png"></p>')
        image = doc.node_at((0, 1))

        assert isinstance(image, Image)
        assert doc.path_of(image) == (0, 1)
        assert doc.node_at((0, 5)) is None
        assert doc.node_at(()) is None

    def test_walk_is_document_order(self):
        """Test walk yields nodes in pre-order."""
        doc = parse_html('<p>a<b>b</b></p><img src="c.png">')

        paths = [path for path, _ in doc.walk()]

        assert paths == [(0,), (0, 0), (0, 1), (0, 1, 0), (1,)]

    def test_replace_and_insert_touch_revision(self):
        """Test mutations move the revision forward."""
        doc = parse_html("<p>a</p>")

        doc.insert_at((0,), 1, TextRun("b"))
        doc.replace_at((0, 0), [TextRun("z")])

        assert doc.revision == 2
        assert render_html(doc) == "<p>zb</p>"

    def test_is_blank(self):
        """Test blankness ignores whitespace and markup but not images."""
        assert parse_html("<p> <br></p>").is_blank()
        assert not parse_html('<p><img src="a.png"></p>').is_blank()
        assert not parse_html("<p>x</p>").is_blank()

    def test_style_text_is_not_visible(self):
        """Test script and style bodies do not count as text."""
        doc = parse_html("<style>.ad {color: red}</style><p>Hi</p>")

        assert doc.text_content() == "Hi"
        assert parse_html("<style>.ad {color: red}</style>").is_blank()

    def test_common_prefix(self):
        """Test the nearest common ancestor of two paths."""
        assert common_prefix((0, 1, 2), (0, 1, 5)) == (0, 1)
        assert common_prefix((1,), (2,)) == ()


class TestPositions:
    """Tests for mapping markup offsets to tree positions."""

    def test_offset_inside_text(self):
        """Test an offset in a text run maps to a character offset."""
        html, spans = render_with_spans(parse_html("<p>hi</p>"))

        assert html == "<p>hi</p>"
        assert position_at(spans, 3) == Position(path=(0, 0), offset=0)
        assert position_at(spans, 5) == Position(path=(0, 0), offset=2)

    def test_offset_inside_image_markup(self):
        """Test an offset inside <img ...> maps to the image."""
        html, spans = render_with_spans(parse_html('<img src="a.png">x'))

        assert position_at(spans, 5) == Position(path=(0,), offset=0)

    def test_offset_after_last_root_node(self):
        """Test the end of the markup maps to the end of the root."""
        html, spans = render_with_spans(parse_html('<img src="a.png"><img src="b.png">'))

        position = position_at(spans, len(html))

        assert position == Position(path=(), offset=2)
        assert offset_of(spans, position, len(html)) == len(html)

    def test_offset_inside_void_element(self):
        """Test a cursor inside <br> sits after it."""
        html, spans = render_with_spans(parse_html("<p>a<br>b</p>"))

        assert position_at(spans, 5) == Position(path=(0,), offset=2)

    def test_offset_of_inverts_text_position(self):
        """Test tree positions map back to the same markup offsets."""
        html, spans = render_with_spans(parse_html("<p>a &amp; b</p>"))

        # "a & b": the "&" is written as "&amp;"
        assert offset_of(spans, Position(path=(0, 0), offset=2), len(html)) == 5
        assert offset_of(spans, Position(path=(0, 0), offset=3), len(html)) == 10
        assert position_at(spans, 10) == Position(path=(0, 0), offset=3)

    def test_offset_of_image(self):
        """Test an image position maps to the start of its markup."""
        html, spans = render_with_spans(parse_html('<p>x<img src="a.png"></p>'))

        assert offset_of(spans, Position(path=(0, 1), offset=0), len(html)) == 4
