"""Unit tests for stripping editing artifacts from block content."""

from adsmith.content.parser import parse_html
from adsmith.content.renderer import render_html
from adsmith.content.sanitize import sanitize_document, sanitize_html, strip_style_properties


def test_strips_focus_marker():
    """Test the focus attribute never survives sanitizing."""
    assert sanitize_html('<img src="a.png" data-adsmith-focus="true">') == '<img src="a.png">'


def test_strips_selection_highlight():
    """Test the picked-element highlight is removed but other styling stays."""
    html = (
        '<img src="a.png" data-adsmith-selected="true" class="big adsmith-selected" '
        'style="width:200px; outline: 2px solid #3b82f6; outline-offset: 2px">'
    )

    assert sanitize_html(html) == '<img src="a.png" class="big" style="width:200px">'


def test_strips_contenteditable_from_marked_node():
    """Test contenteditable left on a marked node is removed."""
    assert sanitize_html('<p contenteditable="true" data-adsmith-focus="true">Ad</p>') == "<p>Ad</p>"


def test_keeps_author_outline_and_contenteditable():
    """Test styling on nodes the editor never marked is left alone."""
    html = (
        '<p contenteditable="false" style="outline: 1px dashed gold">Ad</p>'
        '<img src="a.png" class="banner" style="width:200px; outline-offset: 4px">'
    )

    assert sanitize_html(html) == html


def test_style_and_script_bodies_are_not_escaped():
    """Test raw CSS and JS survive sanitizing unchanged."""
    html = (
        "<style>.ad > img {width: 10px}</style>"
        "<script>if (a < b && c) { run('<b>'); }</script><p>a &amp; b</p>"
    )

    once = sanitize_html(html)

    assert once == html
    assert sanitize_html(once) == once


def test_keeps_links_and_structure():
    """Test clean content passes through unchanged."""
    html = '<p>Call <a href="https://wa.me/911234567890" target="_blank"><img src="a.png" style="width:200px;height:auto;"></a></p>'

    assert sanitize_html(html) == html


def test_sanitize_is_idempotent():
    """Test sanitizing twice gives the same result as once."""
    html = (
        '<p><a href="https://t.me/shop" target="_blank">'
        '<img src="a.png" class="adsmith-focus" data-adsmith-focus="true" style="outline: 1px solid red"></a> hi</p>'
    )

    once = sanitize_html(html)

    assert sanitize_html(once) == once
    assert "adsmith" not in once
    assert "outline" not in once


def test_sanitize_document_touches_only_when_changed():
    """Test the revision moves only when something was removed."""
    clean = parse_html('<img src="a.png">')
    dirty = parse_html('<img src="a.png" data-adsmith-focus="true">')

    sanitize_document(clean)
    sanitize_document(dirty)

    assert clean.revision == 0
    assert dirty.revision == 1
    assert render_html(dirty) == '<img src="a.png">'


def test_strip_style_properties_leaves_untouched_style_alone():
    """Test a style without transient properties is returned as is."""
    style = "width:200px;height:auto;"

    assert strip_style_properties(style, frozenset({"outline"})) == style
