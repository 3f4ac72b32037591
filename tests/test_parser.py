"""Tests for front matter extraction and HTML analysis."""

import logging
from unittest.mock import patch

import pytest

from jmespath_docs_site.models import Section
from jmespath_docs_site.parser import DocumentParser


@pytest.fixture
def parser() -> DocumentParser:
    """Create a DocumentParser instance.

    Returns:
        DocumentParser instance.
    """
    return DocumentParser()


def test_front_matter_title_and_body(parser: DocumentParser) -> None:
    """Test splitting a front matter block with a padded opening delimiter."""
    parsed = parser.parse_source("--- \ntitle: Foo\n---\n# Bar\n", "foo.md")

    assert parsed.front_matter.title == "Foo"
    assert parsed.body == "# Bar\n"


def test_front_matter_recognised_and_extra_keys(parser: DocumentParser) -> None:
    """Test that unknown keys are kept in the extension mapping."""
    raw = """---
title: Functions
nav_label: Funcs
nav_order: 3
parent: spec
status: Accepted
custom_key: hello
---
Body
"""
    parsed = parser.parse_source(raw, "functions.md")

    assert parsed.front_matter.nav_label == "Funcs"
    assert parsed.front_matter.nav_order == 3
    assert parsed.front_matter.parent == "spec"
    assert parsed.front_matter.status == "Accepted"
    assert parsed.front_matter.extra == {"custom_key": "hello"}
    assert parsed.body == "Body\n"


def test_no_front_matter(parser: DocumentParser) -> None:
    """Test a file without front matter keeps its whole text as body."""
    raw = "# Title\n\nText.\n"
    parsed = parser.parse_source(raw, "plain.md")

    assert parsed.front_matter.title is None
    assert parsed.front_matter.extra == {}
    assert parsed.body == raw


def test_empty_front_matter_block(parser: DocumentParser) -> None:
    """Test an empty front matter block yields empty metadata."""
    parsed = parser.parse_source("---\n---\nBody\n", "empty.md")

    assert parsed.front_matter.title is None
    assert parsed.body == "Body\n"


def test_invalid_front_matter_falls_back(parser: DocumentParser, caplog: pytest.LogCaptureFixture) -> None:
    """Test that unparseable front matter keeps the whole file as body."""
    raw = "---\ntitle: [unclosed\n---\nBody\n"

    with caplog.at_level(logging.WARNING):
        parsed = parser.parse_source(raw, "broken.md")

    assert parsed.front_matter.title is None
    assert parsed.body == raw
    assert "Could not parse front matter for broken.md" in caplog.text


def test_non_mapping_front_matter_falls_back(parser: DocumentParser) -> None:
    """Test that a YAML list in front matter is treated as a parse failure."""
    raw = "---\n- a\n- b\n---\nBody\n"
    parsed = parser.parse_source(raw, "list.md")

    assert parsed.front_matter.extra == {}
    assert parsed.body == raw


def test_fallback_title_from_filename(parser: DocumentParser) -> None:
    """Test fallback title derived from the file name."""
    assert parser.fallback_title("array-slicing.md") == "Array Slicing"
    assert parser.fallback_title("guide/my_test-file.md") == "My Test File"
    assert parser.fallback_title("guide\\lexical-scope.md") == "Lexical Scope"


def test_analyze_title_and_sections(parser: DocumentParser) -> None:
    """Test extracting the title and section outline."""
    html = """
<h1 id="title">Title <a class="header-anchor" href="#title">#</a></h1>
<h2 id="alpha">Alpha <a class="header-anchor" href="#alpha">#</a></h2>
<h3>No id</h3>
<h4 id="blank"> </h4>
<h5 id="beta">Beta</h5>
<p>Body text</p>
"""
    content = parser.analyze_html(html, "Fallback", "", "doc.md")

    assert content.title == "Title"
    assert content.sections == [Section(id="alpha", text="Alpha", level=2), Section(id="beta", text="Beta", level=5)]
    assert "Body text" in content.text_content
    assert "#" not in content.text_content


def test_analyze_title_keeps_link_text(parser: DocumentParser) -> None:
    """Test that link text inside a heading contributes to the title."""
    html = '<h1 id="x"><a href="https://jmespath.site">JMESPath</a> Specification <a class="header-anchor">#</a></h1>'
    content = parser.analyze_html(html, "Fallback", "", "doc.md")

    assert content.title == "JMESPath Specification"


def test_analyze_without_h1_uses_fallback(parser: DocumentParser) -> None:
    """Test fallback title when the page has no h1."""
    content = parser.analyze_html("<h2 id='a'>A</h2><p>Text</p>", "Array Slicing", "", "array-slicing.md")

    assert content.title == "Array Slicing"


def test_analyze_strips_playgrounds_from_text(parser: DocumentParser) -> None:
    """Test that playground widgets do not leak into the indexed text."""
    html = """
<p>Before</p>
<div class="jmespath-playground"><textarea>{"secret": 1}</textarea><span>Interactive Example</span></div>
<p>After</p>
"""
    content = parser.analyze_html(html, "Fallback", "", "doc.md")

    assert "Before" in content.text_content
    assert "After" in content.text_content
    assert "secret" not in content.text_content
    assert "Interactive Example" not in content.text_content


def test_analyze_degrades_when_html_cannot_be_parsed(parser: DocumentParser) -> None:
    """Test the degraded result when HTML parsing fails."""
    with patch("jmespath_docs_site.parser.BeautifulSoup", side_effect=RuntimeError("boom")):
        content = parser.analyze_html("<h1>T</h1>", "Fallback", "# T\n\nraw body", "doc.md")

    assert content.title == "Fallback"
    assert content.sections == []
    assert content.text_content == "# T\n\nraw body"
