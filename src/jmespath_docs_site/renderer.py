"""Markdown to HTML rendering with heading anchors and playground blocks."""

import re
import secrets
import string
import xml.etree.ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from jmespath_docs_site.playground import find_fenced_blocks, parse_fence_options, render_playground

HEADER_ANCHOR_CLASS = "header-anchor"
HEADING_TAGS = frozenset(f"h{depth}" for depth in range(1, 7))

_IMAGE_RE = re.compile(r"!\[[^\]]*\](?:\([^)]*\)|\[[^\]]*\])?")
_LINK_RE = re.compile(r"\[([^\]]*)\](?:\([^)]*\)|\[[^\]]*\])")
_INLINE_HTML_RE = re.compile(r"</?[A-Za-z][^>]*>")
_FALLBACK_ALPHABET = string.ascii_lowercase + string.digits


def slugify_heading(text: str) -> str:
    """Turn heading text into an anchor id.

    Args:
        text: Plain heading text.

    Returns:
        Slug, or an empty string when nothing usable remains.
    """
    slug = text.lower()
    slug = re.sub(r"^[^a-z_]+", "", slug)
    slug = re.sub(r"[^\w-]+", "-", slug, flags=re.ASCII)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def fallback_heading_id(depth: int) -> str:
    suffix = "".join(secrets.choice(_FALLBACK_ALPHABET) for _ in range(5))
    return f"section-{depth}-{suffix}"


def raw_heading_text(source: str) -> str:
    """Reduce the inline Markdown of a heading to the text its id is built from.

    Emphasis markers, code backticks and escapes are kept as written. Links
    contribute their text; images and inline HTML tags contribute nothing.

    Args:
        source: Inline Markdown of the heading.

    Returns:
        Heading text for slugging.
    """
    text = _IMAGE_RE.sub("", source)
    text = _LINK_RE.sub(r"\1", text)
    return _INLINE_HTML_RE.sub("", text).strip()


class HeadingIdTreeprocessor(Treeprocessor):
    """Give every heading an id slugged from its raw inline Markdown.

    Runs before inline processing, while heading text is still the source
    as written.
    """

    def run(self, root: etree.Element) -> None:
        for heading in root.iter():
            if heading.tag not in HEADING_TAGS:
                continue
            depth = int(heading.tag[1])
            heading_id = slugify_heading(raw_heading_text(heading.text or "")) or fallback_heading_id(depth)
            heading.set("id", heading_id)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Append a ``#`` link to every heading that has an id."""

    def run(self, root: etree.Element) -> None:
        headings = [element for element in root.iter() if element.tag in HEADING_TAGS and element.get("id")]
        for heading in headings:
            if len(heading):
                heading[-1].tail = (heading[-1].tail or "") + " "
            else:
                heading.text = (heading.text or "") + " "
            anchor = etree.SubElement(
                heading,
                "a",
                {"href": f"#{heading.get('id')}", "class": HEADER_ANCHOR_CLASS, "aria-label": "Link to this section"},
            )
            anchor.text = "#"


class PlaygroundBlockPreprocessor(Preprocessor):
    """Replace ``jmespath-interactive`` fences with playground widgets.

    Runs ahead of the generic fenced code handling so these blocks never
    reach it. Fences are tracked line by line, so playground syntax shown
    inside another code block stays code.
    """

    def run(self, lines: list[str]) -> list[str]:
        output: list[str] = []
        position = 0
        for block in find_fenced_blocks(lines):
            if not block.is_playground:
                continue
            output.extend(lines[position : block.start])
            placeholder = self.md.htmlStash.store(render_playground(block.body, parse_fence_options(block.options)))
            output.extend(["", placeholder, ""])
            position = block.end
        output.extend(lines[position:])
        return output


class DocumentSiteExtension(Extension):
    """Registers the heading and playground strategies with Markdown."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        md.preprocessors.register(PlaygroundBlockPreprocessor(md), "jmespath_playground", 28)
        md.treeprocessors.register(HeadingIdTreeprocessor(md), "heading_id", 25)
        md.treeprocessors.register(HeadingAnchorTreeprocessor(md), "heading_anchor", 5)


class MarkdownRenderer:
    """Converts Markdown bodies to HTML."""

    EXTENSIONS = ("fenced_code", "tables", "sane_lists")

    def __init__(self) -> None:
        self._md = markdown.Markdown(
            extensions=[*self.EXTENSIONS, DocumentSiteExtension()],
            output_format="html",
        )

    def render(self, body: str) -> str:
        """Render a Markdown body.

        Args:
            body: Markdown text without front matter.

        Returns:
            HTML string.
        """
        return self._md.reset().convert(body)
