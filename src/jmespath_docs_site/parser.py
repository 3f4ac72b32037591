"""Front matter extraction and rendered-HTML analysis for Markdown documents."""

import copy
import logging
import re
from pathlib import PurePosixPath

import yaml
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment

from jmespath_docs_site.models import AnalyzedContent, FrontMatter, ParsedMarkdown, Section
from jmespath_docs_site.playground import PLAYGROUND_CLASSES
from jmespath_docs_site.renderer import HEADER_ANCHOR_CLASS

logger = logging.getLogger(__name__)

SECTION_TAGS = ["h2", "h3", "h4", "h5", "h6"]


class DocumentParser:
    """Splits Markdown sources and analyses the HTML rendered from them."""

    FRONT_MATTER_RE = re.compile(
        r"\A---[ \t]*(?:yaml)?[ \t]*\r?\n(?P<meta>.*?)^---[ \t]*(?:\r?\n|\Z)",
        re.DOTALL | re.MULTILINE,
    )

    def parse_source(self, raw_text: str, relative_path: str) -> ParsedMarkdown:
        """Split a source file into front matter and Markdown body.

        A front matter block that cannot be parsed is logged and the whole
        file is kept as the body with empty metadata.

        Args:
            raw_text: Full text of the source file.
            relative_path: Path of the file relative to its source root.

        Returns:
            ParsedMarkdown instance.
        """
        front_matter = FrontMatter()
        body = raw_text

        match = self.FRONT_MATTER_RE.match(raw_text)
        if match:
            try:
                data = yaml.safe_load(match.group("meta")) or {}
                if not isinstance(data, dict):
                    msg = f"expected a mapping, got {type(data).__name__}"
                    raise ValueError(msg)
                front_matter = FrontMatter.from_mapping(data)
                body = raw_text[match.end() :]
            except (yaml.YAMLError, ValueError, TypeError) as exc:
                logger.warning("Could not parse front matter for %s: %s", relative_path, exc)

        return ParsedMarkdown(
            front_matter=front_matter,
            body=body,
            fallback_title=self.fallback_title(relative_path),
        )

    @staticmethod
    def fallback_title(relative_path: str) -> str:
        """Derive a title from the file name.

        Args:
            relative_path: Path of the file relative to its source root.

        Returns:
            File stem with dashes and underscores turned into spaces and each
            word capitalised.
        """
        name = PurePosixPath(relative_path.replace("\\", "/")).name
        if name.endswith(".md"):
            name = name[: -len(".md")]
        name = re.sub(r"[-_]", " ", name)
        return re.sub(r"\b\w", lambda m: m.group(0).upper(), name, flags=re.ASCII)

    def analyze_html(
        self,
        html: str,
        fallback_title: str,
        markdown_body: str,
        identifier: str,
    ) -> AnalyzedContent:
        """Recover title, section outline and indexable text from rendered HTML.

        Args:
            html: Rendered HTML body.
            fallback_title: Title used when the page has no usable ``h1``.
            markdown_body: Markdown source, used as text content when the
                HTML cannot be parsed.
            identifier: Name of the document for log messages.

        Returns:
            AnalyzedContent instance.
        """
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:
            logger.warning("Using fallback data for %s, HTML could not be parsed: %s", identifier, exc)
            return AnalyzedContent(title=fallback_title, sections=[], text_content=markdown_body)

        return AnalyzedContent(
            title=self._extract_title(soup, fallback_title),
            sections=self._extract_sections(soup),
            text_content=self._extract_text_content(soup, identifier),
        )

    def _extract_title(self, soup: BeautifulSoup, fallback_title: str) -> str:
        h1 = soup.find("h1")
        if h1 is None:
            return fallback_title
        return node_text(h1).strip() or fallback_title

    def _extract_sections(self, soup: BeautifulSoup) -> list[Section]:
        sections = []
        for heading in soup.find_all(SECTION_TAGS):
            heading_id = heading.get("id")
            text = node_text(heading).strip()
            if heading_id and text:
                sections.append(Section(id=heading_id, text=text, level=int(heading.name[1])))
        return sections

    def _extract_text_content(self, soup: BeautifulSoup, identifier: str) -> str:
        """Extract plain text with playground widgets and anchor links removed.

        Works on a copy so the caller's tree is left untouched.
        """
        working = copy.copy(soup)
        playgrounds = working.select(f".{PLAYGROUND_CLASSES['container']}")
        for element in playgrounds:
            element.decompose()
        for anchor in working.select(f"a.{HEADER_ANCHOR_CLASS}"):
            anchor.decompose()

        if playgrounds:
            logger.debug("Removed %d playground(s) before text extraction for: %s", len(playgrounds), identifier)

        return working.get_text("\n", strip=True) or working.get_text()


def node_text(node: Tag | NavigableString) -> str:
    """Collect the text of a node, skipping heading anchor links and comments.

    Args:
        node: Element or string node.

    Returns:
        Concatenated text content.
    """
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if node.name == "a" and HEADER_ANCHOR_CLASS in (node.get("class") or []):
        return ""
    return "".join(node_text(child) for child in node.children)
