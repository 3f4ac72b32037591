"""Derivation of search and navigation records for a processed document."""

import logging
import re
from pathlib import PurePosixPath

from jmespath_docs_site.models import (
    AnalyzedContent,
    DocumentRecords,
    FrontMatter,
    JepMetadata,
    NavigationPage,
    SearchDocMapEntry,
    SearchIndexEntry,
)

logger = logging.getLogger(__name__)

OBSOLETE_STATUSES = frozenset({"obsoleted", "superseded"})
JEP_NUMBER_RE = re.compile(r"jep-(\d+[a-z]?)", re.IGNORECASE)


def is_obsoleted(front_matter: FrontMatter) -> bool:
    """Return True when front matter marks the document as obsoleted.

    Args:
        front_matter: Document front matter.

    Returns:
        Whether ``obsoleted_by`` is set or ``status`` names an obsolete state.
    """
    if front_matter.obsoleted_by:
        return True
    return (front_matter.status or "").lower() in OBSOLETE_STATUSES


def normalise_path(relative_path: str) -> str:
    return relative_path.replace("\\", "/")


def output_file_name(relative_path: str) -> str:
    """Map a source path to its output path (``.md`` becomes ``.html``)."""
    return re.sub(r"\.md$", ".html", normalise_path(relative_path))


def default_page_id(relative_path: str) -> str:
    return re.sub(r"\.md$", "", normalise_path(relative_path))


def extract_jep_metadata(front_matter: FrontMatter, relative_path: str) -> JepMetadata | None:
    """Collect proposal metadata for JEP documents.

    A document is a JEP when its file name starts with ``jep-`` or its front
    matter carries a ``jep`` key.

    Args:
        front_matter: Document front matter.
        relative_path: Path of the file relative to its source root.

    Returns:
        JepMetadata, or None for other documents.
    """
    file_name = PurePosixPath(normalise_path(relative_path)).name
    if not file_name.lower().startswith("jep-") and front_matter.jep is None:
        return None

    jep_number = front_matter.jep
    if not jep_number:
        match = JEP_NUMBER_RE.search(file_name)
        jep_number = match.group(1) if match else None

    return JepMetadata(
        jep_number=str(jep_number).zfill(3) if jep_number else None,
        status=front_matter.status or "draft",
        author=front_matter.author,
        created=front_matter.created,
        semver=front_matter.semver,
        obsoleted_by=front_matter.obsoleted_by,
    )


def build_records(
    front_matter: FrontMatter,
    content: AnalyzedContent,
    doc_id: int,
    relative_path: str,
) -> DocumentRecords:
    """Combine front matter and analysed content into the document's records.

    Obsoleted documents stay searchable but get no navigation entry.

    Args:
        front_matter: Document front matter.
        content: Result of analysing the rendered HTML.
        doc_id: Search id reserved for this document.
        relative_path: Path of the file relative to its source root.

    Returns:
        DocumentRecords instance.
    """
    title = front_matter.title or content.title
    obsoleted = is_obsoleted(front_matter)
    href = output_file_name(relative_path)

    search_entry = SearchIndexEntry(
        id=doc_id,
        title=title,
        content=content.text_content,
        sections_text=" ".join(section.text for section in content.sections),
        is_obsoleted=obsoleted,
    )
    doc_map_entry = SearchDocMapEntry(
        doc_id=doc_id,
        title=title,
        href=href,
        sections=list(content.sections),
        is_obsoleted=obsoleted,
    )

    nav_page = None
    if obsoleted:
        logger.info("Skipping navigation for obsoleted document: %s", relative_path)
    else:
        nav_page = NavigationPage(
            id=front_matter.id or default_page_id(relative_path),
            file=href,
            title=front_matter.nav_label or title,
            nav_order=front_matter.nav_order,
            parent=front_matter.parent,
            jep_metadata=extract_jep_metadata(front_matter, relative_path),
        )

    return DocumentRecords(search_entry=search_entry, doc_map_entry=doc_map_entry, nav_page=nav_page)
