"""Builds documentation versions and the site-wide version index."""

import asyncio
import json
import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from jmespath_docs_site.build_info import generate_build_metadata
from jmespath_docs_site.config import SiteConfig, VersionConfig
from jmespath_docs_site.files import (
    copy_site_assets,
    copy_static_assets,
    find_files,
    make_dirs,
    read_text,
    setup_output_directory,
    write_text,
)
from jmespath_docs_site.models import DocumentRecords, FileResult, NavigationPage, VersionManifest
from jmespath_docs_site.navigation import determine_default_file, sort_nav_pages
from jmespath_docs_site.parser import DocumentParser
from jmespath_docs_site.records import build_records, output_file_name
from jmespath_docs_site.renderer import MarkdownRenderer
from jmespath_docs_site.search_index import SearchIndexBuilder

logger = logging.getLogger(__name__)

SEARCH_INDEX_FILE = "search_index.json"
SEARCH_MAP_FILE = "search_map.json"
VERSIONS_FILE = "versions.json"


class SourceRootMissingError(FileNotFoundError):
    """A version's specification sources are missing."""


@dataclass(frozen=True)
class SourceRoot:
    """A directory of Markdown sources feeding one version."""

    kind: str
    path: Path
    include_globs: list[str]
    exclude_globs: list[str]


class DocumentProcessor:
    """Turns one Markdown source into HTML plus its search and navigation records."""

    def __init__(self, parser: DocumentParser | None = None, renderer: MarkdownRenderer | None = None) -> None:
        self.parser = parser or DocumentParser()
        self.renderer = renderer or MarkdownRenderer()

    def process(self, raw_text: str, relative_path: str, doc_id: int) -> tuple[str, DocumentRecords]:
        """Process a document's text.

        Args:
            raw_text: Full source text including front matter.
            relative_path: Path of the file relative to its source root.
            doc_id: Search id reserved for the document.

        Returns:
            Tuple of rendered HTML and derived records.
        """
        parsed = self.parser.parse_source(raw_text, relative_path)
        html = self.renderer.render(parsed.body)
        content = self.parser.analyze_html(html, parsed.fallback_title, parsed.body, relative_path)
        records = build_records(parsed.front_matter, content, doc_id, relative_path)
        return html, records


class VersionBuilder:
    """Builds the HTML pages, search data and manifest of one version."""

    def __init__(
        self,
        site: SiteConfig,
        version: VersionConfig,
        processor: DocumentProcessor | None = None,
    ) -> None:
        """Initialise for one configured version.

        Args:
            site: Site configuration.
            version: Version to build.
            processor: Document processor, created if not given.
        """
        self.site = site
        self.version = version
        self.processor = processor or DocumentProcessor()
        self.output_path = site.output_dir / version.id

    def source_roots(self) -> list[SourceRoot]:
        """Resolve the specification root and the optional local-docs root.

        Raises:
            SourceRootMissingError: If the specification sources are missing.
        """
        spec_path = self.site.temp_dir / self.version.id / self.version.source_path
        if not spec_path.is_dir():
            msg = f"Spec source path does not exist for version {self.version.label}: {spec_path}"
            raise SourceRootMissingError(msg)

        roots = [SourceRoot("Spec", spec_path, self.version.include_globs, self.version.exclude_globs)]
        local_path = self.version.local_docs_path
        if local_path is not None:
            if local_path.is_dir():
                roots.append(
                    SourceRoot(
                        "Local",
                        local_path,
                        self.version.local_include_globs,
                        self.version.local_exclude_globs,
                    )
                )
            else:
                logger.warning(
                    "Local source path does not exist for version %s: %s. Skipping local files.",
                    self.version.label,
                    local_path,
                )
        return roots

    async def build(self) -> VersionManifest:
        """Build the version and return its manifest."""
        logger.info("Processing version: %s (ref: %s)", self.version.label, self.version.ref)
        roots = self.source_roots()

        shutil.rmtree(self.output_path, ignore_errors=True)
        await make_dirs(self.output_path)

        nav_pages: list[NavigationPage] = []
        with SearchIndexBuilder() as search_index:
            for root in roots:
                files = find_files(root.path, root.include_globs, root.exclude_globs)
                nav_pages.extend(await self.process_files(root, files, search_index))
                if root.kind == "Local":
                    logger.info("Copying static assets from local docs path: %s", root.path)
                    copy_static_assets(root.path, self.output_path)

            pages = sort_nav_pages(nav_pages)
            default_file = determine_default_file(pages)
            await self.export_search_data(search_index)

        logger.info("Finished version %s: %d navigation pages", self.version.label, len(pages))
        return VersionManifest(id=self.version.id, label=self.version.label, pages=pages, default_file=default_file)

    async def process_files(
        self,
        root: SourceRoot,
        files: Sequence[str],
        search_index: SearchIndexBuilder,
    ) -> list[NavigationPage]:
        """Process one root's files concurrently and index the results.

        Ids are reserved before dispatch, so each file's id depends only on
        its position in ``files``. Results are indexed after the whole batch
        has settled.

        Returns:
            Navigation pages of the non-obsoleted documents.
        """
        if not files:
            logger.info("No %s files found to process.", root.kind)
            return []

        logger.info("Processing %d %s files in parallel...", len(files), root.kind)
        doc_ids = search_index.reserve(len(files))
        results = await asyncio.gather(
            *(self.process_file(root, relative_path, doc_id) for relative_path, doc_id in zip(files, doc_ids)),
            return_exceptions=True,
        )

        pages = []
        succeeded = 0
        for result in results:
            if isinstance(result, BaseException) or not result.succeeded:
                continue
            records = result.records
            search_index.add(records.search_entry)
            search_index.set_doc_map_entry(records.doc_map_entry)
            if records.nav_page is not None:
                pages.append(records.nav_page)
            succeeded += 1

        logger.info("Finished processing files. Successful: %d, Failed: %d.", succeeded, len(files) - succeeded)
        return pages

    async def process_file(self, root: SourceRoot, relative_path: str, doc_id: int) -> FileResult:
        """Read, convert and write one file.

        Any failure is logged and returned in the result instead of raised.
        """
        output_file = self.output_path / output_file_name(relative_path)
        logger.debug("Processing %s file: %s (doc id: %d)", root.kind, relative_path, doc_id)
        try:
            await make_dirs(output_file.parent)
            raw_text = await read_text(root.path / relative_path)
            html, records = self.processor.process(raw_text, relative_path, doc_id)
            await write_text(output_file, html)
        except Exception as exc:
            logger.error("Failed processing file %s: %s", relative_path, exc)
            return FileResult(relative_path=relative_path, doc_id=doc_id, error=exc)
        return FileResult(relative_path=relative_path, doc_id=doc_id, records=records)

    async def export_search_data(self, search_index: SearchIndexBuilder) -> None:
        """Write the exported index and the document map for this version."""
        logger.info("Exporting search index and map...")
        exports = search_index.export()
        if exports:
            await write_text(self.output_path / SEARCH_INDEX_FILE, json.dumps(exports, separators=(",", ":")))
            logger.info("Search index saved to %s", SEARCH_INDEX_FILE)
        else:
            logger.warning("Search index export resulted in empty data. No index file written.")
        await write_text(self.output_path / SEARCH_MAP_FILE, json.dumps(search_index.export_doc_map(), indent=2))
        logger.info("Search map saved to %s", SEARCH_MAP_FILE)


class SiteBuilder:
    """Builds every configured version and writes the version index."""

    def __init__(self, config: SiteConfig, processor: DocumentProcessor | None = None) -> None:
        self.config = config
        self.processor = processor or DocumentProcessor()

    async def build(self) -> list[VersionManifest]:
        """Run the full build.

        Returns:
            Manifests of the versions that were built.

        Raises:
            OutputPathConflictError: If the output path is occupied by a file.
        """
        logger.info("Starting documentation build...")
        setup_output_directory(self.config.output_dir)
        manifests = await self.build_versions()
        if self.config.assets_dir is not None:
            metadata = generate_build_metadata(self.config.root_dir)
            logger.info("Build metadata: %s, commit %s", metadata.build_environment, metadata.commit_hash)
            copy_site_assets(self.config.assets_dir, self.config.output_dir, metadata)
        self.write_versions_file(manifests)
        logger.info("Documentation build finished. Output available in: %s", self.config.output_dir)
        return manifests

    async def build_versions(self) -> list[VersionManifest]:
        """Build each version in turn; a failing version is logged and skipped."""
        manifests = []
        for version in self.config.versions:
            try:
                manifests.append(await VersionBuilder(self.config, version, self.processor).build())
            except Exception:
                logger.exception("Fatal error processing version %s. Skipping this version.", version.label)
        return manifests

    def write_versions_file(self, manifests: Sequence[VersionManifest]) -> Path:
        """Write ``versions.json`` listing the built versions.

        Returns:
            Path of the written file.
        """
        path = self.config.output_dir / VERSIONS_FILE
        logger.info("Creating %s...", path)
        data = {
            "versions": [manifest.to_dict() for manifest in manifests],
            "defaultVersionId": self.config.default_version_id,
        }
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path
