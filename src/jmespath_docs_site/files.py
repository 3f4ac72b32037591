"""Filesystem helpers: source discovery, async file I/O and output setup."""

import asyncio
import fnmatch
import logging
import shutil
from collections.abc import Sequence
from pathlib import Path

from jmespath_docs_site.build_info import BuildMetadata, stamp_footer

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
SITE_ASSET_FILES = ("style.css", INDEX_PAGE, "favicon.svg", "favicon-dark.svg")


class OutputPathConflictError(RuntimeError):
    """A file exists where an output directory is expected."""


def _is_excluded(relative_path: str, exclude_globs: Sequence[str]) -> bool:
    for pattern in exclude_globs:
        if fnmatch.fnmatchcase(relative_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(relative_path, pattern[3:]):
            return True
    return False


def find_files(base_path: Path, include_globs: Sequence[str], exclude_globs: Sequence[str] = ()) -> list[str]:
    """Find files under ``base_path`` matching the include globs.

    Hidden files and directories are skipped.

    Args:
        base_path: Directory to search.
        include_globs: Glob patterns relative to ``base_path``.
        exclude_globs: Glob patterns of files to leave out.

    Returns:
        Sorted POSIX paths relative to ``base_path``.
    """
    if not include_globs:
        logger.warning("No include globs provided for %s. No files will be matched.", base_path)
        return []

    logger.info("Searching for files in %s matching: %s", base_path, ", ".join(include_globs))
    matches: set[str] = set()
    for pattern in include_globs:
        for path in base_path.glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(base_path)
            if any(part.startswith(".") for part in relative.parts):
                continue
            relative_posix = relative.as_posix()
            if not _is_excluded(relative_posix, exclude_globs):
                matches.add(relative_posix)

    files = sorted(matches)
    logger.info("Found %d files.", len(files))
    return files


async def read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def write_text(path: Path, text: str) -> None:
    await asyncio.to_thread(path.write_text, text, encoding="utf-8")


async def make_dirs(path: Path) -> None:
    await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)


def copy_static_assets(source_dir: Path, target_dir: Path, exclude_extensions: Sequence[str] = (".md",)) -> int:
    """Copy every non-Markdown file from ``source_dir`` into ``target_dir``.

    Args:
        source_dir: Directory to copy from.
        target_dir: Directory to copy into; created if needed.
        exclude_extensions: Lower-case suffixes that are not copied.

    Returns:
        Number of files copied.
    """
    copied = 0
    target_dir.mkdir(parents=True, exist_ok=True)
    for source in sorted(source_dir.rglob("*")):
        if not source.is_file() or source.suffix.lower() in exclude_extensions:
            continue
        target = target_dir / source.relative_to(source_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        copied += 1
        logger.debug("Copied: %s -> %s", source, target)
    return copied


def copy_site_assets(assets_dir: Path, output_dir: Path, metadata: BuildMetadata | None = None) -> int:
    """Copy the site-wide assets (stylesheet, index page, favicons).

    Missing assets are skipped. With ``metadata``, the footer of
    ``index.html`` is stamped with the build details.

    Args:
        assets_dir: Directory holding the site assets.
        output_dir: Site output directory.
        metadata: Build metadata for the landing page footer.

    Returns:
        Number of files copied.
    """
    copied = 0
    for name in SITE_ASSET_FILES:
        source = assets_dir / name
        target = output_dir / name
        if not source.is_file():
            continue
        if name == INDEX_PAGE and metadata is not None:
            target.write_text(stamp_footer(source.read_text(encoding="utf-8"), metadata), encoding="utf-8")
            logger.info("Processed %s to %s (with build metadata)", source, target)
        else:
            shutil.copy2(source, target)
            logger.info("Copied %s to %s", source, target)
        copied += 1
    return copied


def setup_output_directory(output_dir: Path) -> None:
    """Create ``output_dir`` or empty it if it already exists.

    Args:
        output_dir: Site output directory.

    Raises:
        OutputPathConflictError: If ``output_dir`` exists and is not a directory.
    """
    if output_dir.exists() and not output_dir.is_dir():
        msg = f"Output path conflicts with an existing file: {output_dir}"
        raise OutputPathConflictError(msg)

    if not output_dir.exists():
        logger.info("Creating output directory: %s", output_dir)
        output_dir.mkdir(parents=True)
        return

    contents = list(output_dir.iterdir())
    logger.info("Removing %d items from %s", len(contents), output_dir)
    for item in contents:
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()
