"""Tests for filesystem helpers."""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pytest

from jmespath_docs_site.build_info import BuildMetadata
from jmespath_docs_site.files import (
    OutputPathConflictError,
    copy_site_assets,
    copy_static_assets,
    find_files,
    make_dirs,
    read_text,
    setup_output_directory,
    write_text,
)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Create a source tree with Markdown and other files.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the source tree.
    """
    root = tmp_path / "source"
    (root / "guide").mkdir(parents=True)
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / ".github").mkdir()
    (root / "index.md").write_text("# Index\n")
    (root / "guide" / "slicing.md").write_text("# Slicing\n")
    (root / "guide" / "diagram.png").write_bytes(b"\x89PNG")
    (root / "node_modules" / "pkg" / "readme.md").write_text("# Pkg\n")
    (root / ".github" / "notes.md").write_text("# Hidden\n")
    return root


def test_find_files_sorted_and_relative(source_dir: Path) -> None:
    """Test matching files are returned sorted with POSIX separators."""
    files = find_files(source_dir, ["**/*.md"], ["node_modules/**"])

    assert files == ["guide/slicing.md", "index.md"]


def test_find_files_root_only_pattern(source_dir: Path) -> None:
    """Test a non-recursive pattern only matches top-level files."""
    assert find_files(source_dir, ["*.md"]) == ["index.md"]


def test_find_files_double_star_exclude(source_dir: Path) -> None:
    """Test a leading **/ exclude also matches top-level files."""
    files = find_files(source_dir, ["**/*.md"], ["**/index.md", "**/node_modules/**"])

    assert files == ["guide/slicing.md"]


def test_find_files_empty_include_globs(source_dir: Path) -> None:
    """Test no include globs matches nothing."""
    assert find_files(source_dir, []) == []


def test_async_file_helpers(tmp_path: Path) -> None:
    """Test async directory creation, write and read."""
    target = tmp_path / "a" / "b" / "page.html"

    async def roundtrip() -> str:
        await make_dirs(target.parent)
        await write_text(target, "<p>héllo</p>")
        return await read_text(target)

    assert asyncio.run(roundtrip()) == "<p>héllo</p>"


def test_copy_static_assets_skips_markdown(source_dir: Path, tmp_path: Path) -> None:
    """Test non-Markdown files are copied with their structure."""
    target = tmp_path / "out"

    copied = copy_static_assets(source_dir / "guide", target)

    assert copied == 1
    assert (target / "diagram.png").read_bytes() == b"\x89PNG"
    assert not (target / "slicing.md").exists()


def test_copy_site_assets_skips_missing(tmp_path: Path) -> None:
    """Test only existing site assets are copied."""
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "style.css").write_text("body {}")
    (assets / "other.txt").write_text("ignored")
    output = tmp_path / "out"
    output.mkdir()

    assert copy_site_assets(assets, output) == 1
    assert (output / "style.css").read_text() == "body {}"
    assert not (output / "other.txt").exists()


def test_copy_site_assets_stamps_index_page(tmp_path: Path) -> None:
    """Test the index page footer carries the build metadata."""
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "index.html").write_text("<footer>Generated Static Documentation Site</footer>")
    (assets / "favicon.svg").write_text("<svg/>")
    output = tmp_path / "out"
    output.mkdir()
    metadata = BuildMetadata(build_date=datetime(2024, 1, 2, 3, 4, tzinfo=UTC), commit_hash="abcdef12", is_ci=False)

    assert copy_site_assets(assets, output, metadata) == 2
    assert (output / "index.html").read_text() == f"<footer>{metadata.footer_text()}</footer>"
    assert (output / "favicon.svg").read_text() == "<svg/>"


def test_setup_output_directory_creates(tmp_path: Path) -> None:
    """Test a missing output directory is created."""
    output = tmp_path / "site"

    setup_output_directory(output)

    assert output.is_dir()


def test_setup_output_directory_empties(tmp_path: Path) -> None:
    """Test an existing output directory is emptied."""
    output = tmp_path / "site"
    (output / "v1").mkdir(parents=True)
    (output / "v1" / "index.html").write_text("old")
    (output / "versions.json").write_text("{}")

    setup_output_directory(output)

    assert output.is_dir()
    assert list(output.iterdir()) == []


def test_setup_output_directory_conflict(tmp_path: Path) -> None:
    """Test a file in place of the output directory is fatal."""
    output = tmp_path / "site"
    output.write_text("not a directory")

    with pytest.raises(OutputPathConflictError, match="conflicts"):
        setup_output_directory(output)
