"""Tests for build metadata."""

import os
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

from jmespath_docs_site.build_info import (
    BuildMetadata,
    current_commit_hash,
    generate_build_metadata,
    stamp_footer,
)

BUILD_DATE = datetime(2024, 3, 5, 14, 7, tzinfo=UTC)


def test_footer_text() -> None:
    """Test the footer line format."""
    metadata = BuildMetadata(build_date=BUILD_DATE, commit_hash="abcdef12", is_ci=False)

    assert metadata.footer_text() == (
        "JMESPath Community Edition Documentation Site | Built March 5, 2024 at 02:07 PM UTC"
        " | Commit abcdef12 | local development"
    )


def test_github_sha_marks_ci_build(tmp_path: Path) -> None:
    """Test GITHUB_SHA supplies the commit without calling git."""
    with (
        patch.dict(os.environ, {"GITHUB_SHA": "fedcba9876543210"}),
        patch("jmespath_docs_site.build_info.subprocess.run") as mock_run,
    ):
        metadata = generate_build_metadata(tmp_path, now=BUILD_DATE)

    assert metadata.commit_hash == "fedcba98"
    assert metadata.is_ci is True
    assert metadata.build_environment == "GitHub Actions CI/CD"
    mock_run.assert_not_called()


def test_local_build_reads_head(tmp_path: Path) -> None:
    """Test a local build takes the commit from git rev-parse."""
    completed = MagicMock(stdout="0123456789abcdef0123\n")
    environ = {key: value for key, value in os.environ.items() if key != "GITHUB_SHA"}

    with (
        patch.dict(os.environ, environ, clear=True),
        patch("jmespath_docs_site.build_info.subprocess.run", return_value=completed) as mock_run,
    ):
        metadata = generate_build_metadata(tmp_path, now=BUILD_DATE)

    assert metadata.commit_hash == "01234567"
    assert metadata.is_ci is False
    assert mock_run.call_args.args[0] == ["git", "rev-parse", "HEAD"]
    assert mock_run.call_args.kwargs["cwd"] == tmp_path


def test_commit_hash_unknown_on_failure(tmp_path: Path) -> None:
    """Test a git failure gives an unknown commit."""
    error = subprocess.CalledProcessError(128, ["git", "rev-parse", "HEAD"], stderr="not a git repository")

    with patch("jmespath_docs_site.build_info.subprocess.run", side_effect=error):
        assert current_commit_hash(tmp_path) == "unknown"


def test_stamp_footer() -> None:
    """Test only the placeholder footer is replaced."""
    metadata = BuildMetadata(build_date=BUILD_DATE, commit_hash="abcdef12", is_ci=True)
    html = "<main></main><footer>Generated Static Documentation Site</footer>"

    stamped = stamp_footer(html, metadata)

    assert stamped == f"<main></main><footer>{metadata.footer_text()}</footer>"
    assert stamp_footer("<footer>Custom</footer>", metadata) == "<footer>Custom</footer>"
