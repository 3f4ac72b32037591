"""Tests for the command line interface."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from jmespath_docs_site.cli import main

VALID_PAGE = """# Projections

```jmespath-interactive expanded List projection
{"people": [{"name": "a"}, {"name": "b"}]}
---JMESPATH---
people[*].name
```
"""

BROKEN_PAGE = """---
title: Broken
---
# Broken

```jmespath-interactive
{"missing": "separator"}
```

```jmespath-interactive Bad JSON
{not json
---JMESPATH---
foo
```
"""


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[MagicMock]:
    """Keep the CLI from reconfiguring the root logger during tests.

    Yields:
        The patched logging setup function.
    """
    with patch("jmespath_docs_site.cli._configure_logging") as configure:
        yield configure


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a one-version configuration file.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the configuration file.
    """
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "specRepoUrl": "https://example.com/spec.git",
                "tempDir": "tmp",
                "outputDir": "site",
                "versions": [{"id": "v1", "label": "Version 1", "ref": "main", "includeGlobs": ["*.md"]}],
            }
        )
    )
    return path


def test_validate_passes(tmp_path: Path) -> None:
    """Test valid playground blocks pass validation."""
    page = tmp_path / "page.md"
    page.write_text(VALID_PAGE)

    result = CliRunner().invoke(main, ["validate", str(tmp_path)])

    assert result.exit_code == 0
    assert "Checked 1 playground blocks in 1 files, 0 with errors" in result.output


def test_validate_reports_errors(tmp_path: Path) -> None:
    """Test malformed blocks are reported and fail the command."""
    page = tmp_path / "broken.md"
    page.write_text(BROKEN_PAGE)

    result = CliRunner().invoke(main, ["validate", str(page)])

    assert result.exit_code == 1
    assert "[Block 1]" in result.output
    assert "---JMESPATH---" in result.output
    assert "[Bad JSON]: Invalid JSON" in result.output
    assert "2 with errors" in result.output


def test_build_rejects_conflicting_flags(config_path: Path) -> None:
    """Test --git-only and --build-only cannot be combined."""
    result = CliRunner().invoke(main, ["build", "--config", str(config_path), "--git-only", "--build-only"])

    assert result.exit_code == 2
    assert "together" in result.output


def test_build_only_requires_temp_dir(config_path: Path) -> None:
    """Test --build-only fails without checked-out sources."""
    result = CliRunner().invoke(main, ["build", "--config", str(config_path), "--skip-git"])

    assert result.exit_code == 1


def test_build_invalid_config(tmp_path: Path) -> None:
    """Test an invalid configuration exits with an error."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"versions": []}))

    result = CliRunner().invoke(main, ["build", "--config", str(path), "--build-only"])

    assert result.exit_code == 1


def test_build_only(config_path: Path) -> None:
    """Test building from existing sources."""
    spec_dir = config_path.parent / "tmp" / "v1"
    spec_dir.mkdir(parents=True)
    (spec_dir / "index.md").write_text(VALID_PAGE)

    result = CliRunner().invoke(main, ["build", "--config", str(config_path), "--build-only"])

    assert result.exit_code == 0, result.output
    assert "Built 1 of 1 versions" in result.output
    site_dir = config_path.parent / "site"
    assert 'class="jmespath-playground ' in (site_dir / "v1" / "index.html").read_text()
    assert json.loads((site_dir / "versions.json").read_text())["defaultVersionId"] == "v1"


def test_git_only_skips_build(config_path: Path) -> None:
    """Test --git-only prepares the sources without building."""
    with patch("jmespath_docs_site.cli.SpecRepository") as repository:
        result = CliRunner().invoke(main, ["build", "--config", str(config_path), "--git-only"])

    assert result.exit_code == 0
    repository.assert_called_once_with("https://example.com/spec.git", config_path.parent.resolve() / "tmp")
    repository.return_value.prepare_all.assert_called_once()
    assert not (config_path.parent / "site").exists()


def test_git_requires_repo_url(tmp_path: Path) -> None:
    """Test Git operations need a repository URL."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"versions": [{"id": "v1"}]}))

    result = CliRunner().invoke(main, ["build", "--config", str(path)])

    assert result.exit_code == 1
