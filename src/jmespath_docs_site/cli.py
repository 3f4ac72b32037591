"""Command line interface for building the documentation site.

Usage:
    jmespath-docs-site build --config config.json
    jmespath-docs-site build --build-only
    jmespath-docs-site validate docs/
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from jmespath_docs_site.builder import SiteBuilder
from jmespath_docs_site.config import ConfigError, SiteConfig
from jmespath_docs_site.parser import DocumentParser
from jmespath_docs_site.playground import check_playground_block, extract_playground_blocks
from jmespath_docs_site.repository import SpecRepository

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """Build the multi-version JMESPath documentation site."""


@main.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default="config.json",
    show_default=True,
    help="Site configuration file (JSON or YAML).",
)
@click.option("--git-only", is_flag=True, help="Only clone/update and check out the sources.")
@click.option(
    "--build-only",
    "--skip-git",
    "build_only",
    is_flag=True,
    help="Only build; sources must already be in the temporary directory.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def build(config_path: Path, git_only: bool, build_only: bool, verbose: bool) -> None:
    """Fetch the specification sources and build the site."""
    _configure_logging(verbose)
    if git_only and build_only:
        raise click.UsageError("Cannot use --git-only and --build-only together.")

    try:
        config = SiteConfig.load(config_path)
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    if not build_only:
        if not config.spec_repo_url:
            logger.error("Configuration has no 'specRepoUrl'; use --build-only to skip Git operations.")
            sys.exit(1)
        SpecRepository(config.spec_repo_url, config.temp_dir).prepare_all(config.versions)
    elif not config.temp_dir.exists():
        logger.error("--build-only used, but temp dir missing: %s", config.temp_dir)
        sys.exit(1)

    if git_only:
        logger.info("Skipping documentation build")
        return

    try:
        manifests = asyncio.run(SiteBuilder(config).build())
    except Exception:
        logger.exception("Process failed")
        sys.exit(1)
    click.echo(f"Built {len(manifests)} of {len(config.versions)} versions into {config.output_dir}")


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
def validate(paths: tuple[Path, ...]) -> None:
    """Check the playground blocks in Markdown files.

    Reports blocks without a ---JMESPATH--- separator or with unparseable
    JSON. Queries are not executed.
    """
    parser = DocumentParser()
    files: list[Path] = []
    for path in paths:
        files.extend(sorted(path.rglob("*.md")) if path.is_dir() else [path])

    total_blocks = 0
    failed_blocks = 0
    for file_path in files:
        parsed = parser.parse_source(file_path.read_text(encoding="utf-8"), file_path.name)
        for block in extract_playground_blocks(parsed.body, str(file_path)):
            total_blocks += 1
            errors, warnings = check_playground_block(block)
            location = f"{block.file_path}:{block.line_number} [{block.title}]"
            for warning in warnings:
                click.echo(f"WARNING {location}: {warning}")
            for error in errors:
                click.echo(f"ERROR {location}: {error}", err=True)
            if errors:
                failed_blocks += 1

    click.echo(f"Checked {total_blocks} playground blocks in {len(files)} files, {failed_blocks} with errors")
    if failed_blocks:
        sys.exit(1)


if __name__ == "__main__":
    main()
