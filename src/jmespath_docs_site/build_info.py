"""Build metadata stamped into the site's landing page footer."""

import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN_COMMIT = "unknown"
FOOTER_PLACEHOLDER = "<footer>Generated Static Documentation Site</footer>"
SITE_NAME = "JMESPath Community Edition Documentation Site"


@dataclass(frozen=True)
class BuildMetadata:
    """When, from which commit and where the site was built."""

    build_date: datetime
    commit_hash: str
    is_ci: bool

    @property
    def build_environment(self) -> str:
        return "GitHub Actions CI/CD" if self.is_ci else "local development"

    def footer_text(self) -> str:
        """Format the footer line, with the build date in UTC."""
        date = self.build_date.astimezone(UTC)
        built = f"{date:%B} {date.day}, {date:%Y} at {date:%I}:{date:%M} {date:%p}"
        return f"{SITE_NAME} | Built {built} UTC | Commit {self.commit_hash} | {self.build_environment}"


def current_commit_hash(cwd: Path) -> str:
    """Return the abbreviated ``HEAD`` commit of the repository at ``cwd``.

    Args:
        cwd: Directory inside the site's repository.

    Returns:
        First 8 characters of the commit hash, or ``"unknown"``.
    """
    try:
        completed = subprocess.run(  # noqa: S603, S607
            ["git", "rev-parse", "HEAD"],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        logger.warning("Could not determine git commit hash: %s", exc)
        return UNKNOWN_COMMIT
    return completed.stdout.strip()[:8] or UNKNOWN_COMMIT


def generate_build_metadata(root_dir: Path, now: datetime | None = None) -> BuildMetadata:
    """Collect the metadata of the current build.

    ``GITHUB_SHA`` marks a CI build and supplies the commit; otherwise the
    commit is read from the repository at ``root_dir``.

    Args:
        root_dir: Directory of the site configuration.
        now: Build time, the current time if not given.

    Returns:
        BuildMetadata instance.
    """
    build_date = now or datetime.now(UTC)
    github_sha = os.environ.get("GITHUB_SHA")
    if github_sha:
        return BuildMetadata(build_date=build_date, commit_hash=github_sha[:8], is_ci=True)
    return BuildMetadata(build_date=build_date, commit_hash=current_commit_hash(root_dir), is_ci=False)


def stamp_footer(html: str, metadata: BuildMetadata) -> str:
    """Replace the placeholder footer of a page with the build metadata."""
    return html.replace(FOOTER_PLACEHOLDER, f"<footer>{metadata.footer_text()}</footer>", 1)
