"""Git checkouts of the specification repository, one per version."""

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from jmespath_docs_site.config import VersionConfig

logger = logging.getLogger(__name__)


class SpecRepository:
    """Clones the specification repository and checks out each version's ref."""

    def __init__(self, repo_url: str, temp_dir: Path) -> None:
        """Initialise with the repository URL and checkout directory.

        Args:
            repo_url: URL of the specification repository.
            temp_dir: Directory holding one clone per version.
        """
        self.repo_url = repo_url
        self.temp_dir = temp_dir

    def clone_path(self, version: VersionConfig) -> Path:
        return self.temp_dir / version.id

    def _run_git(self, args: list[str], cwd: Path) -> None:
        logger.info("Executing in %s: git %s", cwd, " ".join(args))
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        subprocess.run(["git", *args], cwd=cwd, env=env, check=True, capture_output=True)  # noqa: S603, S607

    def clone_or_update(self, target_path: Path, ref: str) -> None:
        """Clone the repository into ``target_path``, or fetch if it is already there.

        Args:
            target_path: Clone directory.
            ref: Ref that will be checked out, for logging.
        """
        if target_path.exists():
            logger.info("Repository already exists at %s. Fetching updates...", target_path)
            self._run_git(["fetch", "--all", "--tags", "--prune"], target_path)
            return

        logger.info("Cloning %s (ref: %s) into %s...", self.repo_url, ref, target_path)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        self._run_git(["clone", "--no-checkout", self.repo_url, str(target_path)], target_path.parent)

    def checkout(self, repo_path: Path, ref: str, is_tag: bool) -> None:
        """Force-checkout ``ref`` and remove untracked files.

        Args:
            repo_path: Clone directory.
            ref: Branch or tag name.
            is_tag: Whether ``ref`` is a tag, for logging.
        """
        logger.info("Checking out %s: %s in %s", "tag" if is_tag else "branch", ref, repo_path)
        self._run_git(["checkout", "-f", ref], repo_path)
        self._run_git(["clean", "-fdx"], repo_path)

    def prepare_version(self, version: VersionConfig) -> bool:
        """Bring the clone for ``version`` to its ref.

        Git failures are logged and the version's sources are left as they are.

        Returns:
            True when the checkout succeeded.
        """
        target_path = self.clone_path(version)
        try:
            self.clone_or_update(target_path, version.ref)
            self.checkout(target_path, version.ref, version.is_tag)
        except (subprocess.CalledProcessError, OSError) as exc:
            logger.error("Git operations failed for version %s, skipping: %s", version.label, exc)
            return False
        return True

    def prepare_all(self, versions: Sequence[VersionConfig]) -> int:
        """Reset the checkout directory and prepare every version.

        Returns:
            Number of versions checked out successfully.
        """
        logger.info("Cleaning up old temporary directory: %s", self.temp_dir)
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

        prepared = 0
        for version in versions:
            logger.info("Preparing source for version: %s (ref: %s)", version.label, version.ref)
            if self.prepare_version(version):
                prepared += 1
        logger.info("Finished Git operations: %d of %d versions prepared", prepared, len(versions))
        return prepared
