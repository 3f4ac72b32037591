"""Site configuration."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """The site configuration is invalid."""


def _glob_list(data: dict[str, Any], key: str, default: list[str], owner: str) -> list[str]:
    value = data.get(key, default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        msg = f"{owner}: '{key}' must be a list of glob patterns"
        raise ConfigError(msg)
    return list(value)


@dataclass
class VersionConfig:
    """One documentation version built from a Git ref.

    Attributes:
        id: Output sub-directory and identifier of the version.
        label: Human readable name.
        ref: Git branch or tag to check out.
        is_tag: Whether ``ref`` is a tag.
        source_path: Sub-directory of the clone holding the sources.
        include_globs: Spec files to process.
        exclude_globs: Spec files to skip.
        local_docs_path: Optional directory of local documentation.
        local_include_globs: Local files to process.
        local_exclude_globs: Local files to skip.
    """

    id: str
    label: str
    ref: str
    is_tag: bool = False
    source_path: str = ""
    include_globs: list[str] = field(default_factory=list)
    exclude_globs: list[str] = field(default_factory=list)
    local_docs_path: Path | None = None
    local_include_globs: list[str] = field(default_factory=lambda: ["**/*.md"])
    local_exclude_globs: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path) -> "VersionConfig":
        """Build a version from its configuration mapping.

        Args:
            data: Version mapping using the camelCase keys of the config file.
            base_dir: Directory relative paths resolve against.

        Returns:
            VersionConfig instance.

        Raises:
            ConfigError: If a required key is missing or a field has the wrong type.
        """
        if not isinstance(data, dict) or not data.get("id"):
            msg = f"Every version needs an 'id': {data!r}"
            raise ConfigError(msg)
        version_id = str(data["id"])
        owner = f"version {version_id}"
        local_docs = data.get("localDocsPath")
        return cls(
            id=version_id,
            label=str(data.get("label", version_id)),
            ref=str(data.get("ref", version_id)),
            is_tag=bool(data.get("isTag", False)),
            source_path=str(data.get("sourcePath") or ""),
            include_globs=_glob_list(data, "includeGlobs", [], owner),
            exclude_globs=_glob_list(data, "excludeGlobs", [], owner),
            local_docs_path=(base_dir / local_docs).resolve() if local_docs else None,
            local_include_globs=_glob_list(data, "localIncludeGlobs", ["**/*.md"], owner),
            local_exclude_globs=_glob_list(data, "localExcludeGlobs", [], owner),
        )


@dataclass
class SiteConfig:
    """Configuration of a whole site build."""

    versions: list[VersionConfig]
    spec_repo_url: str | None = None
    temp_dir: Path = field(default_factory=lambda: Path(".tmp_repos"))
    output_dir: Path = field(default_factory=lambda: Path("docs"))
    assets_dir: Path | None = None
    default_version_id: str | None = None
    root_dir: Path = field(default_factory=Path.cwd)

    def __post_init__(self) -> None:
        if self.default_version_id is None and self.versions:
            self.default_version_id = self.versions[0].id

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path) -> "SiteConfig":
        """Build the site configuration from a mapping.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        versions_data = data.get("versions")
        if not isinstance(versions_data, list) or not versions_data:
            msg = "Configuration needs a non-empty 'versions' list"
            raise ConfigError(msg)

        versions = [VersionConfig.from_dict(item, base_dir) for item in versions_data]
        ids = [version.id for version in versions]
        duplicates = sorted({version_id for version_id in ids if ids.count(version_id) > 1})
        if duplicates:
            msg = f"Duplicate version ids: {', '.join(duplicates)}"
            raise ConfigError(msg)

        assets_dir = data.get("assetsDir")
        return cls(
            versions=versions,
            spec_repo_url=data.get("specRepoUrl"),
            temp_dir=(base_dir / data.get("tempDir", ".tmp_repos")).resolve(),
            output_dir=(base_dir / data.get("outputDir", "docs")).resolve(),
            assets_dir=(base_dir / assets_dir).resolve() if assets_dir else None,
            default_version_id=data.get("defaultVersionId"),
            root_dir=base_dir.resolve(),
        )

    @classmethod
    def load(cls, config_path: Path) -> "SiteConfig":
        """Load configuration from a JSON or YAML file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            SiteConfig instance.

        Raises:
            ConfigError: If the file cannot be parsed or is invalid.
        """
        text = config_path.read_text(encoding="utf-8")
        try:
            if config_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (yaml.YAMLError, ValueError) as exc:
            msg = f"Could not parse configuration {config_path}: {exc}"
            raise ConfigError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Configuration {config_path} must be a mapping"
            raise ConfigError(msg)
        return cls.from_dict(data, config_path.parent)
