"""Data models for the JMESPath documentation site."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

RECOGNISED_FRONT_MATTER_KEYS = (
    "title",
    "nav_label",
    "nav_order",
    "id",
    "parent",
    "obsoleted_by",
    "status",
    "jep",
    "author",
    "created",
    "semver",
)


@dataclass(frozen=True)
class FrontMatter:
    """Metadata block of a Markdown document.

    Recognised keys are typed fields; anything else lands in ``extra``.
    """

    title: str | None = None
    nav_label: str | None = None
    nav_order: Any = None
    id: str | None = None
    parent: str | None = None
    obsoleted_by: Any = None
    status: str | None = None
    jep: Any = None
    author: Any = None
    created: Any = None
    semver: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "FrontMatter":
        """Build front matter from a parsed metadata mapping.

        Args:
            data: Mapping produced by the YAML loader.

        Returns:
            FrontMatter instance.
        """
        known = {key: data[key] for key in RECOGNISED_FRONT_MATTER_KEYS if key in data}
        extra = {str(key): value for key, value in data.items() if key not in RECOGNISED_FRONT_MATTER_KEYS}
        for key in ("title", "nav_label", "id", "parent", "status"):
            if known.get(key) is not None:
                known[key] = str(known[key])
        return cls(**known, extra=extra)


@dataclass(frozen=True)
class Section:
    """A sub-heading of a rendered page."""

    id: str
    text: str
    level: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "level": self.level}


@dataclass(frozen=True)
class ParsedMarkdown:
    """Front matter and body split out of a source file."""

    front_matter: FrontMatter
    body: str
    fallback_title: str


@dataclass(frozen=True)
class AnalyzedContent:
    """Title, outline and indexable text recovered from rendered HTML."""

    title: str
    sections: list[Section]
    text_content: str


@dataclass(frozen=True)
class JepMetadata:
    """Proposal metadata attached to navigation entries of JEP documents."""

    jep_number: str | None
    status: str
    author: Any = None
    created: Any = None
    semver: Any = None
    obsoleted_by: Any = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "jepNumber": self.jep_number,
            "status": self.status,
            "author": self.author,
            "created": self.created,
            "semver": self.semver,
            "obsoleted_by": self.obsoleted_by,
        }
        return {key: _json_value(value) for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class NavigationPage:
    """A sortable, optionally parented navigation link for one document."""

    id: str
    file: str
    title: str
    nav_order: Any = None
    parent: str | None = None
    jep_metadata: JepMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "file": self.file, "title": self.title}
        if self.nav_order is not None:
            data["navOrder"] = _json_value(self.nav_order)
        if self.parent is not None:
            data["parent"] = self.parent
        if self.jep_metadata is not None:
            data["jepMetadata"] = self.jep_metadata.to_dict()
        return data


@dataclass(frozen=True)
class SearchIndexEntry:
    """A document as fed to the full-text index."""

    id: int
    title: str
    content: str
    sections_text: str
    is_obsoleted: bool


@dataclass(frozen=True)
class SearchDocMapEntry:
    """Metadata shown for a search hit."""

    doc_id: int
    title: str
    href: str
    sections: list[Section]
    is_obsoleted: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "href": self.href,
            "sections": [section.to_dict() for section in self.sections],
            "isObsoleted": self.is_obsoleted,
        }


@dataclass(frozen=True)
class DocumentRecords:
    """Everything derived from one processed document."""

    search_entry: SearchIndexEntry
    doc_map_entry: SearchDocMapEntry
    nav_page: NavigationPage | None


@dataclass
class FileResult:
    """Outcome of processing a single source file."""

    relative_path: str
    doc_id: int
    records: DocumentRecords | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.records is not None


@dataclass
class VersionManifest:
    """Navigation data for one built documentation version."""

    id: str
    label: str
    pages: list[NavigationPage]
    default_file: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "pages": [page.to_dict() for page in self.pages],
            "defaultFile": self.default_file,
        }


def _json_value(value: Any) -> Any:
    """Convert YAML-loaded dates into ISO strings for JSON output."""
    if isinstance(value, date):
        return value.isoformat()
    return value
