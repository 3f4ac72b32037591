"""SQLite FTS5 search index for one documentation version."""

import base64
import logging
import re
import sqlite3
from collections.abc import Iterator
from typing import Any

from jmespath_docs_site.models import SearchDocMapEntry, SearchIndexEntry

logger = logging.getLogger(__name__)


class SearchIndexBuilder:
    """Accumulates a version's search entries and document map.

    The index is a contentless FTS5 table keyed by document id, with prefix
    indexes so partially typed words match. Document ids are handed out in
    contiguous blocks through :meth:`reserve`.
    """

    TABLE = "search_fts"

    def __init__(self, start_doc_id: int = 0) -> None:
        """Initialise an in-memory index.

        Args:
            start_doc_id: First document id handed out by :meth:`reserve`.
        """
        self._conn = sqlite3.connect(":memory:")
        self._next_doc_id = start_doc_id
        self._indexed_ids: set[int] = set()
        self._doc_map: dict[int, SearchDocMapEntry] = {}
        self._initialise_schema()

    def __enter__(self) -> "SearchIndexBuilder":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _initialise_schema(self) -> None:
        """Create the FTS5 table if it doesn't exist."""
        self._conn.execute(f"""
            CREATE VIRTUAL TABLE IF NOT EXISTS {self.TABLE} USING fts5(
                title,
                content,
                sections_text,
                content='',
                prefix='2 3 4',
                tokenize='unicode61 remove_diacritics 2'
            )
        """)
        self._conn.commit()

    @property
    def next_doc_id(self) -> int:
        return self._next_doc_id

    def reserve(self, count: int) -> range:
        """Reserve a contiguous block of document ids.

        Each file of a batch claims ``block[position]``, so ids do not depend
        on the order in which files finish.

        Args:
            count: Number of ids to reserve.

        Returns:
            The reserved ids.

        Raises:
            ValueError: If ``count`` is negative.
        """
        if count < 0:
            msg = f"Cannot reserve a negative number of ids: {count}"
            raise ValueError(msg)
        block = range(self._next_doc_id, self._next_doc_id + count)
        self._next_doc_id += count
        return block

    def add(self, entry: SearchIndexEntry) -> None:
        """Index a document's title, content and section headings.

        Args:
            entry: Entry to index.

        Raises:
            ValueError: If the id has already been indexed.
        """
        if entry.id in self._indexed_ids:
            msg = f"Document id already indexed: {entry.id}"
            raise ValueError(msg)
        self._conn.execute(
            f"INSERT INTO {self.TABLE} (rowid, title, content, sections_text) VALUES (?, ?, ?, ?)",
            (entry.id, entry.title, entry.content, entry.sections_text),
        )
        self._conn.commit()
        self._indexed_ids.add(entry.id)

    def set_doc_map_entry(self, entry: SearchDocMapEntry) -> None:
        self._doc_map[entry.doc_id] = entry

    def get_doc_map_entry(self, doc_id: int) -> SearchDocMapEntry | None:
        return self._doc_map.get(doc_id)

    def get_document_count(self) -> int:
        """Return the number of indexed documents."""
        return len(self._indexed_ids)

    @staticmethod
    def _prefix_query(query: str) -> str:
        """Turn free text into an FTS5 prefix query.

        Every word is quoted, so FTS5 operators and punctuation in the input
        are matched literally.

        Args:
            query: Raw user query string.

        Returns:
            FTS5 MATCH expression, empty when the query has no words.
        """
        words = re.findall(r"\w+", query)
        return " ".join(f'"{word}"*' for word in words)

    def search(self, query: str, limit: int = 10) -> list[int]:
        """Search the index with prefix matching.

        Args:
            query: Search query string.
            limit: Maximum number of results.

        Returns:
            Document ids ordered by relevance.
        """
        match = self._prefix_query(query)
        if not match:
            return []
        cursor = self._conn.execute(
            f"SELECT rowid FROM {self.TABLE} WHERE {self.TABLE} MATCH ? ORDER BY rank LIMIT ?",
            (match, limit),
        )
        return [int(row[0]) for row in cursor.fetchall()]

    def _iter_segments(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(key, value)`` pairs for every row of the FTS5 shadow tables."""
        table = self.TABLE
        for row_id, block in self._conn.execute(f"SELECT id, block FROM {table}_data ORDER BY id"):
            yield f"data.{row_id}", block
        for segid, term, pgno in self._conn.execute(f"SELECT segid, term, pgno FROM {table}_idx ORDER BY segid, term"):
            yield f"idx.{segid}.{bytes(term).hex()}", pgno
        for row_id, size in self._conn.execute(f"SELECT id, sz FROM {table}_docsize ORDER BY id"):
            yield f"docsize.{row_id}", size
        for key, value in self._conn.execute(f"SELECT k, v FROM {table}_config ORDER BY k"):
            yield f"config.{key}", value

    def export(self) -> dict[str, Any]:
        """Serialise the index segments into a key to data mapping.

        Binary segments are base64 encoded; empty segments are left out. An
        index without documents exports nothing.

        Returns:
            Mapping suitable for JSON persistence.
        """
        exports: dict[str, Any] = {}
        if not self._indexed_ids:
            return exports
        for key, value in self._iter_segments():
            if value is None:
                continue
            if isinstance(value, bytes):
                value = base64.b64encode(value).decode("ascii")
            exports[key] = value
        return exports

    def export_doc_map(self) -> dict[str, dict[str, Any]]:
        """Serialise the document map keyed by document id."""
        return {str(doc_id): self._doc_map[doc_id].to_dict() for doc_id in sorted(self._doc_map)}

