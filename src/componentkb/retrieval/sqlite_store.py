"""SQLite FTS5 corpus store."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Sequence

from componentkb.models import (
    CandidateRecord,
    CodeExample,
    ComponentMetadata,
    Document,
    ExampleMatch,
    GuidanceEntry,
    GuidanceKind,
    GuidanceMatch,
    Tag,
    TagCategory,
    normalize_component_name,
)
from componentkb.retrieval.service import (
    DEFAULT_CANDIDATE_CAP,
    GUIDANCE_SEARCH_PRECEDENCE,
    CorpusSnapshot,
    ExampleFilters,
    GuidanceFilters,
    SearchFilters,
    StoreError,
)
from componentkb.search.expander import tokenize

LOGGER = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS pages (
        id INTEGER PRIMARY KEY,
        url TEXT NOT NULL,
        title TEXT NOT NULL,
        category TEXT,
        hierarchy_level_1 TEXT,
        hierarchy_level_2 TEXT,
        hierarchy_level_3 TEXT,
        hierarchy_level_4 TEXT,
        content TEXT NOT NULL DEFAULT '',
        raw_html TEXT NOT NULL DEFAULT ''
    );

    CREATE VIRTUAL TABLE IF NOT EXISTS pages_fts USING fts5(
        title,
        content,
        content='pages',
        content_rowid='id',
        tokenize='porter unicode61'
    );

    CREATE TRIGGER IF NOT EXISTS pages_ai AFTER INSERT ON pages BEGIN
        INSERT INTO pages_fts(rowid, title, content) VALUES (new.id, new.title, new.content);
    END;

    CREATE TRIGGER IF NOT EXISTS pages_ad AFTER DELETE ON pages BEGIN
        INSERT INTO pages_fts(pages_fts, rowid, title, content)
        VALUES ('delete', old.id, old.title, old.content);
    END;

    CREATE TABLE IF NOT EXISTS component_metadata (
        page_id INTEGER PRIMARY KEY REFERENCES pages(id) ON DELETE CASCADE,
        component_name TEXT NOT NULL,
        component_type TEXT,
        complexity TEXT,
        requires_js INTEGER NOT NULL DEFAULT 0,
        status TEXT
    );

    CREATE TABLE IF NOT EXISTS component_tags (
        page_id INTEGER NOT NULL REFERENCES pages(id) ON DELETE CASCADE,
        tag TEXT NOT NULL,
        tag_type TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS code_examples (
        id INTEGER PRIMARY KEY,
        page_id INTEGER NOT NULL REFERENCES pages(id) ON DELETE CASCADE,
        language TEXT NOT NULL,
        code TEXT NOT NULL,
        position INTEGER NOT NULL DEFAULT 0,
        variant TEXT,
        use_case TEXT,
        complexity TEXT,
        is_complete INTEGER NOT NULL DEFAULT 0,
        is_interactive INTEGER NOT NULL DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS usage_guidance (
        page_id INTEGER NOT NULL REFERENCES pages(id) ON DELETE CASCADE,
        guidance_type TEXT NOT NULL,
        content TEXT NOT NULL,
        priority INTEGER NOT NULL DEFAULT 0
    );

    CREATE INDEX IF NOT EXISTS idx_pages_category ON pages(category);
    CREATE INDEX IF NOT EXISTS idx_tags_page ON component_tags(page_id);
    CREATE INDEX IF NOT EXISTS idx_examples_page ON code_examples(page_id);
    CREATE INDEX IF NOT EXISTS idx_guidance_page ON usage_guidance(page_id);
"""

# Expression computing the normalized component key inside SQL
_NORMALIZED = "REPLACE(REPLACE(LOWER({column}), ' ', ''), '-', '')"

_GUIDANCE_RANK = "CASE ug.guidance_type {} ELSE {} END".format(
    " ".join(f"WHEN '{kind.value}' THEN {rank}" for rank, kind in enumerate(GUIDANCE_SEARCH_PRECEDENCE)),
    len(GUIDANCE_SEARCH_PRECEDENCE),
)

_COMPONENT_CLAUSE = r" AND (p.title LIKE ? ESCAPE '\' OR cm.component_name LIKE ? ESCAPE '\')"


def _like_pattern(text: str) -> str:
    """Return a LIKE pattern matching ``text`` literally anywhere in a value.

    Use with ``ESCAPE '\\'``.
    """

    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteCorpusStore:
    """Candidate store backed by a SQLite database with an FTS5 page index."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialise_schema()

    @staticmethod
    def _fts_query(phrases: Sequence[str]) -> str:
        """Build an FTS5 MATCH expression ORing every term of every phrase.

        Each term is quoted so FTS5 operators and punctuation in user input are
        treated as literals.
        """

        terms: list[str] = []
        for phrase in phrases:
            for term in tokenize(phrase):
                if term not in terms:
                    terms.append(term)
        escaped = ['"{}"'.format(term.replace('"', '""')) for term in terms]
        return " OR ".join(escaped)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _reading(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            with self._get_connection() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreError(f"Corpus read failed: {exc}") from exc

    def _initialise_schema(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA)
            conn.commit()

    def load(self, snapshot: CorpusSnapshot) -> int:
        """Replace the stored corpus with ``snapshot``; returns the page count."""

        with self._get_connection() as conn:
            conn.execute("DELETE FROM usage_guidance")
            conn.execute("DELETE FROM code_examples")
            conn.execute("DELETE FROM component_tags")
            conn.execute("DELETE FROM component_metadata")
            conn.execute("DELETE FROM pages")
            conn.executemany(
                """
                INSERT INTO pages (id, url, title, category, hierarchy_level_1, hierarchy_level_2,
                                   hierarchy_level_3, hierarchy_level_4, content, raw_html)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (d.id, d.url, d.title, d.category, *d.hierarchy, d.content, d.raw_html)
                    for d in snapshot.documents
                ],
            )
            conn.executemany(
                """
                INSERT INTO component_metadata (page_id, component_name, component_type, complexity, requires_js, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (m.document_id, m.component_name, m.component_type, m.complexity, int(m.requires_js), m.status)
                    for m in snapshot.components
                ],
            )
            conn.executemany(
                "INSERT INTO component_tags (page_id, tag, tag_type) VALUES (?, ?, ?)",
                [(t.document_id, t.tag, t.category.value) for t in snapshot.tags],
            )
            conn.executemany(
                """
                INSERT INTO code_examples (id, page_id, language, code, position, variant, use_case,
                                           complexity, is_complete, is_interactive)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        e.id,
                        e.document_id,
                        e.language,
                        e.code,
                        e.position,
                        e.variant,
                        e.use_case,
                        e.complexity,
                        int(e.is_complete),
                        int(e.is_interactive),
                    )
                    for e in snapshot.examples
                ],
            )
            conn.executemany(
                "INSERT INTO usage_guidance (page_id, guidance_type, content, priority) VALUES (?, ?, ?, ?)",
                [(g.document_id, g.kind.value, g.content, g.priority) for g in snapshot.guidance],
            )
            conn.commit()
        LOGGER.info("Loaded %d pages into %s", len(snapshot.documents), self.db_path)
        return len(snapshot.documents)

    def fetch_candidates(
        self,
        queries: Sequence[str],
        filters: SearchFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[CandidateRecord]:
        filters = filters or SearchFilters()
        phrases = [q.strip() for q in queries if q and q.strip()]
        sql = """
            SELECT p.id, p.url, p.title, p.category,
                   cm.component_name, cm.component_type, cm.complexity, cm.requires_js, cm.status
            FROM pages p
            LEFT JOIN component_metadata cm ON p.id = cm.page_id
            WHERE 1=1
        """
        params: list[object] = []

        if phrases:
            clauses: list[str] = []
            fts_query = self._fts_query(phrases)
            if fts_query:
                clauses.append("p.id IN (SELECT rowid FROM pages_fts WHERE pages_fts MATCH ?)")
                params.append(fts_query)
            for phrase in phrases:
                pattern = _like_pattern(phrase)
                clauses.append(r"p.title LIKE ? ESCAPE '\'")
                clauses.append(r"cm.component_name LIKE ? ESCAPE '\'")
                clauses.append(
                    r"EXISTS (SELECT 1 FROM component_tags t WHERE t.page_id = p.id AND t.tag LIKE ? ESCAPE '\')"
                )
                params.extend([pattern, pattern, pattern])
            sql += f" AND ({' OR '.join(clauses)})"

        if filters.category:
            sql += " AND p.category = ?"
            params.append(filters.category)
        if filters.tag:
            sql += r" AND EXISTS (SELECT 1 FROM component_tags t WHERE t.page_id = p.id AND t.tag LIKE ? ESCAPE '\')"
            params.append(_like_pattern(filters.tag))
        if filters.complexity:
            sql += " AND cm.complexity = ?"
            params.append(filters.complexity)
        if filters.requires_js is not None:
            sql += " AND cm.requires_js = ?"
            params.append(1 if filters.requires_js else 0)

        # Row order is by id only; relevance ordering belongs to the ranker
        sql += " ORDER BY p.id LIMIT ?"
        params.append(cap)

        with self._reading() as conn:
            rows = conn.execute(sql, params).fetchall()
            tags = self._tags_by_page(conn, [row["id"] for row in rows])

        return [
            CandidateRecord(
                id=row["id"],
                title=row["title"],
                component_name=row["component_name"],
                category=row["category"],
                tags=tuple(tags.get(row["id"], ())),
                url=row["url"],
                component_type=row["component_type"],
                complexity=row["complexity"],
                requires_js=bool(row["requires_js"]),
                status=row["status"],
            )
            for row in rows
        ]

    @staticmethod
    def _tags_by_page(conn: sqlite3.Connection, page_ids: Sequence[int]) -> dict[int, list[str]]:
        if not page_ids:
            return {}
        placeholders = ",".join("?" for _ in page_ids)
        cursor = conn.execute(
            f"SELECT page_id, tag FROM component_tags WHERE page_id IN ({placeholders}) ORDER BY rowid",
            list(page_ids),
        )
        grouped: dict[int, list[str]] = {}
        for row in cursor.fetchall():
            grouped.setdefault(row["page_id"], []).append(row["tag"])
        return grouped

    def fetch_document_by_identity(self, key: str) -> Document | None:
        key = normalize_component_name(key)
        if not key:
            return None
        with self._reading() as conn:
            row = conn.execute(
                f"""
                SELECT p.* FROM pages p
                JOIN component_metadata cm ON p.id = cm.page_id
                WHERE {_NORMALIZED.format(column='cm.component_name')} = ?
                ORDER BY p.id LIMIT 1
                """,
                (key,),
            ).fetchone()
            if row is None:
                row = conn.execute(
                    f"SELECT * FROM pages WHERE {_NORMALIZED.format(column='title')} = ? ORDER BY id LIMIT 1",
                    (key,),
                ).fetchone()
        return _row_to_document(row) if row else None

    def fetch_component_metadata(self, document_id: int) -> ComponentMetadata | None:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM component_metadata WHERE page_id = ?", (document_id,)).fetchone()
        if row is None:
            return None
        return ComponentMetadata(
            document_id=row["page_id"],
            component_name=row["component_name"],
            component_type=row["component_type"],
            complexity=row["complexity"],
            requires_js=bool(row["requires_js"]),
            status=row["status"],
        )

    def fetch_code_examples(self, document_id: int) -> Sequence[CodeExample]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM code_examples WHERE page_id = ? ORDER BY position, id",
                (document_id,),
            ).fetchall()
        return [_row_to_example(row) for row in rows]

    def fetch_guidance(self, document_id: int) -> Sequence[GuidanceEntry]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM usage_guidance WHERE page_id = ? ORDER BY rowid",
                (document_id,),
            ).fetchall()
        entries: list[GuidanceEntry] = []
        for row in rows:
            try:
                kind = GuidanceKind(row["guidance_type"])
            except ValueError:
                LOGGER.warning("Skipping guidance with unknown type %r", row["guidance_type"])
                continue
            entries.append(
                GuidanceEntry(document_id=row["page_id"], kind=kind, content=row["content"], priority=row["priority"])
            )
        return entries

    def fetch_tags(self, document_id: int) -> Sequence[Tag]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM component_tags WHERE page_id = ? ORDER BY rowid",
                (document_id,),
            ).fetchall()
        return [Tag(document_id=row["page_id"], tag=row["tag"], category=TagCategory(row["tag_type"])) for row in rows]

    def fetch_sibling_documents(self, document_id: int) -> Sequence[Document]:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM pages WHERE id = ?", (document_id,)).fetchone()
            if row is None or not any(row[f"hierarchy_level_{i}"] for i in (1, 2, 3)):
                return []
            rows = conn.execute(
                """
                SELECT * FROM pages
                WHERE id != ?
                  AND hierarchy_level_1 IS ? AND hierarchy_level_2 IS ? AND hierarchy_level_3 IS ?
                ORDER BY id
                """,
                (document_id, row["hierarchy_level_1"], row["hierarchy_level_2"], row["hierarchy_level_3"]),
            ).fetchall()
        return [_row_to_document(r) for r in rows]

    def search_code_examples(
        self,
        query: str | None,
        filters: ExampleFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[ExampleMatch]:
        filters = filters or ExampleFilters()
        sql = """
            SELECT ce.*, p.title AS component, p.url AS component_url, cm.component_type
            FROM code_examples ce
            JOIN pages p ON ce.page_id = p.id
            LEFT JOIN component_metadata cm ON p.id = cm.page_id
            WHERE 1=1
        """
        params: list[object] = []
        if query and query.strip():
            sql += r" AND ce.code LIKE ? ESCAPE '\'"
            params.append(_like_pattern(query.strip()))
        if filters.component:
            sql += _COMPONENT_CLAUSE
            params.extend([_like_pattern(filters.component)] * 2)
        if filters.language:
            sql += " AND LOWER(ce.language) = ?"
            params.append(filters.language.lower())
        if filters.complexity:
            sql += " AND ce.complexity = ?"
            params.append(filters.complexity)
        if filters.complete_only:
            sql += " AND ce.is_complete = 1"
        if filters.interactive_only:
            sql += " AND ce.is_interactive = 1"
        sql += " ORDER BY ce.is_complete DESC, p.title, ce.language, ce.id LIMIT ?"
        params.append(cap)

        with self._reading() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [
            ExampleMatch(
                example=_row_to_example(row),
                component=row["component"],
                url=row["component_url"],
                component_type=row["component_type"],
            )
            for row in rows
        ]

    def search_guidance(
        self,
        query: str | None,
        filters: GuidanceFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[GuidanceMatch]:
        filters = filters or GuidanceFilters()
        sql = """
            SELECT ug.page_id, ug.guidance_type, ug.content, ug.priority,
                   p.title AS component, p.url AS component_url, cm.component_type
            FROM usage_guidance ug
            JOIN pages p ON ug.page_id = p.id
            LEFT JOIN component_metadata cm ON p.id = cm.page_id
            WHERE 1=1
        """
        params: list[object] = []
        if query and query.strip():
            sql += r" AND ug.content LIKE ? ESCAPE '\'"
            params.append(_like_pattern(query.strip()))
        if filters.kind is not None:
            sql += " AND ug.guidance_type = ?"
            params.append(filters.kind.value)
        if filters.component:
            sql += _COMPONENT_CLAUSE
            params.extend([_like_pattern(filters.component)] * 2)
        sql += f" ORDER BY {_GUIDANCE_RANK}, p.title, ug.priority DESC, ug.rowid LIMIT ?"
        params.append(cap)

        with self._reading() as conn:
            rows = conn.execute(sql, params).fetchall()
        matches: list[GuidanceMatch] = []
        for row in rows:
            try:
                kind = GuidanceKind(row["guidance_type"])
            except ValueError:
                LOGGER.warning("Skipping guidance with unknown type %r", row["guidance_type"])
                continue
            matches.append(
                GuidanceMatch(
                    entry=GuidanceEntry(
                        document_id=row["page_id"], kind=kind, content=row["content"], priority=row["priority"]
                    ),
                    component=row["component"],
                    url=row["component_url"],
                    component_type=row["component_type"],
                )
            )
        return matches

    def count(self) -> int:
        with self._reading() as conn:
            result = conn.execute("SELECT COUNT(*) FROM pages").fetchone()
        return int(result[0]) if result else 0


def _row_to_example(row: sqlite3.Row) -> CodeExample:
    return CodeExample(
        id=row["id"],
        document_id=row["page_id"],
        language=row["language"],
        code=row["code"],
        position=row["position"],
        variant=row["variant"],
        use_case=row["use_case"],
        complexity=row["complexity"],
        is_complete=bool(row["is_complete"]),
        is_interactive=bool(row["is_interactive"]),
    )


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        category=row["category"],
        hierarchy=(
            row["hierarchy_level_1"],
            row["hierarchy_level_2"],
            row["hierarchy_level_3"],
            row["hierarchy_level_4"],
        ),
        content=row["content"],
        raw_html=row["raw_html"],
    )
