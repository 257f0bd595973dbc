"""DuckDB persistence for analysis reports.

A report file holds one run: the definitions with their usage totals and every
classified usage. Saving replaces whatever the file held before, so the tables
always describe a single AnalysisResult.
"""

import logging
import threading
from datetime import datetime, timezone

import duckdb

from .models import AnalysisResult, CallType, Definition, Usage

log = logging.getLogger(__name__)

_DDL = """
CREATE TABLE IF NOT EXISTS meta (
    key     VARCHAR PRIMARY KEY,
    value   VARCHAR
);

CREATE TABLE IF NOT EXISTS definitions (
    id              INTEGER PRIMARY KEY,
    name            VARCHAR NOT NULL,
    filename        VARCHAR NOT NULL,
    line_number     INTEGER NOT NULL,
    total_usages    INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS usages (
    definition_id   INTEGER NOT NULL,
    location        VARCHAR NOT NULL,
    call_type       VARCHAR NOT NULL,
    context         VARCHAR
);

CREATE INDEX IF NOT EXISTS idx_definitions_name ON definitions(name);
CREATE INDEX IF NOT EXISTS idx_usages_definition ON usages(definition_id);
"""


class ReportStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._con = duckdb.connect(db_path)
        for stmt in _DDL.strip().split(";"):
            stmt = stmt.strip()
            if stmt:
                self._con.execute(stmt)
        log.debug("ReportStore opened: %s", db_path)

    def close(self) -> None:
        self._con.close()

    def __enter__(self) -> "ReportStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ── meta ────────────────────────────────────────────────────────────────

    def get_meta(self, key: str) -> str | None:
        with self._lock:
            row = self._con.execute(
                "SELECT value FROM meta WHERE key = ?", [key]
            ).fetchone()
        return row[0] if row else None

    # ── write ───────────────────────────────────────────────────────────────

    def save(self, result: AnalysisResult, root: str) -> None:
        """Replace the stored report with `result`."""
        definition_rows = []
        usage_rows = []
        for def_id, record in enumerate(result.records, start=1):
            d = record.definition
            definition_rows.append([def_id, d.name, d.filename, d.line_number, record.total_usages])
            for u in record.usages:
                usage_rows.append([def_id, u.location, u.call_type.value, u.context])

        meta = {
            "root": root,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "total_files": str(result.total_files),
            "total_definitions": str(result.total_definitions),
        }

        with self._lock:
            self._con.execute("BEGIN TRANSACTION")
            try:
                self._con.execute("DELETE FROM usages")
                self._con.execute("DELETE FROM definitions")
                self._con.execute("DELETE FROM meta")
                self._con.executemany("INSERT INTO meta VALUES (?, ?)", list(meta.items()))
                if definition_rows:
                    self._con.executemany(
                        "INSERT INTO definitions VALUES (?, ?, ?, ?, ?)", definition_rows
                    )
                if usage_rows:
                    self._con.executemany(
                        "INSERT INTO usages VALUES (?, ?, ?, ?)", usage_rows
                    )
                self._con.execute("COMMIT")
            except duckdb.Error:
                self._con.execute("ROLLBACK")
                raise

        log.info(
            "Saved %d definitions, %d usages to %s",
            len(definition_rows), len(usage_rows), self.db_path,
        )

    # ── read ────────────────────────────────────────────────────────────────

    def definitions(self) -> list[tuple[Definition, int]]:
        """Return (definition, total_usages) pairs in saved order."""
        with self._lock:
            rows = self._con.execute(
                "SELECT name, filename, line_number, total_usages "
                "FROM definitions ORDER BY id"
            ).fetchall()
        return [(Definition(name, filename, line_no), total) for name, filename, line_no, total in rows]

    def usages_for(self, name: str) -> list[Usage]:
        with self._lock:
            rows = self._con.execute(
                """
                SELECT u.location, u.call_type, u.context
                FROM usages u JOIN definitions d ON u.definition_id = d.id
                WHERE d.name = ?
                ORDER BY d.id, u.location
                """,
                [name],
            ).fetchall()
        return [Usage(location, CallType(call_type), context) for location, call_type, context in rows]

    def unused(self) -> list[Definition]:
        """Definitions saved with zero usages."""
        with self._lock:
            rows = self._con.execute(
                "SELECT name, filename, line_number FROM definitions "
                "WHERE total_usages = 0 ORDER BY id"
            ).fetchall()
        return [Definition(*row) for row in rows]
