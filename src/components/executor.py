"""Query execution and in-memory database management"""
from typing import List, Optional
from contextlib import contextmanager
import logging
import sqlite3
import time
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from src.components.demo_data import DEMO_COLUMNS, DEMO_ROWS, DEMO_TABLE_DDL
from src.components.errors import (
    DatabaseInitError,
    InvalidDatabaseFileError,
)
from src.components.models import (
    ColumnInfo,
    QueryResult,
    SchemaDescription,
    TableSchema,
)

logger = logging.getLogger(__name__)

USER_TABLES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite_%'"
)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


SQLITE_HEADER = b"SQLite format 3\x00"
MULTI_STATEMENT_HINT = "Run one statement at a time."


def _without_wal_header(data: bytes) -> bytes:
    """Mark a WAL-mode image as rollback-journal so it opens in memory.

    Header bytes 18 and 19 hold the file format write/read versions; 2 means WAL.
    """
    if data[:16] == SQLITE_HEADER and len(data) >= 20 and data[18:20] == b"\x02\x02":
        return data[:18] + b"\x01\x01" + data[20:]
    return data


def _error_message(message: str) -> str:
    if "one statement at a time" in message and MULTI_STATEMENT_HINT not in message:
        return f"{message} {MULTI_STATEMENT_HINT}"
    return message


class DatabaseConnection:
    """Wraps a single in-memory SQLite database behind a SQLAlchemy engine.

    The engine is pinned to one DBAPI connection (``StaticPool``) so that the
    in-memory database lives exactly as long as this object.
    """

    def __init__(self, raw_connection: sqlite3.Connection):
        self._raw_connection = raw_connection
        self.engine = create_engine(
            "sqlite://",
            creator=lambda: raw_connection,
            poolclass=StaticPool,
        )
        self._closed = False

    @classmethod
    def in_memory(cls) -> "DatabaseConnection":
        """Open an empty in-memory database"""
        # Gradio runs handlers on worker threads
        return cls(sqlite3.connect(":memory:", check_same_thread=False))

    @classmethod
    def from_bytes(cls, data: bytes) -> "DatabaseConnection":
        """Open a database image (file upload or URL download) in memory.

        Raises InvalidDatabaseFileError when the engine cannot read the image.
        """
        raw = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            if data:
                raw.deserialize(_without_wal_header(bytes(data)))
            # deserialize() accepts anything; the header is checked on first read
            raw.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except (sqlite3.Error, OverflowError) as e:
            raw.close()
            raise InvalidDatabaseFileError(
                f"Could not open the file as a SQLite database ({e})."
            ) from e
        return cls(raw)

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def get_connection(self):
        """Context manager for database connections"""
        connection = self.engine.connect()
        try:
            yield connection
        finally:
            connection.close()

    def close(self) -> None:
        if self._closed:
            return
        self.engine.dispose()
        self._raw_connection.close()
        self._closed = True

    def get_schema(self) -> SchemaDescription:
        """Introspect user tables and their declared columns in catalog order"""
        tables: List[TableSchema] = []
        with self.get_connection() as conn:
            table_names = [row[0] for row in conn.exec_driver_sql(USER_TABLES_SQL)]
            for table_name in table_names:
                info = conn.exec_driver_sql(
                    f"PRAGMA table_info({_quote_identifier(table_name)})"
                ).fetchall()
                # table_info rows: cid, name, type, notnull, dflt_value, pk
                columns = [ColumnInfo(name=col[1], type=col[2]) for col in info]
                if columns:
                    tables.append(TableSchema(name=table_name, columns=columns))
        return SchemaDescription(tables=tables)

    def execute_query(self, query: str, max_rows: int = 1000) -> QueryResult:
        """Execute one SQL statement and time it.

        DDL/DML changes are committed so later queries in the session see them.
        """
        try:
            start = time.perf_counter()
            with self.engine.begin() as conn:
                # exec_driver_sql keeps ':name' inside literals away from bind parsing
                result = conn.exec_driver_sql(query)
                if not result.returns_rows:
                    elapsed_ms = (time.perf_counter() - start) * 1000
                    return QueryResult(execution_time_ms=elapsed_ms, returns_rows=False)

                columns = list(result.keys())
                rows = result.fetchmany(max_rows + 1)
            elapsed_ms = (time.perf_counter() - start) * 1000

            # Enforce max_rows limit
            truncated = len(rows) > max_rows
            if truncated:
                rows = rows[:max_rows]

            return QueryResult.from_records(
                columns,
                [tuple(row) for row in rows],
                execution_time_ms=elapsed_ms,
                truncated=truncated,
            )
        except SQLAlchemyError as e:
            message = _error_message(str(getattr(e, "orig", None) or e))
            logger.info("Query failed: error_class=%s message=%s", type(e).__name__, message[:200])
            return QueryResult.failure(message)
        except sqlite3.Warning as e:
            # Older sqlite3 modules raise Warning for multi-statement strings
            return QueryResult.failure(_error_message(str(e)))
        except Exception:
            logger.exception("Unexpected error while executing query")
            return QueryResult.failure("Unexpected execution error.")


class QueryExecutor:
    """Runs SQL against the currently loaded database"""

    def __init__(self, db_connection: Optional[DatabaseConnection], max_rows: int = 1000):
        self.db = db_connection
        self.max_rows = max_rows

    def execute(self, sql_query: Optional[str]) -> QueryResult:
        """Execute a SQL query and return a QueryResult (never raises)"""
        if self.db is None or self.db.closed:
            return QueryResult.failure("Database not initialized")
        if not sql_query or not sql_query.strip():
            return QueryResult.failure("No SQL to execute")
        return self.db.execute_query(sql_query, max_rows=self.max_rows)

    def get_schema(self) -> SchemaDescription:
        return self.db.get_schema()

    def close(self) -> None:
        if self.db is not None:
            self.db.close()


class SQLiteDatabase:
    """Utility for creating demo databases"""

    @staticmethod
    def create_demo_database() -> DatabaseConnection:
        """Create an in-memory database with the fixed demo tables and rows"""
        try:
            db = DatabaseConnection.in_memory()
            with db.engine.begin() as conn:
                for table_name, ddl in DEMO_TABLE_DDL.items():
                    conn.exec_driver_sql(ddl)
                    column_names = [name for name, _ in DEMO_COLUMNS[table_name]]
                    placeholders = ", ".join("?" for _ in column_names)
                    conn.exec_driver_sql(
                        f"INSERT INTO {table_name} VALUES ({placeholders})",
                        [
                            tuple(row[col] for col in column_names)
                            for row in DEMO_ROWS[table_name]
                        ],
                    )
        except (sqlite3.Error, SQLAlchemyError) as e:
            raise DatabaseInitError(str(e)) from e
        return db
