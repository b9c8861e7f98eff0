"""Data source manager: tracks the active source and its schema"""
import logging
import os
from urllib.parse import urlparse

import requests

from src.components.errors import (
    DatabaseInitError,
    EmptyDatabaseError,
    InvalidDatabaseFileError,
    RemoteFetchError,
)
from src.components.executor import DatabaseConnection, QueryExecutor, SQLiteDatabase
from src.components.mock_executor import MockQueryExecutor
from src.components.models import (
    CustomSource,
    DemoSource,
    GenericMode,
    NoSource,
    SchemaDescription,
    SessionMode,
    can_execute,
)

logger = logging.getLogger(__name__)

# Extensions offered by the upload picker; the engine does the real validation
DATABASE_FILE_EXTENSIONS = [".db", ".sqlite", ".sqlite3", ".db3"]

CORS_HINT = (
    "Check that the URL is publicly reachable and allows cross-origin downloads."
)


class DataSourceManager:
    """Owns the single active database handle.

    Every load replaces the previous handle wholesale. A failed load leaves
    the manager in ``NoSource`` and raises a ``DataSourceError``.
    """

    def __init__(
        self,
        demo_backend: str = "sqlite",
        max_rows: int = 1000,
        max_upload_bytes: int = 100 * 1024 * 1024,
        url_fetch_timeout: int = 30,
    ):
        self.demo_backend = demo_backend
        self.max_rows = max_rows
        self.max_upload_bytes = max_upload_bytes
        self.url_fetch_timeout = url_fetch_timeout
        self.mode: SessionMode = NoSource()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def schema(self) -> SchemaDescription:
        if isinstance(self.mode, (DemoSource, CustomSource)):
            return self.mode.schema
        return SchemaDescription()

    @property
    def schema_text(self) -> str:
        return self.schema.to_text()

    @property
    def executor(self):
        """Executor of the active source, or None when nothing can run"""
        if can_execute(self.mode):
            return self.mode.executor
        return None

    @property
    def is_generic(self) -> bool:
        return isinstance(self.mode, GenericMode)

    @property
    def has_selected_mode(self) -> bool:
        return not isinstance(self.mode, NoSource)

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop the current handle and return to no-source mode"""
        executor = self.executor
        if executor is not None:
            executor.close()
        self.mode = NoSource()

    def enable_generic(self) -> None:
        """No dataset: SQL can be generated but not executed"""
        self.clear()
        self.mode = GenericMode()
        logger.info("Data source: generic mode (no dataset)")

    def load_demo(self) -> SchemaDescription:
        """Load the fixed customers/orders/products dataset"""
        self.clear()
        if self.demo_backend == "mock":
            executor = MockQueryExecutor()
        else:
            # DatabaseInitError propagates to the caller
            executor = QueryExecutor(SQLiteDatabase.create_demo_database(), max_rows=self.max_rows)
        try:
            schema = executor.get_schema()
        except Exception as e:
            executor.close()
            raise DatabaseInitError(str(e)) from e
        self.mode = DemoSource(executor=executor, schema=schema)
        logger.info(
            "Data source: demo backend=%s tables=%s", self.demo_backend, schema.table_names
        )
        return schema

    def load_bytes(self, data: bytes, origin: str = "upload") -> SchemaDescription:
        """Open a SQLite image and introspect it.

        Raises InvalidDatabaseFileError when the engine cannot open it and
        EmptyDatabaseError when it opens but has no user tables.
        """
        self.clear()
        if len(data) > self.max_upload_bytes:
            raise InvalidDatabaseFileError(
                f"File is too large ({len(data)} bytes, limit {self.max_upload_bytes})."
            )

        db = DatabaseConnection.from_bytes(data)
        try:
            schema = db.get_schema()
        except Exception as e:
            db.close()
            raise InvalidDatabaseFileError(f"Could not read the database schema ({e}).") from e

        if schema.is_empty():
            db.close()
            raise EmptyDatabaseError("No tables found in the SQLite file.")

        self.mode = CustomSource(
            executor=QueryExecutor(db, max_rows=self.max_rows),
            schema=schema,
            origin=origin,
        )
        logger.info(
            "Data source: custom origin=%s bytes=%d tables=%s",
            origin,
            len(data),
            schema.table_names,
        )
        return schema

    def load_file(self, path: str) -> SchemaDescription:
        """Load an uploaded database file from a local path"""
        self.clear()
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as e:
            raise InvalidDatabaseFileError(f"Could not read the uploaded file ({e}).") from e
        return self.load_bytes(data, origin=os.path.basename(path))

    def load_url(self, url: str) -> SchemaDescription:
        """Download a SQLite file over HTTP(S) and load it"""
        self.clear()
        url = (url or "").strip()
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise RemoteFetchError(f"Invalid URL ({e}).") from e
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise RemoteFetchError("Only http(s) URLs are supported.")

        data = fetch_database_bytes(url, timeout=self.url_fetch_timeout)
        return self.load_bytes(data, origin=url)


def fetch_database_bytes(url: str, timeout: int = 30) -> bytes:
    """GET a remote binary with default request semantics"""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("URL fetch failed: url=%s error_class=%s", url, type(e).__name__)
        raise RemoteFetchError(f"Network error while fetching file ({e}). {CORS_HINT}") from e

    if not response.ok:
        logger.warning("URL fetch failed: url=%s status=%s", url, response.status_code)
        raise RemoteFetchError(
            f"Failed to fetch file (Status: {response.status_code}). {CORS_HINT}",
            status_code=response.status_code,
        )
    return response.content

