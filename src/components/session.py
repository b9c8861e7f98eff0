"""Per-user session state and action handlers.

Each handler corresponds to one user action (load, generate, run). Handlers
catch their own failures and store a message in ``error``; nothing raised
inside them escapes to the UI framework.
"""
import logging
from typing import Optional

from src.components.data_sources import DataSourceManager
from src.components.error_classifier import classify_llm_error
from src.components.errors import DataSourceError
from src.components.models import QueryResult, SchemaDescription, SessionMode, can_execute
from src.components.sql_generator import SQLGenerator

logger = logging.getLogger(__name__)

NO_MODE_SELECTED = "Please load a database or select 'Use without dataset'."
GENERATION_FAILED = "Failed to generate SQL. Please check your API key or try again."


class ExplorerSession:
    """State of one browser session"""

    def __init__(self, data_sources: DataSourceManager, sql_generator: SQLGenerator):
        self.data_sources = data_sources
        self.sql_generator = sql_generator
        self.question: str = ""
        self.sql: str = ""
        self.result: Optional[QueryResult] = None
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def mode(self) -> SessionMode:
        return self.data_sources.mode

    @property
    def schema(self) -> SchemaDescription:
        return self.data_sources.schema

    @property
    def can_execute(self) -> bool:
        return can_execute(self.mode)

    @property
    def has_selected_mode(self) -> bool:
        return self.data_sources.has_selected_mode

    def _reset_query_state(self) -> None:
        self.error = None
        self.sql = ""
        self.result = None
        self.question = ""

    # ------------------------------------------------------------------
    # Data source actions
    # ------------------------------------------------------------------

    def load_demo(self) -> None:
        self._reset_query_state()
        try:
            self.data_sources.load_demo()
        except DataSourceError as e:
            self.data_sources.clear()
            self.error = f"Failed to load demo database: {e}"
            logger.warning("Demo load failed: %s", e)

    def upload_file(self, path: Optional[str]) -> None:
        if not path:
            return
        self._reset_query_state()
        try:
            self.data_sources.load_file(path)
        except DataSourceError as e:
            self.data_sources.clear()
            self.error = f"Failed to load custom database. {e}"
            logger.warning("Upload failed: %s", e)

    def load_url(self, url: Optional[str]) -> None:
        if not url or not url.strip():
            return
        self._reset_query_state()
        try:
            self.data_sources.load_url(url)
        except DataSourceError as e:
            self.data_sources.clear()
            self.error = f"Failed to load database from URL. {e}"
            logger.warning("URL load failed: %s", e)

    def use_without_dataset(self) -> None:
        self._reset_query_state()
        self.data_sources.enable_generic()

    def reset(self) -> None:
        self._reset_query_state()
        self.data_sources.clear()

    # ------------------------------------------------------------------
    # Generation and execution
    # ------------------------------------------------------------------

    def generate(self, question: Optional[str]) -> None:
        """Ask the model for SQL answering ``question``"""
        if not question or not question.strip():
            return
        self.question = question
        if not self.has_selected_mode:
            self.error = NO_MODE_SELECTED
            return

        self.error = None
        self.result = None
        self.sql = ""
        try:
            self.sql = self.sql_generator.generate(question, self.data_sources.schema_text)
        except Exception as e:
            category, detail = classify_llm_error(e)
            logger.warning("Generation failed: category=%s detail=%s", category, detail)
            self.error = GENERATION_FAILED

    def run(self, sql: Optional[str] = None) -> None:
        """Execute the (possibly edited) SQL against the active source"""
        if sql is not None:
            self.sql = sql
        executor = self.data_sources.executor
        if not self.sql or not self.sql.strip() or executor is None:
            return
        self.error = None
        try:
            self.result = executor.execute(self.sql)
        except Exception:
            logger.exception("Executor raised instead of returning a result")
            self.result = QueryResult.failure("Unexpected execution error.")
