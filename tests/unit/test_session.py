"""Unit tests for the session controller and rendering helpers"""
from unittest.mock import MagicMock

import pytest

from src.app import ExplorerApp
from src.components.data_sources import DataSourceManager
from src.components.models import (
    CustomSource,
    DemoSource,
    GenericMode,
    NoSource,
    QueryResult,
    SchemaDescription,
)
from src.components.session import GENERATION_FAILED, NO_MODE_SELECTED, ExplorerSession
from src.components.sql_generator import SQLGenerator


def _session(sql_response: str = "SELECT * FROM customers") -> ExplorerSession:
    generator = MagicMock(spec=SQLGenerator)
    generator.generate.return_value = sql_response
    return ExplorerSession(DataSourceManager(), generator)


class TestExplorerSession:
    """Test action handlers"""

    def test_generate_requires_mode(self):
        session = _session()
        session.generate("how many customers?")
        assert session.error == NO_MODE_SELECTED
        session.sql_generator.generate.assert_not_called()

    def test_blank_question_ignored(self):
        session = _session()
        session.load_demo()
        session.generate("   ")
        assert session.sql == ""
        session.sql_generator.generate.assert_not_called()

    def test_generate_passes_schema_text(self):
        session = _session()
        session.load_demo()
        session.generate("list customers")
        question, schema_text = session.sql_generator.generate.call_args[0]
        assert question == "list customers"
        assert schema_text.startswith("Table: customers")
        assert session.sql == "SELECT * FROM customers"

    def test_generic_mode_sends_empty_schema(self):
        session = _session()
        session.use_without_dataset()
        session.generate("top 5 employees by salary")
        assert session.sql_generator.generate.call_args[0][1] == ""
        assert session.sql == "SELECT * FROM customers"

    def test_generation_failure_is_generic_message(self):
        session = _session()
        session.sql_generator.generate.side_effect = RuntimeError("401 invalid api key")
        session.load_demo()
        session.generate("anything")
        assert session.error == GENERATION_FAILED
        assert session.sql == ""

    def test_run_keeps_sql_on_error(self):
        session = _session()
        session.load_demo()
        session.run("SELECT nope FROM customers")
        assert session.result.error
        assert session.sql == "SELECT nope FROM customers"
        assert isinstance(session.mode, DemoSource)

    def test_run_impossible_in_generic_mode(self):
        session = _session()
        session.use_without_dataset()
        session.generate("anything")
        assert session.can_execute is False
        session.run()
        assert session.result is None

    def test_run_maps_unexpected_exceptions(self):
        session = _session()
        session.load_demo()
        session.data_sources.mode.executor.execute = MagicMock(side_effect=RuntimeError("boom"))
        session.run("SELECT 1")
        assert session.result.error == "Unexpected execution error."

    def test_mode_switch_resets_query_state(self):
        session = _session()
        session.load_demo()
        session.generate("list customers")
        session.run()
        assert session.result is not None

        session.use_without_dataset()
        assert isinstance(session.mode, GenericMode)
        assert session.sql == ""
        assert session.result is None
        assert session.question == ""

        session.generate("anything")
        session.upload_file("/nonexistent/file.db")
        assert session.sql == ""
        assert isinstance(session.mode, NoSource)
        assert session.error.startswith("Failed to load custom database.")

    def test_failed_url_load_reports_error(self):
        session = _session()
        session.load_url("ftp://example.com/db.sqlite")
        assert session.error.startswith("Failed to load database from URL.")
        assert isinstance(session.mode, NoSource)

    def test_malformed_url_reports_error(self):
        session = _session()
        session.load_url("http://[::1/data.db")
        assert session.error.startswith("Failed to load database from URL.")
        assert "Invalid URL" in session.error
        assert isinstance(session.mode, NoSource)

    def test_run_clears_previous_error(self):
        session = _session()
        session.sql_generator.generate.side_effect = RuntimeError("timeout")
        session.load_demo()
        session.generate("anything")
        assert session.error == GENERATION_FAILED

        session.run("SELECT COUNT(*) AS n FROM customers")
        assert session.error is None
        assert session.result.ok

    def test_close_session_releases_handle(self):
        session = _session()
        session.load_demo()
        executor = session.data_sources.executor
        ExplorerApp.close_session(session)
        assert executor.db.closed
        assert isinstance(session.mode, NoSource)
        ExplorerApp.close_session(None)

    def test_reset(self):
        session = _session()
        session.load_demo()
        session.generate("list customers")
        session.reset()
        assert isinstance(session.mode, NoSource)
        assert session.sql == ""
        assert session.schema.is_empty()


class TestRendering:
    """Test presentation helpers"""

    def test_result_error_panel(self):
        text = ExplorerApp.format_result(QueryResult.failure("no such table: x"))
        assert "Execution error" in text
        assert "no such table: x" in text

    def test_no_result_set_notice(self):
        text = ExplorerApp.format_result(QueryResult(execution_time_ms=1.234))
        assert "no result set" in text
        assert "1.23ms" in text

    def test_empty_rows_notice(self):
        result = QueryResult.from_records(["a"], [], execution_time_ms=0.5)
        text = ExplorerApp.format_result(result)
        assert "returned no results" in text
        assert "0 rows" in text

    def test_table_with_footer(self):
        result = QueryResult.from_records(
            ["name", "note"], [("A|B", None), ("C", "x")], execution_time_ms=2.0
        )
        text = ExplorerApp.format_result(result)
        assert "| name | note |" in text
        assert "| A\\|B | NULL |" in text
        assert "`2 rows • 2.00ms`" in text

    def test_truncation_note(self):
        result = QueryResult.from_records(["a"], [(1,)], execution_time_ms=1.0, truncated=True)
        assert "truncated" in ExplorerApp.format_result(result)

    def test_schema_panel(self):
        manager = DataSourceManager()
        manager.load_demo()
        text = ExplorerApp.format_schema(manager.schema)
        assert "### customers" in text
        assert "| country | TEXT |" in text
        assert ExplorerApp.format_schema(SchemaDescription()) == "*No schema loaded*"

    @pytest.mark.parametrize(
        "mode, expected",
        [
            (NoSource(), "use without a dataset"),
            (GenericMode(), "cannot be run"),
            (CustomSource(executor=None, schema=SchemaDescription(), origin="x.db"), "x.db"),
        ],
    )
    def test_mode_label(self, mode, expected):
        assert expected in ExplorerApp.format_mode(mode)
