"""End-to-end integration tests"""
import os
import sqlite3
import tempfile

import pytest
from langchain_core.language_models import FakeListChatModel

from src.app import ExplorerApp
from src.components.data_sources import DataSourceManager
from src.components.session import ExplorerSession
from src.components.sql_generator import SQLGenerator


class TestEndToEnd:
    """End-to-end tests"""

    @pytest.fixture
    def temp_db(self):
        """Create a temporary SQLite file for upload tests"""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "shop.db")
            conn = sqlite3.connect(db_path)
            conn.execute("CREATE TABLE items (sku TEXT, qty INTEGER)")
            conn.executemany("INSERT INTO items VALUES (?, ?)", [("a", 1), ("b", None)])
            conn.commit()
            conn.close()
            yield db_path

    def test_count_us_customers(self):
        """Load demo, generate SQL, run it"""
        llm = FakeListChatModel(
            responses=["```sql\nSELECT COUNT(*) FROM customers WHERE country = 'US';\n```"]
        )
        session = ExplorerSession(DataSourceManager(), SQLGenerator(llm))

        session.load_demo()
        session.generate("how many customers are in the US")

        assert "customers" in session.sql
        assert "country" in session.sql

        session.run()
        result = session.result
        assert result.ok
        assert len(result.columns) == 1
        assert result.row_count == 1
        assert result.rows[0][result.columns[0]].value == 2

    def test_generic_mode_never_touches_database(self):
        llm = FakeListChatModel(responses=["SELECT name FROM employees ORDER BY salary DESC LIMIT 5;"])
        session = ExplorerSession(DataSourceManager(), SQLGenerator(llm))

        session.use_without_dataset()
        session.generate("top 5 earners")

        assert session.sql.startswith("SELECT name FROM employees")
        assert session.data_sources.executor is None
        assert session.can_execute is False
        session.run()
        assert session.result is None

    def test_upload_then_query(self, temp_db):
        app = ExplorerApp(sql_generator=SQLGenerator(None))
        session = app.handle_upload(temp_db, None)[0]

        assert session.schema.table_names == ["items"]
        session.run("SELECT sku, qty FROM items ORDER BY sku")
        assert [r["qty"] for r in session.result.records()] == [1, None]

    def test_generation_without_key_shows_message(self):
        app = ExplorerApp(sql_generator=SQLGenerator(None))
        outputs = app.handle_load_demo(None)
        session = outputs[0]
        outputs = app.handle_generate("how many orders?", session)
        assert "Failed to generate SQL" in outputs[3]
        # Demo data is still loaded and runnable
        outputs = app.handle_run("SELECT COUNT(*) AS n FROM orders", session)
        assert "| n |" in outputs[7]
        assert "| 6 |" in outputs[7]
