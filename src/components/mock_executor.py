"""Regex-based mock query interpreter over the demo rows.

Used when DEMO_BACKEND=mock. It recognises only a handful of query shapes:
pick the table from ``FROM <table>``, filter on ``id``/``status``/``country``
equality, and fake ``COUNT(`` and ``SUM(amount)`` aggregates.
"""
import logging
import re
import time
from typing import Dict, List, Optional

from src.components.demo_data import DEMO_COLUMNS, DEMO_ROWS
from src.components.models import (
    ColumnInfo,
    QueryResult,
    SchemaDescription,
    TableSchema,
)

logger = logging.getLogger(__name__)


class MockQueryExecutor:
    """Answers simple SELECTs against the demo dataset without an engine"""

    TABLE_RE = re.compile(r"\bfrom\s+(customers|orders|products)\b")
    ID_RE = re.compile(r"\bid\s*=\s*(\d+)")
    STATUS_RE = re.compile(r"\bstatus\s*=\s*['\"](\w+)['\"]")
    COUNTRY_RE = re.compile(r"\bcountry\s*=\s*['\"](\w+)['\"]")

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None):
        self.tables = tables if tables is not None else DEMO_ROWS
        self.closed = False

    def get_schema(self) -> SchemaDescription:
        return SchemaDescription(
            tables=[
                TableSchema(
                    name=name,
                    columns=[ColumnInfo(col, col_type) for col, col_type in DEMO_COLUMNS[name]],
                )
                for name in self.tables
            ]
        )

    def close(self) -> None:
        self.closed = True

    def execute(self, sql_query: Optional[str]) -> QueryResult:
        if not sql_query or not sql_query.strip():
            return QueryResult.failure("No SQL to execute")
        start = time.perf_counter()
        try:
            return self._interpret(sql_query.lower().strip(), start)
        except Exception as e:
            logger.exception("Mock interpreter failed")
            return QueryResult.failure(f"Execution Error: {e}")

    def _interpret(self, sql: str, start: float) -> QueryResult:
        if not sql.startswith("select"):
            return QueryResult.failure(
                "Security Alert: Only SELECT statements are allowed in this demo."
            )

        table_match = self.TABLE_RE.search(sql)
        if not table_match:
            return QueryResult.failure(
                "Mock DB Error: Could not determine table from query. "
                "Try querying 'customers', 'orders', or 'products'."
            )
        table_name = table_match.group(1)
        data = list(self.tables[table_name])
        columns = [col for col, _ in DEMO_COLUMNS[table_name]]

        id_match = self.ID_RE.search(sql)
        if id_match:
            data = [row for row in data if row["id"] == int(id_match.group(1))]

        # Literals were lowercased with the query; compare case-insensitively
        status_match = self.STATUS_RE.search(sql)
        if status_match:
            data = [row for row in data if str(row.get("status", "")).lower() == status_match.group(1)]

        country_match = self.COUNTRY_RE.search(sql)
        if country_match:
            data = [row for row in data if str(row.get("country", "")).lower() == country_match.group(1)]

        if "count(" in sql:
            return QueryResult.from_records(
                ["count"], [(len(data),)], self._elapsed_ms(start)
            )

        if "sum(" in sql and "amount" in sql:
            total = sum(row.get("amount") or 0 for row in data)
            return QueryResult.from_records(
                ["total_amount"], [(f"{total:.2f}",)], self._elapsed_ms(start)
            )

        return QueryResult.from_records(
            columns,
            [tuple(row[col] for col in columns) for row in data],
            self._elapsed_ms(start),
        )

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000
