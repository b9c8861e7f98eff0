"""Data model shared by the data source, generation and execution layers"""
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class ColumnInfo:
    """A single column as declared in the database catalog"""

    name: str
    type: str


@dataclass(frozen=True)
class TableSchema:
    """A table and its columns in declared order"""

    name: str
    columns: List[ColumnInfo] = field(default_factory=list)

    def to_text(self) -> str:
        cols = ", ".join(f"{c.name} ({c.type})" for c in self.columns)
        return f"Table: {self.name}\nColumns: {cols}"


@dataclass(frozen=True)
class SchemaDescription:
    """Ordered list of tables derived from a loaded data source.

    ``to_text()`` is the only schema context handed to the language model.
    """

    tables: List[TableSchema] = field(default_factory=list)

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[TableSchema]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def is_empty(self) -> bool:
        return not self.tables

    def to_text(self) -> str:
        return "\n\n".join(t.to_text() for t in self.tables)


class ScalarKind(Enum):
    """Storage class of a single result value"""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


@dataclass(frozen=True)
class Cell:
    """Tagged scalar value of one column in one result row"""

    kind: ScalarKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "Cell":
        """Classify a raw engine value."""
        if value is None:
            return cls(ScalarKind.NULL)
        if isinstance(value, bool):
            return cls(ScalarKind.INTEGER, int(value))
        if isinstance(value, int):
            return cls(ScalarKind.INTEGER, value)
        if isinstance(value, float):
            return cls(ScalarKind.REAL, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(ScalarKind.BLOB, bytes(value))
        if isinstance(value, str):
            return cls(ScalarKind.TEXT, value)
        # Decimal, date and friends coming back from type adapters
        return cls(ScalarKind.TEXT, str(value))

    @property
    def is_null(self) -> bool:
        return self.kind is ScalarKind.NULL

    def display(self) -> str:
        if self.kind is ScalarKind.NULL:
            return "NULL"
        if self.kind is ScalarKind.BLOB:
            return f"<{len(self.value)} bytes>"
        return str(self.value)


@dataclass
class QueryResult:
    """Outcome of one query execution.

    ``error`` is mutually exclusive with row data. ``returns_rows`` is False
    for statements that produced no result set at all (DDL, DML), so callers
    can tell them apart from a SELECT that matched nothing.
    """

    columns: List[str] = field(default_factory=list)
    rows: List["OrderedDict[str, Cell]"] = field(default_factory=list)
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None
    returns_rows: bool = False
    truncated: bool = False

    @classmethod
    def failure(cls, message: str) -> "QueryResult":
        return cls(error=message)

    @classmethod
    def from_records(
        cls,
        columns: List[str],
        values: List[tuple],
        execution_time_ms: Optional[float] = None,
        truncated: bool = False,
    ) -> "QueryResult":
        """Build a result from positional rows, keeping column and row order."""
        rows = [
            OrderedDict((col, Cell.of(val)) for col, val in zip(columns, row))
            for row in values
        ]
        return cls(
            columns=list(columns),
            rows=rows,
            execution_time_ms=execution_time_ms,
            returns_rows=True,
            truncated=truncated,
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def records(self) -> List[Dict[str, Any]]:
        """Rows as plain dicts of Python values"""
        return [
            OrderedDict((col, cell.value) for col, cell in row.items())
            for row in self.rows
        ]


# ----------------------------------------------------------------------
# Session modes: exactly one is active at a time
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class NoSource:
    """Nothing selected yet."""


@dataclass(frozen=True)
class GenericMode:
    """No dataset; SQL can be generated but never executed."""


@dataclass(frozen=True)
class DemoSource:
    executor: Any
    schema: SchemaDescription


@dataclass(frozen=True)
class CustomSource:
    """Uploaded file or remote URL."""

    executor: Any
    schema: SchemaDescription
    origin: str


SessionMode = Union[NoSource, GenericMode, DemoSource, CustomSource]


def can_execute(mode: SessionMode) -> bool:
    """Whether the mode carries a database that queries can run against"""
    return isinstance(mode, (DemoSource, CustomSource))
