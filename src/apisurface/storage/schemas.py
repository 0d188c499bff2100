"""DuckDB schema definitions for the module snapshot and history tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from duckdb import DuckDBPyConnection

ColumnType = Literal["INTEGER", "VARCHAR", "TIMESTAMP"]

SCHEMAS = ("surface",)
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    """Definition of a single table column."""

    name: str
    type: ColumnType
    nullable: bool = True
    description: str | None = None


@dataclass(frozen=True)
class TableSchema:
    """Schema definition for a DuckDB table."""

    schema: str
    name: str
    columns: list[Column]
    primary_key: tuple[str, ...] = ()
    description: str | None = None

    @property
    def fq_name(self) -> str:
        """Fully qualified table name."""
        return f"{self.schema}.{self.name}"

    def column_names(self) -> list[str]:
        """
        Ordered column names.

        Returns
        -------
        list[str]
            Column names in definition order.
        """
        return [col.name for col in self.columns]


_COUNT_COLUMNS = [
    Column("num_props", "INTEGER", nullable=False),
    Column("num_stable_props", "INTEGER", nullable=False),
    Column("num_deprecated_props", "INTEGER", nullable=False),
    Column("num_experimental_props", "INTEGER", nullable=False),
]

TABLE_SCHEMAS: dict[str, TableSchema] = {
    "surface.module": TableSchema(
        schema="surface",
        name="module",
        columns=[
            Column("module", "VARCHAR", nullable=False, description="Short service name"),
            Column("stability", "INTEGER", nullable=False),
            Column("maturity", "INTEGER", nullable=False),
            Column("category", "INTEGER", nullable=False),
            *_COUNT_COLUMNS,
            Column("updated_at", "TIMESTAMP", nullable=False),
        ],
        primary_key=("module",),
        description="Current snapshot per module, replaced on each latest-version run",
    ),
    "surface.module_history": TableSchema(
        schema="surface",
        name="module_history",
        columns=[
            Column("id", "VARCHAR", nullable=False, description="Module history identifier"),
            Column("module", "VARCHAR", nullable=False),
            Column("major", "INTEGER", nullable=False),
            Column("minor", "INTEGER", nullable=False),
            Column("patch", "INTEGER", nullable=False),
            Column("maturity", "INTEGER", nullable=False),
            Column("stability", "INTEGER", nullable=False),
            *_COUNT_COLUMNS,
            Column("normver", "VARCHAR", nullable=False, description="Zero-padded MMM.mmm.ppp"),
            Column("created_at", "TIMESTAMP", nullable=False),
        ],
        primary_key=("module", "major", "minor", "patch"),
        description="One immutable row per module and version",
    ),
}


def _quote(identifier: str) -> str:
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def build_table_ddl(table: TableSchema) -> str:
    """
    Generate non-destructive CREATE TABLE DDL from a TableSchema.

    Returns
    -------
    str
        CREATE TABLE IF NOT EXISTS statement for the provided schema.
    """
    col_lines: list[str] = []
    for col in table.columns:
        nullable_sql = "" if col.nullable else " NOT NULL"
        col_lines.append(f"    {_quote(col.name)} {col.type}{nullable_sql}")
    if table.primary_key:
        pk_cols = ", ".join(_quote(col) for col in table.primary_key)
        col_lines.append(f"    PRIMARY KEY ({pk_cols})")
    cols_sql = ",\n".join(col_lines)
    return (
        f"CREATE TABLE IF NOT EXISTS {_quote(table.schema)}.{_quote(table.name)} (\n{cols_sql}\n);"
    )


def apply_all_schemas(con: DuckDBPyConnection) -> None:
    """Create schemas and tables that do not exist yet; existing rows are kept."""
    for schema in SCHEMAS:
        con.execute(f"CREATE SCHEMA IF NOT EXISTS {_quote(schema)};")
    for table in TABLE_SCHEMAS.values():
        log.debug("Ensuring table %s", table.fq_name)
        con.execute(build_table_ddl(table))
