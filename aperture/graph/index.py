"""DuckDB relation index over the visible catalog."""

from __future__ import annotations

import duckdb

from ..models import Component


def get_connection(path: str = ":memory:") -> duckdb.DuckDBPyConnection:
    """Get a DuckDB connection."""
    return duckdb.connect(path)


def create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the component and relation tables."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS components (
            position INTEGER PRIMARY KEY,
            name VARCHAR NOT NULL,
            type VARCHAR,
            lifecycle VARCHAR,
            system VARCHAR
        )
    """)

    # One row per dependsOn entry; targets may not exist in components
    conn.execute("""
        CREATE TABLE IF NOT EXISTS relations (
            source_position INTEGER NOT NULL,
            ordinal INTEGER NOT NULL,
            source_name VARCHAR NOT NULL,
            target_name VARCHAR NOT NULL
        )
    """)

    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_relations_source ON relations(source_name)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_relations_target ON relations(target_name)"
    )


class DependencyIndex:
    """Direct dependsOn edges of a catalog snapshot, queryable in both directions.

    Query results follow catalog position, then dependsOn order.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None):
        self.conn = conn or get_connection(":memory:")
        create_schema(self.conn)

    def load(self, components: list[Component]) -> None:
        """Replace the indexed snapshot."""
        self.conn.execute("DELETE FROM relations")
        self.conn.execute("DELETE FROM components")

        component_rows = [
            [position, c.name, c.spec.type, c.spec.lifecycle, c.spec.system]
            for position, c in enumerate(components)
        ]
        relation_rows = [
            [position, ordinal, c.name, target]
            for position, c in enumerate(components)
            for ordinal, target in enumerate(c.spec.dependsOn)
        ]

        if component_rows:
            self.conn.executemany(
                "INSERT INTO components VALUES (?, ?, ?, ?, ?)", component_rows
            )
        if relation_rows:
            self.conn.executemany(
                "INSERT INTO relations VALUES (?, ?, ?, ?)", relation_rows
            )

    def get_dependencies(self, name: str) -> list[str]:
        """Names a component depends on, first occurrence only."""
        result = self.conn.execute(
            """
            SELECT target_name, MIN(ordinal) AS seq
            FROM relations
            WHERE source_name = ?
            GROUP BY target_name
            ORDER BY seq
            """,
            [name],
        ).fetchall()
        return [row[0] for row in result]

    def get_dependents(self, name: str) -> list[str]:
        """Names of components whose dependsOn contains ``name``."""
        result = self.conn.execute(
            """
            SELECT source_name, MIN(source_position) AS pos
            FROM relations
            WHERE target_name = ?
            GROUP BY source_name
            ORDER BY pos
            """,
            [name],
        ).fetchall()
        return [row[0] for row in result]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM components").fetchone()[0]
