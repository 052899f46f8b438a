#!/usr/bin/env python3
"""
Data access layer for exported system.query_log files.
Manages DuckDB connections, file discovery and schema discovery.
"""

import duckdb
from pathlib import Path
from typing import List, Dict, Tuple, Optional
import logging

from .errors import QueryError


class QueryLogDataSource:
    """Exposes query_log CSV/Parquet exports as a DuckDB view named query_log"""

    VIEW_NAME = 'query_log'

    # Parquet first: it carries real column types
    FILE_PATTERNS = [
        ('read_parquet', 'query_log*.parquet'),
        ('read_csv_auto', 'query_log*.csv'),
    ]

    def __init__(self, datadir: str, duckdb_threads: Optional[int] = None):
        """
        Initialize data source with directory containing query_log exports.

        Args:
            datadir: Directory containing query_log*.parquet or query_log*.csv files
            duckdb_threads: Number of DuckDB threads (None for default, 1 for deterministic)
        """
        self.datadir = Path(datadir)
        self.conn = None
        self.duckdb_threads = duckdb_threads
        self.available_columns: Dict[str, str] = {}  # lowercase -> actual column name
        self.schema_info: List[Tuple[str, str]] = []
        self.file_format: Optional[str] = None
        self.logger = logging.getLogger('chtimeline.data_source')

        if not self.datadir.exists():
            raise ValueError(f"Data directory does not exist: {datadir}")

    def connect(self):
        """Get or create the DuckDB connection and register the query_log view"""
        if self.conn is None:
            conn = duckdb.connect(':memory:')
            try:
                if self.duckdb_threads is not None:
                    conn.execute(f"SET threads TO {int(self.duckdb_threads)}")
                self._register_view(conn)
            except Exception:
                conn.close()
                raise
            self.conn = conn
        return self.conn

    def cursor(self):
        """Connection handle for use from a worker thread"""
        return self.connect().cursor()

    def close(self):
        """Close DuckDB connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.available_columns = {}
            self.schema_info = []

    def get_files(self, pattern: str) -> List[Path]:
        """List export files matching pattern"""
        return sorted(self.datadir.glob(pattern))

    def _register_view(self, conn) -> None:
        for reader, pattern in self.FILE_PATTERNS:
            if not self.get_files(pattern):
                continue

            escaped = str(self.datadir / pattern).replace("'", "''")
            try:
                conn.execute(
                    f"CREATE OR REPLACE VIEW {self.VIEW_NAME} AS "
                    f"SELECT * FROM {reader}('{escaped}')"
                )
                columns = conn.execute(f"DESCRIBE {self.VIEW_NAME}").fetchall()
            except duckdb.Error as e:
                self.logger.warning(f"Cannot read {pattern} with {reader}: {e}")
                continue

            self.schema_info = [(name, col_type) for name, col_type, *_ in columns]
            self.available_columns = {name.lower(): name for name, _ in self.schema_info}
            self.file_format = reader.replace('read_', '').replace('_auto', '')
            self.logger.info(
                f"query_log: using {self.file_format} files matching {pattern} "
                f"({len(self.schema_info)} columns)"
            )
            return

        raise QueryError(f"No readable query_log*.parquet or query_log*.csv files in {self.datadir}")

    def has_column(self, column: str) -> bool:
        self.connect()
        return column.lower() in self.available_columns

    def missing_columns(self, columns) -> List[str]:
        """Columns from the list that the exports do not provide"""
        self.connect()
        return [col for col in columns if col.lower() not in self.available_columns]

    def __enter__(self):
        """Context manager support"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup"""
        self.close()
