"""Data ingestion loaders for department sheet exports."""

from .csv_line import parse_line, parse_line_trimmed, split_lines
from .fetch import FetchResult, build_csv_url, fetch_and_parse
from .mapper import RowKind, classify_row, find_employee, map_grouped_rows, map_rows
from .mapper import parse_export
from .schemas import SCHEMAS, FieldSpec, Schema, get_schema

__all__ = [
    "parse_line",
    "parse_line_trimmed",
    "split_lines",
    "FetchResult",
    "build_csv_url",
    "fetch_and_parse",
    "RowKind",
    "classify_row",
    "find_employee",
    "map_grouped_rows",
    "map_rows",
    "parse_export",
    "SCHEMAS",
    "FieldSpec",
    "Schema",
    "get_schema",
]
