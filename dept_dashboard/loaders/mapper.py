"""
Row classification and record mapping for department sheets.

Sheets are maintained by hand, so rows are classified before mapping:
blank key cells, repeated headers and footer/survey blocks are dropped
silently, and only DATA rows become records. The marketing WIG tracker is
a grouped layout ("LEAD 3" marker rows followed by numbered activities)
and goes through map_grouped_rows instead.
"""

import enum
import logging
import re

from .csv_line import split_lines, split_records
from .schemas import Schema

logger = logging.getLogger(__name__)

MARKER_PATTERN = re.compile(r"^LEAD\s+(\d+)", re.IGNORECASE)
CHILD_PATTERN = re.compile(r"^\d+\.")
WORD_PATTERN = re.compile(r"^[a-z]+")

# Rows after a marker searched for its statement row
MARKER_LOOKAHEAD = 4


class RowKind(enum.Enum):
    HEADER = "header"
    DATA = "data"
    MARKER = "marker"
    CHILD = "child"
    SUMMARY = "summary"
    BLANK = "blank"


def _cell(row: list[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return row[idx].strip()


def _repeats_header(row: list[str], header_row: list[str]) -> bool:
    """True when every non-empty cell equals the header cell above it."""
    seen_value = False
    for idx, val in enumerate(row):
        val = val.strip().lower()
        if not val:
            continue
        if idx >= len(header_row) or val != header_row[idx].strip().lower():
            return False
        seen_value = True
    return seen_value


def classify_row(
    row: list[str],
    schema: Schema,
    header_row: list[str] | None = None,
    key_column: int | None = None,
) -> RowKind:
    """Tag a parsed row so the mapping loop never re-derives it inline.

    key_column overrides schema.key_column when the key was located by
    header name.
    """
    key_idx = schema.key_column if key_column is None else key_column
    key = _cell(row, key_idx)

    if not key:
        return RowKind.BLANK

    if schema.grouped:
        if MARKER_PATTERN.match(key):
            return RowKind.MARKER
        if CHILD_PATTERN.match(key):
            return RowKind.CHILD

    key_lower = key.lower()
    for col, labels in schema.header_labels.items():
        if _cell(row, col).lower() in labels:
            return RowKind.HEADER

    if key_lower in schema.skip_labels:
        return RowKind.SUMMARY
    if schema.skip_prefixes:
        first_word = WORD_PATTERN.match(key_lower)
        if first_word and first_word.group(0) in schema.skip_prefixes:
            return RowKind.SUMMARY

    if header_row and _repeats_header(row, header_row):
        return RowKind.HEADER

    return RowKind.DATA


def resolve_columns(header_row: list[str], schema: Schema) -> dict[str, int]:
    """Map each field to its column index.

    Fields declaring header labels are located by case-insensitive
    substring match against the header row (first label that matches wins);
    everything else, and any label that is not found, uses the position.
    """
    lowered = [h.strip().lower() for h in header_row]
    columns: dict[str, int] = {}

    for spec in schema.fields:
        columns[spec.name] = spec.column
        for label in spec.headers:
            idx = next((i for i, h in enumerate(lowered) if label in h), -1)
            if idx >= 0:
                columns[spec.name] = idx
                break

    return columns


def _key_column(schema: Schema, columns: dict[str, int]) -> int:
    for spec in schema.fields:
        if spec.column == schema.key_column:
            return columns.get(spec.name, schema.key_column)
    return schema.key_column


def map_rows(
    rows: list[list[str]],
    header_row: list[str],
    schema: Schema,
) -> list[dict]:
    """Convert parsed data rows (header excluded) into records.

    Short rows, blank-key rows and repeated headers are skipped; missing
    columns yield the field's default. Never raises on bad cell content.
    """
    columns = resolve_columns(header_row, schema)
    key_idx = _key_column(schema, columns)
    records: list[dict] = []
    skipped = 0

    for row in rows:
        if len(row) < schema.min_columns:
            skipped += 1
            logger.debug("Skipping short row (%d < %d columns): %s", len(row), schema.min_columns, row[:3])
            continue

        kind = classify_row(row, schema, header_row, key_column=key_idx)
        if kind is not RowKind.DATA:
            skipped += 1
            logger.debug("Skipping %s row: %s", kind.value, row[:3])
            continue

        record = {}
        for spec in schema.fields:
            col = columns[spec.name]
            record[spec.name] = spec.parser(row[col]) if col < len(row) else spec.default

        if schema.post_process is not None:
            record = schema.post_process(record, row)
            if record is None:
                skipped += 1
                continue

        records.append(record)

    if skipped:
        logger.debug("%s: %d rows skipped, %d mapped", schema.kind, skipped, len(records))
    return records


def _find_header(header_row: list[str], fragment: str) -> int:
    return next((i for i, h in enumerate(header_row) if fragment in h.lower()), -1)


def map_grouped_rows(
    rows: list[list[str]],
    header_row: list[str],
    schema: Schema,
) -> list[dict]:
    """Group numbered activity rows under their LEAD marker.

    A marker row opens a new lead and looks ahead up to MARKER_LOOKAHEAD
    rows for the first plain row, which supplies the lead statement and
    status. Numbered rows ("1.", "2.") become activities of the current
    lead; numbered rows seen before any marker are dropped.
    """
    status_col = _find_header(header_row, "status")
    notes_col = _find_header(header_row, "notes")
    key_idx = schema.key_column

    leads: list[dict] = []
    current: dict | None = None

    for i, row in enumerate(rows):
        kind = classify_row(row, schema, key_column=key_idx)
        key = _cell(row, key_idx)

        if kind is RowKind.MARKER:
            number = MARKER_PATTERN.match(key).group(1)
            statement = ""
            status = ""
            for following in rows[i + 1:i + 1 + MARKER_LOOKAHEAD]:
                next_key = _cell(following, key_idx)
                if next_key and not MARKER_PATTERN.match(next_key) and not CHILD_PATTERN.match(next_key):
                    statement = next_key
                    status = _cell(following, status_col)
                    break

            current = {
                "lead_number": f"LEAD {number}",
                "lead_statement": statement,
                "status": status or "Unknown",
                "activities": [],
            }
            leads.append(current)

        elif kind is RowKind.CHILD:
            if current is None:
                logger.debug("Dropping activity with no enclosing lead: %s", key)
                continue
            activity = CHILD_PATTERN.sub("", key).strip()
            if not activity:
                continue
            current["activities"].append({
                "activity": activity,
                "notes": _cell(row, notes_col),
                "status": _cell(row, status_col) or "Unknown",
            })

    return leads


def parse_export(text: str, schema: Schema) -> list[dict]:
    """Split, tokenise and map a whole CSV export for one schema.

    The first non-blank line is the header. Fewer than two lines means
    there is no data, which is not an error.
    """
    lines = split_records(text) if schema.multiline else split_lines(text)
    if len(lines) < 2:
        logger.warning("%s export has no data rows", schema.kind)
        return []

    header_row = schema.parse(lines[0])
    rows = [schema.parse(line) for line in lines[1:]]

    if schema.grouped:
        return map_grouped_rows(rows, header_row, schema)
    return map_rows(rows, header_row, schema)


def find_employee(records: list[dict], employee_id: str) -> dict | None:
    """Find a bonus profile by id, with or without the year dash.

    "2025-001" and "2025001" refer to the same employee.
    """
    wanted = employee_id.strip()
    wanted_plain = wanted.replace("-", "")
    for record in records:
        candidate = record.get("employee_id", "").strip()
        if candidate == wanted or candidate.replace("-", "") == wanted_plain:
            return record
    return None
