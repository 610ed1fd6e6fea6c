"""
Line-level CSV tokenising for published sheet exports.

This is a simplified dialect: a double quote toggles quoted mode and is
dropped from the output, and a comma splits fields only outside quotes.
Doubled quotes ("") inside a quoted field are NOT un-escaped to a literal
quote character. Upgrade here if a source ever starts relying on that.

Two variants exist because callers depend on the difference:
parse_line keeps whitespace as-is, parse_line_trimmed strips every field.
"""


def _scan(line: str, trim: bool) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            value = "".join(current)
            fields.append(value.strip() if trim else value)
            current = []
        else:
            current.append(char)

    # Final field is always flushed, even when empty
    value = "".join(current)
    fields.append(value.strip() if trim else value)
    return fields


def parse_line(line: str) -> list[str]:
    """Split one CSV record into fields without trimming.

    An empty line yields [""]; a trailing comma yields a trailing empty
    field; an unterminated quote makes the rest of the line one field.
    """
    return _scan(line, trim=False)


def parse_line_trimmed(line: str) -> list[str]:
    """Split one CSV record into fields, stripping whitespace from each."""
    return _scan(line, trim=True)


def split_lines(text: str) -> list[str]:
    """Split export text into lines, dropping blank ones.

    Carriage returns left over from CRLF exports are removed.
    """
    lines = []
    for raw in text.split("\n"):
        line = raw.rstrip("\r")
        if line.strip():
            lines.append(line)
    return lines


def split_records(text: str) -> list[str]:
    """Split export text into records, keeping newlines inside quotes.

    Form responses (free-text "Details" answers) can span several physical
    lines; those stay in one record. Blank records are dropped.
    """
    records: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char in "\r\n" and not in_quotes:
            record = "".join(current)
            if record.strip():
                records.append(record)
            current = []
        else:
            current.append(char)

    record = "".join(current)
    if record.strip():
        records.append(record)
    return records
