"""
Department Dashboard: spreadsheet-backed analytics backend

Fetches published Google Sheets CSV exports for each department, parses them
into typed records, and derives dashboard-ready aggregates (weekly buckets,
resolution times, completion and satisfaction rates).

To add a new department source:
    Add a Schema entry to dept_dashboard.loaders.schemas.SCHEMAS describing
    the key column, header labels and the positional field table, then add
    its URL to config.SOURCE_URLS.

To connect to Streamlit/Dash:
    Build one TTLCache, call fetch_with_cache(url, kind, cache=cache) and pass
    the records to dashboard.get_weekly_overview(kind, records). Everything
    returned is plain data (dicts, lists, DataFrames).
"""
