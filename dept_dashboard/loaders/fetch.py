"""
Fetch-and-parse orchestration for published sheet exports.

A fetch either yields records or a structured failure; it never raises
for transport or content problems. Row-level problems are absorbed by the
mapper, so a partially broken sheet still produces the good rows.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from ..config import HTML_MARKERS, HTML_SNIFF_CHARS, REQUEST_HEADERS
from ..errors import PipelineError, TransportFailure, WrongContentType
from .mapper import parse_export
from .schemas import get_schema

logger = logging.getLogger(__name__)

_SHEET_ID = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")
_GID = re.compile(r"gid=(\d+)")

_STATUS_HINTS = {
    403: "Access denied. Make sure the Google Sheet is published to the web and viewable by anyone with the link.",
    404: "Sheet not found. Check that the Google Sheet URL is correct and the sheet exists.",
}


@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of one fetch: records on success, error on failure.
    """

    source: str
    kind: str
    records: list[dict] = field(default_factory=list)
    error: PipelineError | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None


def build_csv_url(sheet_url: str, gid: str | None = None) -> str:
    """Turn a Google Sheets editor URL into its CSV export URL.

    Published ``output=csv`` URLs are returned unchanged. The gid comes
    from the argument, else from the URL, else the first tab.
    """
    if "output=csv" in sheet_url:
        return sheet_url

    match = _SHEET_ID.search(sheet_url)
    if not match:
        raise ValueError(f"Invalid Google Sheets URL: {sheet_url}")

    if gid is None:
        gid_match = _GID.search(sheet_url)
        gid = gid_match.group(1) if gid_match else "0"
    return f"https://docs.google.com/spreadsheets/d/{match.group(1)}/export?format=csv&gid={gid}"


def looks_like_html(text: str) -> bool:
    """True when the body starts like an HTML page rather than CSV."""
    head = text.lstrip()[:HTML_SNIFF_CHARS].lower()
    return any(marker in head for marker in HTML_MARKERS)


def _get(session: requests.Session, url: str, timeout: float | None) -> requests.Response:
    # Timestamp parameter defeats intermediary caches
    params = {"timestamp": int(time.time() * 1000)}
    try:
        return session.get(url, params=params, headers=REQUEST_HEADERS, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Sheet request failed url=%s error=%s", url, exc)
        raise TransportFailure(f"Could not reach the sheet: {exc}") from exc


def fetch_csv_text(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> str:
    """GET a sheet export and return its body as text.

    Raises
    ------
    TransportFailure : network error or non-2xx status.
    WrongContentType : the body is an HTML page.
    """
    if session is None:
        with requests.Session() as owned:
            response = _get(owned, url, timeout)
    else:
        response = _get(session, url, timeout)

    if not response.ok:
        status = response.status_code
        hint = _STATUS_HINTS.get(
            status,
            "Make sure the Google Sheet is published to the web (File > Share > Publish to web).",
        )
        logger.error("Sheet request failed url=%s status=%s", url, status)
        raise TransportFailure(
            f"Failed to fetch data: {status} {response.reason or ''}".rstrip() + f". {hint}",
            status_code=status,
        )

    # Sheets does not always send a charset; requests would assume latin-1
    if "charset" not in response.headers.get("Content-Type", "").lower():
        response.encoding = "utf-8"
    text = response.text.lstrip("\ufeff")

    if looks_like_html(text):
        logger.warning("Received HTML instead of CSV from %s", url)
        raise WrongContentType(
            "Received HTML instead of CSV. The Google Sheet may not be published to the web: "
            "File > Share > Publish to web > CSV."
        )

    return text


def fetch_and_parse(
    url: str,
    kind: str,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> FetchResult:
    """Fetch one sheet export and map it with the schema for ``kind``.

    Transport and content-type failures come back as ``FetchResult.error``;
    an unknown ``kind`` is a programming error and raises KeyError.
    """
    schema = get_schema(kind)

    try:
        text = fetch_csv_text(url, session=session, timeout=timeout)
    except PipelineError as exc:
        return FetchResult(source=url, kind=kind, error=exc)

    records = parse_export(text, schema)
    logger.info("Parsed %d %s records from %s", len(records), kind, url)
    return FetchResult(source=url, kind=kind, records=records)
