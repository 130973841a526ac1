"""Remote spreadsheet connectors.

Only anonymous access is supported: public Google Sheets (CSV export) and
public SharePoint/OneDrive links that allow a direct download. Both
produce the same sheets a local upload would.
"""

import re
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import parse_qs, unquote, urlparse

import httpx

from sheet_search.exceptions import (
    ConnectorError,
    InvalidUrlError,
    PrivateResourceError,
)
from sheet_search.sheets.decoder import decode, decode_csv_text
from sheet_search.sheets.models import Sheet, SheetSource, sheets_from_tables
from sheet_search.utils.logging import get_logger
from sheet_search.utils.retry import with_retry

logger = get_logger(__name__)

_SHEET_ID_PATTERNS = [
    re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9-_]+)"),
]
_GID_RE = re.compile(r"[#&?]gid=([0-9]+)")
_GOOGLE_SHEETS_RE = re.compile(r"docs\.google\.com/spreadsheets")


def is_google_sheets_url(url: str) -> bool:
    """Check if URL points at a Google Sheets document."""
    return bool(_GOOGLE_SHEETS_RE.search(url))


def extract_sheet_id(url: str) -> str | None:
    """Extract the Google spreadsheet id from a URL."""
    for pattern in _SHEET_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def extract_gid(url: str) -> str:
    """Extract the tab gid from a URL, defaulting to the first tab."""
    match = _GID_RE.search(url)
    return match.group(1) if match else "0"


def google_export_url(url: str) -> str:
    """Build the CSV export URL for a Google Sheets link.

    Raises:
        InvalidUrlError: If no spreadsheet id can be found.
    """
    sheet_id = extract_sheet_id(url)
    if not sheet_id:
        raise InvalidUrlError(f"Could not extract sheet ID from URL: {url}")
    gid = extract_gid(url)
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"


def google_sheet_name(url: str) -> str:
    """Pick a display name from the ``title`` parameter or the sheet id."""
    query = parse_qs(urlparse(url).query)
    titles = query.get("title")
    if titles and titles[0]:
        return unquote(titles[0])
    sheet_id = extract_sheet_id(url)
    return f"Google Sheet ({sheet_id[:8]}...)" if sheet_id else "Google Sheets Import"


def direct_download_url(url: str) -> str:
    """Turn a SharePoint/OneDrive sharing link into a download link."""
    if "guestaccess.aspx" in url or "download=1" in url:
        return url
    return f"{url}&download=1" if "?" in url else f"{url}?download=1"


class BaseConnector(ABC):
    """Shared HTTP plumbing for connectors."""

    source: SheetSource = SheetSource.UPLOAD

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 3,
        min_wait: float = 1.0,
    ) -> None:
        """Initialize the connector.

        Args:
            client: HTTP client to use. A new one is created per fetch if None.
            timeout: Request timeout in seconds.
            max_attempts: Attempts for transient transport failures.
            min_wait: Initial backoff between attempts (seconds).
        """
        self._client = client
        self.timeout = timeout
        self._get = with_retry(max_attempts=max_attempts, min_wait=min_wait)(
            self._get_once
        )

    def _get_once(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, follow_redirects=True)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, follow_redirects=True)

    def fetch(self, url: str) -> httpx.Response:
        """GET a URL, mapping failures onto connector errors.

        Raises:
            PrivateResourceError: On 401/403.
            ConnectorError: On other HTTP or transport failures.
        """
        try:
            response = self._get(url)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise ConnectorError(f"Network error fetching {url}: {e}") from e

        if response.status_code in (401, 403):
            raise PrivateResourceError(
                f"Access denied ({response.status_code}) for {url}"
            )
        if not response.is_success:
            raise ConnectorError(
                f"Failed to fetch sheet: {response.status_code} "
                f"{response.reason_phrase}"
            )
        return response

    @abstractmethod
    def load(self, url: str) -> list[Sheet]:
        """Fetch a URL and decode it into sheets.

        Raises:
            LoadError: If the resource cannot be fetched or decoded.
        """
        ...


class GoogleSheetsConnector(BaseConnector):
    """Load one tab of a public Google Sheet through its CSV export."""

    source = SheetSource.GOOGLE_SHEETS

    def load(self, url: str) -> list[Sheet]:
        export_url = google_export_url(url)
        response = self.fetch(export_url)

        text = response.text
        # A sign-in page comes back as HTML with a 200
        if "<!DOCTYPE html>" in text[:500] or "<html" in text[:500].lower():
            raise PrivateResourceError(f"Sign-in page returned for {url}")

        table = decode_csv_text(text)
        metadata: dict[str, Any] = {
            "originalUrl": url,
            "exportUrl": export_url,
            "loadMethod": "csv-export",
            "sheetId": extract_sheet_id(url),
            "gid": extract_gid(url),
        }
        return sheets_from_tables(
            [table],
            base_name=google_sheet_name(url),
            source=self.source,
            metadata=metadata,
        )


class DirectDownloadConnector(BaseConnector):
    """Download a publicly shared workbook or CSV file."""

    source = SheetSource.SHAREPOINT_DIRECT

    def load(self, url: str) -> list[Sheet]:
        path = PurePosixPath(unquote(urlparse(url).path))
        if not path.suffix:
            raise InvalidUrlError(f"Cannot tell file type from URL: {url}")

        download_url = direct_download_url(url)
        response = self.fetch(download_url)
        tables = decode(response.content, path.suffix)
        metadata: dict[str, Any] = {
            "originalUrl": url,
            "downloadUrl": download_url,
            "loadMethod": "direct-download",
        }
        return sheets_from_tables(
            tables,
            base_name=path.stem,
            source=self.source,
            filename=path.name,
            metadata=metadata,
        )


def connector_for(url: str, **kwargs: Any) -> BaseConnector:
    """Choose a connector for a URL.

    Raises:
        InvalidUrlError: If the URL is not absolute http(s).
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError(f"Not an http(s) URL: {url}")
    if is_google_sheets_url(url):
        return GoogleSheetsConnector(**kwargs)
    return DirectDownloadConnector(**kwargs)
