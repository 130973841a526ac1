"""Tests for remote spreadsheet connectors."""

from io import BytesIO

import httpx
import pytest
from openpyxl import Workbook

from sheet_search.exceptions import (
    ConnectorError,
    InvalidUrlError,
    PrivateResourceError,
)
from sheet_search.sheets.connectors import (
    BaseConnector,
    DirectDownloadConnector,
    GoogleSheetsConnector,
    connector_for,
    direct_download_url,
    extract_gid,
    extract_sheet_id,
    google_export_url,
    google_sheet_name,
    is_google_sheets_url,
)
from sheet_search.sheets.models import SheetSource

SHEET_URL = "https://docs.google.com/spreadsheets/d/1AbCdEfGhIjK_lm-no/edit#gid=42"


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestGoogleUrlHelpers:
    """Tests for Google Sheets URL parsing."""

    def test_is_google_sheets_url(self) -> None:
        """Test Google Sheets links are recognised."""
        assert is_google_sheets_url(SHEET_URL)
        assert not is_google_sheets_url("https://contoso.sharepoint.com/x.xlsx")

    def test_extract_ids(self) -> None:
        """Test the spreadsheet id and gid are extracted."""
        assert extract_sheet_id(SHEET_URL) == "1AbCdEfGhIjK_lm-no"
        assert extract_gid(SHEET_URL) == "42"
        assert extract_gid("https://docs.google.com/spreadsheets/d/abc/edit") == "0"
        assert extract_sheet_id("https://example.com/nothing") is None

    def test_export_url(self) -> None:
        """Test the CSV export URL keeps the tab."""
        assert google_export_url(SHEET_URL) == (
            "https://docs.google.com/spreadsheets/d/1AbCdEfGhIjK_lm-no/export?format=csv&gid=42"
        )

    def test_export_url_without_id(self) -> None:
        """Test links without an id are invalid."""
        with pytest.raises(InvalidUrlError):
            google_export_url("https://docs.google.com/spreadsheets/")

    def test_sheet_name(self) -> None:
        """Test names come from the title parameter or the id."""
        assert google_sheet_name(SHEET_URL) == "Google Sheet (1AbCdEfG...)"
        titled = "https://docs.google.com/spreadsheets/d/abc/edit?title=Q3%20Budget"
        assert google_sheet_name(titled) == "Q3 Budget"


class TestDirectDownloadUrl:
    """Tests for sharing link conversion."""

    def test_appends_download_flag(self) -> None:
        """Test download=1 is added with the right separator."""
        assert direct_download_url("https://x.sharepoint.com/f.xlsx") == (
            "https://x.sharepoint.com/f.xlsx?download=1"
        )
        assert direct_download_url("https://x.sharepoint.com/f.xlsx?e=abc") == (
            "https://x.sharepoint.com/f.xlsx?e=abc&download=1"
        )

    def test_guest_access_unchanged(self) -> None:
        """Test guestaccess links are already direct."""
        url = "https://x.sharepoint.com/guestaccess.aspx?docid=1"
        assert direct_download_url(url) == url


class TestGoogleSheetsConnector:
    """Tests for GoogleSheetsConnector."""

    def test_load(self) -> None:
        """Test a public sheet loads through the CSV export."""
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text="Title,,Year\nAdobe Summit,x,2024\n")

        connector = GoogleSheetsConnector(mock_client(handler))
        sheets = connector.load(SHEET_URL)

        assert requested == [google_export_url(SHEET_URL)]
        assert len(sheets) == 1
        sheet = sheets[0]
        assert sheet.source is SheetSource.GOOGLE_SHEETS
        assert sheet.name == "Google Sheet (1AbCdEfG...)"
        assert sheet.data == [["Adobe Summit", "x", "2024"]]
        assert sheet.original_url == SHEET_URL
        assert sheet.metadata["loadMethod"] == "csv-export"
        assert sheet.metadata["gid"] == "42"

    @pytest.mark.parametrize("status", [401, 403])
    def test_private_sheet(self, status: int) -> None:
        """Test auth failures raise PrivateResourceError."""
        connector = GoogleSheetsConnector(mock_client(lambda r: httpx.Response(status)))
        with pytest.raises(PrivateResourceError):
            connector.load(SHEET_URL)

    def test_sign_in_page(self) -> None:
        """Test an HTML sign-in page is treated as private."""
        html = "<!DOCTYPE html><html><body>Sign in</body></html>"
        connector = GoogleSheetsConnector(mock_client(lambda r: httpx.Response(200, text=html)))
        with pytest.raises(PrivateResourceError):
            connector.load(SHEET_URL)

    def test_server_error(self) -> None:
        """Test other HTTP failures raise ConnectorError."""
        connector = GoogleSheetsConnector(mock_client(lambda r: httpx.Response(500)))
        with pytest.raises(ConnectorError) as exc_info:
            connector.load(SHEET_URL)
        assert not isinstance(exc_info.value, PrivateResourceError)

    def test_transport_error_retried(self) -> None:
        """Test transient failures are retried before giving up."""
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            raise httpx.ConnectError("refused", request=request)

        connector = GoogleSheetsConnector(mock_client(handler), max_attempts=2, min_wait=0)
        with pytest.raises(ConnectorError):
            connector.load(SHEET_URL)
        assert len(attempts) == 2

    def test_transport_error_recovers(self) -> None:
        """Test a retry after a transient failure succeeds."""
        responses = iter([None, "A\n1\n"])

        def handler(request: httpx.Request) -> httpx.Response:
            body = next(responses)
            if body is None:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, text=body)

        connector = GoogleSheetsConnector(mock_client(handler), max_attempts=3, min_wait=0)
        assert connector.load(SHEET_URL)[0].data == [["1"]]


class TestDirectDownloadConnector:
    """Tests for DirectDownloadConnector."""

    def test_load_workbook(self) -> None:
        """Test a shared workbook yields one sheet per worksheet."""
        workbook = Workbook()
        workbook.active.title = "Videos"
        workbook.active.append(["Title"])
        workbook.active.append(["Adobe Summit"])
        buffer = BytesIO()
        workbook.save(buffer)

        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, content=buffer.getvalue())

        url = "https://contoso.sharepoint.com/sites/team/Shared-Documents/Catalog.xlsx"
        sheets = DirectDownloadConnector(mock_client(handler)).load(url)

        assert requested == [url + "?download=1"]
        assert sheets[0].name == "Catalog - Videos"
        assert sheets[0].source is SheetSource.SHAREPOINT_DIRECT
        assert sheets[0].filename == "Catalog.xlsx"
        assert sheets[0].metadata["worksheetName"] == "Videos"
        assert sheets[0].metadata["loadMethod"] == "direct-download"

    def test_url_without_extension(self) -> None:
        """Test links without a file type are rejected before fetching."""
        connector = DirectDownloadConnector(mock_client(lambda r: httpx.Response(200)))
        with pytest.raises(InvalidUrlError):
            connector.load("https://contoso.sharepoint.com/:x:/s/team/abc")


class TestConnectorFor:
    """Tests for connector selection."""

    def test_google(self) -> None:
        """Test Google links get the CSV export connector."""
        assert isinstance(connector_for(SHEET_URL), GoogleSheetsConnector)

    def test_other(self) -> None:
        """Test other http links get the direct download connector."""
        assert isinstance(
            connector_for("https://contoso.sharepoint.com/f.xlsx"), DirectDownloadConnector
        )

    @pytest.mark.parametrize("url", ["ftp://example.com/f.csv", "not a url", "/local/f.csv"])
    def test_invalid(self, url: str) -> None:
        """Test non-http URLs are rejected."""
        with pytest.raises(InvalidUrlError):
            connector_for(url)

    def test_base_connector_is_abstract(self) -> None:
        """Test connectors must implement load."""
        with pytest.raises(TypeError):
            BaseConnector()  # type: ignore[abstract]
