"""Google Sheets API client."""
import logging
import re
from functools import cached_property

from google.oauth2.credentials import Credentials

from event_manager.google.client import build_service, upstream_call

logger = logging.getLogger(__name__)

# https://docs.google.com/spreadsheets/d/{id}/edit... or a bare id
SPREADSHEET_URL_PATTERNS = [
    re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)"),
    re.compile(r"^([a-zA-Z0-9-_]+)$"),
]


def parse_spreadsheet_id(url: str) -> str | None:
    """Extract a spreadsheet id from a Google Sheets URL or a bare id."""
    if not url:
        return None
    url = url.strip()
    for pattern in SPREADSHEET_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


class SheetsBackend:
    """Spreadsheet operations on behalf of one organizer."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    @cached_property
    def service(self):
        return build_service("sheets", "v4", self.credentials)

    def create_workbook(self, title: str, tabs: dict[str, list[str]]) -> str:
        """
        Create a spreadsheet with one tab per entry of ``tabs``.

        Each tab gets its header row written, frozen and bolded.

        Returns:
            The new spreadsheet id.
        """
        body = {
            "properties": {"title": title},
            "sheets": [
                {"properties": {"title": name, "gridProperties": {"frozenRowCount": 1}}}
                for name in tabs
            ],
        }

        with upstream_call("create spreadsheet"):
            spreadsheet = self.service.spreadsheets().create(body=body).execute()
            spreadsheet_id = spreadsheet["spreadsheetId"]

            for name, headers in tabs.items():
                self.service.spreadsheets().values().update(
                    spreadsheetId=spreadsheet_id,
                    range=f"{name}!A1",
                    valueInputOption="RAW",
                    body={"values": [headers]},
                ).execute()

            bold_requests = [
                {
                    "repeatCell": {
                        "range": {
                            "sheetId": sheet["properties"]["sheetId"],
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                        },
                        "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                        "fields": "userEnteredFormat.textFormat.bold",
                    }
                }
                for sheet in spreadsheet.get("sheets", [])
            ]
            if bold_requests:
                self.service.spreadsheets().batchUpdate(
                    spreadsheetId=spreadsheet_id,
                    body={"requests": bold_requests},
                ).execute()

        logger.info(f"Created spreadsheet {spreadsheet_id}: {title}")
        return spreadsheet_id

    def append_rows(self, spreadsheet_id: str, tab: str, rows: list[list]) -> None:
        """Append rows after the last non-empty row of a tab."""
        if not rows:
            return
        with upstream_call(f"append rows to {tab}"):
            self.service.spreadsheets().values().append(
                spreadsheetId=spreadsheet_id,
                range=f"{tab}!A:A",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            ).execute()

    def read_range(self, spreadsheet_id: str, range_expr: str) -> list[list]:
        """Read cell values in A1 notation. Trailing empty cells are omitted."""
        with upstream_call(f"read range {range_expr}"):
            result = (
                self.service.spreadsheets()
                .values()
                .get(spreadsheetId=spreadsheet_id, range=range_expr)
                .execute()
            )
        return result.get("values", [])

    def update_range(self, spreadsheet_id: str, range_expr: str, rows: list[list]) -> None:
        """Overwrite the cells of a range in A1 notation."""
        with upstream_call(f"update range {range_expr}"):
            self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=range_expr,
                valueInputOption="RAW",
                body={"values": rows},
            ).execute()
