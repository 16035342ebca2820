# google_sheets_api_client.py
import logging

import gspread
import requests

from profile_intake.config import SHEET_NAME, SHEET_RANGE, STATUS_COLUMN
from profile_intake.errors import UpstreamServiceError, ValidationError
from profile_intake.models import Status, Submission

logger = logging.getLogger(__name__)

USER_ENTERED = {"valueInputOption": "USER_ENTERED"}


class GoogleSheetsApiClient:
    def __init__(self, token_provider, sheet_id):
        self.token_provider = token_provider
        self.sheet_id = sheet_id

    def _authorize_gsheets(self):
        # Re-authorized on every call so an expired bearer token is never reused.
        return gspread.authorize(self.token_provider.credentials())

    def _spreadsheet(self):
        return self._authorize_gsheets().open_by_key(self.sheet_id)

    # ------------------------
    # Ranges
    # ------------------------
    def append_row(self, range_name, values):
        """
        Appends one row after the last row of the table found in range_name.
        """
        try:
            self._spreadsheet().values_append(range_name, USER_ENTERED, {"values": [list(values)]})
        except (gspread.exceptions.GSpreadException, requests.RequestException) as exc:
            raise UpstreamServiceError(f"Append to {range_name} failed: {exc}") from exc

    def get_values(self, range_name):
        """
        Returns the rows of range_name as lists of strings. Trailing empty cells
        are dropped by the API, so rows may be shorter than the range.
        """
        try:
            response = self._spreadsheet().values_get(range_name)
        except (gspread.exceptions.GSpreadException, requests.RequestException) as exc:
            raise UpstreamServiceError(f"Read of {range_name} failed: {exc}") from exc
        return response.get("values", [])

    def update_cell(self, range_name, value):
        try:
            self._spreadsheet().values_update(range_name, USER_ENTERED, {"values": [[value]]})
        except (gspread.exceptions.GSpreadException, requests.RequestException) as exc:
            raise UpstreamServiceError(f"Update of {range_name} failed: {exc}") from exc

    # ------------------------
    # Submissions
    # ------------------------
    def append_submission(self, submission: Submission):
        self.append_row(SHEET_RANGE, submission.to_row())

    def list_submissions(self, status=None):
        """
        Reads every submission row (skipping the header), optionally keeps only
        one status, newest first.
        """
        rows = self.get_values(SHEET_RANGE)
        logger.info("Sheet data rows: %s", len(rows))

        # Row 1 is the header, so data starts at sheet row 2.
        submissions = [Submission.from_row(row, row_index) for row_index, row in enumerate(rows[1:], start=2)]
        if status is not None:
            submissions = [s for s in submissions if s.status == status]

        submissions.sort(key=lambda s: s.sort_key(), reverse=True)
        return submissions

    def update_status(self, row_index: int, status: Status):
        if row_index < 2:
            raise ValidationError("Row index must point at a data row", field="rowIndex")
        self.update_cell(f"{SHEET_NAME}!{STATUS_COLUMN}{row_index}", status.value)


# Sheet layout
"""
| Col | A         | B    | C     | D         | E    | F          | G          | H         | I           | J            |
| --- | --------- | ---- | ----- | --------- | ---- | ---------- | ---------- | --------- | ----------- | ------------ |
| 1   | Timestamp | Name | Email | Extension | Role | Department | Years Exp. | Specialty | Credentials | Fav. Service |

| Col | K     | L         | M        | N             | O                 | P             | Q            | R      |
| --- | ----- | --------- | -------- | ------------- | ----------------- | ------------- | ------------ | ------ |
| 1   | Quote | Short Bio | Full Bio | Profile Photo | Additional Images | Anything Else | Extra Images | Status |
...
"""
