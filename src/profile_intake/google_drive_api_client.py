# google_drive_api_client.py
import io
import logging
import re
from dataclasses import dataclass
from datetime import date

import httplib2
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError
from googleapiclient.http import MediaIoBaseUpload

from profile_intake.config import DRIVE_VIEW_URL
from profile_intake.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# httplib2 transport errors are plain Exceptions, not OSError.
DRIVE_ERRORS = (
    GoogleApiClientError,
    httplib2.HttpLib2Error,
    google_auth_exceptions.TransportError,
    OSError,
)


@dataclass
class UploadedDriveFile:
    id: str
    url: str


def slugify(value: str) -> str:
    value = value.lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def _quote(value: str) -> str:
    # Drive query strings are single-quoted; escape backslashes and quotes.
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveApiClient:
    def __init__(self, token_provider):
        self.token_provider = token_provider

    def _authorize_drive(self):
        return build("drive", "v3", credentials=self.token_provider.credentials(), cache_discovery=False)

    def _execute(self, request, action):
        try:
            return request.execute()
        except DRIVE_ERRORS as exc:
            raise UpstreamServiceError(f"Drive {action} failed: {exc}") from exc

    # ------------------------
    # Folders
    # ------------------------
    def find_folder(self, parent_id, name):
        """
        Returns the id of the first non-trashed folder called name directly
        under parent_id, or None.
        """
        query = (
            f"name='{_quote(name)}' and '{_quote(parent_id)}' in parents "
            f"and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        )
        drive_service = self._authorize_drive()
        response = self._execute(
            drive_service.files().list(
                q=query,
                fields="files(id, name)",
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            ),
            "folder lookup",
        )
        files = response.get("files", [])
        if not files:
            return None
        return files[0]["id"]

    def create_folder(self, parent_id, name):
        drive_service = self._authorize_drive()
        folder = self._execute(
            drive_service.files().create(
                body={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
                fields="id",
                supportsAllDrives=True,
            ),
            "folder create",
        )
        return folder.get("id", "")

    def get_or_create_submission_folder(self, root_folder_id, client_name, submitter_name, day: date):
        """
        Finds (or creates) the client folder under the root, then always creates
        a fresh '{slug}-{YYYY-MM-DD}' folder for this submission inside it.
        """
        client_folder_id = self.find_folder(root_folder_id, client_name)
        if not client_folder_id:
            logger.info("Creating client folder '%s'", client_name)
            client_folder_id = self.create_folder(root_folder_id, client_name)

        folder_name = f"{slugify(submitter_name)}-{day.isoformat()}"
        submission_folder_id = self.create_folder(client_folder_id, folder_name)
        logger.info("Submission folder '%s' created: %s", folder_name, submission_folder_id)
        return submission_folder_id

    # ------------------------
    # Files
    # ------------------------
    def upload_file(self, folder_id, filename, mime_type, data: bytes) -> UploadedDriveFile:
        """
        Uploads data as filename into folder_id, makes it readable by anyone
        with the link and returns its id and direct view URL.
        """
        drive_service = self._authorize_drive()
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type or "application/octet-stream", resumable=False)
        created = self._execute(
            drive_service.files().create(
                body={"name": filename, "parents": [folder_id]},
                media_body=media,
                fields="id, webViewLink, webContentLink",
                supportsAllDrives=True,
            ),
            f"upload of {filename}",
        )
        file_id = created.get("id", "")

        self.make_public(file_id, drive_service)
        return UploadedDriveFile(id=file_id, url=self.view_url(file_id))

    def make_public(self, file_id, drive_service=None):
        drive_service = drive_service or self._authorize_drive()
        self._execute(
            drive_service.permissions().create(
                fileId=file_id,
                body={"role": "reader", "type": "anyone"},
                supportsAllDrives=True,
            ),
            f"permission change on {file_id}",
        )

    @staticmethod
    def view_url(file_id):
        return DRIVE_VIEW_URL.format(file_id=file_id)
