from datetime import datetime, timezone
from unittest import mock

import pytest

from profile_intake.config import Settings
from profile_intake.errors import UpstreamServiceError
from profile_intake.google_drive_api_client import GoogleDriveApiClient, UploadedDriveFile
from profile_intake.models import UploadedFile


class InMemoryDriveClient(GoogleDriveApiClient):
    """Drive client whose folders and files live in dicts instead of Drive."""

    def __init__(self, failing_names=()):
        super().__init__(token_provider=None)
        self.folders = {}  # id -> (parent_id, name)
        self.files = {}  # id -> (folder_id, name, mime_type, data)
        self.failing_names = set(failing_names)
        self.calls = []

    def find_folder(self, parent_id, name):
        self.calls.append(("find_folder", parent_id, name))
        for folder_id, (parent, folder_name) in self.folders.items():
            if parent == parent_id and folder_name == name:
                return folder_id
        return None

    def create_folder(self, parent_id, name):
        self.calls.append(("create_folder", parent_id, name))
        folder_id = f"folder-{len(self.folders) + 1}"
        self.folders[folder_id] = (parent_id, name)
        return folder_id

    def upload_file(self, folder_id, filename, mime_type, data):
        self.calls.append(("upload_file", folder_id, filename))
        if filename in self.failing_names:
            raise UpstreamServiceError(f"upload of {filename} failed")
        file_id = f"file-{len(self.files) + 1}"
        self.files[file_id] = (folder_id, filename, mime_type, data)
        return UploadedDriveFile(id=file_id, url=self.view_url(file_id))


class FixedClock:
    def __init__(self, when=None):
        self.when = when or datetime(2025, 3, 14, 15, 9, 26, tzinfo=timezone.utc)

    def __call__(self):
        return self.when


@pytest.fixture
def drive():
    return InMemoryDriveClient()


@pytest.fixture
def sheets():
    return mock.Mock(name="sheets")


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def photo():
    return UploadedFile(filename="me.jpg", mime_type="image/jpeg", data=b"\xff\xd8jpeg")


@pytest.fixture
def settings():
    return Settings(
        admin_password="correct horse",
        openai_api_key="sk-test",
        google_service_account_json='{"client_email": "svc@example.iam.gserviceaccount.com"}',
        google_sheet_id="sheet-123",
        google_drive_folder_id="root-folder",
    )
