import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

from profile_intake.config import DEFAULT_CLIENT_NAME
from profile_intake.errors import UpstreamServiceError, ValidationError
from profile_intake.form_schema import PRIMARY_IMAGE_FIELD, validate_fields, validate_files
from profile_intake.google_drive_api_client import UploadedDriveFile
from profile_intake.models import Status, Submission, UploadedFile, to_iso_z

logger = logging.getLogger(__name__)

# (form field, Drive filename prefix)
UPLOAD_FIELDS = [
    (PRIMARY_IMAGE_FIELD, "profile"),
    ("additional_images", "additional"),
    ("extra_images", "extra"),
]


def default_thank_you(name: str) -> str:
    return f"Thank you, {name}! We really appreciate you taking the time to share your information."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubmissionResult:
    message: str
    submission: Submission
    failed_files: List[str] = field(default_factory=list)


class SubmissionOrchestrator:
    def __init__(self, sheets_client, drive_client, root_folder_id, text_assist_client=None,
                 client_name=DEFAULT_CLIENT_NAME, clock=utc_now):
        self.sheets_client = sheets_client
        self.drive_client = drive_client
        self.root_folder_id = root_folder_id
        self.text_assist_client = text_assist_client
        self.client_name = client_name
        self.clock = clock

    def submit(self, fields: Dict[str, str], files: Dict[str, List[UploadedFile]]) -> SubmissionResult:
        # Everything is validated before the first Drive call.
        name, email = fields.get("name", ""), fields.get("email", "")
        if not name or not email:
            raise ValidationError("Name and email are required", field="name" if not name else "email")
        if not [f for f in files.get(PRIMARY_IMAGE_FIELD, []) if f is not None and f.size > 0]:
            raise ValidationError("Profile photo is required", field=PRIMARY_IMAGE_FIELD)
        validate_fields(fields)
        validate_files(files)

        now = self.clock()
        logger.info("Creating submission folder for %s", name)
        folder_id = self.drive_client.get_or_create_submission_folder(
            self.root_folder_id, self.client_name, name, now.date()
        )

        urls, failed_files = self._upload_all(folder_id, files)

        profile_urls = urls[PRIMARY_IMAGE_FIELD]
        submission = Submission(
            timestamp=to_iso_z(now),
            name=name,
            email=email,
            phone_extension=fields.get("phone_extension", ""),
            role=fields.get("role", ""),
            department=fields.get("department", ""),
            years_experience=fields.get("years_experience", ""),
            specialty=fields.get("specialty", ""),
            credentials=fields.get("credentials", ""),
            favorite_service=fields.get("favorite_service", ""),
            personal_quote=fields.get("personal_quote", ""),
            bio_short=fields.get("bio_short", ""),
            bio_full=fields.get("bio_full", ""),
            profile_photo_url=profile_urls[0] if profile_urls else "",
            additional_images_urls=urls["additional_images"],
            anything_else=fields.get("anything_else", ""),
            extra_images_urls=urls["extra_images"],
            status=Status.NEW,
        )

        self.sheets_client.append_submission(submission)
        logger.info("Submission row appended for %s (%s file(s) failed)", name, len(failed_files))

        message = self._thank_you_message(name, fields.get("role", ""))
        return SubmissionResult(message=message, submission=submission, failed_files=failed_files)

    def upload_single(self, file: UploadedFile, submitter_name: str, client_name: str = None) -> UploadedDriveFile:
        if file is None or file.size == 0:
            raise ValidationError("File required", field="file")
        if not submitter_name:
            raise ValidationError("Submitter name required", field="submitterName")

        folder_id = self.drive_client.get_or_create_submission_folder(
            self.root_folder_id, client_name or self.client_name, submitter_name, self.clock().date()
        )
        return self.drive_client.upload_file(folder_id, file.filename, file.mime_type, file.data)

    # ------------------------
    # Helpers
    # ------------------------
    def _upload_all(self, folder_id, files):
        """
        Uploads files one at a time. A failed upload only drops that file's URL.
        Returns ({field: [url, ...]}, [failed filename, ...]).
        """
        urls = {field_name: [] for field_name, _ in UPLOAD_FIELDS}
        failed_files = []
        for field_name, prefix in UPLOAD_FIELDS:
            for upload in files.get(field_name, []):
                if upload is None or upload.size == 0:
                    continue
                drive_name = f"{prefix}-{upload.filename}"
                try:
                    result = self.drive_client.upload_file(folder_id, drive_name, upload.mime_type, upload.data)
                except UpstreamServiceError as exc:
                    logger.warning("Upload of %s failed, leaving it out of the row: %s", drive_name, exc)
                    failed_files.append(upload.filename)
                    continue
                urls[field_name].append(result.url)
        return urls, failed_files

    def _thank_you_message(self, name, role):
        if self.text_assist_client is None:
            return default_thank_you(name)
        try:
            return self.text_assist_client.generate_thank_you(name, role or None)
        except UpstreamServiceError:
            logger.exception("Failed to generate thank you message")
            return default_thank_you(name)
