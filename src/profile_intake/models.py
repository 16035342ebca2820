import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from profile_intake.errors import ValidationError

logger = logging.getLogger(__name__)

URL_SEPARATOR = ", "
ROW_WIDTH = 18


class Status(str, Enum):
    NEW = "New"
    REVIEWED = "Reviewed"
    ADDED = "Added"


def parse_status(value) -> Status:
    try:
        return Status(value)
    except ValueError:
        raise ValidationError("Invalid status", field="status") from None


@dataclass
class UploadedFile:
    filename: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class Submission:
    timestamp: str
    name: str
    email: str
    phone_extension: str = ""
    role: str = ""
    department: str = ""
    years_experience: str = ""
    specialty: str = ""
    credentials: str = ""
    favorite_service: str = ""
    personal_quote: str = ""
    bio_short: str = ""
    bio_full: str = ""
    profile_photo_url: str = ""
    additional_images_urls: List[str] = field(default_factory=list)
    anything_else: str = ""
    extra_images_urls: List[str] = field(default_factory=list)
    status: Status = Status.NEW
    row_index: Optional[int] = None

    def to_row(self) -> List[str]:
        """Column order A..R of the Team Members sheet."""
        return [
            self.timestamp,
            self.name,
            self.email,
            self.phone_extension,
            self.role,
            self.department,
            self.years_experience,
            self.specialty,
            self.credentials,
            self.favorite_service,
            self.personal_quote,
            self.bio_short,
            self.bio_full,
            self.profile_photo_url,
            URL_SEPARATOR.join(self.additional_images_urls),
            self.anything_else,
            URL_SEPARATOR.join(self.extra_images_urls),
            self.status.value,
        ]

    @classmethod
    def from_row(cls, row, row_index: int) -> "Submission":
        cells = list(row) + [""] * (ROW_WIDTH - len(row))
        status = cells[17] or Status.NEW.value
        try:
            status = Status(status)
        except ValueError:
            # Hand edits in the sheet; keep the row readable.
            logger.warning("Row %s has unknown status %r, reading it as %s", row_index, status, Status.NEW.value)
            status = Status.NEW
        return cls(
            timestamp=cells[0],
            name=cells[1],
            email=cells[2],
            phone_extension=cells[3],
            role=cells[4],
            department=cells[5],
            years_experience=cells[6],
            specialty=cells[7],
            credentials=cells[8],
            favorite_service=cells[9],
            personal_quote=cells[10],
            bio_short=cells[11],
            bio_full=cells[12],
            profile_photo_url=cells[13],
            additional_images_urls=_split_urls(cells[14]),
            anything_else=cells[15],
            extra_images_urls=_split_urls(cells[16]),
            status=status,
            row_index=row_index,
        )

    def to_dict(self) -> dict:
        return {
            "rowIndex": self.row_index,
            "timestamp": self.timestamp,
            "name": self.name,
            "email": self.email,
            "phoneExtension": self.phone_extension,
            "role": self.role,
            "department": self.department,
            "yearsExperience": self.years_experience,
            "specialty": self.specialty,
            "credentials": self.credentials,
            "favoriteService": self.favorite_service,
            "personalQuote": self.personal_quote,
            "bioShort": self.bio_short,
            "bioFull": self.bio_full,
            "profilePhotoUrl": self.profile_photo_url,
            "additionalImagesUrls": URL_SEPARATOR.join(self.additional_images_urls),
            "anythingElse": self.anything_else,
            "extraImagesUrls": URL_SEPARATOR.join(self.extra_images_urls),
            "status": self.status.value,
        }

    def sort_key(self) -> datetime:
        try:
            return parse_iso_z(self.timestamp)
        except ValueError:
            return datetime.min.replace(tzinfo=timezone.utc)


def _split_urls(cell: str) -> List[str]:
    return [url.strip() for url in cell.split(",") if url.strip()]


# Helper: robust ISO parsing that accepts trailing 'Z'
def parse_iso_z(s: str) -> datetime:
    if not s:
        raise ValueError("Empty timestamp")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# Helper: UTC ISO timestamp ending with 'Z'
def to_iso_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
