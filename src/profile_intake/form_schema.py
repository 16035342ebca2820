"""
Static description of the team-member profile form.

The same schema drives the client (served as JSON) and the server-side field
extraction and validation. Each field has a FieldKind, and each kind has one
validator.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from profile_intake.errors import ValidationError

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
PHONE_PATTERN = re.compile(r"[0-9+\-().x ]+")
NUMBER_PATTERN = re.compile(r"[0-9]+")


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    TEXTAREA = "textarea"
    IMAGE = "image"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind
    required: bool = False
    ai_assist: bool = False
    multiple: bool = False
    max_length: Optional[int] = None
    help_text: str = ""

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "label": self.label,
            "type": self.kind.value,
            "required": self.required,
            "aiAssist": self.ai_assist,
        }
        if self.multiple:
            data["multiple"] = True
        if self.max_length:
            data["maxLength"] = self.max_length
        if self.help_text:
            data["helpText"] = self.help_text
        return data


@dataclass(frozen=True)
class Section:
    title: str
    fields: Tuple[FieldSpec, ...]


FORM_TITLE = "The Fix Team Profile"

SECTIONS = (
    Section("About You", (
        FieldSpec("name", "Full name", FieldKind.TEXT, required=True, max_length=120),
        FieldSpec("email", "Email", FieldKind.EMAIL, required=True, max_length=254),
        FieldSpec("phone_extension", "Phone extension", FieldKind.PHONE, max_length=20),
        FieldSpec("role", "Role / title", FieldKind.TEXT, max_length=120),
        FieldSpec("department", "Department or location", FieldKind.TEXT, max_length=120),
        FieldSpec("years_experience", "Years of experience", FieldKind.NUMBER),
    )),
    Section("Your Expertise", (
        FieldSpec("specialty", "Specialty", FieldKind.TEXT, max_length=200),
        FieldSpec("credentials", "Credentials and certifications", FieldKind.TEXTAREA, max_length=1000),
        FieldSpec("favorite_service", "Favorite service to provide", FieldKind.TEXT, max_length=200),
    )),
    Section("Your Story", (
        FieldSpec("personal_quote", "A quote or motto", FieldKind.TEXT, ai_assist=True, max_length=300),
        FieldSpec("bio_short", "Short bio", FieldKind.TEXTAREA, ai_assist=True, max_length=500,
                  help_text="One or two sentences for team cards."),
        FieldSpec("bio_full", "Full bio", FieldKind.TEXTAREA, ai_assist=True, max_length=5000,
                  help_text="A few paragraphs for your profile page."),
    )),
    Section("Photos", (
        FieldSpec("profile_photo", "Profile photo", FieldKind.IMAGE, required=True),
        FieldSpec("additional_images", "Additional photos", FieldKind.IMAGE, multiple=True),
    )),
    Section("Anything Else", (
        FieldSpec("anything_else", "Anything else we should know?", FieldKind.TEXTAREA, ai_assist=True,
                  max_length=5000),
        FieldSpec("extra_images", "Extra images", FieldKind.IMAGE, multiple=True),
    )),
)

PRIMARY_IMAGE_FIELD = "profile_photo"


def all_fields() -> List[FieldSpec]:
    return [spec for section in SECTIONS for spec in section.fields]


def text_fields() -> List[FieldSpec]:
    return [spec for spec in all_fields() if spec.kind != FieldKind.IMAGE]


def image_fields() -> List[FieldSpec]:
    return [spec for spec in all_fields() if spec.kind == FieldKind.IMAGE]


def schema_as_dict() -> dict:
    return {
        "title": FORM_TITLE,
        "sections": [
            {"title": section.title, "fields": [spec.to_dict() for spec in section.fields]}
            for section in SECTIONS
        ],
    }


# ------------------------
# Validators, one per kind
# ------------------------
def _validate_text(spec: FieldSpec, value: str):
    if spec.max_length and len(value) > spec.max_length:
        raise ValidationError(f"{spec.label} must be at most {spec.max_length} characters", field=spec.name)


def _validate_email(spec: FieldSpec, value: str):
    _validate_text(spec, value)
    if not EMAIL_PATTERN.fullmatch(value):
        raise ValidationError(f"{spec.label} must be a valid email address", field=spec.name)


def _validate_phone(spec: FieldSpec, value: str):
    _validate_text(spec, value)
    if not PHONE_PATTERN.fullmatch(value):
        raise ValidationError(f"{spec.label} may only contain digits and + - ( ) . x", field=spec.name)


def _validate_number(spec: FieldSpec, value: str):
    if not NUMBER_PATTERN.fullmatch(value):
        raise ValidationError(f"{spec.label} must be a whole number", field=spec.name)


VALIDATORS = {
    FieldKind.TEXT: _validate_text,
    FieldKind.TEXTAREA: _validate_text,
    FieldKind.EMAIL: _validate_email,
    FieldKind.PHONE: _validate_phone,
    FieldKind.NUMBER: _validate_number,
}


def extract_fields(form) -> Dict[str, str]:
    """
    Pulls every text-like field out of a mapping (a dict or a request form).
    Missing fields come back as empty strings; values are stripped.
    """
    values = {}
    for spec in text_fields():
        raw = form.get(spec.name)
        values[spec.name] = str(raw).strip() if raw is not None else ""
    return values


def validate_fields(values: Dict[str, str]):
    for spec in text_fields():
        value = values.get(spec.name, "")
        if not value:
            if spec.required:
                raise ValidationError(f"{spec.label} is required", field=spec.name)
            continue
        VALIDATORS[spec.kind](spec, value)


def validate_files(files: Dict[str, list]):
    """
    files maps an image field name to a list of UploadedFile. Empty uploads
    (browsers send them for untouched inputs) do not count.
    """
    for spec in image_fields():
        provided = [f for f in files.get(spec.name, []) if f is not None and f.size > 0]
        if spec.required and not provided:
            raise ValidationError(f"{spec.label} is required", field=spec.name)
        if not spec.multiple and len(provided) > 1:
            raise ValidationError(f"Only one {spec.label.lower()} may be uploaded", field=spec.name)
