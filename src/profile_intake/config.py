import os
from dataclasses import dataclass

from dotenv import load_dotenv

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",  # append/read/update rows
    "https://www.googleapis.com/auth/drive.file"     # folders and uploads
]
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
TOKEN_LIFETIME_SECONDS = 3600
TOKEN_EXPIRY_MARGIN_SECONDS = 60
TOKEN_REQUEST_TIMEOUT_SECONDS = 30

# Google Sheets
SHEET_NAME = "Team Members"
SHEET_RANGE = f"{SHEET_NAME}!A:R"
STATUS_COLUMN = "R"

# Google Drive
DEFAULT_CLIENT_NAME = "The Fix"
DRIVE_VIEW_URL = "https://drive.google.com/uc?id={file_id}"

# Text assist
AI_MODEL = "gpt-4o-mini"
GRAMMAR_MAX_TOKENS = 1024
ASK_AI_MAX_TOKENS = 256
THANK_YOU_MAX_TOKENS = 256

# Dashboard session
SESSION_COOKIE_NAME = "admin_session"
SESSION_DURATION_HOURS = 24

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


@dataclass
class Settings:
    admin_password: str = ""
    openai_api_key: str = ""
    google_service_account_json: str = ""
    google_sheet_id: str = ""
    google_drive_folder_id: str = ""
    client_name: str = DEFAULT_CLIENT_NAME
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


def load_settings() -> Settings:
    """
    Reads settings from the environment, after loading a local .env file if one exists.
    """
    load_dotenv()
    return Settings(
        admin_password=os.getenv("ADMIN_PASSWORD", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        google_service_account_json=os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", ""),
        google_sheet_id=os.getenv("GOOGLE_SHEET_ID", ""),
        google_drive_folder_id=os.getenv("GOOGLE_DRIVE_FOLDER_ID", ""),
        client_name=os.getenv("INTAKE_CLIENT_NAME") or DEFAULT_CLIENT_NAME,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )
