# runner.py
import logging

from profile_intake.app import create_app
from profile_intake.config import load_settings


def main():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).info(
        "Env check - sheetId: %s, rootFolderId: %s, serviceAccountJson: %s, openaiKey: %s",
        bool(settings.google_sheet_id),
        bool(settings.google_drive_folder_id),
        bool(settings.google_service_account_json),
        bool(settings.openai_api_key),
    )
    app = create_app(settings)
    app.run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
