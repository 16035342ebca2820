import functools
import logging

from flask import Flask, jsonify, request

from profile_intake.config import MAX_UPLOAD_BYTES, load_settings
from profile_intake.errors import (
    AuthError,
    ConfigurationError,
    UnauthorizedError,
    UpstreamServiceError,
    ValidationError,
)
from profile_intake.form_schema import extract_fields, image_fields, schema_as_dict
from profile_intake.google_drive_api_client import GoogleDriveApiClient
from profile_intake.google_sheets_api_client import GoogleSheetsApiClient
from profile_intake.models import UploadedFile, parse_status
from profile_intake.session_guard import SessionGuard
from profile_intake.submission_orchestrator import SubmissionOrchestrator
from profile_intake.text_assist_api_client import TextAssistApiClient
from profile_intake.token_provider import GoogleTokenProvider, TokenCache

logger = logging.getLogger(__name__)


class Services:
    """
    Builds the API clients from settings on demand. The token cache lives as
    long as this object, so every request in the process shares it.
    """

    def __init__(self, settings, token_cache=None):
        self.settings = settings
        self.token_cache = token_cache if token_cache is not None else TokenCache()

    def token_provider(self):
        if not self.settings.google_service_account_json:
            raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON not configured")
        return GoogleTokenProvider(self.settings.google_service_account_json, cache=self.token_cache)

    @property
    def sheets(self):
        if not self.settings.google_sheet_id:
            raise ConfigurationError("GOOGLE_SHEET_ID not configured")
        return GoogleSheetsApiClient(self.token_provider(), self.settings.google_sheet_id)

    @property
    def drive(self):
        return GoogleDriveApiClient(self.token_provider())

    @property
    def text_assist(self):
        if not self.settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return TextAssistApiClient(self.settings.openai_api_key)

    @property
    def orchestrator(self):
        if not self.settings.google_drive_folder_id:
            raise ConfigurationError("GOOGLE_DRIVE_FOLDER_ID not configured")
        text_assist = self.text_assist if self.settings.openai_api_key else None
        return SubmissionOrchestrator(
            self.sheets,
            self.drive,
            self.settings.google_drive_folder_id,
            text_assist_client=text_assist,
            client_name=self.settings.client_name,
        )

    @property
    def uploader(self):
        # /api/upload needs Drive only, not the sheet.
        if not self.settings.google_drive_folder_id:
            raise ConfigurationError("GOOGLE_DRIVE_FOLDER_ID not configured")
        return SubmissionOrchestrator(
            None, self.drive, self.settings.google_drive_folder_id, client_name=self.settings.client_name
        )


def error_response(message, status, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def api_errors(failure_message, config_message="Service not configured"):
    """
    Maps intake errors raised inside a view to JSON responses. Details of
    configuration and upstream failures are logged, never returned.
    """

    def decorator(view):
        @functools.wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as exc:
                extra = {"field": exc.field} if exc.field else {}
                return error_response(exc.message, 400, **extra)
            except UnauthorizedError:
                return error_response("Unauthorized", 401)
            except ConfigurationError as exc:
                logger.error("%s: %s", view.__name__, exc)
                return error_response(config_message, 500)
            except (AuthError, UpstreamServiceError):
                logger.exception("%s failed", view.__name__)
                return error_response(failure_message, 500)

        return wrapper

    return decorator


def json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def to_uploaded_file(storage):
    return UploadedFile(
        filename=storage.filename or "upload",
        mime_type=storage.mimetype or "application/octet-stream",
        data=storage.read(),
    )


def create_app(settings=None, services=None) -> Flask:
    settings = settings or load_settings()
    services = services or Services(settings)
    guard = SessionGuard(settings.admin_password)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES
    app.extensions["profile_intake"] = services

    def require_session():
        if not guard.is_authenticated(request.cookies):
            raise UnauthorizedError()

    @app.errorhandler(413)
    def too_large(_error):
        return error_response("Upload too large", 413)

    @app.errorhandler(500)
    def internal_error(_error):
        return error_response("Internal error", 500)

    # ------------------------
    # Dashboard session
    # ------------------------
    @app.route("/api/auth", methods=["POST"])
    @api_errors("Authentication failed", config_message="Server configuration error")
    def auth():
        password = json_body().get("password")
        if not password:
            raise ValidationError("Password required", field="password")
        if not settings.admin_password:
            raise ConfigurationError("ADMIN_PASSWORD not configured")

        if not guard.validate_password(password):
            logger.info("Rejected dashboard login")
            return error_response("Invalid password", 401)

        response = jsonify({"success": True})
        guard.set_session_cookie(response)
        return response

    @app.route("/api/auth", methods=["DELETE"])
    def logout():
        response = jsonify({"success": True})
        guard.clear_session_cookie(response)
        return response

    @app.route("/api/session", methods=["GET"])
    def session_state():
        return jsonify({"authenticated": guard.is_authenticated(request.cookies)})

    # ------------------------
    # Public form
    # ------------------------
    @app.route("/api/form-schema", methods=["GET"])
    def form_schema():
        return jsonify(schema_as_dict())

    @app.route("/api/submit", methods=["POST"])
    @api_errors("Submission failed")
    def submit():
        logger.info("Starting form submission")
        orchestrator = services.orchestrator

        fields = extract_fields(request.form)
        files = {
            spec.name: [to_uploaded_file(f) for f in request.files.getlist(spec.name)]
            for spec in image_fields()
        }
        logger.info("Form data extracted - name: %s, hasProfilePhoto: %s", fields["name"],
                    any(f.size for f in files.get("profile_photo", [])))

        result = orchestrator.submit(fields, files)
        body = {"success": True, "message": result.message}
        if result.failed_files:
            body["failedFiles"] = result.failed_files
        return jsonify(body)

    @app.route("/api/upload", methods=["POST"])
    @api_errors("File upload failed", config_message="File storage not configured")
    def upload():
        storage = request.files.get("file")
        submitter_name = (request.form.get("submitterName") or "").strip()
        client_name = (request.form.get("clientName") or "").strip() or None
        if storage is None:
            raise ValidationError("File required", field="file")
        if not submitter_name:
            raise ValidationError("Submitter name required", field="submitterName")

        result = services.uploader.upload_single(to_uploaded_file(storage), submitter_name, client_name)
        return jsonify({"success": True, "id": result.id, "url": result.url})

    @app.route("/api/grammar", methods=["POST"])
    @api_errors("Grammar check failed", config_message="AI service not configured")
    def grammar():
        body = json_body()
        text = body.get("text")
        if not text:
            raise ValidationError("Text required", field="text")

        corrected = services.text_assist.grammar_check(text, body.get("context"))
        return jsonify({"success": True, "corrected": corrected})

    @app.route("/api/ask-ai", methods=["POST"])
    @api_errors("AI request failed", config_message="AI service not configured")
    def ask_ai():
        body = json_body()
        text, question = body.get("text"), body.get("question")
        if not text or not question:
            raise ValidationError("Text and question required")

        answer = services.text_assist.ask_ai(text, question, body.get("brandContext"))
        return jsonify({"success": True, "response": answer})

    # ------------------------
    # Dashboard
    # ------------------------
    @app.route("/api/submissions", methods=["GET"])
    @api_errors("Failed to fetch submissions")
    def list_submissions():
        require_session()
        status_param = request.args.get("status")
        status = parse_status(status_param) if status_param else None

        submissions = services.sheets.list_submissions(status)
        logger.info("Submissions found: %s", len(submissions))
        return jsonify({"success": True, "submissions": [s.to_dict() for s in submissions]})

    @app.route("/api/submissions", methods=["PATCH"])
    @api_errors("Failed to update status")
    def update_submission():
        require_session()
        body = json_body()
        row_index, status_value = body.get("rowIndex"), body.get("status")
        if not row_index or not status_value:
            raise ValidationError("Row index and status required")

        status = parse_status(status_value)
        if isinstance(row_index, str) and row_index.strip().isdigit():
            row_index = int(row_index)
        if isinstance(row_index, bool) or not isinstance(row_index, int) or row_index < 2:
            raise ValidationError("Row index must be a data row number", field="rowIndex")

        services.sheets.update_status(row_index, status)
        logger.info("Row %s marked %s", row_index, status.value)
        return jsonify({"success": True})

    return app
