class IntakeError(Exception):
    """Base class for errors raised by the intake service."""


class ConfigurationError(IntakeError):
    """A required setting (credential, sheet id, folder id, password) is missing."""


class ValidationError(IntakeError):
    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class UnauthorizedError(IntakeError):
    pass


class AuthError(IntakeError):
    """The service-account credential could not be turned into a bearer token."""


class UpstreamServiceError(IntakeError):
    """A call to Sheets, Drive or the text-assist model failed."""
