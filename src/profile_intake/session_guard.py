"""Password check and session cookie for the review dashboard."""
import hmac
import re
import secrets

from profile_intake.config import SESSION_COOKIE_NAME, SESSION_DURATION_HOURS

SESSION_TOKEN_PATTERN = re.compile(r"[0-9a-f]{64}")


def constant_time_equals(a: str, b: str) -> bool:
    """
    Compares two strings without short-circuiting on the first mismatch.
    A length difference is also a mismatch.
    """
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class SessionGuard:
    def __init__(self, admin_password, cookie_name=SESSION_COOKIE_NAME, max_age=SESSION_DURATION_HOURS * 60 * 60):
        self.admin_password = admin_password
        self.cookie_name = cookie_name
        self.max_age = max_age

    def validate_password(self, candidate) -> bool:
        if not candidate or not self.admin_password:
            return False
        return constant_time_equals(str(candidate), self.admin_password)

    @staticmethod
    def new_session_token() -> str:
        return secrets.token_hex(32)

    def set_session_cookie(self, response):
        token = self.new_session_token()
        response.set_cookie(
            self.cookie_name,
            token,
            max_age=self.max_age,
            path="/",
            secure=True,
            httponly=True,
            samesite="Strict",
        )
        return token

    def clear_session_cookie(self, response):
        response.delete_cookie(self.cookie_name, path="/", secure=True, httponly=True, samesite="Strict")

    def is_authenticated(self, cookies) -> bool:
        # Shape check only: the token is random and never stored server-side.
        session = cookies.get(self.cookie_name)
        return bool(session) and bool(SESSION_TOKEN_PATTERN.fullmatch(session))
