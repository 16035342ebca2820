# token_provider.py
import hashlib
import json
import logging
import time
from dataclasses import dataclass

import requests
from google.auth import crypt, jwt
from google.oauth2.credentials import Credentials

from profile_intake.config import (
    DEFAULT_TOKEN_URI,
    SCOPES,
    TOKEN_EXPIRY_MARGIN_SECONDS,
    TOKEN_LIFETIME_SECONDS,
    TOKEN_REQUEST_TIMEOUT_SECONDS,
)
from profile_intake.errors import AuthError

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: float  # epoch seconds


class TokenCache:
    """
    Bearer tokens keyed by credential fingerprint.

    One instance is shared by every client in the process. There is no lock:
    two requests racing on an expired entry both fetch, and the later put wins.
    """

    def __init__(self, margin_seconds=TOKEN_EXPIRY_MARGIN_SECONDS):
        self.margin_seconds = margin_seconds
        self._entries = {}

    def get(self, key: str, now: float):
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now >= entry.expires_at - self.margin_seconds:
            return None
        return entry

    def put(self, key: str, token: CachedToken):
        self._entries[key] = token

    def clear(self):
        self._entries.clear()


class GoogleTokenProvider:
    def __init__(self, service_account_json: str, scopes=None, cache=None, clock=time.time):
        self.service_account_json = service_account_json
        self.scopes = list(scopes or SCOPES)
        self.cache = cache if cache is not None else TokenCache()
        self.clock = clock
        self.fingerprint = self._fingerprint(service_account_json, self.scopes)

    def get_token(self) -> str:
        """
        Returns a bearer token for the service account, reusing the cached one
        until it is within the cache margin of its expiry.
        """
        now = self.clock()
        cached = self.cache.get(self.fingerprint, now)
        if cached is not None:
            return cached.access_token

        token = self._fetch_token(now)
        self.cache.put(self.fingerprint, token)
        return token.access_token

    def credentials(self) -> Credentials:
        # Static credentials for gspread / googleapiclient; refreshed by asking us again.
        return Credentials(token=self.get_token())

    # ------------------------
    # Token exchange
    # ------------------------
    def _fetch_token(self, now: float) -> CachedToken:
        info = self._load_info()
        token_uri = info.get("token_uri") or DEFAULT_TOKEN_URI
        assertion = self._build_assertion(info, token_uri, now)

        logger.info("Exchanging signed assertion for %s at %s", info["client_email"], token_uri)
        try:
            resp = requests.post(
                token_uri,
                data={"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion},
                timeout=TOKEN_REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            raise AuthError(f"Token endpoint unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise AuthError(f"Token endpoint rejected assertion (status {resp.status_code}): {resp.text[:500]}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise AuthError("Token endpoint returned a non-JSON body") from exc

        access_token = payload.get("access_token")
        if not access_token:
            raise AuthError("Token endpoint response has no access_token")

        expires_in = int(payload.get("expires_in", TOKEN_LIFETIME_SECONDS))
        return CachedToken(access_token=access_token, expires_at=now + expires_in)

    def _load_info(self) -> dict:
        try:
            info = json.loads(self.service_account_json)
        except (TypeError, ValueError) as exc:
            raise AuthError("Service account JSON could not be parsed") from exc
        if not isinstance(info, dict):
            raise AuthError("Service account JSON must be an object")

        missing = [key for key in ("client_email", "private_key") if not info.get(key)]
        if missing:
            raise AuthError(f"Service account JSON is missing: {', '.join(missing)}")
        return info

    def _build_assertion(self, info: dict, token_uri: str, now: float) -> str:
        try:
            signer = crypt.RSASigner.from_service_account_info(info)
        except (TypeError, ValueError) as exc:
            raise AuthError("Service account private key is malformed") from exc

        issued_at = int(now)
        claims = {
            "iss": info["client_email"],
            "scope": " ".join(self.scopes),
            "aud": token_uri,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECONDS,
        }
        try:
            assertion = jwt.encode(signer, claims)
        except (TypeError, ValueError) as exc:
            raise AuthError("Could not sign token assertion") from exc
        return assertion.decode("utf-8") if isinstance(assertion, bytes) else assertion

    @staticmethod
    def _fingerprint(service_account_json: str, scopes) -> str:
        digest = hashlib.sha256()
        digest.update((service_account_json or "").encode("utf-8"))
        digest.update(" ".join(scopes).encode("utf-8"))
        return digest.hexdigest()
