"""OAuth credential provider for gdrivesync."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from gdrivesync.errors import AuthError, ConfigurationError, InvalidArgumentError, InvalidStateError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"


class OAuthClient:
    """
    Exchange and refresh OAuth credentials for the Drive API.

    `get_access_token()` is cheap to call repeatedly: the cached credentials
    are refreshed only when they are missing or expired.
    """

    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive.file",)

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
    ) -> None:
        use_scopes = list(scopes) if scopes is not None else list(self.DEFAULT_SCOPES)
        if not use_scopes or not all(isinstance(s, str) and s.strip() for s in use_scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")

        self._auth_info = auth_info
        self._scopes = use_scopes
        self._credentials = None
        self._flow = None
        self._lock = threading.Lock()

    @property
    def auth_info(self) -> AuthInfo:
        return self._auth_info

    def get_credentials(self):
        """
        Return valid OAuth credentials, refreshing them when needed.

        Returns:
            google.oauth2.credentials.Credentials

        Raises:
            ConfigurationError: if no refresh token is known yet.
            AuthError: on refresh failures.
        """
        if not self._auth_info.is_authorized:
            raise ConfigurationError(
                "Not authenticated. Run the authorization flow first.",
                details={"hint": "gdrivesync authenticate"},
            )

        try:
            from google.auth.transport.requests import Request
            from google.oauth2.credentials import Credentials
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "Google auth libraries are not available",
                details={"hint": "Install google-auth and google-auth-oauthlib"},
                cause=exc,
            ) from exc

        with self._lock:
            if self._credentials is None:
                self._credentials = Credentials(
                    token=None,
                    refresh_token=self._auth_info.refresh_token,
                    token_uri=TOKEN_URI,
                    client_id=self._auth_info.client_id,
                    client_secret=self._auth_info.client_secret,
                    scopes=list(self._scopes),
                )

            creds = self._credentials
            if not creds.valid:
                try:
                    creds.refresh(Request())
                except Exception as exc:
                    raise AuthError("Failed to refresh OAuth credentials", cause=exc) from exc
                logger.debug("access token refreshed (expiry=%s)", creds.expiry)
            return creds

    def get_access_token(self) -> str:
        """Return a bearer token that is valid right now."""
        creds = self.get_credentials()
        if not creds.token:
            raise AuthError("No access token available")
        return creds.token

    def begin_authorization(self) -> str:
        """
        Start the consent flow and return the URL the user must visit.

        The pending flow is kept until `exchange_code()` consumes it.
        """
        try:
            from google_auth_oauthlib.flow import Flow
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-auth-oauthlib is not available",
                details={"hint": "Install google-auth-oauthlib"},
                cause=exc,
            ) from exc

        flow = Flow.from_client_config(
            self._auth_info.client_config(),
            scopes=list(self._scopes),
            redirect_uri=self._auth_info.redirect_uri,
        )
        url, _state = flow.authorization_url(access_type="offline", prompt="consent")
        self._flow = flow
        return url

    def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for tokens and return the refresh token.

        Raises:
            InvalidStateError: if begin_authorization() was not called.
            AuthError: if the exchange fails or yields no refresh token.
        """
        if self._flow is None:
            raise InvalidStateError("No authorization in progress. Call begin_authorization() first.")
        if not isinstance(code, str) or not code.strip():
            raise InvalidArgumentError("Authorization code must be a non-empty string")

        flow, self._flow = self._flow, None
        try:
            flow.fetch_token(code=code.strip())
        except Exception as exc:
            raise AuthError("Authentication failed: token exchange rejected", cause=exc) from exc

        creds = flow.credentials
        refresh_token = getattr(creds, "refresh_token", None)
        if not refresh_token:
            raise AuthError("Failed to get refresh token")

        with self._lock:
            self._auth_info = self._auth_info.with_refresh_token(refresh_token)
            self._credentials = creds
        return refresh_token

    def build_drive_service(self):
        """
        Build a Drive API service resource bound to these credentials.

        The service shares the credentials object, so refreshing through
        `get_access_token()` updates the bearer token it sends.

        Returns:
            googleapiclient.discovery.Resource
        """
        try:
            from googleapiclient.discovery import build
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                details={"hint": "Install google-api-python-client"},
                cause=exc,
            ) from exc

        creds = self.get_credentials()
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc
