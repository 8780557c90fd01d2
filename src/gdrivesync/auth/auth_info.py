"""Authentication information for gdrivesync (OAuth client + refresh token)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_REDIRECT_URI = "http://localhost"


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    OAuth client credentials plus the long-lived refresh token, if any.

    `refresh_token` is empty until the first successful authorization; the
    client id and secret are required from the start.
    """

    client_id: str
    client_secret: str
    refresh_token: Optional[str] = None
    redirect_uri: str = DEFAULT_REDIRECT_URI

    def __post_init__(self) -> None:
        for key in ("client_id", "client_secret"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.{key} must be a non-empty string")

        if self.refresh_token is not None and not isinstance(self.refresh_token, str):
            raise TypeError("AuthInfo.refresh_token must be a string or None")

    @property
    def is_authorized(self) -> bool:
        """True once a refresh token is known."""
        return bool(self.refresh_token and self.refresh_token.strip())

    def with_refresh_token(self, refresh_token: str) -> AuthInfo:
        return replace(self, refresh_token=refresh_token)

    def client_config(self) -> dict:
        """Client config dict in the shape google-auth-oauthlib expects."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri],
            }
        }
