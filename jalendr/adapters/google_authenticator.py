"""
Google OAuth token provider using the refresh-token grant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Refresh a little before Google's reported expiry.
EXPIRY_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at: DateTime

    def is_valid(self, now: DateTime) -> bool:
        return now < self.expires_at


class GoogleTokenProvider:
    """
    Exchanges each tenant's stored refresh token for a short-lived access token.

    Tokens are cached per tenant on this instance; nothing is shared globally.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_uri: str | None = None,
        timeout: float = 10,
    ):
        """
        Initialize the token provider.

        Args:
            client_id: OAuth client ID of the bridge application
            client_secret: OAuth client secret
            token_uri: Optional custom token endpoint
            timeout: Seconds to wait for the token endpoint
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_uri = token_uri or GOOGLE_TOKEN_URI
        self.timeout = timeout
        self._cache: Dict[str, CachedToken] = {}

    def get_access_token(
        self,
        tenant_id: str,
        refresh_token: str,
        force_refresh: bool = False,
        now: Optional[DateTime] = None,
    ) -> str:
        """
        Get a valid access token for a tenant, using the cache when possible.

        Raises:
            AuthenticationError: If the tenant has no refresh token or the exchange fails
        """
        current = now or pendulum.now("UTC")

        if not force_refresh:
            cached = self._cache.get(tenant_id)
            if cached and cached.is_valid(current):
                return cached.access_token

        if not refresh_token:
            raise AuthenticationError(
                f"No refresh token configured for client '{tenant_id}'. "
                "Complete the Google consent flow first."
            )

        token = self._exchange_refresh_token(refresh_token, current)
        self._cache[tenant_id] = token
        logger.info("Refreshed Google access token for %s", tenant_id)
        return token.access_token

    def _exchange_refresh_token(self, refresh_token: str, now: DateTime) -> CachedToken:
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            response = requests.post(self.token_uri, data=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise AuthenticationError(f"Token endpoint unreachable: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200 or "access_token" not in data:
            error = data.get("error_description") or data.get("error") or f"HTTP {response.status_code}"
            raise AuthenticationError(f"Token refresh failed: {error}")

        expires_in = int(data.get("expires_in", 3600))
        expires_at = now.add(seconds=max(expires_in - EXPIRY_MARGIN_SECONDS, 0))

        return CachedToken(access_token=data["access_token"], expires_at=expires_at)

    def clear_cache(self, tenant_id: str | None = None) -> None:
        """Forget cached tokens for one tenant, or for all tenants."""
        if tenant_id is None:
            self._cache.clear()
        else:
            self._cache.pop(tenant_id, None)
