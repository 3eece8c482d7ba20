"""
Service-identity token client.

Obtains a short-lived token proving this service's identity to other services,
for calls made when no end-user credential is on the call path. The token is
cached in memory and refreshed 5 minutes before it expires.
"""
import asyncio
import logging
import time
from typing import Optional

import httpx

from . import config
from .errors import InternalError, UnauthorizedError

logger = logging.getLogger(__name__)

REFRESH_MARGIN_SECONDS = 5 * 60


class ServiceTokenRejected(UnauthorizedError):
    """The auth service refused this service's name/secret pair."""
    default_message = "service credentials rejected"


class ServiceTokenClient:
    """
    Caches a single service-identity token per client instance.

    ``get_or_refresh`` is the only entry point. A fresh cached token is served
    without locking; a refresh is serialized by a lock and re-checks freshness
    once the lock is held, so concurrent callers trigger one remote call.

    Args:
        auth_service_url: Root URL of the auth service
        service_name: Name this service authenticates as
        service_secret: Pre-shared secret for ``service_name``
        timeout: Deadline for the token request in seconds
        transport: Optional httpx transport (used to fake the issuer in tests)
        clock: Monotonic clock, injectable for tests
    """

    def __init__(self, auth_service_url: str, service_name: str, service_secret: str,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock=time.monotonic):
        self.auth_service_url = auth_service_url.rstrip("/")
        self.service_name = service_name
        self._service_secret = service_secret
        self._timeout = timeout
        self._transport = transport
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def _fresh_token(self) -> Optional[str]:
        if self._token and self._clock() < self._expires_at - REFRESH_MARGIN_SECONDS:
            return self._token
        return None

    async def get_or_refresh(self) -> str:
        """
        Return a valid service token, requesting a new one when needed.

        Raises:
            ServiceTokenRejected: the auth service answered 401
            InternalError: the auth service was unreachable or answered unexpectedly
        """
        token = self._fresh_token()
        if token:
            return token

        async with self._lock:
            token = self._fresh_token()
            if token:
                return token
            return await self._fetch()

    async def _fetch(self) -> str:
        body = {"service_name": self.service_name, "service_secret": self._service_secret}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self.auth_service_url}/service-token", json=body)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch service token for '{self.service_name}': {e}")
            raise InternalError("auth service unavailable")

        if response.status_code == 401:
            logger.error(f"Auth service rejected credentials for service '{self.service_name}'")
            raise ServiceTokenRejected()
        if response.status_code != 200:
            logger.error(f"Failed to get service token: HTTP {response.status_code} {response.text}")
            raise InternalError()

        try:
            data = response.json()["data"]
            token = data["token"]
            expires_in = int(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed service token response: {e}")
            raise InternalError()

        self._token = token
        self._expires_at = self._clock() + expires_in
        logger.info(f"Obtained service token for '{self.service_name}' (expires in {expires_in}s)")
        return token
