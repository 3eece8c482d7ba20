"""
Base HTTP client for reading entities from registry services.

Translates transport failures and HTTP status codes into the shared error taxonomy.
"""
import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .. import config
from ..errors import ForbiddenError, InternalError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class RegistryClient:
    """
    Reads single entities from a registry service.

    Args:
        base_url: Root URL of the registry service
        timeout: Per-request deadline in seconds
        transport: Optional httpx transport (used to fake the remote in tests)
    """

    def __init__(self, base_url: str, timeout: float = config.HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, path: str, token: Optional[str]) -> dict:
        """
        GET ``path`` and return the ``data`` member of the response envelope.

        Args:
            path: Resource path, e.g. "/items/<id>"
            token: Bearer token forwarded to the registry

        Returns:
            The entity as a dictionary

        Raises:
            NotFoundError: the registry answered 404
            UnauthorizedError: the registry answered 401
            ForbiddenError: the registry answered 403
            InternalError: any other status or a transport failure
        """
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}{path}", headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Request to {self.base_url}{path} failed: {e}")
            raise InternalError(f"registry service unavailable: {self.base_url}")

        if response.status_code == 404:
            raise NotFoundError()
        if response.status_code == 401:
            raise UnauthorizedError()
        if response.status_code == 403:
            raise ForbiddenError()
        if response.status_code != 200:
            logger.error(f"Unexpected status {response.status_code} from {self.base_url}{path}: {response.text}")
            raise InternalError()

        try:
            return response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed response from {self.base_url}{path}: {e}")
            raise InternalError()

    async def fetch_model(self, path: str, token: Optional[str], model: Type[M]) -> M:
        """Fetch an entity and validate it into ``model``."""
        data = await self.fetch(path, token)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected payload from {self.base_url}{path}: {e}")
            raise InternalError()
