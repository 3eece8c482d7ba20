"""
HTTP client for communicating with the Contact service.

Used to check that the customer or vendor referenced by an order exists.
"""
from typing import Optional

from pydantic import BaseModel

from .. import config
from .base import RegistryClient


class RemoteContact(BaseModel):
    """Customer or vendor record as returned by the Contact service."""
    id: str
    name: str
    email: Optional[str] = None


class ContactClient(RegistryClient):

    def __init__(self, base_url: str = config.CONTACT_SERVICE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_customer(self, customer_id: str, token: Optional[str]) -> RemoteContact:
        return await self.fetch_model(f"/customers/{customer_id}", token, RemoteContact)

    async def get_vendor(self, vendor_id: str, token: Optional[str]) -> RemoteContact:
        return await self.fetch_model(f"/vendors/{vendor_id}", token, RemoteContact)
