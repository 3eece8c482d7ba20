"""
HTTP client for communicating with the Inventory service.

Provides the authoritative unit price of an item at order time.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from .. import config
from .base import RegistryClient


class RemoteItem(BaseModel):
    """Inventory item as returned by the Inventory service."""
    id: str
    sku: Optional[str] = None
    name: Optional[str] = None
    unit_price: Decimal


class InventoryClient(RegistryClient):

    def __init__(self, base_url: str = config.INVENTORY_SERVICE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_item(self, item_id: str, token: Optional[str]) -> RemoteItem:
        """
        Retrieve a single inventory item by ID.

        Args:
            item_id: ID of the inventory item
            token: Bearer token authorizing the inter-service request

        Returns:
            The item, including its current unit price
        """
        return await self.fetch_model(f"/items/{item_id}", token, RemoteItem)
