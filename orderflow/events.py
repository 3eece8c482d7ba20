"""
Order lifecycle events published over Redis Pub/Sub.

Delivery is fire-and-forget: a publish failure is logged and never fails the
request that triggered it. Subscribers that are down miss events.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Protocol

import redis.asyncio as aioredis
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SALES_ORDER_CONFIRMED = "sales.order.confirmed"
PURCHASE_ORDER_RECEIVED = "purchase.order.received"


class EventItem(BaseModel):
    """One priced line of an order, as carried by an event."""
    item_id: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal
    subtotal: Decimal


class OrderLifecycleEvent(BaseModel):
    """Payload of ``sales.order.confirmed`` and ``purchase.order.received``."""
    event_type: str
    order_id: str
    counterparty_id: str
    items: List[EventItem]
    total_amount: Decimal
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Publisher(Protocol):
    async def publish(self, topic: str, event: BaseModel) -> None:
        ...


class EventPublisher:
    """
    Publishes events to Redis channels named after their topic.

    Args:
        redis_url: Redis connection URL
    """

    def __init__(self, redis_url: str):
        self._redis = aioredis.from_url(redis_url, decode_responses=True)

    async def publish(self, topic: str, event: BaseModel) -> None:
        """
        Publish ``event`` to ``topic``. Failures are logged and swallowed.

        Args:
            topic: Channel name (e.g. "sales.order.confirmed")
            event: Event payload, serialized as JSON
        """
        try:
            receivers = await self._redis.publish(topic, event.model_dump_json())
        except Exception:
            logger.exception(f"Failed to publish {topic} event")
            return
        logger.info(f"Published {topic} event to {receivers} subscriber(s)")

    async def close(self) -> None:
        await self._redis.aclose()
