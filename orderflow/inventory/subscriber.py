"""
Inventory Service: order event subscriber

Subscribes to the order lifecycle channels and applies each order line to
stock: a confirmed sales order removes its quantities, a received purchase
order adds them.

Redis Pub/Sub is fire-and-forget. Events published while this service is
down are lost.
"""
import asyncio
import logging
from typing import Callable

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..errors import ServiceError
from ..events import PURCHASE_ORDER_RECEIVED, SALES_ORDER_CONFIRMED, OrderLifecycleEvent
from . import crud

logger = logging.getLogger(__name__)

# Wait between reconnection attempts, in seconds
RECONNECT_MIN_DELAY = 1.0
RECONNECT_MAX_DELAY = 30.0

# Sign applied to each line's quantity, per topic
STOCK_DIRECTION = {
    SALES_ORDER_CONFIRMED: -1,
    PURCHASE_ORDER_RECEIVED: 1,
}


def apply_order_event(session_factory: Callable[[], Session], topic: str, raw) -> int:
    """
    Apply every line of an order event to stock.

    Each line is adjusted in its own transaction. A line that fails (unknown
    item, insufficient stock) is logged and skipped; the other lines are still
    applied.

    Args:
        session_factory: Creates database sessions
        topic: Channel the event arrived on
        raw: JSON payload

    Returns:
        Number of lines applied
    """
    direction = STOCK_DIRECTION.get(topic)
    if direction is None:
        logger.warning(f"Ignoring event on unexpected topic {topic}")
        return 0

    try:
        event = OrderLifecycleEvent.model_validate_json(raw)
    except ValidationError as e:
        logger.error(f"Dropping malformed {topic} event: {e}")
        return 0

    applied = 0
    for line in event.items:
        delta = direction * line.quantity
        db = session_factory()
        try:
            stock = crud.adjust_stock(db, line.item_id, delta)
            applied += 1
            logger.info(f"Stock of item {line.item_id} is now {stock.quantity} ({delta:+d}, order {event.order_id})")
        except ServiceError as e:
            logger.error(f"Failed to apply {delta:+d} to item {line.item_id} for order {event.order_id}: {e.message}")
        finally:
            db.close()

    logger.info(f"Applied {applied}/{len(event.items)} line(s) of {topic} order {event.order_id}")
    return applied


async def _close(pubsub, redis_conn) -> None:
    try:
        await pubsub.unsubscribe(*STOCK_DIRECTION)
        await pubsub.aclose()
        await redis_conn.aclose()
    except (RedisError, OSError) as e:
        logger.warning(f"Error while closing the order event subscription: {e}")


async def run_subscriber(
    redis_url: str,
    session_factory: Callable[[], Session],
    shutdown_event: asyncio.Event,
    reconnect_delay: float = RECONNECT_MIN_DELAY,
) -> None:
    """
    Listen on both order channels until ``shutdown_event`` is set.

    A lost or refused Redis connection is logged and re-established, waiting
    ``reconnect_delay`` seconds and doubling the wait after each consecutive
    failure, up to ``RECONNECT_MAX_DELAY``.
    """
    delay = reconnect_delay
    while not shutdown_event.is_set():
        redis_conn = aioredis.from_url(redis_url, decode_responses=True)
        pubsub = redis_conn.pubsub()
        try:
            await pubsub.subscribe(*STOCK_DIRECTION)
            logger.info(f"Subscribed to {', '.join(STOCK_DIRECTION)}")
            delay = reconnect_delay

            while not shutdown_event.is_set():
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message and message["type"] == "message":
                    try:
                        await run_in_threadpool(
                            apply_order_event, session_factory, message["channel"], message["data"]
                        )
                    except Exception:
                        logger.exception("Failed to process order event")
                else:
                    await asyncio.sleep(0.1)
        except Exception:
            logger.exception(f"Order event subscription failed, reconnecting in {delay:.1f}s")
        else:
            break
        finally:
            await _close(pubsub, redis_conn)

        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
        delay = min(delay * 2, RECONNECT_MAX_DELAY)
