"""
Order orchestrator shared by the sales and purchase services.

Creating or updating an order validates its counterparty against the Contact
service and prices every line against the Inventory service before anything is
written locally. Line lookups run concurrently; the request waits for all of
them and fails with the first error in line order. Validation happens over
plain HTTP reads before the local transaction, so the stored order reflects the
remote state observed at validation time.

Lifecycle: Draft -> Confirmed/Received -> Paid, strictly forward. Reaching the
intermediate state publishes an event carrying the full line list.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable, List, Optional, Sequence

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..clients.inventory_client import InventoryClient, RemoteItem
from ..errors import (
    BadRequestError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from ..events import EventItem, OrderLifecycleEvent, Publisher
from ..security import RequestContext
from ..service_token import ServiceTokenClient
from . import crud
from .schemas import MAX_ORDER_LINES, OrderLine

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderLifecycle:
    """Status names of a linear three-state order lifecycle."""
    draft: str
    advanced: str
    paid: str


class OrderOrchestrator:
    """
    Drives orders of one kind (sales or purchase) through validation, pricing,
    persistence and their status lifecycle.

    Args:
        kind: Name used in logs and messages ("sales order", "purchase order")
        order_model: ORM class of the order table
        item_model: ORM class of the order item table
        counterparty_field: Column naming the counterparty ("customer_id", "vendor_id")
        lookup_counterparty: Coroutine ``(counterparty_id, token)`` fetching the
            counterparty from the Contact service
        inventory_client: Client used to price lines
        token_client: Source of service-identity tokens
        publisher: Event publisher
        lifecycle: Draft / intermediate / paid status names
        advance_topic: Topic published when an order leaves Draft
    """

    def __init__(self, *, kind: str, order_model, item_model, counterparty_field: str,
                 lookup_counterparty: Callable[[str, Optional[str]], Awaitable[object]],
                 inventory_client: InventoryClient, token_client: ServiceTokenClient,
                 publisher: Publisher, lifecycle: OrderLifecycle, advance_topic: str):
        self.kind = kind
        self.order_model = order_model
        self.item_model = item_model
        self.counterparty_field = counterparty_field
        self.lookup_counterparty = lookup_counterparty
        self.inventory_client = inventory_client
        self.token_client = token_client
        self.publisher = publisher
        self.lifecycle = lifecycle
        self.advance_topic = advance_topic

    # ── Validation & pricing ─────────────────────────

    async def resolve_token(self, context: RequestContext) -> str:
        """
        Token to forward on outbound calls: the caller's own, or this service's identity.

        Raises:
            InternalError: no caller token and no service token could be obtained
        """
        if context.token:
            return context.token
        try:
            return await self.token_client.get_or_refresh()
        except ServiceError as e:
            logger.error(f"Failed to get service token from auth service: {e.message}")
            raise InternalError()

    async def validate_counterparty(self, counterparty_id: str, token: str) -> None:
        try:
            await self.lookup_counterparty(counterparty_id, token)
        except NotFoundError:
            raise BadRequestError(f"{self.counterparty_field} {counterparty_id} does not exist")
        except UnauthorizedError:
            raise
        except ServiceError as e:
            logger.error(f"Failed to validate {self.counterparty_field} {counterparty_id}: {e.message}")
            raise InternalError()

    async def _lookup_item(self, line: OrderLine, token: str) -> RemoteItem:
        item_id = str(line.item_id)
        try:
            return await self.inventory_client.get_item(item_id, token)
        except NotFoundError:
            raise BadRequestError(f"item {item_id} does not exist")
        except UnauthorizedError:
            raise
        except ServiceError as e:
            logger.error(f"Failed to validate item {item_id}: {e.message}")
            raise InternalError()

    async def price_lines(self, lines: Sequence[OrderLine], token: str) -> List:
        """
        Price every line against the Inventory service.

        One lookup per line runs concurrently; all are awaited even when one
        fails, then the first failure in line order is raised.

        Returns:
            Unsaved item objects with the unit price snapshot and subtotal
        """
        results = await asyncio.gather(
            *(self._lookup_item(line, token) for line in lines),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        items = []
        for position, (line, remote) in enumerate(zip(lines, results)):
            unit_price = to_money(remote.unit_price)
            items.append(self.item_model(
                id=str(uuid.uuid4()),
                item_id=str(line.item_id),
                quantity=line.quantity,
                unit_price=unit_price,
                subtotal=to_money(unit_price * line.quantity),
                position=position,
            ))
        return items

    @staticmethod
    def check_lines(lines: Sequence[OrderLine]) -> None:
        if not lines:
            raise BadRequestError("order must contain at least one item")
        if len(lines) > MAX_ORDER_LINES:
            raise BadRequestError(f"order cannot contain more than {MAX_ORDER_LINES} items")
        for line in lines:
            if line.quantity <= 0:
                raise BadRequestError(f"item {line.item_id}: quantity must be positive")

    # ── Commands ─────────────────────────────────────

    async def create(self, db: Session, context: RequestContext, counterparty_id: str,
                     lines: Sequence[OrderLine]):
        """
        Validate, price and persist a new Draft order.

        Args:
            db: Database session
            context: Caller credential
            counterparty_id: Customer or vendor ID
            lines: Requested lines (1 to 100)

        Returns:
            The persisted order with its items

        Raises:
            BadRequestError: invalid lines, or a referenced entity does not exist
            UnauthorizedError: a registry rejected the forwarded token
            InternalError: a registry or the database failed
        """
        self.check_lines(lines)
        counterparty_id = str(counterparty_id)
        token = await self.resolve_token(context)

        await self.validate_counterparty(counterparty_id, token)
        items = await self.price_lines(lines, token)
        total_amount = sum((item.subtotal for item in items), Decimal("0.00"))

        order = self.order_model(
            id=str(uuid.uuid4()),
            status=self.lifecycle.draft,
            total_amount=total_amount,
            **{self.counterparty_field: counterparty_id},
        )
        order = await run_in_threadpool(crud.create_order, db, order, items)
        logger.info(f"Created {self.kind} {order.id} with {len(items)} item(s), total {total_amount}")
        return order

    async def update(self, db: Session, context: RequestContext, order_id: str,
                     lines: Sequence[OrderLine]):
        """
        Replace all items of a Draft order, re-validating and re-pricing them.

        Raises:
            NotFoundError: the order does not exist
            BadRequestError: the order is not Draft, or a line is invalid
        """
        order_id = str(order_id)
        self.check_lines(lines)
        order = await self.get(db, order_id)
        if order.status != self.lifecycle.draft:
            raise BadRequestError(f"only {self.lifecycle.draft} orders can be updated (order is {order.status})")

        token = await self.resolve_token(context)
        items = await self.price_lines(lines, token)
        total_amount = sum((item.subtotal for item in items), Decimal("0.00"))

        order = await run_in_threadpool(
            crud.replace_order_items, db, self.order_model, order_id,
            self.lifecycle.draft, items, total_amount,
        )
        logger.info(f"Replaced items of {self.kind} {order_id}: {len(items)} item(s), total {total_amount}")
        return order

    async def advance(self, db: Session, order_id: str):
        """
        Move a Draft order to its intermediate state and publish the lifecycle event.

        A publish failure is logged and does not fail the transition.
        """
        order_id = str(order_id)
        order = await run_in_threadpool(
            crud.transition_order_status, db, self.order_model, order_id,
            self.lifecycle.draft, self.lifecycle.advanced,
        )
        logger.info(f"{self.kind} {order_id} is now {order.status}")
        await self.publisher.publish(self.advance_topic, self.build_event(order))
        return order

    async def pay(self, db: Session, order_id: str):
        """Move an order from its intermediate state to Paid."""
        order_id = str(order_id)
        order = await run_in_threadpool(
            crud.transition_order_status, db, self.order_model, order_id,
            self.lifecycle.advanced, self.lifecycle.paid,
        )
        logger.info(f"{self.kind} {order_id} is now {order.status}")
        return order

    # ── Queries ──────────────────────────────────────

    async def get(self, db: Session, order_id: str):
        order = await run_in_threadpool(crud.get_order, db, self.order_model, str(order_id))
        if order is None:
            raise NotFoundError("order not found")
        return order

    async def list_orders(self, db: Session, skip: int = 0, limit: int = 100, status: Optional[str] = None):
        return await run_in_threadpool(crud.get_orders, db, self.order_model, skip, limit, status)

    def build_event(self, order) -> OrderLifecycleEvent:
        return OrderLifecycleEvent(
            event_type=self.advance_topic,
            order_id=order.id,
            counterparty_id=getattr(order, self.counterparty_field),
            items=[
                EventItem(
                    item_id=item.item_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
        )
