"""
HTTP surface shared by the sales and purchase order services.

``create_order_router`` builds the ``/orders`` routes for one order kind:

    POST /orders                    Create a Draft order
    GET  /orders                    List orders (optional ?status=)
    GET  /orders/{order_id}         Get one order with its items
    PUT  /orders/{order_id}         Replace the items of a Draft order
    POST /orders/{order_id}/{advance_action}   confirm (sales) / receive (purchase)
    POST /orders/{order_id}/pay     Mark an order Paid

Every route needs a bearer token. Manager roles may create, read and update
orders; only the finance manager may advance or pay them. Service tokens
bypass the role checks.
"""
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..responses import Envelope
from ..security import ROLE_FINANCE_MANAGER, ROLE_INVENTORY_MANAGER, RequestContext, require_roles
from .orchestrator import OrderOrchestrator
from .schemas import OrderItemsUpdate

require_manager = require_roles(ROLE_INVENTORY_MANAGER, ROLE_FINANCE_MANAGER)
require_finance = require_roles(ROLE_FINANCE_MANAGER)


def create_order_router(
    *,
    get_db: Callable,
    get_orchestrator: Callable[[], OrderOrchestrator],
    create_schema,
    order_schema,
    order_with_items_schema,
    counterparty_field: str,
    advance_action: str,
) -> APIRouter:
    """
    Build the order routes of one service.

    Args:
        get_db: The service's database session dependency
        get_orchestrator: Dependency returning the service's orchestrator
        create_schema: Request body schema for POST /orders
        order_schema: Response schema of an order without items
        order_with_items_schema: Response schema of an order with items
        counterparty_field: Name of the counterparty field in ``create_schema``
        advance_action: Path segment of the Draft -> intermediate transition

    Returns:
        An APIRouter to include in the service app
    """
    router = APIRouter(prefix="/orders", tags=["orders"])

    def with_items(order, message: str = "success", status_code: int = status.HTTP_200_OK):
        return Envelope[order_with_items_schema](
            status=status_code,
            message=message,
            data=order_with_items_schema.model_validate(order),
        )

    @router.post("", response_model=Envelope[order_with_items_schema], status_code=status.HTTP_201_CREATED)
    async def create_order(
        order: create_schema,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        """Validate the counterparty and items remotely, price the lines and persist a Draft order."""
        db_order = await orchestrator.create(
            db, context, getattr(order, counterparty_field), order.items
        )
        return with_items(db_order, "order created", status.HTTP_201_CREATED)

    @router.get("", response_model=Envelope[List[order_schema]])
    async def list_orders(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=100),
        status_filter: Optional[str] = Query(None, alias="status"),
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        orders = await orchestrator.list_orders(db, skip=skip, limit=limit, status=status_filter)
        return Envelope[List[order_schema]](data=[order_schema.model_validate(o) for o in orders])

    @router.get("/{order_id}", response_model=Envelope[order_with_items_schema])
    async def get_order(
        order_id: UUID,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        return with_items(await orchestrator.get(db, order_id))

    @router.put("/{order_id}", response_model=Envelope[order_with_items_schema])
    async def update_order(
        order_id: UUID,
        update: OrderItemsUpdate,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_manager),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        """Replace every item of a Draft order; rejected once the order has advanced."""
        db_order = await orchestrator.update(db, context, order_id, update.items)
        return with_items(db_order, "order updated")

    @router.post(f"/{{order_id}}/{advance_action}", response_model=Envelope[order_with_items_schema])
    async def advance_order(
        order_id: UUID,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_finance),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        db_order = await orchestrator.advance(db, order_id)
        return with_items(db_order, f"order {db_order.status.lower()}")

    @router.post("/{order_id}/pay", response_model=Envelope[order_with_items_schema])
    async def pay_order(
        order_id: UUID,
        db: Session = Depends(get_db),
        context: RequestContext = Depends(require_finance),
        orchestrator: OrderOrchestrator = Depends(get_orchestrator),
    ):
        db_order = await orchestrator.pay(db, order_id)
        return with_items(db_order, "order paid")

    return router
