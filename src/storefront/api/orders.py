"""Order routes: placement, history, administration, cancellation and payment."""

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.api.auth import current_account, require_admin
from storefront.api.schemas import (
    CancelOrderRequest,
    ConfirmPaymentRequest,
    Envelope,
    Pagination,
    PlaceOrderRequest,
    UpdateOrderStatusRequest,
)
from storefront.api.serializers import order_to_dict, tracking_to_dict
from storefront.errors import Forbidden, NotFound
from storefront.order.lifecycle import CancelOrder, UpdateOrderStatus, load_order
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.payment.intents import ConfirmPayment, CreatePaymentIntent

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _visible_order(order_id: str, account: Account) -> Order:
    order = load_order(order_id)
    if not account.is_admin and not order.owned_by(account.id):
        raise Forbidden("Not authorized to view this order")
    return order


@order_router.get("", response_model=Envelope)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    account: Account = Depends(current_account),
) -> Envelope:
    """Customers see their own orders; administrators see every order."""
    account_id = None if account.is_admin else str(account.id)
    orders, total = current_domain.repository_for(Order).for_account(
        account_id=account_id, status=status, page=page, limit=limit
    )
    return Envelope(
        data=[order_to_dict(o) for o in orders],
        pagination=Pagination.build(page, limit, total),
    )


@order_router.post("", status_code=201, response_model=Envelope)
async def place_order(body: PlaceOrderRequest, account: Account = Depends(current_account)) -> Envelope:
    command = PlaceOrder(
        account_id=str(account.id),
        shipping_address=body.shipping_address.model_dump_json(),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return Envelope(data=order_to_dict(order), message="Order created successfully")


@order_router.get("/{order_id}", response_model=Envelope)
async def get_order(order_id: str, account: Account = Depends(current_account)) -> Envelope:
    return Envelope(data=order_to_dict(_visible_order(order_id, account)))


@order_router.get("/{order_ref}/tracking", response_model=Envelope)
async def track_order(order_ref: str) -> Envelope:
    """Public tracking by order number or id."""
    repo = current_domain.repository_for(Order)
    order = repo.find_by_number(order_ref)
    if order is None:
        try:
            order = repo.get(order_ref)
        except (ObjectNotFoundError, ValidationError) as exc:
            raise NotFound("Order not found") from exc
    return Envelope(data=tracking_to_dict(order))


@order_router.put("/{order_id}/status", response_model=Envelope)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, admin: Account = Depends(require_admin)
) -> Envelope:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        note=body.note,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return Envelope(data=order_to_dict(order), message="Order status updated")


@order_router.put("/{order_id}/cancel", response_model=Envelope)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    account: Account = Depends(current_account),
) -> Envelope:
    command = CancelOrder(
        order_id=order_id,
        account_id=str(account.id),
        is_admin=account.is_admin,
        note=body.note if body else None,
    )
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return Envelope(data=order_to_dict(order), message="Order cancelled successfully")


@order_router.post("/{order_id}/payment-intent", response_model=Envelope)
async def create_payment_intent(order_id: str, account: Account = Depends(current_account)) -> Envelope:
    command = CreatePaymentIntent(order_id=order_id, account_id=str(account.id))
    intent = current_domain.process(command, asynchronous=False)
    return Envelope(data=intent)


@order_router.post("/{order_id}/confirm-payment", response_model=Envelope)
async def confirm_payment(
    order_id: str, body: ConfirmPaymentRequest, account: Account = Depends(current_account)
) -> Envelope:
    command = ConfirmPayment(order_id=order_id, account_id=str(account.id), payment_intent_id=body.payment_intent_id)
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return Envelope(data=order_to_dict(order), message="Payment confirmed successfully")
