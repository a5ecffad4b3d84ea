"""Checkout, order history and admin order management."""

from fastapi import APIRouter, Depends, Header, Response
from pydantic import BaseModel

from src.storefront.api.http.deps import get_current_user, get_order_service, require_admin
from src.storefront.core.services import OrderService
from src.storefront.core.services.order.order_service import CheckoutCustomer
from src.storefront.entities.core.user import User
from src.storefront.entities.service.order import Order, OrderStatus, PaymentMethod

router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.COD
    customer: CheckoutCustomer | None = None


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


@router.post("", response_model=Order, status_code=201)
def checkout(
    data: CheckoutRequest,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    """Place an order from the current cart.

    Replaying an ``Idempotency-Key`` returns the original order with 200.
    """
    order, created = orders.checkout(
        user,
        data.payment_method,
        customer=data.customer,
        idempotency_key=idempotency_key,
    )
    if not created:
        response.status_code = 200
    return order


@router.get("", response_model=list[Order])
def list_my_orders(
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> list[Order]:
    return orders.list_orders(user)


@router.get("/{order_id}", response_model=Order)
def get_order(
    order_id: str,
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return orders.get_order(order_id, user)


@router.post("/{order_id}/cancel", response_model=Order)
def cancel_order(
    order_id: str,
    user: User = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return orders.cancel_order(order_id, user)


@admin_router.get("", response_model=list[Order], dependencies=[Depends(require_admin)])
def list_all_orders(
    status: OrderStatus | None = None,
    orders: OrderService = Depends(get_order_service),
) -> list[Order]:
    return orders.list_all_orders(status)


@admin_router.put(
    "/{order_id}/status", response_model=Order, dependencies=[Depends(require_admin)]
)
def update_order_status(
    order_id: str,
    data: StatusUpdateRequest,
    orders: OrderService = Depends(get_order_service),
) -> Order:
    return orders.update_status(order_id, data.status)


@admin_router.delete("/{order_id}", dependencies=[Depends(require_admin)])
def delete_order(
    order_id: str,
    orders: OrderService = Depends(get_order_service),
) -> dict[str, str]:
    orders.delete_order(order_id)
    return {"message": "Order deleted"}
