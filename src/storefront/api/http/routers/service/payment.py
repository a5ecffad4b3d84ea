"""Payment gateway endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from src.storefront.api.http.deps import (
    get_current_user,
    get_order_service,
    get_paypal_client,
    get_vnpay_service,
)
from src.storefront.api.http.middleware.limiter import rate_limit
from src.storefront.api.http.middleware.request_context import client_ip
from src.storefront.core.services import OrderService, PayPalClient, VNPayService
from src.storefront.core.services.payment.paypal_client import PayPalPayment
from src.storefront.core.services.payment.vnpay import VNPayReturn
from src.storefront.entities.core.user import User

router = APIRouter(prefix="/payment", tags=["payment"])


class PayPalCreateRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "USD"


class PayPalExecuteRequest(BaseModel):
    payment_id: str
    payer_id: str


class VNPayCreateRequest(BaseModel):
    order_id: str
    amount: float | None = Field(default=None, gt=0)


@router.post(
    "/paypal",
    response_model=PayPalPayment,
    dependencies=[Depends(get_current_user), Depends(rate_limit())],
)
async def create_paypal_payment(
    data: PayPalCreateRequest,
    paypal: PayPalClient = Depends(get_paypal_client),
) -> PayPalPayment:
    return await paypal.create_payment(data.amount, data.currency)


@router.post("/paypal/execute", dependencies=[Depends(get_current_user), Depends(rate_limit())])
async def execute_paypal_payment(
    data: PayPalExecuteRequest,
    paypal: PayPalClient = Depends(get_paypal_client),
) -> dict[str, Any]:
    payment = await paypal.execute_payment(data.payment_id, data.payer_id)
    return {"success": True, "payment": payment}


@router.post("/vnpay", dependencies=[Depends(get_current_user), Depends(rate_limit())])
def create_vnpay_payment(
    data: VNPayCreateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    vnpay: VNPayService = Depends(get_vnpay_service),
    orders: OrderService = Depends(get_order_service),
) -> dict[str, str]:
    """Payment URL for one of the caller's orders; the charge is always the order total."""
    order = orders.payable_order(data.order_id, user, amount=data.amount)
    url = vnpay.build_payment_url(order.total, order.id, client_ip=client_ip(request))
    return {"payment_url": url}


@router.get("/vnpay/return", response_model=VNPayReturn)
def vnpay_return(
    request: Request,
    vnpay: VNPayService = Depends(get_vnpay_service),
    orders: OrderService = Depends(get_order_service),
) -> VNPayReturn:
    """Verify a VNPay redirect and mark the order paid when the full total was paid."""
    result = vnpay.verify_return(dict(request.query_params))
    if result.success:
        orders.mark_paid(result.order_id, amount=result.amount)
    return result
