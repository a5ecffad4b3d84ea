"""Minimal PayPal REST client for sale payments."""

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from src.storefront.core.errors import PaymentGatewayError
from src.storefront.runtime.config.config_data import PayPalConfig


class PayPalPayment(BaseModel):
    payment_id: str
    approval_url: str


def _format_amount(amount: float) -> str:
    return f"{amount:.2f}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"PayPal request failed with status {response.status_code}"
    return (
        body.get("message")
        or body.get("error_description")
        or f"PayPal request failed with status {response.status_code}"
    )


class PayPalClient:
    def __init__(self, config: PayPalConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        if not self._config.client_id or not self._config.client_secret:
            raise PaymentGatewayError("PayPal credentials are not configured")

        response = await client.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self._config.client_id, self._config.client_secret),
            headers={"Accept": "application/json"},
        )
        if response.status_code != 200:
            raise PaymentGatewayError(_error_message(response))
        return response.json()["access_token"]

    async def create_payment(self, amount: float, currency: str = "USD") -> PayPalPayment:
        """Create a ``sale`` payment and return its approval link."""
        total = _format_amount(amount)
        payload = {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {
                "return_url": self._config.return_url,
                "cancel_url": self._config.cancel_url,
            },
            "transactions": [
                {
                    "item_list": {
                        "items": [
                            {
                                "name": "E-commerce Purchase",
                                "sku": "item",
                                "price": total,
                                "currency": currency,
                                "quantity": 1,
                            }
                        ]
                    },
                    "amount": {"currency": currency, "total": total},
                    "description": "Payment for e-commerce purchase",
                }
            ],
        }

        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.post(
                    "/v1/payments/payment",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"PayPal unreachable: {exc}") from exc

        if response.status_code not in (200, 201):
            raise PaymentGatewayError(_error_message(response))

        payment = response.json()
        approval_url = next(
            (
                link["href"]
                for link in payment.get("links", [])
                if link.get("rel") == "approval_url"
            ),
            None,
        )
        if approval_url is None:
            raise PaymentGatewayError("PayPal response did not include an approval URL")

        logger.bind(payment_id=payment["id"], amount=total, currency=currency).info(
            "PayPal payment created"
        )
        return PayPalPayment(payment_id=payment["id"], approval_url=approval_url)

    async def execute_payment(self, payment_id: str, payer_id: str) -> dict[str, Any]:
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.post(
                    f"/v1/payments/payment/{payment_id}/execute",
                    json={"payer_id": payer_id},
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"PayPal unreachable: {exc}") from exc

        if response.status_code != 200:
            raise PaymentGatewayError(_error_message(response))

        logger.bind(payment_id=payment_id).info("PayPal payment executed")
        return response.json()
