"""Tests for the PayPal and VNPay endpoints."""

import httpx
import pytest

from src.storefront.api.http.deps import get_paypal_client, get_vnpay_service
from src.storefront.core.services import PayPalClient, VNPayService
from src.storefront.core.services.payment.vnpay import canonical_query, sign
from src.storefront.runtime.config.config_data import PayPalConfig, VNPayConfig

SECRET = "VNPAYSECRETKEY"


def _paypal_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/v1/oauth2/token":
        return httpx.Response(200, json={"access_token": "tok"})
    if request.url.path == "/v1/payments/payment":
        return httpx.Response(
            201,
            json={"id": "PAY-9", "links": [{"rel": "approval_url", "href": "https://pp/ok"}]},
        )
    if request.url.path == "/v1/payments/payment/PAY-9/execute":
        return httpx.Response(200, json={"id": "PAY-9", "state": "approved"})
    return httpx.Response(400, json={"message": "Bad request"})


@pytest.fixture
def payment_client(client):
    paypal = PayPalClient(
        PayPalConfig(client_id="id", client_secret="secret"),
        transport=httpx.MockTransport(_paypal_handler),
    )
    vnpay = VNPayService(VNPayConfig(tmn_code="DEMO1234", hash_secret=SECRET))
    client.app.dependency_overrides[get_paypal_client] = lambda: paypal
    client.app.dependency_overrides[get_vnpay_service] = lambda: vnpay
    return client


def _signed(params: dict[str, str]) -> dict[str, str]:
    return {**params, "vnp_SecureHash": sign(canonical_query(params), SECRET)}


class TestPayPalRouter:
    def test_create_and_execute(self, payment_client, customer_headers):
        created = payment_client.post(
            "/api/payment/paypal", json={"amount": 12.5}, headers=customer_headers
        )
        assert created.status_code == 200
        assert created.json() == {"payment_id": "PAY-9", "approval_url": "https://pp/ok"}

        executed = payment_client.post(
            "/api/payment/paypal/execute",
            json={"payment_id": "PAY-9", "payer_id": "PAYER"},
            headers=customer_headers,
        )
        assert executed.json()["success"] is True
        assert executed.json()["payment"]["state"] == "approved"

    def test_gateway_error(self, payment_client, customer_headers):
        response = payment_client.post(
            "/api/payment/paypal/execute",
            json={"payment_id": "OTHER", "payer_id": "PAYER"},
            headers=customer_headers,
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Bad request"

    def test_requires_login(self, payment_client):
        assert payment_client.post("/api/payment/paypal", json={"amount": 1}).status_code == 401

    def test_unconfigured_credentials(self, client, customer_headers):
        response = client.post(
            "/api/payment/paypal", json={"amount": 12.5}, headers=customer_headers
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "PayPal credentials are not configured"


@pytest.fixture
def bank_order(payment_client, customer_headers, make_product) -> dict:
    product = make_product(price=30.0)
    payment_client.post("/api/cart", json={"product_id": product.id}, headers=customer_headers)
    order = payment_client.post(
        "/api/orders", json={"payment_method": "bank"}, headers=customer_headers
    ).json()
    assert order["status"] == "awaiting_payment"
    return order


def _vnpay_return(order: dict, amount: float) -> dict[str, str]:
    return _signed(
        {
            "vnp_TxnRef": f"{order['id']}_20240105093000",
            "vnp_ResponseCode": "00",
            "vnp_Amount": str(round(amount * 100)),
        }
    )


class TestVNPayRouter:
    def test_create_payment_url_charges_order_total(self, payment_client, customer_headers, bank_order):
        response = payment_client.post(
            "/api/payment/vnpay",
            json={"order_id": bank_order["id"]},
            headers={**customer_headers, "X-Forwarded-For": "203.0.113.5, 10.0.0.1"},
        )

        url = response.json()["payment_url"]
        assert url.startswith("https://sandbox.vnpayment.vn/paymentv2/vpcpay.html?")
        assert f"vnp_Amount={round(bank_order['total'] * 100)}" in url
        assert "vnp_IpAddr=203.0.113.5" in url
        assert "vnp_SecureHash=" in url

    def test_create_rejects_amount_other_than_total(self, payment_client, customer_headers, bank_order):
        response = payment_client.post(
            "/api/payment/vnpay",
            json={"order_id": bank_order["id"], "amount": 0.01},
            headers=customer_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Payment amount does not match order total"

    def test_create_for_someone_elses_order(self, payment_client, bank_order, other_customer, token_for):
        response = payment_client.post(
            "/api/payment/vnpay",
            json={"order_id": bank_order["id"]},
            headers={"Authorization": f"Bearer {token_for(other_customer)}"},
        )

        assert response.status_code == 404

    def test_create_for_cod_order(self, payment_client, customer_headers, make_product):
        payment_client.post(
            "/api/cart", json={"product_id": make_product().id}, headers=customer_headers
        )
        order = payment_client.post(
            "/api/orders", json={"payment_method": "cod"}, headers=customer_headers
        ).json()

        response = payment_client.post(
            "/api/payment/vnpay", json={"order_id": order["id"]}, headers=customer_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Order is not awaiting payment"

    def test_return_marks_order_paid(self, payment_client, customer_headers, bank_order):
        params = _vnpay_return(bank_order, bank_order["total"])
        response = payment_client.get("/api/payment/vnpay/return", params=params)

        assert response.status_code == 200
        assert response.json() == {
            "order_id": bank_order["id"],
            "success": True,
            "response_code": "00",
        }
        refreshed = payment_client.get(f"/api/orders/{bank_order['id']}", headers=customer_headers)
        assert refreshed.json()["status"] == "processing"

    def test_return_with_partial_amount_is_rejected(self, payment_client, customer_headers, bank_order):
        params = _vnpay_return(bank_order, 0.01)
        response = payment_client.get("/api/payment/vnpay/return", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == "Payment amount does not match order total"
        refreshed = payment_client.get(f"/api/orders/{bank_order['id']}", headers=customer_headers)
        assert refreshed.json()["status"] == "awaiting_payment"

    def test_failed_payment_leaves_order(self, payment_client):
        params = _signed({"vnp_TxnRef": "missing_20240105093000", "vnp_ResponseCode": "24"})

        response = payment_client.get("/api/payment/vnpay/return", params=params)

        assert response.json()["success"] is False

    def test_invalid_signature(self, payment_client):
        params = {"vnp_TxnRef": "order_1", "vnp_ResponseCode": "00", "vnp_SecureHash": "bad"}

        response = payment_client.get("/api/payment/vnpay/return", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid VNPay signature"
