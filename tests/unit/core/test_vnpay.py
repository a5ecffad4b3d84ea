"""Tests for VNPay URL signing and return verification."""

import hashlib
import hmac
from datetime import datetime
from urllib.parse import parse_qsl, urlsplit

import pytest

from src.storefront.core.errors import PaymentGatewayError, ValidationError
from src.storefront.core.services import VNPayService
from src.storefront.core.services.payment.vnpay import canonical_query, sign
from src.storefront.runtime.config.config_data import VNPayConfig

SECRET = "VNPAYSECRETKEY"


@pytest.fixture
def vnpay() -> VNPayService:
    return VNPayService(
        VNPayConfig(
            tmn_code="DEMO1234",
            hash_secret=SECRET,
            url="https://sandbox.vnpayment.vn/paymentv2/vpcpay.html",
            return_url="http://localhost:3000/payment/vnpay-return",
        )
    )


def _query(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


class TestCanonicalQuery:
    def test_sorted_and_encoded_like_encode_uri_component(self):
        query = canonical_query({"b": "a b", "a": "x/y:z", "c": "it's(ok)!"})

        assert query == "a=x%2Fy%3Az&b=a+b&c=it's(ok)!"

    def test_sign_is_hmac_sha512_hex(self):
        expected = hmac.new(b"k", b"a=1", hashlib.sha512).hexdigest()
        assert sign("a=1", "k") == expected


class TestBuildPaymentUrl:
    def test_parameters(self, vnpay):
        url = vnpay.build_payment_url(
            150000, "order42", client_ip="10.0.0.1", now=datetime(2024, 1, 2, 3, 4, 5)
        )
        params = _query(url)

        assert url.startswith("https://sandbox.vnpayment.vn/paymentv2/vpcpay.html?")
        assert params["vnp_Version"] == "2.1.0"
        assert params["vnp_Command"] == "pay"
        assert params["vnp_TmnCode"] == "DEMO1234"
        assert params["vnp_Locale"] == "vn"
        assert params["vnp_CurrCode"] == "VND"
        assert params["vnp_TxnRef"] == "order42_20240102030405"
        assert params["vnp_OrderInfo"] == "Thanh toan don hang order42"
        assert params["vnp_OrderType"] == "other"
        assert params["vnp_Amount"] == "15000000"
        assert params["vnp_IpAddr"] == "10.0.0.1"
        assert params["vnp_CreateDate"] == "20240102030405"

    def test_signature_covers_sorted_query(self, vnpay):
        url = vnpay.build_payment_url(1000, "o1", now=datetime(2024, 1, 2, 3, 4, 5))
        query = urlsplit(url).query
        signed_part, secure_hash = query.rsplit("&vnp_SecureHash=", 1)

        keys = [pair.split("=", 1)[0] for pair in signed_part.split("&")]
        assert keys == sorted(keys)
        assert secure_hash == sign(signed_part, SECRET)
        assert "Thanh+toan+don+hang+o1" in signed_part

    def test_default_ip(self, vnpay):
        url = vnpay.build_payment_url(1000, "o1")
        assert _query(url)["vnp_IpAddr"] == "127.0.0.1"

    def test_requires_credentials(self):
        with pytest.raises(PaymentGatewayError):
            VNPayService(VNPayConfig()).build_payment_url(1000, "o1")


class TestVerifyReturn:
    def _signed_return(self, **overrides) -> dict[str, str]:
        params = {
            "vnp_Amount": "100000",
            "vnp_BankCode": "NCB",
            "vnp_OrderInfo": "Thanh toan don hang abc",
            "vnp_ResponseCode": "00",
            "vnp_TmnCode": "DEMO1234",
            "vnp_TxnRef": "abc_20240102030405",
        }
        params.update(overrides)
        params["vnp_SecureHashType"] = "HmacSHA512"
        params["vnp_SecureHash"] = sign(
            canonical_query({k: v for k, v in params.items() if k != "vnp_SecureHashType"}),
            SECRET,
        )
        return params

    def test_valid_success(self, vnpay):
        result = vnpay.verify_return(self._signed_return())

        assert result.order_id == "abc"
        assert result.success is True
        assert result.response_code == "00"
        assert result.amount == 1000.0
        assert "amount" not in result.model_dump()

    def test_valid_failure_code(self, vnpay):
        result = vnpay.verify_return(self._signed_return(vnp_ResponseCode="24"))

        assert result.success is False
        assert result.response_code == "24"

    def test_uppercase_hash_accepted(self, vnpay):
        params = self._signed_return()
        params["vnp_SecureHash"] = params["vnp_SecureHash"].upper()

        assert vnpay.verify_return(params).success is True

    def test_tampered_params_rejected(self, vnpay):
        params = self._signed_return()
        params["vnp_Amount"] = "1"

        with pytest.raises(ValidationError):
            vnpay.verify_return(params)

    def test_missing_signature_rejected(self, vnpay):
        params = self._signed_return()
        del params["vnp_SecureHash"]

        with pytest.raises(ValidationError):
            vnpay.verify_return(params)

    def test_payment_url_round_trips_through_verification(self, vnpay):
        url = vnpay.build_payment_url(1000, "xyz", now=datetime(2024, 1, 2, 3, 4, 5))
        params = _query(url)
        params["vnp_ResponseCode"] = "00"
        del params["vnp_SecureHash"]
        params["vnp_SecureHash"] = sign(canonical_query(params), SECRET)

        assert vnpay.verify_return(params).order_id == "xyz"
