"""VNPay hosted payment page: URL signing and return verification."""

import hashlib
import hmac
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from loguru import logger
from pydantic import BaseModel, Field

from src.storefront.core.errors import PaymentGatewayError, ValidationError
from src.storefront.core.services.order.pricing import to_minor_units
from src.storefront.runtime.config.config_data import VNPayConfig

_UNSIGNED_KEYS = {"vnp_SecureHash", "vnp_SecureHashType"}


class VNPayReturn(BaseModel):
    order_id: str
    success: bool
    response_code: str
    amount: float = Field(default=0.0, exclude=True, description="Paid amount from vnp_Amount")


def _encode(value: object) -> str:
    # Same character set as JavaScript's encodeURIComponent.
    return quote(str(value), safe="!~*'()").replace("%20", "+")


def canonical_query(params: Mapping[str, object]) -> str:
    """Sort ``params`` by key and join them as encoded ``k=v`` pairs."""
    return "&".join(f"{_encode(key)}={_encode(params[key])}" for key in sorted(params))


def sign(data: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha512).hexdigest()


class VNPayService:
    def __init__(self, config: VNPayConfig):
        self._config = config

    def _now(self) -> datetime:
        return datetime.now(timezone(timedelta(hours=self._config.utc_offset_hours)))

    def build_payment_url(
        self,
        amount: float,
        order_id: str,
        client_ip: str | None = None,
        now: datetime | None = None,
    ) -> str:
        if not self._config.tmn_code or not self._config.hash_secret:
            raise PaymentGatewayError("VNPay credentials are not configured")

        create_date = (now or self._now()).strftime("%Y%m%d%H%M%S")
        params = {
            "vnp_Version": self._config.version,
            "vnp_Command": "pay",
            "vnp_TmnCode": self._config.tmn_code,
            "vnp_Locale": self._config.locale,
            "vnp_CurrCode": self._config.curr_code,
            "vnp_TxnRef": f"{order_id}_{create_date}",
            "vnp_OrderInfo": f"Thanh toan don hang {order_id}",
            "vnp_OrderType": self._config.order_type,
            "vnp_Amount": str(to_minor_units(amount)),
            "vnp_ReturnUrl": self._config.return_url,
            "vnp_IpAddr": client_ip or "127.0.0.1",
            "vnp_CreateDate": create_date,
        }
        query = canonical_query(params)
        secure_hash = sign(query, self._config.hash_secret)

        logger.bind(order_id=order_id, txn_ref=params["vnp_TxnRef"]).info(
            "VNPay payment URL created"
        )
        return f"{self._config.url}?{query}&vnp_SecureHash={secure_hash}"

    def verify_return(self, params: Mapping[str, str]) -> VNPayReturn:
        """Check the signature on a VNPay redirect.

        Raises:
            ValidationError: If the signature is missing or does not match
        """
        received = params.get("vnp_SecureHash", "")
        signed_params = {
            key: value
            for key, value in params.items()
            if key.startswith("vnp_") and key not in _UNSIGNED_KEYS
        }
        expected = sign(canonical_query(signed_params), self._config.hash_secret)
        if not received or not hmac.compare_digest(expected.lower(), received.lower()):
            logger.bind(txn_ref=params.get("vnp_TxnRef")).warning("VNPay signature mismatch")
            raise ValidationError("Invalid VNPay signature")

        txn_ref = signed_params.get("vnp_TxnRef", "")
        response_code = signed_params.get("vnp_ResponseCode", "")
        raw_amount = signed_params.get("vnp_Amount", "")
        return VNPayReturn(
            order_id=txn_ref.rsplit("_", 1)[0],
            success=response_code == "00",
            response_code=response_code,
            amount=int(raw_amount) / 100 if raw_amount.isdigit() else 0.0,
        )
