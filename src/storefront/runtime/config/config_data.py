"""Typed sections of `config.yaml`.

Every section has usable defaults so the API, the CLI and the tests can run
without a configuration file.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """Origins allowed to call the API from a browser."""

    origins: list[str] = Field(
        default=["http://localhost:3000"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RateLimiterConfig(BaseModel):
    """Default quota for endpoints guarded by `rate_limit()`."""

    requests: int = Field(
        default=100, description="Requests allowed per client and window"
    )
    window_ms: int = Field(default=60000, description="Window length in milliseconds")
    enabled: bool = Field(default=True, description="Turn quotas off entirely when false")
    per_endpoint: bool = Field(
        default=True, description="Count each route separately"
    )
    per_method: bool = Field(
        default=True, description="Count each HTTP method separately"
    )


class JWTConfig(BaseModel):
    """Access token configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["HS256"],
        description="Algorithms accepted when signing and verifying",
    )
    gen_issuer: str = Field(
        default="storefront-api", description="Issuer name to use when generating tokens"
    )
    audiences: list[str] = Field(
        default_factory=lambda: ["storefront"],
        description="Audiences stamped on and required from tokens",
    )
    clock_skew: int = Field(default=60, description="Leeway for exp and iat checks, in seconds")
    access_token_ttl_seconds: int = Field(
        default=86400, description="Lifetime of issued access tokens"
    )
    signing_secret: str | None = Field(
        default=None, description="HMAC secret used to sign access tokens"
    )


class LoggingConfig(BaseModel):
    """Loguru sinks."""

    level: str = Field(default="INFO", description="Minimum level for every sink")
    format: Literal["json", "plain"] = Field(default="json", description="File sink format")
    file: str | None = Field(default="logs/app.log", description="File sink path, empty to disable")
    max_size_mb: int = Field(default=10, description="Rotate the file sink at this size")
    backup_count: int = Field(
        default=5, description="Rotated log files kept"
    )


class DatabaseConfig(BaseModel):
    """Engine URL and pool sizing."""

    url: str = Field(
        default="sqlite:///./storefront.db",
        description="SQLAlchemy database URL",
    )
    pool_size: int = Field(default=20, description="Persistent connections per process")
    max_overflow: int = Field(default=10, description="Extra connections under load")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a free connection")
    pool_recycle: int = Field(default=1800, description="Reconnect after this many seconds")
    auto_create: bool = Field(
        default=True, description="Create missing tables on application startup"
    )
    password_env_var: str | None = Field(
        default=None,
        description="Variable holding the database password",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def connection_string(self) -> str:
        """The URL with the password taken from `password_env_var` when it has none."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if base_url.password or not self.password_env_var:
            return base_url.render_as_string(hide_password=False)

        password = os.getenv(self.password_env_var)
        if not password:
            logger.warning(
                "Environment variable {} not set; connecting without a password",
                self.password_env_var,
            )
            return base_url.render_as_string(hide_password=False)
        return base_url.set(password=password).render_as_string(hide_password=False)


class StoreConfig(BaseModel):
    """Pricing and catalog rules for the storefront."""

    currency: str = Field(default="USD", description="Display currency")
    free_shipping_threshold: float = Field(
        default=50.0, description="Subtotals above this ship for free"
    )
    shipping_fee: float = Field(default=9.99, description="Flat shipping fee")
    tax_rate: float = Field(default=0.08, description="Sales tax rate")
    top_products_limit: int = Field(
        default=10, description="Number of products in the top sellers report"
    )
    default_page_size: int = Field(default=20, description="Default product page size")
    max_page_size: int = Field(default=100, description="Largest allowed page size")


class PayPalConfig(BaseModel):
    """PayPal REST API configuration."""

    mode: Literal["sandbox", "live"] = Field(default="sandbox")
    client_id: str = Field(default="", description="PayPal REST client id")
    client_secret: str = Field(default="", description="PayPal REST client secret")
    return_url: str = Field(default="http://localhost:3000/payment/success")
    cancel_url: str = Field(default="http://localhost:3000/payment/cancel")
    timeout_seconds: float = Field(default=15.0)

    @property
    def base_url(self) -> str:
        if self.mode == "live":
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"


class VNPayConfig(BaseModel):
    """VNPay hosted payment page configuration."""

    tmn_code: str = Field(default="", description="Merchant terminal code")
    hash_secret: str = Field(default="", description="HMAC-SHA512 secret")
    url: str = Field(
        default="https://sandbox.vnpayment.vn/paymentv2/vpcpay.html",
        description="Hosted payment page URL",
    )
    return_url: str = Field(default="http://localhost:3000/payment/vnpay-return")
    version: str = Field(default="2.1.0")
    locale: str = Field(default="vn")
    curr_code: str = Field(default="VND")
    order_type: str = Field(default="other")
    utc_offset_hours: int = Field(
        default=7, description="Offset used when stamping vnp_CreateDate"
    )


class PaymentConfig(BaseModel):
    """Payment gateway configuration."""

    paypal: PayPalConfig = Field(default_factory=PayPalConfig)
    vnpay: VNPayConfig = Field(default_factory=VNPayConfig)


class AppConfig(BaseModel):
    """Where and how the HTTP server runs."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Deployment environment"
    )
    host: str = Field(default="localhost", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="Browser origins"
    )


class ConfigData(BaseModel):
    """The `config:` section of `config.yaml`."""

    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Default request quota"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="Access token configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Log sinks"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database engine"
    )
    store: StoreConfig = Field(
        default_factory=StoreConfig, description="Pricing and catalog rules"
    )
    payment: PaymentConfig = Field(
        default_factory=PaymentConfig, description="Payment gateway configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
