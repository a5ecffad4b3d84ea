from dataclasses import dataclass

from src.storefront.core.services import (
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    PayPalClient,
    VNPayService,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    jwt_verify_service: JwtVerificationService
    jwt_generation_service: JwtGeneratorService
    paypal_client: PayPalClient
    vnpay_service: VNPayService
