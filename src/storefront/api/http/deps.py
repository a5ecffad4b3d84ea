"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.storefront.api.http.app_data import ApplicationDependencies
from src.storefront.core.errors import AuthenticationError, PermissionDeniedError
from src.storefront.core.services import (
    CartService,
    JwtGeneratorService,
    JwtVerificationService,
    OrderService,
    PayPalClient,
    ProductService,
    ReviewService,
    SalesReportService,
    UserManagementService,
    VNPayService,
)
from src.storefront.entities.core.user import User, UserRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a request-scoped database session."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_verify_service


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_generation_service


def get_paypal_client(request: Request) -> PayPalClient:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.paypal_client


def get_vnpay_service(request: Request) -> VNPayService:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.vnpay_service


def get_user_management_service(
    jwt_service: JwtGeneratorService = Depends(get_jwt_generation_service),
    db_session: Session = Depends(get_db_session),
) -> UserManagementService:
    """Get the User Management service instance."""
    return UserManagementService(jwt_service, db_session)


def get_product_service(db_session: Session = Depends(get_db_session)) -> ProductService:
    return ProductService(db_session)


def get_cart_service(db_session: Session = Depends(get_db_session)) -> CartService:
    return CartService(db_session)


def get_order_service(db_session: Session = Depends(get_db_session)) -> OrderService:
    return OrderService(db_session)


def get_review_service(db_session: Session = Depends(get_db_session)) -> ReviewService:
    return ReviewService(db_session)


def get_sales_report_service(
    db_session: Session = Depends(get_db_session),
) -> SalesReportService:
    return SalesReportService(db_session)


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db_session),
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> User:
    """Authenticate the request using a Bearer token."""

    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError("Missing Bearer token")

    token = auth_header.split(" ", 1)[1]
    claims = jwt_verify.verify_jwt(token)

    user = UserRepository(db).get(claims.subject)
    if user is None:
        raise AuthenticationError("User not found")

    request.state.claims = claims
    request.state.roles = claims.roles
    request.state.uid = user.id
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency that only lets administrators through.

    The role is read from the database, so demoting a user takes effect
    before their token expires.
    """
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user
