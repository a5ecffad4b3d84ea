"""Core services exports."""

# Catalog, cart and orders
from .cart.cart_service import CartService
from .catalog.product_service import ProductService

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# JWT Services
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService
from .order.order_service import OrderService

# Payment gateways
from .payment.paypal_client import PayPalClient
from .payment.vnpay import VNPayService
from .report.sales_report import SalesReportService
from .review.review_service import ReviewService

# User Services
from .user.user_management import UserManagementService

__all__ = [
    # JWT Services
    "JwtGeneratorService",
    "JwtVerificationService",
    # Database Services
    "DbManageService",
    "DbSessionService",
    # User Services
    "UserManagementService",
    # Storefront
    "CartService",
    "OrderService",
    "ProductService",
    "ReviewService",
    "SalesReportService",
    # Payment gateways
    "PayPalClient",
    "VNPayService",
]
