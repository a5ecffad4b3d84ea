"""Checkout and order lifecycle."""

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.storefront.core.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    StorefrontError,
    ValidationError,
)
from src.storefront.core.services.order.pricing import compute_totals, to_minor_units
from src.storefront.core.services.review.review_service import refresh_product_rating
from src.storefront.entities.core._base import utcnow
from src.storefront.entities.core.user import User
from src.storefront.entities.service.cart import CartRepository
from src.storefront.entities.service.order import (
    CustomerInfo,
    Order,
    OrderItem,
    OrderRepository,
    OrderStatus,
    PaymentMethod,
)
from src.storefront.entities.service.product import ProductRepository
from src.storefront.entities.service.review import ReviewRepository
from src.storefront.runtime.context import get_config

_CUSTOMER_FIELDS = ("name", "email", "phone", "address", "city", "district")


class CheckoutCustomer(BaseModel):
    """Shipping details sent with a checkout; blanks fall back to the profile."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    district: str | None = None


class OrderService:
    def __init__(self, db_session: Session):
        self._orders = OrderRepository(db_session)
        self._carts = CartRepository(db_session)
        self._products = ProductRepository(db_session)
        self._reviews = ReviewRepository(db_session)
        self._db_session = db_session

    def checkout(
        self,
        user: User,
        payment_method: PaymentMethod,
        customer: CheckoutCustomer | None = None,
        idempotency_key: str | None = None,
    ) -> tuple[Order, bool]:
        """Turn the user's cart into an order.

        Returns the order and whether it was created by this call. A repeated
        ``idempotency_key`` returns the earlier order untouched.

        Raises:
            ValidationError: If the cart is empty, holds a deactivated product or
                customer details are missing
            InsufficientStockError: If any line cannot be covered by current stock
        """
        if idempotency_key:
            existing = self._orders.get_by_idempotency_key(user.id, idempotency_key)
            if existing is not None:
                logger.bind(order_id=existing.id, user_id=user.id).info(
                    "Checkout replayed with idempotency key"
                )
                return existing, False

        cart = self._carts.get_for_user(user.id)
        if cart is None or not cart.items:
            raise ValidationError("Cart is empty")

        info = self._resolve_customer(user, customer)

        items: list[OrderItem] = []
        try:
            for line in cart.items:
                product = self._products.get(line.product_id)
                if product is None:
                    raise NotFoundError("Product not found")
                if not product.is_active:
                    raise ValidationError(f"{product.name} is no longer available")
                if not self._products.try_decrement_stock(product.id, line.quantity):
                    raise InsufficientStockError(product.name)
                items.append(
                    OrderItem(
                        product_id=product.id,
                        name=product.name,
                        price=line.price,
                        quantity=line.quantity,
                        image=product.image,
                    )
                )

            totals = compute_totals(
                [(item.price, item.quantity) for item in items], get_config().store
            )
            order = Order(
                user_id=user.id,
                customer=info,
                items=items,
                payment_method=payment_method,
                status=OrderStatus.initial_for(payment_method),
                subtotal=totals.subtotal,
                shipping=totals.shipping,
                tax=totals.tax,
                total=totals.total,
                idempotency_key=idempotency_key,
            )
            self._orders.create(order)
            self._carts.delete_for_user(user.id)
            self._db_session.commit()
        except StorefrontError:
            self._db_session.rollback()
            raise
        except IntegrityError:
            # A concurrent request with the same idempotency key won.
            self._db_session.rollback()
            if idempotency_key:
                existing = self._orders.get_by_idempotency_key(user.id, idempotency_key)
                if existing is not None:
                    return existing, False
            raise

        logger.bind(
            order_id=order.id,
            user_id=user.id,
            total=order.total,
            payment_method=str(payment_method),
        ).info("Order placed")
        return order, True

    def list_orders(self, user: User) -> list[Order]:
        return self._orders.list_orders(user_id=user.id)

    def list_all_orders(self, status: OrderStatus | None = None) -> list[Order]:
        return self._orders.list_orders(statuses=[status] if status else None)

    def get_order(self, order_id: str, user: User) -> Order:
        """Fetch an order visible to ``user``; customers only see their own."""
        order = self._orders.get(order_id)
        if order is None or (not user.is_admin and order.user_id != user.id):
            raise NotFoundError("Order not found")
        return order

    def cancel_order(self, order_id: str, user: User) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.user_id != user.id:
            raise PermissionDeniedError("Not allowed to cancel this order")
        if order.status not in (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT):
            raise ValidationError(f"Order cannot be cancelled in status {order.status}")

        return self._apply_status(order, OrderStatus.CANCELLED)

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if not order.can_transition_to(status):
            raise ValidationError(f"Cannot change order status from {order.status} to {status}")

        return self._apply_status(order, status)

    def delete_order(self, order_id: str) -> None:
        """Delete an order and the reviews written against it.

        Stock of an open order goes back to the catalog.

        Raises:
            NotFoundError: If the order does not exist
            ConflictError: If the order changed status while being deleted
        """
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")

        reviewed = self._reviews.delete_for_order(order_id)
        if not self._orders.delete(order_id, expected=order.status):
            self._db_session.rollback()
            raise ConflictError("Order was modified by another request")
        if order.status.is_open:
            self._restore_stock(order)
        for product_id in reviewed:
            refresh_product_rating(self._reviews, self._products, product_id)
        self._db_session.commit()
        logger.bind(order_id=order_id, status=str(order.status)).info("Order deleted")

    def payable_order(self, order_id: str, user: User, amount: float | None = None) -> Order:
        """The order of ``user`` that is waiting for an online payment.

        Raises:
            NotFoundError: If the order is not visible to ``user``
            ValidationError: If it is not awaiting payment or ``amount`` differs from its total
        """
        order = self.get_order(order_id, user)
        if order.status != OrderStatus.AWAITING_PAYMENT:
            raise ValidationError("Order is not awaiting payment")
        self._check_amount(order, amount)
        return order

    def mark_paid(self, order_id: str, amount: float | None = None) -> Order:
        """Record a confirmed online payment of ``amount``.

        Orders already past ``awaiting_payment`` are returned unchanged so a
        gateway that redirects twice does not fail the second time.

        Raises:
            ValidationError: If the order was cancelled or ``amount`` differs from its total
        """
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        self._check_amount(order, amount)
        if order.status == OrderStatus.AWAITING_PAYMENT:
            return self._apply_status(order, OrderStatus.PROCESSING)
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Order has been cancelled")
        return order

    def _check_amount(self, order: Order, amount: float | None) -> None:
        if amount is None or to_minor_units(amount) == to_minor_units(order.total):
            return
        logger.bind(order_id=order.id, amount=amount, total=order.total).warning(
            "Payment amount does not match order total"
        )
        raise ValidationError("Payment amount does not match order total")

    def _apply_status(self, order: Order, status: OrderStatus) -> Order:
        """Move ``order`` to ``status`` unless another request already moved it.

        Raises:
            ConflictError: If the stored status no longer matches ``order.status``
        """
        previous = order.status
        changed = order.model_copy(update={"status": status})
        if status == OrderStatus.DELIVERED:
            changed.delivered_at = utcnow()
        elif status == OrderStatus.CANCELLED:
            changed.cancelled_at = utcnow()

        if not self._orders.update_status(changed, expected=previous):
            self._db_session.rollback()
            logger.bind(order_id=order.id, expected=str(previous), status=str(status)).warning(
                "Order status changed concurrently"
            )
            raise ConflictError("Order was modified by another request")
        if status == OrderStatus.CANCELLED:
            self._restore_stock(changed)

        self._db_session.commit()
        logger.bind(order_id=order.id, previous=str(previous), status=str(status)).info(
            "Order status changed"
        )
        return changed

    def _restore_stock(self, order: Order) -> None:
        for item in order.items:
            self._products.increment_stock(item.product_id, item.quantity)
        logger.bind(order_id=order.id, items=order.item_count).info("Stock restored")

    def _resolve_customer(self, user: User, customer: CheckoutCustomer | None) -> CustomerInfo:
        provided = customer.model_dump() if customer else {}
        resolved = {}
        for field in _CUSTOMER_FIELDS:
            value = (provided.get(field) or "").strip() or (getattr(user, field) or "").strip()
            resolved[field] = value

        missing = [field for field, value in resolved.items() if not value]
        if missing:
            raise ValidationError(f"Missing customer information: {', '.join(missing)}")
        return CustomerInfo(**resolved)
