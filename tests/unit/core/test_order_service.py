"""Tests for checkout and the order lifecycle."""

import pytest

from src.storefront.core.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.storefront.core.services import CartService, OrderService, ProductService, ReviewService
from src.storefront.core.services.catalog.product_service import ProductPatch
from src.storefront.core.services.order.order_service import CheckoutCustomer
from src.storefront.core.services.review.review_service import ReviewInput
from src.storefront.entities import OrderStatus, PaymentMethod, ProductRepository


@pytest.fixture
def orders(session) -> OrderService:
    return OrderService(session)


@pytest.fixture
def carts(session) -> CartService:
    return CartService(session)


def _stock(session, product_id: str) -> int:
    session.expire_all()
    return ProductRepository(session).get(product_id).stock


class TestCheckout:
    def test_checkout_creates_order_and_empties_cart(self, session, orders, carts, customer, make_product):
        mouse = make_product(name="Mouse", price=20.0, stock=5, images=["mouse.png"])
        carts.add_item(customer.id, mouse.id, 2)

        order, created = orders.checkout(customer, PaymentMethod.COD)

        assert created is True
        assert order.status == OrderStatus.PENDING
        assert order.subtotal == 40.0
        assert order.shipping == 9.99
        assert order.tax == 3.2
        assert order.total == 53.19
        assert order.items[0].name == "Mouse"
        assert order.items[0].image == "mouse.png"
        assert order.customer.city == "Hanoi"
        assert carts.get_cart(customer.id) is None
        assert _stock(session, mouse.id) == 3

    def test_bank_transfer_awaits_payment(self, orders, carts, customer, make_product):
        carts.add_item(customer.id, make_product().id, 1)

        order, _ = orders.checkout(customer, PaymentMethod.BANK)

        assert order.status == OrderStatus.AWAITING_PAYMENT

    def test_empty_cart_is_rejected(self, orders, customer):
        with pytest.raises(ValidationError, match="Cart is empty"):
            orders.checkout(customer, PaymentMethod.COD)

    def test_missing_customer_details(self, orders, carts, other_customer, make_product):
        carts.add_item(other_customer.id, make_product().id, 1)

        with pytest.raises(ValidationError, match="phone"):
            orders.checkout(other_customer, PaymentMethod.COD)

    def test_provided_customer_details_override_profile(self, orders, carts, other_customer, make_product):
        carts.add_item(other_customer.id, make_product().id, 1)
        details = CheckoutCustomer(
            phone="0123", address="1 Road", city="Hue", district="Center"
        )

        order, _ = orders.checkout(other_customer, PaymentMethod.COD, customer=details)

        assert order.customer.name == "Other Customer"
        assert order.customer.email == "other@example.com"
        assert order.customer.city == "Hue"

    def test_insufficient_stock_rolls_back_everything(self, session, orders, carts, customer, make_product):
        plenty = make_product(name="Plenty", stock=10)
        scarce = make_product(name="Scarce", stock=1)
        carts.add_item(customer.id, plenty.id, 2)
        carts.add_item(customer.id, scarce.id, 2)

        with pytest.raises(InsufficientStockError, match="Insufficient stock for Scarce"):
            orders.checkout(customer, PaymentMethod.COD)

        assert _stock(session, plenty.id) == 10
        assert _stock(session, scarce.id) == 1
        assert len(carts.get_cart(customer.id).items) == 2
        assert orders.list_orders(customer) == []

    def test_last_unit_can_only_be_sold_once(self, session, orders, carts, customer, other_customer, make_product):
        last = make_product(stock=1)
        details = CheckoutCustomer(phone="1", address="2", city="3", district="4")
        carts.add_item(customer.id, last.id, 1)
        carts.add_item(other_customer.id, last.id, 1)

        orders.checkout(customer, PaymentMethod.COD)
        with pytest.raises(InsufficientStockError):
            orders.checkout(other_customer, PaymentMethod.COD, customer=details)

        assert _stock(session, last.id) == 0

    def test_idempotency_key_replays_order(self, session, orders, carts, customer, make_product):
        product = make_product(stock=5)
        carts.add_item(customer.id, product.id, 1)

        first, created = orders.checkout(customer, PaymentMethod.COD, idempotency_key="abc")
        carts.add_item(customer.id, product.id, 1)
        second, replayed = orders.checkout(customer, PaymentMethod.COD, idempotency_key="abc")

        assert created is True
        assert replayed is False
        assert second.id == first.id
        assert _stock(session, product.id) == 4
        assert len(orders.list_orders(customer)) == 1

    def test_deactivated_product_cannot_be_bought(self, session, orders, carts, customer, make_product):
        lamp = make_product(name="Retired Lamp", stock=3)
        carts.add_item(customer.id, lamp.id, 1)
        ProductService(session).update_product(lamp.id, ProductPatch(is_active=False))

        with pytest.raises(ValidationError, match="Retired Lamp is no longer available"):
            orders.checkout(customer, PaymentMethod.COD)

        assert _stock(session, lamp.id) == 3
        assert orders.list_orders(customer) == []


@pytest.fixture
def placed_order(orders, carts, customer, make_product):
    product = make_product(stock=5)
    carts.add_item(customer.id, product.id, 2)
    order, _ = orders.checkout(customer, PaymentMethod.COD)
    return order, product


class TestOrderLifecycle:
    def test_customers_only_see_their_orders(self, orders, placed_order, customer, other_customer, admin):
        order, _ = placed_order

        assert orders.get_order(order.id, customer).id == order.id
        assert orders.get_order(order.id, admin).id == order.id
        with pytest.raises(NotFoundError):
            orders.get_order(order.id, other_customer)
        assert orders.list_orders(other_customer) == []

    def test_cancel_restores_stock(self, session, orders, placed_order, customer):
        order, product = placed_order
        assert _stock(session, product.id) == 3

        cancelled = orders.cancel_order(order.id, customer)

        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert _stock(session, product.id) == 5

    def test_cancel_requires_owner(self, orders, placed_order, other_customer):
        order, _ = placed_order
        with pytest.raises(PermissionDeniedError):
            orders.cancel_order(order.id, other_customer)

    def test_cancel_only_before_processing(self, orders, placed_order, customer):
        order, _ = placed_order
        orders.update_status(order.id, OrderStatus.PROCESSING)

        with pytest.raises(ValidationError):
            orders.cancel_order(order.id, customer)

    def test_status_transitions(self, orders, placed_order):
        order, _ = placed_order

        orders.update_status(order.id, OrderStatus.PROCESSING)
        orders.update_status(order.id, OrderStatus.SHIPPED)
        delivered = orders.update_status(order.id, OrderStatus.DELIVERED)

        assert delivered.delivered_at is not None
        with pytest.raises(ValidationError):
            orders.update_status(order.id, OrderStatus.CANCELLED)

    def test_invalid_transition(self, orders, placed_order):
        order, _ = placed_order
        with pytest.raises(ValidationError, match="Cannot change order status"):
            orders.update_status(order.id, OrderStatus.DELIVERED)

    def test_admin_cancel_restores_stock(self, session, orders, placed_order):
        order, product = placed_order

        orders.update_status(order.id, OrderStatus.CANCELLED)

        assert _stock(session, product.id) == 5

    def test_delete_open_order_restores_stock(self, session, orders, placed_order, admin):
        order, product = placed_order

        orders.delete_order(order.id)

        assert _stock(session, product.id) == 5
        with pytest.raises(NotFoundError):
            orders.get_order(order.id, admin)

    def test_delete_delivered_order_keeps_stock(self, session, orders, placed_order):
        order, product = placed_order
        for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            orders.update_status(order.id, status)

        orders.delete_order(order.id)

        assert _stock(session, product.id) == 3

    def test_mark_paid(self, orders, carts, customer, make_product):
        carts.add_item(customer.id, make_product().id, 1)
        order, _ = orders.checkout(customer, PaymentMethod.BANK)

        paid = orders.mark_paid(order.id)
        again = orders.mark_paid(order.id)

        assert paid.status == OrderStatus.PROCESSING
        assert again.status == OrderStatus.PROCESSING

    def test_mark_paid_unknown_order(self, orders):
        with pytest.raises(NotFoundError):
            orders.mark_paid("missing")

    def test_mark_paid_checks_amount(self, orders, carts, customer, make_product):
        carts.add_item(customer.id, make_product(price=50.0).id, 1)
        order, _ = orders.checkout(customer, PaymentMethod.BANK)

        with pytest.raises(ValidationError, match="does not match order total"):
            orders.mark_paid(order.id, amount=0.01)
        assert orders.get_order(order.id, customer).status == OrderStatus.AWAITING_PAYMENT

        paid = orders.mark_paid(order.id, amount=order.total)
        assert paid.status == OrderStatus.PROCESSING

    def test_payable_order(self, orders, carts, customer, other_customer, make_product):
        carts.add_item(customer.id, make_product().id, 1)
        order, _ = orders.checkout(customer, PaymentMethod.BANK)

        assert orders.payable_order(order.id, customer).id == order.id
        with pytest.raises(NotFoundError):
            orders.payable_order(order.id, other_customer)
        with pytest.raises(ValidationError, match="does not match"):
            orders.payable_order(order.id, customer, amount=order.total + 1)

        orders.mark_paid(order.id)
        with pytest.raises(ValidationError, match="not awaiting payment"):
            orders.payable_order(order.id, customer)


class TestConcurrentStatusChanges:
    def test_stale_cancel_restores_stock_once(self, monkeypatch, session, orders, placed_order, customer):
        order, product = placed_order
        stale = orders.get_order(order.id, customer)

        orders.cancel_order(order.id, customer)
        assert _stock(session, product.id) == 5

        # A second request that read the order before the first cancel committed.
        monkeypatch.setattr(orders._orders, "get", lambda order_id: stale)
        with pytest.raises(ConflictError):
            orders.update_status(order.id, OrderStatus.CANCELLED)

        assert _stock(session, product.id) == 5

    def test_stale_delete_is_rejected(self, monkeypatch, session, orders, placed_order, customer):
        order, product = placed_order
        stale = orders.get_order(order.id, customer)
        orders.cancel_order(order.id, customer)

        monkeypatch.setattr(orders._orders, "get", lambda order_id: stale)
        with pytest.raises(ConflictError):
            orders.delete_order(order.id)

        monkeypatch.undo()
        assert orders.get_order(order.id, customer).status == OrderStatus.CANCELLED
        assert _stock(session, product.id) == 5


def _foreign_key_violations(session) -> list:
    return session.connection().exec_driver_sql("PRAGMA foreign_key_check").fetchall()


class TestDeleteWithReviews:
    def test_delete_reviewed_order_removes_its_reviews(self, session, orders, placed_order, customer):
        order, product = placed_order
        for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            orders.update_status(order.id, status)
        reviews = ReviewService(session)
        reviews.create_review(
            customer,
            product.id,
            ReviewInput(order_id=order.id, rating=4, title="Solid", comment="Does the job"),
        )

        orders.delete_order(order.id)

        assert reviews.list_reviews(product.id) == []
        session.expire_all()
        stored = ProductRepository(session).get(product.id)
        assert stored.num_reviews == 0
        assert stored.rating == 0
        assert _foreign_key_violations(session) == []
