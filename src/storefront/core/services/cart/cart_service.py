from loguru import logger
from sqlmodel import Session

from src.storefront.core.errors import NotFoundError
from src.storefront.entities.service.cart import Cart, CartRepository
from src.storefront.entities.service.product import ProductRepository


class CartService:
    """Server-side shopping cart, one per user."""

    def __init__(self, db_session: Session):
        self._carts = CartRepository(db_session)
        self._products = ProductRepository(db_session)
        self._db_session = db_session

    def get_cart(self, user_id: str) -> Cart | None:
        return self._carts.get_for_user(user_id)

    def add_item(self, user_id: str, product_id: str, quantity: int = 1) -> Cart:
        """Add ``quantity`` units of a product.

        A new line captures the product's current price; an existing line for
        the same product only has its quantity raised.
        """
        product = self._products.get(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")

        cart = self._carts.get_for_user(user_id) or Cart(user_id=user_id)
        cart.add(product.id, quantity, product.price)
        self._carts.save(cart)
        self._db_session.commit()
        logger.bind(user_id=user_id, product_id=product_id, quantity=quantity).debug(
            "Cart item added"
        )
        return cart

    def update_item(self, user_id: str, item_id: str, quantity: int) -> Cart:
        cart = self._require_cart(user_id)
        item = cart.find_item(item_id)
        if item is None:
            raise NotFoundError("Item not found in cart")

        item.quantity = quantity
        self._carts.save(cart)
        self._db_session.commit()
        return cart

    def remove_item(self, user_id: str, item_id: str) -> Cart:
        cart = self._require_cart(user_id)
        cart.remove(item_id)
        self._carts.save(cart)
        self._db_session.commit()
        return cart

    def clear_cart(self, user_id: str) -> None:
        self._carts.delete_for_user(user_id)
        self._db_session.commit()

    def _require_cart(self, user_id: str) -> Cart:
        cart = self._carts.get_for_user(user_id)
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart
