"""Cart repository for data access operations."""

from sqlalchemy import delete
from sqlmodel import Session, col, select

from src.storefront.entities.core._base import utcnow

from .entity import Cart, CartItem
from .table import CartItemTable, CartTable


class CartRepository:
    """Loads and stores a cart together with its lines."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_user(self, user_id: str) -> Cart | None:
        statement = select(CartTable).where(CartTable.user_id == user_id)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def save(self, cart: Cart) -> Cart:
        """Insert or update the cart and sync its lines."""
        row = self._session.get(CartTable, cart.id)
        if row is None:
            row = CartTable(
                id=cart.id,
                user_id=cart.user_id,
                created_at=cart.created_at,
                updated_at=cart.updated_at,
            )
        else:
            row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()

        existing = {
            line.id: line
            for line in self._session.exec(
                select(CartItemTable).where(CartItemTable.cart_id == cart.id)
            ).all()
        }
        kept = set()
        for position, item in enumerate(cart.items):
            line = existing.get(item.id)
            if line is None:
                line = CartItemTable(
                    id=item.id,
                    cart_id=cart.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                )
            line.quantity = item.quantity
            line.price = item.price
            line.position = position
            self._session.add(line)
            kept.add(item.id)

        for line_id, line in existing.items():
            if line_id not in kept:
                self._session.delete(line)
        self._session.flush()
        return cart

    def delete_for_user(self, user_id: str) -> bool:
        statement = select(CartTable).where(CartTable.user_id == user_id)
        row = self._session.exec(statement).first()
        if row is None:
            return False
        lines = self._session.exec(
            select(CartItemTable).where(CartItemTable.cart_id == row.id)
        ).all()
        for line in lines:
            self._session.delete(line)
        self._session.flush()
        self._session.delete(row)
        self._session.flush()
        return True

    def remove_product(self, product_id: str) -> int:
        """Drop every cart line for ``product_id``; returns the number removed."""
        statement = delete(CartItemTable).where(col(CartItemTable.product_id) == product_id)
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount

    def _to_entity(self, row: CartTable) -> Cart:
        statement = (
            select(CartItemTable)
            .where(CartItemTable.cart_id == row.id)
            .order_by(col(CartItemTable.position))
        )
        items = [
            CartItem.model_validate(item, from_attributes=True)
            for item in self._session.exec(statement).all()
        ]
        return Cart(
            id=row.id,
            user_id=row.user_id,
            items=items,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
