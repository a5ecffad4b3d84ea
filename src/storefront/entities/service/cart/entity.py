"""Entity: Cart."""

from pydantic import BaseModel, Field

from src.storefront.entities.core._base import Entity, new_id


class CartItem(BaseModel):
    """One cart line; ``price`` is the unit price when the line was created."""

    id: str = Field(default_factory=new_id)
    product_id: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(Entity):
    """A user's cart. There is at most one per user."""

    user_id: str
    items: list[CartItem] = Field(default_factory=list)

    @property
    def total_amount(self) -> float:
        return round(sum(item.line_total for item in self.items), 2)

    def find_item(self, item_id: str) -> CartItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def find_product_line(self, product_id: str) -> CartItem | None:
        return next((item for item in self.items if item.product_id == product_id), None)

    def add(self, product_id: str, quantity: int, price: float) -> CartItem:
        """Increment an existing line for the product or append a new one."""
        line = self.find_product_line(product_id)
        if line is not None:
            line.quantity += quantity
            return line
        line = CartItem(product_id=product_id, quantity=quantity, price=price)
        self.items.append(line)
        return line

    def remove(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]
