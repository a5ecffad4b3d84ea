"""Shopping cart router."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.storefront.api.http.deps import get_cart_service, get_current_user
from src.storefront.core.services import CartService
from src.storefront.entities.core.user import User
from src.storefront.entities.service.cart import Cart, CartItem

router = APIRouter(prefix="/cart", tags=["cart"])


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartResponse(BaseModel):
    id: str | None = None
    user_id: str | None = None
    items: list[CartItem] = Field(default_factory=list)
    total_amount: float = 0

    @classmethod
    def from_cart(cls, cart: Cart | None) -> "CartResponse":
        if cart is None:
            return cls()
        return cls(
            id=cart.id,
            user_id=cart.user_id,
            items=cart.items,
            total_amount=cart.total_amount,
        )


@router.get("", response_model=CartResponse, response_model_exclude_none=True)
def get_cart(
    user: User = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse.from_cart(carts.get_cart(user.id))


@router.post("", response_model=CartResponse, status_code=201)
def add_to_cart(
    data: AddToCartRequest,
    user: User = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse.from_cart(carts.add_item(user.id, data.product_id, data.quantity))


@router.put("/{item_id}", response_model=CartResponse)
def update_cart_item(
    item_id: str,
    data: UpdateCartItemRequest,
    user: User = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse.from_cart(carts.update_item(user.id, item_id, data.quantity))


@router.delete("/{item_id}", response_model=CartResponse)
def remove_cart_item(
    item_id: str,
    user: User = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse.from_cart(carts.remove_item(user.id, item_id))


@router.delete("")
def clear_cart(
    user: User = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
) -> dict[str, str]:
    carts.clear_cart(user.id)
    return {"message": "Cart cleared"}
