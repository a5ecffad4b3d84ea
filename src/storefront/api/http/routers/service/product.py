"""Product catalog router."""

from fastapi import APIRouter, Depends, Query

from src.storefront.api.http.deps import get_product_service, require_admin
from src.storefront.core.services import ProductService
from src.storefront.core.services.catalog.product_service import (
    ProductInput,
    ProductPage,
    ProductPatch,
)
from src.storefront.entities.service.product import Product

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductPage)
def list_products(
    keyword: str | None = None,
    category: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    products: ProductService = Depends(get_product_service),
) -> ProductPage:
    """List active products, optionally filtered by keyword and category."""
    return products.list_products(keyword=keyword, category=category, page=page, limit=limit)


@router.get("/categories", response_model=list[str])
def list_categories(products: ProductService = Depends(get_product_service)) -> list[str]:
    return products.list_categories()


@router.get("/{id_or_slug}", response_model=Product)
def get_product(
    id_or_slug: str,
    products: ProductService = Depends(get_product_service),
) -> Product:
    """Get a product by id or slug."""
    return products.get_product(id_or_slug)


@router.post(
    "",
    response_model=Product,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def create_product(
    data: ProductInput,
    products: ProductService = Depends(get_product_service),
) -> Product:
    return products.create_product(data)


@router.put("/{product_id}", response_model=Product, dependencies=[Depends(require_admin)])
def update_product(
    product_id: str,
    changes: ProductPatch,
    products: ProductService = Depends(get_product_service),
) -> Product:
    return products.update_product(product_id, changes)


@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete_product(
    product_id: str,
    products: ProductService = Depends(get_product_service),
) -> dict[str, str]:
    products.delete_product(product_id)
    return {"message": "Product deleted successfully"}
