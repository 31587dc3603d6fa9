"""Catalogue routes: categories and products."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.api.auth import optional_account, require_admin
from storefront.api.schemas import (
    AdjustStockRequest,
    CategoryRequest,
    CreateProductRequest,
    Envelope,
    Pagination,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.api.serializers import category_to_dict, product_to_dict
from storefront.catalogue.category import Category
from storefront.catalogue.category_management import CreateCategory, DeleteCategory, UpdateCategory
from storefront.catalogue.product import Product
from storefront.catalogue.product_management import (
    CreateProduct,
    DeleteProduct,
    ReplaceProductImages,
    UpdateProduct,
)
from storefront.catalogue.stock import AdjustStock
from storefront.errors import NotFound

SORT_FIELDS = {
    "newest": "-created_at",
    "price_asc": "price",
    "price_desc": "-price",
    "rating": "-average_rating",
    "name": "name",
}

# ---------------------------------------------------------------------------
# Category Router
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"])


@category_router.get("", response_model=Envelope)
async def list_categories() -> Envelope:
    categories = (
        current_domain.repository_for(Category)._dao.query.filter(is_active=True).order_by("sort_order").all().items
    )
    return Envelope(data=[category_to_dict(c) for c in categories])


@category_router.post("", status_code=201, response_model=Envelope)
async def create_category(body: CategoryRequest, admin: Account = Depends(require_admin)) -> Envelope:
    command = CreateCategory(
        name=body.name,
        description=body.description,
        image=body.image,
        sort_order=body.sort_order,
    )
    category_id = current_domain.process(command, asynchronous=False)
    category = current_domain.repository_for(Category).get(category_id)
    return Envelope(data=category_to_dict(category), message="Category created")


@category_router.put("/{category_id}", response_model=Envelope)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, admin: Account = Depends(require_admin)
) -> Envelope:
    command = UpdateCategory(category_id=category_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    category = current_domain.repository_for(Category).get(category_id)
    return Envelope(data=category_to_dict(category), message="Category updated")


@category_router.delete("/{category_id}", response_model=Envelope)
async def delete_category(category_id: str, admin: Account = Depends(require_admin)) -> Envelope:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return Envelope(message="Category deleted")


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=Envelope)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    featured: bool | None = None,
    search: str | None = None,
    sort: str = "newest",
) -> Envelope:
    products, total = current_domain.repository_for(Product).search(
        category_id=category,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        text=search,
        sort=SORT_FIELDS.get(sort, SORT_FIELDS["newest"]),
        page=page,
        limit=limit,
    )
    return Envelope(
        data=[product_to_dict(p) for p in products],
        pagination=Pagination.build(page, limit, total),
    )


@product_router.get("/featured", response_model=Envelope)
async def featured_products(limit: int = Query(8, ge=1, le=50)) -> Envelope:
    products, _ = current_domain.repository_for(Product).search(featured=True, limit=limit)
    return Envelope(data=[product_to_dict(p) for p in products])


@product_router.get("/{id_or_slug}", response_model=Envelope)
async def get_product(id_or_slug: str, account: Account | None = Depends(optional_account)) -> Envelope:
    repo = current_domain.repository_for(Product)
    product = repo.find_by_slug(id_or_slug)
    if product is None:
        try:
            product = repo.get(id_or_slug)
        except (ObjectNotFoundError, ValidationError):
            product = None

    visible = product is not None and (product.is_active or (account is not None and account.is_admin))
    if not visible:
        raise NotFound("Product not found")
    return Envelope(data=product_to_dict(product))


@product_router.post("", status_code=201, response_model=Envelope)
async def create_product(body: CreateProductRequest, admin: Account = Depends(require_admin)) -> Envelope:
    fields = body.model_dump(exclude={"images"})
    command = CreateProduct(
        **fields,
        images=json.dumps([image.model_dump() for image in body.images]),
        created_by=str(admin.id),
    )
    product_id = current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(Product).get(product_id)
    return Envelope(data=product_to_dict(product), message="Product created")


@product_router.put("/{product_id}", response_model=Envelope)
async def update_product(
    product_id: str, body: UpdateProductRequest, admin: Account = Depends(require_admin)
) -> Envelope:
    changes = body.model_dump(exclude_none=True, exclude={"images"})
    if changes:
        current_domain.process(UpdateProduct(product_id=product_id, changes=json.dumps(changes)), asynchronous=False)
    if body.images is not None:
        images = json.dumps([image.model_dump() for image in body.images])
        current_domain.process(ReplaceProductImages(product_id=product_id, images=images), asynchronous=False)

    product = current_domain.repository_for(Product).get(product_id)
    return Envelope(data=product_to_dict(product), message="Product updated")


@product_router.put("/{product_id}/stock", response_model=Envelope)
async def adjust_stock(product_id: str, body: AdjustStockRequest, admin: Account = Depends(require_admin)) -> Envelope:
    quantity = current_domain.process(AdjustStock(product_id=product_id, delta=body.delta), asynchronous=False)
    return Envelope(data={"product_id": product_id, "quantity": quantity}, message="Stock updated")


@product_router.delete("/{product_id}", response_model=Envelope)
async def delete_product(product_id: str, admin: Account = Depends(require_admin)) -> Envelope:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return Envelope(message="Product deleted")
