"""Pydantic request/response schemas for the REST API.

These are the external contracts; handlers translate them into commands.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = (total + limit - 1) // limit if limit else 0
        return cls(page=page, limit=limit, total=total, pages=pages, has_next=page < pages, has_prev=page > 1)


class Envelope(BaseModel):
    """Every response: ``success`` plus either ``data`` or ``error``."""

    success: bool = True
    data: Any = None
    message: str | None = None
    pagination: Pagination | None = None


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    details: Any = None


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
class RegisterAccountRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: str = Field(max_length=254)
    phone: str | None = Field(default=None, max_length=20)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "phone": "+1-555-0100",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CategoryRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=500)
    image: str | None = None
    sort_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=500)
    image: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class ImageSchema(BaseModel):
    url: str
    alt: str | None = None
    is_primary: bool = False


class CreateProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    short_description: str | None = Field(default=None, max_length=200)
    category_id: str
    price: float = Field(ge=0)
    compare_price: float | None = Field(default=None, ge=0)
    sku: str = Field(min_length=1, max_length=50)
    weight_value: float = Field(default=0.0, ge=0)
    weight_unit: Literal["lb", "oz", "kg", "g"] = "lb"
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    track_quantity: bool = True
    is_featured: bool = False
    images: list[ImageSchema] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoe",
                    "description": "Lightweight shoe with a grippy outsole.",
                    "category_id": "c0ffee00-0000-0000-0000-000000000001",
                    "price": 89.99,
                    "sku": "TRS-001",
                    "weight_value": 1.5,
                    "stock_quantity": 25,
                    "images": [{"url": "https://cdn.example.com/trs-001.jpg", "is_primary": True}],
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    short_description: str | None = Field(default=None, max_length=200)
    category_id: str | None = None
    price: float | None = Field(default=None, ge=0)
    compare_price: float | None = Field(default=None, ge=0)
    sku: str | None = Field(default=None, min_length=1, max_length=50)
    weight_value: float | None = Field(default=None, ge=0)
    weight_unit: Literal["lb", "oz", "kg", "g"] | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)
    track_quantity: bool | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    images: list[ImageSchema] | None = None


class AdjustStockRequest(BaseModel):
    delta: int


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class ReviewRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1, max_length=1000)
    rating: int = Field(ge=1, le=5)


class UpdateReviewRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    text: str | None = Field(default=None, min_length=1, max_length=1000)
    rating: int | None = Field(default=None, ge=1, le=5)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class SyncCartRequest(BaseModel):
    items: list[CartItemRequest]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=50)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = "USA"
    phone: str = Field(min_length=1, max_length=20)


class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema
    payment_method: Literal["stripe", "paypal", "cash"] = "stripe"
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "name": "Jane Doe",
                        "street": "1 Market St",
                        "city": "San Francisco",
                        "state": "CA",
                        "zip_code": "94105",
                        "phone": "+1-555-0100",
                    },
                    "payment_method": "stripe",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded"]
    note: str | None = Field(default=None, max_length=500)
    tracking_number: str | None = Field(default=None, max_length=100)
    estimated_delivery: datetime | None = None


class CancelOrderRequest(BaseModel):
    note: str | None = Field(default=None, max_length=500)


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str
