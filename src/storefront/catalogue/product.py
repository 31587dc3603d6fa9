"""Product aggregate with its images and stock-tracking record.

The stock counter (``stock_quantity``) is set when the product is created and
afterwards only moves through ``ProductRepository.decrement_stock`` and
``increment_stock``, which push a conditional update down to the store.
``update_details`` refuses to touch it.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from storefront.catalogue.slugs import slugify
from storefront.domain import storefront

PLACEHOLDER_IMAGE = "/placeholder.svg"


class WeightUnit(Enum):
    LB = "lb"
    OZ = "oz"
    KG = "kg"
    G = "g"


_POUNDS_PER_UNIT = {
    WeightUnit.LB.value: 1.0,
    WeightUnit.OZ.value: 1 / 16,
    WeightUnit.KG.value: 2.20462,
    WeightUnit.G.value: 0.00220462,
}

# Fields an admin may change through update_details
EDITABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "short_description",
        "category_id",
        "price",
        "compare_price",
        "sku",
        "weight_value",
        "weight_unit",
        "low_stock_threshold",
        "track_quantity",
        "is_active",
        "is_featured",
    }
)


@storefront.entity(part_of="Product")
class ProductImage:
    url: String(required=True, max_length=500)
    alt: String(max_length=255)
    is_primary: Boolean(default=False)


@storefront.aggregate
class Product:
    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    description: String(required=True, max_length=2000)
    short_description: String(max_length=200)
    category_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    sku: String(required=True, max_length=50, unique=True)
    weight_value: Float(default=0.0, min_value=0.0)
    weight_unit: String(choices=WeightUnit, default=WeightUnit.LB.value)
    images = HasMany(ProductImage)
    stock_quantity: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)
    track_quantity: Boolean(default=True)
    is_active: Boolean(default=True)
    is_featured: Boolean(default=False)
    average_rating: Float(default=0.0, min_value=0.0, max_value=5.0)
    review_count: Integer(default=0, min_value=0)
    created_by: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def at_most_one_primary_image(self):
        if sum(1 for image in self.images if image.is_primary) > 1:
            raise ValidationError({"images": ["Only one image can be primary"]})

    @classmethod
    def create(
        cls,
        name,
        description,
        category_id,
        price,
        sku,
        stock_quantity=0,
        low_stock_threshold=10,
        track_quantity=True,
        short_description=None,
        compare_price=None,
        weight_value=0.0,
        weight_unit=WeightUnit.LB.value,
        is_featured=False,
        images=None,
        created_by=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            slug=slugify(name),
            description=description,
            short_description=short_description,
            category_id=category_id,
            price=price,
            compare_price=compare_price,
            sku=sku.strip().upper(),
            weight_value=weight_value,
            weight_unit=weight_unit,
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
            track_quantity=track_quantity,
            is_featured=is_featured,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        if images:
            product.replace_images(images)
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def primary_image(self) -> str:
        primary = next((image for image in self.images if image.is_primary), None)
        if primary is None and self.images:
            primary = self.images[0]
        return primary.url if primary else PLACEHOLDER_IMAGE

    @property
    def in_stock(self) -> bool:
        return not self.track_quantity or self.stock_quantity > 0

    @property
    def is_low_stock(self) -> bool:
        return self.track_quantity and self.stock_quantity <= self.low_stock_threshold

    @property
    def discount_percentage(self) -> int:
        if self.compare_price and self.compare_price > self.price:
            return round((self.compare_price - self.price) / self.compare_price * 100)
        return 0

    @property
    def weight_in_pounds(self) -> float:
        return (self.weight_value or 0.0) * _POUNDS_PER_UNIT[self.weight_unit]

    def has_stock_for(self, quantity: int) -> bool:
        return not self.track_quantity or self.stock_quantity >= quantity

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply admin edits. The stock counter is not editable here."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError({field: ["Field cannot be updated"] for field in sorted(unknown)})

        with atomic_change(self):
            for field, value in changes.items():
                if value is None:
                    continue
                if field == "name":
                    self.slug = slugify(value)
                elif field == "sku":
                    value = value.strip().upper()
                setattr(self, field, value)
            self.updated_at = datetime.now(UTC)

    def replace_images(self, images):
        """Replace the image gallery. ``images`` is a list of dicts with url, alt and is_primary."""
        with atomic_change(self):
            for existing in list(self.images):
                self.remove_images(existing)
            for image in images:
                self.add_images(
                    ProductImage(
                        url=image["url"],
                        alt=image.get("alt"),
                        is_primary=bool(image.get("is_primary", False)),
                    )
                )

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)
