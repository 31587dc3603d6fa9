"""Category aggregate: a flat grouping of products for browsing."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String

from storefront.catalogue.slugs import slugify
from storefront.domain import storefront


@storefront.aggregate
class Category:
    name: String(required=True, max_length=50, unique=True)
    slug: String(max_length=60)
    description: String(max_length=500)
    image: String(max_length=500)
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, description=None, image=None, sort_order=0):
        now = datetime.now(UTC)
        return cls(
            name=name.strip(),
            slug=slugify(name),
            description=description,
            image=image,
            sort_order=sort_order,
            created_at=now,
            updated_at=now,
        )

    def update_details(self, name=None, description=None, image=None, sort_order=None, is_active=None):
        if name is not None:
            self.name = name.strip()
            self.slug = slugify(name)
        if description is not None:
            self.description = description
        if image is not None:
            self.image = image
        if sort_order is not None:
            self.sort_order = sort_order
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)
