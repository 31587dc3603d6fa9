"""Product repository: lookups, search, and conditional stock updates."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.query import Q

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientStock, InternalError, NotFound

logger = structlog.get_logger(__name__)

# Attempts before a contended compare-and-set gives up
MAX_STOCK_UPDATE_ATTEMPTS = 5


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_active(self, product_id: str) -> Product | None:
        """Return the product if it exists and can be purchased."""
        try:
            product = self.get(product_id)
        except ObjectNotFoundError:
            return None
        return product if product.is_active else None

    def find_by_slug(self, slug: str) -> Product | None:
        results = self._dao.query.filter(slug=slug).all().items
        return results[0] if results else None

    def search(
        self,
        category_id=None,
        min_price=None,
        max_price=None,
        featured=None,
        text=None,
        include_inactive=False,
        sort="-created_at",
        page=1,
        limit=12,
    ):
        """Paginated product listing. Returns ``(products, total)``."""
        query = self._dao.query
        if not include_inactive:
            query = query.filter(is_active=True)
        if category_id:
            query = query.filter(category_id=category_id)
        if min_price is not None:
            query = query.filter(price__gte=min_price)
        if max_price is not None:
            query = query.filter(price__lte=max_price)
        if featured is not None:
            query = query.filter(is_featured=featured)
        if text:
            query = query.filter(name__icontains=text)

        results = query.order_by(sort).offset((page - 1) * limit).limit(limit).all()
        return results.items, results.total

    def is_referenced_by_category(self, category_id: str) -> bool:
        return bool(self._dao.query.filter(category_id=category_id).limit(1).all().items)

    # -------------------------------------------------------------------
    # Stock counter
    # -------------------------------------------------------------------
    def _current_stock(self, product_id: str):
        records = self._dao.query.filter(id=product_id).all().items
        if not records:
            raise NotFound(f"Product {product_id} not found")
        return records[0]

    def _compare_and_set(self, product_id: str, expected: int, new: int) -> bool:
        # Single conditional write in the store; matches nothing if the counter moved
        updated = self._dao._update_all(Q(id=product_id, stock_quantity=expected), stock_quantity=new)
        return updated == 1

    def decrement_stock(self, product_id: str, quantity: int) -> int | None:
        """Take ``quantity`` units off the stock counter, only if that many are left.

        The write is conditioned on the value just read, so two concurrent
        callers racing for the last unit cannot both win. Returns the new
        quantity, or ``None`` when the product does not track stock.
        """
        for _ in range(MAX_STOCK_UPDATE_ATTEMPTS):
            product = self._current_stock(product_id)
            if not product.track_quantity:
                return None

            current = product.stock_quantity
            if current < quantity:
                raise InsufficientStock(product.name, current, quantity)

            if self._compare_and_set(product_id, current, current - quantity):
                return current - quantity

            logger.debug("Stock counter moved underneath us, retrying", product_id=product_id)

        raise InsufficientStock(product.name, product.stock_quantity, quantity)

    def increment_stock(self, product_id: str, quantity: int) -> int | None:
        """Return ``quantity`` units to the stock counter.

        Skipped (returns ``None``) for products that no longer exist or do
        not track stock.
        """
        for _ in range(MAX_STOCK_UPDATE_ATTEMPTS):
            try:
                product = self._current_stock(product_id)
            except NotFound:
                return None
            if not product.track_quantity:
                return None

            current = product.stock_quantity
            if self._compare_and_set(product_id, current, current + quantity):
                return current + quantity

        logger.error(
            "Could not restore stock after repeated contention",
            product_id=product_id,
            quantity=quantity,
        )
        raise InternalError(f"Stock for product {product_id} could not be restored")

    def record_rating(self, product_id: str, average_rating: float, review_count: int) -> bool:
        """Store rating figures without rewriting the rest of the record (and its stock counter)."""
        updated = self._dao._update_all(
            Q(id=product_id),
            average_rating=average_rating,
            review_count=review_count,
        )
        return updated == 1
