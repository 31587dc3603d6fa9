from storefront.domain import storefront
from storefront.review.review import Review


@storefront.repository(part_of=Review)
class ReviewRepository:
    def for_product(self, product_id: str, page=1, limit=10):
        """Approved reviews for a product, newest first. Returns ``(reviews, total)``."""
        results = (
            self._dao.query.filter(product_id=product_id, is_approved=True)
            .order_by("-created_at")
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return results.items, results.total

    def all_for_product(self, product_id: str) -> list[Review]:
        return self._dao.query.filter(product_id=product_id).all().items

    def by_author(self, account_id: str, product_id: str) -> Review | None:
        results = self._dao.query.filter(account_id=account_id, product_id=product_id).all().items
        return results[0] if results else None
