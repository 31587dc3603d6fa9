"""Review aggregate: a customer's rating and comment on a product.

``is_verified_purchase`` is decided once, when the review is written, from
the author's delivered orders. It is not re-evaluated afterwards.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    account_id = Identifier(required=True)
    title = String(required=True, max_length=100)
    text = String(required=True, max_length=1000)
    rating = Integer(required=True, min_value=1, max_value=5)
    is_verified_purchase = Boolean(default=False)
    helpful_votes = Integer(default=0, min_value=0)
    is_approved = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def write(cls, product_id, account_id, title, text, rating, is_verified_purchase=False):
        now = datetime.now(UTC)
        return cls(
            product_id=product_id,
            account_id=account_id,
            title=title,
            text=text,
            rating=rating,
            is_verified_purchase=is_verified_purchase,
            created_at=now,
            updated_at=now,
        )

    def written_by(self, account_id) -> bool:
        return str(self.account_id) == str(account_id)

    def edit(self, title=None, text=None, rating=None):
        if title is not None:
            self.title = title
        if text is not None:
            self.text = text
        if rating is not None:
            self.rating = rating
        self.updated_at = datetime.now(UTC)


def rating_summary(reviews) -> tuple[float, int]:
    """``(average rounded to one decimal, count)`` over approved reviews."""
    ratings = [review.rating for review in reviews if review.is_approved]
    if not ratings:
        return 0.0, 0
    return round(sum(ratings) / len(ratings), 1), len(ratings)
