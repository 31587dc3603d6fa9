"""Review submission, editing and removal: commands and handler.

After every change the product's average rating and review count are
recomputed from its approved reviews.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Conflict, Forbidden, NotFound
from storefront.review.review import Review, rating_summary


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    account_id = Identifier(required=True)
    title = String(required=True, max_length=100)
    text = String(required=True, max_length=1000)
    rating = Integer(required=True, min_value=1, max_value=5)


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    account_id = Identifier(required=True)
    title = String(max_length=100)
    text = String(max_length=1000)
    rating = Integer(min_value=1, max_value=5)


@storefront.command(part_of="Review")
class RemoveReview:
    review_id = Identifier(required=True)
    account_id = Identifier(required=True)
    is_admin = Boolean(default=False)


def refresh_product_rating(product_id: str, changed: Review | None = None, removed: bool = False):
    """Recompute the product's rating, overlaying ``changed`` on what the store returns."""
    reviews = current_domain.repository_for(Review).all_for_product(product_id)
    if changed is not None:
        reviews = [r for r in reviews if str(r.id) != str(changed.id)]
        if not removed:
            reviews.append(changed)
    average, count = rating_summary(reviews)
    current_domain.repository_for(Product).record_rating(product_id, average, count)


def _load_review(review_id) -> Review:
    try:
        return current_domain.repository_for(Review).get(review_id)
    except ObjectNotFoundError as exc:
        raise NotFound("Review not found") from exc


@storefront.command_handler(part_of=Review)
class ReviewManagementHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        from storefront.order.order import Order

        if current_domain.repository_for(Product).find_active(command.product_id) is None:
            raise NotFound("Product not found")

        repo = current_domain.repository_for(Review)
        if repo.by_author(str(command.account_id), str(command.product_id)) is not None:
            raise Conflict("You have already reviewed this product")

        verified = current_domain.repository_for(Order).has_delivered_order_with_product(
            str(command.account_id), str(command.product_id)
        )
        review = Review.write(
            product_id=command.product_id,
            account_id=command.account_id,
            title=command.title,
            text=command.text,
            rating=command.rating,
            is_verified_purchase=verified,
        )
        repo.add(review)
        refresh_product_rating(str(command.product_id), changed=review)
        return str(review.id)

    @handle(EditReview)
    def edit_review(self, command):
        review = _load_review(command.review_id)
        if not review.written_by(command.account_id):
            raise Forbidden("Not authorized to update this review")

        review.edit(title=command.title, text=command.text, rating=command.rating)
        current_domain.repository_for(Review).add(review)
        refresh_product_rating(str(review.product_id), changed=review)

    @handle(RemoveReview)
    def remove_review(self, command):
        review = _load_review(command.review_id)
        if not command.is_admin and not review.written_by(command.account_id):
            raise Forbidden("Not authorized to delete this review")

        current_domain.repository_for(Review)._dao.delete(review)
        refresh_product_rating(str(review.product_id), changed=review, removed=True)
