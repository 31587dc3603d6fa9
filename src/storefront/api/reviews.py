"""Product review routes."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.api.auth import current_account
from storefront.api.schemas import Envelope, Pagination, ReviewRequest, UpdateReviewRequest
from storefront.api.serializers import review_to_dict
from storefront.review.management import EditReview, RemoveReview, SubmitReview
from storefront.review.review import Review

review_router = APIRouter(prefix="/products/{product_id}/reviews", tags=["reviews"])


@review_router.get("", response_model=Envelope)
async def list_reviews(
    product_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
) -> Envelope:
    reviews, total = current_domain.repository_for(Review).for_product(product_id, page=page, limit=limit)
    return Envelope(
        data=[review_to_dict(r) for r in reviews],
        pagination=Pagination.build(page, limit, total),
    )


@review_router.post("", status_code=201, response_model=Envelope)
async def submit_review(
    product_id: str, body: ReviewRequest, account: Account = Depends(current_account)
) -> Envelope:
    command = SubmitReview(
        product_id=product_id,
        account_id=str(account.id),
        title=body.title,
        text=body.text,
        rating=body.rating,
    )
    review_id = current_domain.process(command, asynchronous=False)
    review = current_domain.repository_for(Review).get(review_id)
    return Envelope(data=review_to_dict(review), message="Review added")


@review_router.put("/{review_id}", response_model=Envelope)
async def edit_review(
    product_id: str,
    review_id: str,
    body: UpdateReviewRequest,
    account: Account = Depends(current_account),
) -> Envelope:
    command = EditReview(review_id=review_id, account_id=str(account.id), **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    review = current_domain.repository_for(Review).get(review_id)
    return Envelope(data=review_to_dict(review), message="Review updated")


@review_router.delete("/{review_id}", response_model=Envelope)
async def remove_review(product_id: str, review_id: str, account: Account = Depends(current_account)) -> Envelope:
    command = RemoveReview(review_id=review_id, account_id=str(account.id), is_admin=account.is_admin)
    current_domain.process(command, asynchronous=False)
    return Envelope(message="Review deleted")
