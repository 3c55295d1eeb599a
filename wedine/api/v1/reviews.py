"""
Review routes
"""

from typing import Optional

from fastapi import APIRouter, Query

from ...core.error_handler import create_success_response
from ...schemas.review import HelpfulVoteRequest, ReviewCreateRequest
from ...services.review_service import review_service

router = APIRouter()


@router.get("")
def list_reviews(
    shop_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    sort: str = Query("newest", description="newest, rating or helpful"),
    rating_filter: str = Query("all", alias="filter", description="all or 1..5"),
):
    return create_success_response(review_service.list_reviews(shop_id, page, sort, rating_filter))


@router.post("")
def create_review(req: ReviewCreateRequest):
    result = review_service.create_review(
        req.user_name, req.user_email, req.shop_id, req.rating, req.review_text
    )
    return create_success_response(result, "Review submitted successfully")


@router.post("/helpful")
def vote_helpful(req: HelpfulVoteRequest):
    result = review_service.vote_helpful(req.review_id, req.action)
    verb = "incremented" if req.action == "increment" else "decremented"
    return create_success_response(result, f"Helpful count {verb} successfully")
