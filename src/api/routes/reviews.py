from fastapi import APIRouter, Depends

from ..models import DataResponse, ErrorResponse, ReviewCreateRequest
from ..dependencies import get_review_service, get_current_user
from ..services.review_service import ReviewService, rating_summary
from ...utils.models import UserProfile

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/{property_id}", response_model=DataResponse)
async def property_reviews(property_id: str, service: ReviewService = Depends(get_review_service)):
    """Reviews newest first, with the count and one-decimal average."""
    reviews = service.get_reviews_for_property(property_id)
    return {
        "success": True,
        "message": "Reviews",
        "data": {"reviews": [r.to_dict() for r in reviews], "summary": rating_summary(reviews)},
    }


@router.post("/{property_id}", response_model=DataResponse, status_code=201, responses={400: {"model": ErrorResponse}})
async def add_review(
    property_id: str,
    req: ReviewCreateRequest,
    user: UserProfile = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = service.add_review(property_id, user, req.rating, req.comment)
    return {"success": True, "message": "Review published", "data": review.to_dict()}
