from typing import Optional, List, Dict, Any

from ...supabase_sync.supabase_client import SupabaseClient
from ...utils.errors import ValidationFailedError, RemoteServiceError
from ...utils.logger import get_logger
from ...utils.models import Review, UserProfile, new_id
from .property_service import PropertyService
from config.settings import app_config


def rating_summary(reviews: List[Review]) -> Dict[str, Any]:
    """Count and one-decimal average; average is None for a listing without reviews."""
    if not reviews:
        return {"count": 0, "average": None}
    average = sum(r.rating for r in reviews) / len(reviews)
    return {"count": len(reviews), "average": round(average, 1)}


class ReviewService:
    """Service for property reviews."""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None, property_service: Optional[PropertyService] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.property_service = property_service or PropertyService(self.supabase_client)
        self.logger = get_logger("review_service")
        self.table = app_config.reviews_collection

    def get_reviews_for_property(self, property_id: str) -> List[Review]:
        """Newest first; an unreachable table reads as no reviews."""
        try:
            rows = self.supabase_client.select(self.table, {"property_id": property_id}, order="created_at", desc=True)
        except RemoteServiceError:
            return []
        return [Review.from_dict(r) for r in rows]

    def get_rating_summary(self, property_id: str) -> Dict[str, Any]:
        return rating_summary(self.get_reviews_for_property(property_id))

    def add_review(self, property_id: str, author: UserProfile, rating: int, comment: str) -> Review:
        """
        Publish a review and refresh the listing's rating columns.

        Raises:
            ValidationFailedError: rating outside 1..5 or empty comment
            RemoteServiceError: the review could not be stored
        """
        if not 1 <= int(rating) <= 5:
            raise ValidationFailedError("INVALID_RATING", "Rating must be between 1 and 5.")
        text = (comment or "").strip()
        if not text:
            raise ValidationFailedError("EMPTY_COMMENT", "Please write a comment.")

        review = Review(
            id=new_id(),
            property_id=property_id,
            user_id=author.id,
            user_name=author.full_name,
            user_avatar=author.avatar_url,
            rating=int(rating),
            comment=text,
        )
        review = Review.from_dict(self.supabase_client.insert(self.table, review.to_dict()))
        self.logger.info("review_added", property_id=property_id, rating=review.rating)

        summary = self.get_rating_summary(property_id)
        self.property_service.refresh_rating(property_id, summary["average"], summary["count"])
        return review
