"""
Review Routes for MarketLens API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ...database import get_db, DatabaseOperations, Sentiment
from ..schemas import ReviewResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateReviewRequest(BaseModel):
    """A single review in a bulk request"""
    product_id: str
    review_text: str
    rating: int = Field(..., ge=1, le=5)
    review_date: datetime
    sentiment: Optional[Sentiment] = None

    class Config:
        use_enum_values = True


class BulkCreateReviewsRequest(BaseModel):
    """Request model for bulk review insertion"""
    reviews: List[CreateReviewRequest]


class UpdateReviewSentimentRequest(BaseModel):
    """Request model for setting a review's sentiment"""
    sentiment: Sentiment

    class Config:
        use_enum_values = True


@router.post("/bulk", response_model=List[ReviewResponse], status_code=201)
async def bulk_create_reviews(
    request: BulkCreateReviewsRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Insert every review or none of them

    An empty list succeeds and returns an empty list.
    """
    reviews = await DatabaseOperations.bulk_create_reviews(
        db, [review.model_dump() for review in request.reviews]
    )
    await db.commit()

    return [ReviewResponse.model_validate(review) for review in reviews]


@router.patch("/{review_id}/sentiment", response_model=ReviewResponse)
async def update_review_sentiment(
    review_id: str,
    request: UpdateReviewSentimentRequest,
    db: AsyncSession = Depends(get_db)
):
    """Set a review's sentiment label"""
    review = await DatabaseOperations.update_review_sentiment(db, review_id, request.sentiment)
    await db.commit()

    return ReviewResponse.model_validate(review)
