"""
Recommendation Routes for MarketLens API
CRUD for recommendations attached to queries
"""

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ...database import get_db, DatabaseOperations, Priority
from ..schemas import RecommendationResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_FREQUENCY_SCORE = 99_999_999.99


# ============================================================
# Pydantic Models
# ============================================================

class CreateRecommendationRequest(BaseModel):
    """Request model for a recommendation"""
    query_id: str
    title: str = Field(..., min_length=1)
    description: str
    priority: Priority
    related_keywords: List[str] = Field(default_factory=list)
    frequency_score: float = Field(..., ge=0, le=MAX_FREQUENCY_SCORE)

    class Config:
        use_enum_values = True


class BulkCreateRecommendationsRequest(BaseModel):
    """Request model for bulk recommendation insertion"""
    recommendations: List[CreateRecommendationRequest]


class UpdateRecommendationRequest(BaseModel):
    """Request model for recommendation updates; omitted fields keep their values"""
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    related_keywords: Optional[List[str]] = None
    frequency_score: Optional[float] = Field(default=None, ge=0, le=MAX_FREQUENCY_SCORE)

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def reject_null_fields(self):
        """Fields may be omitted but not cleared"""
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# ============================================================
# Recommendation Endpoints
# ============================================================

@router.post("", response_model=RecommendationResponse, status_code=201)
async def create_recommendation(
    request: CreateRecommendationRequest,
    db: AsyncSession = Depends(get_db)
):
    """Create a single recommendation"""
    recommendation = await DatabaseOperations.create_recommendation(db, request.model_dump())
    await db.commit()

    return RecommendationResponse.model_validate(recommendation)


@router.post("/bulk", response_model=List[RecommendationResponse], status_code=201)
async def bulk_create_recommendations(
    request: BulkCreateRecommendationsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Insert every recommendation or none of them"""
    recommendations = await DatabaseOperations.bulk_create_recommendations(
        db, [recommendation.model_dump() for recommendation in request.recommendations]
    )
    await db.commit()

    return [RecommendationResponse.model_validate(r) for r in recommendations]


@router.get("", response_model=List[RecommendationResponse])
async def list_recommendations(
    query_id: Optional[str] = Query(None, description="Only recommendations of this query"),
    db: AsyncSession = Depends(get_db)
):
    """List recommendations, oldest first"""
    recommendations = await DatabaseOperations.list_recommendations(db, query_id=query_id)
    return [RecommendationResponse.model_validate(r) for r in recommendations]


@router.get("/{recommendation_id}", response_model=RecommendationResponse)
async def get_recommendation(
    recommendation_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a recommendation by ID"""
    recommendation = await DatabaseOperations.get_recommendation(db, recommendation_id)
    return RecommendationResponse.model_validate(recommendation)


@router.patch("/{recommendation_id}", response_model=RecommendationResponse)
async def update_recommendation(
    recommendation_id: str,
    request: UpdateRecommendationRequest,
    db: AsyncSession = Depends(get_db)
):
    """Update supplied recommendation fields"""
    recommendation = await DatabaseOperations.update_recommendation(
        db, recommendation_id, request.model_dump(exclude_unset=True)
    )
    await db.commit()

    return RecommendationResponse.model_validate(recommendation)


@router.delete("/{recommendation_id}", status_code=204)
async def delete_recommendation(
    recommendation_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Delete a recommendation; unknown IDs are not an error"""
    deleted = await DatabaseOperations.delete_recommendation(db, recommendation_id)
    await db.commit()

    if not deleted:
        logger.info(f"Recommendation {recommendation_id} not found, nothing deleted")

    return Response(status_code=204)
