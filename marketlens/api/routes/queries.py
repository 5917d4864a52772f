"""
Query Routes for MarketLens API
Query lifecycle, aggregated results and expiry sweep
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ...database import get_db, DatabaseOperations, Platform, QueryType, QueryStatus
from ..schemas import QueryResponse, QueryHistoryItem, QueryResultResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================
# Pydantic Models
# ============================================================

class CreateQueryRequest(BaseModel):
    """Request model for creating a new query"""
    input: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Keyword or product URL",
        examples=["wireless headphones"]
    )
    query_type: QueryType = Field(
        ...,
        description="Whether input is a keyword or a URL"
    )
    platform: Optional[Platform] = Field(
        default=None,
        description="Marketplace to search; omit for all platforms"
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        description="When the query and its data may be swept; defaults to now + QUERY_TTL_HOURS"
    )

    class Config:
        use_enum_values = True


class UpdateQueryStatusRequest(BaseModel):
    """Request model for status updates; omitted fields keep their values"""
    status: QueryStatus
    total_products_found: Optional[int] = Field(default=None, ge=0)
    total_reviews_scraped: Optional[int] = Field(default=None, ge=0)
    average_rating: Optional[float] = Field(default=None, ge=0, le=5)
    sentiment_positive: Optional[int] = Field(default=None, ge=0)
    sentiment_neutral: Optional[int] = Field(default=None, ge=0)
    sentiment_negative: Optional[int] = Field(default=None, ge=0)

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def reject_null_fields(self):
        """Counters and rating may be omitted but not sent as null"""
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class CleanupResponse(BaseModel):
    """Response model for the expiry sweep"""
    deleted_count: int


# ============================================================
# Query Endpoints
# ============================================================

@router.post("", response_model=QueryResponse, status_code=201)
async def create_query(
    request: CreateQueryRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new query in pending state

    Args:
        request: Query parameters
        db: Database session

    Returns:
        Created query with zeroed counters
    """
    query = await DatabaseOperations.create_query(
        session=db,
        input=request.input,
        query_type=request.query_type,
        platform=request.platform,
        expires_at=request.expires_at
    )
    await db.commit()

    return QueryResponse.model_validate(query)


@router.get("", response_model=List[QueryHistoryItem])
async def get_query_history(db: AsyncSession = Depends(get_db)):
    """
    List every query, newest first

    Returns:
        Query summaries without their dependent records
    """
    queries = await DatabaseOperations.get_query_history(db)
    return [QueryHistoryItem.model_validate(query) for query in queries]


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_expired_queries(db: AsyncSession = Depends(get_db)):
    """
    Delete every query whose expiry has passed, with all dependent records

    Returns:
        Number of queries removed
    """
    deleted_count = await DatabaseOperations.cleanup_expired_queries(db)
    await db.commit()

    return CleanupResponse(deleted_count=deleted_count)


@router.get("/{query_id}", response_model=QueryResultResponse)
async def get_query(
    query_id: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a query with its products, reviews, keywords and recommendations

    Args:
        query_id: Query ID
        db: Database session

    Raises:
        RecordNotFoundError: Mapped to 404 when the query does not exist
    """
    result = await DatabaseOperations.get_query_result(db, query_id)

    logger.info(
        f"Loaded query {query_id}: {len(result.products)} products, "
        f"{len(result.reviews)} reviews, {len(result.keywords)} keywords, "
        f"{len(result.recommendations)} recommendations"
    )

    return QueryResultResponse.model_validate(result)


@router.patch("/{query_id}/status", response_model=QueryResponse)
async def update_query_status(
    query_id: str,
    request: UpdateQueryStatusRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Update query status and any supplied counters

    Args:
        query_id: Query ID
        request: New status plus optional counters, rating and sentiment counts
        db: Database session
    """
    fields = request.model_dump(exclude_unset=True)
    status = fields.pop("status")

    query = await DatabaseOperations.update_query_status(db, query_id, status, **fields)
    await db.commit()

    return QueryResponse.model_validate(query)
