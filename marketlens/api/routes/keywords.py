"""
Keyword Routes for MarketLens API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db, DatabaseOperations, Sentiment
from ..schemas import KeywordResponse

router = APIRouter()


class CreateKeywordRequest(BaseModel):
    """A single keyword in a bulk request"""
    query_id: str
    keyword: str = Field(..., min_length=1)
    frequency: int = Field(..., gt=0)
    sentiment_context: Sentiment

    class Config:
        use_enum_values = True


class BulkCreateKeywordsRequest(BaseModel):
    """Request model for bulk keyword insertion"""
    keywords: List[CreateKeywordRequest]


@router.post("/bulk", response_model=List[KeywordResponse], status_code=201)
async def bulk_create_keywords(
    request: BulkCreateKeywordsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Insert every keyword or none of them"""
    keywords = await DatabaseOperations.bulk_create_keywords(
        db, [keyword.model_dump() for keyword in request.keywords]
    )
    await db.commit()

    return [KeywordResponse.model_validate(keyword) for keyword in keywords]
