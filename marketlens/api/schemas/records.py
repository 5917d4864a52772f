"""
Record Schemas for MarketLens API
Response models for queries and everything attached to them
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from ...database.models import Platform, QueryType, QueryStatus, Sentiment, Priority


class SentimentSummary(BaseModel):
    """Positive/neutral/negative review counts of a query"""
    positive: int = Field(..., ge=0)
    neutral: int = Field(..., ge=0)
    negative: int = Field(..., ge=0)


class QueryResponse(BaseModel):
    """Full query record"""
    id: str
    input: str
    query_type: QueryType
    platform: Optional[Platform] = None
    status: QueryStatus
    total_products_found: int
    total_reviews_scraped: int
    average_rating: Optional[float] = None
    sentiment_summary: Optional[SentimentSummary] = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class QueryHistoryItem(BaseModel):
    """Lightweight query summary for history listings"""
    id: str
    input: str
    query_type: QueryType
    platform: Optional[Platform] = None
    status: QueryStatus
    total_products_found: int
    total_reviews_scraped: int
    average_rating: Optional[float] = None
    created_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class ProductResponse(BaseModel):
    """Product record"""
    id: str
    query_id: str
    name: str
    url: str
    platform: Platform
    image_url: Optional[str] = None
    price: Optional[float] = None
    average_rating: Optional[float] = None
    total_reviews: int
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class ReviewResponse(BaseModel):
    """Review record"""
    id: str
    product_id: str
    review_text: str
    rating: int
    review_date: datetime
    sentiment: Optional[Sentiment] = None
    created_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class KeywordResponse(BaseModel):
    """Keyword record"""
    id: str
    query_id: str
    keyword: str
    frequency: int
    sentiment_context: Sentiment
    created_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class RecommendationResponse(BaseModel):
    """Recommendation record"""
    id: str
    query_id: str
    title: str
    description: str
    priority: Priority
    related_keywords: List[str]
    frequency_score: float
    created_at: datetime

    class Config:
        """Pydantic configuration"""
        from_attributes = True


class QueryResultResponse(BaseModel):
    """A query with its products, reviews, keywords and recommendations"""
    query: QueryResponse
    products: List[ProductResponse]
    reviews: List[ReviewResponse]
    keywords: List[KeywordResponse]
    recommendations: List[RecommendationResponse]

    class Config:
        """Pydantic configuration"""
        from_attributes = True
