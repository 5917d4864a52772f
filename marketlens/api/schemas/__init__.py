"""
API Schemas Package
Pydantic response models shared across routes
"""

from .records import (
    SentimentSummary,
    QueryResponse,
    QueryHistoryItem,
    ProductResponse,
    ReviewResponse,
    KeywordResponse,
    RecommendationResponse,
    QueryResultResponse
)

__all__ = [
    "SentimentSummary",
    "QueryResponse",
    "QueryHistoryItem",
    "ProductResponse",
    "ReviewResponse",
    "KeywordResponse",
    "RecommendationResponse",
    "QueryResultResponse"
]
