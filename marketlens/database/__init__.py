"""Database module - Models, manager and operations"""

from .manager import DatabaseManager, db_manager, init_db, close_db, get_db
from .operations import (
    DatabaseOperations, QueryResult, RecordNotFoundError, InvalidStatusTransitionError
)
from .models import (
    Base, Query, Product, Review, Keyword, Recommendation,
    Platform, QueryType, QueryStatus, Sentiment, Priority
)

__all__ = [
    # Manager
    "DatabaseManager", "db_manager", "init_db", "close_db", "get_db",

    # Operations
    "DatabaseOperations", "QueryResult", "RecordNotFoundError",
    "InvalidStatusTransitionError",

    # Models
    "Base", "Query", "Product", "Review", "Keyword", "Recommendation",

    # Enums
    "Platform", "QueryType", "QueryStatus", "Sentiment", "Priority"
]
