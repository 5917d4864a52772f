"""
Database Operations for MarketLens
CRUD operations for queries and their products, reviews, keywords and recommendations
"""

from typing import List, Optional, Dict, Any
from sqlalchemy import select, delete, desc
from sqlalchemy.ext.asyncio import AsyncSession
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
import logging

from .models import (
    Query, Product, Review, Keyword, Recommendation, QueryStatus,
    utcnow, to_naive_utc
)
from ..config.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_STATUS_TRANSITIONS = {
    QueryStatus.PENDING.value: {QueryStatus.PROCESSING.value},
    QueryStatus.PROCESSING.value: {QueryStatus.COMPLETED.value, QueryStatus.FAILED.value},
    QueryStatus.COMPLETED.value: set(),
    QueryStatus.FAILED.value: set(),
}

QUERY_STATUS_FIELDS = (
    "total_products_found", "total_reviews_scraped", "average_rating",
    "sentiment_positive", "sentiment_neutral", "sentiment_negative",
)
PRODUCT_FIELDS = (
    "name", "url", "platform", "image_url", "price", "average_rating", "total_reviews",
)
RECOMMENDATION_FIELDS = (
    "title", "description", "priority", "related_keywords", "frequency_score",
)
DECIMAL_FIELDS = {"price", "average_rating", "frequency_score"}


class RecordNotFoundError(LookupError):
    """Raised when an operation targets an id that does not exist"""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} with id {record_id} not found")


class InvalidStatusTransitionError(ValueError):
    """Raised when strict transitions are on and a status change is not allowed"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move query from '{current}' to '{requested}'")


@dataclass
class QueryResult:
    """A query with everything reachable from it"""
    query: Query
    products: List[Product] = field(default_factory=list)
    reviews: List[Review] = field(default_factory=list)
    keywords: List[Keyword] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)


def _value(value):
    """Plain value of an enum member, anything else unchanged"""
    return getattr(value, "value", value)


def _quantize(value, scale: int = 2) -> Optional[float]:
    """Round a decimal field the same way FixedPoint stores it"""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-scale)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _apply(record, updates: Dict[str, Any], allowed) -> List[str]:
    """Copy supplied fields onto a record; returns the names that were set"""
    applied = []
    for key in allowed:
        if key not in updates:
            continue
        value = _value(updates[key])
        if key in DECIMAL_FIELDS:
            value = _quantize(value)
        setattr(record, key, value)
        applied.append(key)
    return applied


class DatabaseOperations:
    """Common database operations for all models"""

    # =========================
    # QUERY OPERATIONS
    # =========================

    @staticmethod
    async def create_query(
        session: AsyncSession,
        input: str,
        query_type: str,
        platform: Optional[str] = None,
        expires_at: Optional[datetime] = None
    ) -> Query:
        """Create new query in pending state"""
        if not input:
            raise ValueError("Query input must not be empty")

        now = utcnow()
        if expires_at is None:
            expires_at = now + timedelta(hours=settings.QUERY_TTL_HOURS)

        query = Query(
            input=input,
            query_type=_value(query_type),
            platform=_value(platform),
            status=QueryStatus.PENDING.value,
            total_products_found=0,
            total_reviews_scraped=0,
            average_rating=None,
            sentiment_positive=0,
            sentiment_neutral=0,
            sentiment_negative=0,
            created_at=now,
            updated_at=now,
            expires_at=to_naive_utc(expires_at)
        )
        session.add(query)
        await session.flush()
        logger.info(f"Created query {query.id} for input: {input}")
        return query

    @staticmethod
    async def get_query(session: AsyncSession, query_id: str) -> Query:
        """Get query by ID"""
        query = await session.get(Query, query_id)
        if query is None:
            raise RecordNotFoundError("Query", query_id)
        return query

    @staticmethod
    async def update_query_status(
        session: AsyncSession,
        query_id: str,
        status: str,
        strict: Optional[bool] = None,
        **fields
    ) -> Query:
        """
        Update query status and any supplied counters

        Fields left out of `fields` keep their stored values.
        """
        query = await DatabaseOperations.get_query(session, query_id)
        status = _value(status)

        if strict is None:
            strict = settings.STRICT_STATUS_TRANSITIONS
        if strict and status != query.status:
            if status not in ALLOWED_STATUS_TRANSITIONS.get(query.status, set()):
                raise InvalidStatusTransitionError(query.status, status)

        query.status = status
        applied = _apply(query, fields, QUERY_STATUS_FIELDS)
        query.updated_at = utcnow()
        await session.flush()

        logger.info(f"Updated query {query_id} status to {status} (fields: {applied or 'none'})")
        return query

    @staticmethod
    async def get_query_history(session: AsyncSession) -> List[Query]:
        """Get every query, newest first"""
        result = await session.execute(
            select(Query).order_by(desc(Query.created_at))
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_query_result(session: AsyncSession, query_id: str) -> QueryResult:
        """Gather a query with its products, their reviews, keywords and recommendations"""
        query = await DatabaseOperations.get_query(session, query_id)

        result = await session.execute(
            select(Product).where(Product.query_id == query_id).order_by(Product.created_at)
        )
        products = list(result.scalars().all())

        reviews = []
        product_ids = [product.id for product in products]
        if product_ids:
            result = await session.execute(
                select(Review).where(Review.product_id.in_(product_ids)).order_by(Review.created_at)
            )
            reviews = list(result.scalars().all())

        result = await session.execute(
            select(Keyword).where(Keyword.query_id == query_id).order_by(Keyword.created_at)
        )
        keywords = list(result.scalars().all())

        recommendations = await DatabaseOperations.list_recommendations(session, query_id=query_id)

        return QueryResult(
            query=query,
            products=products,
            reviews=reviews,
            keywords=keywords,
            recommendations=recommendations
        )

    @staticmethod
    async def cleanup_expired_queries(
        session: AsyncSession,
        now: Optional[datetime] = None
    ) -> int:
        """
        Delete queries whose expiry is strictly in the past

        Products, reviews, keywords and recommendations go with them through
        ON DELETE CASCADE.
        """
        cutoff = to_naive_utc(now) if now else utcnow()
        result = await session.execute(
            delete(Query)
            .where(Query.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        count = result.rowcount
        if count > 0:
            logger.info(f"Cleaned up {count} expired queries")
        return count

    # =========================
    # PRODUCT OPERATIONS
    # =========================

    @staticmethod
    async def create_product(
        session: AsyncSession,
        product_data: Dict[str, Any]
    ) -> Product:
        """Create product for an existing query"""
        now = utcnow()
        product = Product(
            query_id=product_data["query_id"],
            name=product_data["name"],
            url=product_data["url"],
            platform=_value(product_data["platform"]),
            image_url=product_data.get("image_url"),
            price=_quantize(product_data.get("price")),
            average_rating=_quantize(product_data.get("average_rating")),
            total_reviews=product_data.get("total_reviews") or 0,
            created_at=now,
            updated_at=now
        )
        session.add(product)
        await session.flush()
        logger.info(f"Created product {product.id} for query {product.query_id}")
        return product

    @staticmethod
    async def update_product(
        session: AsyncSession,
        product_id: str,
        updates: Dict[str, Any]
    ) -> Product:
        """Update supplied product fields"""
        product = await session.get(Product, product_id)
        if product is None:
            raise RecordNotFoundError("Product", product_id)

        applied = _apply(product, updates, PRODUCT_FIELDS)
        product.updated_at = utcnow()
        await session.flush()
        logger.info(f"Updated product {product_id} (fields: {applied or 'none'})")
        return product

    # =========================
    # REVIEW OPERATIONS
    # =========================

    @staticmethod
    async def bulk_create_reviews(
        session: AsyncSession,
        reviews: List[Dict[str, Any]]
    ) -> List[Review]:
        """Insert all reviews in one flush"""
        if not reviews:
            return []

        review_objects = [
            Review(
                product_id=review["product_id"],
                review_text=review["review_text"],
                rating=review["rating"],
                review_date=to_naive_utc(review["review_date"]),
                sentiment=_value(review.get("sentiment")),
                created_at=utcnow()
            )
            for review in reviews
        ]
        session.add_all(review_objects)
        await session.flush()
        logger.info(f"Inserted {len(review_objects)} reviews")
        return review_objects

    @staticmethod
    async def update_review_sentiment(
        session: AsyncSession,
        review_id: str,
        sentiment: str
    ) -> Review:
        """Set the sentiment label of a review"""
        review = await session.get(Review, review_id)
        if review is None:
            raise RecordNotFoundError("Review", review_id)

        review.sentiment = _value(sentiment)
        await session.flush()
        logger.info(f"Updated review {review_id} sentiment to {review.sentiment}")
        return review

    # =========================
    # KEYWORD OPERATIONS
    # =========================

    @staticmethod
    async def bulk_create_keywords(
        session: AsyncSession,
        keywords: List[Dict[str, Any]]
    ) -> List[Keyword]:
        """Insert all keywords in one flush"""
        if not keywords:
            return []

        keyword_objects = [
            Keyword(
                query_id=keyword["query_id"],
                keyword=keyword["keyword"],
                frequency=keyword["frequency"],
                sentiment_context=_value(keyword["sentiment_context"]),
                created_at=utcnow()
            )
            for keyword in keywords
        ]
        session.add_all(keyword_objects)
        await session.flush()
        logger.info(f"Inserted {len(keyword_objects)} keywords")
        return keyword_objects

    # =========================
    # RECOMMENDATION OPERATIONS
    # =========================

    @staticmethod
    def _build_recommendation(data: Dict[str, Any]) -> Recommendation:
        return Recommendation(
            query_id=data["query_id"],
            title=data["title"],
            description=data["description"],
            priority=_value(data["priority"]),
            related_keywords=list(data.get("related_keywords") or []),
            frequency_score=_quantize(data["frequency_score"]),
            created_at=utcnow()
        )

    @staticmethod
    async def create_recommendation(
        session: AsyncSession,
        recommendation_data: Dict[str, Any]
    ) -> Recommendation:
        """Create a single recommendation"""
        recommendation = DatabaseOperations._build_recommendation(recommendation_data)
        session.add(recommendation)
        await session.flush()
        logger.info(f"Created recommendation {recommendation.id} for query {recommendation.query_id}")
        return recommendation

    @staticmethod
    async def bulk_create_recommendations(
        session: AsyncSession,
        recommendations: List[Dict[str, Any]]
    ) -> List[Recommendation]:
        """Insert all recommendations in one flush"""
        if not recommendations:
            return []

        recommendation_objects = [
            DatabaseOperations._build_recommendation(data) for data in recommendations
        ]
        session.add_all(recommendation_objects)
        await session.flush()
        logger.info(f"Inserted {len(recommendation_objects)} recommendations")
        return recommendation_objects

    @staticmethod
    async def get_recommendation(
        session: AsyncSession,
        recommendation_id: str
    ) -> Recommendation:
        """Get recommendation by ID"""
        recommendation = await session.get(Recommendation, recommendation_id)
        if recommendation is None:
            raise RecordNotFoundError("Recommendation", recommendation_id)
        return recommendation

    @staticmethod
    async def list_recommendations(
        session: AsyncSession,
        query_id: Optional[str] = None
    ) -> List[Recommendation]:
        """Get recommendations, optionally only those of one query"""
        stmt = select(Recommendation).order_by(Recommendation.created_at)
        if query_id:
            stmt = stmt.where(Recommendation.query_id == query_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update_recommendation(
        session: AsyncSession,
        recommendation_id: str,
        updates: Dict[str, Any]
    ) -> Recommendation:
        """Update supplied recommendation fields"""
        recommendation = await DatabaseOperations.get_recommendation(session, recommendation_id)

        if "related_keywords" in updates and updates["related_keywords"] is not None:
            updates = {**updates, "related_keywords": list(updates["related_keywords"])}
        applied = _apply(recommendation, updates, RECOMMENDATION_FIELDS)
        await session.flush()
        logger.info(f"Updated recommendation {recommendation_id} (fields: {applied or 'none'})")
        return recommendation

    @staticmethod
    async def delete_recommendation(
        session: AsyncSession,
        recommendation_id: str
    ) -> bool:
        """Delete recommendation; unknown ids are ignored. Returns True if a row went away"""
        result = await session.execute(
            delete(Recommendation)
            .where(Recommendation.id == recommendation_id)
            .execution_options(synchronize_session=False)
        )
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted recommendation {recommendation_id}")
        return deleted
