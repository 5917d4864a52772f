"""
Database Models for MarketLens
Queries and the products, reviews, keywords and recommendations attached to them
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, TypeDecorator
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
import uuid

Base = declarative_base()


# =========================
# ENUMS
# =========================

class Platform(str, Enum):
    """Supported marketplaces"""
    SHOPEE = "shopee"
    TIKTOK_SHOP = "tiktok_shop"
    TOKOPEDIA = "tokopedia"


class QueryType(str, Enum):
    """What the query input holds"""
    KEYWORD = "keyword"
    URL = "url"


class QueryStatus(str, Enum):
    """Query processing status"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Sentiment(str, Enum):
    """Sentiment labels for reviews and keywords"""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Priority(str, Enum):
    """Recommendation priority"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# =========================
# COLUMN HELPERS
# =========================

def utcnow() -> datetime:
    """Current time as naive UTC, the form every timestamp column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are taken as UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def new_id() -> str:
    return str(uuid.uuid4())


class FixedPoint(TypeDecorator):
    """
    Fixed-point decimal stored as a string

    Values are quantized to `scale` places (half-up) on write and come back
    as floats. A value with more integer digits than `precision - scale`
    raises ValueError from process_bind_param, which SQLAlchemy surfaces at
    flush as StatementError with the ValueError in `orig`.
    """
    impl = String
    cache_ok = True

    def __init__(self, precision: int, scale: int, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.precision = precision
        self.scale = scale
        self.quantum = Decimal(1).scaleb(-scale)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        number = Decimal(str(value)).quantize(self.quantum, rounding=ROUND_HALF_UP)
        integer_digits = len(str(int(number.copy_abs())))
        if integer_digits > self.precision - self.scale:
            raise ValueError(
                f"Numeric value {value} overflows precision {self.precision}, scale {self.scale}"
            )
        return str(number)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return float(Decimal(value))


# =========================
# MODELS
# =========================

class Query(Base):
    """Keyword or URL submitted for marketplace analysis"""
    __tablename__ = "queries"

    id = Column(String(36), primary_key=True, default=new_id)
    input = Column(Text, nullable=False)
    query_type = Column(String(20), nullable=False)  # keyword, url
    platform = Column(String(20), nullable=True)  # shopee, tiktok_shop, tokopedia; None = all
    status = Column(String(20), nullable=False, default=QueryStatus.PENDING.value)
    total_products_found = Column(Integer, nullable=False, default=0)
    total_reviews_scraped = Column(Integer, nullable=False, default=0)
    average_rating = Column(FixedPoint(3, 2), nullable=True)
    sentiment_positive = Column(Integer, nullable=True, default=0)
    sentiment_neutral = Column(Integer, nullable=True, default=0)
    sentiment_negative = Column(Integer, nullable=True, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)

    # Relationships
    products = relationship("Product", back_populates="query", cascade="all, delete-orphan", passive_deletes=True)
    keywords = relationship("Keyword", back_populates="query", cascade="all, delete-orphan", passive_deletes=True)
    recommendations = relationship("Recommendation", back_populates="query", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def sentiment_summary(self):
        """Positive/neutral/negative counts, or None while none of them is set"""
        counts = (self.sentiment_positive, self.sentiment_neutral, self.sentiment_negative)
        if all(count is None for count in counts):
            return None
        positive, neutral, negative = (count or 0 for count in counts)
        return {"positive": positive, "neutral": neutral, "negative": negative}


class Product(Base):
    """Marketplace listing discovered for a query"""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    query_id = Column(String(36), ForeignKey("queries.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    platform = Column(String(20), nullable=False)
    image_url = Column(Text, nullable=True)
    price = Column(FixedPoint(12, 2), nullable=True)
    average_rating = Column(FixedPoint(3, 2), nullable=True)
    total_reviews = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    query = relationship("Query", back_populates="products")
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)


class Review(Base):
    """Customer review of a product"""
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    review_text = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5
    review_date = Column(DateTime, nullable=False)
    sentiment = Column(String(20), nullable=True)  # positive, neutral, negative
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    product = relationship("Product", back_populates="reviews")


class Keyword(Base):
    """Extracted term with its frequency and sentiment context"""
    __tablename__ = "keywords"

    id = Column(String(36), primary_key=True, default=new_id)
    query_id = Column(String(36), ForeignKey("queries.id", ondelete="CASCADE"), nullable=False)
    keyword = Column(Text, nullable=False)
    frequency = Column(Integer, nullable=False)
    sentiment_context = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    query = relationship("Query", back_populates="keywords")


class Recommendation(Base):
    """Prioritized suggestion derived from a query's findings"""
    __tablename__ = "recommendations"

    id = Column(String(36), primary_key=True, default=new_id)
    query_id = Column(String(36), ForeignKey("queries.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False)  # high, medium, low
    related_keywords = Column(JSON, nullable=False, default=list)
    frequency_score = Column(FixedPoint(10, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    query = relationship("Query", back_populates="recommendations")
