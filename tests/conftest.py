"""
Shared fixtures for MarketLens tests
"""

import pytest
import httpx
from datetime import timedelta

from marketlens.api import app, get_db
from marketlens.database.manager import DatabaseManager
from marketlens.database.operations import DatabaseOperations
from marketlens.database.models import utcnow


@pytest.fixture
async def test_db(tmp_path):
    """Create a file-backed test database"""
    db_manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db_manager.initialize()

    yield db_manager

    await db_manager.close()


@pytest.fixture
async def api_client(test_db):
    """HTTP client against the app with the database dependency overridden"""
    async def get_test_db():
        async with test_db.get_session() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def seeded_query(test_db):
    """A query with two products, three reviews, two keywords and one recommendation"""
    async with test_db.get_session() as session:
        query = await DatabaseOperations.create_query(
            session,
            input="wireless headphones",
            query_type="keyword",
            platform="shopee",
            expires_at=utcnow() + timedelta(days=1)
        )
        first = await DatabaseOperations.create_product(session, {
            "query_id": query.id,
            "name": "Headphones A",
            "url": "https://shopee.example/a",
            "platform": "shopee",
            "price": 199.9,
            "average_rating": 4.5,
            "total_reviews": 2
        })
        second = await DatabaseOperations.create_product(session, {
            "query_id": query.id,
            "name": "Headphones B",
            "url": "https://shopee.example/b",
            "platform": "shopee"
        })
        await DatabaseOperations.bulk_create_reviews(session, [
            {"product_id": first.id, "review_text": "Great bass", "rating": 5,
             "review_date": utcnow(), "sentiment": "positive"},
            {"product_id": first.id, "review_text": "Okay", "rating": 3,
             "review_date": utcnow()},
            {"product_id": second.id, "review_text": "Broke after a week", "rating": 1,
             "review_date": utcnow(), "sentiment": "negative"},
        ])
        await DatabaseOperations.bulk_create_keywords(session, [
            {"query_id": query.id, "keyword": "bass", "frequency": 12, "sentiment_context": "positive"},
            {"query_id": query.id, "keyword": "battery", "frequency": 4, "sentiment_context": "negative"},
        ])
        await DatabaseOperations.create_recommendation(session, {
            "query_id": query.id,
            "title": "Improve durability",
            "description": "Several reviews mention breakage",
            "priority": "high",
            "related_keywords": ["durability", "broke"],
            "frequency_score": 7.5
        })

    return {"query_id": query.id, "product_ids": [first.id, second.id]}
