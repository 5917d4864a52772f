"""
API Module for MarketLens
FastAPI REST API application and utilities
"""

from .main import app

# Re-export database dependency for convenience
from ..database import get_db

from .routes import queries, products, reviews, keywords, recommendations, system

__all__ = [
    # Main application
    "app",

    # Database dependency
    "get_db",

    # Route modules
    "queries",
    "products",
    "reviews",
    "keywords",
    "recommendations",
    "system"
]
