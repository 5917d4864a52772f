"""
API Routes Module
All route handlers for MarketLens REST API
"""

from . import queries
from . import products
from . import reviews
from . import keywords
from . import recommendations
from . import system

__all__ = ["queries", "products", "reviews", "keywords", "recommendations", "system"]
