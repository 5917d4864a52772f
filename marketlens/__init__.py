"""MarketLens - Marketplace Review Analysis Tracker"""

__version__ = "1.0.0"
