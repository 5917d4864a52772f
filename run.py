#!/usr/bin/env python
"""
MarketLens API Server - Startup Script
"""
import sys
import os

# Ensure project root is in path (for imports to work)
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import uvicorn
from marketlens.config.settings import settings


def main():
    """
    Start the MarketLens API server
    """
    config = {
        "app": "marketlens.api.main:app",
        "host": settings.API_HOST,
        "port": settings.API_PORT,
        "reload": False,
        "workers": 1,
        "log_level": settings.LOG_LEVEL.value.lower(),
        "access_log": True,
    }

    print(f"\n{'='*60}")
    print(f"  MarketLens API Server Starting")
    print(f"  Host: {config['host']}")
    print(f"  Port: {config['port']}")
    print(f"  Database: {settings.DATABASE_URL}")
    print(f"{'='*60}\n")

    uvicorn.run(**config)


if __name__ == "__main__":
    main()
