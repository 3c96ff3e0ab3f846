"""
API v1 Package

Contains all version 1 API endpoints for the Sales Tracker backend.
"""

from .scraper import router as scraper_router
from .linkedin_auth import router as linkedin_auth_router
from .health import router as health_router

__all__ = [
    "scraper_router",
    "linkedin_auth_router",
    "health_router"
]
