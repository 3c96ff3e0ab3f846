"""
Database Models Package

Contains SQLAlchemy ORM models for the Sales Tracker backend.
"""

from sales_tracker.core.database import Base
from sales_tracker.models.scraper_session import ScraperSession

__all__ = [
    "Base",
    "ScraperSession",
]
