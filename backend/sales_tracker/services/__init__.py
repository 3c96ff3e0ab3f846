"""
Services Layer

Business logic that sits above the scraper pipeline.
"""

from .linkedin_auth import LinkedInAuthService

__all__ = [
    "LinkedInAuthService",
]
