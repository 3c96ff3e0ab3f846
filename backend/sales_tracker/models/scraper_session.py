"""
Scraper Session Database Model

SQLAlchemy 2.0 model for browser sessions (cookies + user agent + platform)
captured for session-gated job boards.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, JSON, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from sales_tracker.core.database import Base


class ScraperSession(Base):
    """
    Authenticated browsing identity for a gated job board.

    One live row per owner and site. Re-uploading replaces the row's cookies
    instead of adding another row.
    """

    __tablename__ = "scraper_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    site: Mapped[str] = mapped_column(String(50), default="linkedin", nullable=False)

    cookies: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('user_id', 'site', name='uq_scraper_session_user_site'),
        Index('idx_scraper_session_expires_at', 'expires_at'),
    )

    def __repr__(self) -> str:
        """String representation of ScraperSession."""
        return (
            f"<ScraperSession(id={self.id}, user_id='{self.user_id}', "
            f"cookies={len(self.cookies or [])})>"
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check if the session has passed its expiration instant.

        Returns:
            bool: True if the session must be treated as absent
        """
        if self.expires_at is None:
            return False

        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at
