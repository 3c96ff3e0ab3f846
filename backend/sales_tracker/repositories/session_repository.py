"""
Scraper Session Repository

Owner-scoped persistence for browser sessions. Each owner has at most one
row per site; saving again overwrites it in place.
"""

from typing import Optional, List, Dict, Any, Type
from datetime import datetime, timezone

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError

from sales_tracker.models.scraper_session import ScraperSession
from sales_tracker.repositories.base_repository import BaseRepository
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SITE = "linkedin"


class SessionRepository(BaseRepository[ScraperSession]):
    """Repository for ScraperSession rows."""

    @property
    def model(self) -> Type[ScraperSession]:
        return ScraperSession

    def _owner_filter(self, user_id: str, site: str):
        return (ScraperSession.user_id == user_id) & (ScraperSession.site == site)

    async def get_by_owner(self, user_id: str, site: str = DEFAULT_SITE) -> Optional[ScraperSession]:
        """Get the owner's row regardless of expiry."""
        async with self.session() as session:
            try:
                result = await session.execute(
                    select(ScraperSession).where(self._owner_filter(user_id, site))
                )
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Error getting session for user {user_id}: {e}")
                return None

    async def get_active_for_owner(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        site: str = DEFAULT_SITE
    ) -> Optional[ScraperSession]:
        """
        Get the owner's session if it has not expired.

        Args:
            user_id: Owner identity
            now: Reference instant, defaults to the current UTC time
            site: Job board the session belongs to

        Returns:
            Optional[ScraperSession]: Live session row or None
        """
        row = await self.get_by_owner(user_id, site)
        if row is None:
            return None

        if row.is_expired(now or datetime.now(timezone.utc)):
            logger.info(f"Stored session for user {user_id} has expired")
            return None

        return row

    async def count_for_site(self, site: str = DEFAULT_SITE) -> Optional[int]:
        """
        Count owner rows stored for a site.

        Returns:
            Optional[int]: Row count, or None on database error
        """
        async with self.session() as session:
            try:
                result = await session.execute(
                    select(func.count(ScraperSession.id)).where(ScraperSession.site == site)
                )
                return result.scalar() or 0
            except SQLAlchemyError as e:
                logger.error(f"Error counting sessions for {site}: {e}")
                return None

    async def upsert_for_owner(
        self,
        user_id: str,
        cookies: List[Dict[str, Any]],
        user_agent: Optional[str] = None,
        platform: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        site: str = DEFAULT_SITE
    ) -> Optional[ScraperSession]:
        """
        Insert or replace the owner's session.

        Returns:
            Optional[ScraperSession]: Stored row, or None on database error
        """
        try:
            async with self.session() as session:
                result = await session.execute(
                    select(ScraperSession).where(self._owner_filter(user_id, site))
                )
                row = result.scalar_one_or_none()

                if row is None:
                    row = ScraperSession(user_id=user_id, site=site)
                    session.add(row)

                row.cookies = cookies
                row.user_agent = user_agent
                row.platform = platform
                row.expires_at = expires_at
                row.updated_at = datetime.now(timezone.utc)

                await session.flush()
                await session.refresh(row)
                return row

        except SQLAlchemyError as e:
            logger.error(f"Error saving session for user {user_id}: {e}")
            return None

    async def delete_for_owner(self, user_id: str, site: str = DEFAULT_SITE) -> bool:
        """Delete the owner's session. Returns True if a row was removed."""
        try:
            async with self.session() as session:
                result = await session.execute(
                    delete(ScraperSession).where(self._owner_filter(user_id, site))
                )
                return (result.rowcount or 0) > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting session for user {user_id}: {e}")
            return False
