"""
Base Repository Pattern Implementation

Provides abstract base repository with common database operations
and transaction management using SQLAlchemy async sessions.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.exc import SQLAlchemyError

from sales_tracker.core.database import DatabaseManager, get_db_session_context
from sales_tracker.utils.logger import get_logger

ModelType = TypeVar("ModelType")

logger = get_logger(__name__)


class BaseRepository(Generic[ModelType], ABC):
    """Abstract base repository providing common CRUD operations."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @property
    @abstractmethod
    def model(self) -> Type[ModelType]:
        """Return the SQLAlchemy model class."""
        pass

    def session(self):
        """Transactional session scope bound to this repository's database."""
        return get_db_session_context(self.db_manager)

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get entity by ID."""
        async with self.session() as session:
            try:
                return await session.get(self.model, id)
            except SQLAlchemyError as e:
                logger.error(f"Error getting {self.model.__name__} by ID {id}: {e}")
                return None

    async def delete(self, id: int) -> bool:
        """Delete entity by ID."""
        try:
            async with self.session() as session:
                db_obj = await session.get(self.model, id)
                if not db_obj:
                    return False

                await session.delete(db_obj)
                return True
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model.__name__} with ID {id}: {e}")
            return False
