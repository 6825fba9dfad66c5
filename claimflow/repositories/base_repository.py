from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Writes are flushed, never committed: the calling service owns the
    transaction so a multi-row change lands atomically.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: The UUID of the record

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record (flushed, so its ID is populated)
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}", exc_info=True)
            raise

    async def update(self, instance: ModelType, **kwargs) -> ModelType:
        """Apply field updates to a loaded record.

        Only attributes that exist on the model are set; unknown keys are ignored.
        """
        try:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__}: {str(e)}", exc_info=True)
            raise

