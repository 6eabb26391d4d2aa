"""Unit of work pattern implementation."""
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from sentinela.infrastructure.database.repositories import MediaRepository, PersonRepository


class UnitOfWork:
    """Unit of work for managing database transactions and repositories."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize unit of work.

        Args:
            session: Database session
        """
        self._session = session
        self.people = PersonRepository(session)
        self.media = MediaRepository(session)

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Commit on success, roll back when the block raised."""
        if exc_type is not None:
            await self.rollback()
        else:
            await self.commit()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        await self._session.rollback()

    @asynccontextmanager
    async def transaction(self):
        """Create a new transaction scope.

        Example:
            ```python
            async with uow.transaction():
                media = await uow.media.create(...)
            # committed here, or rolled back if the block raised
            ```
        """
        try:
            yield self
            await self.commit()
        except Exception:
            await self.rollback()
            raise
