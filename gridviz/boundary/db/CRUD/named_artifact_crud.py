"""
Named artifact CRUD operations.

Adds name-keyed access and upsert-by-name to BaseCRUD. Upserts for the
same name are serialized by a per-name lock and committed before the
lock is released; a unique-name race with another process is retried
once as an update.

Dependencies: sqlalchemy, gridviz.core.name_locks
System role: Persistence of diagram and map artifacts
"""

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gridviz.boundary.db.base import as_utc, utc_now
from gridviz.boundary.db.CRUD.base_crud import BaseCRUD, ModelT
from gridviz.boundary.db.models.diagram_model import DiagramModel
from gridviz.boundary.db.models.map_diagram_model import MapDiagramModel
from gridviz.core.name_locks import NameLocks

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def next_timestamp(previous: datetime | None) -> datetime:
    """Current UTC time, bumped past ``previous`` when the clock has not moved."""
    now = utc_now()
    if previous is None:
        return now
    return max(now, as_utc(previous) + _TICK)


class NamedArtifactCRUD(BaseCRUD[ModelT]):
    """CRUD for models with a unique ``name`` column."""

    def __init__(self, model: type[ModelT]) -> None:
        super().__init__(model)
        self.locks = NameLocks()

    async def get_by_name(self, session: AsyncSession, name: str) -> ModelT | None:
        """
        Retrieve a single record by logical name.

        Args:
            session: Async database session
            name: Unique logical name

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.model.name == name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_by_name(self, session: AsyncSession, name: str) -> bool:
        """Check whether a record with ``name`` exists."""
        stmt = select(self.model.id).where(self.model.name == name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def delete_by_name(self, session: AsyncSession, name: str) -> bool:
        """
        Delete a record by logical name.

        Returns:
            True if record was deleted, False if not found
        """
        stmt = delete(self.model).where(self.model.name == name)
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def update_instance(
        self,
        session: AsyncSession,
        instance: ModelT,
        **fields: Any,
    ) -> ModelT:
        """
        Overwrite fields of a loaded record and advance ``updated_at``.

        Flushes but does not commit.
        """
        for key, value in fields.items():
            setattr(instance, key, value)
        instance.updated_at = next_timestamp(instance.updated_at)
        await session.flush()
        return instance

    async def upsert(
        self,
        session: AsyncSession,
        name: str,
        preferred_id: UUID | None = None,
        **fields: Any,
    ) -> ModelT:
        """
        Create or overwrite the record named ``name`` and commit.

        An existing record keeps its id and created_at; content fields are
        replaced and updated_at strictly increases. A new record takes
        ``preferred_id`` when given, and never falls back to a generated id.

        Args:
            session: Async database session
            name: Unique logical name
            preferred_id: Id for a newly created record
            **fields: Content columns

        Returns:
            The committed model instance

        Raises:
            IntegrityError: If the write still conflicts after one retry
        """
        async with self.locks.get(name):
            try:
                instance = await self._write(session, name, preferred_id, fields)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning(
                    "Upsert conflicted, retrying as update",
                    extra={"table": self.model.__tablename__, "artifact_name": name},
                )
                try:
                    instance = await self._write(session, name, preferred_id, fields)
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise

            await session.refresh(instance)
            return instance

    async def _write(
        self,
        session: AsyncSession,
        name: str,
        preferred_id: UUID | None,
        fields: dict[str, Any],
    ) -> ModelT:
        existing = await self.get_by_name(session, name)
        if existing is not None:
            return await self.update_instance(session, existing, **fields)

        now = utc_now()
        instance = self.model(name=name, created_at=now, updated_at=now, **fields)
        if preferred_id is not None:
            instance.id = preferred_id
        session.add(instance)
        await session.flush()
        return instance


diagram_crud = NamedArtifactCRUD(DiagramModel)
map_diagram_crud = NamedArtifactCRUD(MapDiagramModel)
