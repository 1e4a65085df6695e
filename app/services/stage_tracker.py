"""Append-only stage history of applications."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidTransitionError, NotFoundError
from app.models import ApplicationStage, ApplicationStatus
from app.models.application import _utc_now
from app.services.application_store import ApplicationStore

logger = logging.getLogger(__name__)


class StageTracker:
    """Reads the stage history and performs stage rotation inside a unit of work."""

    def __init__(self, store: ApplicationStore):
        self.store = store

    async def get_current_stage(self, application_id: int) -> ApplicationStage:
        """Return the open stage of an application."""
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            stage = await self.store.get_open_stage(session, application_id)
        if stage is None:
            raise NotFoundError("Open stage for application", application_id)
        return stage

    async def get_stage_history(self, application_id: int) -> list[ApplicationStage]:
        """All stages of an application, oldest first."""
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            return await self.store.list_stages(session, application_id)

    async def get_stage(self, stage_id: int) -> ApplicationStage:
        async with self.store.reader() as session:
            return await self.store.get_stage(session, stage_id)

    async def complete_stage(
        self, stage_id: int, notes: str | None = None
    ) -> ApplicationStage:
        """Manually close a stage outside the status graph.

        Used for administrative corrections; the application status is not
        touched.
        """
        async with self.store.transaction() as session:
            stage = await self.store.get_stage(session, stage_id, lock=True)
            if stage.is_completed:
                raise InvalidTransitionError(
                    stage.stage_name.value, "completed", "stage is already completed"
                )
            stage.complete(notes=notes)
            await session.flush()

        logger.info(
            f"Stage {stage_id} ({stage.stage_name.value}) of application "
            f"{stage.application_id} completed manually"
        )
        return stage

    async def delete_stage(self, stage_id: int) -> None:
        """Remove a stage; notes and interviews bound to it are kept, unbound."""
        async with self.store.transaction() as session:
            stage = await self.store.get_stage(session, stage_id, lock=True)
            await self.store.detach_stage_references(session, stage_id)
            await self.store.delete(session, stage)
        logger.info(f"Stage {stage_id} of application {stage.application_id} deleted")

    # Rotation primitives; callers own the transaction

    async def close_current(
        self,
        session: AsyncSession,
        application_id: int,
        at: datetime | None = None,
        notes: str | None = None,
    ) -> ApplicationStage | None:
        stage = await self.store.get_open_stage(session, application_id, lock=True)
        if stage is None:
            return None
        stage.complete(at=at, notes=notes)
        # The close must reach the database before a new open stage is inserted.
        await session.flush()
        return stage

    async def open_stage(
        self,
        session: AsyncSession,
        application_id: int,
        stage_name: ApplicationStatus,
        actor_id: int | None = None,
        description: str | None = None,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> ApplicationStage:
        stage = ApplicationStage(
            application_id=application_id,
            stage_name=ApplicationStatus(stage_name),
            description=description,
            handled_by=actor_id,
            started_at=at or _utc_now(),
            notes=notes,
        )
        return await self.store.add(session, stage)
