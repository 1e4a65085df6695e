"""Persistence layer for applications and their owned entities.

Every mutating operation of the engines runs inside ``ApplicationStore.transaction()``,
which bounds the unit of work by a deadline and translates transient backend
failures into retryable errors. Reads and writes take the session explicitly so
that several engines can share one unit of work.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TypeVar

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.exceptions import (
    ApplicationError,
    ConcurrencyError,
    NotFoundError,
    OperationTimeoutError,
)
from app.core.storage import Base, async_session
from app.models import (
    Application,
    ApplicationDocument,
    ApplicationNote,
    ApplicationStage,
    ApplicationStatus,
    Interview,
    InterviewStatus,
)
from app.schemas.application import ApplicationCriteria
from app.utils.filters import ApplicationFilter

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

_LOCK_ERROR_MARKERS = ("lock", "deadlock", "could not serialize", "database is locked")


class ApplicationStore:
    """Atomic CRUD, filtered listing and aggregate reads over the hiring data."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        timeout_seconds: float | None = None,
    ):
        self.session_factory = session_factory or async_session
        self.timeout_seconds = timeout_seconds or settings.transaction_timeout_seconds

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Run the enclosed block as one all-or-nothing unit with a deadline."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with self.session_factory() as session:
                    async with session.begin():
                        yield session
        except ApplicationError:
            raise
        except TimeoutError as e:
            logger.warning(f"Transaction exceeded {self.timeout_seconds}s deadline")
            raise OperationTimeoutError(
                f"Operation did not finish within {self.timeout_seconds}s"
            ) from e
        except StaleDataError as e:
            logger.warning(f"Concurrent modification detected: {e}")
            raise ConcurrencyError(
                "Record was modified concurrently, retry the operation"
            ) from e
        except OperationalError as e:
            if _is_lock_failure(e):
                logger.warning(f"Lock contention: {e}")
                raise ConcurrencyError("Record is locked, retry the operation") from e
            logger.error(f"Database error: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[AsyncSession]:
        """Session for read-only work; nothing is committed."""
        async with self.session_factory() as session:
            yield session

    # Generic entity access

    async def add(self, session: AsyncSession, entity: ModelT) -> ModelT:
        session.add(entity)
        await session.flush()
        return entity

    async def delete(self, session: AsyncSession, entity: Base) -> None:
        await session.delete(entity)
        await session.flush()

    async def _get(
        self,
        session: AsyncSession,
        model: type[ModelT],
        entity: str,
        entity_id: int,
        lock: bool = False,
    ) -> ModelT:
        query = select(model).where(model.id == entity_id)
        if lock:
            query = query.with_for_update()
        result = await session.execute(query)
        instance = result.scalar_one_or_none()
        if instance is None:
            raise NotFoundError(entity, entity_id)
        return instance

    async def get_application(
        self, session: AsyncSession, application_id: int, lock: bool = False
    ) -> Application:
        return await self._get(session, Application, "Application", application_id, lock)

    async def get_stage(
        self, session: AsyncSession, stage_id: int, lock: bool = False
    ) -> ApplicationStage:
        return await self._get(session, ApplicationStage, "Stage", stage_id, lock)

    async def get_interview(
        self, session: AsyncSession, interview_id: int, lock: bool = False
    ) -> Interview:
        return await self._get(session, Interview, "Interview", interview_id, lock)

    async def get_note(
        self, session: AsyncSession, note_id: int, lock: bool = False
    ) -> ApplicationNote:
        return await self._get(session, ApplicationNote, "Note", note_id, lock)

    async def get_document(
        self, session: AsyncSession, document_id: int, lock: bool = False
    ) -> ApplicationDocument:
        return await self._get(
            session, ApplicationDocument, "Document", document_id, lock
        )

    # Applications

    async def find_application(
        self, session: AsyncSession, job_id: int, user_id: int
    ) -> Application | None:
        result = await session.execute(
            select(Application).where(
                Application.job_id == job_id, Application.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        session: AsyncSession,
        criteria: ApplicationCriteria,
        page: int,
        limit: int,
    ) -> tuple[list[Application], int]:
        """Return one page of applications matching ``criteria`` and the total."""
        app_filter = ApplicationFilter(criteria)

        count_query = app_filter.apply(select(func.count(Application.id)))
        total = (await session.execute(count_query)).scalar_one()

        query = app_filter.apply_sorting(app_filter.apply(select(Application)))
        query = query.offset((page - 1) * limit).limit(limit)
        result = await session.execute(query)
        return list(result.scalars().all()), total

    async def bulk_delete(self, session: AsyncSession, application_ids: list[int]) -> int:
        """Delete applications; owned rows go with them through FK cascades."""
        if not application_ids:
            return 0
        result = await session.execute(
            delete(Application)
            .where(Application.id.in_(application_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def top_applicants(
        self, session: AsyncSession, job_id: int, limit: int
    ) -> list[Application]:
        result = await session.execute(
            select(Application)
            .where(Application.job_id == job_id)
            .order_by(
                Application.match_score.desc(),
                Application.applied_at.asc(),
                Application.id.asc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    # Stages

    async def get_open_stage(
        self, session: AsyncSession, application_id: int, lock: bool = False
    ) -> ApplicationStage | None:
        query = select(ApplicationStage).where(
            ApplicationStage.application_id == application_id,
            ApplicationStage.completed_at.is_(None),
        )
        if lock:
            query = query.with_for_update()
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def list_stages(
        self, session: AsyncSession, application_id: int
    ) -> list[ApplicationStage]:
        result = await session.execute(
            select(ApplicationStage)
            .where(ApplicationStage.application_id == application_id)
            .order_by(ApplicationStage.started_at.asc(), ApplicationStage.id.asc())
        )
        return list(result.scalars().all())

    async def detach_stage_references(self, session: AsyncSession, stage_id: int) -> None:
        """Null every weak reference to a stage before it is removed."""
        await session.execute(
            update(ApplicationNote)
            .where(ApplicationNote.stage_id == stage_id)
            .values(stage_id=None)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            update(Interview)
            .where(Interview.stage_id == stage_id)
            .values(stage_id=None)
            .execution_options(synchronize_session=False)
        )

    # Interviews

    async def list_interviews(
        self, session: AsyncSession, application_id: int
    ) -> list[Interview]:
        result = await session.execute(
            select(Interview)
            .where(Interview.application_id == application_id)
            .order_by(Interview.scheduled_at.asc())
        )
        return list(result.scalars().all())

    async def list_interviews_between(
        self,
        session: AsyncSession,
        start: datetime,
        end: datetime,
        status: InterviewStatus | None = None,
        interviewer_id: int | None = None,
    ) -> list[Interview]:
        query = select(Interview).where(
            Interview.scheduled_at >= start, Interview.scheduled_at <= end
        )
        if status is not None:
            query = query.where(Interview.status == status)
        if interviewer_id is not None:
            query = query.where(Interview.interviewer_id == interviewer_id)
        result = await session.execute(query.order_by(Interview.scheduled_at.asc()))
        return list(result.scalars().all())

    async def list_interviews_due_for_reminder(
        self, session: AsyncSession, now: datetime, until: datetime
    ) -> list[int]:
        result = await session.execute(
            select(Interview.id)
            .where(
                Interview.status == InterviewStatus.SCHEDULED,
                Interview.reminder_sent_at.is_(None),
                Interview.scheduled_at > now,
                Interview.scheduled_at <= until,
            )
            .order_by(Interview.scheduled_at.asc())
        )
        return list(result.scalars().all())

    # Notes

    async def list_notes(
        self,
        session: AsyncSession,
        application_id: int | None = None,
        stage_id: int | None = None,
        visibility=None,
        pinned_only: bool = False,
    ) -> list[ApplicationNote]:
        query = select(ApplicationNote)
        if application_id is not None:
            query = query.where(ApplicationNote.application_id == application_id)
        if stage_id is not None:
            query = query.where(ApplicationNote.stage_id == stage_id)
        if visibility is not None:
            query = query.where(ApplicationNote.visibility == visibility)
        if pinned_only:
            query = query.where(ApplicationNote.is_pinned.is_(True))
        query = query.order_by(
            ApplicationNote.is_pinned.desc(),
            ApplicationNote.created_at.desc(),
            ApplicationNote.id.desc(),
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    # Documents

    async def list_documents(
        self, session: AsyncSession, application_id: int, document_type=None
    ) -> list[ApplicationDocument]:
        query = select(ApplicationDocument).where(
            ApplicationDocument.application_id == application_id
        )
        if document_type is not None:
            query = query.where(ApplicationDocument.document_type == document_type)
        result = await session.execute(
            query.order_by(ApplicationDocument.uploaded_at.desc(), ApplicationDocument.id.desc())
        )
        return list(result.scalars().all())

    async def list_unverified_documents(
        self, session: AsyncSession, page: int, limit: int
    ) -> tuple[list[ApplicationDocument], int]:
        condition = ApplicationDocument.is_verified.is_(False)
        total = (
            await session.execute(
                select(func.count(ApplicationDocument.id)).where(condition)
            )
        ).scalar_one()
        result = await session.execute(
            select(ApplicationDocument)
            .where(condition)
            .order_by(ApplicationDocument.uploaded_at.asc(), ApplicationDocument.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    # Aggregate reads

    async def application_statuses(
        self, session: AsyncSession, job_id: int
    ) -> list[tuple[int, ApplicationStatus]]:
        result = await session.execute(
            select(Application.id, Application.status).where(
                Application.job_id == job_id
            )
        )
        return [(row.id, row.status) for row in result]

    async def stage_names_for_job(
        self, session: AsyncSession, job_id: int
    ) -> list[tuple[int, ApplicationStatus]]:
        result = await session.execute(
            select(ApplicationStage.application_id, ApplicationStage.stage_name)
            .join(Application, Application.id == ApplicationStage.application_id)
            .where(Application.job_id == job_id)
        )
        return [(row.application_id, row.stage_name) for row in result]

    async def completed_stage_spans(
        self,
        session: AsyncSession,
        job_id: int | None = None,
        company_id: int | None = None,
    ) -> list[tuple[ApplicationStatus, datetime, datetime]]:
        query = (
            select(
                ApplicationStage.stage_name,
                ApplicationStage.started_at,
                ApplicationStage.completed_at,
            )
            .join(Application, Application.id == ApplicationStage.application_id)
            .where(ApplicationStage.completed_at.is_not(None))
        )
        if job_id is not None:
            query = query.where(Application.job_id == job_id)
        if company_id is not None:
            query = query.where(Application.company_id == company_id)
        result = await session.execute(query)
        return [(row.stage_name, row.started_at, row.completed_at) for row in result]

    async def applications_in_range(
        self,
        session: AsyncSession,
        start: datetime,
        end: datetime,
        job_id: int | None = None,
        company_id: int | None = None,
    ) -> list[tuple[datetime, ApplicationStatus, float]]:
        """Rows applied in ``[start, end)`` for trend rollups."""
        query = select(
            Application.applied_at, Application.status, Application.match_score
        ).where(Application.applied_at >= start, Application.applied_at < end)
        if job_id is not None:
            query = query.where(Application.job_id == job_id)
        if company_id is not None:
            query = query.where(Application.company_id == company_id)
        result = await session.execute(query.order_by(Application.applied_at.asc()))
        return [(row.applied_at, row.status, row.match_score) for row in result]

    async def source_aggregates(
        self,
        session: AsyncSession,
        job_id: int | None = None,
        company_id: int | None = None,
    ) -> list[tuple[str, int, int, float]]:
        """(source, count, hired count, average match score) per source."""
        hired = func.sum(
            case((Application.status == ApplicationStatus.HIRED, 1), else_=0)
        )
        total = func.count(Application.id)
        query = select(
            Application.source,
            total,
            hired,
            func.avg(Application.match_score),
        ).group_by(Application.source)
        if job_id is not None:
            query = query.where(Application.job_id == job_id)
        if company_id is not None:
            query = query.where(Application.company_id == company_id)
        result = await session.execute(
            query.order_by(total.desc(), Application.source.asc())
        )
        return [
            (source, count, int(hired_count or 0), float(average or 0.0))
            for source, count, hired_count, average in result.all()
        ]

    async def status_counts(
        self,
        session: AsyncSession,
        job_id: int | None = None,
        user_id: int | None = None,
    ) -> tuple[dict[ApplicationStatus, int], float]:
        """Applications per status and their average match score."""
        conditions = []
        if job_id is not None:
            conditions.append(Application.job_id == job_id)
        if user_id is not None:
            conditions.append(Application.user_id == user_id)

        result = await session.execute(
            select(Application.status, func.count(Application.id))
            .where(*conditions)
            .group_by(Application.status)
        )
        counts = {ApplicationStatus(status): count for status, count in result.all()}
        average = (
            await session.execute(
                select(func.avg(Application.match_score)).where(*conditions)
            )
        ).scalar_one()
        return counts, float(average or 0.0)

    async def first_response_spans(
        self, session: AsyncSession, user_id: int
    ) -> list[tuple[datetime, datetime]]:
        """(applied_at, close of the applied stage) for a user's answered applications."""
        result = await session.execute(
            select(Application.applied_at, ApplicationStage.completed_at)
            .join(ApplicationStage, ApplicationStage.application_id == Application.id)
            .where(
                Application.user_id == user_id,
                ApplicationStage.stage_name == ApplicationStatus.APPLIED,
                ApplicationStage.completed_at.is_not(None),
            )
        )
        return [(row.applied_at, row.completed_at) for row in result]

    async def count_owned(
        self, session: AsyncSession, model: type[Base], application_id: int, *conditions
    ) -> int:
        result = await session.execute(
            select(func.count(model.id)).where(
                model.application_id == application_id, *conditions
            )
        )
        return result.scalar_one()


def _is_lock_failure(error: OperationalError) -> bool:
    text = str(error.orig).lower() if error.orig is not None else str(error).lower()
    return any(marker in text for marker in _LOCK_ERROR_MARKERS)
