"""Application status state machine.

``TransitionEngine`` is the only writer of ``Application.status`` and of the
stage history that mirrors it: every status change closes the open stage and
opens the next one inside the same unit of work.
"""

import logging
import math

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ApplicationError,
    DuplicateApplicationError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from app.models import Application, ApplicationDocument, ApplicationStatus
from app.models.application import _utc_now
from app.models.enums import FUNNEL_ORDER, can_transition
from app.schemas.application import (
    ApplicationCreate,
    ApplicationCriteria,
    ApplicationListResponse,
    ApplicationResponse,
    BulkItemResult,
)
from app.services.application_store import ApplicationStore
from app.services.notifications import (
    NotificationEvent,
    NotificationPublisher,
    get_publisher,
)
from app.services.stage_tracker import StageTracker
from app.utils.validators import validate_bulk_ids, validate_file_url, validate_score

logger = logging.getLogger(__name__)

STAGE_DESCRIPTIONS: dict[ApplicationStatus, str] = {
    ApplicationStatus.APPLIED: "Application submitted",
    ApplicationStatus.SCREENING: "Application under screening",
    ApplicationStatus.SHORTLISTED: "Candidate shortlisted",
    ApplicationStatus.INTERVIEW: "Interview stage",
    ApplicationStatus.OFFERED: "Offer extended",
    ApplicationStatus.HIRED: "Candidate hired",
    ApplicationStatus.REJECTED: "Application rejected",
    ApplicationStatus.WITHDRAWN: "Application withdrawn by candidate",
}

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class TransitionEngine:
    """Submission, status transitions and employer flags of applications."""

    def __init__(
        self,
        store: ApplicationStore,
        stages: StageTracker | None = None,
        publisher: NotificationPublisher | None = None,
    ):
        self.store = store
        self.stages = stages or StageTracker(store)
        self.publisher = publisher or get_publisher()

    async def submit(self, data: ApplicationCreate) -> Application:
        """Create an application with its initial ``applied`` stage."""
        score_check = validate_score("match_score", data.match_score)
        if not score_check.is_valid:
            raise ValidationError(score_check.error)
        for document in data.documents:
            url_check = validate_file_url(document.file_url)
            if not url_check.is_valid:
                raise ValidationError(url_check.error)

        async with self.store.transaction() as session:
            existing = await self.store.find_application(
                session, data.job_id, data.user_id
            )
            if existing is not None:
                raise DuplicateApplicationError(data.job_id, data.user_id)

            now = _utc_now()
            application = Application(
                job_id=data.job_id,
                user_id=data.user_id,
                company_id=data.company_id,
                status=ApplicationStatus.APPLIED,
                source=data.source or settings.default_application_source,
                match_score=data.match_score,
                resume_url=data.resume_url,
                cover_letter=data.cover_letter,
                viewed_by_employer=False,
                is_bookmarked=False,
                applied_at=now,
            )
            try:
                await self.store.add(session, application)
            except IntegrityError as e:
                # A concurrent submission won the unique (job, user) race.
                raise DuplicateApplicationError(data.job_id, data.user_id) from e

            await self.stages.open_stage(
                session,
                application.id,
                ApplicationStatus.APPLIED,
                description=STAGE_DESCRIPTIONS[ApplicationStatus.APPLIED],
                at=now,
            )
            for document in data.documents:
                session.add(
                    ApplicationDocument(
                        application_id=application.id,
                        user_id=data.user_id,
                        **document.model_dump(),
                    )
                )
            await session.flush()

        logger.info(
            f"Application {application.id} submitted: job={data.job_id}, "
            f"user={data.user_id}, documents={len(data.documents)}"
        )
        await self.publisher.publish(NotificationEvent.application_received(application))
        return application

    async def get_application(self, application_id: int) -> Application:
        async with self.store.reader() as session:
            return await self.store.get_application(session, application_id)

    async def transition(
        self,
        application_id: int,
        target: ApplicationStatus,
        actor_id: int | None = None,
        notes: str | None = None,
        description: str | None = None,
    ) -> Application:
        """Move an application to ``target`` and rotate its stage history.

        Raises:
            NotFoundError: the application does not exist
            PermissionDeniedError: withdrawal requested by someone other than the owner
            InvalidTransitionError: ``target`` is not reachable from the current status
        """
        async with self.store.transaction() as session:
            application = await self.store.get_application(
                session, application_id, lock=True
            )
            previous = await self.apply_transition(
                session, application, target, actor_id, notes, description
            )

        logger.info(
            f"Application {application_id}: {previous.value} -> "
            f"{application.status.value} (actor={actor_id})"
        )
        await self.publisher.publish(
            NotificationEvent.status_changed(application, previous)
        )
        return application

    async def apply_transition(
        self,
        session: AsyncSession,
        application: Application,
        target: ApplicationStatus,
        actor_id: int | None = None,
        notes: str | None = None,
        description: str | None = None,
    ) -> ApplicationStatus:
        """Validate and apply one edge within the caller's unit of work.

        Returns the status the application had before the change. Nothing is
        written when the edge is rejected.
        """
        target = ApplicationStatus(target)
        current = ApplicationStatus(application.status)

        if target == ApplicationStatus.WITHDRAWN and not application.is_owner(actor_id):
            raise PermissionDeniedError(
                f"Only the applicant can withdraw application {application.id}"
            )
        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)

        now = _utc_now()
        await self.stages.close_current(session, application.id, at=now)
        application.status = target
        await self.stages.open_stage(
            session,
            application.id,
            target,
            actor_id=actor_id,
            description=description or STAGE_DESCRIPTIONS[target],
            notes=notes,
            at=now,
        )
        await session.flush()
        return current

    # Shortcuts

    async def move_to_screening(
        self, application_id: int, actor_id: int | None = None, notes: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.SCREENING, actor_id, notes
        )

    async def move_to_shortlist(
        self, application_id: int, actor_id: int | None = None, notes: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.SHORTLISTED, actor_id, notes
        )

    async def move_to_interview(
        self, application_id: int, actor_id: int | None = None, notes: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.INTERVIEW, actor_id, notes
        )

    async def make_offer(
        self, application_id: int, actor_id: int | None = None, notes: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.OFFERED, actor_id, notes
        )

    async def mark_as_hired(
        self, application_id: int, actor_id: int | None = None, notes: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.HIRED, actor_id, notes
        )

    async def reject(
        self, application_id: int, actor_id: int | None = None, reason: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.REJECTED, actor_id, notes=reason
        )

    async def withdraw(
        self, application_id: int, user_id: int, reason: str | None = None
    ) -> Application:
        return await self.transition(
            application_id, ApplicationStatus.WITHDRAWN, user_id, notes=reason
        )

    # Bulk operations

    async def bulk_update_status(
        self,
        application_ids: list[int],
        target: ApplicationStatus,
        actor_id: int | None = None,
        notes: str | None = None,
    ) -> list[BulkItemResult]:
        """Transition each application independently and report every outcome."""
        check = validate_bulk_ids(application_ids)
        if not check.is_valid:
            raise ValidationError(check.error)

        results = []
        for application_id in application_ids:
            try:
                application = await self.transition(
                    application_id, target, actor_id, notes
                )
                results.append(
                    BulkItemResult(
                        application_id=application_id,
                        status="success",
                        new_status=application.status,
                    )
                )
            except (ApplicationError, SQLAlchemyError) as e:
                logger.warning(
                    f"Bulk transition of application {application_id} to "
                    f"{ApplicationStatus(target).value} failed: {e}"
                )
                results.append(
                    BulkItemResult(
                        application_id=application_id,
                        status="error",
                        error=type(e).__name__,
                        error_detail=str(e),
                    )
                )

        success_count = sum(1 for result in results if result.status == "success")
        logger.info(
            f"Bulk transition to {ApplicationStatus(target).value}: "
            f"{success_count}/{len(results)} succeeded"
        )
        return results

    async def bulk_move_to_stage(
        self,
        application_ids: list[int],
        stage: ApplicationStatus,
        actor_id: int | None = None,
        notes: str | None = None,
    ) -> list[BulkItemResult]:
        """Advance applications to a pipeline stage (not rejected/withdrawn)."""
        stage = ApplicationStatus(stage)
        if stage not in FUNNEL_ORDER:
            raise ValidationError(f"'{stage.value}' is not a pipeline stage")
        return await self.bulk_update_status(application_ids, stage, actor_id, notes)

    async def bulk_reject(
        self,
        application_ids: list[int],
        actor_id: int | None = None,
        reason: str | None = None,
    ) -> list[BulkItemResult]:
        return await self.bulk_update_status(
            application_ids, ApplicationStatus.REJECTED, actor_id, reason
        )

    # Employer flags

    async def mark_viewed(self, application_id: int) -> Application:
        async with self.store.transaction() as session:
            application = await self.store.get_application(
                session, application_id, lock=True
            )
            if not application.viewed_by_employer:
                application.viewed_by_employer = True
                await session.flush()
        return application

    async def toggle_bookmark(self, application_id: int) -> Application:
        async with self.store.transaction() as session:
            application = await self.store.get_application(
                session, application_id, lock=True
            )
            application.is_bookmarked = not application.is_bookmarked
            await session.flush()
        logger.debug(
            f"Application {application_id} bookmark set to {application.is_bookmarked}"
        )
        return application

    # Listing and administration

    async def list_applications(
        self,
        criteria: ApplicationCriteria | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ApplicationListResponse:
        criteria = criteria or ApplicationCriteria()
        page = max(page, 1)
        if limit < 1 or limit > MAX_PAGE_SIZE:
            limit = DEFAULT_PAGE_SIZE

        async with self.store.reader() as session:
            applications, total = await self.store.list_filtered(
                session, criteria, page, limit
            )

        return ApplicationListResponse(
            applications=[ApplicationResponse.model_validate(a) for a in applications],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    async def bulk_delete(self, application_ids: list[int]) -> int:
        """Administrative hard delete of applications and everything they own."""
        check = validate_bulk_ids(application_ids)
        if not check.is_valid:
            raise ValidationError(check.error)

        async with self.store.transaction() as session:
            deleted = await self.store.bulk_delete(session, list(set(application_ids)))

        logger.info(f"Bulk deleted {deleted} of {len(application_ids)} applications")
        return deleted
