"""Application document metadata."""

import logging

from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models import ApplicationDocument, DocumentType
from app.schemas.document import DocumentCreate, DocumentUpdate
from app.services.application_store import ApplicationStore
from app.utils.validators import validate_file_url

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class DocumentService:
    """Upload, verification and listing of documents attached to applications."""

    def __init__(self, store: ApplicationStore):
        self.store = store

    async def upload(
        self, application_id: int, data: DocumentCreate, user_id: int
    ) -> ApplicationDocument:
        """Attach a document; only the applicant may upload to an application."""
        check = validate_file_url(data.file_url)
        if not check.is_valid:
            raise ValidationError(check.error)

        async with self.store.transaction() as session:
            application = await self.store.get_application(session, application_id)
            if not application.is_owner(user_id):
                raise PermissionDeniedError(
                    f"User {user_id} cannot upload documents to application {application_id}"
                )
            document = await self.store.add(
                session,
                ApplicationDocument(
                    application_id=application_id,
                    user_id=user_id,
                    is_verified=False,
                    **data.model_dump(),
                ),
            )

        logger.info(
            f"Document {document.id} ({document.document_type.value}) uploaded "
            f"to application {application_id}"
        )
        return document

    async def get_document(self, document_id: int) -> ApplicationDocument:
        async with self.store.reader() as session:
            return await self.store.get_document(session, document_id)

    async def update(
        self, document_id: int, data: DocumentUpdate
    ) -> ApplicationDocument:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "file_url" in changes:
            check = validate_file_url(changes["file_url"])
            if not check.is_valid:
                raise ValidationError(check.error)

        async with self.store.transaction() as session:
            document = await self.store.get_document(session, document_id, lock=True)
            for field, value in changes.items():
                setattr(document, field, value)
            await session.flush()
        return document

    async def delete(self, document_id: int, user_id: int) -> None:
        """Remove a document; only its uploader may do so."""
        async with self.store.transaction() as session:
            document = await self.store.get_document(session, document_id, lock=True)
            if document.user_id != user_id:
                raise PermissionDeniedError(
                    f"User {user_id} cannot delete document {document_id}"
                )
            await self.store.delete(session, document)
        logger.info(f"Document {document_id} deleted by {user_id}")

    async def verify(self, document_id: int, verifier_id: int) -> ApplicationDocument:
        async with self.store.transaction() as session:
            document = await self.store.get_document(session, document_id, lock=True)
            document.verify(verifier_id)
            await session.flush()
        logger.info(f"Document {document_id} verified by {verifier_id}")
        return document

    async def list_for_application(
        self, application_id: int, document_type: DocumentType | None = None
    ) -> list[ApplicationDocument]:
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            return await self.store.list_documents(
                session, application_id, document_type
            )

    async def list_unverified(
        self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> tuple[list[ApplicationDocument], int, int, int]:
        """One page of documents awaiting verification, oldest first.

        Returns the documents, the total count and the effective page and limit.
        """
        page = max(page, 1)
        if limit < 1 or limit > MAX_PAGE_SIZE:
            limit = DEFAULT_PAGE_SIZE
        async with self.store.reader() as session:
            documents, total = await self.store.list_unverified_documents(
                session, page, limit
            )
        return documents, total, page, limit
