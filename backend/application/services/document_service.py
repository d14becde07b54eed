"""
Document service orchestrator.

Coordinates document upload, listing, status polling and deletion.
Uploads are stored in the blob store, recorded as pending and handed to the
ingestion queue; processing happens in the background.

Dependencies: backend.boundary.db, backend.boundary.storage, backend.core
System role: Document management orchestration
"""

import asyncio
import logging
import uuid
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import chunk_crud, document_crud
from backend.boundary.db.models import DocumentModel, DocumentStatus
from backend.boundary.storage import BlobStore, build_locator
from backend.configs.storage import StorageSettings
from backend.core.document_processing.ingestion_queue import IngestionJob, IngestionQueue
from backend.core.document_processing.modality import file_type_of, mime_type_for, resolve_modality
from backend.core.exceptions import DocumentNotFoundError, StorageError, ValidationError
from backend.core.knowledge_graph import remove_document_knowledge

logger = logging.getLogger(__name__)

STATUS_PROGRESS = {
    DocumentStatus.PENDING: 0,
    DocumentStatus.PROCESSING: 50,
    DocumentStatus.PROCESSED: 100,
    DocumentStatus.FAILED: 0,
}


class DocumentService:
    """
    Document service orchestrator.

    Handles document lifecycle: upload, status, listing and deletion.
    Deletion removes the document's contribution to the knowledge graph
    before its chunks so the graph never references missing chunks.
    """

    def __init__(
        self,
        db: AsyncSession,
        blob_store: BlobStore,
        queue: IngestionQueue | None = None,
        settings: StorageSettings | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document metadata
            blob_store: Store for the original uploaded bytes
            queue: Ingestion queue (uploads are stored but not processed if None)
            settings: Storage settings (upload size limit)
        """
        self.db = db
        self.blob_store = blob_store
        self.queue = queue
        self.settings = settings or StorageSettings()

    @property
    def max_file_bytes(self) -> int:
        return self.settings.max_file_size_mb * 1024 * 1024

    async def upload_document(
        self,
        filename: str,
        data: bytes,
        workspace: str,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> DocumentModel:
        """
        Store an upload and queue it for ingestion.

        Steps:
        1. Resolve the modality from the extension
        2. Reject empty and oversize files
        3. Store the bytes under uploads/{document_id}/{filename}
        4. Create the document record with PENDING status
        5. Submit an ingestion job

        Args:
            filename: Original filename
            data: File bytes
            workspace: Workspace the document belongs to
            content_type: Content type reported by the client
            metadata: Extra metadata (e.g. duration_seconds for media)

        Returns:
            DocumentModel: The pending document

        Raises:
            UnsupportedModalityError: Extension maps to no modality
            ValidationError: Empty or oversize file
            StorageError: Blob store write failed
        """
        modality = resolve_modality(filename)
        if not data:
            raise ValidationError("Uploaded file is empty", field="file")
        if len(data) > self.max_file_bytes:
            raise ValidationError(
                f"File exceeds the {self.settings.max_file_size_mb} MB limit",
                field="file",
                details={"byte_size": len(data)},
            )

        document_id = uuid.uuid4()
        locator = build_locator(document_id, filename)
        await self.blob_store.put(locator, data, content_type or mime_type_for(filename))

        document_metadata = dict(metadata or {})
        if content_type:
            document_metadata["content_type"] = content_type

        try:
            document = await document_crud.create(
                self.db,
                id=document_id,
                workspace=workspace,
                name=filename,
                file_type=file_type_of(filename),
                modality=modality,
                byte_size=len(data),
                storage_locator=locator,
                status=DocumentStatus.PENDING,
                metadata_=document_metadata,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self._discard_blob(locator)
            raise

        logger.info(
            f"{__name__}:upload_document - Document accepted",
            extra={
                "document_id": str(document_id),
                "file_name": filename,
                "modality": modality.value,
                "byte_size": len(data),
            },
        )

        if self.queue is not None:
            try:
                self.queue.submit(IngestionJob(document_id, locator, modality.value))
            except asyncio.QueueFull:
                logger.error(f"{__name__}:upload_document - Ingestion queue full, document left pending")
        return document

    async def get_document(self, document_id: UUID) -> DocumentModel:
        """
        Get a document by ID.

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    async def list_documents(
        self,
        workspace: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[DocumentModel]:
        """List documents in a workspace, newest first."""
        return list(await document_crud.get_by_workspace(self.db, workspace, limit=limit, offset=offset))

    async def get_status(self, document_id: UUID) -> dict[str, Any]:
        """
        Ingestion status of a document.

        Returns:
            dict: document_id, status, progress, chunk_count and error
        """
        document = await self.get_document(document_id)
        status = DocumentStatus(document.status)
        return {
            "document_id": document.id,
            "status": status.value,
            "progress": STATUS_PROGRESS[status],
            "chunk_count": document.chunk_count,
            "error": document.error_message,
        }

    async def delete_document(self, document_id: UUID) -> None:
        """
        Delete a document with its chunks, graph contributions and blob.

        Args:
            document_id: Document UUID

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await self.get_document(document_id)
        locator = document.storage_locator

        try:
            cleanup = await remove_document_knowledge(self.db, document.id, document.workspace)
            chunks_deleted = await chunk_crud.delete_by_document(self.db, document.id)
            await document_crud.delete_by_id(self.db, document.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self._discard_blob(locator)
        logger.info(
            f"{__name__}:delete_document - Document deleted",
            extra={
                "document_id": str(document_id),
                "chunks_deleted": chunks_deleted,
                "entities_deleted": cleanup.entities_deleted,
                "relations_deleted": cleanup.relations_deleted,
            },
        )

    async def _discard_blob(self, locator: str) -> None:
        try:
            await self.blob_store.delete(locator)
        except StorageError as e:
            logger.warning(f"{__name__}:_discard_blob - Could not delete {locator}: {e}")
