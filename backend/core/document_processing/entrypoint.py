"""
Ingestion orchestrator.

Coordinates download, extraction, chunking, embedding, persistence and
entity extraction for one document, and records its status transitions.

Dependencies: All task modules, configs, backend.boundary
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.models import Modality
from backend.boundary.llm import ContentService, EmbeddingService
from backend.boundary.storage import BlobStore
from backend.core.exceptions import (
    EmptyContentError,
    EntityExtractionError,
    IngestionTimeoutError,
    RAGException,
)
from backend.core.knowledge_graph import EntityExtractor, KnowledgeGraphBuilder
from backend.observability.log_utils import log_exception_with_context, log_with_context

from .configs import IngestionSettings, get_ingestion_settings
from .database.document_status_updater import DocumentStatusUpdater
from .models import IngestionResult
from .tasks import (
    ChunkingTask,
    DownloadTask,
    EmbeddingTask,
    EntityExtractionTask,
    ExtractionTask,
    SavingTask,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def error_message(exc: BaseException) -> str:
    """Non-empty, human-readable failure message for the document row."""
    message = exc.message if isinstance(exc, RAGException) else str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


class IngestionOrchestrator:
    """Orchestrate document ingestion: download -> extract -> chunk -> embed -> save -> entities."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_store: BlobStore,
        content_service: ContentService | None,
        embedding_service: EmbeddingService,
        settings: IngestionSettings | None = None,
        knowledge_graph_builder: KnowledgeGraphBuilder | None = None,
    ) -> None:
        """
        Initialize orchestrator with its collaborators.

        Args:
            session_factory: Opens database sessions
            blob_store: Source of document bytes
            content_service: Multimodal model service (None disables model-backed extractors)
            embedding_service: Vector generation
            settings: Pipeline settings (uses defaults if None)
            knowledge_graph_builder: Overrides the default entity pipeline
        """
        self._settings = settings or get_ingestion_settings()
        self._session_factory = session_factory
        self._status = DocumentStatusUpdater(session_factory)

        self._download_task = DownloadTask(blob_store)
        self._extraction_task = ExtractionTask(content_service, self._settings)
        self._chunking_task = ChunkingTask(
            chunk_size=self._settings.chunk_size_tokens,
            chunk_overlap=self._settings.chunk_overlap_tokens,
        )
        self._embedding_task = EmbeddingTask(embedding_service)
        self._saving_task = SavingTask(batch_size=self._settings.chunk_insert_batch_size)

        if knowledge_graph_builder is None and content_service is not None:
            knowledge_graph_builder = KnowledgeGraphBuilder(
                EntityExtractor(
                    content_service,
                    concurrency=self._settings.entity_extraction_concurrency,
                    min_chunk_chars=self._settings.min_entity_chunk_chars,
                ),
                embedding_service,
            )
        self._entity_task = EntityExtractionTask(knowledge_graph_builder) if knowledge_graph_builder else None

    async def _run_step(self, step: str, awaitable: Awaitable[T], document_id: UUID) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._settings.step_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise IngestionTimeoutError(step, self._settings.step_timeout_seconds, str(document_id)) from e

    async def ingest(
        self,
        document_id: UUID,
        storage_locator: str,
        modality: Modality | str | None = None,
    ) -> IngestionResult:
        """
        Process one document through the full pipeline.

        Failures before the document reaches PROCESSED mark it FAILED and are
        reported in the result rather than raised. Entity extraction failures
        are logged and leave the document PROCESSED.

        Args:
            document_id: Document UUID (row must exist)
            storage_locator: Blob key of the original bytes
            modality: Modality recorded at upload

        Returns:
            IngestionResult: Outcome with counts and timing
        """
        start_time = time.perf_counter()
        doc_id = str(document_id)

        def elapsed_ms() -> float:
            return (time.perf_counter() - start_time) * 1000

        logger.info(
            f"{__name__}:ingest - START",
            extra={"document_id": doc_id, "locator": storage_locator},
        )

        try:
            document = await self._status.mark_processing(document_id)
            workspace = document.workspace
            filename = document.name or Path(storage_locator).name

            data = await self._run_step("download", self._download_task.download(storage_locator), document_id)
            items = await self._run_step(
                "extract",
                self._extraction_task.extract(data, filename, modality, dict(document.metadata_ or {})),
                document_id,
            )
            chunks = self._chunking_task.chunk(items)
            if not chunks:
                raise EmptyContentError("No content could be extracted from the document", doc_id)

            chunks = await self._run_step("embed", self._embedding_task.embed(chunks), document_id)

            async with self._session_factory() as session:
                saved = await self._run_step(
                    "save",
                    self._saving_task.save(session, document_id, workspace, chunks),
                    document_id,
                )
                await session.commit()

            await self._status.mark_processed(document_id, len(saved))
        except Exception as e:
            message = error_message(e)
            log_exception_with_context(
                logger,
                f"{__name__}:ingest - FAILED - {message}",
                e,
                document_id=doc_id,
                locator=storage_locator,
            )
            await self._status.mark_failed(document_id, message)
            return IngestionResult(
                success=False,
                document_id=doc_id,
                error=message,
                processing_time_ms=elapsed_ms(),
            )

        result = IngestionResult(
            success=True,
            document_id=doc_id,
            chunks_created=len(saved),
        )

        if self._settings.enable_entity_extraction and self._entity_task is not None and saved:
            try:
                async with self._session_factory() as session:
                    graph = await self._run_step(
                        "entities",
                        self._entity_task.run(session, workspace, saved),
                        document_id,
                    )
                result.entities_created = graph.entities_total
                result.relations_created = graph.relations_total
            except (EntityExtractionError, IngestionTimeoutError) as e:
                log_with_context(
                    logger,
                    logging.WARNING,
                    f"{__name__}:ingest - Entity extraction failed, document stays processed",
                    document_id=doc_id,
                    error=str(e),
                )

        result.processing_time_ms = elapsed_ms()
        logger.info(
            f"{__name__}:ingest - COMPLETE",
            extra={
                "document_id": doc_id,
                "chunks": result.chunks_created,
                "entities": result.entities_created,
                "relations": result.relations_created,
                "elapsed_ms": round(result.processing_time_ms, 1),
            },
        )
        return result
