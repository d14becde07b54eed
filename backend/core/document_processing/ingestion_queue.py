"""
Bounded ingestion queue.

Upload handlers submit jobs and return immediately; a fixed number of
worker tasks drain the queue and run the orchestrator. Document status is
the only completion signal exposed to callers.

Dependencies: asyncio, sqlalchemy, backend.boundary.db, backend.observability
System role: Background execution of the ingestion pipeline
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.CRUD import document_crud
from backend.boundary.db.models import DocumentStatus
from backend.observability.correlation import clear_correlation_id, set_correlation_id
from backend.observability.log_utils import log_exception_with_context

from .models import IngestionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionJob:
    """One document waiting to be ingested."""

    document_id: UUID
    storage_locator: str
    modality: str | None = None


class Ingestor(Protocol):
    async def ingest(self, document_id: UUID, storage_locator: str, modality: str | None = None) -> IngestionResult:
        ...


def _modality_value(modality) -> str | None:
    return getattr(modality, "value", modality)


class IngestionQueue:
    """asyncio.Queue drained by a fixed pool of worker tasks."""

    def __init__(self, orchestrator: Ingestor, workers: int = 2, max_size: int = 1000) -> None:
        """
        Initialize the queue.

        Args:
            orchestrator: Object whose ingest() processes one job
            workers: Number of concurrent worker tasks
            max_size: Maximum pending jobs
        """
        self._orchestrator = orchestrator
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[IngestionJob] = asyncio.Queue(maxsize=max_size)
        self._workers: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        """Spawn worker tasks. Calling start on a running queue is a no-op."""
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"ingestion-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info(f"{__name__}:start - Started {self._worker_count} ingestion workers")

    def submit(self, job: IngestionJob) -> None:
        """
        Enqueue a job without waiting.

        Raises:
            asyncio.QueueFull: The queue is at capacity
        """
        self._queue.put_nowait(job)
        logger.info(
            f"{__name__}:submit - Job queued",
            extra={"document_id": str(job.document_id), "pending": self._queue.qsize()},
        )

    async def join(self) -> None:
        """Wait until every submitted job has been processed."""
        await self._queue.join()

    async def stop(self, drain: bool = False) -> None:
        """
        Stop the workers.

        Args:
            drain: Wait for queued jobs to finish before cancelling
        """
        if drain and self._workers:
            await self._queue.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info(f"{__name__}:stop - Ingestion workers stopped")

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            set_correlation_id(str(job.document_id))
            try:
                result = await self._orchestrator.ingest(job.document_id, job.storage_locator, job.modality)
                logger.info(
                    f"{__name__}:_worker - Job finished",
                    extra={"worker": index, "document_id": result.document_id, "success": result.success},
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:_worker - Job raised {type(e).__name__}: {e}",
                    e,
                    worker=index,
                    document_id=job.document_id,
                )
            finally:
                clear_correlation_id()
                self._queue.task_done()


async def requeue_pending(
    session_factory: async_sessionmaker[AsyncSession],
    queue: IngestionQueue,
) -> int:
    """
    Submit every PENDING document again.

    Jobs live only in memory, so documents accepted by a previous process
    but never picked up stay pending until this runs at startup. Documents
    left PROCESSING by a stopped process are moved back to PENDING first;
    re-ingestion replaces whatever chunks they already wrote.

    Returns:
        int: Number of documents queued
    """
    async with session_factory() as session:
        interrupted = await document_crud.get_by_status(session, DocumentStatus.PROCESSING)
        for document in interrupted:
            await document_crud.update_status(session, document.id, DocumentStatus.PENDING)
        if interrupted:
            await session.commit()
            logger.warning(
                f"{__name__}:requeue_pending - {len(interrupted)} interrupted documents reset to pending"
            )
        pending = await document_crud.get_by_status(session, DocumentStatus.PENDING)

    queued = 0
    for document in pending:
        try:
            queue.submit(IngestionJob(document.id, document.storage_locator, _modality_value(document.modality)))
        except asyncio.QueueFull:
            logger.warning(
                f"{__name__}:requeue_pending - Queue full, {len(pending) - queued} documents left pending"
            )
            break
        queued += 1

    if queued:
        logger.info(f"{__name__}:requeue_pending - Requeued {queued} pending documents")
    return queued
