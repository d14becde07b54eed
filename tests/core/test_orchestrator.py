"""
Test suite for IngestionOrchestrator.

Runs the whole pipeline against the in-memory database, a temporary local
blob store and the scripted model fakes.

System role: Verification of status transitions and pipeline outcomes
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.boundary.db.CRUD import chunk_crud, document_crud, entity_crud, relation_crud
from backend.boundary.db.models import ChunkType, DocumentStatus, Modality
from backend.core.document_processing.configs import IngestionSettings
from backend.core.document_processing.entrypoint import IngestionOrchestrator, error_message
from backend.core.exceptions import ValidationError

PARAGRAPH = (
    "Acme Corp designs reusable rocket engines in Springfield. "
    "Jane Doe founded the company after a decade at a launch provider. "
)

EXTRACTION_RESPONSE = json.dumps({
    "entities": [
        {"name": "Acme Corp", "type": "ORGANIZATION", "description": "Rocket engine maker"},
        {"name": "Jane Doe", "type": "PERSON", "description": "Founder of Acme Corp"},
    ],
    "relations": [
        {"source": "Jane Doe", "target": "Acme Corp", "type": "founded", "description": "Jane founded Acme"},
    ],
})


@pytest.fixture
def settings() -> IngestionSettings:
    return IngestionSettings(
        chunk_size_tokens=800,
        chunk_overlap_tokens=100,
        enable_entity_extraction=True,
        entity_extraction_concurrency=2,
        min_entity_chunk_chars=50,
        step_timeout_seconds=5.0,
    )


@pytest.fixture
def orchestrator(session_factory, blob_store, fake_content, fake_embeddings, settings):
    return IngestionOrchestrator(
        session_factory,
        blob_store,
        fake_content,
        fake_embeddings,
        settings=settings,
    )


async def _stored_document(make_document, blob_store, name: str, data: bytes, **fields):
    document = await make_document(name, **fields)
    await blob_store.put(document.storage_locator, data)
    return document


async def _reload(session_factory, document_id):
    async with session_factory() as session:
        return await document_crud.get_by_id(session, document_id)


class TestSuccessfulIngestion:
    @pytest.mark.asyncio
    async def test_text_document_is_processed(
        self, orchestrator, make_document, blob_store, session_factory, fake_content
    ) -> None:
        fake_content.text_handler = lambda prompt: EXTRACTION_RESPONSE
        document = await _stored_document(make_document, blob_store, "notes.txt", (PARAGRAPH * 3).encode())

        result = await orchestrator.ingest(document.id, document.storage_locator, Modality.TEXT)

        assert result.success is True
        assert result.error is None
        assert result.chunks_created == 1
        assert result.entities_created == 2
        assert result.relations_created == 1
        assert result.processing_time_ms > 0

        stored = await _reload(session_factory, document.id)
        assert stored.status == DocumentStatus.PROCESSED
        assert stored.chunk_count == 1
        assert stored.error_message is None

        async with session_factory() as session:
            chunks = await chunk_crud.get_by_document(session, document.id)
            entities = await entity_crud.get_by_workspace(session, "default")
            relations = await relation_crud.get_by_workspace(session, "default")
        assert chunks[0].chunk_type == ChunkType.TEXT
        assert chunks[0].embedding is not None
        assert {entity.normalized_name for entity in entities} == {"acme corp", "jane doe"}
        assert entities[0].source_chunk_ids == [str(chunks[0].id)]
        assert relations[0].relation_type == "FOUNDED"

    @pytest.mark.asyncio
    async def test_image_skips_entity_extraction(
        self, orchestrator, make_document, blob_store, session_factory, fake_content
    ) -> None:
        document = await _stored_document(make_document, blob_store, "board.png", b"\x89PNG")

        result = await orchestrator.ingest(document.id, document.storage_locator, "image")

        assert result.success is True
        assert result.chunks_created == 1
        assert fake_content.text_prompts == []
        async with session_factory() as session:
            (chunk,) = await chunk_crud.get_by_document(session, document.id)
        assert chunk.chunk_type == ChunkType.IMAGE
        assert chunk.content == fake_content.describe_response

    @pytest.mark.asyncio
    async def test_reingest_replaces_chunks(
        self, orchestrator, make_document, blob_store, session_factory
    ) -> None:
        document = await _stored_document(make_document, blob_store, "notes.txt", PARAGRAPH.encode())

        await orchestrator.ingest(document.id, document.storage_locator)
        await orchestrator.ingest(document.id, document.storage_locator)

        async with session_factory() as session:
            chunks = await chunk_crud.get_by_document(session, document.id)
        assert [chunk.chunk_order_index for chunk in chunks] == [0]

    @pytest.mark.asyncio
    async def test_entity_failure_keeps_document_processed(
        self, session_factory, blob_store, fake_content, fake_embeddings, settings, make_document
    ) -> None:
        builder = MagicMock()
        builder.build = AsyncMock(side_effect=RuntimeError("graph store offline"))
        orchestrator = IngestionOrchestrator(
            session_factory,
            blob_store,
            fake_content,
            fake_embeddings,
            settings=settings,
            knowledge_graph_builder=builder,
        )
        document = await _stored_document(make_document, blob_store, "notes.txt", PARAGRAPH.encode())

        result = await orchestrator.ingest(document.id, document.storage_locator)

        assert result.success is True
        assert result.entities_created == 0
        assert (await _reload(session_factory, document.id)).status == DocumentStatus.PROCESSED

    @pytest.mark.asyncio
    async def test_extraction_disabled(
        self, session_factory, blob_store, fake_content, fake_embeddings, make_document
    ) -> None:
        orchestrator = IngestionOrchestrator(
            session_factory,
            blob_store,
            fake_content,
            fake_embeddings,
            settings=IngestionSettings(enable_entity_extraction=False),
        )
        document = await _stored_document(make_document, blob_store, "notes.txt", PARAGRAPH.encode())

        result = await orchestrator.ingest(document.id, document.storage_locator)

        assert result.success is True
        assert fake_content.text_prompts == []


class TestFailedIngestion:
    @pytest.mark.asyncio
    async def test_missing_blob_marks_failed(self, orchestrator, make_document, session_factory) -> None:
        document = await make_document("notes.txt")

        result = await orchestrator.ingest(document.id, document.storage_locator)

        assert result.success is False
        assert result.error.startswith("DownloadError: ")
        stored = await _reload(session_factory, document.id)
        assert stored.status == DocumentStatus.FAILED
        assert stored.error_message == result.error

    @pytest.mark.asyncio
    async def test_unsupported_extension_marks_failed(
        self, orchestrator, make_document, blob_store, session_factory
    ) -> None:
        document = await _stored_document(
            make_document, blob_store, "archive.xyz", b"data", modality=Modality.TEXT
        )

        result = await orchestrator.ingest(document.id, document.storage_locator, Modality.TEXT)

        assert result.success is False
        assert result.error.startswith("UnsupportedModalityError: ")
        assert (await _reload(session_factory, document.id)).status == DocumentStatus.FAILED

    @pytest.mark.asyncio
    async def test_blank_text_marks_failed(
        self, orchestrator, make_document, blob_store, session_factory
    ) -> None:
        document = await _stored_document(make_document, blob_store, "empty.txt", b"   \n\n  ")

        result = await orchestrator.ingest(document.id, document.storage_locator)

        assert result.success is False
        assert result.error.startswith("EmptyContentError: ")
        stored = await _reload(session_factory, document.id)
        assert stored.status == DocumentStatus.FAILED
        assert stored.chunk_count == 0

    @pytest.mark.asyncio
    async def test_slow_step_times_out(
        self, session_factory, blob_store, fake_content, fake_embeddings, make_document
    ) -> None:
        async def slow_describe(data, mime_type, prompt):
            await asyncio.sleep(5)
            return "late"

        fake_content.describe = slow_describe
        orchestrator = IngestionOrchestrator(
            session_factory,
            blob_store,
            fake_content,
            fake_embeddings,
            settings=IngestionSettings(step_timeout_seconds=0.05),
        )
        document = await _stored_document(make_document, blob_store, "board.png", b"\x89PNG")

        result = await orchestrator.ingest(document.id, document.storage_locator)

        assert result.success is False
        assert result.error.startswith("IngestionTimeoutError: Step 'extract'")
        assert (await _reload(session_factory, document.id)).status == DocumentStatus.FAILED


class TestErrorMessage:
    def test_application_errors_use_their_message(self) -> None:
        assert error_message(ValidationError("bad input")) == "ValidationError: bad input"

    def test_messageless_errors_use_class_name(self) -> None:
        assert error_message(RuntimeError()) == "RuntimeError"
