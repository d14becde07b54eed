"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite engine and session factory, deterministic fake
embedding and content services, local blob store, sample rows.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import math
import uuid
import zlib
from typing import Callable, Sequence

import numpy as np
import pytest

from backend.boundary.db.base import EMBEDDING_DIMENSION
from backend.boundary.llm import ContentService, FileHandle


class FakeEmbeddingService:
    """
    Deterministic stand-in for EmbeddingService.

    Registered texts map to fixed vectors; anything else gets a unit vector
    seeded from the text's CRC32 so equal texts always embed equally.
    """

    def __init__(self, dimension: int = EMBEDDING_DIMENSION) -> None:
        self.dimension = dimension
        self.vectors: dict[str, list[float]] = {}
        self.failing: set[str] = set()
        self.query_calls: list[str] = []

    def axis(self, index: int) -> list[float]:
        vector = [0.0] * self.dimension
        vector[index] = 1.0
        return vector

    def at_similarity(self, similarity: float, along: int = 0, away: int = 1) -> list[float]:
        """Unit vector whose cosine with axis(along) equals `similarity`."""
        vector = [0.0] * self.dimension
        vector[along] = similarity
        vector[away] = math.sqrt(max(0.0, 1.0 - similarity ** 2))
        return vector

    def register(self, text: str, vector: Sequence[float]) -> None:
        self.vectors[text] = list(vector)

    def _vector(self, text: str) -> list[float]:
        if text in self.vectors:
            return self.vectors[text]
        rng = np.random.default_rng(zlib.crc32(text.encode("utf-8")))
        raw = rng.normal(size=self.dimension)
        return (raw / np.linalg.norm(raw)).tolist()

    async def embed(self, text: str) -> list[float] | None:
        if not text or not text.strip() or text in self.failing:
            return None
        return self._vector(text)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float] | None]:
        return [await self.embed(text) for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return self._vector(text)


class FakeContentService(ContentService):
    """
    Scripted ContentService.

    `file_responses` and `text_responses` are consumed in order; an
    Exception instance in either list is raised instead of returned. When a
    list runs dry the matching default (or handler) is used.
    """

    def __init__(self) -> None:
        self.describe_response = "A photo of a whiteboard."
        self.file_responses: list = []
        self.default_file_response = ""
        self.text_responses: list = []
        self.text_handler: Callable[[str], str] | None = None
        self.upload_error: Exception | None = None
        self.uploaded: list[FileHandle] = []
        self.deleted: list[FileHandle] = []
        self.file_prompts: list[str] = []
        self.text_prompts: list[str] = []

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def describe(self, data: bytes, mime_type: str, prompt: str) -> str:
        return self._resolve(self.describe_response)

    async def upload_large_file(self, data: bytes, mime_type: str, display_name: str | None = None) -> FileHandle:
        if self.upload_error is not None:
            raise self.upload_error
        handle = FileHandle(
            name=f"files/{len(self.uploaded)}",
            uri=f"https://files.example/{len(self.uploaded)}",
            mime_type=mime_type,
        )
        self.uploaded.append(handle)
        return handle

    async def describe_file(self, handle: FileHandle, prompt: str) -> str:
        self.file_prompts.append(prompt)
        if self.file_responses:
            return self._resolve(self.file_responses.pop(0))
        return self.default_file_response

    async def delete_large_file(self, handle: FileHandle) -> None:
        self.deleted.append(handle)

    async def generate_text(self, prompt: str) -> str:
        self.text_prompts.append(prompt)
        if self.text_responses:
            return self._resolve(self.text_responses.pop(0))
        if self.text_handler is not None:
            return self.text_handler(prompt)
        return ""


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from backend.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Async session on the in-memory database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def fake_content() -> FakeContentService:
    return FakeContentService()


@pytest.fixture
def blob_store(tmp_path):
    """Local blob store rooted in a temporary directory."""
    from backend.boundary.storage import LocalBlobStore

    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def make_document(session_factory):
    """
    Factory inserting a committed document row.

    Returns:
        Callable: async (name, workspace="default", **fields) -> DocumentModel
    """
    from backend.boundary.db.CRUD import document_crud
    from backend.boundary.db.models import DocumentStatus
    from backend.core.document_processing.modality import file_type_of, resolve_modality

    async def _make(name: str, workspace: str = "default", **fields):
        document_id = fields.pop("id", uuid.uuid4())
        values = {
            "id": document_id,
            "workspace": workspace,
            "name": name,
            "file_type": file_type_of(name),
            "modality": fields.pop("modality", None) or resolve_modality(name),
            "byte_size": 10,
            "storage_locator": f"uploads/{document_id}/{name}",
            "status": DocumentStatus.PENDING,
            "metadata_": {},
        }
        values.update(fields)
        async with session_factory() as session:
            document = await document_crud.create(session, **values)
            await session.commit()
        return document

    return _make


@pytest.fixture
def document_id() -> uuid.UUID:
    """Generate a test document ID."""
    return uuid.uuid4()
