"""
Embedding service.

Attaches fixed-dimension vectors to chunk, entity and relation text.
Document-side embedding is best-effort: a failed or malformed vector
becomes None and the caller persists the record without one. Query
embedding failures raise, since retrieval cannot proceed without them.

Dependencies: langchain_google_genai, asyncio
System role: Embedding Enricher used by ingestion, entity extraction and retrieval
"""

import asyncio
import logging
from typing import Sequence

from langchain_core.embeddings import Embeddings

from backend.boundary.llm.embeddings_wrapper import FixedDimensionEmbeddings
from backend.configs.gemini import GeminiSettings
from backend.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Batch and single-text embedding with per-item failure isolation."""

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        settings: GeminiSettings | None = None,
    ) -> None:
        """
        Initialize embedding service.

        Args:
            embeddings: LangChain Embeddings implementation (built from settings if None)
            settings: Gemini settings (defaults loaded from environment)
        """
        self._settings = settings or GeminiSettings()
        self._dimension = self._settings.embedding_dimension
        self._batch_size = self._settings.embedding_batch_size
        if embeddings is None:
            embeddings = FixedDimensionEmbeddings(
                model=self._settings.embedding_model,
                output_dimensionality=self._dimension,
                google_api_key=self._settings.api_key or None,
            )
        self._embeddings = embeddings

    @property
    def dimension(self) -> int:
        return self._dimension

    def _valid(self, vector: Sequence[float] | None) -> list[float] | None:
        if vector is None or len(vector) != self._dimension:
            if vector is not None:
                logger.warning(
                    f"{__name__}:_valid - Dropping vector with dimension {len(vector)}, "
                    f"expected {self._dimension}"
                )
            return None
        return [float(v) for v in vector]

    async def embed(self, text: str) -> list[float] | None:
        """
        Embed one document-side text.

        Returns:
            Vector, or None when the text is blank or the call fails
        """
        if not text or not text.strip():
            return None
        try:
            vectors = await asyncio.to_thread(self._embeddings.embed_documents, [text])
        except Exception as e:
            logger.warning(f"{__name__}:embed - {type(e).__name__}: {e}")
            return None
        return self._valid(vectors[0] if vectors else None)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float] | None]:
        """
        Embed many texts, batching calls.

        A failed batch is retried one text at a time so a single bad input
        only loses its own vector.

        Args:
            texts: Texts to embed

        Returns:
            One vector or None per input, in input order
        """
        results: list[list[float] | None] = [None] * len(texts)

        for start in range(0, len(texts), self._batch_size):
            indices = [
                i for i in range(start, min(start + self._batch_size, len(texts)))
                if texts[i] and texts[i].strip()
            ]
            if not indices:
                continue
            batch = [texts[i] for i in indices]
            try:
                vectors = await asyncio.to_thread(self._embeddings.embed_documents, batch)
                if len(vectors) != len(batch):
                    raise ValueError(f"expected {len(batch)} vectors, got {len(vectors)}")
                for i, vector in zip(indices, vectors):
                    results[i] = self._valid(vector)
            except Exception as e:
                logger.warning(
                    f"{__name__}:embed_batch - Batch at {start} failed, retrying per item - "
                    f"{type(e).__name__}: {e}"
                )
                for i in indices:
                    results[i] = await self.embed(texts[i])

        missing = sum(1 for i, t in enumerate(texts) if results[i] is None and t and t.strip())
        if missing:
            logger.warning(f"{__name__}:embed_batch - {missing}/{len(texts)} texts left without embedding")
        return results

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a retrieval query.

        Raises:
            ExternalServiceError: When the provider call fails or returns a bad vector
        """
        try:
            vector = await asyncio.to_thread(self._embeddings.embed_query, text)
        except Exception as e:
            raise ExternalServiceError(
                f"Query embedding failed: {e}", service="embedding"
            ) from e
        valid = self._valid(vector)
        if valid is None:
            raise ExternalServiceError("Query embedding has wrong dimension", service="embedding")
        return valid
