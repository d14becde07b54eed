"""
Content-understanding service backed by Google Gemini.

Multimodal calls (images, documents, audio, video) go through the
google-genai SDK: small payloads are sent inline, large ones through the
Files API. Text-only generation (table descriptions, entity extraction)
goes through the LangChain chat model.

Dependencies: google.genai, langchain_google_genai, asyncio
System role: Content-understanding collaborator for the extractors
"""

import asyncio
import io
import logging
import time
from abc import ABC, abstractmethod

from google import genai
from google.genai import types
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from backend.configs.gemini import GeminiSettings
from backend.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class FileHandle(BaseModel):
    """Reference to a file uploaded to the provider."""

    name: str = Field(description="Provider resource name (files/...)")
    uri: str = Field(description="URI passed back in generation requests")
    mime_type: str = Field(description="MIME type declared at upload")


def message_text(content) -> str:
    """Flatten a LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


class ContentService(ABC):
    """Interface consumed by the per-modality extractors."""

    @abstractmethod
    async def describe(self, data: bytes, mime_type: str, prompt: str) -> str:
        """Run `prompt` against inline bytes and return the text response."""

    @abstractmethod
    async def upload_large_file(self, data: bytes, mime_type: str, display_name: str | None = None) -> FileHandle:
        """Upload bytes for use in later describe_file calls."""

    @abstractmethod
    async def describe_file(self, handle: FileHandle, prompt: str) -> str:
        """Run `prompt` against an uploaded file."""

    @abstractmethod
    async def delete_large_file(self, handle: FileHandle) -> None:
        """Delete an uploaded file."""

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """Text-only generation."""


class GeminiContentService(ContentService):
    """Gemini implementation of ContentService."""

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        client: "genai.Client | None" = None,
        chat_model: ChatGoogleGenerativeAI | None = None,
    ) -> None:
        """
        Initialize Gemini content service.

        Args:
            settings: Gemini settings (defaults loaded from environment)
            client: Preconfigured google-genai client
            chat_model: Preconfigured LangChain chat model for text-only prompts
        """
        self._settings = settings or GeminiSettings()
        api_key = self._settings.api_key or None

        logger.debug(f"{__name__}:__init__ - Creating Google Gemini client")
        self._client = client or genai.Client(api_key=api_key)
        self._chat_model = chat_model or ChatGoogleGenerativeAI(
            model=self._settings.model,
            temperature=self._settings.temperature,
            google_api_key=api_key,
        )
        self._config = types.GenerateContentConfig(temperature=self._settings.temperature)

    async def _generate(self, contents: list, operation: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.models.generate_content,
                model=self._settings.model,
                contents=contents,
                config=self._config,
            )
        except Exception as e:
            logger.error(f"{__name__}:{operation} - FAILED at Gemini API call - {type(e).__name__}: {e}")
            raise ExternalServiceError(f"Gemini {operation} failed: {e}", service="gemini") from e
        return (response.text or "").strip()

    async def describe(self, data: bytes, mime_type: str, prompt: str) -> str:
        logger.debug(f"{__name__}:describe - START bytes={len(data)} mime_type={mime_type}")
        return await self._generate(
            [types.Part.from_bytes(data=data, mime_type=mime_type), prompt],
            "describe",
        )

    async def upload_large_file(self, data: bytes, mime_type: str, display_name: str | None = None) -> FileHandle:
        """
        Upload bytes through the Files API and wait until the file is ACTIVE.

        Video and audio files are processed asynchronously by the provider.

        Raises:
            ExternalServiceError: Upload failed, processing failed or timed out
        """
        try:
            uploaded = await asyncio.to_thread(
                self._client.files.upload,
                file=io.BytesIO(data),
                config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )
            deadline = time.monotonic() + self._settings.file_poll_timeout_seconds
            while uploaded.state is not None and uploaded.state.name == "PROCESSING":
                if time.monotonic() > deadline:
                    raise TimeoutError(f"file {uploaded.name} still processing")
                await asyncio.sleep(self._settings.file_poll_interval_seconds)
                uploaded = await asyncio.to_thread(self._client.files.get, name=uploaded.name)
        except ExternalServiceError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:upload_large_file - {type(e).__name__}: {e}")
            raise ExternalServiceError(f"Gemini file upload failed: {e}", service="gemini") from e

        if uploaded.state is not None and uploaded.state.name == "FAILED":
            raise ExternalServiceError(f"Gemini could not process file {uploaded.name}", service="gemini")

        logger.info(
            f"{__name__}:upload_large_file - Uploaded {uploaded.name}",
            extra={"bytes": len(data), "mime_type": mime_type},
        )
        return FileHandle(name=uploaded.name, uri=uploaded.uri, mime_type=mime_type)

    async def describe_file(self, handle: FileHandle, prompt: str) -> str:
        return await self._generate(
            [types.Part.from_uri(file_uri=handle.uri, mime_type=handle.mime_type), prompt],
            "describe_file",
        )

    async def delete_large_file(self, handle: FileHandle) -> None:
        try:
            await asyncio.to_thread(self._client.files.delete, name=handle.name)
        except Exception as e:
            raise ExternalServiceError(f"Gemini file delete failed: {e}", service="gemini") from e

    async def generate_text(self, prompt: str) -> str:
        try:
            response = await self._chat_model.ainvoke(prompt)
        except Exception as e:
            logger.error(f"{__name__}:generate_text - {type(e).__name__}: {e}")
            raise ExternalServiceError(f"Gemini text generation failed: {e}", service="gemini") from e
        return message_text(response.content).strip()
