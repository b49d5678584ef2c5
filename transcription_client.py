"""Speech-to-text client for the OpenAI audio transcription endpoint.

The recorded WAV file is uploaded as multipart form data. Rate-limit
responses (HTTP 429) are retried with exponential backoff by a
``RetryPolicy``; every other failure ends the attempt sequence at once.
The audio file is consumed by the upload and removed afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from config import DEFAULT_BASE_URL
from errors import RateLimitedError, TranscriptionFailedError
from models import AudioArtifact
from policies import RetryableError, RetryPolicy, Sleep

logger = logging.getLogger(__name__)

UPLOAD_FILENAME = "recording.wav"


class RateLimitHit(RetryableError):
    """A single 429 answer from the transcription endpoint."""


class WhisperTranscriptionClient:
    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        warmup_s: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = f"{base_url.rstrip('/')}/audio/transcriptions"
        self._client = client or httpx.AsyncClient(timeout=None)
        self._retry_policy = retry_policy or RetryPolicy(
            max_attempts=3,
            retry_on=(RateLimitHit,),
            exhausted=RateLimitedError,
            sleep=sleep,
        )
        self._warmup_s = warmup_s
        self._sleep = sleep
        self.attempts = 0

    async def transcribe(self, artifact: AudioArtifact) -> str:
        """Upload ``artifact`` and return the transcript text.

        Raises:
            RateLimitedError: the endpoint answered 429 on every attempt.
            TranscriptionFailedError: any other HTTP or transport failure.
        """
        self.attempts = 0
        try:
            audio = artifact.path.read_bytes()
        except OSError as exc:
            logger.exception("Failed to read recording", extra={"path": str(artifact.path)})
            raise TranscriptionFailedError("Recording could not be read", cause=exc) from exc

        try:
            await self._sleep(self._warmup_s)
            text = await self._retry_policy.run(lambda: self._upload(audio))
        finally:
            artifact.path.unlink(missing_ok=True)

        logger.info("Transcription completed", extra={"attempts": self.attempts, "chars": len(text)})
        return text

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _upload(self, audio: bytes) -> str:
        self.attempts += 1
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                data={"model": self._model},
                files={"file": (UPLOAD_FILENAME, audio, "audio/wav")},
            )
        except httpx.HTTPError as exc:
            logger.exception("Transcription request failed")
            raise TranscriptionFailedError(f"Transport error: {exc}", cause=exc) from exc

        if response.status_code == 429:
            raise RateLimitHit(f"HTTP 429 on attempt {self.attempts}")
        try:
            response.raise_for_status()
            return str(response.json()["text"])
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Transcription API error",
                extra={"status": response.status_code, "body": response.text[:200]},
            )
            raise TranscriptionFailedError(
                f"HTTP {response.status_code}", cause=exc
            ) from exc
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Malformed transcription response", extra={"body": response.text[:200]})
            raise TranscriptionFailedError("Malformed response", cause=exc) from exc
