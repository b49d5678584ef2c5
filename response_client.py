"""Chat completion client producing the assistant's reply."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from config import DEFAULT_BASE_URL
from errors import ResponseFailedError
from policies import Sleep, TimeoutPolicy

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a friendly AI assistant. Respond in English."


class ChatResponseClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout_policy: Optional[TimeoutPolicy] = None,
        warmup_s: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._client = client or httpx.AsyncClient(timeout=None)
        self._timeout_policy = timeout_policy or TimeoutPolicy(timeout_s=10.0)
        self._warmup_s = warmup_s
        self._sleep = sleep

    async def generate(self, transcript: str) -> str:
        """Return the model's reply to ``transcript``.

        The deadline covers the warm-up delay and the request; on expiry the
        in-flight request is cancelled and ``RequestTimeoutError`` is raised.
        Other failures raise ``ResponseFailedError``.
        """
        text = await self._timeout_policy.run(lambda: self._request(transcript))
        logger.info("Response generated", extra={"chars": len(text)})
        return text

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_payload(self, transcript: str) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": transcript},
            ],
        }

    async def _request(self, transcript: str) -> str:
        await self._sleep(self._warmup_s)
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=self.build_payload(transcript),
            )
            response.raise_for_status()
            return str(response.json()["choices"][0]["message"]["content"])
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Chat API error",
                extra={"status": exc.response.status_code, "body": exc.response.text[:200]},
            )
            raise ResponseFailedError(f"HTTP {exc.response.status_code}", cause=exc) from exc
        except httpx.HTTPError as exc:
            logger.exception("Chat request failed")
            raise ResponseFailedError(f"Transport error: {exc}", cause=exc) from exc
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed chat response")
            raise ResponseFailedError("Malformed response", cause=exc) from exc
