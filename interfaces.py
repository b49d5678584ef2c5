"""Protocol interfaces used by ScreenController."""

from __future__ import annotations

from typing import Callable, Protocol

from models import AudioArtifact


class Recorder(Protocol):
    def ensure_configured(self) -> None: ...

    def request_microphone_permission(self) -> bool: ...

    def start(self) -> None: ...

    def stop(self) -> AudioArtifact: ...

    def cancel(self) -> None: ...


class TranscriptionClient(Protocol):
    async def transcribe(self, artifact: AudioArtifact) -> str: ...

    async def aclose(self) -> None: ...


class ResponseClient(Protocol):
    async def generate(self, transcript: str) -> str: ...

    async def aclose(self) -> None: ...


class SpeechOutput(Protocol):
    def speak(
        self,
        text: str,
        on_start: Callable[[], None],
        on_done: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...


class ConfigStore(Protocol):
    def get_api_key(self) -> str: ...

    def set_api_key(self, key: str) -> None: ...

    def get_base_url(self) -> str: ...

    def get_transcription_model(self) -> str: ...

    def get_chat_model(self) -> str: ...

    def get_response_timeout_s(self) -> float: ...
