"""Microphone recorder adapter."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import wave
from pathlib import Path
from typing import Any

from errors import (
    ConfigurationError,
    PermissionRequestError,
    RECORDING_START_FAILED,
    RecordingError,
)
from models import SAMPLE_RATE, AudioArtifact, RecordingSession

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDeviceRecorder:
    def __init__(
        self,
        api_key: str,
        sample_rate: int = SAMPLE_RATE,
        channels: int = 1,
        output_dir: Path | None = None,
    ) -> None:
        self._api_key = api_key
        self.sample_rate = sample_rate
        self.channels = channels
        self._output_dir = output_dir
        self._lock = threading.Lock()
        self._session = RecordingSession()

    @property
    def is_active(self) -> bool:
        return self._session.active

    def ensure_configured(self) -> None:
        if not self._api_key:
            raise ConfigurationError("No API key configured")

    def request_microphone_permission(self) -> bool:
        """Return True when a usable input device is available."""
        if sd is None:
            raise PermissionRequestError("sounddevice is not installed")
        try:
            device = sd.query_devices(kind="input")
        except sd.PortAudioError as exc:
            logger.warning("No microphone available", extra={"error": str(exc)})
            granted = False
        except Exception as exc:
            logger.exception("Microphone permission error")
            raise PermissionRequestError("Failed to query input device", cause=exc) from exc
        else:
            granted = int(device.get("max_input_channels", 0)) > 0
        with self._lock:
            self._session.permission_granted = granted
        return granted

    def start(self) -> None:
        self.ensure_configured()
        with self._lock:
            if not self._session.permission_granted:
                raise RecordingError(
                    "Microphone permission has not been granted", code=RECORDING_START_FAILED
                )
            if self._session.active:
                raise RecordingError("A recording is already active", code=RECORDING_START_FAILED)
            if sd is None:
                raise RecordingError("sounddevice is not installed", code=RECORDING_START_FAILED)

            session = RecordingSession(permission_granted=True, active=True)
            self._session = session
            try:
                session.stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="int16",
                    callback=self._on_audio,
                )
                session.stream.start()
            except Exception as exc:
                session.active = False
                self._close_stream(session.stream)
                session.stream = None
                raise RecordingError(
                    "Failed to open input stream", cause=exc, code=RECORDING_START_FAILED
                ) from exc
            logger.info("Recording started", extra={"sample_rate": self.sample_rate})

    def stop(self) -> AudioArtifact:
        with self._lock:
            session = self._session
            if not session.active:
                raise RecordingError("No active recording session")
            session.active = False
            self._session = RecordingSession(permission_granted=session.permission_granted)
            try:
                session.stream.stop()
            except Exception as exc:
                raise RecordingError("Failed to stop input stream", cause=exc) from exc
            finally:
                self._close_stream(session.stream)

        pcm = b"".join(session.chunks)
        if not pcm:
            raise RecordingError("No audio was captured")
        artifact = self._write_wav(pcm)
        logger.info("Recording stopped", extra={"bytes": len(pcm)})
        return artifact

    def cancel(self) -> None:
        with self._lock:
            session = self._session
            if not session.active:
                return
            session.active = False
            self._session = RecordingSession(permission_granted=session.permission_granted)
            self._close_stream(session.stream)
        logger.info("Recording cancelled")

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        session = self._session
        if not session.active or np is None:
            return
        if status:
            logger.debug("Input stream status", extra={"status": str(status)})
        session.chunks.append(np.asarray(indata, dtype=np.int16).tobytes())

    def _write_wav(self, pcm: bytes) -> AudioArtifact:
        fd, name = tempfile.mkstemp(prefix="recording-", suffix=".wav", dir=self._output_dir)
        os.close(fd)
        path = Path(name)
        try:
            with wave.open(str(path), "wb") as wf:
                wf.setnchannels(self.channels)
                wf.setsampwidth(2)
                wf.setframerate(self.sample_rate)
                wf.writeframes(pcm)
        except (OSError, wave.Error) as exc:
            path.unlink(missing_ok=True)
            raise RecordingError("Failed to write recording", cause=exc) from exc
        return AudioArtifact(path=path, sample_rate=self.sample_rate, channels=self.channels)

    @staticmethod
    def _close_stream(stream: Any) -> None:
        if stream is None:
            return
        try:
            stream.close()
        except Exception:
            logger.exception("Failed to close input stream")
