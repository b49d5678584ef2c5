"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from errors import NOTICES

SAMPLE_RATE = 44100


class InteractionState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    PROCESSING = "PROCESSING"
    RESPONSE_READY = "RESPONSE_READY"
    SPEAKING = "SPEAKING"


@dataclass
class RecordingSession:
    stream: Any = None
    permission_granted: bool = False
    active: bool = False
    chunks: list[bytes] = field(default_factory=list)


@dataclass(frozen=True)
class AudioArtifact:
    path: Path
    sample_rate: int = SAMPLE_RATE
    channels: int = 1


@dataclass(frozen=True)
class Notice:
    code: str
    title: str
    message: str

    @classmethod
    def for_code(cls, code: str) -> "Notice":
        title, message = NOTICES[code]
        return cls(code=code, title=title, message=message)
