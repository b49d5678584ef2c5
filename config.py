"""Simple JSON-based config store."""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_BASE_URL = "https://api.openai.com/v1"
API_KEY_ENV = "OPENAI_API_KEY"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "voice_assistant" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_api_key(self) -> str:
        env_key = os.getenv(API_KEY_ENV, "").strip()
        if env_key:
            return env_key
        data = self._read_all()
        return str(data.get("api_key", "")).strip()

    def set_api_key(self, key: str) -> None:
        data = self._read_all()
        data["api_key"] = key.strip()
        self._write_all(data)

    def get_base_url(self) -> str:
        data = self._read_all()
        return str(data.get("base_url", DEFAULT_BASE_URL)).rstrip("/")

    def get_transcription_model(self) -> str:
        data = self._read_all()
        return str(data.get("transcription_model", "whisper-1"))

    def get_chat_model(self) -> str:
        data = self._read_all()
        return str(data.get("chat_model", "gpt-4"))

    def get_response_timeout_s(self) -> float:
        data = self._read_all()
        try:
            return float(data.get("response_timeout_s", 10.0))
        except (TypeError, ValueError):
            return 10.0

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
