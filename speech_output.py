"""Text-to-speech output based on pyttsx3."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

try:
    import pyttsx3
except Exception:  # pragma: no cover
    pyttsx3 = None  # type: ignore

logger = logging.getLogger(__name__)


class Pyttsx3SpeechOutput:
    """Speaks text on a worker thread.

    ``speak`` and ``stop`` never wait for the engine. Stopping only signals
    the running utterance; a new worker joins its predecessor before it
    initialises an engine, so two utterances never overlap.
    """

    def __init__(self, rate: Optional[int] = None, join_timeout_s: float = 2.0) -> None:
        self._rate = rate
        self._join_timeout_s = join_timeout_s
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancelled = threading.Event()
        self._engine: Any = None

    @property
    def is_speaking(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def speak(
        self,
        text: str,
        on_start: Callable[[], None],
        on_done: Callable[[], None],
    ) -> None:
        if pyttsx3 is None:
            raise RuntimeError("pyttsx3 is not installed")
        self.stop()
        cancelled = threading.Event()
        with self._lock:
            previous = self._thread
            thread = threading.Thread(
                target=self._worker,
                args=(text, on_start, on_done, previous, cancelled),
                daemon=True,
            )
            self._thread = thread
            self._cancelled = cancelled
        thread.start()

    def stop(self) -> None:
        with self._lock:
            self._cancelled.set()
            engine = self._engine
        if engine is not None:
            try:
                engine.stop()
            except Exception:
                logger.exception("Failed to stop speech engine")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the current worker to exit."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _worker(
        self,
        text: str,
        on_start: Callable[[], None],
        on_done: Callable[[], None],
        previous: Optional[threading.Thread],
        cancelled: threading.Event,
    ) -> None:
        if previous is not None:
            previous.join(timeout=self._join_timeout_s)
            if previous.is_alive():
                logger.warning("Previous utterance still running")
        if cancelled.is_set():
            return

        engine = None
        try:
            engine = pyttsx3.init()
            if self._rate:
                engine.setProperty("rate", self._rate)
            with self._lock:
                if cancelled.is_set():
                    return
                self._engine = engine
            on_start()
        except Exception:
            logger.exception("Speech engine failed to start")
            return

        try:
            if not cancelled.is_set():
                engine.say(text)
                engine.runAndWait()
        except Exception:
            logger.exception("Speech synthesis failed")
        finally:
            with self._lock:
                if self._engine is engine:
                    self._engine = None
            on_done()
