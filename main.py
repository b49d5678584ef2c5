"""Application entrypoint."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import Awaitable, Callable

from app_logging import setup_logging
from config import JsonConfigStore
from models import InteractionState, Notice
from policies import TimeoutPolicy
from recorder import SoundDeviceRecorder
from response_client import ChatResponseClient
from screen_controller import ScreenController
from screen_window import AssistantWindow
from speech_output import Pyttsx3SpeechOutput
from transcription_client import WhisperTranscriptionClient

try:
    from PySide6.QtCore import QObject, Signal
    from PySide6.QtWidgets import QApplication, QInputDialog, QMessageBox
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)


class UIBridge(QObject):
    text_signal = Signal(str)
    notice_signal = Signal(str, str)  # title, message
    state_signal = Signal(str, str)  # from_state, to_state


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store = JsonConfigStore()
        self.window = AssistantWindow()
        self.ui = UIBridge()
        self.ui.text_signal.connect(self.window.set_text)
        self.ui.notice_signal.connect(self._on_notice_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)

        # Controller work runs on its own asyncio loop so Qt stays responsive.
        self.loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(target=self._run_loop, daemon=True)

        api_key = self.config_store.get_api_key()
        base_url = self.config_store.get_base_url()
        self.controller = ScreenController(
            recorder=SoundDeviceRecorder(api_key=api_key),
            transcription_client=WhisperTranscriptionClient(
                api_key=api_key,
                model=self.config_store.get_transcription_model(),
                base_url=base_url,
            ),
            response_client=ChatResponseClient(
                api_key=api_key,
                model=self.config_store.get_chat_model(),
                base_url=base_url,
                timeout_policy=TimeoutPolicy(self.config_store.get_response_timeout_s()),
            ),
            speech_output=Pyttsx3SpeechOutput(),
            on_state_change=self._on_state_change,
            on_notice=self._on_notice,
            on_text=self._on_text,
        )

        self.window.mic_button.clicked.connect(lambda: self._call(self.controller.press_microphone))
        self.window.stop_button.clicked.connect(lambda: self._submit(self.controller.press_stop))
        self.window.regenerate_button.clicked.connect(
            lambda: self._submit(self.controller.press_regenerate)
        )
        self.window.replay_button.clicked.connect(lambda: self._call(self.controller.press_replay))
        self.window.back_button.clicked.connect(lambda: self._call(self.controller.press_back))
        self.window.set_text(self.controller.display_text)

        if not api_key:
            self._prompt_api_key()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def _call(self, action: Callable[[], None]) -> None:
        self.loop.call_soon_threadsafe(action)

    def _submit(self, action: Callable[[], Awaitable[None]]) -> None:
        asyncio.run_coroutine_threadsafe(action(), self.loop)

    def _prompt_api_key(self) -> None:
        value, ok = QInputDialog.getText(None, "API Key", "OpenAI API Key")
        if not ok or not value.strip():
            return
        self.config_store.set_api_key(value)
        QMessageBox.information(None, "Saved", "API Key saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # Callbacks (called on the asyncio thread → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: InteractionState, to_state: InteractionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_text(self, text: str) -> None:
        self.ui.text_signal.emit(text)

    def _on_notice(self, notice: Notice) -> None:
        self.ui.notice_signal.emit(notice.title, notice.message)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_notice_ui(self, title: str, message: str) -> None:
        QMessageBox.warning(self.window, title, message)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        self.window.render_state(InteractionState(to_state))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self._loop_thread.start()
        self.app.aboutToQuit.connect(self.quit)
        self.window.show()
        return self.app.exec()

    def quit(self) -> None:
        future = asyncio.run_coroutine_threadsafe(self.controller.shutdown(), self.loop)
        try:
            future.result(timeout=5)
        except Exception:
            logger.exception("Shutdown did not complete cleanly")
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._loop_thread.join(timeout=2)


def main() -> int:
    setup_logging()
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
