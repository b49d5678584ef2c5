"""State-machine based orchestration of one voice interaction cycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from errors import (
    PERMISSION_DENIED,
    PERMISSION_ERROR,
    RECORDING_FAILED,
    RECORDING_START_FAILED,
    RESPONSE_FAILED,
    SPEECH_FAILED,
    TRANSCRIPTION_FAILED,
    AssistantError,
    ConfigurationError,
)
from interfaces import Recorder, ResponseClient, SpeechOutput, TranscriptionClient
from models import InteractionState, Notice
from state_machine import Event, can_handle, transition

logger = logging.getLogger(__name__)

StateCallback = Callable[[InteractionState, InteractionState], None]
NoticeCallback = Callable[[Notice], None]
TextCallback = Callable[[str], None]

PLACEHOLDER_TEXT = "Press the microphone to start recording!"
LOADING_TEXT = "..."


def _code_for(exc: Exception, fallback: str) -> str:
    return exc.code if isinstance(exc, AssistantError) else fallback


class ScreenController:
    """Owns the interaction state and sequences recorder, clients and speech.

    Every public action checks the current state before its first ``await``,
    so a second cycle cannot start while one is in flight. Failures are
    logged, surfaced once through ``on_notice`` and reset the state to IDLE.
    """

    def __init__(
        self,
        recorder: Recorder,
        transcription_client: TranscriptionClient,
        response_client: ResponseClient,
        speech_output: SpeechOutput,
        on_state_change: Optional[StateCallback] = None,
        on_notice: Optional[NoticeCallback] = None,
        on_text: Optional[TextCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._transcription_client = transcription_client
        self._response_client = response_client
        self._speech_output = speech_output
        self._on_state_change = on_state_change
        self._on_notice = on_notice
        self._on_text = on_text

        self._state = InteractionState.IDLE
        self._transcript = ""
        self._response = ""
        self._text = ""
        self._speech_generation = 0

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def response(self) -> str:
        return self._response

    @property
    def display_text(self) -> str:
        if self._state == InteractionState.PROCESSING:
            return LOADING_TEXT
        return self._text or PLACEHOLDER_TEXT

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def press_microphone(self) -> None:
        if not self._accepts(Event.RECORDING_STARTED):
            return
        try:
            self._recorder.ensure_configured()
        except ConfigurationError as exc:
            self._report(exc, exc.code)
            return
        try:
            granted = self._recorder.request_microphone_permission()
        except Exception as exc:
            self._report(exc, _code_for(exc, PERMISSION_ERROR))
            return
        if not granted:
            logger.info("Microphone permission denied")
            self._emit_notice(Notice.for_code(PERMISSION_DENIED))
            return

        try:
            self._recorder.start()
        except ConfigurationError as exc:
            self._report(exc, exc.code)
            return
        except Exception as exc:
            self._report(exc, RECORDING_START_FAILED)
            return
        self._dispatch(Event.RECORDING_STARTED)

    async def press_stop(self) -> None:
        if not self._accepts(Event.STOP_PRESSED):
            return
        self._dispatch(Event.STOP_PRESSED)

        try:
            artifact = self._recorder.stop()
        except Exception as exc:
            self._fail(exc, RECORDING_FAILED)
            return

        try:
            transcript = await self._transcription_client.transcribe(artifact)
        except Exception as exc:
            self._fail(exc, _code_for(exc, TRANSCRIPTION_FAILED))
            return
        if self._state != InteractionState.PROCESSING:
            return

        self._transcript = transcript
        self._set_text(transcript)
        await self._generate_and_speak()

    async def press_regenerate(self) -> None:
        if not self._accepts(Event.REGENERATE_PRESSED):
            return
        self._stop_speech()
        self._dispatch(Event.REGENERATE_PRESSED)
        await self._generate_and_speak()

    def press_replay(self) -> None:
        if not self._accepts(Event.REPLAY_PRESSED):
            return
        self._stop_speech()
        self._dispatch(Event.REPLAY_PRESSED)
        self._dispatch(Event.RESPONSE_RECEIVED)
        self._speak()

    def press_back(self) -> None:
        if not self._accepts(Event.RESET_PRESSED):
            return
        self._stop_speech()
        self._clear()
        self._dispatch(Event.RESET_PRESSED)

    async def shutdown(self) -> None:
        self._recorder.cancel()
        self._stop_speech()
        await self._transcription_client.aclose()
        await self._response_client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _generate_and_speak(self) -> None:
        try:
            response = await self._response_client.generate(self._transcript)
        except Exception as exc:
            self._fail(exc, _code_for(exc, RESPONSE_FAILED))
            return
        if self._state != InteractionState.PROCESSING:
            return

        self._response = response
        self._set_text(response)
        self._dispatch(Event.RESPONSE_RECEIVED)
        self._speak()

    def _speak(self) -> None:
        self._speech_generation += 1
        generation = self._speech_generation
        loop = asyncio.get_running_loop()

        def notify(event: Event) -> None:
            try:
                loop.call_soon_threadsafe(self._handle_speech_event, generation, event)
            except RuntimeError:
                logger.debug("Event loop closed, dropping %s", event.value)

        try:
            self._speech_output.speak(
                self._response,
                on_start=lambda: notify(Event.SPEECH_STARTED),
                on_done=lambda: notify(Event.SPEECH_DONE),
            )
        except Exception as exc:
            # The response stays on screen; only playback is lost.
            self._report(exc, SPEECH_FAILED)

    def _handle_speech_event(self, generation: int, event: Event) -> None:
        if generation != self._speech_generation:
            return
        if can_handle(self._state, event):
            self._dispatch(event)

    def _stop_speech(self) -> None:
        # Late callbacks from the stopped utterance must not move the state.
        self._speech_generation += 1
        try:
            self._speech_output.stop()
        except Exception:
            logger.exception("Failed to stop speech output")

    def _accepts(self, event: Event) -> bool:
        if can_handle(self._state, event):
            return True
        logger.debug("Ignoring %s in state %s", event.value, self._state.value)
        return False

    def _fail(self, exc: Exception, code: str) -> None:
        self._report(exc, code)
        self._clear()
        if can_handle(self._state, Event.FAILED):
            self._dispatch(Event.FAILED)

    def _report(self, exc: Exception, code: str) -> None:
        logger.error(
            "Interaction step failed",
            exc_info=exc,
            extra={"code": code, "state": self._state.value},
        )
        self._emit_notice(Notice.for_code(code))

    def _clear(self) -> None:
        self._transcript = ""
        self._response = ""
        self._set_text("")

    def _set_text(self, text: str) -> None:
        self._text = text
        self._emit_text()

    def _emit_text(self) -> None:
        if self._on_text:
            self._on_text(self.display_text)

    def _emit_notice(self, notice: Notice) -> None:
        if self._on_notice:
            self._on_notice(notice)

    def _dispatch(self, event: Event) -> None:
        from_state = self._state
        to_state = transition(from_state, event)
        if from_state == to_state:
            return
        self._state = to_state
        logger.debug("State %s -> %s on %s", from_state.value, to_state.value, event.value)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
        self._emit_text()
