"""Pure transition table for the interaction state."""

from __future__ import annotations

from enum import Enum

from models import InteractionState

S = InteractionState


class Event(str, Enum):
    RECORDING_STARTED = "recording_started"
    STOP_PRESSED = "stop_pressed"
    RESPONSE_RECEIVED = "response_received"
    FAILED = "failed"
    SPEECH_STARTED = "speech_started"
    SPEECH_DONE = "speech_done"
    RESET_PRESSED = "reset_pressed"
    REGENERATE_PRESSED = "regenerate_pressed"
    REPLAY_PRESSED = "replay_pressed"


class InvalidTransitionError(Exception):
    def __init__(self, state: InteractionState, event: Event):
        self.state = state
        self.event = event
        super().__init__(f"Event {event.value} is not valid in state {state.value}")


TRANSITIONS: dict[tuple[InteractionState, Event], InteractionState] = {
    (S.IDLE, Event.RECORDING_STARTED): S.RECORDING,
    (S.RECORDING, Event.STOP_PRESSED): S.PROCESSING,
    (S.RECORDING, Event.FAILED): S.IDLE,
    (S.PROCESSING, Event.RESPONSE_RECEIVED): S.RESPONSE_READY,
    (S.PROCESSING, Event.FAILED): S.IDLE,
    (S.RESPONSE_READY, Event.SPEECH_STARTED): S.SPEAKING,
    (S.SPEAKING, Event.SPEECH_DONE): S.RESPONSE_READY,
    (S.RESPONSE_READY, Event.RESET_PRESSED): S.IDLE,
    (S.RESPONSE_READY, Event.REGENERATE_PRESSED): S.PROCESSING,
    (S.RESPONSE_READY, Event.REPLAY_PRESSED): S.PROCESSING,
    (S.SPEAKING, Event.RESET_PRESSED): S.IDLE,
    (S.SPEAKING, Event.REGENERATE_PRESSED): S.PROCESSING,
    (S.SPEAKING, Event.REPLAY_PRESSED): S.PROCESSING,
}


def can_handle(state: InteractionState, event: Event) -> bool:
    return (state, event) in TRANSITIONS


def transition(state: InteractionState, event: Event) -> InteractionState:
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(state, event) from None
