"""Shared error codes, user-facing notices and exceptions."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
PERMISSION_ERROR = "PERMISSION_ERROR"
CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
RECORDING_START_FAILED = "RECORDING_START_FAILED"
RECORDING_FAILED = "RECORDING_FAILED"
RATE_LIMITED = "RATE_LIMITED"
TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"
TIMEOUT = "TIMEOUT"
RESPONSE_FAILED = "RESPONSE_FAILED"
SPEECH_FAILED = "SPEECH_FAILED"

# code -> (title, message)
NOTICES = {
    PERMISSION_DENIED: ("Permission", "Please grant permission to access the microphone."),
    PERMISSION_ERROR: ("Error", "Failed to get microphone permission."),
    CONFIGURATION_MISSING: ("Configuration Error", "OpenAI API Key is missing."),
    RECORDING_START_FAILED: ("Error", "Failed to start recording."),
    RECORDING_FAILED: ("Error", "Failed to process recording."),
    RATE_LIMITED: (
        "Rate Limit Reached",
        "Too many requests. Please wait a moment and try again.",
    ),
    TRANSCRIPTION_FAILED: ("Error", "Failed to transcribe audio."),
    TIMEOUT: ("Timeout", "The server took too long to respond."),
    RESPONSE_FAILED: ("Error", "Failed to get AI response."),
    SPEECH_FAILED: ("Error", "Failed to play the response."),
}


class AssistantError(Exception):
    """Base class for failures that end the current interaction cycle."""

    code = RESPONSE_FAILED

    def __init__(self, message: str, cause: Exception | None = None, code: str | None = None):
        if code is not None:
            self.code = code
        self.cause = cause
        super().__init__(message)


class PermissionRequestError(AssistantError):
    """Raised when the microphone permission query itself fails."""

    code = PERMISSION_ERROR


class ConfigurationError(AssistantError):
    """Raised when no API credential is configured."""

    code = CONFIGURATION_MISSING


class RecordingError(AssistantError):
    """Raised when audio capture cannot be started or finalized."""

    code = RECORDING_FAILED


class RateLimitedError(AssistantError):
    """Raised when the transcription endpoint keeps answering 429."""

    code = RATE_LIMITED

    def __init__(self, attempts: int, cause: Exception | None = None):
        self.attempts = attempts
        super().__init__(f"Rate limited after {attempts} attempt(s)", cause)


class TranscriptionFailedError(AssistantError):
    """Raised when transcription fails for any reason other than rate limiting."""

    code = TRANSCRIPTION_FAILED


class RequestTimeoutError(AssistantError):
    """Raised when response generation exceeds its deadline."""

    code = TIMEOUT

    def __init__(self, timeout_s: float, cause: Exception | None = None):
        self.timeout_s = timeout_s
        super().__init__(f"No response within {timeout_s:g}s", cause)


class ResponseFailedError(AssistantError):
    """Raised when the chat completion request fails."""

    code = RESPONSE_FAILED
