"""Main window of the voice assistant."""

from __future__ import annotations

from models import InteractionState

try:
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QHBoxLayout = object  # type: ignore
    QLabel = object  # type: ignore
    QPushButton = object  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore

BUTTON_STYLE = (
    "color: #2b3356; background: white; font-size: 16px;"
    "padding: 10px 18px; border-radius: 18px;"
)


class AssistantWindow(QWidget):
    """Buttons are shown or hidden per interaction state.

    The microphone control only exists in IDLE and the stop control only
    while RECORDING, so the user cannot start a second cycle mid-flight.
    """

    def __init__(self) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowTitle("Voice Assistant")
        self.setMinimumSize(360, 480)
        self.setStyleSheet("background: qlineargradient(x1:0, y1:0, x2:1, y2:1,"
                           " stop:0 #250152, stop:1 #000000);")

        self.back_button = self._button("← Back")
        self.mic_button = self._button("🎙 Speak")
        self.stop_button = self._button("■ Stop")
        self.regenerate_button = self._button("↻ Regenerate")
        self.replay_button = self._button("🔊 Replay")

        self._status = QLabel("")
        self._status.setAlignment(Qt.AlignCenter)
        self._status.setStyleSheet("color: #bbbbff; font-size: 14px;")

        self._label = QLabel("")
        self._label.setWordWrap(True)
        self._label.setAlignment(Qt.AlignCenter)
        self._label.setStyleSheet("color: white; font-size: 16px; padding: 16px;")

        top = QHBoxLayout()
        top.addWidget(self.back_button)
        top.addStretch(1)

        center = QHBoxLayout()
        center.addStretch(1)
        center.addWidget(self.mic_button)
        center.addWidget(self.stop_button)
        center.addStretch(1)

        bottom = QHBoxLayout()
        bottom.addWidget(self.regenerate_button)
        bottom.addStretch(1)
        bottom.addWidget(self.replay_button)

        layout = QVBoxLayout()
        layout.addLayout(top)
        layout.addStretch(1)
        layout.addWidget(self._status)
        layout.addLayout(center)
        layout.addStretch(1)
        layout.addWidget(self._label)
        layout.addLayout(bottom)
        self.setLayout(layout)

        self.render_state(InteractionState.IDLE)

    def set_text(self, text: str) -> None:
        self._label.setText(text)

    def render_state(self, state: InteractionState) -> None:
        has_response = state in (InteractionState.RESPONSE_READY, InteractionState.SPEAKING)
        self.mic_button.setVisible(state == InteractionState.IDLE)
        self.stop_button.setVisible(state == InteractionState.RECORDING)
        self.back_button.setVisible(has_response)
        self.regenerate_button.setVisible(has_response)
        self.replay_button.setVisible(has_response)
        self._status.setText(
            {
                InteractionState.RECORDING: "Listening...",
                InteractionState.PROCESSING: "Thinking...",
                InteractionState.SPEAKING: "Speaking...",
            }.get(state, "")
        )

    def _button(self, text: str) -> QPushButton:
        button = QPushButton(text)
        button.setStyleSheet(BUTTON_STYLE)
        button.setCursor(Qt.PointingHandCursor)
        return button
