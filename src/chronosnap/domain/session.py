"""Session state and its pure transitions."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from chronosnap.domain.images import ImagePayload
from chronosnap.errors import InvalidTransitionError

DEFAULT_BUSY_MESSAGE = "Initializing..."


class SessionMode(Enum):
    """Top-level modes of a capture session."""

    CAPTURING = "capturing"
    PREVIEWING = "previewing"


@dataclass(frozen=True)
class AnalysisResult:
    """Scene analysis text returned by the model."""

    text: str
    produced_at: datetime


@dataclass(frozen=True)
class SessionState:
    """Snapshot of everything a session holds."""

    mode: SessionMode = SessionMode.CAPTURING
    original_image: ImagePayload | None = None
    current_result_image: ImagePayload | None = None
    current_analysis: AnalysisResult | None = None
    pending_instruction: str = ""
    is_busy: bool = False
    busy_message: str = DEFAULT_BUSY_MESSAGE

    @property
    def display_image(self) -> ImagePayload | None:
        """Image currently shown to the user."""
        return self.current_result_image or self.original_image

    @property
    def timeline(self) -> str:
        """Label telling whether the shown image was altered."""
        return "ALTERED" if self.current_result_image else "ORIGINAL"


def initial_state() -> SessionState:
    """Return a fresh session waiting for a capture."""
    return SessionState()


def capture(state: SessionState, payload: ImagePayload) -> SessionState:
    """Store a captured image and move to previewing."""
    if state.mode is not SessionMode.CAPTURING:
        raise InvalidTransitionError("An image was already captured")
    return replace(
        state,
        mode=SessionMode.PREVIEWING,
        original_image=payload,
        current_result_image=None,
        current_analysis=None,
    )


def require_previewing(state: SessionState) -> ImagePayload:
    """Return the original image, raising unless the session is previewing."""
    if state.mode is not SessionMode.PREVIEWING or state.original_image is None:
        raise InvalidTransitionError("Capture an image first")
    return state.original_image


def begin_request(state: SessionState, message: str) -> SessionState:
    """Mark a remote call as in flight."""
    return replace(state, is_busy=True, busy_message=message)


def finish_request(state: SessionState) -> SessionState:
    """Clear the in-flight marker."""
    return replace(state, is_busy=False)


def with_result_image(state: SessionState, payload: ImagePayload) -> SessionState:
    return replace(state, current_result_image=payload)


def with_analysis(state: SessionState, analysis: AnalysisResult) -> SessionState:
    return replace(state, current_analysis=analysis)


def with_pending_instruction(state: SessionState, text: str) -> SessionState:
    return replace(state, pending_instruction=text)


def effective_source(state: SessionState) -> ImagePayload:
    """Return the image the next edit or analysis should start from."""
    original = require_previewing(state)
    return state.current_result_image or original
