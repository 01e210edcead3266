"""Session controller mediating captures, transforms and analysis."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from chronosnap.domain import session as transitions
from chronosnap.domain.eras import TransformPreset
from chronosnap.domain.images import ImagePayload
from chronosnap.domain.session import AnalysisResult, SessionState
from chronosnap.errors import (
    AnalysisFailedError,
    DeviceUnavailableError,
    TransformFailedError,
)
from chronosnap.services.capture import ImageSourceAdapter
from chronosnap.services.transform import TransformService

logger = logging.getLogger(__name__)

TIME_TRAVEL_FAILED = "Time travel malfunction! Please try again."
MAGIC_EDIT_FAILED = "Spell fizzled. Try a different command."
ANALYSIS_FAILED = "Analysis failed."


@dataclass(frozen=True)
class SessionNotice:
    """One-shot message about a failed operation."""

    operation: str
    text: str


@dataclass
class SessionController:
    """Sole owner of the session state.

    At most one remote call runs at a time. Requests arriving while the
    session is busy are ignored. A reset during a call bumps the epoch so the
    late result is dropped instead of landing in the new session.
    """

    transform_service: TransformService
    image_source: ImageSourceAdapter | None = None
    _state: SessionState = field(
        default_factory=transitions.initial_state, init=False, repr=False
    )
    _epoch: int = field(default=0, init=False, repr=False)

    @property
    def state(self) -> SessionState:
        return self._state

    def on_image_captured(self, payload: ImagePayload) -> SessionState:
        """Store a freshly captured image and switch to previewing."""
        self._state = transitions.capture(self._state, payload)
        logger.info("Image captured", extra={"mime_type": payload.mime_type})
        return self._state

    def on_reset(self) -> SessionState:
        """Discard all images and analysis and start a new capture."""
        self._epoch += 1
        self._state = transitions.initial_state()
        if self.image_source is not None:
            try:
                self.image_source.restart()
            except DeviceUnavailableError:
                logger.warning("Camera restart failed after reset")
        return self._state

    def set_pending_instruction(self, text: str) -> SessionState:
        self._state = transitions.with_pending_instruction(self._state, text)
        return self._state

    async def on_preset_selected(self, preset: TransformPreset) -> SessionNotice | None:
        """Send the original image to a time travel destination."""
        source = transitions.require_previewing(self._state)
        if self._state.is_busy:
            logger.info("Ignoring preset while busy", extra={"era": preset.id})
            return None
        return await self._run(
            f"Traveling to {preset.label}...",
            self.transform_service.transform(source, preset.instruction),
            on_success=transitions.with_result_image,
            failure=TransformFailedError,
            notice=SessionNotice("time_travel", TIME_TRAVEL_FAILED),
        )

    async def on_freeform_edit_requested(
        self, text: str | None = None
    ) -> SessionNotice | None:
        """Apply a free-form edit on top of the latest image."""
        transitions.require_previewing(self._state)
        instruction = (
            text if text is not None else self._state.pending_instruction
        ).strip()
        if not instruction or self._state.is_busy:
            return None
        source = transitions.effective_source(self._state)
        epoch = self._epoch
        try:
            return await self._run(
                "Casting magic spell...",
                self.transform_service.transform(source, instruction),
                on_success=transitions.with_result_image,
                failure=TransformFailedError,
                notice=SessionNotice("magic_edit", MAGIC_EDIT_FAILED),
            )
        finally:
            if epoch == self._epoch:
                self._state = transitions.with_pending_instruction(self._state, "")

    async def on_analysis_requested(self) -> SessionNotice | None:
        """Ask the model to describe the latest image."""
        transitions.require_previewing(self._state)
        if self._state.is_busy:
            return None
        source = transitions.effective_source(self._state)

        async def analyze() -> AnalysisResult:
            text = await self.transform_service.analyze(source)
            return AnalysisResult(text=text, produced_at=datetime.now(tz=UTC))

        return await self._run(
            "Scanning timeline data...",
            analyze(),
            on_success=transitions.with_analysis,
            failure=AnalysisFailedError,
            notice=SessionNotice("analysis", ANALYSIS_FAILED),
        )

    async def _run(
        self,
        message: str,
        call: Awaitable[Any],
        *,
        on_success: Callable[[SessionState, Any], SessionState],
        failure: type[Exception],
        notice: SessionNotice,
    ) -> SessionNotice | None:
        epoch = self._epoch
        self._state = transitions.begin_request(self._state, message)
        try:
            result = await call
        except failure:
            logger.exception(
                "Remote call failed", extra={"operation": notice.operation}
            )
            return notice if epoch == self._epoch else None
        finally:
            if epoch == self._epoch:
                self._state = transitions.finish_request(self._state)
        if epoch != self._epoch:
            logger.info("Dropping result of a call from a reset session")
            return None
        self._state = on_success(self._state, result)
        return None
