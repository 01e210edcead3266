"""Request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel

from chronosnap.domain.eras import TransformPreset
from chronosnap.domain.session import SessionState
from chronosnap.services.capture import ImageSourceAdapter
from chronosnap.services.session import SessionNotice


class EraView(BaseModel):
    id: str
    label: str
    icon: str
    description: str

    @classmethod
    def from_preset(cls, preset: TransformPreset) -> "EraView":
        return cls(
            id=preset.id,
            label=preset.label,
            icon=preset.icon,
            description=preset.description,
        )


class AnalysisView(BaseModel):
    text: str
    produced_at: datetime


class CameraView(BaseModel):
    """Camera status; `error` carries the persistent upload-fallback message."""

    active: bool
    error: str | None = None


class SessionView(BaseModel):
    """Read-only view of the session for the front-end."""

    mode: str
    timeline: str
    has_original: bool
    has_result: bool
    image_data_url: str | None = None
    analysis: AnalysisView | None = None
    pending_instruction: str
    is_busy: bool
    busy_message: str
    camera: CameraView

    @classmethod
    def build(
        cls,
        state: SessionState,
        image_source: ImageSourceAdapter,
        *,
        include_image: bool = False,
    ) -> "SessionView":
        analysis = None
        if state.current_analysis is not None:
            analysis = AnalysisView(
                text=state.current_analysis.text,
                produced_at=state.current_analysis.produced_at,
            )
        display = state.display_image
        return cls(
            mode=state.mode.value,
            timeline=state.timeline,
            has_original=state.original_image is not None,
            has_result=state.current_result_image is not None,
            image_data_url=display.data_url if include_image and display else None,
            analysis=analysis,
            pending_instruction=state.pending_instruction,
            is_busy=state.is_busy,
            busy_message=state.busy_message,
            camera=CameraView(
                active=image_source.is_active, error=image_source.device_error
            ),
        )


class NoticeView(BaseModel):
    operation: str
    text: str

    @classmethod
    def from_notice(cls, notice: SessionNotice | None) -> "NoticeView | None":
        if notice is None:
            return None
        return cls(operation=notice.operation, text=notice.text)


class ActionResponse(BaseModel):
    session: SessionView
    notice: NoticeView | None = None


class InstructionRequest(BaseModel):
    text: str


class EditRequest(BaseModel):
    text: str | None = None
