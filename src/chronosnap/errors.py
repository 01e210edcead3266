"""Error types raised across ChronoSnap."""


class ChronoSnapError(Exception):
    """Base class for application errors."""


class DeviceUnavailableError(ChronoSnapError):
    """Raised when the camera cannot be acquired or read."""


class MissingCredentialError(ChronoSnapError):
    """Raised when no API key is configured for the remote model."""


class ModelServiceError(ChronoSnapError):
    """Raised by model adapters on transport or service failures."""


class TransformFailedError(ChronoSnapError):
    """Raised when an image transform call fails."""


class NoImageProducedError(TransformFailedError):
    """Raised when a transform response carries no inline image."""


class AnalysisFailedError(ChronoSnapError):
    """Raised when a scene analysis call fails."""


class UnsupportedImageError(ChronoSnapError):
    """Raised for image data outside the recognized MIME types."""


class UnknownEraError(ChronoSnapError):
    """Raised when an era identifier is not in the catalog."""


class InvalidTransitionError(ChronoSnapError):
    """Raised when a session event is not valid in the current mode."""
