"""Exceptions raised by the intake and analysis workflow.

Every error here is recoverable: the caller retries the operation that
failed (pick another file, load an image first, click Analyze again).
"""


class DermaScanError(Exception):
    """Base class for all workflow errors."""


# --- Intake ---

class IntakeError(DermaScanError):
    """An input file could not be turned into an image asset."""


class UnsupportedTypeError(IntakeError):
    """The file's declared media type is not an image type."""

    def __init__(self, media_type: str):
        super().__init__(f"Unsupported file type: {media_type or 'unknown'}")
        self.media_type = media_type


class ReadFailureError(IntakeError):
    """The file's bytes could not be fully read."""


# --- Analysis ---

class AnalyzeError(DermaScanError):
    """An analysis request could not be started or did not succeed."""


class NoImageError(AnalyzeError):
    def __init__(self):
        super().__init__("No image loaded. Upload an image first.")


class AlreadyInProgressError(AnalyzeError):
    def __init__(self):
        super().__init__("An analysis is already in progress.")


class ProviderFailureError(AnalyzeError):
    """The inference provider failed to produce a result."""

    def __init__(self, message: str, token: int = 0):
        super().__init__(message)
        self.token = token
