"""Error types raised by frame operations."""


class FrameError(Exception):
    """Base class for user-facing frame failures."""


class ValidationError(FrameError):
    """The uploaded file was rejected before any processing."""


class ConversionError(FrameError):
    """The texture converter failed to produce a DDS file."""


class IdentityLookupError(FrameError):
    """The Steam profile for an id could not be fetched."""


class NotFoundError(FrameError):
    """No frame exists for the requested id."""


class ForbiddenError(FrameError):
    """The requester does not own the frame."""
