"""Exception classes for StickerStag."""


class StickerStagError(Exception):
    """Base exception for all StickerStag errors."""

    pass


class InvalidBuffer(StickerStagError):
    """Raised for malformed buffers (wrong rank, dtype, channels or length)."""

    pass


class DimensionMismatch(StickerStagError):
    """Raised when two rasters that must align differ in width or height."""

    pass


class ParameterOutOfRange(StickerStagError, UserWarning):
    """Emitted as a warning when a numeric parameter was clamped.

    Clamping is a permitted outcome, so this is never raised; it is issued
    through :func:`warnings.warn` so callers can observe or escalate it.
    """

    pass


class DecodeFailure(StickerStagError):
    """Raised when an image could not be read or decoded."""

    pass


class EncodeFailure(StickerStagError):
    """Raised when an image could not be encoded or written."""

    pass
