"""Exceptions raised by the masking engine."""


class MaskingError(ValueError):
    """Base class for invalid input to the masking engine."""


class InvalidShapeError(MaskingError):
    """Array shapes do not agree, or the requested downsampling is impossible."""


class InvalidConfigurationError(MaskingError):
    """Masking parameters, or the Cam spacing, are non-finite or inconsistent."""


class AliasingViolationError(MaskingError):
    """Input and output arrays share storage where they must not."""
