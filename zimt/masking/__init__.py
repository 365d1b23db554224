"""Auditory masking: energy reduction, dB conversion and masking model."""
from zimt.masking.energy import (
    DEFAULT_PERCEPTUAL_SAMPLE_RATE,
    compute_energy,
    num_downscaled_samples_for,
)
from zimt.masking.errors import (
    AliasingViolationError,
    InvalidConfigurationError,
    InvalidShapeError,
    MaskingError,
)
from zimt.masking.levels import (
    DEFAULT_EPSILON,
    DEFAULT_FULL_SCALE_SINE_DB,
    to_db,
    to_linear,
)
from zimt.masking.masking import NO_MASKING_DB, Masking

__all__ = [
    "compute_energy",
    "num_downscaled_samples_for",
    "to_db",
    "to_linear",
    "Masking",
    "MaskingError",
    "InvalidShapeError",
    "InvalidConfigurationError",
    "AliasingViolationError",
    "DEFAULT_EPSILON",
    "DEFAULT_FULL_SCALE_SINE_DB",
    "DEFAULT_PERCEPTUAL_SAMPLE_RATE",
    "NO_MASKING_DB",
]
