"""Conversion between linear energy and dB SPL."""
from __future__ import annotations

from typing import TYPE_CHECKING, Final

import numpy as np

from zimt.masking.errors import InvalidShapeError

if TYPE_CHECKING:
    from numpy import ndarray

# Reference dB SPL of a sine wave of amplitude 1.
DEFAULT_FULL_SCALE_SINE_DB: Final = 80.0
# Added to linear energy before taking the logarithm.
DEFAULT_EPSILON: Final = 1e-9


def _prepare_out(values: ndarray, out: ndarray | None) -> ndarray:
    """Return the array to write into, allocating float32 storage if needed."""
    if out is None:
        return np.empty(values.shape, dtype=np.float32)
    if out.shape != values.shape:
        raise InvalidShapeError(
            f"Output shape {out.shape} does not match input shape {values.shape}"
        )
    return out


def to_db(
    energy_channels_linear: ndarray,
    full_scale_sine_db: float = DEFAULT_FULL_SCALE_SINE_DB,
    epsilon: float = DEFAULT_EPSILON,
    out: ndarray | None = None,
) -> ndarray:
    """Convert linear energy to dB SPL.

    Computes `full_scale_sine_db + 10 * log10(energy_channels_linear + epsilon)`
    element-wise.

    Args:
        energy_channels_linear (ndarray): linear energy, any shape.
        full_scale_sine_db (float): dB SPL of a sine wave of amplitude 1.
        epsilon (float): small positive value keeping the logarithm finite for
            silent cells.
        out (ndarray): optional array to write into. May be
            `energy_channels_linear` itself.

    Returns:
        ndarray: energy in dB SPL.
    """
    if not np.isfinite(epsilon) or epsilon <= 0:
        raise ValueError(f"epsilon must be positive and finite, got {epsilon}")
    energy_channels_linear = np.asarray(energy_channels_linear)
    out = _prepare_out(energy_channels_linear, out)
    out[...] = full_scale_sine_db + 10 * np.log10(energy_channels_linear + epsilon)
    return out


def to_linear(
    energy_channels_db: ndarray,
    full_scale_sine_db: float = DEFAULT_FULL_SCALE_SINE_DB,
    out: ndarray | None = None,
) -> ndarray:
    """Convert dB SPL energy to linear energy.

    Computes `10 ** ((energy_channels_db - full_scale_sine_db) / 10)`. The
    epsilon added by `to_db` is not removed, so a round trip is only
    approximate close to zero energy.

    Args:
        energy_channels_db (ndarray): energy in dB SPL, any shape.
        full_scale_sine_db (float): dB SPL of a sine wave of amplitude 1.
        out (ndarray): optional array to write into. May be
            `energy_channels_db` itself.

    Returns:
        ndarray: linear energy.
    """
    energy_channels_db = np.asarray(energy_channels_db)
    out = _prepare_out(energy_channels_db, out)
    out[...] = np.power(10.0, (energy_channels_db - full_scale_sine_db) / 10)
    return out
