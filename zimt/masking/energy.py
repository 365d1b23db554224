"""Reduction of channel samples to perceptual rate energy."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import numpy as np

from zimt.masking.errors import InvalidShapeError

if TYPE_CHECKING:
    from numpy import ndarray

logger = logging.getLogger(__name__)

# 100 Hz has proven a reasonable time resolution for human hearing.
DEFAULT_PERCEPTUAL_SAMPLE_RATE: Final = 100.0


def num_downscaled_samples_for(
    num_samples: int,
    sample_rate: float,
    perceptual_sample_rate: float = DEFAULT_PERCEPTUAL_SAMPLE_RATE,
) -> int:
    """Number of energy samples needed to cover a signal at a perceptual rate.

    Args:
        num_samples (int): number of samples in the signal.
        sample_rate (float): sample rate of the signal, Hz.
        perceptual_sample_rate (float): rate of the energy signal, Hz.

    Returns:
        int: number of downscaled samples.
    """
    num_downscaled_samples = int(num_samples * perceptual_sample_rate / sample_rate)
    if not 1 <= num_downscaled_samples < num_samples:
        raise InvalidShapeError(
            f"{num_samples} samples at {sample_rate} Hz give "
            f"{num_downscaled_samples} samples at {perceptual_sample_rate} Hz, "
            f"which must be between 1 and {num_samples - 1}"
        )
    return num_downscaled_samples


def window_bounds(num_samples: int, num_downscaled_samples: int) -> ndarray:
    """Boundaries of the windows averaged into each downscaled sample.

    Window `i` spans `bounds[i]:bounds[i + 1]`. Windows differ in length by at
    most one sample.

    Args:
        num_samples (int): number of input samples.
        num_downscaled_samples (int): number of windows.

    Returns:
        ndarray: `num_downscaled_samples + 1` increasing sample indices.
    """
    return (np.arange(num_downscaled_samples + 1) * num_samples) // (
        num_downscaled_samples
    )


def compute_energy(
    sample_channels: ndarray,
    num_downscaled_samples: int | None = None,
    out: ndarray | None = None,
) -> ndarray:
    """Compute the mean square energy of the channels over consecutive windows.

    Input and output contain linear values.

    Args:
        sample_channels (ndarray): (num_samples, num_channels) samples.
        num_downscaled_samples (int): number of output samples, must be less
            than num_samples. Taken from `out` when not given.
        out (ndarray): optional (num_downscaled_samples, num_channels) array
            to write into.

    Returns:
        ndarray: (num_downscaled_samples, num_channels) mean square energy.
    """
    sample_channels = np.asarray(sample_channels)
    if sample_channels.ndim != 2:
        raise InvalidShapeError(
            f"Expected (num_samples, num_channels) samples, got {sample_channels.shape}"
        )
    num_samples, num_channels = sample_channels.shape

    if num_downscaled_samples is None:
        if out is None:
            raise InvalidShapeError(
                "Either num_downscaled_samples or out must be provided"
            )
        num_downscaled_samples = out.shape[0]
    if not 1 <= num_downscaled_samples < num_samples:
        raise InvalidShapeError(
            f"num_downscaled_samples ({num_downscaled_samples}) must be between 1 "
            f"and num_samples - 1 ({num_samples - 1})"
        )

    expected_shape = (num_downscaled_samples, num_channels)
    if out is None:
        out = np.empty(expected_shape, dtype=np.float32)
    elif out.shape != expected_shape:
        raise InvalidShapeError(
            f"Output shape {out.shape} does not match expected {expected_shape}"
        )

    logger.debug(
        "Reducing %d samples to %d energy samples over %d channels",
        num_samples,
        num_downscaled_samples,
        num_channels,
    )
    bounds = window_bounds(num_samples, num_downscaled_samples)
    squares = np.square(sample_channels, dtype=np.float64)
    window_sums = np.add.reduceat(squares, bounds[:-1], axis=0)
    out[...] = window_sums / np.diff(bounds)[:, np.newaxis]
    return out
