"""Auditory masking model"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Final

import numpy as np

from zimt.masking.errors import (
    AliasingViolationError,
    InvalidConfigurationError,
    InvalidShapeError,
)
from zimt.masking.levels import DEFAULT_FULL_SCALE_SINE_DB, to_linear

if TYPE_CHECKING:
    from numpy import ndarray

logger = logging.getLogger(__name__)

# Full masking level of a masker that does not reach a channel at all. Far
# below any probe level, but finite so that differences stay finite.
NO_MASKING_DB: Final = -1000.0

# Masker levels at which the zero crossing distances are measured.
_REFERENCE_LOW_DB: Final = 20.0
_REFERENCE_HIGH_DB: Final = 80.0


def _check_cam_delta(cam_delta: float) -> None:
    if not np.isfinite(cam_delta) or cam_delta <= 0:
        raise InvalidConfigurationError(
            f"cam_delta must be positive and finite, got {cam_delta}"
        )


def _check_energy(energy_channels_db: ndarray) -> None:
    if energy_channels_db.ndim != 2:
        raise InvalidShapeError(
            "Expected (num_samples, num_channels) energy, "
            f"got {energy_channels_db.shape}"
        )


def _prepare_out(out: ndarray | None, shape: tuple[int, ...]) -> ndarray:
    if out is None:
        return np.empty(shape, dtype=np.float32)
    if out.shape != shape:
        raise InvalidShapeError(
            f"Output shape {out.shape} does not match expected {shape}"
        )
    return out


@dataclass(frozen=True)
class Masking:
    """Parameters and operations of the auditory masking model.

    A masker in one channel hides energy in nearby channels. How far its
    influence spreads depends on its level: the Cam distance at which masking
    reaches zero is measured for a 20 dB and an 80 dB masker on both sides, and
    linearly interpolated (or extrapolated) in the masker level. Within that
    distance the full masking level falls from the masker level at the
    masker's own channel by up to `max_mask` dB at the zero crossing.

    How much of a probe is masked then depends on how far the probe rises
    above the full masking level: fully masked (up to `max_mask` dB) at or
    below it, `onset_peak` dB when `onset_width` dB above it, and not at all
    `max_mask` dB above it.

    Attributes:
        lower_zero_at_20 (float): negative Cam distance at which a 20 dB masker
            no longer masks any probe.
        lower_zero_at_80 (float): negative Cam distance at which an 80 dB
            masker no longer masks any probe.
        upper_zero_at_20 (float): positive Cam distance at which a 20 dB masker
            no longer masks any probe.
        upper_zero_at_80 (float): positive Cam distance at which an 80 dB
            masker no longer masks any probe.
        onset_width (float): dB a probe has to be raised above full masking to
            be masked no more than `onset_peak` dB.
        onset_peak (float): masking of a probe raised `onset_width` dB above
            full masking.
        max_mask (float): dB a masker masks in its own band, and the dB above
            full masking where a probe is no longer masked.
    """

    lower_zero_at_20: float = -2.0
    lower_zero_at_80: float = -6.0
    upper_zero_at_20: float = 2.0
    upper_zero_at_80: float = 10.0
    onset_width: float = 10.0
    onset_peak: float = 6.0
    max_mask: float = 20.0

    def __post_init__(self) -> None:
        """Check that the parameters describe a usable masking curve."""
        for parameter in fields(self):
            value = getattr(self, parameter.name)
            if not np.isfinite(value):
                raise InvalidConfigurationError(
                    f"{parameter.name} must be finite, got {value}"
                )
        if self.lower_zero_at_20 >= 0 or self.lower_zero_at_80 >= 0:
            raise InvalidConfigurationError("Lower zero crossings must be negative")
        if self.upper_zero_at_20 <= 0 or self.upper_zero_at_80 <= 0:
            raise InvalidConfigurationError("Upper zero crossings must be positive")
        if self.max_mask <= 0:
            raise InvalidConfigurationError(
                f"max_mask must be positive, got {self.max_mask}"
            )
        if not 0 < self.onset_width < self.max_mask:
            raise InvalidConfigurationError(
                f"onset_width ({self.onset_width}) must be between 0 and "
                f"max_mask ({self.max_mask})"
            )
        if not 0 <= self.onset_peak <= self.max_mask:
            raise InvalidConfigurationError(
                f"onset_peak ({self.onset_peak}) must be between 0 and "
                f"max_mask ({self.max_mask})"
            )

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> Masking:
        """Build the parameters from a config mapping, e.g. a DictConfig."""
        names = {parameter.name for parameter in fields(cls)}
        unknown = set(params) - names
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown masking parameters: {sorted(unknown)}"
            )
        return cls(**{name: float(value) for name, value in params.items()})

    def zero_crossing(self, masker_db: ndarray, lower: bool) -> ndarray:
        """Cam distance at which a masker of the given level stops masking.

        Interpolates linearly in the masker level between the 20 dB and 80 dB
        reference distances. Levels outside that range are extrapolated.

        Distances are measured from the masker to the masked channel as
        `(masker_channel - masked_channel) * cam_delta`, so the lower side
        applies to masked channels with a higher index than the masker, and
        the upper side to masked channels with a lower index.

        Args:
            masker_db (ndarray): masker levels in dB.
            lower (bool): use the negative (lower) side, else the positive side.

        Returns:
            ndarray: signed zero crossing distances, same shape as masker_db.
        """
        if lower:
            zero_at_low, zero_at_high = self.lower_zero_at_20, self.lower_zero_at_80
        else:
            zero_at_low, zero_at_high = self.upper_zero_at_20, self.upper_zero_at_80
        slope = (zero_at_high - zero_at_low) / (_REFERENCE_HIGH_DB - _REFERENCE_LOW_DB)
        return zero_at_low + (np.asarray(masker_db) - _REFERENCE_LOW_DB) * slope

    def _full_masking(
        self, energy_channels_db: ndarray, cam_delta: float
    ) -> tuple[ndarray, ndarray]:
        """Full masking levels and where the maskers reach at all."""
        num_channels = energy_channels_db.shape[1]
        channel_index = np.arange(num_channels)
        # [m, k] is the distance from masked channel m to masker channel k
        distance = (channel_index[np.newaxis, :] - channel_index[:, np.newaxis]) * (
            cam_delta
        )
        abs_distance = np.abs(distance)
        masker_db = energy_channels_db[:, np.newaxis, :]

        lower = distance < 0
        zero_at = np.where(
            lower,
            self.zero_crossing(masker_db, lower=True),
            self.zero_crossing(masker_db, lower=False),
        )
        # Extrapolation below 20 dB can move the zero crossing to the wrong
        # side of the masker, in which case the masker reaches nothing.
        right_side = np.where(lower, zero_at < 0, zero_at > 0)
        reaches = right_side & (abs_distance < np.abs(zero_at))

        with np.errstate(divide="ignore", invalid="ignore"):
            attenuated = masker_db - self.max_mask * abs_distance / np.abs(zero_at)
        full_masking_db = np.where(reaches, attenuated, NO_MASKING_DB)
        own_channel = distance == 0
        return (
            np.where(own_channel, masker_db, full_masking_db),
            reaches | own_channel,
        )

    def _masked_amount(
        self, full_masking_db: ndarray, probe_energy_db: ndarray
    ) -> ndarray:
        probe_db = probe_energy_db[:, :, np.newaxis]
        above = probe_db - full_masking_db

        onset = self.max_mask + (self.onset_peak - self.max_mask) * (
            above / self.onset_width
        )
        release = self.onset_peak * (
            (self.max_mask - above) / (self.max_mask - self.onset_width)
        )
        curve = np.select(
            [above <= 0, above < self.onset_width, above < self.max_mask],
            [self.max_mask, onset, release],
            default=0.0,
        )
        # A probe can't lose more than it has, and a probe below 0 dB has
        # nothing left to lose.
        return np.minimum(curve, np.maximum(probe_db, 0.0))

    def full_masking(
        self,
        energy_channels_db: ndarray,
        cam_delta: float,
        out: ndarray | None = None,
    ) -> ndarray:
        """Compute the full masking levels of all channels on all channels.

        Entry `[s, m, k]` is the level at which masker channel `k` masks channel
        `m`. Masked channels above the masker (`m > k`) use the lower zero
        crossings, masked channels below it (`m < k`) the upper ones.

        Args:
            energy_channels_db (ndarray): (num_samples, num_channels) energy
                in dB.
            cam_delta (float): Cam distance between adjacent channels.
            out (ndarray): optional (num_samples, num_masked_channels,
                num_masker_channels) array to write into.

        Returns:
            ndarray: (num_samples, num_masked_channels, num_masker_channels)
                full masking levels in dB, `NO_MASKING_DB` where the masker
                does not reach the masked channel.
        """
        energy_channels_db = np.asarray(energy_channels_db)
        _check_energy(energy_channels_db)
        _check_cam_delta(cam_delta)
        num_samples, num_channels = energy_channels_db.shape
        out = _prepare_out(out, (num_samples, num_channels, num_channels))

        full_masking_db, _ = self._full_masking(
            energy_channels_db.astype(np.float64), cam_delta
        )
        out[...] = full_masking_db
        return out

    def masked_amount(
        self,
        full_masking_db: ndarray,
        probe_energy_db: ndarray,
        out: ndarray | None = None,
    ) -> ndarray:
        """Compute how much of each probe each masker masks.

        Args:
            full_masking_db (ndarray): (num_samples, num_masked_channels,
                num_masker_channels) full masking levels in dB.
            probe_energy_db (ndarray): (num_samples, num_channels) probe energy
                in dB.
            out (ndarray): optional array shaped like full_masking_db to write
                into.

        Returns:
            ndarray: (num_samples, num_masked_channels, num_masker_channels)
                masked amounts in dB.
        """
        full_masking_db = np.asarray(full_masking_db)
        probe_energy_db = np.asarray(probe_energy_db)
        if full_masking_db.ndim != 3 or (
            full_masking_db.shape[1] != full_masking_db.shape[2]
        ):
            raise InvalidShapeError(
                "Expected (num_samples, num_masked_channels, num_masker_channels) "
                f"full masking with equal channel counts, got {full_masking_db.shape}"
            )
        if probe_energy_db.shape != full_masking_db.shape[:2]:
            raise InvalidShapeError(
                f"Probe shape {probe_energy_db.shape} does not match full masking "
                f"shape {full_masking_db.shape}"
            )
        out = _prepare_out(out, full_masking_db.shape)

        out[...] = self._masked_amount(
            full_masking_db.astype(np.float64), probe_energy_db.astype(np.float64)
        )
        return out

    def partial_loudness(
        self,
        energy_channels_db: ndarray,
        cam_delta: float,
        full_scale_sine_db: float = DEFAULT_FULL_SCALE_SINE_DB,
        out: ndarray | None = None,
        block_size: int = 256,
    ) -> ndarray:
        """Compute the energy left in each channel after masking.

        Every channel is used as a probe against every other channel as
        masker. The masked amounts are summed in the linear domain, limited to
        the probe energy and removed from it. A channel does not mask itself.

        Args:
            energy_channels_db (ndarray): (num_samples, num_channels) energy
                in dB.
            cam_delta (float): Cam distance between adjacent channels.
            full_scale_sine_db (float): reference level used when converting
                between dB and linear energy.
            out (ndarray): optional (num_samples, num_channels) array to write
                into. Must not share memory with energy_channels_db.
            block_size (int): number of samples processed at a time.

        Returns:
            ndarray: (num_samples, num_channels) partial loudness in dB,
                `NO_MASKING_DB` for fully masked cells, never louder than
                the input.
        """
        energy_channels_db = np.asarray(energy_channels_db)
        _check_energy(energy_channels_db)
        _check_cam_delta(cam_delta)
        if block_size < 1:
            raise ValueError(f"block_size must be positive, got {block_size}")
        if out is not None and np.shares_memory(out, energy_channels_db):
            raise AliasingViolationError(
                "Partial loudness can not be computed in place"
            )
        num_samples, num_channels = energy_channels_db.shape
        out = _prepare_out(out, (num_samples, num_channels))

        logger.debug(
            "Computing partial loudness for %d samples of %d channels",
            num_samples,
            num_channels,
        )
        fully_masked_linear = 10 ** ((NO_MASKING_DB - full_scale_sine_db) / 10)
        not_self = ~np.eye(num_channels, dtype=bool)
        for start in range(0, num_samples, block_size):
            block_db = energy_channels_db[start : start + block_size].astype(
                np.float64
            )
            full_masking_db, reaches = self._full_masking(block_db, cam_delta)
            masked_amount_db = self._masked_amount(full_masking_db, block_db)
            masking = (
                not_self
                & reaches
                & (block_db[:, :, np.newaxis] - full_masking_db < self.max_mask)
            )

            masked_linear = to_linear(
                masked_amount_db, full_scale_sine_db, out=masked_amount_db
            )
            masked_linear = np.sum(np.where(masking, masked_linear, 0.0), axis=2)
            probe_linear = to_linear(
                block_db, full_scale_sine_db, out=np.empty_like(block_db)
            )
            remaining = probe_linear - np.minimum(masked_linear, probe_linear)

            partial_loudness_db = full_scale_sine_db + 10 * np.log10(
                np.maximum(remaining, fully_masked_linear)
            )
            # Probes already below the fully masked level keep their own level
            out[start : start + block_size] = np.minimum(partial_loudness_db, block_db)
        return out
