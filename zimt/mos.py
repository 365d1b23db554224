"""Map perceptual distances to mean opinion scores."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import numpy as np
from scipy.optimize import curve_fit

if TYPE_CHECKING:
    from numpy import ndarray

logger = logging.getLogger(__name__)

MAX_MOS: Final = 5.0

# Distances and the MOS they are expected to map to.
CALIBRATION_DISTANCES: Final = np.array([0.0, 0.1, 0.5, 0.7, 1.0])
CALIBRATION_MOS: Final = np.array(
    [5.0, 3.8630697727203369, 1.751483678817749, 1.3850023746490479, 1.1411819458007812]
)

# floor, rate
DEFAULT_MOS_PARAMS: Final = np.array([1.0, 3.344])


class MOSMapper:
    """Class to represent an exponential mapping from distance to MOS.

    A distance of zero maps to the maximum score of 5, and the score decays
    exponentially towards `floor` as the distance grows.
    """

    def __init__(self, params: ndarray | None = None) -> None:
        self.params = np.array(DEFAULT_MOS_PARAMS if params is None else params)

    def _exponential_mapping(self, x, floor, rate):
        """
        Exponential decay
            floor - the score approached for large distances
            rate - how fast the score decays with distance
        """
        return floor + (MAX_MOS - floor) * np.exp(-rate * x)

    def fit(self, x, y) -> MOSMapper:
        """Fit the mapping from distances x to scores y."""
        initial_guess = [1.0, 1.0]
        self.params, *_pcov = curve_fit(
            self._exponential_mapping, np.asarray(x), np.asarray(y), initial_guess
        )
        logger.debug("Fitted MOS mapping parameters %s", self.params)
        return self

    def map(self, distance):
        """Return the MOS for one or more distances."""
        return self._exponential_mapping(
            np.asarray(distance, dtype=np.float64), self.params[0], self.params[1]
        )

    @classmethod
    def from_calibration(cls) -> MOSMapper:
        """Mapping fitted to the calibration distances and scores."""
        return cls().fit(CALIBRATION_DISTANCES, CALIBRATION_MOS)
