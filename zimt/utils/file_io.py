"""File I/O functions."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np
from numpy import ndarray

from zimt.masking.errors import InvalidShapeError

logger = logging.getLogger(__name__)

# Function for reading and writing jsonl files


def read_jsonl(filename: str | Path) -> list:
    """Read a jsonl file into a list of dictionaries."""
    with open(filename, encoding="utf-8") as fp:
        records = [json.loads(line) for line in fp if line.strip()]
    return records


def write_jsonl(filename: str | Path, records: list) -> None:
    """Append a list of dictionaries to a jsonl file."""
    with open(filename, "a", encoding="utf-8") as fp:
        for record in records:
            fp.write(json.dumps(record) + "\n")


# Functions for reading and writing channel arrays.
#
# - Channels are stored as .npy files holding float arrays of shape
#   (n_samples, n_channels), already split into Cam ordered channels.
# - A single channel can be stored as (n_samples,) and is returned as
#   (n_samples, 1) so that the masking functions always see two dimensions.


def read_channels(filename: str | Path, n_channels: int = 0) -> ndarray:
    """Read a channel array from a .npy file.

    Args:
        filename (str|Path): name of the file to read.
        n_channels (int): expected number of channels (default: 0 = any number OK)

    Returns:
        ndarray: (n_samples, n_channels) float32 array.
    """
    channels = np.load(filename, allow_pickle=False)
    if channels.ndim == 1:
        channels = channels[:, np.newaxis]
    if channels.ndim != 2:
        raise InvalidShapeError(
            f"Channel file ({filename}) has shape {channels.shape}, "
            "expected (n_samples, n_channels)"
        )
    if n_channels not in (0, channels.shape[1]):
        raise InvalidShapeError(
            f"Channel file ({filename}) was expected to have {n_channels} channels."
        )
    return channels.astype(np.float32, copy=False)


def write_channels(filename: str | Path, channels: ndarray) -> None:
    """Write a channel array to a .npy file, creating parent directories."""
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)
    channels = np.asarray(channels, dtype=np.float32)
    np.save(filename, channels)
    logger.debug(f"Wrote {channels.shape} channels to {filename}")
