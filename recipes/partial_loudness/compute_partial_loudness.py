""" Compute the partial loudness of pre-decomposed channel signals. """
from __future__ import annotations

import logging
from pathlib import Path

import hydra
import numpy as np
from numpy import ndarray
from omegaconf import DictConfig
from tqdm import tqdm

from zimt.masking import (
    NO_MASKING_DB,
    Masking,
    compute_energy,
    num_downscaled_samples_for,
    to_db,
)
from zimt.utils.file_io import read_channels, read_jsonl, write_channels, write_jsonl

logger = logging.getLogger(__name__)


def compute_partial_loudness_for_channels(
    channels: ndarray,
    masking: Masking,
    cam_delta: float,
    energy: dict,
    block_size: int = 256,
) -> tuple[ndarray, ndarray]:
    """Compute the dB energy and partial loudness of a channel array.

    Args:
        channels (ndarray): (n_samples, n_channels) Cam ordered channel samples.
        masking (Masking): masking parameters.
        cam_delta (float): Cam distance between adjacent channels.
        energy (dict): energy settings, as defined in the config.
        block_size (int): number of energy samples masked at a time.

    Returns:
        ndarray: energy in dB at the perceptual sample rate.
        ndarray: partial loudness in dB at the perceptual sample rate.
    """
    num_downscaled_samples = num_downscaled_samples_for(
        channels.shape[0], energy["sample_rate"], energy["perceptual_sample_rate"]
    )
    energy_db = compute_energy(channels, num_downscaled_samples)
    to_db(energy_db, energy["full_scale_sine_db"], energy["epsilon"], out=energy_db)
    partial_loudness_db = masking.partial_loudness(
        energy_db,
        cam_delta,
        full_scale_sine_db=energy["full_scale_sine_db"],
        block_size=block_size,
    )
    return energy_db, partial_loudness_db


def summarise(
    signal_name: str, energy_db: ndarray, partial_loudness_db: ndarray
) -> dict:
    """Summary record of the masking of one signal."""
    audible = partial_loudness_db > NO_MASKING_DB
    return {
        "signal": signal_name,
        "n_samples": int(energy_db.shape[0]),
        "n_channels": int(energy_db.shape[1]),
        "mean_energy_db": float(np.mean(energy_db)),
        "mean_partial_loudness_db": (
            float(np.mean(partial_loudness_db[audible])) if audible.any() else None
        ),
        "masked_fraction": float(1.0 - np.mean(audible)),
    }


# pylint: disable = no-value-for-parameter
@hydra.main(config_path=".", config_name="config")
def run_compute_partial_loudness(cfg: DictConfig) -> None:
    """Run the partial loudness computation over a directory of channel files."""
    masking = Masking.from_dict(cfg.masking)
    channels_dir = Path(cfg.path.channels_dir)
    output_dir = Path(cfg.path.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    # Skip signals already present in the results file
    results_file = Path(cfg.path.results_file)
    results = read_jsonl(results_file) if results_file.exists() else []
    done = {result["signal"] for result in results}

    channel_files = [
        channel_file
        for channel_file in sorted(channels_dir.glob("*.npy"))
        if channel_file.stem not in done
    ]

    logger.info(f"Computing partial loudness for {len(channel_files)} signals")
    for channel_file in tqdm(channel_files):
        channels = read_channels(channel_file)
        energy_db, partial_loudness_db = compute_partial_loudness_for_channels(
            channels,
            masking,
            cfg.cam_delta,
            cfg.energy,
            block_size=cfg.compute_partial_loudness.block_size,
        )
        write_channels(output_dir / channel_file.name, partial_loudness_db)

        # Results are appended to the results file to allow interruption
        write_jsonl(
            results_file,
            [summarise(channel_file.stem, energy_db, partial_loudness_db)],
        )
    logger.info(f"Partial loudness written to {output_dir}")


if __name__ == "__main__":
    run_compute_partial_loudness()
