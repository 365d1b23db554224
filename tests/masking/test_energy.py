"""Tests for the energy module"""
import numpy as np
import pytest

from zimt.masking.energy import (
    compute_energy,
    num_downscaled_samples_for,
    window_bounds,
)
from zimt.masking.errors import InvalidShapeError


@pytest.mark.parametrize(
    "num_samples, num_downscaled_samples, expected",
    [
        (10, 3, [0, 3, 6, 10]),
        (4, 2, [0, 2, 4]),
        (5, 4, [0, 1, 2, 3, 5]),
        (100, 1, [0, 100]),
    ],
)
def test_window_bounds(num_samples, num_downscaled_samples, expected):
    """Test window bounds cover the signal without gaps"""
    bounds = window_bounds(num_samples, num_downscaled_samples)
    assert bounds.tolist() == expected


def test_compute_energy_known_values():
    """Test compute energy on a small signal"""
    samples = np.array([[1.0, -1.0], [2.0, 0.0], [3.0, 0.0], [4.0, 2.0]])

    energy = compute_energy(samples, 2)
    assert energy.shape == (2, 2)
    assert energy.dtype == np.float32
    assert np.allclose(energy, [[2.5, 0.5], [12.5, 2.0]])

    energy = compute_energy(samples, 3)
    assert np.allclose(energy, [[1.0, 1.0], [4.0, 0.0], [12.5, 2.0]])


@pytest.mark.parametrize("num_downscaled_samples", [1, 7, 100, 999])
def test_compute_energy_mean_square(make_random_matrix, num_downscaled_samples):
    """Each output is the mean square of its window"""
    samples = make_random_matrix(seed=2, size=(1000, 3)) * 2 - 1
    energy = compute_energy(samples, num_downscaled_samples)

    bounds = window_bounds(1000, num_downscaled_samples)
    for index in range(num_downscaled_samples):
        window = samples[bounds[index] : bounds[index + 1]]
        assert np.allclose(
            np.sum(np.square(window), axis=0), len(window) * energy[index], rtol=1e-5
        )


def test_compute_energy_into_out(make_random_matrix):
    """The number of outputs can be taken from the output array"""
    samples = make_random_matrix(seed=3, size=(480, 4))
    out = np.zeros((48, 4), dtype=np.float32)

    result = compute_energy(samples, out=out)
    assert result is out
    assert np.allclose(out, compute_energy(samples, 48))


@pytest.mark.parametrize(
    "shape, num_downscaled_samples",
    [
        ((10, 2), 10),
        ((10, 2), 11),
        ((10, 2), 0),
        ((10,), 5),
        ((10, 2, 2), 5),
    ],
)
def test_compute_energy_invalid_shape(shape, num_downscaled_samples):
    """Test invalid downsampling is rejected"""
    with pytest.raises(InvalidShapeError):
        compute_energy(np.ones(shape), num_downscaled_samples)


def test_compute_energy_bad_out_untouched():
    """A mismatching output array raises and is left untouched"""
    out = np.full((4, 3), 7.0, dtype=np.float32)
    with pytest.raises(InvalidShapeError):
        compute_energy(np.ones((20, 2)), out=out)
    with pytest.raises(InvalidShapeError):
        compute_energy(np.ones((20, 3)), 5, out=out)
    assert np.all(out == 7.0)


def test_compute_energy_needs_size():
    """Either the number of outputs or an output array is required"""
    with pytest.raises(InvalidShapeError):
        compute_energy(np.ones((20, 2)))


@pytest.mark.parametrize(
    "num_samples, sample_rate, perceptual_sample_rate, expected",
    [
        (48000, 48000, 100.0, 100),
        (44100, 44100, 100.0, 100),
        (24000, 48000, 100.0, 50),
        (48000, 48000, 50.0, 50),
    ],
)
def test_num_downscaled_samples_for(
    num_samples, sample_rate, perceptual_sample_rate, expected
):
    """Test the number of samples at the perceptual rate"""
    assert (
        num_downscaled_samples_for(num_samples, sample_rate, perceptual_sample_rate)
        == expected
    )


@pytest.mark.parametrize(
    "num_samples, sample_rate, perceptual_sample_rate",
    [(100, 48000, 100.0), (100, 100, 100.0), (100, 100, 200.0)],
)
def test_num_downscaled_samples_for_invalid(
    num_samples, sample_rate, perceptual_sample_rate
):
    """Test signals too short or rates too high are rejected"""
    with pytest.raises(InvalidShapeError):
        num_downscaled_samples_for(num_samples, sample_rate, perceptual_sample_rate)
