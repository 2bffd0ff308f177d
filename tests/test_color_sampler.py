import math

import numpy as np
import pytest

import settings
from bead_recognition import compute_vibrancy, sample_loop_colors
from internal_data_classes import LoopGeometry

LOOP = LoopGeometry(center=(50.0, 50.0), radius=30.0, density_threshold=1, score=1.0)


def filled_image(color, size=100):
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[...] = color
    return image


def dense_field(size=100):
    return np.full((size, size), 255, dtype=np.uint8)


@pytest.mark.parametrize(
    "color, expected",
    [
        ((255, 0, 0), 1.0),
        ((0, 0, 0), 0.0),
        ((128, 128, 128), 0.0),
        ((255, 255, 255), 0.0),
        ((128, 0, 0), 128 / 255),
        ((200, 100, 0), 200 / 255),
        ((200, 100, 100), 0.5 * 200 / 255),
    ],
)
def test_compute_vibrancy(color, expected):
    assert compute_vibrancy(color) == pytest.approx(expected)


def test_one_sample_per_angle_on_dense_loop():
    samples = sample_loop_colors(filled_image((255, 0, 0)), LOOP, dense_field())

    assert len(samples) == settings.ANGULAR_STEP_COUNT
    assert all(sample.color == (255, 0, 0) for sample in samples)
    assert all(sample.vibrancy == 1.0 for sample in samples)


def test_samples_follow_increasing_angle():
    samples = sample_loop_colors(filled_image((0, 200, 50)), LOOP, dense_field())

    angles = [sample.angle for sample in samples]
    assert angles == sorted(angles)
    assert angles[0] == 0.0
    assert all(0 <= angle < 2 * math.pi for angle in angles)


def test_vibrancy_ties_prefer_the_fitted_circle():
    samples = sample_loop_colors(filled_image((255, 0, 0)), LOOP, dense_field())

    band_step = 2 * settings.RADIAL_BAND_FRACTION * LOOP.radius / (settings.RADIAL_SAMPLE_COUNT - 1)
    assert all(abs(sample.radial_offset) <= band_step / 2 + 1e-9 for sample in samples)


def test_most_vibrant_point_across_the_loop_wins():
    image = filled_image((128, 128, 128))
    rows, cols = np.mgrid[0:100, 0:100]
    distance_from_center = np.hypot(cols - 50, rows - 50)
    # A bead band slightly outside the fitted circle
    image[(distance_from_center >= 33) & (distance_from_center <= 37)] = (0, 0, 255)

    samples = sample_loop_colors(image, LOOP, dense_field())

    assert len(samples) == settings.ANGULAR_STEP_COUNT
    assert all(sample.color == (0, 0, 255) for sample in samples)
    assert all(sample.radial_offset > 0 for sample in samples)


def test_no_samples_below_the_density_gate():
    density_field = np.full((100, 100), settings.SAMPLE_DENSITY_GATE, dtype=np.uint8)

    samples = sample_loop_colors(filled_image((255, 0, 0)), LOOP, density_field)

    assert samples == []


def test_samples_only_where_density_passes():
    density_field = np.zeros((100, 100), dtype=np.uint8)
    density_field[:, 50:] = 255

    samples = sample_loop_colors(filled_image((255, 0, 0)), LOOP, density_field)

    assert 0 < len(samples) < settings.ANGULAR_STEP_COUNT
    assert all(sample.position[0] >= 50 for sample in samples)


def test_points_outside_the_image_are_skipped():
    loop = LoopGeometry(center=(5.0, 5.0), radius=30.0, density_threshold=1, score=0.5)

    samples = sample_loop_colors(filled_image((255, 0, 0), size=40), loop, dense_field(size=40))

    assert samples
    assert all(0 <= sample.position[0] < 40 and 0 <= sample.position[1] < 40 for sample in samples)
