import math

import numpy as np
import pytest

import bead_recognition
from bead_recognition import InvalidImageError, bead_sequence_code, detect


def test_black_image_has_no_loop():
    result = detect(np.zeros((200, 200, 3), dtype=np.uint8))

    assert result.loop is None
    assert not result.loop_found
    assert result.beads == []
    assert result.samples == []


def test_uniform_image_has_no_loop():
    result = detect(np.full((120, 160, 3), 180, dtype=np.uint8))

    assert result.loop is None
    assert result.beads == []
    assert not result.edge_field.any()


def test_four_color_ring_reads_beads_in_loop_order(four_color_ring):
    result = detect(four_color_ring)

    assert result.loop_found
    assert result.hex_sequence == ["#ff0000", "#ffff00", "#00ff00", "#0000ff"]
    assert bead_sequence_code(result.beads) == "RYGB"


def test_four_color_ring_beads_follow_increasing_angle(four_color_ring):
    result = detect(four_color_ring)

    angles = [bead.angle for bead in result.beads]
    assert angles == sorted(angles)
    assert angles[0] < math.pi / 2
    sample_angles = [sample.angle for sample in result.samples]
    assert sample_angles == sorted(sample_angles)


def test_four_color_ring_loop_geometry(four_color_ring):
    loop = detect(four_color_ring).loop

    assert abs(loop.center[0] - 200) <= 0.05 * 400
    assert abs(loop.center[1] - 200) <= 0.05 * 400
    assert abs(loop.radius - 150) <= 0.1 * 150
    assert 0 < loop.score <= 1


def test_clean_ring_is_located(white_ring):
    loop = detect(white_ring).loop

    assert loop is not None
    assert abs(loop.center[0] - 150) <= 0.05 * 300
    assert abs(loop.center[1] - 150) <= 0.05 * 300
    assert abs(loop.radius - 100) <= 0.1 * 100


def test_detect_is_idempotent(four_color_ring):
    first = detect(four_color_ring)
    second = detect(four_color_ring)

    assert first.beads == second.beads
    assert first.loop == second.loop
    assert first.samples == second.samples
    assert np.array_equal(first.density_field, second.density_field)
    assert np.array_equal(first.edge_field, second.edge_field)


def test_detect_does_not_modify_the_image(four_color_ring):
    original = four_color_ring.copy()
    detect(four_color_ring)

    assert np.array_equal(four_color_ring, original)


def test_alpha_channel_is_ignored(four_color_ring):
    rgba = np.dstack(
        [four_color_ring, np.full(four_color_ring.shape[:2], 255, dtype=np.uint8)])

    assert detect(rgba).hex_sequence == detect(four_color_ring).hex_sequence


def test_debug_artifacts_are_returned(four_color_ring):
    result = detect(four_color_ring)

    assert result.density_field.shape == (400, 400)
    assert result.edge_field.shape == (400, 400)
    assert result.density_field.dtype == np.uint8
    assert len(result.samples) > 0


def test_settings_are_read_at_call_time(four_color_ring, monkeypatch):
    # A bead would need more samples than there are angular steps
    monkeypatch.setattr(bead_recognition.settings, "MIN_BEAD_SAMPLES", 1000)

    result = detect(four_color_ring)

    assert result.loop_found
    assert result.beads == []


@pytest.mark.parametrize(
    "image",
    [
        None,
        [[0, 0, 0]],
        np.zeros((20, 20), dtype=np.uint8),
        np.zeros((20, 20, 2), dtype=np.uint8),
        np.zeros((0, 20, 3), dtype=np.uint8),
        np.zeros((20, 0, 3), dtype=np.uint8),
        np.zeros((20, 20, 3), dtype=np.float32),
    ],
)
def test_malformed_input_is_rejected(image):
    with pytest.raises(InvalidImageError):
        detect(image)


def test_invalid_image_error_is_a_value_error():
    with pytest.raises(ValueError):
        detect(None)


def test_density_field_without_loop_is_the_swept_field():
    image = np.zeros((200, 200, 3), dtype=np.uint8)

    result = detect(image)

    _, connected_field = bead_recognition.preprocess_frame(image)
    assert np.array_equal(
        result.density_field, bead_recognition.build_density_field(connected_field))


def test_density_field_with_loop_is_the_loop_field(four_color_ring):
    result = detect(four_color_ring)

    _, connected_field = bead_recognition.preprocess_frame(four_color_ring)
    threshold, _, density_field = bead_recognition.find_loop_contour(connected_field)
    assert threshold == result.loop.density_threshold
    assert np.array_equal(
        result.density_field, bead_recognition.build_loop_field(density_field, threshold))
