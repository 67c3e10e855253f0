"""
Unit tests for mean-shift filtering and segmentation.
"""

import numpy as np
import pytest

from dominant_colours.colour_convert import lab_to_cie, rgb_to_lab, u8_to_unit
from dominant_colours.constants import MS_MAX_NUM_CONVERGENCE_STEPS
from dominant_colours.quantize import MeanShift, mean_shift_quantize


def _cie_lab(image):
    return lab_to_cie(rgb_to_lab(u8_to_unit(image)))


def _a_ramp(a_values):
    """(1, W, 3) CIE Lab row at L=50, b=0 with the given a values."""
    row = np.zeros((1, len(a_values), 3), dtype=np.float64)
    row[..., 0] = 50.0
    row[0, :, 1] = a_values
    return row


class TestMeanShiftFilter:
    """Filtering leaves flat regions alone and respects the colour bandwidth"""

    def test_uniform_image_unchanged(self, red_4x4):
        lab = _cie_lab(red_4x4)
        filtered = MeanShift(2, 10.0).filter(lab)
        np.testing.assert_allclose(filtered, lab, atol=1e-9)

    def test_edges_do_not_bleed(self, two_tone):
        lab = _cie_lab(two_tone)
        filtered = MeanShift(3, 10.0).filter(lab)
        np.testing.assert_allclose(filtered, lab, atol=1e-9)

    def test_close_colours_average(self):
        image = np.zeros((1, 2, 3), dtype=np.uint8)
        image[0, 0] = (100, 100, 100)
        image[0, 1] = (104, 100, 100)
        lab = _cie_lab(image)
        filtered = MeanShift(1, 20.0).filter(lab)
        np.testing.assert_allclose(filtered[0, 0], lab.reshape(-1, 3).mean(axis=0), atol=1e-9)
        np.testing.assert_allclose(filtered[0, 0], filtered[0, 1], atol=1e-9)


class TestMeanShiftStopping:
    """A pixel keeps moving only while colour and position both shift"""

    def test_still_position_stops_after_first_step(self):
        # centre sees x=1..3 first; at its new colour x=0 and x=4 would join
        lab = _a_ramp([-5.0, 0.0, 9.0, 0.0, -5.0])
        filtered = MeanShift(2, 10.0).filter(lab)
        np.testing.assert_allclose(filtered[0, 2], [50.0, 3.0, 0.0], atol=1e-12)

    def test_step_cap(self, capsys):
        # pixel 0 walks 5, 7.5, 8.5, 9, 9.5 along the ramp
        lab = _a_ramp(np.arange(40, dtype=np.float64))
        filtered = MeanShift(20, 10.5, debug=True).filter(lab)
        lines = [
            line
            for line in capsys.readouterr().out.splitlines()
            if line.startswith("[debug] [mean-shift] step ")
        ]
        assert len(lines) == MS_MAX_NUM_CONVERGENCE_STEPS
        assert lines[-1].startswith(f"[debug] [mean-shift] step {MS_MAX_NUM_CONVERGENCE_STEPS}:")
        assert not lines[-1].endswith(": 0 px still moving")
        np.testing.assert_allclose(filtered[0, 0], [50.0, 9.5, 0.0], atol=1e-12)


class TestMeanShiftSegment:
    def test_single_region(self, red_4x4):
        labels, modes = MeanShift(2, 10.0).segment(_cie_lab(red_4x4))
        assert labels.shape == (4, 4)
        assert np.all(labels == 0)
        assert modes.shape == (1, 3)

    def test_two_regions(self, two_tone):
        labels, modes = MeanShift(2, 10.0).segment(_cie_lab(two_tone))
        assert modes.shape == (2, 3)
        assert np.all(labels[:, :4] == 0)
        assert np.all(labels[:, 4:] == 1)

    def test_disconnected_patches_are_separate_regions(self):
        image = np.zeros((3, 3, 3), dtype=np.uint8)
        image[0, 0] = (255, 255, 255)
        image[2, 2] = (255, 255, 255)
        labels, modes = MeanShift(1, 5.0).segment(_cie_lab(image))
        assert modes.shape[0] == 3
        assert labels[0, 0] != labels[2, 2]

    def test_diagonal_neighbours_join(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[0, 0] = (255, 255, 255)
        image[1, 1] = (255, 255, 255)
        labels, modes = MeanShift(1, 5.0).segment(_cie_lab(image))
        assert modes.shape[0] == 2
        assert labels[0, 0] == labels[1, 1]
        assert labels[0, 1] == labels[1, 0]

    def test_every_pixel_labelled(self, noisy_image):
        labels, modes = MeanShift(1, 4.0).segment(_cie_lab(noisy_image))
        assert labels.min() == 0
        assert labels.max() == modes.shape[0] - 1


class TestMeanShiftQuantize:
    def test_two_tone_colours(self, two_tone):
        result = mean_shift_quantize(two_tone, 2, 10.0)
        assert result.n_colours == 2
        got = {tuple(int(v) for v in np.rint(c * 255.0)) for c in result.colours}
        assert got == {(20, 40, 160), (240, 140, 20)}

    def test_empty_image(self):
        result = mean_shift_quantize(np.zeros((0, 0, 3), dtype=np.uint8), 2, 10.0)
        assert result.n_colours == 0

    @pytest.mark.parametrize("hs, hr", [(0, 10.0), (-1, 10.0), (4, 0.0), (4, -2.0)])
    def test_bad_bandwidths(self, two_tone, hs, hr):
        with pytest.raises(ValueError):
            mean_shift_quantize(two_tone, hs, hr)

    def test_small_spatial_bandwidth_rounds_up(self):
        assert MeanShift(0.2, 1.0).hs == 1
        assert MeanShift(2.6, 1.0).hs == 3
