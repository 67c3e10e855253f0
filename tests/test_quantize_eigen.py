"""
Unit tests for the eigenvector split quantizer.
"""

import numpy as np
import pytest

from dominant_colours.colour_convert import gamma_decode, gamma_encode, u8_to_unit
from dominant_colours.quantize import ColourNode, eigen_split_quantize


def _colour_set(result):
    return {tuple(int(v) for v in np.rint(c * 255.0)) for c in result.colours}


class TestEigenSplit:
    """Tree growth, early stop and colour means"""

    def test_single_colour_stops_early(self, red_4x4):
        result = eigen_split_quantize(red_4x4, 4)
        assert result.n_colours == 1
        assert result.labels.shape == (4, 4)
        assert np.all(result.labels == 0)
        np.testing.assert_allclose(result.colours[0], [1.0, 0.0, 0.0], atol=1e-9)

    def test_one_colour_is_linear_mean(self, two_tone):
        result = eigen_split_quantize(two_tone, 1)
        expected = gamma_encode(gamma_decode(u8_to_unit(two_tone.reshape(-1, 3))).mean(axis=0))
        assert result.n_colours == 1
        np.testing.assert_allclose(result.colours[0], expected, atol=1e-9)

    def test_two_tone_splits_by_half(self, two_tone):
        result = eigen_split_quantize(two_tone, 2)
        assert result.n_colours == 2
        left = np.unique(result.labels[:, :4])
        right = np.unique(result.labels[:, 4:])
        assert left.size == 1 and right.size == 1
        assert left[0] != right[0]
        assert _colour_set(result) == {(20, 40, 160), (240, 140, 20)}

    def test_four_colours_recovered(self, four_colour_2x2):
        result = eigen_split_quantize(four_colour_2x2, 4)
        assert result.n_colours == 4
        assert np.unique(result.labels).size == 4
        assert _colour_set(result) == {
            (255, 0, 0),
            (0, 255, 0),
            (0, 0, 255),
            (255, 255, 0),
        }

    def test_labels_index_colours(self, noisy_image):
        result = eigen_split_quantize(noisy_image, 6)
        assert result.n_colours == 6
        assert result.labels.dtype == np.int32
        assert result.labels.min() == 0
        assert result.labels.max() == result.n_colours - 1
        assert set(np.unique(result.labels)) == set(range(result.n_colours))

    def test_deterministic(self, noisy_image):
        a = eigen_split_quantize(noisy_image, 5)
        b = eigen_split_quantize(noisy_image, 5)
        np.testing.assert_array_equal(a.labels, b.labels)
        np.testing.assert_array_equal(a.colours, b.colours)

    def test_empty_image(self):
        result = eigen_split_quantize(np.zeros((0, 0, 3), dtype=np.uint8), 3)
        assert result.n_colours == 0
        assert result.labels.shape == (0, 0)

    def test_rejects_float_image(self):
        with pytest.raises(TypeError):
            eigen_split_quantize(np.zeros((2, 2, 3), dtype=np.float64), 2)


class TestColourNode:
    def test_principal_axis(self):
        points = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
        centred = points - points.mean(axis=0)
        node = ColourNode(class_id=0, mean=points.mean(axis=0), scatter=centred.T @ centred, count=2)
        assert node.eigenvalue == pytest.approx(50.0)
        assert abs(node.eigenvector[0]) == pytest.approx(1.0)
        assert node.is_leaf
        assert list(node.leaves()) == [node]
