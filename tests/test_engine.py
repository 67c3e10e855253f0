"""
End-to-end tests for the engine and compute_palette.
"""

import numpy as np
import pytest

from dominant_colours import (
    Algorithm,
    ComputeParams,
    DominantColoursEngine,
    compute_palette,
)

ALL_ALGORITHMS = [
    dict(algorithm="eigen"),
    dict(algorithm="kmeans", kmeans_seed=0),
    dict(algorithm="kmeans", kmeans_space="rgb", kmeans_seed=0),
    dict(algorithm="mean_shift", ms_spatial=1, ms_colour=5.0),
    dict(algorithm="sectored"),
    dict(algorithm="sectored", sectored_mode="levels", sectored_levels=3),
]


@pytest.fixture(scope="module")
def engine():
    return DominantColoursEngine()


class TestEngineCompute:
    """Every quantizer through the full pipeline"""

    @pytest.mark.parametrize("options", ALL_ALGORITHMS)
    def test_uniform_red(self, engine, red_4x4, options):
        params = ComputeParams(n_colours=1, **options)
        result = engine.compute(red_4x4, params)
        assert [(e.rgb, e.percentage) for e in result.palette] == [((255, 0, 0), 1.0)]
        assert result.palette[0].name == "red"
        assert result.palette[0].hex == "#FF0000"
        assert result.quantized.shape == (4, 4, 3)
        assert np.all(result.quantized == red_4x4)

    @pytest.mark.parametrize("options", ALL_ALGORITHMS)
    def test_shares_sum_to_one(self, engine, noisy_image, options):
        params = ComputeParams(n_colours=4, **options)
        result = engine.compute(noisy_image, params)
        assert 1 <= len(result.palette) <= 4
        assert sum(e.percentage for e in result.palette) == pytest.approx(1.0)
        shares = [e.percentage for e in result.palette]
        assert shares == sorted(shares, reverse=True)

    @pytest.mark.parametrize("options", ALL_ALGORITHMS)
    def test_empty_image(self, engine, options):
        image = np.zeros((0, 0, 3), dtype=np.uint8)
        result = engine.compute(image, ComputeParams(**options))
        assert result.palette == []
        assert result.quantized.shape == (0, 0, 3)

    def test_two_tone_halves(self, engine, two_tone):
        result = engine.compute(two_tone, ComputeParams(algorithm="eigen", n_colours=2))
        assert {e.rgb for e in result.palette} == {(20, 40, 160), (240, 140, 20)}
        assert [e.percentage for e in result.palette] == [0.5, 0.5]
        np.testing.assert_array_equal(result.quantized, two_tone)

    def test_zero_colours_means_one(self, engine, two_tone):
        result = engine.compute(two_tone, ComputeParams(n_colours=0))
        assert len(result.palette) == 1

    def test_unplanned_counts_truncated(self, engine, noisy_image):
        params = ComputeParams(algorithm="mean_shift", n_colours=3, ms_spatial=1, ms_colour=2.0)
        result = engine.compute(noisy_image, params)
        assert result.clusters.n_colours > 3
        assert len(result.palette) == 3

    def test_filters_applied(self, engine):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)
        params = ComputeParams(algorithm="eigen", n_colours=2, black_threshold=5.0)
        result = engine.compute(image, params)
        assert [(e.rgb, e.percentage) for e in result.palette] == [((255, 0, 0), 1.0)]

    def test_rgba_accepted(self, engine, red_4x4):
        rgba = np.concatenate([red_4x4, np.zeros((4, 4, 1), dtype=np.uint8)], axis=-1)
        result = engine.compute(rgba, ComputeParams(n_colours=1))
        assert result.palette[0].rgb == (255, 0, 0)
        assert result.quantized.shape == (4, 4, 3)

    def test_without_names(self, red_4x4):
        result = DominantColoursEngine(name_table=None).compute(red_4x4, ComputeParams(n_colours=1))
        assert result.palette[0].name is None


class TestValidation:
    """Bad input is rejected before any pixel work"""

    @pytest.mark.parametrize(
        "image",
        [
            np.zeros((4, 4, 3), dtype=np.float32),
            np.zeros((4, 4), dtype=np.uint8),
            np.zeros((4, 4, 2), dtype=np.uint8),
        ],
    )
    def test_bad_image(self, engine, image):
        with pytest.raises(TypeError):
            engine.compute(image, ComputeParams())

    @pytest.mark.parametrize(
        "overrides",
        [
            dict(algorithm="median_cut"),
            dict(kmeans_space="hsv"),
            dict(ms_spatial=0),
            dict(ms_colour=-1.0),
            dict(sectored_mode="bands"),
            dict(sectored_levels=0),
            dict(sort_by="size"),
            dict(regroup_distance=-1.0),
            dict(black_threshold=-0.5),
            dict(min_percentage=1.5),
        ],
    )
    def test_bad_params(self, engine, red_4x4, overrides):
        with pytest.raises(ValueError):
            engine.compute(red_4x4, ComputeParams(**overrides))

    def test_validate_normalises(self):
        params = ComputeParams(algorithm="kmeans", n_colours=-3).validate()
        assert params.algorithm is Algorithm.KMEANS
        assert params.n_colours == 1


class TestComputePalette:
    def test_overrides(self, two_tone):
        result = compute_palette(two_tone, algorithm="kmeans", n_colours=2, kmeans_seed=0)
        assert len(result.palette) == 2
        assert sum(e.percentage for e in result.palette) == pytest.approx(1.0)

    def test_overrides_on_params(self, two_tone):
        base = ComputeParams(algorithm="eigen", n_colours=2)
        result = compute_palette(two_tone, base, n_colours=1, sort_by="hex")
        assert len(result.palette) == 1

    def test_custom_name_table(self, red_4x4):
        result = compute_palette(red_4x4, name_table=[(255, 0, 0, "signal")], n_colours=1)
        assert result.palette[0].name == "signal"
