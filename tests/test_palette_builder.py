"""
Unit tests for palette passes and the builder.
"""

import numpy as np
import pytest

from dominant_colours.constants import PALETTE_STRIP_HEIGHT, PALETTE_STRIP_WIDTH
from dominant_colours.core_types import PaletteEntry, QuantizationResult
from dominant_colours.name_data import DEFAULT_NAME_TABLE, NameIndex, build_name_index
from dominant_colours.palette_builder import (
    PaletteBuilder,
    attach_names,
    count_entries,
    filter_grays,
    filter_percentage,
    merge_entries,
    regroup_entries,
    render_palette_strip,
    render_quantized,
    sort_palette,
    truncate_entries,
)


def _entry(rgb, percentage, count=None, cluster_ids=None):
    return PaletteEntry(
        rgb=rgb,
        count=count if count is not None else int(round(percentage * 100)),
        percentage=percentage,
        cluster_ids=list(cluster_ids or []),
    )


@pytest.fixture
def checker_result():
    """2x2 labels over three clusters; cluster 2 unused."""
    labels = np.array([[0, 1], [1, 1]], dtype=np.int32)
    colours = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0], [0.0, 1.0, 0.0]])
    return QuantizationResult(labels=labels, colours=colours)


class TestCountEntries:
    """Counting, empty clusters and exact-RGB merges"""

    def test_counts_and_shares(self, checker_result):
        palette = count_entries(checker_result)
        assert [e.rgb for e in palette] == [(255, 0, 0), (0, 0, 255)]
        assert [e.count for e in palette] == [1, 3]
        assert [e.percentage for e in palette] == [0.25, 0.75]
        assert [e.cluster_ids for e in palette] == [[0], [1]]

    def test_same_rgb_clusters_merge(self):
        labels = np.array([[0, 1, 2]], dtype=np.int32)
        colours = np.array([[0.5, 0.5, 0.5], [0.5001, 0.5, 0.5], [0.0, 0.0, 0.0]])
        palette = count_entries(QuantizationResult(labels=labels, colours=colours))
        assert len(palette) == 2
        assert palette[0].count == 2
        assert palette[0].cluster_ids == [0, 1]
        assert sum(e.percentage for e in palette) == pytest.approx(1.0)

    def test_empty(self):
        empty = QuantizationResult(
            labels=np.zeros((0, 0), dtype=np.int32), colours=np.zeros((0, 3))
        )
        assert count_entries(empty) == []


class TestEntryFields:
    def test_derived_fields(self):
        entry = _entry((255, 0, 0), 1.0)
        assert entry.hex == "#FF0000"
        assert entry.hsl_h == 0.0 and entry.hsl_s == 1.0 and entry.hsl_l == 0.5
        assert entry.lch_c > 0.8
        assert entry.distance_gray > 30.0

    def test_black_distances(self):
        entry = _entry((0, 0, 0), 1.0)
        assert entry.distance_black == pytest.approx(0.0, abs=1e-9)
        assert entry.distance_white == pytest.approx(100.0, abs=1e-2)


class TestRegroup:
    """Closest-pair merging under a CIEDE2000 threshold"""

    def test_close_pair_merges(self):
        palette = [
            _entry((10, 10, 10), 0.4, cluster_ids=[0]),
            _entry((12, 12, 12), 0.3, cluster_ids=[1]),
            _entry((250, 30, 30), 0.3, cluster_ids=[2]),
        ]
        out = regroup_entries(palette, 10.0)
        assert len(out) == 2
        merged = out[0]
        assert merged.percentage == pytest.approx(0.7)
        assert merged.count == 70
        assert merged.cluster_ids == [0, 1]
        assert all(abs(v - 11) <= 1 for v in merged.rgb)
        assert out[1].rgb == (250, 30, 30)

    def test_threshold_zero_disables(self):
        palette = [_entry((10, 10, 10), 0.5), _entry((10, 10, 11), 0.5)]
        assert len(regroup_entries(palette, 0.0)) == 2

    def test_far_colours_stay(self):
        palette = [_entry((255, 0, 0), 0.5), _entry((0, 0, 255), 0.5)]
        assert len(regroup_entries(palette, 10.0)) == 2

    def test_merge_is_share_weighted(self):
        merged = merge_entries(_entry((0, 0, 0), 0.0), _entry((200, 100, 50), 0.5))
        assert merged.rgb == (200, 100, 50)
        assert merged.name is None


class TestTruncateAndFilters:
    def test_truncate_keeps_most_used(self):
        palette = [_entry((255, 0, 0), 0.2), _entry((0, 255, 0), 0.5), _entry((0, 0, 255), 0.3)]
        out = truncate_entries(palette, 2)
        assert [e.rgb for e in out] == [(0, 255, 0), (0, 0, 255)]
        assert sum(e.percentage for e in out) == pytest.approx(1.0)

    def test_truncate_noop_when_small(self):
        palette = [_entry((255, 0, 0), 1.0)]
        assert truncate_entries(palette, 5) == palette

    def test_filter_grays(self):
        palette = [
            _entry((0, 0, 0), 0.25),
            _entry((255, 255, 255), 0.25),
            _entry((128, 128, 128), 0.25),
            _entry((255, 0, 0), 0.25),
        ]
        out = filter_grays(palette, black=5.0, white=5.0, gray=5.0)
        assert [e.rgb for e in out] == [(255, 0, 0)]
        assert out[0].percentage == pytest.approx(1.0)

    def test_filter_grays_disabled(self):
        palette = [_entry((0, 0, 0), 0.5), _entry((255, 255, 255), 0.5)]
        out = filter_grays(palette)
        assert len(out) == 2
        assert [e.percentage for e in out] == [0.5, 0.5]

    def test_filter_percentage(self):
        palette = [_entry((255, 0, 0), 0.9), _entry((0, 0, 255), 0.1)]
        out = filter_percentage(palette, 0.2)
        assert [e.rgb for e in out] == [(255, 0, 0)]
        assert out[0].percentage == pytest.approx(1.0)
        assert len(filter_percentage(palette, 0.0)) == 2

    def test_filter_everything(self):
        palette = [_entry((0, 0, 0), 1.0)]
        assert filter_grays(palette, black=5.0) == []


class TestNames:
    """Exact names and nearest-name fallback"""

    def test_exact_and_nearest(self):
        index = build_name_index()
        assert index.name_of((255, 0, 0)) == "red"
        assert index.name_of((250, 0, 0)) == "nearest: red"
        assert index.name_of((1, 1, 1)) == "nearest: black"

    def test_hex_lookup(self):
        index = build_name_index()
        assert index.name_of("#F00") == "red"
        assert index.name_of("#0000ff") == "blue"
        with pytest.raises(ValueError):
            index.name_of("0000ff")

    def test_attach_names(self):
        palette = attach_names([_entry((0, 0, 255), 1.0)], build_name_index())
        assert palette[0].name == "blue"

    def test_empty_table(self):
        index = NameIndex([])
        assert len(index) == 0
        assert index.name_of((1, 2, 3)) is None
        palette = attach_names([_entry((1, 2, 3), 1.0)], index)
        assert palette[0].name is None

    def test_first_duplicate_wins(self):
        index = NameIndex([(1, 2, 3, "first"), (1, 2, 3, "second")])
        assert index.name_of((1, 2, 3)) == "first"

    def test_default_table_has_basics(self):
        names = {record.name for record in DEFAULT_NAME_TABLE}
        assert {"black", "white", "red", "green", "blue"} <= names


class TestSort:
    @pytest.fixture
    def palette(self):
        return [
            _entry((0, 0, 255), 0.2),
            _entry((255, 0, 0), 0.5),
            _entry((0, 255, 0), 0.3),
        ]

    def test_percentage_descending(self, palette):
        assert [e.percentage for e in sort_palette(palette)] == [0.5, 0.3, 0.2]

    def test_hue_ascending(self, palette):
        assert [e.rgb for e in sort_palette(palette, "hue_hsl")] == [
            (255, 0, 0),
            (0, 255, 0),
            (0, 0, 255),
        ]

    def test_hex_ascending(self, palette):
        assert [e.hex for e in sort_palette(palette, "hex")] == ["#0000FF", "#00FF00", "#FF0000"]

    def test_stable_on_ties(self):
        a = _entry((255, 0, 0), 0.5)
        b = _entry((0, 0, 255), 0.5)
        assert sort_palette([a, b]) == [a, b]
        assert sort_palette([b, a]) == [b, a]

    @pytest.mark.parametrize(
        "key",
        ["percentage", "hue_hsl", "hue_lch", "lightness", "chroma", "saturation", "hex", "hue_luma"],
    )
    def test_every_key(self, palette, key):
        assert len(sort_palette(palette, key)) == 3

    def test_unknown_key(self, palette):
        with pytest.raises(ValueError):
            sort_palette(palette, "size")


class TestRender:
    def test_lut_from_palette(self, checker_result):
        palette = [_entry((10, 20, 30), 0.25, cluster_ids=[0])]
        image = render_quantized(checker_result, palette)
        assert image.shape == (2, 2, 3)
        assert image.dtype == np.uint8
        assert tuple(image[0, 0]) == (10, 20, 30)
        assert tuple(image[1, 1]) == (0, 0, 255)

    def test_strip_bands_follow_shares(self):
        palette = [_entry((255, 0, 0), 0.75), _entry((0, 0, 255), 0.25)]
        strip = render_palette_strip(palette, width=8, height=2)
        assert strip.shape == (2, 8, 3)
        assert strip.dtype == np.uint8
        assert np.all(strip[:, :6] == (255, 0, 0))
        assert np.all(strip[:, 6:] == (0, 0, 255))

    def test_strip_covers_full_width(self):
        palette = [_entry((v, v, v), 1 / 3) for v in (10, 20, 30)]
        strip = render_palette_strip(palette, width=10, height=1)
        assert [int(v) for v in strip[0, :, 0]] == [10] * 3 + [20] * 4 + [30] * 3

    def test_strip_empty_palette_is_black(self):
        strip = render_palette_strip([], width=4, height=3)
        assert strip.shape == (3, 4, 3)
        assert not strip.any()

    def test_strip_default_size(self):
        strip = render_palette_strip([_entry((1, 2, 3), 1.0)])
        assert strip.shape == (PALETTE_STRIP_HEIGHT, PALETTE_STRIP_WIDTH, 3)


class TestPaletteBuilder:
    def test_build_chain(self, checker_result):
        builder = PaletteBuilder(max_colours=1, name_index=build_name_index())
        palette = builder.build(checker_result)
        assert len(palette) == 1
        assert palette[0].rgb == (0, 0, 255)
        assert palette[0].percentage == pytest.approx(1.0)
        assert palette[0].name == "blue"

    def test_defaults_keep_everything(self, checker_result):
        palette = PaletteBuilder().build(checker_result)
        assert [e.rgb for e in palette] == [(0, 0, 255), (255, 0, 0)]
        assert all(e.name is None for e in palette)
        assert sum(e.percentage for e in palette) == pytest.approx(1.0)

    def test_filters_run_before_truncation(self):
        labels = np.array([[0, 0, 0, 0, 1, 1, 1, 2, 2, 3]], dtype=np.int32)
        colours = np.array(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        )
        result = QuantizationResult(labels=labels, colours=colours)
        palette = PaletteBuilder(max_colours=2, black_threshold=5.0).build(result)
        assert [e.rgb for e in palette] == [(255, 0, 0), (0, 255, 0)]
        assert [e.percentage for e in palette] == pytest.approx([0.6, 0.4])
