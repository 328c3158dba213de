"""
Tests for DistributionMerger implementation.
"""

import logging
import math

import numpy as np
import pytest

from runmerge.merging.distribution_merger import DistributionMerger
from runmerge.model.objects import Distribution


def dist(contents, errors=None, name="h", attrs=None):
    contents = np.asarray(contents, dtype=np.float64)
    if errors is None:
        errors = np.full(contents.shape, 0.5)
    return Distribution(name=name, contents=contents, errors=errors, attrs=attrs or {})


class TestDistributionMerger:
    """Test DistributionMerger functionality."""

    @pytest.fixture
    def merger(self):
        return DistributionMerger()

    def test_mean_and_population_stddev(self, merger):
        copies = [dist([0.0, 2.0, 0.0]), dist([0.0, 4.0, 0.0]), dist([0.0, 6.0, 0.0])]

        merged = merger.merge(copies[0], copies)

        assert merged.contents[1] == pytest.approx(4.0)
        assert merged.errors[1] == pytest.approx(math.sqrt(8.0 / 3.0))
        assert merged.errors[1] == pytest.approx(1.633, abs=1e-3)

    def test_boundary_bins_are_merged(self, merger):
        copies = [dist([1.0, 0.0, 0.0, 3.0]), dist([3.0, 0.0, 0.0, 5.0])]

        merged = merger.merge(copies[0], copies)

        np.testing.assert_allclose(merged.contents, [2.0, 0.0, 0.0, 4.0])
        np.testing.assert_allclose(merged.errors, [1.0, 0.0, 0.0, 1.0])

    def test_missing_copies_are_excluded_from_n(self, merger):
        reference = dist([2.0, 2.0])
        copies = [reference, None, dist([4.0, 4.0])]

        merged = merger.merge(reference, copies)

        np.testing.assert_allclose(merged.contents, [3.0, 3.0])
        np.testing.assert_allclose(merged.errors, [1.0, 1.0])

    def test_single_input_reproduces_contents(self, merger):
        reference = dist([[1.5, 2.0, 7.0], [0.0, 3.25, 9.0]], errors=np.ones((2, 3)))

        merged = merger.merge(reference, [reference])

        np.testing.assert_array_equal(merged.contents, reference.contents)
        np.testing.assert_array_equal(merged.errors, np.zeros((2, 3)))

    def test_three_dimensional(self, merger):
        a = dist(np.ones((3, 4, 5)))
        b = dist(np.full((3, 4, 5), 3.0))

        merged = merger.merge(a, [a, b])

        np.testing.assert_allclose(merged.contents, np.full((3, 4, 5), 2.0))
        np.testing.assert_allclose(merged.errors, np.ones((3, 4, 5)))

    def test_geometry_and_metadata_from_reference(self, merger):
        reference = dist([1.0, 1.0, 1.0], attrs={"title": "ref", "x_edges": [0.0, 1.0]})
        other = dist([3.0, 3.0, 3.0], attrs={"title": "other"})

        merged = merger.merge(reference, [reference, other])

        assert merged.contents.shape == (3,)
        assert merged.attrs["title"] == "ref"
        assert merged.name == reference.name
        assert reference.contents[0] == 1.0

    def test_mismatched_geometry_read_positionally(self, merger):
        reference = dist([1.0, 1.0, 1.0, 1.0])
        shorter = dist([3.0, 3.0])

        merged = merger.merge(reference, [reference, shorter])

        np.testing.assert_allclose(merged.contents, [2.0, 2.0, 1.0, 1.0])
        np.testing.assert_allclose(merged.errors, [1.0, 1.0, 0.0, 0.0])

    def test_mismatched_dimensionality_skipped(self, merger, caplog):
        reference = dist([1.0, 1.0, 1.0])
        flat = dist(np.ones((3, 3)))

        with caplog.at_level(logging.WARNING):
            merged = merger.merge(reference, [reference, flat])

        np.testing.assert_allclose(merged.contents, [1.0, 1.0, 1.0])
        assert "dimensions" in caplog.text

    def test_no_copies_leaves_reset_bins(self, merger):
        reference = dist([5.0, 5.0])

        merged = merger.merge(reference, [None, None])

        np.testing.assert_array_equal(merged.contents, [0.0, 0.0])
        np.testing.assert_array_equal(merged.errors, [0.0, 0.0])

    def test_negative_radicand_gives_nan(self, merger):
        copies = [dist([0.1])] * 3

        merged = merger.merge(copies[0], copies)

        assert merged.contents[0] == pytest.approx(0.1)
        assert np.isnan(merged.errors[0])


class TestMergeBin:
    """Test the single-bin helper."""

    def test_values(self):
        mean, stddev = DistributionMerger.merge_bin([2.0, 4.0, 6.0])
        assert mean == pytest.approx(4.0)
        assert stddev == pytest.approx(1.63299, abs=1e-5)

    def test_empty(self):
        assert DistributionMerger.merge_bin([]) == (0.0, 0.0)

    def test_single_value_has_zero_spread(self):
        assert DistributionMerger.merge_bin([0.1]) == (0.1, 0.0)

    def test_rounding_below_zero_is_not_clamped(self):
        mean, stddev = DistributionMerger.merge_bin([0.1] * 3)
        assert mean == pytest.approx(0.1)
        assert math.isnan(stddev)

    def test_agrees_with_array_merge(self):
        values = [1.25, 7.5, 3.0, 0.0]
        copies = [dist([v]) for v in values]

        merged = DistributionMerger().merge(copies[0], copies)

        mean, stddev = DistributionMerger.merge_bin(values)
        assert merged.contents[0] == pytest.approx(mean)
        assert merged.errors[0] == pytest.approx(stddev)
