"""Tests for ScalarMerger."""

import pytest

from runmerge.merging.scalar_merger import ScalarMerger
from runmerge.model.objects import Scalar


def test_sum_with_missing_input():
    scalars = [Scalar("N", 3), Scalar("N", 5), None, Scalar("N", 2)]

    merged = ScalarMerger().merge("N", scalars)

    assert merged.name == "N"
    assert merged.value == 10.0
    assert isinstance(merged.value, float)


def test_mixed_numeric_types_widen_to_float():
    merged = ScalarMerger().merge("w", [Scalar("w", 1), Scalar("w", 0.25), Scalar("w", True)])
    assert merged.value == pytest.approx(2.25)


def test_all_missing_is_zero():
    assert ScalarMerger().merge("N", [None, None]).value == 0.0


def test_attrs_from_first_present():
    merged = ScalarMerger().merge("N", [None, Scalar("N", 1, attrs={"unit": "events"})])
    assert merged.attrs == {"unit": "events"}
