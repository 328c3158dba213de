"""ScalarMerger implementation."""

import logging
from typing import Optional, Sequence

from runmerge.model.objects import Scalar

logger = logging.getLogger(__name__)


class ScalarMerger:
    """
    Sums same-named scalar parameters across inputs.

    Every value is widened to float before summing and the result is always
    a float, whatever numeric type the inputs stored. Missing inputs add 0.
    Whether a parameter is a count or a rate is not distinguished.
    """

    def merge(self, name: str, scalars: Sequence[Optional[Scalar]]) -> Scalar:
        total_value = 0.0
        attrs = {}
        for scalar in scalars:
            if scalar is None:
                continue
            if not attrs:
                attrs = dict(scalar.attrs)
            total_value += scalar.value

        logger.debug(f"Parameter {name} summed to {total_value}")
        return Scalar(name=name, value=total_value, attrs=attrs)
