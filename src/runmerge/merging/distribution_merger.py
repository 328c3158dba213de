"""
DistributionMerger implementation.

Combines same-named distributions from every input into one distribution
whose bins hold the unweighted mean across inputs and whose errors hold the
spread of the per-input bin contents.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from runmerge.model.objects import Distribution

logger = logging.getLogger(__name__)


class DistributionMerger:
    """
    Per-bin mean and standard deviation across input copies of a distribution.

    For every bin, boundary bins included, with c_i the contents of the n
    copies present:

        mean   = sum(c_i) / n
        stddev = sqrt(sum(c_i**2) / n - mean**2)

    n counts the inputs that actually hold the distribution, not the number
    of files. The population (biased) estimator is used. When floating point
    cancellation makes the radicand negative the error is NaN and is left as
    such. Bins no copy contributes to keep their reset value of zero.
    """

    def merge(
        self,
        reference: Distribution,
        copies: Sequence[Optional[Distribution]],
    ) -> Distribution:
        """
        Merge the copies of one distribution.

        Args:
            reference: The reference input's copy, source of geometry and metadata
            copies: One entry per input, None where the input lacks the object

        Returns:
            New distribution with merged contents and errors
        """
        merged = reference.empty_like()
        shape = merged.contents.shape

        total = np.zeros(shape, dtype=np.float64)
        total_sq = np.zeros(shape, dtype=np.float64)
        counts = np.zeros(shape, dtype=np.int64)

        for copy in copies:
            if copy is None:
                continue
            if copy.ndim != reference.ndim:
                logger.warning(
                    f"Histogram {reference.name} has {copy.ndim} dimensions in one input "
                    f"but {reference.ndim} in the reference, skipping that copy"
                )
                continue
            if copy.contents.shape != shape:
                logger.debug(
                    f"Histogram {reference.name} shape {copy.contents.shape} differs from "
                    f"reference {shape}, reading bins positionally"
                )

            region = tuple(slice(0, min(a, b)) for a, b in zip(shape, copy.contents.shape))
            values = copy.contents[region]
            total[region] += values
            total_sq[region] += values * values
            counts[region] += 1

        filled = counts > 0
        n = counts[filled]

        with np.errstate(invalid="ignore"):
            mean = total[filled] / n
            stddev = np.sqrt(total_sq[filled] / n - mean * mean)

        merged.contents[filled] = mean
        merged.errors[filled] = stddev

        n_nan = int(np.count_nonzero(np.isnan(stddev)))
        if n_nan:
            logger.debug(f"Histogram {reference.name}: {n_nan} bins with NaN error from cancellation")

        return merged

    @staticmethod
    def merge_bin(values: Sequence[float]) -> Tuple[float, float]:
        """
        Mean and population standard deviation of one bin's contents.

        Returns (0.0, 0.0) when no input contributes to the bin.
        """
        if len(values) == 0:
            return 0.0, 0.0
        values = np.asarray(values, dtype=np.float64)
        n = len(values)
        mean = values.sum() / n
        with np.errstate(invalid="ignore"):
            stddev = np.sqrt(np.dot(values, values) / n - mean * mean)
        return float(mean), float(stddev)
