"""Running statistics for benchmark iterations.

Scores are accumulated with Welford's online algorithm: count, mean and
the sum of squared deviations from the mean are updated in constant
time and space per value, without keeping the samples and without the
precision loss of a naive sum / sum-of-squares.

References:
    Welford, B. P. (1962). "Note on a method for calculating corrected
        sums of squares and products." Technometrics 4(3): 419-420.
"""

from __future__ import annotations

import math


class RunningStats:
    """Online accumulator of count, mean and standard error of the mean.

    With fewer than two values the variance, standard deviation and
    standard error are all 0.0.
    """

    def __init__(self) -> None:
        self.count = 0
        self._mean = 0.0
        self._m2 = 0.0  # sum of squared deviations from the running mean

    def add_value(self, value: float) -> None:
        """Add one value to the accumulator."""
        self.count += 1
        delta = value - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (value - self._mean)

    def mean(self) -> float:
        """Mean of all values added so far (0.0 when empty)."""
        return self._mean

    def variance(self) -> float:
        """Sample variance (n - 1 denominator)."""
        if self.count < 2:
            return 0.0
        return max(self._m2, 0.0) / (self.count - 1)

    def stdev(self) -> float:
        """Sample standard deviation."""
        return math.sqrt(self.variance())

    def standard_error_of_mean(self) -> float:
        """Sample standard deviation divided by the square root of count."""
        if self.count < 2:
            return 0.0
        return self.stdev() / math.sqrt(self.count)

    def __repr__(self) -> str:
        return (
            f"RunningStats(count={self.count}, mean={self._mean!r}, "
            f"sem={self.standard_error_of_mean()!r})"
        )
