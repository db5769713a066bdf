"""A bucketed histogram for latency measurements."""

from __future__ import annotations

import math
from typing import List

_BUCKET_LIMIT = (
    1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 12, 14, 16, 18, 20, 25, 30, 35, 40, 45,
    50, 60, 70, 80, 90, 100, 120, 140, 160, 180, 200, 250, 300, 350, 400, 450,
    500, 600, 700, 800, 900, 1000, 1200, 1400, 1600, 1800, 2000, 2500, 3000,
    3500, 4000, 4500, 5000, 6000, 7000, 8000, 9000, 10000, 12000, 14000,
    16000, 18000, 20000, 25000, 30000, 35000, 40000, 45000, 50000, 60000,
    70000, 80000, 90000, 100000, 120000, 140000, 160000, 180000, 200000,
    250000, 300000, 350000, 400000, 450000, 500000, 600000, 700000, 800000,
    900000, 1000000, 1200000, 1400000, 1600000, 1800000, 2000000, 2500000,
    3000000, 3500000, 4000000, 4500000, 5000000, 6000000, 7000000, 8000000,
    9000000, 10000000, 12000000, 14000000, 16000000, 18000000, 20000000,
    25000000, 30000000, 35000000, 40000000, 45000000, 50000000, 60000000,
    70000000, 80000000, 90000000, 100000000, 120000000, 140000000, 160000000,
    180000000, 200000000, 250000000, 300000000, 350000000, 400000000,
    450000000, 500000000, 600000000, 700000000, 800000000, 900000000,
    1000000000, 1200000000, 1400000000, 1600000000, 1800000000, 2000000000,
    2500000000.0, 3000000000.0, 3500000000.0, 4000000000.0, 4500000000.0,
    5000000000.0, 6000000000.0, 7000000000.0, 8000000000.0, 9000000000.0,
    1e200,
)
_NUM_BUCKETS = len(_BUCKET_LIMIT)


class Histogram:
    """Counts values into fixed buckets and reports summary statistics."""

    def __init__(self):
        self.clear()

    def clear(self) -> None:
        """Forget every value added so far."""
        self._min = float(_BUCKET_LIMIT[-1])
        self._max = 0.0
        self._num = 0.0
        self._sum = 0.0
        self._sum_squares = 0.0
        self._buckets: List[float] = [0.0] * _NUM_BUCKETS

    def add(self, value: float) -> None:
        """Record one value."""
        b = 0
        while b < _NUM_BUCKETS - 1 and _BUCKET_LIMIT[b] <= value:
            b += 1
        self._buckets[b] += 1.0
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        self._num += 1
        self._sum += value
        self._sum_squares += value * value

    def median(self) -> float:
        """Return the estimated 50th percentile."""
        return self.percentile(50.0)

    def percentile(self, p: float) -> float:
        """Estimate the ``p``-th percentile by interpolating within a bucket."""
        threshold = self._num * (p / 100.0)
        total = 0.0
        for b, count in enumerate(self._buckets):
            total += count
            if total >= threshold:
                left_point = 0.0 if b == 0 else float(_BUCKET_LIMIT[b - 1])
                right_point = float(_BUCKET_LIMIT[b])
                left_sum = total - count
                span = total - left_sum
                pos = (threshold - left_sum) / span if span else math.nan
                r = left_point + (right_point - left_point) * pos
                if r < self._min:
                    r = self._min
                if r > self._max:
                    r = self._max
                return r
        return self._max

    def average(self) -> float:
        """Return the mean of the recorded values, or 0 when empty."""
        if self._num == 0.0:
            return 0.0
        return self._sum / self._num

    def standard_deviation(self) -> float:
        """Return the population standard deviation, or 0 when empty."""
        if self._num == 0.0:
            return 0.0
        variance = (self._sum_squares * self._num - self._sum * self._sum) / (
            self._num * self._num
        )
        return math.sqrt(variance) if variance >= 0 else math.nan

    def __str__(self) -> str:
        lines = [
            "Count: %.0f  Average: %.4f  StdDev: %.2f\n"
            % (self._num, self.average(), self.standard_deviation()),
            "Min: %.4f  Median: %.4f  Max: %.4f\n"
            % (0.0 if self._num == 0.0 else self._min, self.median(), self._max),
            "------------------------------------------------------\n",
        ]
        if self._num:
            mult = 100.0 / self._num
            running = 0.0
            for b, count in enumerate(self._buckets):
                if count <= 0.0:
                    continue
                running += count
                left = 0.0 if b == 0 else float(_BUCKET_LIMIT[b - 1])
                row = "[ %7.0f, %7.0f ) %7.0f %7.3f%% %7.3f%% " % (
                    left, float(_BUCKET_LIMIT[b]), count,
                    mult * count, mult * running,
                )
                marks = int(20 * (count / self._num) + 0.5)
                lines.append(row + "#" * marks + "\n")
        return "".join(lines)