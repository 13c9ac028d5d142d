"""Small descriptive-statistics helpers shared by the analyzers."""

import math
import statistics
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def population_stddev(values: Sequence[float]) -> float:
    """Standard deviation dividing by N, 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def inverted_spread(values: Sequence[float]) -> float:
    """``max(0, 100 - stddev)``: 100 for perfectly steady scores."""
    return max(0.0, 100.0 - population_stddev(values))


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation over the first ``min(len(x), len(y))`` index-paired values.

    Returns 0.0 when fewer than two pairs exist or either series is constant.
    """
    n = min(len(x), len(y))
    if n < 2:
        return 0.0

    xs = x[:n]
    ys = y[:n]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    numerator = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for xi, yi in zip(xs, ys):
        dx = xi - mean_x
        dy = yi - mean_y
        numerator += dx * dy
        denom_x += dx * dx
        denom_y += dy * dy

    denominator = math.sqrt(denom_x * denom_y)
    if denominator == 0:
        return 0.0
    return clamp(numerator / denominator, -1.0, 1.0)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
