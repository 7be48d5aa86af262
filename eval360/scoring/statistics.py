"""
Statistics Module
eval360/scoring/statistics.py

Descriptive statistics used at question, subdimension, category and
evaluator-type level.

    mean, median, population standard deviation, range  — rounded half-up to 2 dp
    mode   — most frequent value; ties go to the smallest tied value
    consensus index = 1 − min(1, σ / σ_max), σ_max = 2 on a 1-5 scale
"""

import math
from collections import Counter
from typing import Dict, List, Sequence

from eval360.models.aggregation import Statistics
from eval360.models.test_definition import Scale
from eval360.scoring.utils import round_half_up

DEFAULT_MAX_STD_DEV = 2.0


def compute(values: Sequence[float]) -> Statistics:
    """
    Compute descriptive statistics. Empty input returns all zeros.

    Examples:
        >>> s = compute([1, 2, 3, 4, 5])
        >>> (s.mean, s.median, s.standard_deviation, s.range, s.count)
        (3.0, 3.0, 1.41, 4.0, 5)
    """
    if not values:
        return Statistics()

    ordered = sorted(values)
    n = len(ordered)

    mean = sum(ordered) / n
    if n % 2 == 0:
        median = (ordered[n // 2 - 1] + ordered[n // 2]) / 2
    else:
        median = ordered[n // 2]

    return Statistics(
        mean=round_half_up(mean),
        median=round_half_up(median),
        mode=float(_mode(ordered)),
        standard_deviation=round_half_up(_population_std_dev(ordered, mean)),
        range=round_half_up(ordered[-1] - ordered[0]),
        count=n,
    )


def _mode(ordered: List[float]) -> float:
    # Counter preserves first-seen order, and the input is sorted ascending,
    # so max() returns the smallest of the tied values.
    frequency = Counter(ordered)
    return max(frequency, key=lambda value: frequency[value])


def _population_std_dev(values: Sequence[float], mean: float) -> float:
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def standard_deviation(values: Sequence[float]) -> float:
    """Unrounded population standard deviation (0.0 for empty input)."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return _population_std_dev(values, mean)


def consensus_index(values: Sequence[float], max_std_dev: float = DEFAULT_MAX_STD_DEV) -> float:
    """
    Rater agreement in [0, 1]; 1 means every rater gave the same answer.

    Fewer than two values carry no agreement signal and return 0.
    """
    if len(values) < 2:
        return 0.0
    sd = standard_deviation(values)
    index = max(0.0, 1 - min(1.0, sd / max_std_dev))
    return round_half_up(index)


def distribution(values: Sequence[float], scale: Scale) -> Dict[str, int]:
    """Count answers per integer scale point; values between points are not counted."""
    points = range(math.ceil(scale.min), math.floor(scale.max) + 1)
    counts = {str(point): 0 for point in points}
    for value in values:
        if float(value).is_integer() and str(int(value)) in counts:
            counts[str(int(value))] += 1
    return counts
