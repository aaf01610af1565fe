"""
Statistics primitives shared by the aggregation, trend and cohort layers.
Pure functions over ordered numeric sequences; short input yields neutral values.
"""

import numpy as np
from typing import List, Optional, Sequence


class StatisticsError(Exception):
    """Raised when statistics input is not numeric."""
    pass


def _as_array(values: Sequence[float]) -> np.ndarray:
    try:
        return np.asarray(list(values), dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise StatisticsError(f"Non-numeric values in series: {e}")


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean.

    Args:
        values: Numeric sequence

    Returns:
        Mean value, or 0.0 for empty input
    """
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


def variance(values: Sequence[float]) -> float:
    """Population variance (ddof=0), 0.0 for empty input."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(np.var(arr, ddof=0))


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation, 0.0 for empty input."""
    return float(np.sqrt(variance(values)))


def consistency(values: Sequence[float]) -> float:
    """
    Stability score in [0, 1]: 1 - coefficient of variation, floored at 0.

    Formula: max(0, 1 - σ/μ) when μ > 0, else 0

    Args:
        values: Numeric sequence (volumes, liquidity, market caps)

    Returns:
        Consistency score; 0.0 for fewer than 2 values
    """
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0

    mean_value = float(np.mean(arr))
    if mean_value <= 0:
        return 0.0

    return max(0.0, 1.0 - std_dev(arr) / mean_value)


def simple_returns(prices: Sequence[float]) -> List[float]:
    """
    Period-over-period simple returns, skipping periods whose base price is not positive.

    Formula: r_i = (P_i - P_{i-1}) / P_{i-1}
    """
    arr = _as_array(prices)
    returns = []
    for i in range(1, arr.size):
        if arr[i - 1] > 0:
            returns.append(float((arr[i] - arr[i - 1]) / arr[i - 1]))
    return returns


def volatility(prices: Sequence[float]) -> float:
    """
    Price volatility as the standard deviation of simple returns, in percent.

    Args:
        prices: Prices in chronological order

    Returns:
        std(returns) * 100; 0.0 when fewer than 2 valid returns exist
    """
    returns = simple_returns(prices)
    if len(returns) < 2:
        return 0.0
    return std_dev(returns) * 100


def linear_trend_slope(values: Sequence[float]) -> float:
    """
    Ordinary-least-squares slope of values against index 0..n-1.

    Formula: slope = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)

    Args:
        values: Series in chronological order

    Returns:
        Slope per period; 0.0 for fewer than 2 points
    """
    y = _as_array(values)
    n = y.size
    if n < 2:
        return 0.0

    x = np.arange(n, dtype=np.float64)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    return float((n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x))


def percent_change(current: Optional[float], previous: Optional[float]) -> float:
    """
    Percent change from previous to current.

    Returns:
        (current - previous) / previous * 100, or 0.0 when previous is missing or zero
    """
    if not previous:
        return 0.0
    return (float(current or 0) - previous) / previous * 100


def is_increasing_trend(values: Sequence[float], threshold: float = 0.6) -> bool:
    """True when more than `threshold` of period-over-period moves are increases."""
    arr = _as_array(values)
    if arr.size < 2:
        return False
    increases = int(np.sum(np.diff(arr) > 0))
    return increases / (arr.size - 1) > threshold


def direction_label(slope: float) -> str:
    """Label a trend slope as growing, declining or stable."""
    if slope > 0:
        return 'growing'
    if slope < 0:
        return 'declining'
    return 'stable'
