"""
Guardrails for the analysis engine - validation and safety checks on snapshot ranges.
Hard errors for malformed ranges, warnings for sparse coverage.
"""

import warnings
import numpy as np
from datetime import date
from typing import Dict, Any, List, Optional, Sequence

from analysis.models import Snapshot


class DataQualityError(Exception):
    """Raised when data quality issues require user intervention."""
    pass


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def check_snapshot_order(snapshots: Sequence[Snapshot]) -> None:
    """
    Check snapshots are strictly ascending by date (one per calendar day).

    Args:
        snapshots: Snapshots as returned by a range load

    Raises:
        DataQualityError: If dates repeat or go backwards
    """
    for i in range(1, len(snapshots)):
        previous = snapshots[i - 1].date
        current = snapshots[i].date

        if current == previous:
            raise DataQualityError(f"Duplicate snapshot for {current}")

        if current < previous:
            raise DataQualityError(
                f"Snapshots not in ascending order: {previous} before {current}"
            )


def coverage_ratio(snapshots: Sequence[Snapshot], window_days: int) -> float:
    """Share of calendar days in the window that have a snapshot."""
    if window_days <= 0:
        return 0.0
    return min(1.0, len(snapshots) / window_days)


def warn_sparse_window(snapshots: Sequence[Snapshot], window_days: int) -> List[str]:
    """
    Warn when fewer than half the window's days have snapshots.

    Returns:
        List of warning messages (also emitted as DataQualityWarning)
    """
    messages = []
    ratio = coverage_ratio(snapshots, window_days)

    if ratio < 0.5:
        message = (
            f"Sparse snapshot coverage: {len(snapshots)} of {window_days} days "
            f"({ratio:.0%}). Trend and survival metrics may be unreliable."
        )
        warnings.warn(message, DataQualityWarning)
        messages.append(message)

    return messages


def find_unstable_identities(snapshots: Sequence[Snapshot]) -> List[Dict[str, Any]]:
    """
    Detect symbols that are joined under more than one canonical identity.

    This happens when an asset's address is present on some days and missing
    on others, splitting its history into two series.

    Returns:
        One entry per affected symbol with the identities seen
    """
    by_symbol: Dict[str, set] = {}
    for snapshot in snapshots:
        for asset in snapshot.assets:
            if asset.symbol:
                by_symbol.setdefault(asset.symbol, set()).add(asset.canonical_id)

    return [
        {'symbol': symbol, 'identities': sorted(ids)}
        for symbol, ids in by_symbol.items()
        if len(ids) > 1
    ]


def validate_numeric_outputs(payload: Any, path: str = 'root') -> None:
    """
    Walk an analysis payload and reject NaN or infinite numbers.

    Raises:
        DataQualityError: If a non-finite value is found
    """
    if payload is None or isinstance(payload, bool):
        return

    if isinstance(payload, (int, float)):
        if np.isnan(payload):
            raise DataQualityError(f"NaN value found in {path}")
        if np.isinf(payload):
            raise DataQualityError(f"Infinite value found in {path}")
        return

    if isinstance(payload, dict):
        for key, value in payload.items():
            validate_numeric_outputs(value, f"{path}.{key}")
    elif isinstance(payload, (list, tuple)):
        for i, value in enumerate(payload):
            validate_numeric_outputs(value, f"{path}[{i}]")


def check_data_freshness(
    snapshots: Sequence[Snapshot],
    today: Optional[date] = None,
    max_age_days: int = 2
) -> List[str]:
    """Warn when the latest snapshot is older than `max_age_days`."""
    if not snapshots:
        return ["No snapshots available"]

    if today is None:
        today = date.today()

    latest = snapshots[-1].date
    age = (today - latest).days

    if age > max_age_days:
        return [f"Latest snapshot is {age} days old (latest: {latest})"]
    return []


def run_all_guardrails(
    snapshots: Sequence[Snapshot],
    window_days: int,
    today: Optional[date] = None
) -> Dict[str, Any]:
    """
    Run all range-level checks and compile results.

    Raises:
        DataQualityError: If the range is malformed
    """
    check_snapshot_order(snapshots)

    unstable = find_unstable_identities(snapshots)
    messages = warn_sparse_window(snapshots, window_days)
    messages.extend(check_data_freshness(snapshots, today=today))

    if unstable:
        messages.append(
            f"{len(unstable)} symbols appear under more than one identity: "
            f"{[u['symbol'] for u in unstable]}"
        )

    return {
        'snapshots': len(snapshots),
        'window_days': window_days,
        'coverage_ratio': coverage_ratio(snapshots, window_days),
        'unstable_identities': unstable,
        'warnings': messages,
    }
