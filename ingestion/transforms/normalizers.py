"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

from datetime import date, datetime
from typing import Dict, Any, List, Optional

from analysis.models import AssetRecord, Snapshot


def days_since_launch(launch_time: Any, as_of: date) -> Optional[int]:
    """
    Whole days between a launch timestamp and `as_of`.

    Args:
        launch_time: ISO string, datetime, or None
        as_of: Reference date (usually the snapshot date)

    Returns:
        Days since launch, or None if the launch time is unknown or unparseable
    """
    if not launch_time:
        return None

    if isinstance(launch_time, str):
        try:
            launch_time = datetime.fromisoformat(launch_time.replace('Z', '+00:00'))
        except ValueError:
            return None

    launch_date = launch_time.date() if isinstance(launch_time, datetime) else launch_time
    return max(0, (as_of - launch_date).days)


def normalize_token(
    raw: Dict[str, Any],
    launchpad: bool = False,
    as_of: Optional[date] = None
) -> AssetRecord:
    """
    Transform one provider token row to a canonical AssetRecord.

    Minimal normalization:
    - camelCase and snake_case field names both accepted
    - Launchpad flag forced on for rows from the launchpad source
    - Days since launch derived from a launch timestamp when not given
    - Canonical identity resolved once (address, falling back to symbol)

    Args:
        raw: Provider token dictionary
        launchpad: True when the row came from the launchpad feed
        as_of: Reference date for a launchTime field (skipped when None)

    Returns:
        Canonical asset record
    """
    record = AssetRecord.from_dict(raw)
    if launchpad:
        record.is_from_launchpad = True
    if record.days_since_launch is None and as_of is not None:
        record.days_since_launch = days_since_launch(raw.get('launchTime'), as_of)
    return record


def normalize_snapshot(
    raw_tokens: List[Dict[str, Any]],
    snapshot_date: date,
    timestamp: Optional[datetime] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Snapshot:
    """
    Build a snapshot from raw provider rows.

    Rows sharing a canonical identity are collapsed, keeping the first
    occurrence (earlier sources take precedence).

    Args:
        raw_tokens: Provider token dictionaries, highest-precedence source first
        snapshot_date: Calendar day of the capture
        timestamp: Capture time (defaults to now)
        metadata: Free-form collection metadata

    Returns:
        Snapshot with unique canonical identities
    """
    if timestamp is None:
        timestamp = datetime.now()

    seen = set()
    assets = []

    for raw in raw_tokens:
        record = normalize_token(
            raw,
            launchpad=bool(raw.get('isFromLaunchpad') or raw.get('isFromLetsBonk')),
            as_of=snapshot_date
        )
        if not record.canonical_id or record.canonical_id in seen:
            continue
        seen.add(record.canonical_id)
        assets.append(record)

    return Snapshot(
        date=snapshot_date,
        timestamp=timestamp,
        assets=assets,
        metadata=dict(metadata or {})
    )
