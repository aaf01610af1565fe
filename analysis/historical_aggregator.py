"""
Historical aggregator - merges daily snapshots into per-asset time series.
Pure functions: the series are rebuilt from the snapshot range on every call.
"""

from datetime import date
from typing import Dict, Any, List, Optional, Sequence

from analysis.models import AssetRecord, AssetSeries, DailyPoint, Snapshot, num
from analysis.calculations.statistics import (
    consistency,
    mean,
    percent_change,
    volatility,
)


# Launch outcome thresholds (weekly growth, percent)
SUCCESSFUL_GROWTH_PCT = 50.0


def aggregate(
    snapshots: Sequence[Snapshot],
    reconcile_by_symbol: bool = False
) -> Dict[str, AssetSeries]:
    """
    Build one time series per canonical identity observed in the range.

    Args:
        snapshots: Snapshots in ascending date order
        reconcile_by_symbol: Fold a record whose identity is unseen into an
            existing series when exactly one series carries the same symbol

    Returns:
        Mapping of canonical identity to AssetSeries (first-seen order)
    """
    series_map: Dict[str, AssetSeries] = {}

    for snapshot in snapshots:
        for record in snapshot.assets:
            key = record.canonical_id
            if not key:
                continue

            if key not in series_map and reconcile_by_symbol:
                key = _reconcile_key(series_map, record, snapshot.date) or key

            series = series_map.get(key)
            if series is None:
                series = AssetSeries(
                    canonical_id=key,
                    latest=record,
                    first_seen=snapshot.date,
                    last_seen=snapshot.date
                )
                series_map[key] = series

            _accumulate(series, snapshot.date, record)

    for series in series_map.values():
        _finalize(series)

    return series_map


def _reconcile_key(
    series_map: Dict[str, AssetSeries],
    record: AssetRecord,
    day: date
) -> Optional[str]:
    """Find the single earlier series sharing this record's symbol (not already seen on `day`)."""
    if not record.symbol:
        return None
    matches = [
        k for k, s in series_map.items()
        if s.symbol == record.symbol and s.last_seen != day
    ]
    if len(matches) == 1:
        return matches[0]
    return None


def _accumulate(series: AssetSeries, day: date, record: AssetRecord) -> None:
    series.daily_points.append(DailyPoint.from_record(day, record))
    series.latest = record
    series.last_seen = day
    series.days_active += 1
    series.total_volume += num(record.volume24h)

    market_cap = num(record.market_cap)
    if series.max_market_cap is None or market_cap > series.max_market_cap:
        series.max_market_cap = market_cap
    # Zero market cap is treated as unobserved for the running minimum
    if market_cap > 0 and (series.min_market_cap is None or market_cap < series.min_market_cap):
        series.min_market_cap = market_cap


def _finalize(series: AssetSeries) -> None:
    points = series.daily_points

    series.avg_volume = series.total_volume / series.days_active if series.days_active else 0.0
    series.avg_market_cap = mean([num(p.market_cap) for p in points])

    valid_prices = [num(p.price) for p in points if num(p.price) > 0]
    if len(points) >= 2 and len(valid_prices) >= 2:
        series.weekly_growth = percent_change(valid_prices[-1], valid_prices[0])
    else:
        series.weekly_growth = 0.0

    if len(points) >= 2:
        volumes = [num(p.volume24h) for p in points if num(p.volume24h) > 0]
        series.volume_consistency = consistency(volumes)
    else:
        series.volume_consistency = 0.0

    series.price_volatility = volatility(valid_prices)


def _period_growth(series: AssetSeries) -> float:
    """Growth from first to last observed price (period growth)."""
    first_price = num(series.daily_points[0].price)
    last_price = num(series.daily_points[-1].price)
    if first_price <= 0:
        return 0.0
    return (last_price - first_price) / first_price * 100


def top_performers(
    series: Dict[str, AssetSeries],
    window_days: int = 7,
    limit: int = 15
) -> List[Dict[str, Any]]:
    """
    Rank assets by price growth over the window.

    Assets need at least min(0.5 * window_days, 3) active days.

    Args:
        series: Output of aggregate()
        window_days: Window length in days
        limit: Maximum number of results

    Returns:
        Summary dictionaries sorted by period growth (descending)
    """
    min_days = min(window_days * 0.5, 3)

    candidates = [s for s in series.values() if s.days_active >= min_days]
    ranked = sorted(candidates, key=_period_growth, reverse=True)[:limit]

    return [
        {
            'canonical_id': s.canonical_id,
            'symbol': s.symbol,
            'name': s.name,
            'period_growth': _period_growth(s),
            'weekly_growth': s.weekly_growth,
            'avg_volume': s.avg_volume,
            'max_market_cap': s.max_market_cap,
            'days_active': s.days_active,
            'is_from_launchpad': s.latest.is_from_launchpad,
            'volume_consistency': s.volume_consistency,
            'price_volatility': s.price_volatility,
        }
        for s in ranked
    ]


def market_cap_growth_leaders(
    series: Dict[str, AssetSeries],
    limit: int = 10
) -> List[Dict[str, Any]]:
    """
    Rank assets by growth from minimum to maximum observed market cap.

    Requires max > min and at least 3 active days.
    """
    rows = []
    for s in series.values():
        if s.min_market_cap is None or s.max_market_cap is None:
            continue
        if s.max_market_cap <= s.min_market_cap or s.days_active < 3:
            continue

        rows.append({
            'canonical_id': s.canonical_id,
            'symbol': s.symbol,
            'name': s.name,
            'market_cap_growth': (s.max_market_cap - s.min_market_cap) / s.min_market_cap * 100,
            'start_market_cap': s.min_market_cap,
            'peak_market_cap': s.max_market_cap,
            'current_market_cap': s.latest.market_cap,
            'days_active': s.days_active,
            'is_from_launchpad': s.latest.is_from_launchpad,
        })

    rows.sort(key=lambda r: r['market_cap_growth'], reverse=True)
    return rows[:limit]


def volume_consistency_leaders(
    series: Dict[str, AssetSeries],
    limit: int = 10
) -> List[Dict[str, Any]]:
    """Rank assets active 5+ days with average volume above 10,000 by volume consistency."""
    candidates = [s for s in series.values() if s.days_active >= 5 and s.avg_volume > 10000]
    candidates.sort(key=lambda s: s.volume_consistency, reverse=True)

    return [
        {
            'canonical_id': s.canonical_id,
            'symbol': s.symbol,
            'name': s.name,
            'volume_consistency': s.volume_consistency,
            'avg_volume': s.avg_volume,
            'total_volume': s.total_volume,
            'days_active': s.days_active,
            'avg_market_cap': s.avg_market_cap,
        }
        for s in candidates[:limit]
    ]


def new_launch_outcomes(
    series: Dict[str, AssetSeries],
    max_days_since_launch: int = 7
) -> Dict[str, Any]:
    """
    Classify recent launchpad assets by weekly growth.

    Buckets:
    - successful: growth > 50%
    - moderate: 0% < growth <= 50%
    - unsuccessful: growth <= 0%

    Returns:
        Bucket counts, success rate (percent) and mean growth of the successful bucket
    """
    launches = [
        s for s in series.values()
        if s.latest.is_from_launchpad
        and s.latest.days_since_launch is not None
        and s.latest.days_since_launch <= max_days_since_launch
    ]

    successful = [s for s in launches if s.weekly_growth > SUCCESSFUL_GROWTH_PCT]
    moderate = [s for s in launches if 0 < s.weekly_growth <= SUCCESSFUL_GROWTH_PCT]
    unsuccessful = [s for s in launches if s.weekly_growth <= 0]

    return {
        'total': len(launches),
        'successful': len(successful),
        'moderate': len(moderate),
        'unsuccessful': len(unsuccessful),
        'success_rate': len(successful) / len(launches) * 100 if launches else 0.0,
        'avg_growth_successful': mean([s.weekly_growth for s in successful]),
        'top_new_performers': [s.to_dict() for s in successful[:5]],
    }


def asset_history(snapshots: Sequence[Snapshot], identity: str) -> List[Dict[str, Any]]:
    """
    Collect one asset's daily records across snapshots.

    Matches either the address or the symbol against `identity`.
    """
    history = []
    for snapshot in snapshots:
        for record in snapshot.assets:
            if record.address == identity or record.symbol == identity:
                row = record.to_dict()
                row['date'] = snapshot.date
                row['timestamp'] = snapshot.timestamp
                history.append(row)
                break
    return history


def window_metrics(history: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Summarize an asset history window (see asset_history).

    Returns:
        Window change, volume and market cap ranges; None for fewer than 2 days
    """
    if len(history) < 2:
        return None

    oldest_price = num(history[0].get('price'))
    latest_price = num(history[-1].get('price'))
    volumes = [num(day.get('volume24h')) for day in history]
    market_caps = [num(day.get('market_cap')) for day in history]

    min_volume = min(volumes)
    min_market_cap = min(market_caps)

    return {
        'price_change_pct': percent_change(latest_price, oldest_price) if oldest_price > 0 else 0.0,
        'avg_daily_volume': mean(volumes),
        'max_daily_volume': max(volumes),
        'min_daily_volume': min_volume,
        'avg_market_cap': mean(market_caps),
        'max_market_cap': max(market_caps),
        'min_market_cap': min_market_cap,
        'days_tracked': len(history),
        'volume_growth': (max(volumes) - min_volume) / min_volume * 100 if min_volume > 0 else 0.0,
        'market_cap_growth': (
            (max(market_caps) - min_market_cap) / min_market_cap * 100 if min_market_cap > 0 else 0.0
        ),
    }
