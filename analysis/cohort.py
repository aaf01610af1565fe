"""
Cohort analyzer - survival between two point-in-time sets and daily market trends.
Operates on raw snapshots, independent of the per-asset aggregation.
"""

import pandas as pd
from typing import Dict, Any, List, Optional, Sequence

from analysis.models import AssetSeries, Snapshot, num
from analysis.calculations.statistics import (
    direction_label,
    linear_trend_slope,
    mean,
    percent_change,
)
from analysis.historical_aggregator import new_launch_outcomes, top_performers


TREND_METRICS = ['total_volume', 'total_market_cap', 'avg_price_change', 'active_assets']


def cohort_survival(first: Snapshot, last: Snapshot) -> Dict[str, Any]:
    """
    Compare the identity sets of the first and last snapshot of a range.

    Args:
        first: Chronologically first snapshot
        last: Chronologically last snapshot

    Returns:
        Starting/ending counts, survivors, dropped, new entrants and survival rate (percent)
    """
    starting = first.identities()
    ending = last.identities()

    survived = starting & ending
    new_entrants = ending - starting

    return {
        'starting_count': len(starting),
        'ending_count': len(ending),
        'survived': len(survived),
        'dropped': len(starting) - len(survived),
        'new_entrants': len(new_entrants),
        'survival_rate': len(survived) / len(starting) * 100 if starting else 0.0,
    }


def survival_analysis(snapshots: Sequence[Snapshot]) -> Optional[Dict[str, Any]]:
    """Cohort survival across a range; None when fewer than 2 snapshots."""
    if len(snapshots) < 2:
        return None
    return cohort_survival(snapshots[0], snapshots[-1])


def _daily_metrics_frame(snapshots: Sequence[Snapshot]) -> pd.DataFrame:
    rows = []
    for snapshot in snapshots:
        assets = snapshot.assets
        rows.append({
            'date': snapshot.date,
            'total_volume': sum(num(a.volume24h) for a in assets),
            'total_market_cap': sum(num(a.market_cap) for a in assets),
            'avg_price_change': mean([num(a.price_change24h) for a in assets]),
            'active_assets': len(assets),
        })
    return pd.DataFrame(rows, columns=['date'] + TREND_METRICS)


def daily_trend(snapshots: Sequence[Snapshot]) -> Optional[Dict[str, Any]]:
    """
    Daily aggregate series and their linear trend direction.

    For each metric (total volume, total market cap, mean 24h price change,
    active asset count) the OLS slope over the day index is labeled
    growing, declining or stable.

    Args:
        snapshots: Snapshots in ascending date order

    Returns:
        Dictionary with daily_metrics, per-metric trends and first-to-last growth;
        None when fewer than 2 snapshots
    """
    if len(snapshots) < 2:
        return None

    frame = _daily_metrics_frame(snapshots)

    trends = {}
    for metric in TREND_METRICS:
        slope = linear_trend_slope(frame[metric].tolist())
        trends[metric] = {
            'slope': slope,
            'direction': direction_label(slope),
        }

    daily_metrics = frame.to_dict('records')
    for row in daily_metrics:
        row['date'] = row['date'].isoformat()
        row['active_assets'] = int(row['active_assets'])

    first, last = frame.iloc[0], frame.iloc[-1]

    return {
        'daily_metrics': daily_metrics,
        'trends': trends,
        'volume_growth': percent_change(float(last['total_volume']), float(first['total_volume'])),
        'market_cap_growth': percent_change(float(last['total_market_cap']), float(first['total_market_cap'])),
    }


def weekly_summary(
    series: Dict[str, AssetSeries],
    snapshots: Sequence[Snapshot]
) -> Dict[str, Any]:
    """Headline figures for a weekly window."""
    top = top_performers(series, window_days=7, limit=1)
    launches = new_launch_outcomes(series)
    survival = survival_analysis(snapshots)
    trend = daily_trend(snapshots)

    if trend is not None:
        market_trend = trend['trends']['total_volume']['direction']
        avg_daily_volume = mean([d['total_volume'] for d in trend['daily_metrics']])
    else:
        market_trend = 'stable'
        avg_daily_volume = 0.0

    return {
        'total_assets_analyzed': len(series),
        'top_performer': top[0]['symbol'] if top else None,
        'top_performer_growth': top[0]['period_growth'] if top else None,
        'new_launches_count': launches['total'],
        'new_launch_success_rate': launches['success_rate'],
        'survival_rate': survival['survival_rate'] if survival else None,
        'market_trend': market_trend,
        'avg_daily_volume': avg_daily_volume,
    }
