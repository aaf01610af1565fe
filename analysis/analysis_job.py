"""
Orchestrated analysis job - snapshots to ranked analyses and weekly report data.
Calls the pure analysis functions and isolates per-asset failures.
"""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Dict, Any, List, Optional, Sequence

from analysis.models import DailyPoint, Snapshot
from analysis.historical_aggregator import (
    aggregate,
    market_cap_growth_leaders,
    new_launch_outcomes,
    top_performers,
    volume_consistency_leaders,
)
from analysis.trend_analyzer import HISTORY_WINDOW, analyze
from analysis.scoring import performance_summary, rank, score
from analysis.cohort import daily_trend, survival_analysis, weekly_summary
from analysis.guardrails import check_snapshot_order, validate_numeric_outputs


logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when an analysis job cannot run at all."""
    pass


def build_histories(
    history_snapshots: Sequence[Snapshot],
    before: Optional[date] = None,
    window: int = HISTORY_WINDOW
) -> Dict[str, List[DailyPoint]]:
    """
    Per-asset daily points from earlier snapshots.

    Args:
        history_snapshots: Snapshots in ascending date order
        before: Ignore snapshots on or after this date (usually the current date)
        window: Keep at most this many most recent points per asset

    Returns:
        Mapping of canonical identity to daily points, oldest first
    """
    if before is not None:
        history_snapshots = [s for s in history_snapshots if s.date < before]

    series = aggregate(history_snapshots)
    return {key: s.daily_points[-window:] for key, s in series.items()}


def analyze_assets(
    current: Snapshot,
    history_snapshots: Sequence[Snapshot]
) -> Dict[str, Any]:
    """
    Analyze, score and rank every asset in the current snapshot.

    An asset whose analysis fails is logged and excluded; the rest are
    still ranked.

    Args:
        current: Current snapshot
        history_snapshots: Earlier snapshots in ascending date order

    Returns:
        Dictionary with ranked analyses, summary rows, failures and batch counts
    """
    if current is None:
        raise AnalysisJobError("No current snapshot to analyze")

    check_snapshot_order(history_snapshots)
    histories = build_histories(history_snapshots, before=current.date)

    analyses = []
    failed = []

    for asset in current.assets:
        try:
            analysis = analyze(asset, histories.get(asset.canonical_id, []))
            analysis['score'] = score(analysis)
            validate_numeric_outputs(analysis)
            analyses.append(analysis)
        except Exception as e:
            logger.warning(f"Analysis failed for {asset.canonical_id or asset.symbol}: {e}")
            failed.append({
                'canonical_id': asset.canonical_id,
                'symbol': asset.symbol,
                'error_message': str(e),
            })

    ranked = rank(analyses)
    summaries = [performance_summary(a) for a in ranked]

    logger.info(f"Analyzed {len(ranked)} assets ({len(failed)} failed) for {current.date}")

    return {
        'as_of_date': current.date.isoformat(),
        'analyses': ranked,
        'summaries': summaries,
        'failed': failed,
        'summary': {
            'total_assets': len(current.assets),
            'analyzed': len(ranked),
            'failed': len(failed),
            'with_history': sum(1 for a in current.assets if histories.get(a.canonical_id)),
            'total_alerts': sum(len(a['alerts']) for a in ranked),
            'recommendations': dict(Counter(s['recommendation'] for s in summaries)),
        },
    }


def build_weekly_report_data(
    snapshots: Sequence[Snapshot],
    start_date: date,
    end_date: date,
    reconcile_by_symbol: bool = False
) -> Dict[str, Any]:
    """
    Compose every weekly cross-sectional surface into one report dictionary.

    Args:
        snapshots: Snapshots in the range, ascending by date
        start_date: Range start (inclusive)
        end_date: Range end (inclusive)
        reconcile_by_symbol: Passed through to aggregate()

    Returns:
        Weekly report data (plain structured values, no formatting)
    """
    check_snapshot_order(snapshots)
    window_days = (end_date - start_date).days + 1

    series = aggregate(snapshots, reconcile_by_symbol=reconcile_by_symbol)

    return {
        'start_date': start_date.isoformat(),
        'end_date': end_date.isoformat(),
        'generated_at': datetime.now().isoformat(),
        'days_analyzed': len(snapshots),
        'total_unique_assets': len(series),
        'top_performers': top_performers(series, window_days=window_days),
        'market_cap_growth_leaders': market_cap_growth_leaders(series),
        'volume_consistency_leaders': volume_consistency_leaders(series),
        'new_launch_analysis': new_launch_outcomes(series),
        'survival_analysis': survival_analysis(snapshots),
        'market_trends': daily_trend(snapshots),
        'summary': weekly_summary(series, snapshots),
    }
