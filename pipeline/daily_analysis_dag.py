"""
Daily analysis DAG - orchestrates collection and analysis for one day.
Composes: Provider → Normalize → Validate → Store → Analyze → Report → Track.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Any, List, Optional

from ingestion.providers.dexscreener_adapter import fetch_top_tokens
from ingestion.providers.launchpad_adapter import collect_launchpad_tokens
from ingestion.transforms.normalizers import normalize_snapshot
from ingestion.transforms.validators import sanitize_assets
from storage.loaders import clean_old_snapshots, load_current, load_range, upsert_snapshot
from storage.run_registry import start_run, finish_run, RunStatus
from analysis.analysis_job import analyze_assets
from reports.atomic_writer import write_json_atomic, write_text_atomic
from reports.daily_report import build_daily_report_data, render_daily_csv, render_daily_text


logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Raised when pipeline execution fails."""
    pass


@dataclass
class DailyAnalysisConfig:
    """Configuration for the daily analysis pipeline."""
    search_terms: List[str] = field(default_factory=list)
    as_of: Optional[date] = None
    collect: bool = True
    max_tokens: int = 50
    min_market_cap: float = 50000
    max_market_cap: float = 100000000
    min_volume: float = 1000
    include_launchpad: bool = True
    launch_hours: int = 24
    trending_limit: int = 20
    enrich_launch_data: bool = True
    history_days: int = 7
    retention_days: Optional[int] = 30
    output_dir: Optional[Path] = None

    def __post_init__(self):
        """Validate and set defaults."""
        if self.as_of is None:
            self.as_of = date.today()

        if self.collect and not self.search_terms:
            raise ValueError("search_terms must be non-empty when collecting")

        if self.min_market_cap > self.max_market_cap:
            raise ValueError("min_market_cap must be <= max_market_cap")

        if self.history_days <= 0:
            raise ValueError("history_days must be positive")

        if self.min_volume < 0:
            raise ValueError("min_volume must be non-negative")

        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)


def run_daily_analysis(config: DailyAnalysisConfig, conn: sqlite3.Connection) -> Dict[str, Any]:
    """
    Run the complete daily pipeline.

    Pipeline stages:
    1. Start run tracking
    2. Fetch raw tokens from DexScreener and the launchpad (skipped when collect=False)
    3. Normalize into a snapshot and drop invalid assets
    4. Store the snapshot (replacing any earlier one for the day)
    5. Analyze against the stored history window
    6. Write analysis JSON and daily report files
    7. Apply retention and finish run tracking

    Args:
        config: Pipeline configuration
        conn: SQLite database connection

    Returns:
        Dictionary with run results and counts; failures are reported, not raised
    """
    run_id = start_run(conn, 'daily_analysis')
    start_time = datetime.now()

    result = {
        'as_of': config.as_of,
        'run_id': run_id,
        'status': 'running',
        'assets_fetched': 0,
        'assets_stored': 0,
        'assets_rejected': 0,
        'assets_analyzed': 0,
        'assets_failed': 0,
        'top_ranked': [],
        'outputs': {},
        'error_message': None
    }

    try:
        if config.collect:
            raw_tokens = fetch_top_tokens(
                config.search_terms,
                limit=config.max_tokens,
                min_market_cap=config.min_market_cap,
                max_market_cap=config.max_market_cap,
                min_volume=config.min_volume
            )
            sources = ['DexScreener']

            if config.include_launchpad:
                raw_tokens = collect_launchpad_tokens(
                    raw_tokens,
                    hours=config.launch_hours,
                    trending_limit=config.trending_limit,
                    enrich=config.enrich_launch_data
                )
                sources.append('LetsBonk')

            result['assets_fetched'] = len(raw_tokens)

            if not raw_tokens:
                # Empty fetch is not an error - complete successfully
                logger.warning(f"No tokens fetched for {config.as_of}")
                return _finish(conn, run_id, result, start_time, RunStatus.COMPLETED)

            snapshot = normalize_snapshot(
                raw_tokens,
                snapshot_date=config.as_of,
                timestamp=datetime.now(),
                metadata={
                    'sources': sources,
                    'filters': {
                        'min_market_cap': config.min_market_cap,
                        'max_market_cap': config.max_market_cap,
                        'min_volume': config.min_volume,
                    },
                }
            )

            valid, rejected = sanitize_assets(snapshot.assets)
            result['assets_rejected'] = rejected

            if not valid:
                raise PipelineError(f"All {len(snapshot.assets)} assets failed validation")

            snapshot.assets = valid
            inserted, updated = upsert_snapshot(conn, snapshot)
            result['assets_stored'] = len(valid)
            result['assets_inserted'] = inserted
            result['assets_updated'] = updated
            current = snapshot
        else:
            current = load_current(conn)
            if current is None:
                raise PipelineError("No stored snapshot to analyze")

        history = load_range(
            conn,
            current.date - timedelta(days=config.history_days),
            current.date - timedelta(days=1)
        )

        analysis = analyze_assets(current, history)
        result['assets_analyzed'] = analysis['summary']['analyzed']
        result['assets_failed'] = analysis['summary']['failed']
        result['top_ranked'] = [
            {'rank': a['rank'], 'symbol': a['current']['symbol'], 'score': a['score']}
            for a in analysis['analyses'][:10]
        ]

        if config.output_dir is not None:
            result['outputs'] = _write_outputs(config.output_dir, current, analysis)

        if config.retention_days:
            result['snapshots_deleted'] = clean_old_snapshots(
                conn, config.retention_days, today=current.date
            )

        return _finish(conn, run_id, result, start_time, RunStatus.COMPLETED)

    except Exception as e:
        logger.error(f"Daily analysis failed for {config.as_of}: {e}")
        result['error_message'] = str(e)
        return _finish(conn, run_id, result, start_time, RunStatus.FAILED)


def _write_outputs(output_dir: Path, current, analysis: Dict[str, Any]) -> Dict[str, str]:
    day = current.date.isoformat()
    report = build_daily_report_data(current)

    writes = {
        'analysis_json': write_json_atomic(analysis, output_dir / f'analysis-{day}.json'),
        'daily_json': write_json_atomic(report, output_dir / f'daily-report-{day}.json'),
        'daily_csv': write_text_atomic(render_daily_csv(report), output_dir / f'daily-report-{day}.csv'),
        'daily_text': write_text_atomic(render_daily_text(report), output_dir / f'daily-summary-{day}.txt'),
    }

    failed = [name for name, w in writes.items() if w['status'] != 'completed']
    if failed:
        raise PipelineError(f"Failed to write outputs: {failed}")

    return {name: w['output_path'] for name, w in writes.items()}


def _finish(
    conn: sqlite3.Connection,
    run_id: int,
    result: Dict[str, Any],
    start_time: datetime,
    status: RunStatus
) -> Dict[str, Any]:
    finish_run(
        conn=conn,
        run_id=run_id,
        status=status,
        finished_at=datetime.now(),
        rows_in=result['assets_fetched'],
        rows_out=result['assets_analyzed'],
        error_message=result['error_message']
    )

    result['status'] = status.value
    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()
    return result
