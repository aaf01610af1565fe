"""
Weekly report DAG - cross-sectional analysis over a stored snapshot range.
Composes: Load range → Guardrails → Build report → Write JSON/CSV/text → Track.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Any, Optional

from storage.loaders import load_range
from storage.run_registry import start_run, finish_run, RunStatus
from analysis.analysis_job import build_weekly_report_data
from analysis.guardrails import run_all_guardrails
from reports.atomic_writer import write_json_atomic, write_text_atomic
from reports.weekly_report import render_weekly_csv, render_weekly_text


logger = logging.getLogger(__name__)


@dataclass
class WeeklyReportConfig:
    """Configuration for the weekly report pipeline."""
    end_date: Optional[date] = None
    days: int = 7
    output_dir: Optional[Path] = None
    reconcile_by_symbol: bool = False

    def __post_init__(self):
        """Validate and set defaults."""
        if self.end_date is None:
            self.end_date = date.today()

        if self.days <= 0:
            raise ValueError("days must be positive")

        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)

    @property
    def start_date(self) -> date:
        """First day of the window (inclusive)."""
        return self.end_date - timedelta(days=self.days - 1)


def run_weekly_report(config: WeeklyReportConfig, conn: sqlite3.Connection) -> Dict[str, Any]:
    """
    Build and write the weekly report.

    Args:
        config: Pipeline configuration
        conn: SQLite database connection

    Returns:
        Dictionary with run results, guardrail warnings and output paths
    """
    run_id = start_run(conn, 'weekly_report')
    start_time = datetime.now()

    result = {
        'start_date': config.start_date,
        'end_date': config.end_date,
        'run_id': run_id,
        'status': 'running',
        'snapshots_loaded': 0,
        'unique_assets': 0,
        'warnings': [],
        'report': None,
        'outputs': {},
        'error_message': None
    }

    try:
        snapshots = load_range(conn, config.start_date, config.end_date)
        result['snapshots_loaded'] = len(snapshots)

        checks = run_all_guardrails(snapshots, config.days, today=config.end_date)
        result['warnings'] = checks['warnings']
        for message in checks['warnings']:
            logger.warning(message)

        report = build_weekly_report_data(
            snapshots,
            config.start_date,
            config.end_date,
            reconcile_by_symbol=config.reconcile_by_symbol
        )
        result['report'] = report
        result['unique_assets'] = report['total_unique_assets']

        if config.output_dir is not None:
            result['outputs'] = _write_outputs(config.output_dir, report)

        status = RunStatus.COMPLETED

    except Exception as e:
        logger.error(f"Weekly report failed for {config.start_date} to {config.end_date}: {e}")
        result['error_message'] = str(e)
        status = RunStatus.FAILED

    finish_run(
        conn=conn,
        run_id=run_id,
        status=status,
        finished_at=datetime.now(),
        rows_in=result['snapshots_loaded'],
        rows_out=result['unique_assets'],
        error_message=result['error_message']
    )

    result['status'] = status.value
    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()
    return result


def _write_outputs(output_dir: Path, report: Dict[str, Any]) -> Dict[str, str]:
    stem = f"weekly-report-{report['start_date']}-to-{report['end_date']}"

    writes = {
        'json': write_json_atomic(report, output_dir / f'{stem}.json'),
        'csv': write_text_atomic(render_weekly_csv(report), output_dir / f'{stem}.csv'),
        'text': write_text_atomic(render_weekly_text(report), output_dir / f'weekly-summary-{report["end_date"]}.txt'),
    }

    failed = [name for name, w in writes.items() if w['status'] != 'completed']
    if failed:
        raise RuntimeError(f"Failed to write outputs: {failed}")

    return {name: w['output_path'] for name, w in writes.items()}
