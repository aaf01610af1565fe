"""
Tests for the weekly report DAG - range load, guardrails and report outputs.
Uses in-memory SQLite seeded with a week of snapshots.
"""

import json
import pytest
import sqlite3
from datetime import date, datetime, timedelta

from analysis.guardrails import DataQualityWarning
from analysis.models import AssetRecord, Snapshot
from pipeline.weekly_report_dag import run_weekly_report, WeeklyReportConfig
from storage.loaders import init_database, upsert_snapshot
from storage.run_registry import get_run_status, RunStatus


END = date(2025, 7, 20)


@pytest.fixture
def in_memory_db():
    """Create in-memory SQLite database for testing."""
    conn = sqlite3.connect(':memory:')
    init_database(conn)
    return conn


def store_day(conn, day, assets):
    upsert_snapshot(conn, Snapshot(
        date=day,
        timestamp=datetime.combine(day, datetime.min.time()),
        assets=assets
    ))


@pytest.fixture
def seeded_week(in_memory_db):
    """Seven days: RISE doubles over the week, GONE is only seen on day one."""
    start = END - timedelta(days=6)
    prices = [1.0, 1.1, 1.2, 1.3, 1.4, 1.5, 2.0]
    for i, price in enumerate(prices):
        assets = [AssetRecord(
            symbol='RISE', name='Rise Token', address='MintRise', price=price,
            volume24h=50000.0, market_cap=100000.0 * price, liquidity=20000.0,
            price_change24h=5.0
        )]
        if i == 0:
            assets.append(AssetRecord(
                symbol='GONE', address='MintGone', price=3.0, volume24h=50000.0,
                market_cap=300000.0, liquidity=20000.0
            ))
        store_day(in_memory_db, start + timedelta(days=i), assets)
    return in_memory_db


class TestWeeklyReportConfig:
    """Tests for WeeklyReportConfig."""

    def test_start_date_is_inclusive_window(self):
        config = WeeklyReportConfig(end_date=END, days=7)
        assert config.start_date == date(2025, 7, 14)

    def test_defaults_to_today(self):
        assert WeeklyReportConfig().end_date == date.today()

    def test_days_must_be_positive(self):
        with pytest.raises(ValueError, match="days"):
            WeeklyReportConfig(end_date=END, days=0)


class TestWeeklyReportDAG:
    """Tests for run_weekly_report() orchestration."""

    def test_success(self, seeded_week):
        result = run_weekly_report(WeeklyReportConfig(end_date=END), seeded_week)

        assert result['status'] == 'completed'
        assert result['snapshots_loaded'] == 7
        assert result['unique_assets'] == 2
        assert result['warnings'] == []

        report = result['report']
        assert report['start_date'] == '2025-07-14'
        assert report['end_date'] == '2025-07-20'
        assert [t['symbol'] for t in report['top_performers']] == ['RISE']
        assert report['top_performers'][0]['period_growth'] == pytest.approx(100.0)
        assert report['top_performers'][0]['weekly_growth'] == pytest.approx(100.0)
        assert report['survival_analysis']['survival_rate'] == pytest.approx(50.0)

        run = get_run_status(seeded_week, result['run_id'])
        assert run['status'] == RunStatus.COMPLETED
        assert run['dag_name'] == 'weekly_report'
        assert run['rows_in'] == 7
        assert run['rows_out'] == 2

    def test_writes_output_files(self, seeded_week, tmp_path):
        result = run_weekly_report(WeeklyReportConfig(end_date=END, output_dir=tmp_path), seeded_week)

        assert set(result['outputs']) == {'json', 'csv', 'text'}

        with open(tmp_path / 'weekly-report-2025-07-14-to-2025-07-20.json') as f:
            assert json.load(f)['total_unique_assets'] == 2

        csv_lines = (tmp_path / 'weekly-report-2025-07-14-to-2025-07-20.csv').read_text().splitlines()
        assert csv_lines[0] == (
            'Symbol,Name,Period_Growth,Weekly_Growth,Avg_Volume,Max_Market_Cap,Days_Active,'
            'Volume_Consistency,Price_Volatility,Is_Launchpad'
        )
        assert csv_lines[1].startswith('RISE,Rise Token,100.0,100.0,')

        summary = (tmp_path / 'weekly-summary-2025-07-20.txt').read_text()
        assert "WEEKLY SOLANA TOKEN ANALYSIS REPORT" in summary
        assert "1. RISE - +100.00% (7 days active)" in summary

    def test_empty_range_still_completes(self, in_memory_db):
        with pytest.warns(DataQualityWarning):
            result = run_weekly_report(WeeklyReportConfig(end_date=END), in_memory_db)

        assert result['status'] == 'completed'
        assert result['snapshots_loaded'] == 0
        assert result['report']['top_performers'] == []
        assert "No snapshots available" in result['warnings']

    def test_sparse_window_warns(self, in_memory_db):
        store_day(in_memory_db, END, [AssetRecord(symbol='ONE', address='MintOne', price=1.0)])

        with pytest.warns(DataQualityWarning):
            result = run_weekly_report(WeeklyReportConfig(end_date=END), in_memory_db)

        assert result['status'] == 'completed'
        assert any("Sparse snapshot coverage" in w for w in result['warnings'])

    def test_stale_data_warns(self, seeded_week):
        result = run_weekly_report(
            WeeklyReportConfig(end_date=END + timedelta(days=5), days=14),
            seeded_week
        )

        assert any("days old" in w for w in result['warnings'])

    def test_split_identity_is_flagged(self, in_memory_db):
        store_day(in_memory_db, END - timedelta(days=1), [AssetRecord(symbol='SPLIT', price=1.0)])
        store_day(in_memory_db, END, [AssetRecord(symbol='SPLIT', address='MintSplit', price=2.0)])

        result = run_weekly_report(WeeklyReportConfig(end_date=END, days=2), in_memory_db)

        assert result['unique_assets'] == 2
        assert any("SPLIT" in w for w in result['warnings'])

    def test_split_identity_reconciled_by_symbol(self, in_memory_db):
        store_day(in_memory_db, END - timedelta(days=1), [AssetRecord(symbol='SPLIT', price=1.0)])
        store_day(in_memory_db, END, [AssetRecord(symbol='SPLIT', address='MintSplit', price=2.0)])

        result = run_weekly_report(
            WeeklyReportConfig(end_date=END, days=2, reconcile_by_symbol=True),
            in_memory_db
        )

        assert result['unique_assets'] == 1
