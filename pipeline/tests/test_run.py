"""
Tests for the pipeline runner CLI - lookup and export commands over a seeded database.
"""

import pytest
import sys
from datetime import date, datetime, timedelta
from unittest.mock import patch

from analysis.models import AssetRecord, Snapshot
from pipeline import run
from storage.loaders import get_connection, init_database, upsert_snapshot


TODAY = date.today()

SETTINGS = {
    'tracking': {'data_retention_days': 30},
    'dexscreener': {'search_terms': ['SOL']},
    'launchpad': {'enabled': True, 'recent_hours': 24, 'trending_limit': 20, 'enrich': True},
    'reports': {},
}


def bonk(price, change, market_cap):
    return AssetRecord(
        symbol='BONK', name='Bonk Inu Community Token', address='MintBonk', price=price,
        volume24h=2500000.0, market_cap=market_cap, liquidity=400000.0, price_change24h=change
    )


@pytest.fixture
def cli_env(tmp_path):
    """Database with two days of snapshots plus patched config and paths."""
    database = tmp_path / 'tracker.db'
    conn = get_connection(str(database))
    init_database(conn)

    yesterday = TODAY - timedelta(days=1)
    upsert_snapshot(conn, Snapshot(
        date=yesterday,
        timestamp=datetime.combine(yesterday, datetime.min.time()),
        assets=[bonk(0.00002, 5.0, 1000000.0)]
    ))
    upsert_snapshot(conn, Snapshot(
        date=TODAY,
        timestamp=datetime.combine(TODAY, datetime.min.time()),
        assets=[
            bonk(0.00003, 50.0, 1500000.0),
            AssetRecord(symbol='WIF', name='dogwifhat', address='MintWif', price=1.25,
                        volume24h=900000.0, market_cap=80000000.0, price_change24h=-4.0),
        ]
    ))
    conn.close()

    with patch('pipeline.run.load_tracking_config', return_value=SETTINGS), \
            patch('pipeline.run.db_path', return_value=str(database)), \
            patch('pipeline.run.output_dir', return_value=tmp_path / 'output'):
        yield tmp_path


def run_cli(*args):
    with patch.object(sys, 'argv', ['run.py', *args]):
        run.main()


class TestCommandDispatch:
    """Tests for argument handling."""

    def test_unknown_command(self, capsys):
        with pytest.raises(SystemExit):
            run_cli('bogus')

        assert "Unknown command: bogus" in capsys.readouterr().out

    def test_search_requires_query(self, cli_env, capsys):
        with pytest.raises(SystemExit):
            run_cli('search')

        assert "search <query>" in capsys.readouterr().out


class TestLookupCommands:
    """Tests for top, search and history."""

    def test_top_ranks_by_change(self, cli_env, capsys):
        run_cli('top', '5')
        out = capsys.readouterr().out

        assert f"Top 5 by 24h change ({TODAY})" in out
        lines = [line.split() for line in out.splitlines() if line.strip()[:1].isdigit()]
        assert [line[1] for line in lines] == ['BONK', 'WIF']
        assert '$0.00003000' in out
        assert '+50.00%' in out
        assert '$1.50M' in out

    def test_search_truncates_name(self, cli_env, capsys):
        run_cli('search', 'bonk')
        out = capsys.readouterr().out

        assert "1 assets matching 'bonk'" in out
        assert 'Bonk Inu Community T ' in out
        assert 'WIF' not in out

    def test_search_no_match(self, cli_env, capsys):
        run_cli('search', 'zzz')
        assert "No assets matching 'zzz'" in capsys.readouterr().out

    def test_history_with_window_metrics(self, cli_env, capsys):
        run_cli('history', 'MintBonk', '7')
        out = capsys.readouterr().out

        assert "BONK over the last 7 days" in out
        assert (TODAY - timedelta(days=1)).isoformat() in out
        assert TODAY.isoformat() in out
        assert "Price change: +50.00%" in out
        assert "Market cap range: $1.00M - $1.50M" in out

    def test_history_unknown_asset(self, cli_env, capsys):
        run_cli('history', 'NOPE')
        assert "No history for NOPE" in capsys.readouterr().out


class TestExportCommand:
    """Tests for export."""

    def test_export_writes_csv(self, cli_env, capsys):
        run_cli('export', '3')

        start = TODAY - timedelta(days=2)
        target = cli_env / 'output' / 'exports' / f'export-{start}_to_{TODAY}.csv'
        lines = target.read_text().splitlines()

        assert lines[0].startswith('Date,Symbol,Name,Address')
        assert len(lines) == 4
        assert "Exported 3 rows from 2 days" in capsys.readouterr().out
