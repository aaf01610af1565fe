"""
Tests for the raw snapshot CSV export.
"""

from datetime import date, datetime

from analysis.models import AssetRecord, Snapshot
from reports.export import render_export_csv


HEADER = (
    'Date,Symbol,Name,Address,Price,Market_Cap,Volume_24h,Change_24h,Liquidity,'
    'Is_Launchpad,Days_Since_Launch'
)


def snapshot(day, assets):
    return Snapshot(date=day, timestamp=datetime.combine(day, datetime.min.time()), assets=assets)


class TestRenderExportCsv:
    """Tests for render_export_csv()."""

    def test_one_row_per_asset_per_day(self):
        snapshots = [
            snapshot(date(2025, 7, 19), [
                AssetRecord(symbol='BONK', name='Bonk', address='MintBonk', price=0.5, market_cap=1000.0,
                            volume24h=200.0, price_change24h=-2.5, liquidity=50.0),
            ]),
            snapshot(date(2025, 7, 20), [
                AssetRecord(symbol='BONK', name='Bonk', address='MintBonk', price=0.75, market_cap=1500.0,
                            volume24h=300.0, price_change24h=50.0, liquidity=60.0),
                AssetRecord(symbol='NEW', name='New', is_from_launchpad=True, days_since_launch=0),
            ]),
        ]

        lines = render_export_csv(snapshots).splitlines()

        assert lines[0] == HEADER
        assert lines[1] == '2025-07-19,BONK,Bonk,MintBonk,0.5,1000.0,200.0,-2.5,50.0,No,'
        assert lines[2].startswith('2025-07-20,BONK,Bonk,MintBonk,0.75,')
        assert lines[3].startswith('2025-07-20,NEW,New,,')
        assert lines[3].endswith(',Yes,0')
        assert len(lines) == 4

    def test_empty_range_header_only(self):
        assert render_export_csv([]).splitlines() == [HEADER]
