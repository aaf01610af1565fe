"""
Tests for weekly report rendering - CSV table and plain-text summary.
"""

import pytest

from reports.weekly_report import render_weekly_csv, render_weekly_text


def performer(symbol, growth, days=7, launchpad=False, **overrides):
    row = {
        'canonical_id': f"Mint{symbol}",
        'symbol': symbol,
        'name': f"{symbol} Token",
        'period_growth': growth,
        'weekly_growth': growth,
        'avg_volume': 50000.0,
        'max_market_cap': 200000.0,
        'days_active': days,
        'is_from_launchpad': launchpad,
        'volume_consistency': 0.8,
        'price_volatility': 0.05,
    }
    row.update(overrides)
    return row


@pytest.fixture
def report():
    return {
        'start_date': '2025-07-14',
        'end_date': '2025-07-20',
        'generated_at': '2025-07-20T18:00:00',
        'days_analyzed': 7,
        'total_unique_assets': 12,
        'top_performers': [
            performer('RISE', 100.0),
            performer('PAD', 60.0, days=4, launchpad=True, max_market_cap=None),
        ],
        'new_launch_analysis': {
            'total': 2,
            'successful': 1,
            'moderate': 0,
            'unsuccessful': 1,
            'success_rate': 50.0,
            'avg_growth_successful': 60.0,
            'top_new_performers': [],
        },
        'survival_analysis': {
            'starting_count': 10,
            'survived': 7,
            'survival_rate': 70.0,
            'new_entrants': 2,
        },
        'summary': {
            'top_performer': 'RISE',
            'top_performer_growth': 100.0,
            'market_trend': 'increasing',
            'avg_daily_volume': 1250000.0,
        },
    }


class TestRenderWeeklyCsv:
    """Tests for render_weekly_csv()."""

    def test_header_and_rows(self, report):
        lines = render_weekly_csv(report).splitlines()

        assert lines[0] == (
            'Symbol,Name,Period_Growth,Weekly_Growth,Avg_Volume,Max_Market_Cap,Days_Active,'
            'Volume_Consistency,Price_Volatility,Is_Launchpad'
        )
        assert lines[1] == 'RISE,RISE Token,100.0,100.0,50000.0,200000.0,7,0.8,0.05,No'
        assert lines[2] == 'PAD,PAD Token,60.0,60.0,50000.0,0.0,4,0.8,0.05,Yes'

    def test_growth_columns_kept_apart(self, report):
        report['top_performers'] = [performer('GAP', 0.0, weekly_growth=100.0)]
        lines = render_weekly_csv(report).splitlines()

        assert lines[1].startswith('GAP,GAP Token,0.0,100.0,')

    def test_no_performers_header_only(self, report):
        report['top_performers'] = []
        lines = render_weekly_csv(report).splitlines()

        assert len(lines) == 1
        assert lines[0].startswith('Symbol,Name')


class TestRenderWeeklyText:
    """Tests for render_weekly_text()."""

    def test_sections(self, report):
        text = render_weekly_text(report)

        assert text.startswith("WEEKLY SOLANA TOKEN ANALYSIS REPORT")
        assert "Period: July 14, 2025 to July 20, 2025" in text
        assert "- Total unique assets analyzed: 12" in text
        assert "- Top weekly performer: RISE (+100.00%)" in text
        assert "- Market trend: INCREASING" in text
        assert "- Average daily volume: $1.25M" in text
        assert "- Success rate: +50.00%" in text
        assert "- Survival rate: +70.00%" in text
        assert "1. RISE - +100.00% (7 days active)" in text
        assert "2. PAD - +60.00% (4 days active)" in text

    def test_performers_listed_by_period_growth(self, report):
        report['top_performers'] = [performer('GAP', 0.0, weekly_growth=100.0)]
        text = render_weekly_text(report)

        assert "1. GAP - +0.00% (7 days active)" in text
        assert "+100.00% (7 days active)" not in text

    def test_without_survival_or_performers(self, report):
        report['survival_analysis'] = None
        report['top_performers'] = []
        report['summary']['top_performer'] = None
        report['summary']['top_performer_growth'] = None

        text = render_weekly_text(report)

        assert "ASSET SURVIVAL" not in text
        assert "No assets met the activity threshold" in text
        assert "- Top weekly performer: N/A (N/A)" in text
