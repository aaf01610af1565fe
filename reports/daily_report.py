"""
Daily report - compose the single-snapshot overview and render it as CSV and text.
"""

import pandas as pd
from datetime import datetime
from typing import Dict, Any

from analysis.models import Snapshot
from analysis.daily_overview import (
    biggest_losers,
    daily_summary,
    market_overview,
    new_launches,
    top_by_volume,
    top_gainers,
)
from reports.formatters import format_number, format_percentage


CSV_COLUMNS = {
    'symbol': 'Symbol',
    'name': 'Name',
    'price': 'Price',
    'price_change24h': 'Change_24h',
    'volume24h': 'Volume_24h',
    'market_cap': 'Market_Cap',
    'liquidity': 'Liquidity',
    'is_from_launchpad': 'Is_Launchpad',
    'days_since_launch': 'Days_Since_Launch',
}


def build_daily_report_data(snapshot: Snapshot) -> Dict[str, Any]:
    """Every daily surface for one snapshot in a single dictionary."""
    assets = snapshot.assets
    return {
        'date': snapshot.date.isoformat(),
        'generated_at': datetime.now().isoformat(),
        'total_assets': len(assets),
        'top_performers': top_gainers(assets, limit=10),
        'volume_leaders': top_by_volume(assets, limit=10),
        'biggest_losers': biggest_losers(assets, limit=5),
        'new_launches': new_launches(assets),
        'market_overview': market_overview(assets),
        'summary': daily_summary(assets),
    }


def render_daily_csv(report: Dict[str, Any]) -> str:
    """Top performers as CSV text with a 1-based Rank column."""
    frame = pd.DataFrame(report.get('top_performers') or [], columns=list(CSV_COLUMNS))
    frame = frame.rename(columns=CSV_COLUMNS)

    numeric = ['Price', 'Change_24h', 'Volume_24h', 'Market_Cap', 'Liquidity']
    frame[numeric] = frame[numeric].fillna(0)
    frame['Is_Launchpad'] = frame['Is_Launchpad'].map(lambda v: 'Yes' if v else 'No')
    frame['Days_Since_Launch'] = frame['Days_Since_Launch'].map(
        lambda v: 'N/A' if v is None or pd.isna(v) else int(v)
    )
    frame.insert(0, 'Rank', range(1, len(frame) + 1))

    return frame.to_csv(index=False)


def render_daily_text(report: Dict[str, Any]) -> str:
    summary = report['summary']
    overview = report['market_overview']

    lines = [
        f"DAILY SOLANA TOKEN REPORT - {report['date']}",
        "=" * 50,
        "",
        "MARKET OVERVIEW:",
        f"- Total assets tracked: {report['total_assets']}",
        f"- Total market cap: ${format_number(overview['total_market_cap'])}",
        f"- Total volume (24h): ${format_number(overview['total_volume'])}",
        f"- Average price change: {format_percentage(overview['avg_price_change'])}",
        f"- Market sentiment: {summary['market_sentiment'].upper()}",
        "",
        "PERFORMANCE HIGHLIGHTS:",
        f"- Gainers: {overview['gainers']} assets",
        f"- Losers: {overview['losers']} assets",
        f"- Top gainer: {summary['top_gainer'] or 'N/A'} ({format_percentage(summary['top_gainer_change'])})",
        f"- Highest volume: {summary['highest_volume'] or 'N/A'} (${format_number(summary['highest_volume_amount'])})",
        "",
        "NEW LAUNCHES:",
        f"- New assets in last 24h: {summary['new_launches_count']}",
        f"- Launchpad assets tracked: {overview['launchpad_assets']}",
        "",
        "TOP 5 PERFORMERS:",
    ]

    for i, asset in enumerate(report['top_performers'][:5], 1):
        lines.append(
            f"{i}. {asset['symbol']} - {format_percentage(asset['price_change24h'])} "
            f"(Vol: ${format_number(asset['volume24h'])})"
        )

    lines += ["", f"Generated: {report['generated_at']}", ""]
    return "\n".join(lines)
