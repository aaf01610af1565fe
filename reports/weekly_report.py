"""
Weekly report rendering - CSV table of top performers and a plain-text summary.
Pure functions over the weekly report dictionary; no IO.
"""

import pandas as pd
from typing import Dict, Any

from reports.formatters import format_date_display, format_number, format_percentage


CSV_COLUMNS = {
    'symbol': 'Symbol',
    'name': 'Name',
    'period_growth': 'Period_Growth',
    'weekly_growth': 'Weekly_Growth',
    'avg_volume': 'Avg_Volume',
    'max_market_cap': 'Max_Market_Cap',
    'days_active': 'Days_Active',
    'volume_consistency': 'Volume_Consistency',
    'price_volatility': 'Price_Volatility',
    'is_from_launchpad': 'Is_Launchpad',
}


def render_weekly_csv(report: Dict[str, Any]) -> str:
    """
    Top performers as CSV text.

    Period_Growth (first to last observed price) is the ranking key;
    Weekly_Growth skips days without a positive price.

    Args:
        report: Output of build_weekly_report_data()

    Returns:
        CSV string with a header row (header only when there are no performers)
    """
    frame = pd.DataFrame(report.get('top_performers') or [], columns=list(CSV_COLUMNS))
    frame = frame.rename(columns=CSV_COLUMNS)

    numeric = ['Period_Growth', 'Weekly_Growth', 'Avg_Volume', 'Max_Market_Cap', 'Volume_Consistency', 'Price_Volatility']
    frame[numeric] = frame[numeric].fillna(0)
    frame['Days_Active'] = frame['Days_Active'].fillna(0).astype(int)
    frame['Is_Launchpad'] = frame['Is_Launchpad'].map(lambda v: 'Yes' if v else 'No')

    return frame.to_csv(index=False)


def render_weekly_text(report: Dict[str, Any]) -> str:
    """
    Plain-text weekly summary.

    Args:
        report: Output of build_weekly_report_data()

    Returns:
        Multi-line summary string
    """
    summary = report['summary']
    launches = report['new_launch_analysis']
    survival = report.get('survival_analysis')

    lines = [
        "WEEKLY SOLANA TOKEN ANALYSIS REPORT",
        f"Period: {format_date_display(report['start_date'])} to {format_date_display(report['end_date'])}",
        "=" * 60,
        "",
        "WEEKLY OVERVIEW:",
        f"- Total unique assets analyzed: {report['total_unique_assets']}",
        f"- Days of data analyzed: {report['days_analyzed']}",
        f"- Top weekly performer: {summary['top_performer'] or 'N/A'} "
        f"({format_percentage(summary['top_performer_growth'])})",
        f"- Market trend: {summary['market_trend'].upper()}",
        f"- Average daily volume: ${format_number(summary['avg_daily_volume'])}",
        "",
        "NEW LAUNCH PERFORMANCE:",
        f"- Total new launches: {launches['total']}",
        f"- Successful launches (>50% growth): {launches['successful']}",
        f"- Success rate: {format_percentage(launches['success_rate'])}",
        f"- Average growth of successful launches: {format_percentage(launches['avg_growth_successful'])}",
    ]

    if survival:
        lines += [
            "",
            "ASSET SURVIVAL:",
            f"- Starting assets: {survival['starting_count']}",
            f"- Survived full period: {survival['survived']}",
            f"- Survival rate: {format_percentage(survival['survival_rate'])}",
            f"- New entrants: {survival['new_entrants']}",
        ]

    lines += ["", "TOP 5 WEEKLY PERFORMERS:"]
    performers = report.get('top_performers') or []
    if performers:
        for i, asset in enumerate(performers[:5], 1):
            lines.append(
                f"{i}. {asset['symbol']} - {format_percentage(asset['period_growth'])} "
                f"({asset['days_active']} days active)"
            )
    else:
        lines.append("No assets met the activity threshold")

    lines += ["", f"Generated: {report['generated_at']}", ""]
    return "\n".join(lines)
