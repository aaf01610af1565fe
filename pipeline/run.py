"""
Pipeline runner CLI - makes the daily and weekly pipelines human-visible.
Usage: python pipeline/run.py daily|weekly|stats|clean|top|search|history|export [args]
"""

import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from analysis.daily_overview import top_gainers
from analysis.historical_aggregator import asset_history, window_metrics
from pipeline.config import ConfigError, db_path, load_tracking_config, output_dir
from pipeline.daily_analysis_dag import run_daily_analysis, DailyAnalysisConfig
from pipeline.weekly_report_dag import run_weekly_report, WeeklyReportConfig
from reports.atomic_writer import write_text_atomic
from reports.export import render_export_csv
from reports.formatters import format_currency, format_number, format_percentage, format_price
from storage.loaders import (
    clean_old_snapshots,
    get_connection,
    init_database,
    load_current,
    load_range,
    search_assets,
    snapshot_statistics
)


COMMANDS = ['daily', 'weekly', 'stats', 'clean', 'top', 'search', 'history', 'export']


def _usage():
    print("Usage:")
    print("  python pipeline/run.py daily [--no-collect] [YYYY-MM-DD]")
    print("  python pipeline/run.py weekly [days] [YYYY-MM-DD]")
    print("  python pipeline/run.py stats")
    print("  python pipeline/run.py clean [retention_days]")
    print("  python pipeline/run.py top [count]")
    print("  python pipeline/run.py search <query>")
    print("  python pipeline/run.py history <address|symbol> [days]")
    print("  python pipeline/run.py export [days]")
    print()
    print("Examples:")
    print("  python pipeline/run.py daily")
    print("  python pipeline/run.py weekly 7 2025-07-20")
    print("  python pipeline/run.py history BONK 14")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        print(f"Invalid date format: {value}. Use YYYY-MM-DD")
        sys.exit(1)


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        if len(sys.argv) >= 2:
            print(f"Unknown command: {sys.argv[1]}")
            print(f"Available commands: {', '.join(COMMANDS)}")
        _usage()
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]

    try:
        settings = load_tracking_config()
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)

    tracking = settings['tracking']

    # Setup database
    database = Path(db_path())
    database.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(str(database))
    init_database(conn)

    try:
        if command == 'daily':
            collect = '--no-collect' not in args
            dates = [a for a in args if a != '--no-collect']
            launchpad = settings['launchpad']

            config = DailyAnalysisConfig(
                search_terms=settings['dexscreener']['search_terms'],
                as_of=_parse_date(dates[0]) if dates else None,
                collect=collect,
                max_tokens=tracking['max_tokens_to_track'],
                min_market_cap=tracking['min_market_cap'],
                max_market_cap=tracking['max_market_cap'],
                min_volume=tracking['min_volume_24h'],
                include_launchpad=bool(launchpad['enabled']),
                launch_hours=launchpad['recent_hours'],
                trending_limit=launchpad['trending_limit'],
                enrich_launch_data=bool(launchpad['enrich']),
                history_days=tracking['history_window_days'],
                retention_days=tracking['data_retention_days'],
                output_dir=output_dir()
            )

            print(f"🚀 Running daily analysis for {config.as_of}")
            print(f"🔍 Collecting: {'yes' if collect else 'no (using stored snapshot)'}")
            print()

            result = run_daily_analysis(config, conn)
            _display_common(result)

            if result['status'] == 'completed':
                _display_daily_results(result)
            else:
                _display_failure(result)

        elif command == 'weekly':
            reports = settings['reports']
            days = int(args[0]) if args else reports.get('weekly_window_days', 7)

            config = WeeklyReportConfig(
                end_date=_parse_date(args[1]) if len(args) > 1 else None,
                days=days,
                output_dir=output_dir(),
                reconcile_by_symbol=bool(reports.get('reconcile_by_symbol', False))
            )

            print(f"🚀 Running weekly report")
            print(f"📅 Date range: {config.start_date} to {config.end_date} ({days} days)")
            print()

            result = run_weekly_report(config, conn)
            _display_common(result)

            if result['status'] == 'completed':
                _display_weekly_results(result)
            else:
                _display_failure(result)

        elif command == 'stats':
            stats = snapshot_statistics(conn)
            print("📊 Stored Data:")
            print(f"   Days stored: {stats['historical_days']}")
            print(f"   Last updated: {stats['last_updated'] or 'never'}")
            print(f"   Current assets: {stats['current_asset_count']}")
            print(f"   Launchpad assets: {stats['launchpad_assets']}")
            print(f"   Total volume (24h): ${format_number(stats['total_volume24h'])}")
            print(f"   Total market cap: ${format_number(stats['total_market_cap'])}")

        elif command == 'clean':
            retention = int(args[0]) if args else tracking['data_retention_days']
            deleted = clean_old_snapshots(conn, retention)
            print(f"🧹 Deleted {deleted} snapshots older than {retention} days")

        elif command == 'top':
            _show_top(conn, int(args[0]) if args else 10)

        elif command == 'search':
            if not args:
                print("Usage: python pipeline/run.py search <query>")
                sys.exit(1)
            _show_search(conn, args[0])

        elif command == 'history':
            if not args:
                print("Usage: python pipeline/run.py history <address|symbol> [days]")
                sys.exit(1)
            _show_history(conn, args[0], int(args[1]) if len(args) > 1 else 7)

        elif command == 'export':
            _export(conn, int(args[0]) if len(args) > 0 else 7)

    finally:
        conn.close()


def _display_common(result: dict):
    print("📊 Pipeline Results:")
    print(f"   Status: {result['status'].upper()}")
    print(f"   Run ID: {result['run_id']}")
    print(f"   Duration: {result['duration_seconds']:.1f}s")
    print()


def _display_failure(result: dict):
    print("❌ Pipeline Failed:")
    print(f"   Error: {result.get('error_message') or 'Unknown error'}")


def _display_daily_results(result: dict):
    print("✅ Data Processing:")
    print(f"   Assets fetched: {result['assets_fetched']}")
    print(f"   Assets stored: {result['assets_stored']}")
    if result['assets_rejected']:
        print(f"   Assets rejected: {result['assets_rejected']}")
    print(f"   Assets analyzed: {result['assets_analyzed']}")
    if result['assets_failed']:
        print(f"   Analysis failures: {result['assets_failed']}")
    print()

    if result['top_ranked']:
        print("🏆 Top Ranked:")
        for row in result['top_ranked'][:5]:
            print(f"   {row['rank']}. {row['symbol']} (score {row['score']:.1f})")
        print()

    for name, path in result['outputs'].items():
        print(f"💾 {name}: {path}")


def _display_weekly_results(result: dict):
    report = result['report']
    summary = report['summary']

    print("✅ Weekly Overview:")
    print(f"   Snapshots loaded: {result['snapshots_loaded']}")
    print(f"   Unique assets: {result['unique_assets']}")
    print(f"   Top performer: {summary['top_performer'] or 'N/A'} ({format_percentage(summary['top_performer_growth'])})")
    print(f"   Market trend: {summary['market_trend'].upper()}")
    print()

    for message in result['warnings']:
        print(f"⚠️  {message}")

    for name, path in result['outputs'].items():
        print(f"💾 {name}: {path}")


def _show_top(conn, count: int):
    current = load_current(conn)
    if current is None:
        print("❌ No stored snapshot. Run the daily pipeline first.")
        return

    print(f"🏆 Top {count} by 24h change ({current.date})")
    print(f"   {'Rank':<5} {'Symbol':<10} {'Price':>14} {'Change 24h':>11} {'Volume':>10} {'Market Cap':>11}")
    for rank, row in enumerate(top_gainers(current.assets, limit=count), 1):
        print(
            f"   {rank:<5} {row['symbol']:<10} {format_price(row['price']):>14} "
            f"{format_percentage(row['price_change24h']):>11} {format_currency(row['volume24h']):>10} "
            f"{format_currency(row['market_cap']):>11}"
        )


def _show_search(conn, query: str):
    matches = search_assets(conn, query)
    if not matches:
        print(f"🔍 No assets matching '{query}'")
        return

    print(f"🔍 {len(matches)} assets matching '{query}'")
    print(f"   {'Symbol':<10} {'Name':<20} {'Price':>14} {'Change':>9} {'Market Cap':>11}")
    for asset in matches:
        print(
            f"   {asset.symbol:<10} {(asset.name or '')[:20]:<20} {format_price(asset.price):>14} "
            f"{format_percentage(asset.price_change24h):>9} {format_currency(asset.market_cap):>11}"
        )


def _show_history(conn, identity: str, days: int):
    end = date.today()
    history = asset_history(load_range(conn, end - timedelta(days=days - 1), end), identity)
    if not history:
        print(f"❌ No history for {identity} in the last {days} days")
        return

    print(f"📈 {history[-1]['symbol']} over the last {days} days")
    print(f"   {'Date':<11} {'Price':>14} {'Change':>9} {'Volume':>10} {'Market Cap':>11}")
    for day in history:
        print(
            f"   {day['date'].isoformat():<11} {format_price(day['price']):>14} "
            f"{format_percentage(day['price_change24h']):>9} {format_currency(day['volume24h']):>10} "
            f"{format_currency(day['market_cap']):>11}"
        )

    metrics = window_metrics(history)
    if metrics:
        print()
        print(f"   Price change: {format_percentage(metrics['price_change_pct'])}")
        print(f"   Avg daily volume: {format_currency(metrics['avg_daily_volume'])}")
        print(f"   Market cap range: {format_currency(metrics['min_market_cap'])} - "
              f"{format_currency(metrics['max_market_cap'])}")


def _export(conn, days: int):
    end = date.today()
    start = end - timedelta(days=days - 1)
    snapshots = load_range(conn, start, end)

    target = output_dir() / 'exports' / f'export-{start}_to_{end}.csv'
    write = write_text_atomic(render_export_csv(snapshots), target)

    if write['status'] == 'completed':
        rows = sum(len(s.assets) for s in snapshots)
        print(f"📁 Exported {rows} rows from {len(snapshots)} days to {write['output_path']}")
    else:
        print(f"❌ Export failed: {write['error']}")
        sys.exit(1)


if __name__ == '__main__':
    main()
