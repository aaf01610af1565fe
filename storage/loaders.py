"""
Database loaders - snapshot persistence for SQLite.
Thin IO layer with focus on data integrity and idempotence.
"""

import json
import sqlite3
import pandas as pd
from datetime import date, datetime, timedelta
from typing import Dict, Any, List, Tuple, Optional

from analysis.models import AssetRecord, Snapshot


ASSET_COLUMNS = [
    'canonical_id', 'symbol', 'name', 'address', 'price', 'volume24h',
    'market_cap', 'liquidity', 'price_change24h', 'buys24h', 'sells24h',
    'transactions24h', 'is_from_launchpad', 'days_since_launch'
]


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database with required tables.
    Idempotent - safe to call multiple times.

    Args:
        conn: SQLite connection
    """
    conn.execute("PRAGMA foreign_keys = ON")

    # One row per calendar day
    conn.execute("""
        CREATE TABLE IF NOT EXISTS snapshots (
            date TEXT PRIMARY KEY,
            timestamp TEXT NOT NULL,
            total_assets INTEGER NOT NULL,
            metadata TEXT,
            ingested_at TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS snapshot_assets (
            date TEXT NOT NULL REFERENCES snapshots(date) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            canonical_id TEXT NOT NULL,
            symbol TEXT,
            name TEXT,
            address TEXT,
            price REAL,
            volume24h REAL,
            market_cap REAL,
            liquidity REAL,
            price_change24h REAL,
            buys24h INTEGER,
            sells24h INTEGER,
            transactions24h INTEGER,
            is_from_launchpad INTEGER NOT NULL DEFAULT 0,
            days_since_launch INTEGER,
            PRIMARY KEY (date, canonical_id)
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS runs (
            run_id INTEGER PRIMARY KEY AUTOINCREMENT,
            dag_name TEXT NOT NULL,
            started_at DATETIME NOT NULL,
            finished_at DATETIME,
            status TEXT NOT NULL CHECK(status IN ('running', 'completed', 'failed')),
            rows_in INTEGER,
            rows_out INTEGER,
            error_message TEXT
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_assets_canonical_id ON snapshot_assets(canonical_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_assets_symbol ON snapshot_assets(symbol)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_runs_status ON runs(status)")

    conn.commit()


def get_connection(db_path: str = './data/tracker.db') -> sqlite3.Connection:
    """
    Get SQLite connection with proper configuration.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Configured SQLite connection
    """
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def upsert_snapshot(conn: sqlite3.Connection, snapshot: Snapshot) -> Tuple[int, int]:
    """
    Store a snapshot, replacing any earlier snapshot for the same date.
    Idempotent - can be called multiple times with same data.

    Args:
        conn: SQLite connection
        snapshot: Snapshot to persist

    Returns:
        Tuple of (inserted_count, updated_count) measured in assets
    """
    day = snapshot.date.isoformat()

    cursor = conn.execute(
        "SELECT canonical_id FROM snapshot_assets WHERE date = ?", (day,)
    )
    existing = {row[0] for row in cursor.fetchall()}

    conn.execute("DELETE FROM snapshot_assets WHERE date = ?", (day,))
    conn.execute("""
        INSERT OR REPLACE INTO snapshots (date, timestamp, total_assets, metadata, ingested_at)
        VALUES (?, ?, ?, ?, ?)
    """, (
        day,
        snapshot.timestamp.isoformat(),
        len(snapshot.assets),
        json.dumps(snapshot.metadata, default=str),
        datetime.now().isoformat()
    ))

    inserted = 0
    updated = 0

    for position, asset in enumerate(snapshot.assets):
        conn.execute("""
            INSERT OR REPLACE INTO snapshot_assets (
                date, position, canonical_id, symbol, name, address, price,
                volume24h, market_cap, liquidity, price_change24h, buys24h,
                sells24h, transactions24h, is_from_launchpad, days_since_launch
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            day, position, asset.canonical_id, asset.symbol, asset.name,
            asset.address, asset.price, asset.volume24h, asset.market_cap,
            asset.liquidity, asset.price_change24h, asset.buys24h,
            asset.sells24h, asset.transactions24h, int(asset.is_from_launchpad),
            asset.days_since_launch
        ))

        if asset.canonical_id in existing:
            updated += 1
        else:
            inserted += 1

    conn.commit()
    return (inserted, updated)


def _assets_frame(conn: sqlite3.Connection, start: str, end: str) -> pd.DataFrame:
    frame = pd.read_sql_query(
        f"""
        SELECT date, {', '.join(ASSET_COLUMNS)}
        FROM snapshot_assets
        WHERE date >= ? AND date <= ?
        ORDER BY date, position
        """,
        conn,
        params=(start, end)
    )
    # NULL columns come back as NaN
    return frame.astype(object).where(frame.notna(), None)


def load_range(conn: sqlite3.Connection, start: date, end: date) -> List[Snapshot]:
    """
    Load all snapshots with start <= date <= end.

    Args:
        conn: SQLite connection
        start: First day (inclusive)
        end: Last day (inclusive)

    Returns:
        Snapshots in ascending date order; days without a snapshot are absent
    """
    start_s, end_s = start.isoformat(), end.isoformat()

    cursor = conn.execute("""
        SELECT date, timestamp, metadata
        FROM snapshots
        WHERE date >= ? AND date <= ?
        ORDER BY date
    """, (start_s, end_s))
    headers = cursor.fetchall()

    if not headers:
        return []

    assets_by_date: Dict[str, List[AssetRecord]] = {}
    for row in _assets_frame(conn, start_s, end_s).to_dict('records'):
        day = row.pop('date')
        row.pop('canonical_id')
        assets_by_date.setdefault(day, []).append(AssetRecord.from_dict(row))

    snapshots = []
    for day, timestamp, metadata in headers:
        snapshots.append(Snapshot(
            date=date.fromisoformat(day),
            timestamp=datetime.fromisoformat(timestamp),
            assets=assets_by_date.get(day, []),
            metadata=json.loads(metadata) if metadata else {}
        ))

    return snapshots


def load_current(conn: sqlite3.Connection) -> Optional[Snapshot]:
    """Most recent snapshot, or None if nothing is stored."""
    cursor = conn.execute("SELECT MAX(date) FROM snapshots")
    latest = cursor.fetchone()[0]

    if latest is None:
        return None

    latest_date = date.fromisoformat(latest)
    return load_range(conn, latest_date, latest_date)[0]


def clean_old_snapshots(
    conn: sqlite3.Connection,
    retention_days: int = 30,
    today: Optional[date] = None
) -> int:
    """
    Delete snapshots older than the retention window.

    Returns:
        Number of snapshots deleted
    """
    if today is None:
        today = date.today()

    cutoff = (today - timedelta(days=retention_days)).isoformat()

    conn.execute("DELETE FROM snapshot_assets WHERE date < ?", (cutoff,))
    cursor = conn.execute("DELETE FROM snapshots WHERE date < ?", (cutoff,))
    conn.commit()

    return cursor.rowcount


def snapshot_statistics(conn: sqlite3.Connection) -> Dict[str, Any]:
    """
    Headline counts for the stored data.

    Returns:
        Dictionary with current asset count, last update, stored days,
        launchpad asset count and current totals
    """
    cursor = conn.execute("SELECT COUNT(*), MAX(date) FROM snapshots")
    days, latest = cursor.fetchone()

    stats = {
        'historical_days': days or 0,
        'last_updated': None,
        'current_asset_count': 0,
        'launchpad_assets': 0,
        'total_volume24h': 0.0,
        'total_market_cap': 0.0,
    }

    if latest is None:
        return stats

    cursor = conn.execute("SELECT timestamp FROM snapshots WHERE date = ?", (latest,))
    stats['last_updated'] = cursor.fetchone()[0]

    cursor = conn.execute("""
        SELECT
            COUNT(*),
            SUM(is_from_launchpad),
            COALESCE(SUM(volume24h), 0),
            COALESCE(SUM(market_cap), 0)
        FROM snapshot_assets
        WHERE date = ?
    """, (latest,))
    count, launchpad, volume, market_cap = cursor.fetchone()

    stats['current_asset_count'] = count or 0
    stats['launchpad_assets'] = launchpad or 0
    stats['total_volume24h'] = float(volume)
    stats['total_market_cap'] = float(market_cap)

    return stats


def search_assets(conn: sqlite3.Connection, query: str, limit: int = 10) -> List[AssetRecord]:
    """
    Case-insensitive substring search over the latest snapshot's
    symbol, name and address.
    """
    current = load_current(conn)
    if current is None:
        return []

    needle = query.lower()
    matches = [
        a for a in current.assets
        if needle in (a.symbol or '').lower()
        or needle in (a.name or '').lower()
        or needle in (a.address or '').lower()
    ]
    return matches[:limit]
