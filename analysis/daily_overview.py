"""
Daily overview - single-snapshot market breadth and leader tables.
"""

from typing import Dict, Any, List, Sequence

from analysis.models import AssetRecord, num
from analysis.calculations.statistics import mean
from analysis.trend_analyzer import volume_to_mcap_ratio


def market_overview(assets: Sequence[AssetRecord]) -> Dict[str, Any]:
    """
    Market totals and breadth over assets with a positive market cap.

    Returns:
        Totals, mean 24h change, gainer/loser/neutral counts and launchpad count
    """
    valid = [a for a in assets if num(a.market_cap) > 0]

    gainers = sum(1 for a in valid if num(a.price_change24h) > 0)
    losers = sum(1 for a in valid if num(a.price_change24h) < 0)

    return {
        'total_assets': len(valid),
        'total_market_cap': sum(num(a.market_cap) for a in valid),
        'total_volume': sum(num(a.volume24h) for a in valid),
        'avg_price_change': mean([num(a.price_change24h) for a in valid]),
        'gainers': gainers,
        'losers': losers,
        'neutral': len(valid) - gainers - losers,
        'launchpad_assets': sum(1 for a in assets if a.is_from_launchpad),
    }


def _row(asset: AssetRecord) -> Dict[str, Any]:
    return {
        'canonical_id': asset.canonical_id,
        'symbol': asset.symbol,
        'name': asset.name,
        'price': asset.price,
        'price_change24h': asset.price_change24h,
        'volume24h': asset.volume24h,
        'market_cap': asset.market_cap,
        'liquidity': asset.liquidity,
        'is_from_launchpad': asset.is_from_launchpad,
        'days_since_launch': asset.days_since_launch,
    }


def top_gainers(assets: Sequence[AssetRecord], limit: int = 10) -> List[Dict[str, Any]]:
    """Assets with a reported 24h change, highest first."""
    reported = [a for a in assets if a.price_change24h is not None]
    reported.sort(key=lambda a: a.price_change24h, reverse=True)
    return [_row(a) for a in reported[:limit]]


def top_by_volume(assets: Sequence[AssetRecord], limit: int = 10) -> List[Dict[str, Any]]:
    active = [a for a in assets if num(a.volume24h) > 0]
    active.sort(key=lambda a: num(a.volume24h), reverse=True)

    rows = []
    for asset in active[:limit]:
        row = _row(asset)
        row['volume_to_mcap_ratio'] = volume_to_mcap_ratio(asset)
        rows.append(row)
    return rows


def biggest_losers(assets: Sequence[AssetRecord], limit: int = 5) -> List[Dict[str, Any]]:
    losing = [a for a in assets if a.price_change24h is not None and a.price_change24h < 0]
    losing.sort(key=lambda a: a.price_change24h)
    return [_row(a) for a in losing[:limit]]


def new_launches(assets: Sequence[AssetRecord], max_days: int = 1) -> List[Dict[str, Any]]:
    """Launchpad assets launched within `max_days`, newest first."""
    launches = [
        a for a in assets
        if a.is_from_launchpad and a.days_since_launch is not None and a.days_since_launch <= max_days
    ]
    launches.sort(key=lambda a: a.days_since_launch)
    return [_row(a) for a in launches]


def daily_summary(assets: Sequence[AssetRecord]) -> Dict[str, Any]:
    overview = market_overview(assets)
    gainer = top_gainers(assets, limit=1)
    volume_leader = top_by_volume(assets, limit=1)

    return {
        'market_sentiment': 'bullish' if overview['gainers'] > overview['losers'] else 'bearish',
        'top_gainer': gainer[0]['symbol'] if gainer else None,
        'top_gainer_change': gainer[0]['price_change24h'] if gainer else None,
        'highest_volume': volume_leader[0]['symbol'] if volume_leader else None,
        'highest_volume_amount': volume_leader[0]['volume24h'] if volume_leader else None,
        'new_launches_count': len(new_launches(assets)),
    }
