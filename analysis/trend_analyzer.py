"""
Trend analyzer - per-asset momentum, strength, sustainability and alerts.
Pure functions over one asset's current record and its recent history.
"""

from typing import Dict, Any, List, Optional, Sequence

from analysis.models import AssetRecord, DailyPoint, num
from analysis.calculations.statistics import (
    consistency,
    is_increasing_trend,
    mean,
    percent_change,
    volatility,
)


# Number of most recent history points used for weekly context
HISTORY_WINDOW = 7

# Buy/sell ratio reported when there are buys but no sells
NO_SELLS_RATIO = 10.0

MOMENTUM_SCORES = {
    # 24h price momentum
    'very_bullish': 1.0,
    'bullish': 0.7,
    'slightly_bullish': 0.3,
    'neutral': 0.0,
    'slightly_bearish': -0.3,
    'bearish': -0.7,
    'very_bearish': -1.0,
    # volume / market cap activity
    'extremely_high': 1.0,
    'very_high': 0.8,
    'high': 0.6,
    'moderate': 0.3,
    'low': -0.2,
    'very_low': -0.5,
    'unknown': 0.0,
}


def analyze(current: AssetRecord, historical: Optional[Sequence[DailyPoint]] = None) -> Dict[str, Any]:
    """
    Produce the performance analysis for one asset.

    Args:
        current: Asset record from the current snapshot
        historical: Earlier daily points for the same asset, oldest first

    Returns:
        Analysis dictionary with performance_metrics, trends and alerts.
        `score` is 0 and `rank` is None until scored and ranked.
    """
    historical = list(historical or [])

    return {
        'current': current.to_dict(),
        'performance_metrics': calculate_performance_metrics(current, historical),
        'trends': {
            'momentum': calculate_momentum(current),
            'strength': calculate_strength(current),
            'sustainability': calculate_sustainability(current, historical),
        },
        'alerts': check_alerts(current),
        'score': 0.0,
        'rank': None,
    }


def volume_to_mcap_ratio(record: AssetRecord) -> float:
    """24h volume as a percentage of market cap (0 when market cap is missing)."""
    market_cap = num(record.market_cap)
    if market_cap <= 0:
        return 0.0
    return num(record.volume24h) / market_cap * 100


def buy_to_sell_ratio(buys: Optional[int], sells: Optional[int]) -> float:
    """Buys divided by sells; NO_SELLS_RATIO if only buys exist, 1.0 if neither."""
    if not sells:
        return NO_SELLS_RATIO if (buys or 0) > 0 else 1.0
    return (buys or 0) / sells


def calculate_performance_metrics(
    current: AssetRecord,
    historical: List[DailyPoint]
) -> Dict[str, Any]:
    """Price, volume, liquidity, market cap and trading sub-metrics."""
    volume = num(current.volume24h)
    transactions = num(current.transactions24h)
    market_cap = num(current.market_cap)
    liquidity = num(current.liquidity)

    metrics = {
        'price': {
            'current': current.price,
            'change24h': num(current.price_change24h),
        },
        'volume': {
            'current24h': volume,
            'volume_to_mcap_ratio': volume_to_mcap_ratio(current),
        },
        'liquidity': {
            'current': liquidity,
            'liquidity_to_mcap_ratio': liquidity / market_cap * 100 if market_cap > 0 else 0.0,
            'liquidity_health': assess_liquidity_health(current.liquidity, current.market_cap),
        },
        'market_cap': {
            'current': market_cap,
        },
        'trading': {
            'transactions24h': int(transactions),
            'buys24h': current.buys24h or 0,
            'sells24h': current.sells24h or 0,
            'buy_to_sell_ratio': buy_to_sell_ratio(current.buys24h, current.sells24h),
            'avg_transaction_size': volume / transactions if volume and transactions else 0.0,
        },
    }

    if historical:
        metrics['historical_trends'] = calculate_historical_trends(current, historical)

    return metrics


def calculate_historical_trends(
    current: AssetRecord,
    historical: List[DailyPoint]
) -> Dict[str, Any]:
    """Weekly volume, price, liquidity and market cap trends from the recent window."""
    recent = historical[-HISTORY_WINDOW:]

    volumes = [num(p.volume24h) for p in recent]
    prices = [num(p.price) for p in recent]
    liquidities = [num(p.liquidity) for p in recent]
    market_caps = [num(p.market_cap) for p in recent]

    avg_volume = mean(volumes)
    avg_liquidity = mean(liquidities)
    first_price = prices[0] or num(current.price)
    first_market_cap = market_caps[0] or num(current.market_cap)

    return {
        'volume': {
            'current': num(current.volume24h),
            'avg_weekly': avg_volume,
            'change_from_avg': percent_change(num(current.volume24h), avg_volume),
            'is_increasing': is_increasing_trend(volumes),
            'consistency': consistency(volumes),
        },
        'price': {
            'current': current.price,
            'weekly_change': percent_change(num(current.price), first_price),
            'is_increasing': is_increasing_trend(prices),
            'volatility': volatility(prices),
            'support_level': min(prices),
            'resistance_level': max(prices),
        },
        'liquidity': {
            'current': num(current.liquidity),
            'avg_weekly': avg_liquidity,
            'change_from_avg': percent_change(num(current.liquidity), avg_liquidity),
            'is_stable': consistency(liquidities) > 0.7,
        },
        'market_cap': {
            'current': num(current.market_cap),
            'weekly_growth': percent_change(num(current.market_cap), first_market_cap),
            'is_growing': is_increasing_trend(market_caps),
            'growth_consistency': consistency(market_caps),
        },
    }


def categorize_price_momentum(change: float) -> str:
    """Bucket a 24h percent change into seven momentum labels."""
    if change > 50:
        return 'very_bullish'
    if change > 20:
        return 'bullish'
    if change > 5:
        return 'slightly_bullish'
    if change > -5:
        return 'neutral'
    if change > -20:
        return 'slightly_bearish'
    if change > -50:
        return 'bearish'
    return 'very_bearish'


def categorize_volume_activity(volume: float, market_cap: float) -> str:
    """Bucket the volume/market cap ratio into activity labels."""
    if not market_cap:
        return 'unknown'

    ratio = volume / market_cap * 100
    if ratio > 100:
        return 'extremely_high'
    if ratio > 50:
        return 'very_high'
    if ratio > 20:
        return 'high'
    if ratio > 5:
        return 'moderate'
    if ratio > 1:
        return 'low'
    return 'very_low'


def calculate_momentum(current: AssetRecord) -> Dict[str, Any]:
    """
    Combine price and volume momentum into an overall label.

    Overall is bullish when the mean of both scores exceeds 0.6,
    bearish below -0.6, neutral otherwise.
    """
    price_label = categorize_price_momentum(num(current.price_change24h))
    volume_label = categorize_volume_activity(num(current.volume24h), num(current.market_cap))

    avg_score = (MOMENTUM_SCORES[price_label] + MOMENTUM_SCORES[volume_label]) / 2

    if avg_score > 0.6:
        overall = 'bullish'
    elif avg_score < -0.6:
        overall = 'bearish'
    else:
        overall = 'neutral'

    return {
        'price': price_label,
        'volume': volume_label,
        'score': avg_score,
        'overall': overall,
    }


def assess_liquidity_health(liquidity: Optional[float], market_cap: Optional[float]) -> str:
    """
    Classify liquidity as a share of market cap.

    Thresholds: > 10% healthy, > 5% moderate, > 1% low, else poor.
    Missing or zero inputs yield 'unknown'.
    """
    liquidity = num(liquidity)
    market_cap = num(market_cap)
    if not liquidity or not market_cap:
        return 'unknown'

    ratio = liquidity / market_cap * 100
    if ratio > 10:
        return 'healthy'
    if ratio > 5:
        return 'moderate'
    if ratio > 1:
        return 'low'
    return 'poor'


def assess_trading_activity(transactions: Optional[int], volume: Optional[float]) -> str:
    """Classify trading activity by transaction count and average trade size."""
    transactions = num(transactions)
    if not transactions:
        return 'inactive'

    avg_trade_size = num(volume) / transactions

    if transactions > 1000 and avg_trade_size > 100:
        return 'very_active'
    if transactions > 500 and avg_trade_size > 50:
        return 'active'
    if transactions > 100:
        return 'moderate'
    if transactions > 20:
        return 'low'
    return 'very_low'


def assess_buy_pressure(buys: Optional[int], sells: Optional[int]) -> str:
    ratio = buy_to_sell_ratio(buys, sells)

    if ratio > 2:
        return 'very_high'
    if ratio > 1.5:
        return 'high'
    if ratio > 1.2:
        return 'moderate'
    if ratio > 0.8:
        return 'balanced'
    if ratio > 0.5:
        return 'low'
    return 'very_low'


def calculate_strength(current: AssetRecord) -> Dict[str, Any]:
    return {
        'liquidity': assess_liquidity_health(current.liquidity, current.market_cap),
        'trading': assess_trading_activity(current.transactions24h, current.volume24h),
        'buy_pressure': assess_buy_pressure(current.buys24h, current.sells24h),
    }


def calculate_sustainability(
    current: AssetRecord,
    historical: List[DailyPoint]
) -> Dict[str, Any]:
    """
    Score how sustainable the current activity looks.

    Averages volume consistency, liquidity stability and price stability
    (1 - volatility/100, floored at 0) over the recent window plus today.
    Fewer than 3 history points yields a neutral 0.5 'unknown' result.
    """
    if len(historical) < 3:
        return {
            'score': 0.5,
            'factors': ['insufficient_data'],
            'overall': 'unknown',
        }

    recent = historical[-HISTORY_WINDOW:]

    volumes = [num(p.volume24h) for p in recent] + [num(current.volume24h)]
    liquidities = [num(p.liquidity) for p in recent] + [num(current.liquidity)]
    prices = [num(p.price) for p in recent] + [num(current.price)]

    volume_consistency = consistency(volumes)
    liquidity_stability = consistency(liquidities)
    price_stability = max(0.0, 1 - volatility(prices) / 100)

    avg_score = (volume_consistency + liquidity_stability + price_stability) / 3

    if avg_score > 0.7:
        overall = 'high'
    elif avg_score < 0.3:
        overall = 'low'
    else:
        overall = 'moderate'

    return {
        'volume_consistency': volume_consistency,
        'liquidity_stability': liquidity_stability,
        'price_stability': price_stability,
        'score': avg_score,
        'overall': overall,
    }


def check_alerts(current: AssetRecord) -> List[Dict[str, Any]]:
    """
    Independent threshold checks; any combination may fire.

    - price_breakout: 24h change > 100% (high)
    - price_dump: 24h change < -50% (high)
    - volume_spike: volume > 50% of market cap (medium)
    - low_liquidity: liquidity < 5,000 with market cap > 100,000 (high)
    """
    alerts = []
    change = num(current.price_change24h)

    if change > 100:
        alerts.append({
            'type': 'price_breakout',
            'severity': 'high',
            'message': f"Price increased by {change:+.2f}%",
            'value': change,
        })

    if change < -50:
        alerts.append({
            'type': 'price_dump',
            'severity': 'high',
            'message': f"Price decreased by {change:+.2f}%",
            'value': change,
        })

    ratio = volume_to_mcap_ratio(current)
    if ratio > 50:
        alerts.append({
            'type': 'volume_spike',
            'severity': 'medium',
            'message': f"High volume activity: {ratio:.2f}% of market cap",
            'value': ratio,
        })

    liquidity = num(current.liquidity)
    if liquidity < 5000 and num(current.market_cap) > 100000:
        alerts.append({
            'type': 'low_liquidity',
            'severity': 'high',
            'message': f"Low liquidity warning: ${liquidity:,.2f}",
            'value': liquidity,
        })

    return alerts
