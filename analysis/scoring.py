"""
Scoring engine - composite 0-100 score, batch ranking and recommendations.
Deterministic; every adjustment is clamped before it is summed.
"""

import math
from typing import Dict, Any, List


BASE_SCORE = 50.0

LIQUIDITY_ADJUSTMENTS = {
    'healthy': 10.0,
    'moderate': 5.0,
    'poor': -10.0,
}


def _finite(value: Any) -> float:
    """Coerce to a finite float; anything else counts as 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score(analysis: Dict[str, Any]) -> float:
    """
    Composite performance score.

    Starting from 50:
    - + clamp(0.5 * price_change24h, -25, 25)
    - + min(0.3 * volume_to_mcap_ratio, 15)
    - + liquidity health bonus (+10 healthy, +5 moderate, -10 poor)
    - + 5 if buy/sell ratio > 1.2, - 5 if < 0.8

    Args:
        analysis: Output of trend_analyzer.analyze()

    Returns:
        Score clamped to [0, 100]
    """
    metrics = analysis.get('performance_metrics', {})

    change24h = _finite(metrics.get('price', {}).get('change24h'))
    volume_ratio = _finite(metrics.get('volume', {}).get('volume_to_mcap_ratio'))
    liquidity_health = metrics.get('liquidity', {}).get('liquidity_health')
    raw_ratio = metrics.get('trading', {}).get('buy_to_sell_ratio')
    buy_sell_ratio = 1.0 if raw_ratio is None else _finite(raw_ratio)

    total = BASE_SCORE
    total += _clamp(change24h * 0.5, -25.0, 25.0)
    total += min(volume_ratio * 0.3, 15.0)
    total += LIQUIDITY_ADJUSTMENTS.get(liquidity_health, 0.0)

    if buy_sell_ratio > 1.2:
        total += 5.0
    elif buy_sell_ratio < 0.8:
        total -= 5.0

    return _clamp(total, 0.0, 100.0)


def rank(analyses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Sort analyses by score (descending) and assign 1-based ranks.

    The sort is stable: equal scores keep their input order.

    Args:
        analyses: Scored analysis dictionaries (mutated in place with 'rank')

    Returns:
        New list in rank order
    """
    ranked = sorted(analyses, key=lambda a: a.get('score', 0.0), reverse=True)
    for position, analysis in enumerate(ranked, start=1):
        analysis['rank'] = position
    return ranked


def recommendation(analysis: Dict[str, Any]) -> str:
    """
    Derive a recommendation from score, alert count and momentum.

    Rules are evaluated in order; the first match wins:
    strong_buy, buy, hold, sell, watch.
    """
    value = analysis.get('score', 0.0)
    alert_count = len(analysis.get('alerts', []))
    momentum = analysis.get('trends', {}).get('momentum', {}).get('overall', 'neutral')

    if value > 80 and momentum == 'bullish' and alert_count == 0:
        return 'strong_buy'
    if value > 65 and momentum != 'bearish':
        return 'buy'
    if value > 50 and alert_count <= 1:
        return 'hold'
    if value < 35 or momentum == 'bearish':
        return 'sell'
    return 'watch'


def performance_summary(analysis: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an analysis into one summary row."""
    current = analysis.get('current', {})
    trends = analysis.get('trends', {})

    return {
        'canonical_id': current.get('canonical_id'),
        'symbol': current.get('symbol'),
        'name': current.get('name'),
        'score': analysis.get('score'),
        'rank': analysis.get('rank'),
        'price': current.get('price'),
        'market_cap': current.get('market_cap'),
        'volume24h': current.get('volume24h'),
        'price_change24h': current.get('price_change24h'),
        'momentum': trends.get('momentum', {}).get('overall'),
        'liquidity_health': trends.get('strength', {}).get('liquidity'),
        'sustainability': trends.get('sustainability', {}).get('overall'),
        'alerts': len(analysis.get('alerts', [])),
        'recommendation': recommendation(analysis),
    }
