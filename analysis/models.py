"""
Core data model for snapshot analytics.
Asset records carry their canonical identity, resolved once at construction.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Any, List, Optional


# Source JSON uses camelCase; canonical rows use snake_case
_FIELD_ALIASES = {
    'volume24h': ('volume24h', 'volume_24h'),
    'market_cap': ('marketCap', 'market_cap'),
    'price_change24h': ('priceChange24h', 'price_change24h', 'price_change_24h'),
    'buys24h': ('buys24h', 'buys_24h'),
    'sells24h': ('sells24h', 'sells_24h'),
    'transactions24h': ('transactions24h', 'transactions_24h'),
    'is_from_launchpad': ('isFromLaunchpad', 'isFromLetsBonk', 'is_from_launchpad'),
    'days_since_launch': ('daysSinceLaunch', 'days_since_launch'),
}


def _pick(raw: Dict[str, Any], name: str) -> Any:
    """Return the first present alias of a field, or None."""
    for key in _FIELD_ALIASES.get(name, (name,)):
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


def resolve_canonical_id(address: Optional[str], symbol: Optional[str]) -> str:
    """
    Resolve the join key for an asset: address, falling back to symbol.

    Args:
        address: On-chain address (may be None or empty)
        symbol: Ticker symbol

    Returns:
        Canonical identity string (empty string if neither is present)
    """
    if address:
        return address
    return symbol or ''


def num(value: Optional[float]) -> float:
    """Treat missing or non-finite numbers as 0 for arithmetic."""
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


@dataclass
class AssetRecord:
    """A single asset's metrics at snapshot time."""
    symbol: str
    name: str = ''
    address: Optional[str] = None
    price: Optional[float] = None
    volume24h: Optional[float] = None
    market_cap: Optional[float] = None
    liquidity: Optional[float] = None
    price_change24h: Optional[float] = None
    buys24h: Optional[int] = None
    sells24h: Optional[int] = None
    transactions24h: Optional[int] = None
    is_from_launchpad: bool = False
    days_since_launch: Optional[int] = None
    canonical_id: str = field(init=False)

    def __post_init__(self):
        self.canonical_id = resolve_canonical_id(self.address, self.symbol)
        if self.transactions24h is None and (self.buys24h is not None or self.sells24h is not None):
            self.transactions24h = (self.buys24h or 0) + (self.sells24h or 0)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'AssetRecord':
        """Build a record from a camelCase or snake_case dictionary."""
        return cls(
            symbol=raw.get('symbol') or '',
            name=raw.get('name') or '',
            address=raw.get('address') or None,
            price=_optional_float(_pick(raw, 'price')),
            volume24h=_optional_float(_pick(raw, 'volume24h')),
            market_cap=_optional_float(_pick(raw, 'market_cap')),
            liquidity=_optional_float(_pick(raw, 'liquidity')),
            price_change24h=_optional_float(_pick(raw, 'price_change24h')),
            buys24h=_optional_int(_pick(raw, 'buys24h')),
            sells24h=_optional_int(_pick(raw, 'sells24h')),
            transactions24h=_optional_int(_pick(raw, 'transactions24h')),
            is_from_launchpad=bool(_pick(raw, 'is_from_launchpad') or False),
            days_since_launch=_optional_int(_pick(raw, 'days_since_launch')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'canonical_id': self.canonical_id,
            'symbol': self.symbol,
            'name': self.name,
            'address': self.address,
            'price': self.price,
            'volume24h': self.volume24h,
            'market_cap': self.market_cap,
            'liquidity': self.liquidity,
            'price_change24h': self.price_change24h,
            'buys24h': self.buys24h,
            'sells24h': self.sells24h,
            'transactions24h': self.transactions24h,
            'is_from_launchpad': self.is_from_launchpad,
            'days_since_launch': self.days_since_launch,
        }


@dataclass
class Snapshot:
    """One dated capture of all tracked assets."""
    date: date
    timestamp: datetime
    assets: List[AssetRecord] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Snapshot':
        """Build a snapshot from a stored JSON document."""
        snapshot_date = raw['date']
        if isinstance(snapshot_date, str):
            snapshot_date = date.fromisoformat(snapshot_date)

        timestamp = raw.get('timestamp')
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
        elif timestamp is None:
            timestamp = datetime.combine(snapshot_date, datetime.min.time())

        assets = [AssetRecord.from_dict(t) for t in raw.get('tokens', raw.get('assets', []))]
        return cls(
            date=snapshot_date,
            timestamp=timestamp,
            assets=assets,
            metadata=raw.get('metadata') or {}
        )

    def identities(self) -> set:
        return {asset.canonical_id for asset in self.assets}


@dataclass
class DailyPoint:
    """One day of an asset's history."""
    date: date
    price: Optional[float] = None
    volume24h: Optional[float] = None
    market_cap: Optional[float] = None
    price_change24h: Optional[float] = None
    liquidity: Optional[float] = None

    @classmethod
    def from_record(cls, day: date, record: AssetRecord) -> 'DailyPoint':
        return cls(
            date=day,
            price=record.price,
            volume24h=record.volume24h,
            market_cap=record.market_cap,
            price_change24h=record.price_change24h,
            liquidity=record.liquidity,
        )


@dataclass
class AssetSeries:
    """
    Per-asset time series derived from a range of snapshots.

    Running min/max market cap stay None until the first observation
    so no sentinel value leaks into downstream arithmetic.
    """
    canonical_id: str
    latest: AssetRecord
    first_seen: date
    last_seen: date
    daily_points: List[DailyPoint] = field(default_factory=list)
    days_active: int = 0
    max_market_cap: Optional[float] = None
    min_market_cap: Optional[float] = None
    total_volume: float = 0.0
    weekly_growth: float = 0.0
    avg_volume: float = 0.0
    avg_market_cap: float = 0.0
    volume_consistency: float = 0.0
    price_volatility: float = 0.0

    @property
    def symbol(self) -> str:
        return self.latest.symbol

    @property
    def name(self) -> str:
        return self.latest.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'canonical_id': self.canonical_id,
            'symbol': self.symbol,
            'name': self.name,
            'first_seen': self.first_seen.isoformat(),
            'last_seen': self.last_seen.isoformat(),
            'days_active': self.days_active,
            'max_market_cap': self.max_market_cap,
            'min_market_cap': self.min_market_cap,
            'total_volume': self.total_volume,
            'weekly_growth': self.weekly_growth,
            'avg_volume': self.avg_volume,
            'avg_market_cap': self.avg_market_cap,
            'volume_consistency': self.volume_consistency,
            'price_volatility': self.price_volatility,
            'is_from_launchpad': self.latest.is_from_launchpad,
            'days_since_launch': self.latest.days_since_launch,
        }
