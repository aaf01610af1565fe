"""
Core validators for canonical asset records.
Pure functions - no IO, network, or side effects.
"""

import math
import logging
from typing import List, Sequence, Tuple

from analysis.models import AssetRecord


logger = logging.getLogger(__name__)


NON_NEGATIVE_FIELDS = ['price', 'volume24h', 'market_cap', 'liquidity']
COUNT_FIELDS = ['buys24h', 'sells24h', 'transactions24h']


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_asset_row(row: AssetRecord) -> None:
    """
    Validate a canonical asset record.

    Missing numeric fields are allowed (they read as 0 downstream);
    present ones must be finite and non-negative.

    Args:
        row: Asset record to validate

    Raises:
        ValidationError: If validation fails
    """
    if not row.canonical_id:
        raise ValidationError("Asset has neither address nor symbol")

    for field in NON_NEGATIVE_FIELDS:
        value = getattr(row, field)
        if value is None:
            continue

        if not isinstance(value, (int, float)):
            raise ValidationError(f"{field} must be numeric, got {type(value)}")

        if not math.isfinite(value):
            raise ValidationError(f"{field} must be finite, got {value}")

        if value < 0:
            raise ValidationError(f"{field} must be non-negative, got {value}")

    # 24h change may be negative but must be a real number
    if row.price_change24h is not None and not math.isfinite(row.price_change24h):
        raise ValidationError(f"price_change24h must be finite, got {row.price_change24h}")

    for field in COUNT_FIELDS:
        value = getattr(row, field)
        if value is not None and value < 0:
            raise ValidationError(f"{field} must be non-negative, got {value}")

    if row.days_since_launch is not None and row.days_since_launch < 0:
        raise ValidationError(f"days_since_launch must be non-negative, got {row.days_since_launch}")


def sanitize_assets(rows: Sequence[AssetRecord]) -> Tuple[List[AssetRecord], int]:
    """
    Drop invalid records, logging each rejection.

    Returns:
        Tuple of (valid records, rejected count)
    """
    valid = []
    rejected = 0

    for row in rows:
        try:
            validate_asset_row(row)
            valid.append(row)
        except ValidationError as e:
            rejected += 1
            logger.warning(f"Rejected asset {row.canonical_id or '<unknown>'}: {e}")

    return valid, rejected
