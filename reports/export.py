"""
Raw snapshot export - every stored asset row in a date range as one CSV table.
"""

import pandas as pd
from typing import Sequence

from analysis.models import Snapshot


CSV_COLUMNS = {
    'date': 'Date',
    'symbol': 'Symbol',
    'name': 'Name',
    'address': 'Address',
    'price': 'Price',
    'market_cap': 'Market_Cap',
    'volume24h': 'Volume_24h',
    'price_change24h': 'Change_24h',
    'liquidity': 'Liquidity',
    'is_from_launchpad': 'Is_Launchpad',
    'days_since_launch': 'Days_Since_Launch',
}


def render_export_csv(snapshots: Sequence[Snapshot]) -> str:
    """
    One CSV row per asset per stored day, in snapshot order.

    Args:
        snapshots: Snapshots in ascending date order (e.g. from load_range)

    Returns:
        CSV string with a header row; missing numbers export as 0
    """
    rows = []
    for snapshot in snapshots:
        for asset in snapshot.assets:
            row = asset.to_dict()
            row['date'] = snapshot.date.isoformat()
            rows.append(row)

    frame = pd.DataFrame(rows, columns=list(CSV_COLUMNS))
    frame = frame.rename(columns=CSV_COLUMNS)

    numeric = ['Price', 'Market_Cap', 'Volume_24h', 'Change_24h', 'Liquidity']
    frame[numeric] = frame[numeric].fillna(0)
    frame['Address'] = frame['Address'].fillna('')
    frame['Is_Launchpad'] = frame['Is_Launchpad'].map(lambda v: 'Yes' if v else 'No')
    frame['Days_Since_Launch'] = frame['Days_Since_Launch'].map(
        lambda v: '' if v is None or pd.isna(v) else int(v)
    )

    return frame.to_csv(index=False)
