"""
Launchpad adapter - recent launches and trending tokens from the LetsBonk.fun API.
Network IO allowed here, but minimal business logic.

Rows carry the raw launch timestamp; days since launch is resolved against
the snapshot date during normalization.
"""

import os
import re
import logging
import requests
from typing import Dict, Any, List, Optional, Sequence
from dotenv import load_dotenv

from ingestion.providers.http_client import ApiError, JsonApiClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = 'https://api.letsbonk.fun'
LAUNCH_PLATFORM = 'LetsBonk.fun'

# Base58 alphabet, 32-44 characters
SOLANA_ADDRESS_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')


class LaunchpadError(ApiError):
    """Raised when launchpad operations fail."""
    pass


def is_valid_solana_address(address: Any) -> bool:
    """True for strings that look like a base58 Solana address."""
    return isinstance(address, str) and bool(SOLANA_ADDRESS_PATTERN.match(address))


class LaunchpadClient(JsonApiClient):
    """LetsBonk.fun HTTP client; unset options come from the environment."""

    provider_name = 'Launchpad'
    error_class = LaunchpadError

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None,
        rate_limit_s: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        super().__init__(
            base_url=base_url or os.getenv('LAUNCHPAD_BASE_URL', DEFAULT_BASE_URL),
            max_retries=max_retries if max_retries is not None else int(os.getenv('LAUNCHPAD_MAX_RETRIES', '3')),
            timeout=timeout if timeout is not None else int(os.getenv('REQUESTS_TIMEOUT_S', '30')),
            rate_limit_s=rate_limit_s if rate_limit_s is not None else float(os.getenv('LAUNCHPAD_RATE_LIMIT_S', '1.0')),
            session=session
        )

    def recent_launches(self, hours: int = 24) -> List[Dict[str, Any]]:
        """Raw token objects launched within the last `hours`."""
        data = self.get_json('tokens/recent', params={'hours': hours})
        return data.get('tokens') or []

    def trending_tokens(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Raw trending token objects."""
        data = self.get_json('tokens/trending', params={'limit': limit})
        return data.get('tokens') or []

    def token_info(self, address: str) -> Optional[Dict[str, Any]]:
        """
        Raw launch record for one token, or None if the launchpad does not know it.

        Raises:
            ValueError: If the address is not a valid Solana address
            LaunchpadError: If the request fails after every retry
        """
        if not is_valid_solana_address(address):
            raise ValueError(f"Invalid Solana token address: {address}")

        data = self.get_json(f"tokens/{address}")
        return data.get('token') or None


def extract_launch_row(token: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Map one launchpad token object to a raw token row (camelCase, provider shape).

    Returns:
        Token dictionary flagged as a launchpad asset, or None without an identity
    """
    if not token:
        return None

    address = token.get('mint') or token.get('address')
    if not address and not token.get('symbol'):
        return None

    row = {
        'address': address,
        'name': token.get('name'),
        'symbol': token.get('symbol'),
        'launchTime': token.get('createdAt') or token.get('launchTime'),
        'creator': token.get('creator') or token.get('deployer'),
        'launchPlatform': LAUNCH_PLATFORM,
        'isFromLaunchpad': True,
    }

    # Trending objects carry a few market fields
    if token.get('volume24h') is not None:
        row['volume24h'] = token['volume24h']
    if token.get('priceChange24h') is not None:
        row['priceChange24h'] = token['priceChange24h']

    return row


def fetch_recent_launches(hours: int = 24, client: Optional[LaunchpadClient] = None) -> List[Dict[str, Any]]:
    """Launch rows from the last `hours`; an unavailable launchpad yields []."""
    client = client or LaunchpadClient()
    logger.info(f"Fetching recent launches from {LAUNCH_PLATFORM} (last {hours} hours)")

    try:
        tokens = client.recent_launches(hours)
    except LaunchpadError as e:
        logger.error(f"Failed to get recent launches: {e}")
        return []

    rows = [row for row in (extract_launch_row(t) for t in tokens) if row]
    logger.info(f"Found {len(rows)} recent launches")
    return rows


def fetch_trending_tokens(limit: int = 20, client: Optional[LaunchpadClient] = None) -> List[Dict[str, Any]]:
    """Trending launch rows; an unavailable launchpad yields []."""
    client = client or LaunchpadClient()
    logger.info(f"Fetching trending tokens from {LAUNCH_PLATFORM}")

    try:
        tokens = client.trending_tokens(limit)
    except LaunchpadError as e:
        logger.error(f"Failed to get trending tokens: {e}")
        return []

    rows = [row for row in (extract_launch_row(t) for t in tokens) if row]
    logger.info(f"Found {len(rows)} trending tokens")
    return rows


def enrich_with_launch_data(token: Dict[str, Any], client: Optional[LaunchpadClient] = None) -> Dict[str, Any]:
    """
    Copy of a DexScreener row marked with whether the launchpad knows it.

    Lookup failures mark the row as not from the launchpad.
    """
    client = client or LaunchpadClient()
    enriched = dict(token)

    try:
        info = client.token_info(token.get('address'))
    except (ValueError, LaunchpadError) as e:
        logger.debug(f"No launch data for {token.get('symbol')}: {e}")
        info = None

    launch = extract_launch_row(info) if info else None
    if launch is None:
        enriched['isFromLaunchpad'] = False
        return enriched

    enriched['isFromLaunchpad'] = True
    enriched['launchTime'] = launch['launchTime']
    enriched['launchPlatform'] = LAUNCH_PLATFORM
    return enriched


def collect_launchpad_tokens(
    dex_tokens: Sequence[Dict[str, Any]],
    hours: int = 24,
    trending_limit: int = 20,
    enrich: bool = True,
    client: Optional[LaunchpadClient] = None
) -> List[Dict[str, Any]]:
    """
    Combine DexScreener rows with launchpad launches and trending tokens.

    DexScreener rows come first and keep their market data; a launchpad
    listing for the same address marks the row as a launchpad asset and
    supplies its launch time. Launchpad-only tokens are appended after.

    Args:
        dex_tokens: Raw DexScreener token rows
        hours: Recent-launch window
        trending_limit: Maximum trending tokens requested
        enrich: Look up each DexScreener token on the launchpad
        client: Optional preconfigured client

    Returns:
        Raw token rows, DexScreener rows first
    """
    client = client or LaunchpadClient()

    launch_rows = fetch_recent_launches(hours, client=client) + fetch_trending_tokens(trending_limit, client=client)
    by_address = {}
    for row in launch_rows:
        if row['address'] and row['address'] not in by_address:
            by_address[row['address']] = row

    combined = []
    for token in dex_tokens:
        if enrich:
            token = enrich_with_launch_data(token, client=client)
        else:
            token = dict(token)

        listed = by_address.get(token.get('address'))
        if listed is not None:
            token['isFromLaunchpad'] = True
            if not token.get('launchTime'):
                token['launchTime'] = listed['launchTime']
            token['launchPlatform'] = LAUNCH_PLATFORM
        combined.append(token)

    combined.extend(launch_rows)

    logger.info(f"Combined {len(dex_tokens)} DexScreener rows with {len(launch_rows)} launchpad rows")
    return combined
