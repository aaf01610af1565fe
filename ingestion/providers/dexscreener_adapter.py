"""
DexScreener adapter - fetch Solana pair metrics from the DexScreener API.
Network IO allowed here, but minimal business logic.
"""

import os
import logging
import requests
from typing import Dict, Any, List, Optional, Sequence
from dotenv import load_dotenv

from ingestion.providers.http_client import ApiError, JsonApiClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = 'https://api.dexscreener.com/latest/dex'


class DexScreenerError(ApiError):
    """Raised when DexScreener operations fail."""
    pass


class DexScreenerClient(JsonApiClient):
    """DexScreener HTTP client; unset options come from the environment."""

    provider_name = 'DexScreener'
    error_class = DexScreenerError

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None,
        rate_limit_s: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        super().__init__(
            base_url=base_url or os.getenv('DEXSCREENER_BASE_URL', DEFAULT_BASE_URL),
            max_retries=max_retries if max_retries is not None else int(os.getenv('DEXSCREENER_MAX_RETRIES', '3')),
            timeout=timeout if timeout is not None else int(os.getenv('REQUESTS_TIMEOUT_S', '30')),
            rate_limit_s=rate_limit_s if rate_limit_s is not None else float(os.getenv('DEXSCREENER_RATE_LIMIT_S', '1.0')),
            session=session
        )

    def search_pairs(self, query: str) -> List[Dict[str, Any]]:
        """Raw pairs matching a search query."""
        data = self.get_json('search', params={'q': query})
        return data.get('pairs') or []

def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def extract_token_metrics(pair: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Map one DexScreener pair to a raw token row (camelCase, provider shape).

    Args:
        pair: Pair object from the DexScreener API

    Returns:
        Token dictionary, or None when the pair has no base token
    """
    if not pair or not pair.get('baseToken'):
        return None

    token = pair['baseToken']
    txns_24h = (pair.get('txns') or {}).get('h24') or {}
    buys = int(txns_24h.get('buys') or 0)
    sells = int(txns_24h.get('sells') or 0)

    return {
        'address': token.get('address'),
        'name': token.get('name'),
        'symbol': token.get('symbol'),
        'price': _to_float(pair.get('priceUsd')),
        # fdv is reported as market cap
        'marketCap': _to_float(pair.get('fdv')),
        'liquidity': _to_float((pair.get('liquidity') or {}).get('usd')),
        'volume24h': _to_float((pair.get('volume') or {}).get('h24')),
        'priceChange24h': _to_float((pair.get('priceChange') or {}).get('h24')),
        'buys24h': buys,
        'sells24h': sells,
        'transactions24h': buys + sells,
        'pairAddress': pair.get('pairAddress'),
        'dexId': pair.get('dexId'),
        'chainId': pair.get('chainId'),
        'url': pair.get('url') or f"https://dexscreener.com/solana/{pair.get('pairAddress')}",
    }


def fetch_solana_pairs(
    search_terms: Sequence[str],
    min_volume: float = 1000,
    client: Optional[DexScreenerClient] = None
) -> List[Dict[str, Any]]:
    """
    Run each search term and keep Solana pairs with meaningful 24h volume.

    A failing search term is logged and skipped.
    """
    client = client or DexScreenerClient()

    pairs = []
    for term in search_terms:
        try:
            results = client.search_pairs(term)
        except DexScreenerError as e:
            logger.error(f"Search failed for {term}: {e}")
            continue

        pairs.extend(
            p for p in results
            if p.get('chainId') == 'solana'
            and _to_float((p.get('volume') or {}).get('h24')) > min_volume
        )

    return pairs


def fetch_top_tokens(
    search_terms: Sequence[str],
    limit: int = 50,
    min_market_cap: float = 50000,
    max_market_cap: float = 100000000,
    min_volume: float = 1000,
    client: Optional[DexScreenerClient] = None
) -> List[Dict[str, Any]]:
    """
    Top Solana tokens by 24h volume within a market cap band.

    Args:
        search_terms: DexScreener search queries to run
        limit: Maximum number of tokens returned
        min_market_cap: Lower market cap bound (inclusive)
        max_market_cap: Upper market cap bound (inclusive)
        min_volume: Pairs at or below this 24h volume are dropped
        client: Optional preconfigured client

    Returns:
        Raw token rows in provider format (normalization happens later)
    """
    logger.info("Fetching top Solana tokens from DexScreener")

    tokens = []
    for pair in fetch_solana_pairs(search_terms, min_volume=min_volume, client=client):
        token = extract_token_metrics(pair)
        if token is None:
            continue
        if min_market_cap <= token['marketCap'] <= max_market_cap and token['liquidity'] > 0:
            tokens.append(token)

    tokens.sort(key=lambda t: t['volume24h'], reverse=True)
    tokens = tokens[:limit]

    logger.info(f"Found {len(tokens)} tokens matching criteria")
    return tokens
