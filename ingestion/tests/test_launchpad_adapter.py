"""
Tests for the launchpad adapter - launch feeds, enrichment and merging with DexScreener rows.
Network calls are mocked.
"""

import os
import pytest
import requests
from unittest.mock import Mock, patch

from ingestion.providers.launchpad_adapter import (
    LaunchpadClient,
    LaunchpadError,
    collect_launchpad_tokens,
    enrich_with_launch_data,
    extract_launch_row,
    fetch_recent_launches,
    fetch_trending_tokens,
    is_valid_solana_address
)


BONK_MINT = 'DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263'
WIF_MINT = 'EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm'
FRESH_MINT = '7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr'


def make_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def make_client(session, max_retries=1):
    return LaunchpadClient(
        base_url='https://launchpad.example.test',
        max_retries=max_retries,
        timeout=5,
        rate_limit_s=0,
        session=session
    )


def launch_token(mint, symbol, created_at='2025-07-19T10:00:00Z', **extra):
    token = {'mint': mint, 'symbol': symbol, 'name': f"{symbol} Token", 'createdAt': created_at}
    token.update(extra)
    return token


def dex_row(symbol, address):
    return {'symbol': symbol, 'address': address, 'price': 0.01, 'volume24h': 50000.0}


class TestLaunchpadClient:
    """Tests for the HTTP client."""

    def test_recent_launches_request(self):
        session = Mock()
        session.get.return_value = make_response({'tokens': [launch_token(FRESH_MINT, 'FRESH')]})
        client = make_client(session)

        tokens = client.recent_launches(24)

        assert [t['symbol'] for t in tokens] == ['FRESH']
        session.get.assert_called_once_with(
            'https://launchpad.example.test/tokens/recent', params={'hours': 24}, timeout=5
        )

    def test_token_info_missing_token(self):
        session = Mock()
        session.get.return_value = make_response({})

        assert make_client(session).token_info(BONK_MINT) is None

    def test_token_info_rejects_invalid_address(self):
        session = Mock()

        with pytest.raises(ValueError, match="Invalid Solana token address"):
            make_client(session).token_info('0xNotSolana')

        session.get.assert_not_called()

    @patch('ingestion.providers.http_client.time.sleep')
    def test_exhausted_retries_raise(self, mock_sleep):
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(LaunchpadError, match="after 2 attempts"):
            make_client(session, max_retries=1).trending_tokens(5)

    @patch.dict(os.environ, {'LAUNCHPAD_BASE_URL': 'https://env.launchpad.test/', 'LAUNCHPAD_MAX_RETRIES': '4'})
    def test_environment_defaults(self):
        client = LaunchpadClient(session=Mock(), rate_limit_s=0)

        assert client.base_url == 'https://env.launchpad.test'
        assert client.max_retries == 4


class TestExtractLaunchRow:
    """Tests for extract_launch_row() and is_valid_solana_address()."""

    def test_launch_fields(self):
        row = extract_launch_row(launch_token(FRESH_MINT, 'FRESH', creator='dev1'))

        assert row['address'] == FRESH_MINT
        assert row['launchTime'] == '2025-07-19T10:00:00Z'
        assert row['creator'] == 'dev1'
        assert row['launchPlatform'] == 'LetsBonk.fun'
        assert row['isFromLaunchpad'] is True
        assert 'volume24h' not in row

    def test_trending_market_fields(self):
        row = extract_launch_row({'address': WIF_MINT, 'symbol': 'WIF', 'launchTime': '2025-07-01',
                                  'volume24h': 12000, 'priceChange24h': -4.0})

        assert row['address'] == WIF_MINT
        assert row['launchTime'] == '2025-07-01'
        assert row['volume24h'] == 12000
        assert row['priceChange24h'] == -4.0

    def test_no_identity(self):
        assert extract_launch_row({}) is None
        assert extract_launch_row({'name': 'anon'}) is None

    @pytest.mark.parametrize('address,expected', [
        (BONK_MINT, True),
        ('0xCCC', False),
        ('short', False),
        (None, False),
    ])
    def test_address_validation(self, address, expected):
        assert is_valid_solana_address(address) is expected


class TestLaunchFeeds:
    """Tests for fetch_recent_launches(), fetch_trending_tokens() and enrich_with_launch_data()."""

    def test_recent_launches(self):
        client = Mock()
        client.recent_launches.return_value = [launch_token(FRESH_MINT, 'FRESH'), {}]

        rows = fetch_recent_launches(12, client=client)

        client.recent_launches.assert_called_once_with(12)
        assert [r['symbol'] for r in rows] == ['FRESH']

    def test_unavailable_launchpad_yields_empty(self):
        client = Mock()
        client.recent_launches.side_effect = LaunchpadError("down")
        client.trending_tokens.side_effect = LaunchpadError("down")

        assert fetch_recent_launches(client=client) == []
        assert fetch_trending_tokens(client=client) == []

    def test_enrich_known_token(self):
        client = Mock()
        client.token_info.return_value = launch_token(BONK_MINT, 'BONK', created_at='2025-07-10T00:00:00Z')
        original = dex_row('BONK', BONK_MINT)

        enriched = enrich_with_launch_data(original, client=client)

        assert enriched['isFromLaunchpad'] is True
        assert enriched['launchTime'] == '2025-07-10T00:00:00Z'
        assert enriched['price'] == 0.01
        assert 'isFromLaunchpad' not in original

    def test_enrich_unknown_or_failing_token(self):
        client = Mock()
        client.token_info.return_value = None
        assert enrich_with_launch_data(dex_row('WIF', WIF_MINT), client=client)['isFromLaunchpad'] is False

        client.token_info.side_effect = LaunchpadError("down")
        assert enrich_with_launch_data(dex_row('WIF', WIF_MINT), client=client)['isFromLaunchpad'] is False


class TestCollectLaunchpadTokens:
    """Tests for collect_launchpad_tokens()."""

    def test_merges_flags_and_appends_launch_only_rows(self):
        client = Mock()
        client.recent_launches.return_value = [
            launch_token(BONK_MINT, 'BONK', created_at='2025-07-18T00:00:00Z'),
            launch_token(FRESH_MINT, 'FRESH'),
        ]
        client.trending_tokens.return_value = []

        rows = collect_launchpad_tokens(
            [dex_row('BONK', BONK_MINT), dex_row('WIF', WIF_MINT)],
            enrich=False,
            client=client
        )

        assert [r['symbol'] for r in rows] == ['BONK', 'WIF', 'BONK', 'FRESH']
        # DexScreener row keeps its market data and gains the launch flag
        assert rows[0]['isFromLaunchpad'] is True
        assert rows[0]['launchTime'] == '2025-07-18T00:00:00Z'
        assert rows[0]['price'] == 0.01
        assert rows[1].get('isFromLaunchpad') is None
        assert rows[3]['isFromLaunchpad'] is True
        client.token_info.assert_not_called()

    def test_enrichment_looks_up_each_dex_row(self):
        client = Mock()
        client.recent_launches.return_value = []
        client.trending_tokens.return_value = []
        client.token_info.side_effect = lambda address: (
            launch_token(WIF_MINT, 'WIF') if address == WIF_MINT else None
        )

        rows = collect_launchpad_tokens(
            [dex_row('BONK', BONK_MINT), dex_row('WIF', WIF_MINT)],
            trending_limit=5,
            client=client
        )

        client.trending_tokens.assert_called_once_with(5)
        assert [r['isFromLaunchpad'] for r in rows] == [False, True]
        assert rows[1]['launchTime'] == '2025-07-19T10:00:00Z'

    def test_launchpad_down_keeps_dex_rows(self):
        client = Mock()
        client.recent_launches.side_effect = LaunchpadError("down")
        client.trending_tokens.side_effect = LaunchpadError("down")
        client.token_info.side_effect = LaunchpadError("down")

        rows = collect_launchpad_tokens([dex_row('BONK', BONK_MINT)], client=client)

        assert [r['symbol'] for r in rows] == ['BONK']
        assert rows[0]['isFromLaunchpad'] is False
