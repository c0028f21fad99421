"""Tests for the scan feed client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.parsers.feed.client import TokenFeedClient, _parse_tokens


def _response(status: int = 200, payload: object = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def _row(address: str, **extra) -> dict:
    row = {"tokenAddress": address, "tokenName": address, "tokenSymbol": address[:3], "riskLevel": "safe"}
    row.update(extra)
    return row


class TestParseTokens:
    def test_bare_list(self) -> None:
        scans = _parse_tokens([_row("AAA"), _row("BBB")])
        assert [s.token_address for s in scans] == ["AAA", "BBB"]

    def test_wrapped_list(self) -> None:
        scans = _parse_tokens({"tokens": [_row("AAA")]})
        assert len(scans) == 1

    def test_invalid_rows_skipped(self) -> None:
        scans = _parse_tokens([_row("AAA"), {"tokenName": "no address"}, "garbage"])
        assert [s.token_address for s in scans] == ["AAA"]

    def test_null_flags_do_not_drop_rows(self) -> None:
        rows = [
            _row("AAA", hpIsHoneypot=None),
            _row("BBB", gpIsAirdropScam=None, gpFakeToken=None),
            _row("CCC", gpCanTakeBackOwnership=None, tokenName=None, tokenSymbol=None),
            _row("DDD", gpIsProxy=None, riskLevel=None),
        ]
        scans = _parse_tokens(rows)
        assert [s.token_address for s in scans] == ["AAA", "BBB", "CCC", "DDD"]
        assert scans[0].is_honeypot is False
        assert scans[2].token_name == ""
        assert scans[3].risk_level == "danger"

    def test_unexpected_shape(self) -> None:
        assert _parse_tokens({"data": 1}) is None


class TestTokenFeedClient:
    @pytest.mark.asyncio
    async def test_fetch_tokens(self) -> None:
        client = TokenFeedClient("http://localhost:3002", retry_delays=[0.0])
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(payload=[_row("AAA", gpHolderCount=12)]))

        scans = await client.fetch_tokens()

        assert scans is not None
        assert scans[0].holder_count == 12
        client._client.get.assert_awaited_once_with("http://localhost:3002/api/tokens")

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self) -> None:
        client = TokenFeedClient("http://localhost:3002", retry_delays=[0.0])
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(status=503))
        assert await client.fetch_tokens() is None

    @pytest.mark.asyncio
    async def test_rate_limit_retry(self) -> None:
        client = TokenFeedClient("http://localhost:3002", retry_delays=[0.0])
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=[_response(status=429), _response(payload=[])])
        assert await client.fetch_tokens() == []

    @pytest.mark.asyncio
    async def test_timeout_handling(self) -> None:
        client = TokenFeedClient("http://localhost:3002", retry_delays=[0.0])
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=httpx.TimeoutException("timeout"))
        assert await client.fetch_tokens() is None
        assert client._client.get.await_count == 3

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        client = TokenFeedClient("http://localhost:3002", retry_delays=[0.0])
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=resp)
        assert await client.fetch_tokens() is None
