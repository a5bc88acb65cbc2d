"""
Unit Tests for the Fallback Exchange Clients

These tests verify that the Binance, OKX, Bybit and Bitget clients:
- Call the right endpoint with the right query
- Normalize price and 24h change (percent)
- Turn in-body error codes into BusinessLogicError
- Refuse empty data and zero reference prices

Run with:
    pytest tests/unit/test_exchange_clients.py -v
"""

import pytest

from core.errors import BusinessLogicError, DecodeError, SymbolNotSupportedError, ZeroReferencePriceError
from exchanges.binance import BinanceAPIClient
from exchanges.bitget import BitgetAPIClient
from exchanges.bybit import BybitAPIClient
from exchanges.okx import OKXAPIClient


def mock_json(monkeypatch, client, payload):
    """Replace client._get_json with a stub returning `payload`; returns the call log."""
    calls = []

    async def mock_get_json(path, params=None, symbol=""):
        calls.append((path, params))
        return payload

    monkeypatch.setattr(client, "_get_json", mock_get_json)
    return calls


# ============================================
# Binance
# ============================================

class TestBinance:

    @pytest.mark.asyncio
    async def test_price_and_change(self, monkeypatch):
        client = BinanceAPIClient()
        calls = mock_json(monkeypatch, client, {"symbol": "SCRUSDT", "lastPrice": "0.05000000", "priceChangePercent": "-3.210"})

        price, change = await client.get_price_and_change("SCRUSDT")

        assert price == 0.05
        assert change == -3.21
        assert calls == [("/api/v3/ticker/24hr", {"symbol": "SCRUSDT"})]

    @pytest.mark.asyncio
    async def test_missing_field_is_decode_error(self, monkeypatch):
        client = BinanceAPIClient()
        mock_json(monkeypatch, client, {"symbol": "SCRUSDT"})

        with pytest.raises(DecodeError):
            await client.get_price_and_change("SCRUSDT")


# ============================================
# OKX
# ============================================

class TestOKX:

    @pytest.mark.asyncio
    async def test_change_derived_from_open(self, monkeypatch):
        client = OKXAPIClient()
        calls = mock_json(monkeypatch, client, {
            "code": "0",
            "msg": "",
            "data": [{"instId": "SCR-USDT", "last": "0.055", "open24h": "0.05"}]
        })

        price, change = await client.get_price_and_change("SCR-USDT")

        assert price == 0.055
        assert change == pytest.approx(10.0)
        assert calls == [("/api/v5/market/ticker", {"instId": "SCR-USDT"})]

    @pytest.mark.asyncio
    async def test_error_code(self, monkeypatch):
        client = OKXAPIClient()
        mock_json(monkeypatch, client, {"code": "51001", "msg": "Instrument ID does not exist", "data": []})

        with pytest.raises(BusinessLogicError) as exc_info:
            await client.get_price_and_change("NOPE-USDT")

        assert exc_info.value.code == "51001"

    @pytest.mark.asyncio
    async def test_empty_data(self, monkeypatch):
        client = OKXAPIClient()
        mock_json(monkeypatch, client, {"code": "0", "msg": "", "data": []})

        with pytest.raises(DecodeError, match="no data returned"):
            await client.get_price_and_change("SCR-USDT")

    @pytest.mark.asyncio
    async def test_zero_open(self, monkeypatch):
        client = OKXAPIClient()
        mock_json(monkeypatch, client, {"code": "0", "data": [{"last": "0.05", "open24h": "0"}]})

        with pytest.raises(ZeroReferencePriceError):
            await client.get_price_and_change("SCR-USDT")

    @pytest.mark.asyncio
    async def test_non_object_ticker_entry(self, monkeypatch):
        client = OKXAPIClient()
        mock_json(monkeypatch, client, {"code": "0", "data": ["oops"]})

        with pytest.raises(DecodeError, match="unexpected ticker entry"):
            await client.get_price_and_change("SCR-USDT")


# ============================================
# Bybit
# ============================================

class TestBybit:

    @pytest.mark.asyncio
    async def test_fraction_scaled_to_percent(self, monkeypatch):
        client = BybitAPIClient()
        calls = mock_json(monkeypatch, client, {
            "retCode": 0,
            "retMsg": "OK",
            "result": {"category": "spot", "list": [{"lastPrice": "0.05", "price24hPcnt": "-0.032"}]}
        })

        price, change = await client.get_price_and_change("SCRUSDT")

        assert price == 0.05
        assert change == pytest.approx(-3.2)
        assert calls == [("/v5/market/tickers", {"category": "spot", "symbol": "SCRUSDT"})]

    @pytest.mark.asyncio
    async def test_ret_code(self, monkeypatch):
        client = BybitAPIClient()
        mock_json(monkeypatch, client, {"retCode": 10001, "retMsg": "Not supported symbols", "result": {}})

        with pytest.raises(BusinessLogicError) as exc_info:
            await client.get_price_and_change("NOPEUSDT")

        assert exc_info.value.code == "10001"

    @pytest.mark.asyncio
    async def test_empty_list(self, monkeypatch):
        client = BybitAPIClient()
        mock_json(monkeypatch, client, {"retCode": 0, "result": {"list": []}})

        with pytest.raises(DecodeError):
            await client.get_price_and_change("SCRUSDT")

    @pytest.mark.asyncio
    async def test_non_object_result(self, monkeypatch):
        client = BybitAPIClient()
        mock_json(monkeypatch, client, {"retCode": 0, "result": "oops"})

        with pytest.raises(DecodeError, match="unexpected result"):
            await client.get_price_and_change("SCRUSDT")

    @pytest.mark.asyncio
    async def test_non_object_ticker_entry(self, monkeypatch):
        client = BybitAPIClient()
        mock_json(monkeypatch, client, {"retCode": 0, "result": {"list": ["oops"]}})

        with pytest.raises(DecodeError, match="unexpected ticker entry"):
            await client.get_price_and_change("SCRUSDT")


# ============================================
# Bitget
# ============================================

class TestBitget:

    @pytest.mark.asyncio
    async def test_change_derived_from_open(self, monkeypatch):
        client = BitgetAPIClient()
        calls = mock_json(monkeypatch, client, {
            "code": "00000",
            "msg": "success",
            "data": [{"symbol": "SCRUSDT", "lastPr": "0.048", "open": "0.05"}]
        })

        price, change = await client.get_price_and_change("SCRUSDT")

        assert price == 0.048
        assert change == pytest.approx(-4.0)
        assert calls == [("/api/v2/spot/market/tickers", {"symbol": "SCRUSDT"})]

    @pytest.mark.asyncio
    async def test_error_code(self, monkeypatch):
        client = BitgetAPIClient()
        mock_json(monkeypatch, client, {"code": "40034", "msg": "Parameter does not exist", "data": None})

        with pytest.raises(BusinessLogicError):
            await client.get_price_and_change("NOPEUSDT")

    @pytest.mark.asyncio
    async def test_zero_open(self, monkeypatch):
        client = BitgetAPIClient()
        mock_json(monkeypatch, client, {"code": "00000", "data": [{"lastPr": "0.048", "open": "0"}]})

        with pytest.raises(ZeroReferencePriceError):
            await client.get_price_and_change("SCRUSDT")

    @pytest.mark.asyncio
    async def test_null_ticker_entry(self, monkeypatch):
        client = BitgetAPIClient()
        mock_json(monkeypatch, client, {"code": "00000", "data": [None]})

        with pytest.raises(DecodeError, match="unexpected ticker entry"):
            await client.get_price_and_change("SCRUSDT")


class TestEmptySymbol:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_cls", [BinanceAPIClient, OKXAPIClient, BybitAPIClient, BitgetAPIClient])
    async def test_empty_symbol_is_not_supported(self, client_cls, monkeypatch):
        client = client_cls()
        calls = mock_json(monkeypatch, client, {})

        with pytest.raises(SymbolNotSupportedError):
            await client.get_price_and_change("")

        assert calls == []
