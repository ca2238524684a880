"""Unit tests for frame inflation, envelope parsing and table decoding."""

from __future__ import annotations

import pytest

from okfutures.ingestion.codec import (
    TABLE_FUTURES_TICKER,
    CodecError,
    FlateDecompressor,
    channel,
    decode_accounts,
    decode_depth_l2_tbt,
    decode_orders,
    decode_positions,
    decode_tickers,
    decode_trades,
    encode_op,
    first_populated,
    parse_envelope,
)
from tests.conftest import deflate


class TestInflate:
    def test_inflates_raw_deflate(self) -> None:
        raw = deflate({"event": "login", "success": True})
        assert parse_envelope(FlateDecompressor().inflate(raw)) == {
            "event": "login",
            "success": True,
        }

    def test_text_frames_pass_through(self) -> None:
        assert FlateDecompressor().inflate('{"event":"error"}') == b'{"event":"error"}'

    def test_corrupt_payload(self) -> None:
        with pytest.raises(CodecError):
            FlateDecompressor().inflate(b"\xff\xfe not deflate \x00")


class TestParseEnvelope:
    def test_invalid_json(self) -> None:
        with pytest.raises(CodecError):
            parse_envelope(b"{not json")

    def test_non_object(self) -> None:
        with pytest.raises(CodecError):
            parse_envelope(b"[1, 2, 3]")


class TestTableDecoders:
    def test_tickers_field_for_field(self, sample_ticker_msg: dict) -> None:
        tickers = decode_tickers(sample_ticker_msg)
        assert len(tickers) == len(sample_ticker_msg["data"])
        for ticker, row in zip(tickers, sample_ticker_msg["data"]):
            dumped = ticker.model_dump(exclude_none=True)
            assert dumped == row

    def test_trades(self, sample_trade_msg: dict) -> None:
        trades = decode_trades(sample_trade_msg)
        assert [t.trade_id for t in trades] == ["5062468413747207"]

    def test_positions(self, sample_position_msg: dict) -> None:
        positions = decode_positions(sample_position_msg)
        assert positions[0].instrument_id == "BTC-USD-200626"

    def test_orders(self, sample_order_msg: dict) -> None:
        orders = decode_orders(sample_order_msg)
        assert orders[0].price == "6200"

    def test_missing_data(self) -> None:
        with pytest.raises(CodecError):
            decode_tickers({"table": TABLE_FUTURES_TICKER})

    def test_bad_row_fails_whole_frame(self, sample_ticker_msg: dict) -> None:
        sample_ticker_msg["data"].append({"instrument_id": "BTC-USD-200626"})
        with pytest.raises(CodecError):
            decode_tickers(sample_ticker_msg)


class TestDepthDecoder:
    def test_partial(self, sample_depth_partial_msg: dict) -> None:
        action, books = decode_depth_l2_tbt(sample_depth_partial_msg)
        assert action == "partial"
        assert len(books[0].asks) == 3
        assert len(books[0].bids) == 2

    def test_update_keeps_zero_rows(self, sample_depth_update_msg: dict) -> None:
        action, books = decode_depth_l2_tbt(sample_depth_update_msg)
        assert action == "update"
        assert [level.size for level in books[0].asks] == ["0", "11"]
        assert books[0].bids[0].price == "6774.21"

    def test_missing_action(self, sample_depth_update_msg: dict) -> None:
        del sample_depth_update_msg["action"]
        with pytest.raises(CodecError):
            decode_depth_l2_tbt(sample_depth_update_msg)


class TestAccountFlattening:
    def test_single_populated_currency(self, sample_account_msg: dict, sample_account_balance: dict) -> None:
        accounts = decode_accounts(sample_account_msg)
        assert len(accounts) == 1
        assert accounts[0].model_dump(exclude_none=True) == sample_account_balance

    def test_entry_without_currency_is_skipped(self, sample_account_balance: dict) -> None:
        msg = {
            "table": "futures/account",
            "data": [{}, {"ETH": None}, {"ETH": dict(sample_account_balance, currency="ETH")}],
        }
        accounts = decode_accounts(msg)
        assert [a.currency for a in accounts] == ["ETH"]

    def test_empty_balance_object_is_skipped(self, sample_account_balance: dict) -> None:
        msg = {"table": "futures/account", "data": [{"BTC": {}}, {"ETH": dict(sample_account_balance, currency="ETH")}]}
        assert [a.currency for a in decode_accounts(msg)] == ["ETH"]

    def test_empty_balance_falls_through_to_next_currency(self) -> None:
        assert first_populated({"BTC": {}, "ETH": {"currency": "ETH"}}) == {"currency": "ETH"}

    def test_unsupported_currency_is_skipped(self, sample_account_balance: dict) -> None:
        msg = {"table": "futures/account", "data": [{"DOGE": sample_account_balance}]}
        assert decode_accounts(msg) == []

    def test_first_in_enumeration_order_wins(self) -> None:
        entry = {"TRX": {"currency": "TRX"}, "ETH": {"currency": "ETH"}}
        assert first_populated(entry) == {"currency": "ETH"}

    def test_non_object_entry(self) -> None:
        with pytest.raises(CodecError):
            decode_accounts({"table": "futures/account", "data": ["BTC"]})


class TestRequests:
    def test_channel(self) -> None:
        assert channel("futures/ticker", "BTC-USD-200626") == "futures/ticker:BTC-USD-200626"

    def test_encode_op(self) -> None:
        assert encode_op("subscribe", ["futures/trade:BTC-USD-200626"]) == {
            "op": "subscribe",
            "args": ["futures/trade:BTC-USD-200626"],
        }
