"""Unit tests for the subscription registry."""

from __future__ import annotations

from okfutures.ingestion.subscriptions import SubscriptionRegistry


class TestSubscriptionRegistry:
    def test_register_and_snapshot(self) -> None:
        registry = SubscriptionRegistry()
        registry.register("t1", ["futures/ticker:BTC-USD-200626"])
        registry.register("t2", ["futures/trade:BTC-USD-200626", "futures/trade:ETH-USD-200626"])
        assert sorted(map(tuple, registry.snapshot())) == [
            ("futures/ticker:BTC-USD-200626",),
            ("futures/trade:BTC-USD-200626", "futures/trade:ETH-USD-200626"),
        ]
        assert len(registry) == 2

    def test_reregister_replaces(self) -> None:
        registry = SubscriptionRegistry()
        registry.register("t1", ["futures/ticker:BTC-USD-200626"])
        registry.register("t1", ["futures/ticker:ETH-USD-200626"])
        assert registry.snapshot() == [["futures/ticker:ETH-USD-200626"]]

    def test_unregister_returns_channels(self) -> None:
        registry = SubscriptionRegistry()
        registry.register("t1", ["futures/ticker:BTC-USD-200626"])
        assert registry.unregister("t1") == ("futures/ticker:BTC-USD-200626",)
        assert "t1" not in registry
        assert registry.snapshot() == []

    def test_unregister_unknown_is_noop(self) -> None:
        registry = SubscriptionRegistry()
        registry.register("t1", ["futures/ticker:BTC-USD-200626"])
        assert registry.unregister("missing") is None
        assert len(registry) == 1

    def test_caller_list_is_copied(self) -> None:
        registry = SubscriptionRegistry()
        channels = ["futures/ticker:BTC-USD-200626"]
        registry.register("t1", channels)
        channels.append("futures/ticker:ETH-USD-200626")
        assert registry.get("t1") == ("futures/ticker:BTC-USD-200626",)
