from .ticker import FuturesTicker
from .trade import FuturesTrade
from .orderbook import (
    DepthL2Tbt,
    DepthL2TbtResult,
    PriceLevel,
)
from .account import ACCOUNT_CURRENCIES, FuturesAccount
from .position import FuturesPosition
from .order import FuturesOrder

__all__ = [
    "FuturesTicker",
    "FuturesTrade",
    "DepthL2Tbt",
    "DepthL2TbtResult",
    "PriceLevel",
    "ACCOUNT_CURRENCIES",
    "FuturesAccount",
    "FuturesPosition",
    "FuturesOrder",
]
