"""Test fixtures for yield router testing."""

from tests.fixtures.market_fixtures import (
    LIQUIDITY_PROVIDER,
    TRADER,
    MarketSnapshot,
    ReentrantLendingPool,
    add_liquidity,
    create_liquid_market,
    create_market,
    create_reentrant_market,
    fund_router,
    snapshot_market,
)

__all__ = [
    "LIQUIDITY_PROVIDER",
    "TRADER",
    "MarketSnapshot",
    "ReentrantLendingPool",
    "add_liquidity",
    "create_liquid_market",
    "create_market",
    "create_reentrant_market",
    "fund_router",
    "snapshot_market",
]
