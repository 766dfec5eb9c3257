"""Pytest configuration and shared fixtures for yield router tests.

This module provides:
- Pytest markers for test categorization
- Shared market fixtures
- Simulation settings small enough for fast runs
"""

import pytest

from liquid_hook.config import SimulationSettings, build_simulation_settings
from liquid_hook.deploy import Deployment
from tests.fixtures.market_fixtures import create_liquid_market, create_market


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "economic: Deposit and withdrawal sizing properties"
    )
    config.addinivalue_line(
        "markers", "edge_case: Edge case tests with boundary configurations"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests spanning multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests taking more than 5 seconds to run"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location and name."""
    for item in items:
        if "edge_case" in item.nodeid or "edge_case" in item.name:
            item.add_marker(pytest.mark.edge_case)

        if any(keyword in item.nodeid for keyword in ["sizing", "harvest"]):
            item.add_marker(pytest.mark.economic)

        if any(
            keyword in item.nodeid
            for keyword in ["lifecycle", "atomicity", "simulation", "monitor", "cli"]
        ):
            item.add_marker(pytest.mark.integration)


# ============================================================================
# Market Fixtures
# ============================================================================


@pytest.fixture
def market() -> Deployment:
    """X/Y market at a 20% reserve with both currencies registered.

    The router holds nothing yet; fund it with `fund_router`.
    """
    return create_market()


@pytest.fixture
def liquid_market() -> Deployment:
    """X/Y market at a 2% reserve with 5000/5000 of pool liquidity.

    The router holds 100 idle and 4900 deposited of each currency.
    """
    return create_liquid_market()


@pytest.fixture
def harvest_market() -> Deployment:
    """X/Y market with 100 receipt tokens of claimable rewards per asset."""
    return create_market(rewards=100)


# ============================================================================
# Simulation Fixtures
# ============================================================================


@pytest.fixture
def fixed_seed() -> int:
    """Fixed random seed for reproducible simulations."""
    return 42


@pytest.fixture
def quick_settings(fixed_seed) -> SimulationSettings:
    """Short simulation with frequent harvests."""
    return build_simulation_settings(n_steps=40, seed=fixed_seed, harvest_interval=10)
