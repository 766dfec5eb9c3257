"""Wiring for a router deployment and a ready-to-trade market."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from liquid_hook.core.registry import RouterConfig
from liquid_hook.core.router import YieldRouter
from liquid_hook.core.types import PoolKey
from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.lending import SimulatedLendingPool
from liquid_hook.protocol.ledger import TokenLedger
from liquid_hook.protocol.pool_manager import PoolManager

logger = logging.getLogger(__name__)

RECEIPT_PREFIX = "a"


@dataclass
class Deployment:
    """Everything a deployed router talks to."""
    chain: Chain
    pool_manager: PoolManager
    lending: SimulatedLendingPool
    router: YieldRouter
    owner: str
    key: Optional[PoolKey] = None

    @property
    def ledger(self) -> TokenLedger:
        return self.chain.ledger

    def units(self, token: str, amount: int | float | str) -> int:
        """Whole-token amount of `token` in base units."""
        return self.ledger.tokens[token].units(amount)


def deploy_liquid_hook(
    chain: Chain,
    pool_manager: PoolManager,
    lending: SimulatedLendingPool,
    owner: str,
    *,
    config: Optional[RouterConfig] = None,
    reward_asset: Optional[str] = None,
    address: str = "liquid-hook",
) -> YieldRouter:
    """Deploy a router against an existing pool manager and lending service."""
    router = YieldRouter(
        chain,
        pool_manager,
        lending,
        owner,
        address=address,
        config=config,
        reward_asset=reward_asset,
    )
    logger.info("Deployed router at %s (owner %s)", address, owner)
    return router


def bootstrap_market(
    *,
    tokens: Sequence[tuple[str, int]] = (("DAI", 18), ("USDC", 6)),
    owner: str = "owner",
    fee: int = 3000,
    config: Optional[RouterConfig] = None,
    owner_balance: int = 10_000,
    hook_balance: int = 1_000,
    rewards: int = 100,
    register: bool = True,
    initialize_pool: bool = True,
) -> Deployment:
    """Build a two-token market with a router managing the pool's liquidity.

    Creates each token and its receipt token ("a" + symbol), points the
    lending pool at the receipt tokens, mints `owner_balance` whole tokens
    to the owner, moves `hook_balance` of them to the router and sets
    `rewards` whole receipt tokens of claimable rewards per asset.

    Args:
        tokens: (symbol, decimals) of the two pool currencies
        owner: Owner of the router and holder of the initial balances
        fee: Pool fee in pips
        config: Router configuration
        owner_balance: Whole tokens minted to the owner per currency
        hook_balance: Whole tokens the owner sends to the router per currency
        rewards: Whole receipt tokens claimable per asset
        register: Register both currencies with the router
        initialize_pool: Initialize the pool with the router as hook and custodian

    Returns:
        Deployment with `key` set when the pool was initialized
    """
    if len(tokens) != 2:
        raise ValueError(f"A market needs exactly two tokens, got {len(tokens)}")

    chain = Chain()
    ledger = chain.ledger
    pool_manager = PoolManager(chain)
    lending = SimulatedLendingPool(chain)
    router = deploy_liquid_hook(chain, pool_manager, lending, owner, config=config)
    deployment = Deployment(
        chain=chain, pool_manager=pool_manager, lending=lending, router=router, owner=owner
    )

    for symbol, decimals in tokens:
        info = ledger.create_token(symbol, decimals=decimals)
        receipt = ledger.create_token(RECEIPT_PREFIX + symbol, decimals=decimals)
        lending.set_receipt_asset(symbol, receipt.symbol)
        ledger.mint(symbol, owner, info.units(owner_balance))
        if hook_balance:
            ledger.transfer(symbol, owner, router.address, info.units(hook_balance))
        if rewards:
            lending.rewards.set_rewards(receipt.symbol, receipt.units(rewards))
        if register:
            router.register_asset(symbol, receipt.symbol, caller=owner)

    if initialize_pool:
        currency0, currency1 = sorted(symbol for symbol, _ in tokens)
        key = PoolKey(currency0, currency1, fee=fee, hooks=router.address)
        pool_manager.initialize(key, sender=owner, hooks=router, custodian=router.address)
        deployment.key = key

    return deployment
