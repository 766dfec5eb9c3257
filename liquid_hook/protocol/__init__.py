"""In-process stand-ins for the token ledger, lending service and pool manager."""

from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.ledger import TokenInfo, TokenLedger
from liquid_hook.protocol.lending import RewardsController, SimulatedLendingPool
from liquid_hook.protocol.pool_manager import PoolManager, PoolState, SwapResult

__all__ = [
    "Chain",
    "PoolManager",
    "PoolState",
    "RewardsController",
    "SimulatedLendingPool",
    "SwapResult",
    "TokenInfo",
    "TokenLedger",
]
