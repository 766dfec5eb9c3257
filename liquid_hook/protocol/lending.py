"""In-process lending pool and rewards controller.

Deposits are pulled from the caller and credited 1:1 as receipt tokens;
withdrawals burn receipt tokens and pay out of the pool's underlying
holdings. Interest is modelled as receipt tokens minted pro rata to holders
together with the underlying that backs them. Liquidity lent out to
borrowers (`utilize`) is not available for withdrawal until repaid.
"""

import logging
from typing import Optional

from liquid_hook.core.errors import InsufficientExternalLiquidity
from liquid_hook.core.interfaces import LendingService
from liquid_hook.core.types import BPS_DENOMINATOR, MAX_UINT256
from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.ledger import TokenLedger
from liquid_hook.protocol.state import Stateful

logger = logging.getLogger(__name__)


class RewardsController(Stateful):
    """Tracks claimable incentive rewards per (receipt asset, reward token)."""

    STATE_FIELDS = ("accrued",)

    def __init__(self, ledger: TokenLedger, address: str = "rewards-controller"):
        self.ledger = ledger
        self.address = address
        self.accrued: dict[tuple[str, str], int] = {}
        self._pool: Optional["SimulatedLendingPool"] = None

    def attach(self, pool: "SimulatedLendingPool") -> None:
        self._pool = pool

    def set_rewards(self, receipt_asset: str, amount: int, reward: Optional[str] = None) -> None:
        """Set the rewards claimable by holders of `receipt_asset`.

        When `reward` is omitted the rewards are paid in the receipt asset itself.
        """
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self.accrued[(receipt_asset, reward or receipt_asset)] = amount

    def rewards_of(self, receipt_asset: str, reward: Optional[str] = None) -> int:
        return self.accrued.get((receipt_asset, reward or receipt_asset), 0)

    def claim_rewards(self, assets: list[str], amount: int, to: str, reward: str, *, caller: str) -> int:
        """Pay out up to `amount` of `reward` accrued on `assets` to `to`.

        Only holders of a receipt asset can claim its rewards. Returns the
        amount claimed, which is 0 when nothing has accrued.
        """
        remaining = amount
        claimed = 0
        for asset in assets:
            if remaining <= 0:
                break
            if self.ledger.balance_of(asset, caller) == 0:
                continue
            available = self.accrued.get((asset, reward), 0)
            take = min(available, remaining)
            if take == 0:
                continue
            self.accrued[(asset, reward)] = available - take
            remaining -= take
            claimed += take

        if claimed:
            self._pay(reward, to, claimed)
            logger.debug("Claimed %d %s for %s", claimed, reward, caller)
        return claimed

    def _pay(self, reward: str, to: str, amount: int) -> None:
        self.ledger.mint(reward, to, amount)
        # Receipt-token rewards must stay redeemable, so fund their backing
        if self._pool is not None:
            underlying = self._pool.underlying_of(reward)
            if underlying is not None:
                self._pool.fund(underlying, amount)


class SimulatedLendingPool(Stateful, LendingService):
    """Lending service stand-in holding deposited underlying in its own account."""

    STATE_FIELDS = ("receipt_assets", "borrowed")

    def __init__(
        self,
        chain: Chain,
        address: str = "lending-pool",
        rewards: Optional[RewardsController] = None,
    ):
        self.ledger = chain.ledger
        self.address = address
        self.rewards = rewards if rewards is not None else RewardsController(chain.ledger)
        self.rewards.attach(self)
        self.receipt_assets: dict[str, str] = {}
        # Outstanding loans per (asset, borrower)
        self.borrowed: dict[tuple[str, str], int] = {}
        chain.register(self)
        chain.register(self.rewards)

    def set_receipt_asset(self, asset: str, receipt_asset: str) -> None:
        """Declare the receipt token issued for deposits of `asset`."""
        if receipt_asset not in self.ledger.tokens:
            raise KeyError(f"Unknown token: {receipt_asset}")
        self.receipt_assets[asset] = receipt_asset

    def receipt_asset_of(self, asset: str) -> str:
        try:
            return self.receipt_assets[asset]
        except KeyError:
            raise KeyError(f"No receipt asset configured for {asset}") from None

    def underlying_of(self, receipt_asset: str) -> Optional[str]:
        for asset, receipt in self.receipt_assets.items():
            if receipt == receipt_asset:
                return asset
        return None

    def available_liquidity(self, asset: str) -> int:
        """Underlying the pool can pay out right now."""
        return self.ledger.balance_of(asset, self.address)

    def deposit(
        self, asset: str, amount: int, on_behalf_of: str, referral_code: int, *, caller: str
    ) -> None:
        if amount <= 0:
            raise ValueError(f"amount must be > 0, got {amount}")
        receipt = self.receipt_asset_of(asset)
        self.ledger.transfer_from(asset, self.address, caller, self.address, amount)
        self.ledger.mint(receipt, on_behalf_of, amount)
        logger.debug("Deposit %d %s for %s (referral %d)", amount, asset, on_behalf_of, referral_code)

    def withdraw(self, asset: str, amount: int, to: str, *, caller: str) -> int:
        receipt = self.receipt_asset_of(asset)
        position = self.ledger.balance_of(receipt, caller)
        if amount == MAX_UINT256:
            amount = position
        if amount <= 0:
            raise ValueError(f"amount must be > 0, got {amount}")

        available = min(position, self.available_liquidity(asset))
        if amount > available:
            raise InsufficientExternalLiquidity(asset, amount, available)

        self.ledger.burn(receipt, caller, amount)
        self.ledger.transfer(asset, self.address, to, amount)
        logger.debug("Withdraw %d %s to %s", amount, asset, to)
        return amount

    def claim_rewards(
        self, assets: list[str], amount: int, to: str, reward: str, *, caller: str
    ) -> int:
        return self.rewards.claim_rewards(assets, amount, to, reward, caller=caller)

    def fund(self, asset: str, amount: int) -> None:
        """Add underlying to the pool without issuing receipt tokens."""
        self.ledger.mint(asset, self.address, amount)

    def accrue_interest(self, asset: str, rate_bps: int) -> int:
        """Grow every holder's position in `asset` by `rate_bps`.

        Returns the total interest minted.
        """
        if rate_bps < 0:
            raise ValueError(f"rate_bps must be >= 0, got {rate_bps}")
        receipt = self.receipt_asset_of(asset)
        holders = list(self.ledger.balances[receipt].items())
        total = 0
        for holder, balance in holders:
            interest = balance * rate_bps // BPS_DENOMINATOR
            if interest:
                self.ledger.mint(receipt, holder, interest)
                total += interest
        if total:
            self.fund(asset, total)
        return total

    def utilize(self, asset: str, amount: int, borrower: str = "borrower") -> None:
        """Lend `amount` of the pool's underlying out to `borrower`."""
        available = self.available_liquidity(asset)
        if amount > available:
            raise InsufficientExternalLiquidity(asset, amount, available)
        self.ledger.transfer(asset, self.address, borrower, amount)
        key = (asset, borrower)
        self.borrowed[key] = self.borrowed.get(key, 0) + amount

    def repay(self, asset: str, amount: int, borrower: str = "borrower") -> None:
        key = (asset, borrower)
        owed = self.borrowed.get(key, 0)
        if amount > owed:
            raise ValueError(f"{borrower} owes {owed} {asset}, cannot repay {amount}")
        self.ledger.transfer(asset, borrower, self.address, amount)
        self.borrowed[key] = owed - amount

    def utilization_bps(self, asset: str) -> int:
        """Share of the pool's supplied underlying currently lent out."""
        lent = sum(v for (a, _), v in self.borrowed.items() if a == asset)
        supplied = lent + self.available_liquidity(asset)
        if supplied == 0:
            return 0
        return lent * BPS_DENOMINATOR // supplied
