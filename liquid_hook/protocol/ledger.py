"""Fungible token balances and allowances."""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from liquid_hook.core.errors import InsufficientAllowance, InsufficientBalance
from liquid_hook.core.types import MAX_UINT256
from liquid_hook.protocol.state import Stateful


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    name: str
    decimals: int

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol must be non-empty")
        if not 0 <= self.decimals <= 36:
            raise ValueError(f"decimals must be in [0, 36], got {self.decimals}")

    def units(self, amount: int | float | str) -> int:
        """Convert a whole-token amount to base units (e.g. 1000 USDC -> 1000 * 10**6)."""
        return int(Decimal(str(amount)) * (10 ** self.decimals))


class TokenLedger(Stateful):
    """Balances and allowances for every token, keyed by token symbol.

    Standard transfer semantics: a transfer moves value between accounts,
    a delegated transfer additionally consumes allowance unless the
    allowance is unlimited (MAX_UINT256).
    """

    STATE_FIELDS = ("balances", "allowances", "total_supply")

    def __init__(self):
        self.tokens: dict[str, TokenInfo] = {}
        self.balances: dict[str, dict[str, int]] = defaultdict(dict)
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.total_supply: dict[str, int] = defaultdict(int)

    def create_token(self, symbol: str, name: str = "", decimals: int = 18) -> TokenInfo:
        if symbol in self.tokens:
            raise ValueError(f"Token '{symbol}' already exists")
        info = TokenInfo(symbol=symbol, name=name or symbol, decimals=decimals)
        self.tokens[symbol] = info
        return info

    def _require_token(self, token: str) -> None:
        if token not in self.tokens:
            raise KeyError(f"Unknown token: {token}")

    def balance_of(self, token: str, account: str) -> int:
        return self.balances[token].get(account, 0)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return self.allowances.get((token, owner, spender), 0)

    def mint(self, token: str, to: str, amount: int) -> None:
        self._require_token(token)
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self.balances[token][to] = self.balance_of(token, to) + amount
        self.total_supply[token] += amount

    def burn(self, token: str, account: str, amount: int) -> None:
        self._require_token(token)
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        balance = self.balance_of(token, account)
        if amount > balance:
            raise InsufficientBalance(
                f"Cannot burn {amount} {token} from {account}: balance {balance}"
            )
        self.balances[token][account] = balance - amount
        self.total_supply[token] -= amount

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        self._require_token(token)
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        balance = self.balance_of(token, sender)
        if amount > balance:
            raise InsufficientBalance(
                f"Cannot transfer {amount} {token} from {sender}: balance {balance}"
            )
        self.balances[token][sender] = balance - amount
        self.balances[token][to] = self.balance_of(token, to) + amount

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        self._require_token(token)
        if not 0 <= amount <= MAX_UINT256:
            raise ValueError(f"allowance must be in [0, 2**256 - 1], got {amount}")
        self.allowances[(token, owner, spender)] = amount

    def transfer_from(self, token: str, spender: str, owner: str, to: str, amount: int) -> None:
        allowed = self.allowance(token, owner, spender)
        if amount > allowed:
            raise InsufficientAllowance(
                f"{spender} may move {allowed} {token} of {owner}, requested {amount}"
            )
        self.transfer(token, owner, to, amount)
        if allowed != MAX_UINT256:
            self.allowances[(token, owner, spender)] = allowed - amount
