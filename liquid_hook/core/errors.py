"""Exceptions raised by the yield router and its collaborators."""


class LiquidHookError(Exception):
    """Base class for every error the hook and the protocol stand-ins raise."""


class UnsupportedAsset(LiquidHookError):
    """Operation requested for an asset that is not currently registered."""

    def __init__(self, asset: str):
        super().__init__(f"Asset not supported: {asset}")
        self.asset = asset


class InvalidConfiguration(LiquidHookError):
    """Router configuration value outside its allowed range."""


class InsufficientExternalLiquidity(LiquidHookError):
    """The lending service cannot satisfy a withdrawal."""

    def __init__(self, asset: str, requested: int, available: int):
        super().__init__(
            f"Lending service cannot withdraw {requested} {asset}: "
            f"only {available} available"
        )
        self.asset = asset
        self.requested = requested
        self.available = available


class Unauthorized(LiquidHookError):
    """Administrative operation invoked by someone other than the owner."""

    def __init__(self, caller: str):
        super().__init__(f"Caller {caller} is not the owner")
        self.caller = caller


class ReentrantCall(LiquidHookError):
    """Router entered again while an external call was still in flight."""


class InvalidHookResponse(LiquidHookError):
    """A lifecycle callback returned the wrong acknowledgment."""


class InsufficientBalance(LiquidHookError):
    """Token transfer larger than the sender's balance."""


class InsufficientAllowance(LiquidHookError):
    """Delegated token transfer larger than the spender's allowance."""
