"""Asset registrations and router configuration."""

from dataclasses import dataclass, replace
from typing import Optional

from liquid_hook.core.errors import InvalidConfiguration, UnsupportedAsset
from liquid_hook.core.types import BPS_DENOMINATOR, OutputEstimate

DEFAULT_RESERVE_RATIO_BPS = 2000  # 20% of holdings stay liquid


@dataclass(frozen=True)
class AssetRegistration:
    """One supported (or formerly supported) asset.

    The receipt asset is kept after unregistering so later withdrawals and
    harvests can still resolve it.
    """
    asset: str
    receipt_asset: str
    supported: bool = True

    def __post_init__(self) -> None:
        if not self.asset:
            raise InvalidConfiguration("asset must be non-empty")
        if self.supported and not self.receipt_asset:
            raise InvalidConfiguration(f"{self.asset} needs a receipt asset before it can be supported")


@dataclass(frozen=True)
class RouterConfig:
    """Router-wide settings.

    reserve_ratio_bps is the share of each asset's holdings kept
    un-deposited. min_deposit skips deposits smaller than the threshold;
    0 deposits any positive excess.
    """
    reserve_ratio_bps: int = DEFAULT_RESERVE_RATIO_BPS
    min_deposit: int = 0
    output_estimate: OutputEstimate = OutputEstimate.QUOTE

    def __post_init__(self) -> None:
        if not 0 <= self.reserve_ratio_bps <= BPS_DENOMINATOR:
            raise InvalidConfiguration(
                f"reserve_ratio_bps must be in [0, {BPS_DENOMINATOR}], got {self.reserve_ratio_bps}"
            )
        if self.min_deposit < 0:
            raise InvalidConfiguration(f"min_deposit must be >= 0, got {self.min_deposit}")

    def with_reserve_ratio(self, bps: int) -> "RouterConfig":
        return replace(self, reserve_ratio_bps=bps)

    def reserve_for(self, balance: int) -> int:
        """Amount of `balance` that must stay un-deposited (rounded down)."""
        return balance * self.reserve_ratio_bps // BPS_DENOMINATOR


class AssetRegistry:
    """Which assets take part in yield routing, and their receipt assets."""

    def __init__(self):
        self._entries: dict[str, AssetRegistration] = {}

    def __contains__(self, asset: str) -> bool:
        return asset in self._entries

    def register(self, asset: str, receipt_asset: str) -> AssetRegistration:
        entry = AssetRegistration(asset=asset, receipt_asset=receipt_asset, supported=True)
        self._entries[asset] = entry
        return entry

    def unregister(self, asset: str) -> AssetRegistration:
        entry = self.require_supported(asset)
        entry = replace(entry, supported=False)
        self._entries[asset] = entry
        return entry

    def get(self, asset: str) -> Optional[AssetRegistration]:
        return self._entries.get(asset)

    def is_supported(self, asset: str) -> bool:
        entry = self._entries.get(asset)
        return entry is not None and entry.supported

    def require_supported(self, asset: str) -> AssetRegistration:
        entry = self._entries.get(asset)
        if entry is None or not entry.supported:
            raise UnsupportedAsset(asset)
        return entry

    def receipt_asset_of(self, asset: str) -> Optional[str]:
        entry = self._entries.get(asset)
        return entry.receipt_asset if entry is not None else None

    def supported_assets(self) -> list[str]:
        return sorted(a for a, e in self._entries.items() if e.supported)

    def entries(self) -> list[AssetRegistration]:
        return [self._entries[a] for a in sorted(self._entries)]
