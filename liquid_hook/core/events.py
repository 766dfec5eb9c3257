"""Notifications emitted by the yield router."""

from dataclasses import asdict, dataclass
from typing import Iterator, Optional, Type, TypeVar


@dataclass(frozen=True)
class RouterEvent:
    """Base class for router notifications.

    `sequence` orders events across the router's lifetime.
    """
    sequence: int

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        data = asdict(self)
        data["event"] = self.name
        return data


@dataclass(frozen=True)
class AssetStaked(RouterEvent):
    asset: str
    amount: int


@dataclass(frozen=True)
class AssetWithdrawn(RouterEvent):
    asset: str
    amount: int


@dataclass(frozen=True)
class ReserveRatioUpdated(RouterEvent):
    old_ratio_bps: int
    new_ratio_bps: int


@dataclass(frozen=True)
class AssetRegistered(RouterEvent):
    asset: str
    receipt_asset: str


@dataclass(frozen=True)
class AssetUnregistered(RouterEvent):
    asset: str


@dataclass(frozen=True)
class YieldHarvested(RouterEvent):
    """Receipt-token balance after a reward claim.

    The amount is a balance snapshot, not a profit figure: deposited
    principal is not subtracted.
    """
    asset: str
    amount: int


E = TypeVar("E", bound=RouterEvent)


class EventLog:
    """Append-only record of router notifications."""

    def __init__(self):
        self.events: list[RouterEvent] = []

    def __deepcopy__(self, memo) -> "EventLog":
        # Events are frozen, a snapshot only needs its own list
        clone = EventLog()
        clone.events = list(self.events)
        return clone

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[RouterEvent]:
        return iter(self.events)

    @property
    def next_sequence(self) -> int:
        return len(self.events)

    def emit(self, event_type: Type[E], **fields) -> E:
        event = event_type(sequence=self.next_sequence, **fields)
        self.events.append(event)
        return event

    def of_type(self, event_type: Type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def last(self, event_type: Optional[Type[E]] = None) -> Optional[RouterEvent]:
        candidates = self.events if event_type is None else self.of_type(event_type)
        return candidates[-1] if candidates else None

    def since(self, sequence: int) -> list[RouterEvent]:
        """Events with sequence >= the given one."""
        return self.events[sequence:]
