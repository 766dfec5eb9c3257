"""In-process execution environment with all-or-nothing units of work."""

import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar

from liquid_hook.protocol.ledger import TokenLedger
from liquid_hook.protocol.state import Stateful

logger = logging.getLogger(__name__)


S = TypeVar("S", bound=Stateful)


class Chain:
    """Owns the token ledger and every stateful participant.

    `atomic()` opens a unit of work: if anything raises inside it, the state
    of every registered participant is put back the way it was when the
    block was entered and the exception propagates. Blocks nest; an inner
    block that fails and is caught by the caller only undoes its own effects.
    """

    def __init__(self, ledger: TokenLedger | None = None):
        self.ledger = ledger if ledger is not None else TokenLedger()
        self._participants: list[Stateful] = [self.ledger]

    def register(self, participant: S) -> S:
        if participant not in self._participants:
            self._participants.append(participant)
        return participant

    @property
    def participants(self) -> list[Stateful]:
        return list(self._participants)

    @contextmanager
    def atomic(self) -> Iterator["Chain"]:
        snapshots = [(p, p.snapshot()) for p in self._participants]
        try:
            yield self
        except Exception as e:
            for participant, state in snapshots:
                participant.restore(state)
            logger.warning("Unit of work reverted: %s: %s", type(e).__name__, e)
            raise
