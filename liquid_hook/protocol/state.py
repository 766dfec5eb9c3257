"""Snapshot support for participants of a unit of work."""

from copy import deepcopy
from typing import Any


class Stateful:
    """Mixin for participants whose state the chain can snapshot and restore.

    Subclasses list the attributes that make up their durable state in
    `STATE_FIELDS`. Collaborator handles must not be listed.
    """

    STATE_FIELDS: tuple[str, ...] = ()

    def snapshot(self) -> dict[str, Any]:
        return {name: deepcopy(getattr(self, name)) for name in self.STATE_FIELDS}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)
