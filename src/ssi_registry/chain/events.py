"""Event log primitives."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class Event:
    """Base class for contract events. The event name is the class name."""

    name: ClassVar[str] = "Event"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.name = cls.__name__

    def to_dict(self) -> dict[str, Any]:
        args: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bytes):
                value = "0x" + value.hex()
            elif isinstance(value, enum.Enum):
                value = value.name
            args[f.name] = value
        return {"event": self.name, "args": args}


@dataclass(frozen=True)
class LogEntry:
    """An emitted event together with where it was emitted."""

    address: str
    event: Event
    block_number: int
    tx_hash: str
    log_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "block_number": self.block_number,
            "tx_hash": self.tx_hash,
            "log_index": self.log_index,
            **self.event.to_dict(),
        }
