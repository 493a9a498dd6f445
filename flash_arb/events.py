# flash_arb/events.py
"""
Event records emitted by the receiver.

Records are appended to an EventLog owned by the host, so a reverted
call drops every record it emitted along with its state changes.
"""

from dataclasses import dataclass, field
from typing import List, Type, TypeVar

E = TypeVar("E")


@dataclass(frozen=True)
class LoanRequested:
    initiator: str
    asset: str
    amount: int


@dataclass(frozen=True)
class LoanExecuted:
    originator: str
    asset: str
    amount: int
    fee: int
    profit: int


@dataclass(frozen=True)
class RouterWhitelisted:
    router: str
    allowed: bool


@dataclass(frozen=True)
class TokenWhitelisted:
    token: str
    allowed: bool


@dataclass(frozen=True)
class ProviderUpdated:
    provider: str
    pool: str


@dataclass(frozen=True)
class Withdrawn:
    asset: str  # NATIVE sentinel for native currency
    to: str
    amount: int


@dataclass(frozen=True)
class Rescued:
    asset: str
    to: str
    amount: int


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str


@dataclass(frozen=True)
class PausedSet:
    paused: bool


@dataclass(frozen=True)
class MaxSlippageUpdated:
    bps: int


@dataclass
class EventLog:
    records: List[object] = field(default_factory=list)

    def emit(self, record: object) -> None:
        self.records.append(record)

    def of_type(self, kind: Type[E]) -> List[E]:
        return [r for r in self.records if isinstance(r, kind)]

    def snapshot(self) -> int:
        return len(self.records)

    def restore(self, snap: int) -> None:
        del self.records[snap:]

    def __len__(self):
        return len(self.records)
