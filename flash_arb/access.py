# flash_arb/access.py
"""
Owner, pause flag and the non-reentrant lock that gate every
state-mutating entry point.
"""

import logging
from contextlib import contextmanager

from flash_arb.config import ZERO_ADDRESS
from flash_arb.errors import Paused, ReentrantCall, Unauthorized, ZeroAddress
from flash_arb.events import EventLog, OwnershipTransferred, PausedSet
from flash_arb.host import to_address

logger = logging.getLogger(__name__)


class AccessGate:
    def __init__(self, owner: str, events: EventLog):
        self.owner = to_address(owner)
        self.paused = False
        self.events = events
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def only_owner(self, caller: str) -> None:
        if to_address(caller) != self.owner:
            raise Unauthorized(to_address(caller), self.owner)

    def when_not_paused(self) -> None:
        if self.paused:
            raise Paused("operation rejected while paused")

    @contextmanager
    def non_reentrant(self):
        """
        One-shot lock.

        A second acquisition while held raises ReentrantCall; the lock is
        released on every exit path.
        """
        if self._locked:
            raise ReentrantCall("reentrant call rejected")
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.only_owner(caller)
        new_owner = to_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise ZeroAddress("new owner is the zero address")
        previous, self.owner = self.owner, new_owner
        self.events.emit(OwnershipTransferred(previous, new_owner))
        logger.info(f"Ownership transferred {previous} -> {new_owner}")

    def pause(self, caller: str) -> None:
        self.only_owner(caller)
        self.paused = True
        self.events.emit(PausedSet(True))
        logger.warning("Receiver paused")

    def unpause(self, caller: str) -> None:
        self.only_owner(caller)
        self.paused = False
        self.events.emit(PausedSet(False))
        logger.info("Receiver unpaused")

    # the lock is scoped by non_reentrant() and never rolled back
    def snapshot(self) -> tuple:
        return self.owner, self.paused

    def restore(self, snap: tuple) -> None:
        self.owner, self.paused = snap
