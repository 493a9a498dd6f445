# flash_arb/host.py
"""
In-process host for the receiver.

Models the parts of an EVM chain the receiver touches: ERC20-style
balances and allowances, native currency, a wrapped native asset,
a block timestamp, an event log, and all-or-nothing transactions.
Every amount is a uint256; leaving that range raises HostError.
"""

import copy
import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Tuple

from web3 import Web3

from flash_arb.config import UINT256_MAX, WRAPPED_NATIVE, ZERO_ADDRESS
from flash_arb.errors import ExternalCallError, HostError, TransferFailed
from flash_arb.events import EventLog

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


def to_address(value: str) -> str:
    """Normalize an identifier to a checksummed address"""
    return Web3.to_checksum_address(value)


def check_uint(value: int, name: str = "amount") -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise HostError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise HostError(f"{name} {value} outside uint256 range")
    return value


def checked_add(a: int, b: int) -> int:
    """uint256 addition that raises instead of wrapping"""
    result = check_uint(a, "lhs") + check_uint(b, "rhs")
    if result > UINT256_MAX:
        raise HostError(f"uint256 overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    if check_uint(b, "rhs") > check_uint(a, "lhs"):
        raise HostError(f"uint256 underflow: {a} - {b}")
    return a - b


class HostChain:
    """
    Balance book and transaction model shared by the receiver and its
    collaborators.

    Components with their own mutable state (ledgers, whitelists,
    configuration) register here so transaction() can roll them back
    together with balances.
    """

    def __init__(self, timestamp: Optional[int] = None, wrapped_native: str = WRAPPED_NATIVE):
        self.timestamp = int(time.time()) if timestamp is None else timestamp
        self.wrapped_native = to_address(wrapped_native)
        self.events = EventLog()

        self._balances: Dict[str, Dict[str, int]] = {}
        self._allowances: Dict[Tuple[str, str, str], int] = {}
        self._native: Dict[str, int] = {}
        self._receive_hooks: Dict[str, ReceiveHook] = {}
        self._contracts: Dict[str, object] = {}
        self._stateful: List[object] = []

    # =========================================================================
    # CONTRACTS
    # =========================================================================

    def deploy(self, contract) -> None:
        """Make a contract object callable at its .address"""
        self._contracts[to_address(contract.address)] = contract

    def code_at(self, address: str):
        contract = self._contracts.get(to_address(address))
        if contract is None:
            raise ExternalCallError(f"no contract at {address}", {"address": address})
        return contract

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def register(self, component) -> None:
        """Include a component's snapshot()/restore() in every transaction"""
        self._stateful.append(component)

    def _snapshot(self) -> tuple:
        return (
            copy.deepcopy(self._balances),
            dict(self._allowances),
            dict(self._native),
            self.events.snapshot(),
            [c.snapshot() for c in self._stateful],
        )

    def _restore(self, snap: tuple) -> None:
        balances, allowances, native, events, components = snap
        self._balances = balances
        self._allowances = allowances
        self._native = native
        self.events.restore(events)
        for component, state in zip(self._stateful, components):
            component.restore(state)

    @contextmanager
    def transaction(self):
        """
        Run a block all-or-nothing.

        Any exception restores every balance, allowance, event and
        registered component to its state on entry, then propagates.
        Nested transactions roll back only their own block.
        """
        snap = self._snapshot()
        try:
            yield self
        except Exception:
            self._restore(snap)
            raise

    # =========================================================================
    # ERC20-STYLE ASSETS
    # =========================================================================

    def balance_of(self, token: str, account: str) -> int:
        return self._balances.get(to_address(token), {}).get(to_address(account), 0)

    def mint(self, token: str, account: str, amount: int) -> None:
        token, account = to_address(token), to_address(account)
        book = self._balances.setdefault(token, {})
        book[account] = checked_add(book.get(account, 0), amount)

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        token, sender, to = to_address(token), to_address(sender), to_address(to)
        check_uint(amount)
        if to == ZERO_ADDRESS:
            raise TransferFailed("transfer to the zero address", {"token": token})
        book = self._balances.setdefault(token, {})
        held = book.get(sender, 0)
        if held < amount:
            raise TransferFailed(
                f"transfer amount exceeds balance: {held} < {amount}",
                {"token": token, "from": sender, "balance": held, "amount": amount},
            )
        book[sender] = held - amount
        book[to] = checked_add(book.get(to, 0), amount)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return self._allowances.get((to_address(token), to_address(owner), to_address(spender)), 0)

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        key = (to_address(token), to_address(owner), to_address(spender))
        self._allowances[key] = check_uint(amount)

    def safe_approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        """Reset to zero before setting a nonzero allowance"""
        self.approve(token, owner, spender, 0)
        if amount:
            self.approve(token, owner, spender, amount)

    def transfer_from(self, token: str, spender: str, owner: str, to: str, amount: int) -> None:
        token, spender, owner = to_address(token), to_address(spender), to_address(owner)
        check_uint(amount)
        allowed = self.allowance(token, owner, spender)
        if allowed < amount:
            raise TransferFailed(
                f"insufficient allowance: {allowed} < {amount}",
                {"token": token, "owner": owner, "spender": spender,
                 "allowance": allowed, "amount": amount},
            )
        self.transfer(token, owner, to, amount)
        if allowed != UINT256_MAX:
            self._allowances[(token, owner, spender)] = allowed - amount

    # =========================================================================
    # NATIVE CURRENCY
    # =========================================================================

    def native_balance(self, account: str) -> int:
        return self._native.get(to_address(account), 0)

    def deal_native(self, account: str, amount: int) -> None:
        account = to_address(account)
        self._native[account] = checked_add(self._native.get(account, 0), amount)

    def set_receive_hook(self, account: str, hook: Optional[ReceiveHook]) -> None:
        """Install code that runs when `account` receives native currency"""
        account = to_address(account)
        if hook is None:
            self._receive_hooks.pop(account, None)
        else:
            self._receive_hooks[account] = hook

    def send_native(self, sender: str, to: str, amount: int) -> bool:
        """
        Low-level native transfer.

        Returns False instead of raising when the sender is short or the
        recipient's receive hook fails; the failed send leaves no trace.
        """
        sender, to = to_address(sender), to_address(to)
        check_uint(amount)
        try:
            with self.transaction():
                held = self._native.get(sender, 0)
                if held < amount:
                    raise TransferFailed(
                        f"native balance {held} < {amount}",
                        {"balance": held, "amount": amount},
                    )
                self._native[sender] = held - amount
                self._native[to] = checked_add(self._native.get(to, 0), amount)
                hook = self._receive_hooks.get(to)
                if hook is not None:
                    hook(sender, amount)
        except Exception as e:
            logger.warning(f"Native send {sender} -> {to} of {amount} failed: {e}")
            return False
        return True

    def wrap(self, account: str, amount: int) -> None:
        """Deposit native currency into the wrapped native asset"""
        account = to_address(account)
        held = self.native_balance(account)
        if held < check_uint(amount):
            raise TransferFailed(f"native balance {held} < {amount}")
        self._native[account] = held - amount
        self.mint(self.wrapped_native, account, amount)

    def unwrap(self, account: str, amount: int) -> None:
        """Withdraw the wrapped native asset back into native currency"""
        account = to_address(account)
        book = self._balances.setdefault(self.wrapped_native, {})
        held = book.get(account, 0)
        if held < check_uint(amount):
            raise TransferFailed(
                f"wrapped balance {held} < {amount}",
                {"balance": held, "amount": amount},
            )
        book[account] = held - amount
        self.deal_native(account, amount)
