# flash_arb/system.py
"""
Wires one receiver deployment onto a host: shared configuration, access
gate, whitelists and ledger, with the executor, loan initiator and
withdrawal manager working over them.
"""

from typing import Iterable, Union

from flash_arb.access import AccessGate
from flash_arb.config import (
    MAX_SLIPPAGE_BPS,
    SWAP_DEADLINE_SECONDS,
    ZERO_ADDRESS,
    ExecutorConfig,
)
from flash_arb.connectors import ProviderResolver
from flash_arb.executor import ArbitrageExecutor
from flash_arb.flash_loan import LoanInitiator
from flash_arb.host import HostChain
from flash_arb.ledger import ProfitLedger
from flash_arb.params import ExecutionRequest
from flash_arb.whitelist import WhitelistRegistry
from flash_arb.withdrawals import WithdrawalManager


class FlashArbSystem:
    """One flash loan arbitrage receiver deployed on a HostChain"""

    def __init__(
        self,
        host: HostChain,
        address: str,
        owner: str,
        pool: str = ZERO_ADDRESS,
        max_slippage_bps: int = MAX_SLIPPAGE_BPS,
        swap_deadline_seconds: int = SWAP_DEADLINE_SECONDS,
    ):
        self.host = host
        self.config = ExecutorConfig(
            address=address,
            pool=pool,
            wrapped_native=host.wrapped_native,
            max_slippage_bps=max_slippage_bps,
            swap_deadline_seconds=swap_deadline_seconds,
        )
        self.gate = AccessGate(owner, host.events)
        self.whitelist = WhitelistRegistry(self.gate, host.events)
        self.ledger = ProfitLedger()

        self.executor = ArbitrageExecutor(
            host, self.config, self.gate, self.whitelist, self.ledger
        )
        self.initiator = LoanInitiator(host, self.config, self.gate, self.executor)
        self.withdrawals = WithdrawalManager(host, self.config, self.gate, self.ledger)

        for component in (self.config, self.gate, self.whitelist, self.ledger):
            host.register(component)
        host.deploy(self.executor)

    @property
    def address(self) -> str:
        return self.config.address

    @property
    def owner(self) -> str:
        return self.gate.owner

    # -----------------------------
    # Owner operations
    # -----------------------------

    def set_router(self, caller: str, router: str, allowed: bool) -> None:
        self.whitelist.set_router(caller, router, allowed)

    def set_token(self, caller: str, token: str, allowed: bool) -> None:
        self.whitelist.set_token(caller, token, allowed)

    def set_tokens(self, caller: str, tokens: Iterable[str], allowed: bool) -> None:
        self.whitelist.set_tokens(caller, tokens, allowed)

    def update_provider(self, caller: str, resolver: ProviderResolver) -> str:
        return self.executor.update_provider(caller, resolver)

    def set_max_slippage_bps(self, caller: str, bps: int) -> None:
        self.executor.set_max_slippage_bps(caller, bps)

    def pause(self, caller: str) -> None:
        self.gate.pause(caller)

    def unpause(self, caller: str) -> None:
        self.gate.unpause(caller)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.gate.transfer_ownership(caller, new_owner)

    def start(self, caller: str, asset: str, amount: int, params: Union[bytes, ExecutionRequest]) -> None:
        self.initiator.start(caller, asset, amount, params)

    def withdraw(self, caller: str, asset: str, amount: int, recipient: str) -> None:
        self.withdrawals.withdraw(caller, asset, amount, recipient)

    def rescue(self, caller: str, asset: str, amount: int, recipient: str) -> None:
        self.withdrawals.rescue(caller, asset, amount, recipient)
