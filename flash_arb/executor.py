# flash_arb/executor.py
"""
Arbitrage Execution Engine (flash loan callback)

The pool transfers the principal, then calls execute_operation(). One
call runs the whole cycle:

    IDLE -> VALIDATING -> SWAPPING1 -> SWAPPING2 -> SETTLING -> REPAYING -> IDLE

Every check aborts the cycle; the host transaction rolls back allowances,
ledger writes and events, so an aborted cycle leaves no trace.
"""

import logging
from enum import Enum
from typing import List, Sequence

from flash_arb.access import AccessGate
from flash_arb.config import MAX_SLIPPAGE_CAP_BPS, ZERO_ADDRESS, ExecutorConfig
from flash_arb.connectors import ProviderResolver
from flash_arb.errors import (
    InsufficientToRepay,
    InvalidPath1Start,
    InvalidPath2End,
    InvalidPath2Start,
    InvalidPathLength,
    LessThanMinProfit,
    MaxSlippageExceeded,
    OnlyLendingPool,
    OnlySingleAssetSupported,
    ProviderZero,
    RouterNotAllowed,
    TokenNotWhitelisted,
)
from flash_arb.events import LoanExecuted, MaxSlippageUpdated, ProviderUpdated
from flash_arb.host import HostChain, check_uint, checked_add, checked_sub, to_address
from flash_arb.ledger import ProfitLedger
from flash_arb.params import ExecutionRequest, decode_execution_params
from flash_arb.whitelist import WhitelistRegistry

logger = logging.getLogger(__name__)


class ExecutorState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SWAPPING1 = "swapping1"
    SWAPPING2 = "swapping2"
    SETTLING = "settling"
    REPAYING = "repaying"


class ArbitrageExecutor:
    """
    Flash loan receiver running the borrow -> swap -> swap -> repay cycle.

    Profit is measured against what the receiver held in the borrowed
    asset before the principal arrived, so earlier unwithdrawn profit and
    rescued-later dust are never counted twice.
    """

    def __init__(
        self,
        host: HostChain,
        config: ExecutorConfig,
        gate: AccessGate,
        whitelist: WhitelistRegistry,
        ledger: ProfitLedger,
    ):
        self.host = host
        self.config = config
        self.gate = gate
        self.whitelist = whitelist
        self.ledger = ledger
        self.state = ExecutorState.IDLE

    @property
    def address(self) -> str:
        return self.config.address

    # =========================================================================
    # FLASH LOAN CALLBACK
    # =========================================================================

    def execute_operation(
        self,
        caller: str,
        assets: Sequence[str],
        amounts: Sequence[int],
        premiums: Sequence[int],
        initiator: str,
        params: bytes,
    ) -> bool:
        with self.host.transaction():
            with self.gate.non_reentrant():
                try:
                    return self._run_cycle(caller, assets, amounts, premiums, params)
                except Exception as e:
                    logger.warning(f"Cycle aborted in {self.state.value}: {e}")
                    raise
                finally:
                    self.state = ExecutorState.IDLE

    def _run_cycle(
        self,
        caller: str,
        assets: Sequence[str],
        amounts: Sequence[int],
        premiums: Sequence[int],
        params: bytes,
    ) -> bool:
        self.state = ExecutorState.VALIDATING

        caller = to_address(caller)
        if caller != self.config.pool:
            raise OnlyLendingPool(caller, self.config.pool)
        self.gate.when_not_paused()

        if len(assets) != 1 or len(amounts) != 1 or len(premiums) != 1:
            raise OnlySingleAssetSupported(len(assets), len(amounts), len(premiums))

        asset = to_address(assets[0])
        principal = check_uint(amounts[0], "principal")
        fee = check_uint(premiums[0], "fee")

        request = decode_execution_params(params)
        self._validate(asset, request)

        tag = f"[{request.originator[:10]}]"
        held_before = checked_sub(self.host.balance_of(asset, self.address), principal)
        logger.info(f"{tag} Cycle start: {principal} of {asset}, fee {fee}")

        # Step 1: leg 1, borrowed -> intermediate
        self.state = ExecutorState.SWAPPING1
        out1 = self._swap(request.venue1, principal, request.min_out1, request.path1)
        logger.info(f"{tag} Leg 1 out={out1}")

        # Step 2: leg 2, intermediate -> borrowed
        self.state = ExecutorState.SWAPPING2
        out2 = self._swap(request.venue2, out1, request.min_out2, request.path2)
        logger.info(f"{tag} Leg 2 out={out2}")

        # Step 3: settle
        self.state = ExecutorState.SETTLING
        total_debt = checked_add(principal, fee)
        balance = self.host.balance_of(asset, self.address) - held_before
        if balance < total_debt:
            raise InsufficientToRepay(max(balance, 0), total_debt)

        profit = balance - total_debt
        if request.min_profit and profit < request.min_profit:
            raise LessThanMinProfit(profit, request.min_profit)

        if profit > 0:
            self._recognize_profit(asset, profit, request.unwrap_to_native)

        # Step 4: authorize the pool to pull principal + fee
        self.state = ExecutorState.REPAYING
        self.host.safe_approve(asset, self.address, self.config.pool, total_debt)

        self.host.events.emit(LoanExecuted(request.originator, asset, principal, fee, profit))
        logger.info(f"{tag} ✅ Cycle complete: debt={total_debt} profit={profit}")
        return True

    def _validate(self, asset: str, request: ExecutionRequest) -> None:
        for venue in (request.venue1, request.venue2):
            if venue == ZERO_ADDRESS or not self.whitelist.is_router_allowed(venue):
                raise RouterNotAllowed(venue)

        if len(request.path1) < 2 or len(request.path2) < 2:
            raise InvalidPathLength(len(request.path1), len(request.path2))

        if request.path1[0] != asset:
            raise InvalidPath1Start(request.path1[0], asset)
        if request.path2[-1] != asset:
            raise InvalidPath2End(request.path2[-1], asset)

        for number, path in ((1, request.path1), (2, request.path2)):
            for index, token in enumerate(path):
                if not self.whitelist.is_token_allowed(token):
                    raise TokenNotWhitelisted(token, number, index)

        if request.path2[0] != request.path1[-1]:
            raise InvalidPath2Start(request.path2[0], request.path1[-1])

    def _swap(self, venue_address: str, amount_in: int, min_out: int, path: List[str]) -> int:
        """Run one leg with an exact allowance that never outlives the call"""
        venue = self.host.code_at(venue_address)
        token_in = path[0]
        deadline = self.host.timestamp + self.config.swap_deadline_seconds

        self.host.safe_approve(token_in, self.address, venue_address, amount_in)
        try:
            amounts = venue.swap_exact(
                self.address, amount_in, min_out, path, self.address, deadline
            )
        finally:
            self.host.approve(token_in, self.address, venue_address, 0)

        return amounts[-1]

    def _recognize_profit(self, asset: str, profit: int, unwrap_to_native: bool) -> None:
        if unwrap_to_native and asset == self.config.wrapped_native:
            self.host.unwrap(self.address, profit)
            self.ledger.credit_native(profit)
            logger.info(f"Profit {profit} unwrapped to native")
        else:
            self.ledger.credit(asset, profit)
            logger.info(f"Profit {profit} recorded for {asset}")

    # =========================================================================
    # OWNER CONFIGURATION
    # =========================================================================

    def update_provider(self, caller: str, resolver: ProviderResolver) -> str:
        """Re-resolve and cache the pool from a provider; returns the pool"""
        with self.host.transaction():
            self.gate.only_owner(caller)
            provider = to_address(resolver.address)
            if provider == ZERO_ADDRESS:
                raise ProviderZero("provider is the zero address")

            pool = to_address(resolver.current_pool())
            if pool == ZERO_ADDRESS:
                raise ProviderZero(f"provider {provider} resolved the zero pool", {"provider": provider})

            self.config.provider = provider
            self.config.pool = pool
            self.host.events.emit(ProviderUpdated(provider, pool))
            logger.info(f"Provider {provider} -> pool {pool}")
            return pool

    def set_max_slippage_bps(self, caller: str, bps: int) -> None:
        self.gate.only_owner(caller)
        if bps > MAX_SLIPPAGE_CAP_BPS:
            raise MaxSlippageExceeded(bps, MAX_SLIPPAGE_CAP_BPS)
        self.config.max_slippage_bps = check_uint(bps, "bps")
        self.host.events.emit(MaxSlippageUpdated(bps))
