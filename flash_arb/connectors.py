# flash_arb/connectors.py
"""
External collaborators of the receiver.

Each collaborator is a Protocol; the Host* classes are in-process
implementations backed by HostChain, Web3ProviderResolver queries a
live Aave PoolAddressesProvider.
"""

import logging
from typing import Dict, List, Protocol, Sequence, Tuple

from web3 import Web3

from flash_arb.abi import ADDRESSES_PROVIDER_ABI
from flash_arb.config import AAVE_FLASH_FEE_BPS
from flash_arb.errors import ExternalCallError, SwapReverted
from flash_arb.host import HostChain, checked_add, to_address

logger = logging.getLogger(__name__)


# =============================================================================
# PROTOCOLS
# =============================================================================

class FlashLoanReceiver(Protocol):
    address: str

    def execute_operation(
        self,
        caller: str,
        assets: Sequence[str],
        amounts: Sequence[int],
        premiums: Sequence[int],
        initiator: str,
        params: bytes,
    ) -> bool:
        ...


class LendingPool(Protocol):
    address: str

    def flash_loan(
        self,
        caller: str,
        receiver: FlashLoanReceiver,
        assets: Sequence[str],
        amounts: Sequence[int],
        modes: Sequence[int],
        on_behalf_of: str,
        params: bytes,
        referral_code: int,
    ) -> None:
        ...


class ProviderResolver(Protocol):
    address: str

    def current_pool(self) -> str:
        ...


class SwapConnector(Protocol):
    address: str

    def swap_exact(
        self,
        caller: str,
        amount_in: int,
        min_out: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
    ) -> List[int]:
        ...


# =============================================================================
# PROVIDER RESOLVERS
# =============================================================================

class StaticProviderResolver:
    """Resolver that always answers with a fixed pool"""

    def __init__(self, address: str, pool: str):
        self.address = to_address(address)
        self.pool = to_address(pool)

    def current_pool(self) -> str:
        return self.pool


class Web3ProviderResolver:
    """Resolves the pool from an on-chain Aave V3 PoolAddressesProvider"""

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.provider = w3.eth.contract(address=self.address, abi=ADDRESSES_PROVIDER_ABI)

    def current_pool(self) -> str:
        pool = self.provider.functions.getPool().call()
        logger.debug(f"Provider {self.address} resolved pool {pool}")
        return Web3.to_checksum_address(pool)


# =============================================================================
# IN-HOST LENDING POOL
# =============================================================================

class HostLendingPool:
    """
    Flash loan pool on the host.

    Sends the principal, calls the receiver back as the pool, then pulls
    principal + premium through the allowance the receiver granted. Any
    failure reverts the whole loan.
    """

    def __init__(self, host: HostChain, address: str, fee_bps: int = AAVE_FLASH_FEE_BPS):
        self.host = host
        self.address = to_address(address)
        self.fee_bps = fee_bps

    def premium(self, amount: int) -> int:
        return amount * self.fee_bps // 10000

    def flash_loan(
        self,
        caller: str,
        receiver: FlashLoanReceiver,
        assets: Sequence[str],
        amounts: Sequence[int],
        modes: Sequence[int],
        on_behalf_of: str,
        params: bytes,
        referral_code: int = 0,
    ) -> None:
        if len(assets) != len(amounts) or len(assets) != len(modes):
            raise ExternalCallError(
                "inconsistent flash loan arrays",
                {"assets": len(assets), "amounts": len(amounts), "modes": len(modes)},
            )
        if any(modes):
            raise ExternalCallError("only mode 0 (no open debt) is supported", {"modes": list(modes)})

        initiator = to_address(caller)
        premiums = [self.premium(a) for a in amounts]

        with self.host.transaction():
            for asset, amount in zip(assets, amounts):
                self.host.transfer(asset, self.address, receiver.address, amount)

            ok = receiver.execute_operation(
                self.address, list(assets), list(amounts), premiums, initiator, params
            )
            if ok is not True:
                raise ExternalCallError("invalid flash loan executor return", {"returned": ok})

            for asset, amount, premium in zip(assets, amounts, premiums):
                self.host.transfer_from(
                    asset, self.address, receiver.address, self.address,
                    checked_add(amount, premium),
                )

        logger.info(f"Flash loan by {initiator} repaid: {list(zip(amounts, premiums))}")


# =============================================================================
# IN-HOST SWAP VENUE
# =============================================================================

class HostRouter:
    """
    Exact-input router with fixed per-hop integer rates.

    out = in * numerator // denominator for each hop; the router pays
    output from its own balance, so fund it before swapping.
    """

    def __init__(self, host: HostChain, address: str):
        self.host = host
        self.address = to_address(address)
        self.rates: Dict[Tuple[str, str], Tuple[int, int]] = {}
        self.swap_count = 0

    def set_rate(self, token_in: str, token_out: str, numerator: int, denominator: int) -> None:
        if denominator <= 0 or numerator < 0:
            raise ValueError(f"invalid rate {numerator}/{denominator}")
        self.rates[(to_address(token_in), to_address(token_out))] = (numerator, denominator)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> List[int]:
        if len(path) < 2:
            raise SwapReverted("INVALID_PATH", {"path": list(path)})
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            rate = self.rates.get((to_address(token_in), to_address(token_out)))
            if rate is None:
                raise SwapReverted(
                    f"no pool for {token_in} -> {token_out}",
                    {"token_in": token_in, "token_out": token_out},
                )
            numerator, denominator = rate
            amounts.append(amounts[-1] * numerator // denominator)
        return amounts

    def swap_exact(
        self,
        caller: str,
        amount_in: int,
        min_out: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
    ) -> List[int]:
        if self.host.timestamp > deadline:
            raise SwapReverted("EXPIRED", {"timestamp": self.host.timestamp, "deadline": deadline})

        amounts = self.get_amounts_out(amount_in, path)
        if amounts[-1] < min_out:
            raise SwapReverted(
                "INSUFFICIENT_OUTPUT_AMOUNT",
                {"amount_out": amounts[-1], "min_out": min_out},
            )

        self.host.transfer_from(path[0], self.address, caller, self.address, amount_in)
        self.host.transfer(path[-1], self.address, recipient, amounts[-1])
        self.swap_count += 1
        return amounts
