# flash_arb/flash_loan.py
"""
Aave V3 Flash Loan Integration
Loan initiation for the receiver plus off-process fee and transaction helpers
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import Web3

from flash_arb.abi import AAVE_POOL_ABI
from flash_arb.access import AccessGate
from flash_arb.config import AAVE_FLASH_FEE_BPS, CHAIN_ID, GAS_LIMIT_FLASH_LOAN, ExecutorConfig
from flash_arb.connectors import FlashLoanReceiver
from flash_arb.errors import AmountZero
from flash_arb.events import LoanRequested
from flash_arb.host import HostChain, check_uint, to_address
from flash_arb.params import ExecutionRequest

logger = logging.getLogger(__name__)

# interestRateModes entry for a loan repaid within the same call
NO_DEBT_MODE = 0
REFERRAL_CODE = 0


# =============================================================================
# LOAN INITIATOR
# =============================================================================

class LoanInitiator:
    """
    Owner entry point: packages a single-asset borrow and hands it to the
    pool, which calls the receiver back within the same transaction.
    """

    def __init__(
        self,
        host: HostChain,
        config: ExecutorConfig,
        gate: AccessGate,
        receiver: FlashLoanReceiver,
    ):
        self.host = host
        self.config = config
        self.gate = gate
        self.receiver = receiver

    def start(self, caller: str, asset: str, amount: int, params) -> None:
        if isinstance(params, ExecutionRequest):
            params = params.encode()

        with self.host.transaction():
            self.gate.only_owner(caller)
            self.gate.when_not_paused()
            if check_uint(amount) == 0:
                raise AmountZero("flash loan amount is zero")

            asset = to_address(asset)
            self.host.events.emit(LoanRequested(to_address(caller), asset, amount))
            logger.info(f"Requesting flash loan of {amount} {asset} from {self.config.pool}")

            pool = self.host.code_at(self.config.pool)
            pool.flash_loan(
                self.config.address,
                self.receiver,
                [asset],
                [amount],
                [NO_DEBT_MODE],
                self.config.address,
                params,
                REFERRAL_CODE,
            )


# =============================================================================
# FEE HELPERS
# =============================================================================

def calculate_fee(amount: int, fee_bps: int = AAVE_FLASH_FEE_BPS) -> int:
    """Flash loan premium in base units, rounded down like the pool"""
    return amount * fee_bps // 10000


# =============================================================================
# ON-CHAIN POOL CLIENT
# =============================================================================

@dataclass
class FlashLoanQuote:
    """Cost of borrowing `amount` of `token`"""
    token: str
    amount: int
    fee_amount: int
    fee_bps: int
    total_repayment: int


class PoolClient:
    """
    Read-only view of a live Aave V3 pool plus an unsigned flashLoan
    transaction builder for a deployed receiver.
    """

    def __init__(self, w3: Web3, pool_address: str):
        self.w3 = w3
        self.pool = w3.eth.contract(
            address=Web3.to_checksum_address(pool_address),
            abi=AAVE_POOL_ABI,
        )
        self._fee_cache: Optional[int] = None

    def get_flash_loan_fee_bps(self) -> int:
        """Get the current flash loan fee in basis points"""
        if self._fee_cache is None:
            try:
                self._fee_cache = self.pool.functions.FLASHLOAN_PREMIUM_TOTAL().call()
            except Exception as e:
                logger.warning(f"FLASHLOAN_PREMIUM_TOTAL failed ({e}), using {AAVE_FLASH_FEE_BPS} bps")
                self._fee_cache = AAVE_FLASH_FEE_BPS
        return self._fee_cache

    def quote(self, token: str, amount: int) -> FlashLoanQuote:
        fee_bps = self.get_flash_loan_fee_bps()
        fee_amount = calculate_fee(amount, fee_bps)
        return FlashLoanQuote(
            token=Web3.to_checksum_address(token),
            amount=amount,
            fee_amount=fee_amount,
            fee_bps=fee_bps,
            total_repayment=amount + fee_amount,
        )

    def build_flash_loan_tx(
        self,
        receiver: str,
        token: str,
        amount: int,
        params: bytes,
        from_address: str,
        gas_price: int,
        nonce: int,
        chain_id: int = CHAIN_ID,
    ) -> dict:
        """
        Build a flash loan transaction (not signed)
        Single asset, mode 0, the receiver borrowing on its own behalf
        """
        receiver = Web3.to_checksum_address(receiver)
        tx = self.pool.functions.flashLoan(
            receiver,
            [Web3.to_checksum_address(token)],
            [amount],
            [NO_DEBT_MODE],
            receiver,
            params,
            REFERRAL_CODE,
        ).build_transaction({
            "from": Web3.to_checksum_address(from_address),
            "gas": GAS_LIMIT_FLASH_LOAN,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": chain_id,
        })

        return tx
