"""
Flash Loan Arbitrage Receiver
Borrow -> swap -> swap -> repay, with repayment proven before profit is booked

Modules:
- config: Configuration and environment
- host: In-process chain model (balances, allowances, transactions)
- access: Owner, pause flag and reentrancy lock
- whitelist: Router and token whitelists
- ledger: Per-asset and native profit ledger
- params: Params blob encoding/decoding
- executor: Flash loan callback state machine
- flash_loan: Loan initiation and Aave pool helpers
- withdrawals: Profit withdrawal and rescue
- system: Wiring of one receiver deployment
- main: Entry point
"""

__version__ = "1.0.0"

from flash_arb.config import NATIVE, ZERO_ADDRESS, ExecutorConfig
from flash_arb.executor import ArbitrageExecutor, ExecutorState
from flash_arb.host import HostChain
from flash_arb.params import ExecutionRequest, decode_execution_params, encode_execution_params
from flash_arb.system import FlashArbSystem

__all__ = [
    "NATIVE",
    "ZERO_ADDRESS",
    "ExecutorConfig",
    "ArbitrageExecutor",
    "ExecutorState",
    "HostChain",
    "ExecutionRequest",
    "decode_execution_params",
    "encode_execution_params",
    "FlashArbSystem",
]
