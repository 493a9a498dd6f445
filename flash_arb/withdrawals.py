# flash_arb/withdrawals.py
"""
Pays realized profit out to the owner, plus a ledger-independent rescue
path for balances that never went through profit accounting.
"""

import logging

from flash_arb.access import AccessGate
from flash_arb.config import NATIVE, ZERO_ADDRESS, ExecutorConfig
from flash_arb.errors import WithdrawFailed, ZeroAddressWithdraw, ZeroAmountWithdraw
from flash_arb.events import Rescued, Withdrawn
from flash_arb.host import HostChain, check_uint, to_address
from flash_arb.ledger import ProfitLedger

logger = logging.getLogger(__name__)


class WithdrawalManager:
    def __init__(
        self,
        host: HostChain,
        config: ExecutorConfig,
        gate: AccessGate,
        ledger: ProfitLedger,
    ):
        self.host = host
        self.config = config
        self.gate = gate
        self.ledger = ledger

    def withdraw(self, caller: str, asset: str, amount: int, recipient: str) -> None:
        """
        Withdraw recorded profit.

        `asset` is a token address, or NATIVE for the native accumulator.
        The ledger is debited before the transfer; a failed transfer
        reverts the debit with it.
        """
        with self.host.transaction():
            with self.gate.non_reentrant():
                self.gate.only_owner(caller)
                if check_uint(amount) == 0:
                    raise ZeroAmountWithdraw("withdraw amount is zero")
                recipient = to_address(recipient)
                if recipient == ZERO_ADDRESS:
                    raise ZeroAddressWithdraw("withdraw recipient is the zero address")

                asset = to_address(asset)
                if asset == NATIVE:
                    self.ledger.debit_native(amount)
                    if not self.host.send_native(self.config.address, recipient, amount):
                        raise WithdrawFailed(
                            f"native transfer of {amount} to {recipient} failed",
                            {"to": recipient, "amount": amount},
                        )
                else:
                    self.ledger.debit(asset, amount)
                    self.host.transfer(asset, self.config.address, recipient, amount)

                self.host.events.emit(Withdrawn(asset, recipient, amount))
                logger.info(f"Withdrew {amount} of {asset} to {recipient}")

    def rescue(self, caller: str, asset: str, amount: int, recipient: str) -> None:
        """Move any held balance out, bypassing the profit ledger"""
        with self.host.transaction():
            with self.gate.non_reentrant():
                self.gate.only_owner(caller)
                recipient = to_address(recipient)
                if recipient == ZERO_ADDRESS:
                    raise ZeroAddressWithdraw("rescue recipient is the zero address")

                asset = to_address(asset)
                if asset == NATIVE:
                    if not self.host.send_native(self.config.address, recipient, amount):
                        raise WithdrawFailed(
                            f"native rescue of {amount} to {recipient} failed",
                            {"to": recipient, "amount": amount},
                        )
                else:
                    self.host.transfer(asset, self.config.address, recipient, amount)

                self.host.events.emit(Rescued(asset, recipient, amount))
                logger.warning(f"Rescued {amount} of {asset} to {recipient}")
