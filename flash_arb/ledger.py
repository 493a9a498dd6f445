# flash_arb/ledger.py
"""
Realized, withdrawable profit per asset plus one native accumulator.
"""

from typing import Dict

from flash_arb.errors import InsufficientProfit
from flash_arb.host import checked_add, to_address


class ProfitLedger:
    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.native = 0

    def balance_of(self, asset: str) -> int:
        return self.balances.get(to_address(asset), 0)

    def credit(self, asset: str, amount: int) -> None:
        asset = to_address(asset)
        self.balances[asset] = checked_add(self.balances.get(asset, 0), amount)

    def credit_native(self, amount: int) -> None:
        self.native = checked_add(self.native, amount)

    def debit(self, asset: str, amount: int) -> None:
        asset = to_address(asset)
        available = self.balances.get(asset, 0)
        if amount > available:
            raise InsufficientProfit(available, amount)
        self.balances[asset] = available - amount

    def debit_native(self, amount: int) -> None:
        if amount > self.native:
            raise InsufficientProfit(self.native, amount)
        self.native -= amount

    def snapshot(self) -> tuple:
        return dict(self.balances), self.native

    def restore(self, snap: tuple) -> None:
        self.balances, self.native = dict(snap[0]), snap[1]
