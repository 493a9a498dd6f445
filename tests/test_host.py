"""Tests for the in-process host model."""

import pytest

from flash_arb.config import UINT256_MAX, ZERO_ADDRESS
from flash_arb.errors import ExternalCallError, HostError, TransferFailed
from flash_arb.host import HostChain, checked_add, checked_sub
from flash_arb.ledger import ProfitLedger

from conftest import OWNER, RECIPIENT, STRANGER, TOKEN_A, WNATIVE


@pytest.fixture
def chain():
    return HostChain(timestamp=1, wrapped_native=WNATIVE)


def test_checked_arithmetic():
    assert checked_add(1003, 0) == 1003
    with pytest.raises(HostError):
        checked_add(UINT256_MAX, 1)
    with pytest.raises(HostError):
        checked_sub(3, 4)
    with pytest.raises(HostError):
        checked_add(-1, 1)


def test_transfer_and_balance(chain):
    chain.mint(TOKEN_A, OWNER, 100)
    chain.transfer(TOKEN_A, OWNER, RECIPIENT, 40)

    assert chain.balance_of(TOKEN_A, OWNER) == 60
    assert chain.balance_of(TOKEN_A, RECIPIENT) == 40
    assert chain.balance_of(TOKEN_A, OWNER.lower()) == 60

    with pytest.raises(TransferFailed):
        chain.transfer(TOKEN_A, OWNER, RECIPIENT, 61)
    with pytest.raises(TransferFailed):
        chain.transfer(TOKEN_A, OWNER, ZERO_ADDRESS, 1)


def test_transfer_from_consumes_allowance(chain):
    chain.mint(TOKEN_A, OWNER, 100)
    chain.safe_approve(TOKEN_A, OWNER, STRANGER, 30)

    chain.transfer_from(TOKEN_A, STRANGER, OWNER, RECIPIENT, 20)

    assert chain.allowance(TOKEN_A, OWNER, STRANGER) == 10
    with pytest.raises(TransferFailed):
        chain.transfer_from(TOKEN_A, STRANGER, OWNER, RECIPIENT, 11)


def test_safe_approve_to_zero(chain):
    chain.approve(TOKEN_A, OWNER, STRANGER, 5)
    chain.safe_approve(TOKEN_A, OWNER, STRANGER, 0)
    assert chain.allowance(TOKEN_A, OWNER, STRANGER) == 0


def test_transaction_rolls_back_everything(chain):
    ledger = ProfitLedger()
    chain.register(ledger)
    chain.mint(TOKEN_A, OWNER, 100)

    with pytest.raises(RuntimeError):
        with chain.transaction():
            chain.transfer(TOKEN_A, OWNER, RECIPIENT, 50)
            chain.approve(TOKEN_A, OWNER, STRANGER, 9)
            chain.deal_native(OWNER, 3)
            chain.events.emit("record")
            ledger.credit(TOKEN_A, 7)
            raise RuntimeError("abort")

    assert chain.balance_of(TOKEN_A, OWNER) == 100
    assert chain.allowance(TOKEN_A, OWNER, STRANGER) == 0
    assert chain.native_balance(OWNER) == 0
    assert len(chain.events) == 0
    assert ledger.balance_of(TOKEN_A) == 0


def test_nested_transaction_rolls_back_only_inner(chain):
    chain.mint(TOKEN_A, OWNER, 100)

    with chain.transaction():
        chain.transfer(TOKEN_A, OWNER, RECIPIENT, 10)
        with pytest.raises(TransferFailed):
            with chain.transaction():
                chain.transfer(TOKEN_A, OWNER, RECIPIENT, 10)
                chain.transfer(TOKEN_A, OWNER, RECIPIENT, 1000)

    assert chain.balance_of(TOKEN_A, RECIPIENT) == 10


def test_send_native_reports_failure(chain):
    chain.deal_native(OWNER, 10)

    def refuse(sender, amount):
        raise RuntimeError("reverted")

    chain.set_receive_hook(RECIPIENT, refuse)
    assert chain.send_native(OWNER, RECIPIENT, 5) is False
    assert chain.native_balance(OWNER) == 10

    chain.set_receive_hook(RECIPIENT, None)
    assert chain.send_native(OWNER, RECIPIENT, 5) is True
    assert chain.native_balance(RECIPIENT) == 5
    assert chain.send_native(OWNER, RECIPIENT, 6) is False


def test_wrap_and_unwrap(chain):
    chain.deal_native(OWNER, 10)
    chain.wrap(OWNER, 10)
    assert chain.balance_of(WNATIVE, OWNER) == 10

    chain.unwrap(OWNER, 4)
    assert chain.balance_of(WNATIVE, OWNER) == 6
    assert chain.native_balance(OWNER) == 4

    with pytest.raises(TransferFailed):
        chain.unwrap(OWNER, 7)


def test_code_at_unknown_address(chain):
    with pytest.raises(ExternalCallError):
        chain.code_at(STRANGER)


def test_amounts_must_be_uint256(chain):
    with pytest.raises(HostError):
        chain.approve(TOKEN_A, OWNER, STRANGER, -1)
    with pytest.raises(HostError):
        chain.approve(TOKEN_A, OWNER, STRANGER, True)
