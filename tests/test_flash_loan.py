"""Tests for loan initiation, fee helpers and the web3-facing collaborators."""

from unittest.mock import MagicMock

import pytest

from flash_arb.config import AAVE_FLASH_FEE_BPS, GAS_LIMIT_FLASH_LOAN
from flash_arb.connectors import HostLendingPool, Web3ProviderResolver
from flash_arb.errors import AmountZero, ExternalCallError, Paused, Unauthorized
from flash_arb.events import LoanExecuted, LoanRequested
from flash_arb.flash_loan import PoolClient, calculate_fee

from conftest import (
    OWNER,
    POOL,
    PRINCIPAL,
    RECEIVER,
    STRANGER,
    TOKEN_A,
    make_request,
)


# =============================================================================
# LOAN INITIATOR
# =============================================================================

def test_start_emits_request_before_execution(world):
    world.system.start(OWNER, TOKEN_A, PRINCIPAL, make_request().encode())

    kinds = [type(r) for r in world.host.events.records if isinstance(r, (LoanRequested, LoanExecuted))]
    assert kinds == [LoanRequested, LoanExecuted]
    assert world.host.events.of_type(LoanRequested) == [LoanRequested(OWNER, TOKEN_A, PRINCIPAL)]


def test_start_guards(world):
    with pytest.raises(AmountZero):
        world.system.start(OWNER, TOKEN_A, 0, make_request())
    with pytest.raises(Unauthorized):
        world.system.start(STRANGER, TOKEN_A, PRINCIPAL, make_request())

    world.system.pause(OWNER)
    with pytest.raises(Paused):
        world.system.start(OWNER, TOKEN_A, PRINCIPAL, make_request())
    assert world.host.events.of_type(LoanRequested) == []


def test_pool_rejects_debt_modes(world):
    with pytest.raises(ExternalCallError):
        world.pool.flash_loan(
            RECEIVER, world.system.executor, [TOKEN_A], [PRINCIPAL], [2], RECEIVER,
            make_request().encode(), 0,
        )


def test_pool_premium_rounds_down(world):
    assert HostLendingPool(world.host, POOL, fee_bps=5).premium(1999) == 0
    assert world.pool.premium(PRINCIPAL) == 3


# =============================================================================
# FEE HELPERS
# =============================================================================

def test_fee_helpers():
    assert calculate_fee(1000, 30) == 3
    assert calculate_fee(10**6) == 10**6 * AAVE_FLASH_FEE_BPS // 10000


def test_fee_matches_pool_premium(world):
    assert calculate_fee(PRINCIPAL, world.pool.fee_bps) == world.pool.premium(PRINCIPAL)


# =============================================================================
# WEB3 COLLABORATORS
# =============================================================================

def _w3_with_contract():
    w3 = MagicMock()
    contract = MagicMock()
    w3.eth.contract.return_value = contract
    return w3, contract


def test_pool_client_reads_and_caches_fee():
    w3, contract = _w3_with_contract()
    contract.functions.FLASHLOAN_PREMIUM_TOTAL.return_value.call.return_value = 9

    client = PoolClient(w3, POOL)

    assert client.get_flash_loan_fee_bps() == 9
    assert client.get_flash_loan_fee_bps() == 9
    assert contract.functions.FLASHLOAN_PREMIUM_TOTAL.return_value.call.call_count == 1
    quote = client.quote(TOKEN_A, 10_000)
    assert (quote.fee_amount, quote.total_repayment) == (9, 10_009)


def test_pool_client_falls_back_to_configured_fee():
    w3, contract = _w3_with_contract()
    contract.functions.FLASHLOAN_PREMIUM_TOTAL.return_value.call.side_effect = RuntimeError("rpc down")

    assert PoolClient(w3, POOL).get_flash_loan_fee_bps() == AAVE_FLASH_FEE_BPS


def test_build_flash_loan_tx():
    w3, contract = _w3_with_contract()
    contract.functions.flashLoan.return_value.build_transaction.return_value = {"data": "0x1234"}
    params = make_request().encode()

    tx = PoolClient(w3, POOL).build_flash_loan_tx(
        RECEIVER, TOKEN_A, PRINCIPAL, params, OWNER, gas_price=30 * 10**9, nonce=4, chain_id=137,
    )

    assert tx == {"data": "0x1234"}
    contract.functions.flashLoan.assert_called_once_with(
        RECEIVER, [TOKEN_A], [PRINCIPAL], [0], RECEIVER, params, 0
    )
    contract.functions.flashLoan.return_value.build_transaction.assert_called_once_with({
        "from": OWNER,
        "gas": GAS_LIMIT_FLASH_LOAN,
        "gasPrice": 30 * 10**9,
        "nonce": 4,
        "chainId": 137,
    })


def test_web3_provider_resolver():
    w3, contract = _w3_with_contract()
    contract.functions.getPool.return_value.call.return_value = POOL.lower()

    resolver = Web3ProviderResolver(w3, STRANGER)

    assert resolver.address == STRANGER
    assert resolver.current_pool() == POOL


def test_update_provider_through_web3_resolver(world):
    w3, contract = _w3_with_contract()
    contract.functions.getPool.return_value.call.return_value = POOL

    assert world.system.update_provider(OWNER, Web3ProviderResolver(w3, STRANGER)) == POOL
    assert world.system.config.provider == STRANGER
