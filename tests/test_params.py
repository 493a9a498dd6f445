"""Tests for the params blob codec."""

import pytest
from eth_abi import encode

from flash_arb.errors import FlashArbError, ParamsDecodeError
from flash_arb.params import decode_execution_params

from conftest import OWNER, ROUTER_1, ROUTER_2, TOKEN_A, TOKEN_B, TOKEN_C, make_request


def test_decode_restores_request():
    request = make_request(
        path1=[TOKEN_A, TOKEN_C, TOKEN_B],
        min_profit=0,
        unwrap_to_native=True,
    )

    decoded = decode_execution_params(request.encode())

    assert decoded == request
    assert decoded.path1 == [TOKEN_A, TOKEN_C, TOKEN_B]
    assert decoded.unwrap_to_native is True


def test_decode_matches_field_order():
    blob = encode(
        ["address", "address", "address[]", "address[]", "uint256", "uint256", "uint256", "bool", "address"],
        [ROUTER_1, ROUTER_2, [TOKEN_A, TOKEN_B], [TOKEN_B, TOKEN_A], 1050, 990, 5, False, OWNER],
    )

    decoded = decode_execution_params(blob)

    assert (decoded.venue1, decoded.venue2) == (ROUTER_1, ROUTER_2)
    assert (decoded.min_out1, decoded.min_out2, decoded.min_profit) == (1050, 990, 5)
    assert decoded.originator == OWNER


@pytest.mark.parametrize("blob", [b"", b"\x00" * 31, make_request().encode()[:64]])
def test_truncated_blob_is_a_decode_error(blob):
    with pytest.raises(ParamsDecodeError) as exc:
        decode_execution_params(blob)
    assert not isinstance(exc.value, FlashArbError)


def test_non_bytes_params_rejected():
    with pytest.raises(ParamsDecodeError):
        decode_execution_params("0xdeadbeef")
