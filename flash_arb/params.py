# flash_arb/params.py
"""
ExecutionRequest: the decoded form of the opaque params blob that rides
through the flash loan into the receiver callback.
"""

from dataclasses import dataclass
from typing import List

from eth_abi import decode, encode
from web3 import Web3

from flash_arb.abi import EXECUTION_PARAMS_TYPES
from flash_arb.errors import ParamsDecodeError


@dataclass(frozen=True)
class ExecutionRequest:
    """Both swap legs plus their economic bounds, as planned off-process"""
    venue1: str
    venue2: str
    path1: List[str]
    path2: List[str]
    min_out1: int
    min_out2: int
    min_profit: int
    unwrap_to_native: bool
    originator: str

    def encode(self) -> bytes:
        return encode_execution_params(self)


def encode_execution_params(request: ExecutionRequest) -> bytes:
    return encode(
        EXECUTION_PARAMS_TYPES,
        [
            Web3.to_checksum_address(request.venue1),
            Web3.to_checksum_address(request.venue2),
            [Web3.to_checksum_address(a) for a in request.path1],
            [Web3.to_checksum_address(a) for a in request.path2],
            request.min_out1,
            request.min_out2,
            request.min_profit,
            bool(request.unwrap_to_native),
            Web3.to_checksum_address(request.originator),
        ],
    )


def decode_execution_params(blob: bytes) -> ExecutionRequest:
    """
    Decode a params blob.

    Any shape problem (truncated data, wrong types, non-bytes input)
    raises ParamsDecodeError, never a domain validation error.
    """
    if not isinstance(blob, (bytes, bytearray)):
        raise ParamsDecodeError(f"params must be bytes, got {type(blob).__name__}")
    try:
        (
            venue1, venue2, path1, path2,
            min_out1, min_out2, min_profit,
            unwrap_to_native, originator,
        ) = decode(EXECUTION_PARAMS_TYPES, bytes(blob))
    except Exception as e:
        raise ParamsDecodeError(f"cannot decode params blob: {e}", bytes(blob)) from e

    return ExecutionRequest(
        venue1=Web3.to_checksum_address(venue1),
        venue2=Web3.to_checksum_address(venue2),
        path1=[Web3.to_checksum_address(a) for a in path1],
        path2=[Web3.to_checksum_address(a) for a in path2],
        min_out1=min_out1,
        min_out2=min_out2,
        min_profit=min_profit,
        unwrap_to_native=unwrap_to_native,
        originator=Web3.to_checksum_address(originator),
    )
