"""
Pytest configuration and fixtures for flash_arb tests.

build_world() deploys one receiver, a pool and two venues on a fresh
host and wires the reference scenario:

    principal 1000 A, fee 30 bps (= 3)
    leg 1: 1000 A -> 1100 B on router1
    leg 2: 1100 B -> 1010 A on router2
"""

from dataclasses import dataclass
from typing import Type

import pytest
from web3 import Web3

from flash_arb.connectors import HostLendingPool, HostRouter, StaticProviderResolver
from flash_arb.host import HostChain
from flash_arb.params import ExecutionRequest
from flash_arb.system import FlashArbSystem

OWNER = Web3.to_checksum_address("0x00000000000000000000000000000000000000A1")
RECEIVER = Web3.to_checksum_address("0x00000000000000000000000000000000000000A2")
STRANGER = Web3.to_checksum_address("0x00000000000000000000000000000000000000A3")
RECIPIENT = Web3.to_checksum_address("0x00000000000000000000000000000000000000A4")
POOL = Web3.to_checksum_address("0x00000000000000000000000000000000000000B1")
PROVIDER = Web3.to_checksum_address("0x00000000000000000000000000000000000000B2")
ROUTER_1 = Web3.to_checksum_address("0x00000000000000000000000000000000000000C1")
ROUTER_2 = Web3.to_checksum_address("0x00000000000000000000000000000000000000C2")
TOKEN_A = Web3.to_checksum_address("0x00000000000000000000000000000000000000D1")
TOKEN_B = Web3.to_checksum_address("0x00000000000000000000000000000000000000D2")
TOKEN_C = Web3.to_checksum_address("0x00000000000000000000000000000000000000D3")
WNATIVE = Web3.to_checksum_address("0x00000000000000000000000000000000000000D4")

PRINCIPAL = 1000
FEE = 3
FEE_BPS = 30
LIQUIDITY = 10**9
TIMESTAMP = 1_700_000_000


@dataclass
class World:
    host: HostChain
    system: FlashArbSystem
    pool: HostLendingPool
    router1: HostRouter
    router2: HostRouter


def build_world(router1_cls: Type[HostRouter] = HostRouter, router2_cls: Type[HostRouter] = HostRouter) -> World:
    host = HostChain(timestamp=TIMESTAMP, wrapped_native=WNATIVE)

    pool = HostLendingPool(host, POOL, fee_bps=FEE_BPS)
    router1 = router1_cls(host, ROUTER_1)
    router2 = router2_cls(host, ROUTER_2)
    for contract in (pool, router1, router2):
        host.deploy(contract)

    for token in (TOKEN_A, WNATIVE):
        host.mint(token, POOL, LIQUIDITY)
        host.mint(token, ROUTER_2, LIQUIDITY)
    host.mint(TOKEN_B, ROUTER_1, LIQUIDITY)

    for token in (TOKEN_A, WNATIVE):
        router1.set_rate(token, TOKEN_B, 1100, 1000)
        router2.set_rate(TOKEN_B, token, 1010, 1100)

    system = FlashArbSystem(host, RECEIVER, OWNER)
    system.update_provider(OWNER, StaticProviderResolver(PROVIDER, POOL))
    system.set_router(OWNER, ROUTER_1, True)
    system.set_router(OWNER, ROUTER_2, True)
    system.set_tokens(OWNER, [TOKEN_A, TOKEN_B, WNATIVE], True)

    return World(host=host, system=system, pool=pool, router1=router1, router2=router2)


def make_request(asset: str = TOKEN_A, **overrides) -> ExecutionRequest:
    fields = dict(
        venue1=ROUTER_1,
        venue2=ROUTER_2,
        path1=[asset, TOKEN_B],
        path2=[TOKEN_B, asset],
        min_out1=1050,
        min_out2=990,
        min_profit=5,
        unwrap_to_native=False,
        originator=OWNER,
    )
    fields.update(overrides)
    return ExecutionRequest(**fields)


def call_as_pool(world: World, request, asset: str = TOKEN_A, principal: int = PRINCIPAL, fee: int = FEE):
    """Invoke the callback the way the pool does, after sending the principal"""
    world.host.mint(asset, RECEIVER, principal)
    params = request.encode() if isinstance(request, ExecutionRequest) else request
    return world.system.executor.execute_operation(
        POOL, [asset], [principal], [fee], RECEIVER, params
    )


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def host(world) -> HostChain:
    return world.host


@pytest.fixture
def system(world) -> FlashArbSystem:
    return world.system
