# flash_arb/config.py
"""
Flash Loan Arbitrage Receiver Configuration
Environment-driven constants plus the runtime ExecutorConfig object
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from web3 import Web3

# -----------------------------
# Load .env (optional)
# -----------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / "config" / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH)

# -----------------------------
# Chain Configuration
# -----------------------------
CHAIN_ID = int(os.getenv("CHAIN_ID", "137"))  # Polygon PoS

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# withdraw()/rescue() treat the zero address as native currency
NATIVE = ZERO_ADDRESS

UINT256_MAX = 2**256 - 1

# -----------------------------
# Flash Loan Configuration (Aave V3 on Polygon)
# -----------------------------
AAVE_FLASH_FEE_BPS = int(os.getenv("AAVE_FLASH_FEE_BPS", "5"))  # 0.05%

# Wrapped native asset for the unwrap-to-native profit branch (WMATIC)
WRAPPED_NATIVE = os.getenv("WRAPPED_NATIVE", "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270")

# -----------------------------
# Trading Parameters
# -----------------------------
# Informational ceiling, owner-settable, never above the hard cap
MAX_SLIPPAGE_BPS = int(os.getenv("MAX_SLIPPAGE_BPS", "50"))  # 0.50%
MAX_SLIPPAGE_CAP_BPS = 1000  # 10%

SWAP_DEADLINE_SECONDS = int(os.getenv("SWAP_DEADLINE_SECONDS", "120"))

# -----------------------------
# Gas Configuration
# -----------------------------
GAS_LIMIT_FLASH_LOAN = 500_000

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"


@dataclass
class ExecutorConfig:
    """
    Process-wide receiver configuration.

    Owner and pause flag live on the AccessGate; everything else the
    executor needs to run a cycle lives here.
    """
    address: str  # this receiver's own identity on the host
    pool: str = ZERO_ADDRESS
    provider: str = ZERO_ADDRESS
    wrapped_native: str = WRAPPED_NATIVE
    max_slippage_bps: int = MAX_SLIPPAGE_BPS
    swap_deadline_seconds: int = SWAP_DEADLINE_SECONDS

    def __post_init__(self):
        self.address = Web3.to_checksum_address(self.address)
        self.pool = Web3.to_checksum_address(self.pool)
        self.provider = Web3.to_checksum_address(self.provider)
        self.wrapped_native = Web3.to_checksum_address(self.wrapped_native)

    def snapshot(self) -> dict:
        return {
            "pool": self.pool,
            "provider": self.provider,
            "max_slippage_bps": self.max_slippage_bps,
        }

    def restore(self, snap: dict) -> None:
        self.pool = snap["pool"]
        self.provider = snap["provider"]
        self.max_slippage_bps = snap["max_slippage_bps"]
