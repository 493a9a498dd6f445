# flash_arb/abi.py
"""
Minimal ABIs for the on-chain collaborators queried from Python
"""

# =============================================================================
# AAVE V3 POOL ABI (Flash Loan)
# =============================================================================

AAVE_POOL_ABI = [
    {
        "name": "flashLoan",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "receiverAddress", "type": "address"},
            {"name": "assets", "type": "address[]"},
            {"name": "amounts", "type": "uint256[]"},
            {"name": "interestRateModes", "type": "uint256[]"},
            {"name": "onBehalfOf", "type": "address"},
            {"name": "params", "type": "bytes"},
            {"name": "referralCode", "type": "uint16"},
        ],
        "outputs": [],
    },
    {
        "name": "FLASHLOAN_PREMIUM_TOTAL",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint128"}],
    },
]

# =============================================================================
# AAVE V3 POOL ADDRESSES PROVIDER ABI
# =============================================================================

ADDRESSES_PROVIDER_ABI = [
    {
        "name": "getPool",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]

# =============================================================================
# RECEIVER PARAMS BLOB
# =============================================================================

# (venue1, venue2, path1, path2, minOut1, minOut2, minProfit, unwrapToNative, originator)
EXECUTION_PARAMS_TYPES = [
    "address",
    "address",
    "address[]",
    "address[]",
    "uint256",
    "uint256",
    "uint256",
    "bool",
    "address",
]
