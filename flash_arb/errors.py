# flash_arb/errors.py
"""
Typed errors for the flash loan arbitrage receiver.

Every domain error carries the offending values in ``details`` so a
failed cycle can be diagnosed from the exception alone.
"""

from typing import Optional


class FlashArbError(Exception):
    """Base exception for receiver-level aborts."""

    code = "FLASH_ARB_ERROR"

    def __init__(self, message: str = "", details: Optional[dict] = None):
        super().__init__(message or self.code)
        self.details = details or {}

    def __str__(self):
        return f"[{self.code}] {super().__str__()}"


class ParamsDecodeError(Exception):
    """The params blob could not be decoded into an ExecutionRequest."""

    def __init__(self, message: str, blob: bytes = b""):
        super().__init__(message)
        self.blob = blob


class HostError(Exception):
    """Host-level invariant violation (uint256 range, unknown account)."""


# =============================================================================
# AUTHORIZATION
# =============================================================================

class AuthorizationError(FlashArbError):
    code = "AUTHORIZATION"


class Unauthorized(AuthorizationError):
    code = "UNAUTHORIZED"

    def __init__(self, caller: str, owner: str):
        super().__init__(
            f"caller {caller} is not owner {owner}",
            {"caller": caller, "owner": owner},
        )


class OnlyLendingPool(AuthorizationError):
    code = "ONLY_LENDING_POOL"

    def __init__(self, caller: str, pool: str):
        super().__init__(
            f"caller {caller} is not the lending pool {pool}",
            {"caller": caller, "pool": pool},
        )


# =============================================================================
# LIFECYCLE GATES
# =============================================================================

class LifecycleError(FlashArbError):
    code = "LIFECYCLE"


class Paused(LifecycleError):
    code = "PAUSED"


class ReentrantCall(LifecycleError):
    code = "REENTRANT_CALL"


# =============================================================================
# INPUT VALIDATION
# =============================================================================

class InputValidationError(FlashArbError):
    code = "INPUT_VALIDATION"


class AmountZero(InputValidationError):
    code = "AMOUNT_ZERO"


class ZeroAddress(InputValidationError):
    code = "ZERO_ADDRESS"


class OnlySingleAssetSupported(InputValidationError):
    code = "ONLY_SINGLE_ASSET_SUPPORTED"

    def __init__(self, assets: int, amounts: int, fees: int):
        super().__init__(
            f"expected 1 asset/amount/fee, got {assets}/{amounts}/{fees}",
            {"assets": assets, "amounts": amounts, "fees": fees},
        )


class RouterNotAllowed(InputValidationError):
    code = "ROUTER_NOT_ALLOWED"

    def __init__(self, router: str):
        super().__init__(f"router {router} is not whitelisted", {"router": router})


class InvalidPathLength(InputValidationError):
    code = "INVALID_PATH_LENGTH"

    def __init__(self, path1_len: int, path2_len: int):
        super().__init__(
            f"paths need >= 2 hops, got {path1_len} and {path2_len}",
            {"path1_len": path1_len, "path2_len": path2_len},
        )


class InvalidPath1Start(InputValidationError):
    code = "INVALID_PATH1_START"

    def __init__(self, actual: str, expected: str):
        super().__init__(
            f"path1 starts at {actual}, expected {expected}",
            {"actual": actual, "expected": expected},
        )


class InvalidPath2End(InputValidationError):
    code = "INVALID_PATH2_END"

    def __init__(self, actual: str, expected: str):
        super().__init__(
            f"path2 ends at {actual}, expected {expected}",
            {"actual": actual, "expected": expected},
        )


class InvalidPath2Start(InputValidationError):
    code = "INVALID_PATH2_START"

    def __init__(self, actual: str, expected: str):
        super().__init__(
            f"path2 starts at {actual}, expected {expected}",
            {"actual": actual, "expected": expected},
        )


class TokenNotWhitelisted(InputValidationError):
    code = "TOKEN_NOT_WHITELISTED"

    def __init__(self, token: str, path: int, index: int):
        super().__init__(
            f"token {token} at path{path}[{index}] is not whitelisted",
            {"token": token, "path": path, "index": index},
        )


class ZeroAmountWithdraw(InputValidationError):
    code = "ZERO_AMOUNT_WITHDRAW"


class ZeroAddressWithdraw(InputValidationError):
    code = "ZERO_ADDRESS_WITHDRAW"


# =============================================================================
# ECONOMIC SAFETY
# =============================================================================

class EconomicSafetyError(FlashArbError):
    code = "ECONOMIC_SAFETY"


class InsufficientToRepay(EconomicSafetyError):
    """`balance` is what this cycle holds of the asset, excluding anything held before the loan"""

    code = "INSUFFICIENT_TO_REPAY"

    def __init__(self, balance: int, total_debt: int):
        super().__init__(
            f"balance {balance} < debt {total_debt}",
            {"balance": balance, "total_debt": total_debt},
        )
        self.balance = balance
        self.total_debt = total_debt


class LessThanMinProfit(EconomicSafetyError):
    code = "LESS_THAN_MIN_PROFIT"

    def __init__(self, profit: int, min_profit: int):
        super().__init__(
            f"profit {profit} < min profit {min_profit}",
            {"profit": profit, "min_profit": min_profit},
        )
        self.profit = profit
        self.min_profit = min_profit


class InsufficientProfit(EconomicSafetyError):
    code = "INSUFFICIENT_PROFIT"

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"requested {requested} > available {available}",
            {"available": available, "requested": requested},
        )


# =============================================================================
# EXTERNAL CALL FAILURES
# =============================================================================

class ExternalCallError(FlashArbError):
    code = "EXTERNAL_CALL"


class WithdrawFailed(ExternalCallError):
    code = "WITHDRAW_FAILED"


class TransferFailed(ExternalCallError):
    code = "TRANSFER_FAILED"


class SwapReverted(ExternalCallError):
    code = "SWAP_REVERTED"


class MaxSlippageExceeded(ExternalCallError):
    code = "MAX_SLIPPAGE_EXCEEDED"

    def __init__(self, bps: int, cap: int):
        super().__init__(f"slippage {bps} bps > cap {cap} bps", {"bps": bps, "cap": cap})


class ProviderZero(ExternalCallError):
    code = "PROVIDER_ZERO"
