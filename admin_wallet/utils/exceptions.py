"""
Exception types for the admin wallet.

Categorized so callers can tell a fatal startup problem from a policy
refusal or a network failure.
"""

from aiohttp import ClientError
from web3.exceptions import Web3Exception


class AdminWalletError(Exception):
    """Base class for admin wallet errors."""
    pass


class InitializationError(AdminWalletError):
    """Fatal startup error: bad credentials or unresolved contract address."""
    pass


class RateLimitError(AdminWalletError):
    """Top-up attempted before the daily window elapsed."""
    pass


class NotVerifiedError(AdminWalletError):
    """Top-up target is not whitelisted and force was not set."""
    pass


class NoTopUpNeededError(AdminWalletError):
    """Computed deficit is below the top-up threshold."""
    pass


class TransportError(AdminWalletError):
    """Underlying network or contract call failure (timeout, revert, connectivity)."""
    pass


# Failures raised by the RPC layer that are normalized into TransportError.
# web3 raises ValueError for some JSON-RPC error responses.
TRANSPORT_ERRORS = (
    Web3Exception,
    ClientError,
    ConnectionError,
    TimeoutError,
    ValueError,
)


def is_transport_error(exc: BaseException) -> bool:
    """
    Check if exception comes from the network/contract layer.

    Args:
        exc: Exception to check

    Returns:
        True if exception should surface as TransportError
    """
    return isinstance(exc, TRANSPORT_ERRORS)
