"""
Nonce management for the admin account.

The admin account is the only sender, so after the first lookup nonces are
assigned locally. Callers must hold the executor's submission lock.
"""

from loguru import logger
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception

from admin_wallet.config.constants import NONCE_STUCK_THRESHOLD
from admin_wallet.utils.security import mask_address


class NonceManager:
    """
    Tracks the next nonce for a single sending address.

    Features:
    - Stuck transaction detection
    - Local sequencing between submissions
    - Reset to the node's view after a failed submission
    """

    def __init__(self, web3: AsyncWeb3, address: str) -> None:
        """
        Initialize nonce manager.

        Args:
            web3: AsyncWeb3 instance
            address: Sending address (admin account)
        """
        self.web3 = web3
        self.address = address
        self._next_nonce: int | None = None

    async def get_safe_nonce(self) -> int:
        """
        Get nonce from the node with stuck transaction detection.

        Returns:
            Pending nonce (includes transactions in the mempool)

        Raises:
            Web3Exception: If Web3 provider call fails
        """
        try:
            pending_nonce = await self.web3.eth.get_transaction_count(
                self.address, "pending"
            )
            confirmed_nonce = await self.web3.eth.get_transaction_count(
                self.address, "latest"
            )
        except Web3Exception as e:
            logger.error(
                f"Web3 error getting nonce for {mask_address(self.address)}: {e}"
            )
            raise

        if pending_nonce > confirmed_nonce + NONCE_STUCK_THRESHOLD:
            logger.warning(
                f"Possible stuck transactions detected: "
                f"pending={pending_nonce}, confirmed={confirmed_nonce}, "
                f"stuck={pending_nonce - confirmed_nonce}"
            )

        return pending_nonce

    async def next_nonce(self) -> int:
        """Nonce for the next submission."""
        if self._next_nonce is None:
            self._next_nonce = await self.get_safe_nonce()
        return self._next_nonce

    def mark_used(self, nonce: int) -> None:
        """Advance past a nonce the node accepted."""
        self._next_nonce = nonce + 1

    def reset(self) -> None:
        """Forget the local sequence; next call re-reads the node."""
        self._next_nonce = None
