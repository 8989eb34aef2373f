"""
Balance operations.

This module handles:
- Native currency balance of any address (raw wei)
- Native balance of the admin account in display units
- Token balance through the bound token contract
"""

from decimal import Decimal

from loguru import logger
from web3 import AsyncWeb3

from admin_wallet.utils.exceptions import TransportError, is_transport_error
from admin_wallet.utils.security import mask_address

from .contract_registry import ContractRegistry
from .identity_gateway import checksum_or_raise
from .transaction_executor import TransactionExecutor


class BalanceQuery:
    """
    Native-currency and token balance lookups.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        registry: ContractRegistry,
        executor: TransactionExecutor,
        admin_address: str,
    ) -> None:
        """
        Initialize balance query.

        Args:
            web3: AsyncWeb3 instance
            registry: Contract registry (token contract)
            executor: Transaction executor for contract reads
            admin_address: Admin account address
        """
        self.web3 = web3
        self.registry = registry
        self.executor = executor
        self.admin_address = admin_address

    async def address_balance(self, address: str) -> int:
        """
        Get native balance for address.

        Args:
            address: Wallet address to check

        Returns:
            Balance in wei, no conversion
        """
        address = checksum_or_raise(address)
        try:
            return await self.web3.eth.get_balance(address)
        except Exception as e:
            logger.error(f"Error addressBalance for {mask_address(address)}: {e}")
            if is_transport_error(e):
                raise TransportError(f"addressBalance failed: {e}") from e
            raise

    async def admin_balance(self) -> str:
        """
        Get native balance of the admin account in display units (ether).

        Returns:
            Decimal string, e.g. "1.5"
        """
        try:
            wei = await self.web3.eth.get_balance(self.admin_address)
        except Exception as e:
            logger.error(f"Error getBalance: {e}")
            if is_transport_error(e):
                raise TransportError(f"getBalance failed: {e}") from e
            raise
        return format_ether(wei)

    async def token_balance(self, address: str) -> int:
        """Get token balance for address in raw token units."""
        address = checksum_or_raise(address)
        result = await self.executor.call(
            "tokenBalance",
            self.registry.token.functions.balanceOf(address),
            address=mask_address(address),
        )
        return int(result)

    async def admin_token_balance(self) -> int:
        """Get token balance of the admin account in raw token units."""
        return await self.token_balance(self.admin_address)


def format_ether(wei: int) -> str:
    """
    Convert wei to a plain decimal ether string.

    Examples:
        >>> format_ether(1500000000000000000)
        '1.5'
        >>> format_ether(0)
        '0'
    """
    value = Decimal(wei) / Decimal(10**18)
    return format(value.normalize(), "f")
