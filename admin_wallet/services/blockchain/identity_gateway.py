"""
Identity contract operations.

Whitelist, blacklist and verification status of user addresses.
"""

from eth_utils import is_address, to_checksum_address
from loguru import logger

from admin_wallet.utils.security import mask_address, mask_tx_hash

from .contract_registry import ContractRegistry
from .transaction_executor import TransactionExecutor, TransactionReceipt


def checksum_or_raise(address: str) -> str:
    """
    Validate and checksum a user address.

    Raises:
        ValueError: If address is not a valid hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


class IdentityGateway:
    """
    Whitelist/blacklist/verify against the identity contract.

    Both mutations log the same way: INFO with masked address and tx hash on
    success, ERROR with context on failure.
    """

    def __init__(self, registry: ContractRegistry, executor: TransactionExecutor) -> None:
        self.registry = registry
        self.executor = executor

    async def whitelist(self, address: str, external_id: str) -> TransactionReceipt:
        """
        Mark an address as verified.

        Args:
            address: User address
            external_id: External identifier stored with the entry

        Returns:
            TransactionReceipt
        """
        address = checksum_or_raise(address)
        binding = self.registry.identity
        receipt = await self.executor.transact(
            "whitelistUser",
            binding.functions.whiteListUser(address, external_id),
            binding.default_options,
            address=mask_address(address),
            external_id=external_id,
        )
        logger.info(
            f"Whitelisted user {mask_address(address)} "
            f"(external_id={external_id}, tx={mask_tx_hash(receipt.tx_hash)})"
        )
        return receipt

    async def blacklist(self, address: str) -> TransactionReceipt:
        """
        Mark an address as unverified.

        Args:
            address: User address

        Returns:
            TransactionReceipt
        """
        address = checksum_or_raise(address)
        binding = self.registry.identity
        receipt = await self.executor.transact(
            "blacklistUser",
            binding.functions.blackListUser(address),
            binding.default_options,
            address=mask_address(address),
        )
        logger.info(
            f"Blacklisted user {mask_address(address)} "
            f"(tx={mask_tx_hash(receipt.tx_hash)})"
        )
        return receipt

    async def is_verified(self, address: str) -> bool:
        """Check whether an address is whitelisted."""
        address = checksum_or_raise(address)
        result = await self.executor.call(
            "isVerified",
            self.registry.identity.functions.isWhitelisted(address),
            address=mask_address(address),
        )
        return bool(result)
