"""
Health Check Module.

Reports bound contracts and admin balances for the AdminWallet.
"""

from typing import Any

from loguru import logger

from .balance_operations import BalanceQuery
from .contract_registry import ContractRegistry


class HealthCheck:
    """
    Handles health check operations.

    Features:
    - Bound contract addresses
    - Admin balance queries
    """

    def __init__(
        self,
        registry: ContractRegistry,
        balances: BalanceQuery,
        network: str,
        network_id: int,
    ) -> None:
        """
        Initialize health check.

        Args:
            registry: Contract registry
            balances: Balance query
            network: Network name
            network_id: Numeric network id
        """
        self.registry = registry
        self.balances = balances
        self.network = network
        self.network_id = network_id

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check.

        Balance failures are reported as None, never raised.

        Returns:
            Dict with contracts and balances
        """
        try:
            native = await self.balances.admin_balance()
        except Exception as e:
            logger.error(f"Error checking native balance: {e}")
            native = None

        try:
            token = await self.balances.admin_token_balance()
        except Exception as e:
            logger.error(f"Error checking token balance: {e}")
            token = None

        return {
            "address": self.balances.admin_address,
            "network": self.network,
            "network_id": self.network_id,
            "contracts": self.registry.addresses(),
            "balances": {
                "native": native,
                "token": token,
            },
        }
