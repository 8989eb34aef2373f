"""
Admin Wallet - Main coordinator.

This module provides the AdminWallet class that coordinates the admin
account's blockchain operations by delegating to specialized components:
- ProviderSelector: Web3 transport
- AccountInitializer: admin signing account
- ContractRegistry: identity/token/redemption/reserve bindings
- TransactionExecutor: uniform call/transact pattern with nonce sequencing
- IdentityGateway, BalanceQuery, TopUpPolicy: public operations

The wallet is constructed explicitly and passed by reference; nothing is
initialized at import time.
"""

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger
from web3 import AsyncWeb3

from admin_wallet.config.settings import Settings
from admin_wallet.utils.datetime_utils import utc_now
from admin_wallet.utils.exceptions import InitializationError
from admin_wallet.utils.security import mask_address

from .account_initializer import (
    SIGNER_MIDDLEWARE_NAME,
    AccountInitializer,
    SigningAccount,
)
from .artifacts import ContractArtifact, load_deployment_manifest
from .balance_operations import BalanceQuery
from .contract_registry import ContractKind, ContractRegistry, load_artifacts
from .health_check import HealthCheck
from .identity_gateway import IdentityGateway
from .provider_selector import ProviderSelector
from .topup_policy import TopUpDecision, TopUpPolicy
from .transaction_executor import (
    PendingTransaction,
    TransactionExecutor,
    TransactionReceipt,
)


class WalletState(str, Enum):
    UNINITIALIZED = "uninitialized"
    PROVIDER_READY = "provider_ready"
    ACCOUNT_READY = "account_ready"
    BOUND = "bound"
    READY = "ready"
    DEGRADED = "degraded"  # bound, but the startup balance check failed
    FAILED = "failed"


SERVING_STATES = (WalletState.BOUND, WalletState.READY, WalletState.DEGRADED)


class AdminWallet:
    """
    Administrative wallet for the identity/token network.

    Lifecycle:
        wallet = AdminWallet(settings)
        state = await wallet.initialize()
        await wallet.whitelist(address, external_id)
        await wallet.close()
    """

    def __init__(
        self,
        settings: Settings,
        manifest: dict[str, dict[str, str]] | None = None,
        artifacts: dict[ContractKind, ContractArtifact] | None = None,
        clock: Callable[[], datetime] = utc_now,
        web3: AsyncWeb3 | None = None,
    ) -> None:
        """
        Initialize admin wallet (not yet connected).

        Args:
            settings: Application settings
            manifest: Deployment manifest; loaded from settings when omitted
            artifacts: ABI artifacts; loaded from settings.contracts_dir when omitted
            clock: Current time source for the top-up rate limit
            web3: Prebuilt AsyncWeb3; built from settings when omitted
        """
        self.settings = settings
        self.clock = clock
        self._manifest = manifest
        self._artifacts = artifacts
        self._provider_selector = ProviderSelector(settings)

        self._state = WalletState.UNINITIALIZED
        self.web3: AsyncWeb3 | None = web3
        self._owns_web3 = web3 is None
        self.account: SigningAccount | None = None
        self.registry: ContractRegistry | None = None
        self.executor: TransactionExecutor | None = None
        self.identity: IdentityGateway | None = None
        self.balances: BalanceQuery | None = None
        self.topup: TopUpPolicy | None = None
        self._health_check: HealthCheck | None = None

    # ========== State ==========

    @property
    def state(self) -> WalletState:
        return self._state

    @property
    def is_ready(self) -> bool:
        """True when operations can be served (bound, ready or degraded)."""
        return self._state in SERVING_STATES

    @property
    def address(self) -> str | None:
        """Admin account address."""
        return self.account.address if self.account else None

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise InitializationError(
                f"AdminWallet not initialized (state: {self._state.value}). "
                "Call initialize() first."
            )

    # ========== Initialization ==========

    async def initialize(self) -> WalletState:
        """
        Connect, derive the admin account, bind contracts, run the smoke check.

        Returns:
            READY, or DEGRADED if the balance smoke check failed

        Raises:
            InitializationError: Fatal startup failure (state becomes FAILED)
        """
        if self._state is not WalletState.UNINITIALIZED:
            logger.warning(f"AdminWallet already initialized ({self._state.value})")
            return self._state

        logger.debug(
            f"Initializing wallet: transport={self.settings.web3_transport} "
            f"network={self.settings.network} id={self.settings.network_id}"
        )

        try:
            self._init_provider()
            await self._provider_selector.connect(self.web3)
            self._state = WalletState.PROVIDER_READY

            self.account = AccountInitializer(self.settings).initialize(self.web3)
            self._state = WalletState.ACCOUNT_READY

            self._bind_contracts()
            self._state = WalletState.BOUND
        except InitializationError as e:
            self._state = WalletState.FAILED
            logger.error(f"AdminWallet initialization failed: {e}")
            raise
        except Exception as e:
            self._state = WalletState.FAILED
            logger.error(f"AdminWallet initialization failed: {e}")
            raise InitializationError(f"Wallet initialization failed: {e}") from e

        self._state = await self._smoke_check()
        return self._state

    def _init_provider(self) -> None:
        if self.web3 is None:
            self.web3 = self._provider_selector.build_web3()

    def _bind_contracts(self) -> None:
        manifest = (
            self._manifest
            if self._manifest is not None
            else load_deployment_manifest(self.settings.deployment_manifest)
        )
        artifacts = (
            self._artifacts
            if self._artifacts is not None
            else load_artifacts(Path(self.settings.contracts_dir))
        )

        self.registry = ContractRegistry(
            self.web3, self.account, self.settings, manifest, artifacts
        )
        self.registry.bind_all()

        self.executor = TransactionExecutor(
            self.web3, self.account, receipt_timeout=self.settings.receipt_timeout
        )
        self.identity = IdentityGateway(self.registry, self.executor)
        self.balances = BalanceQuery(
            self.web3, self.registry, self.executor, self.account.address
        )
        self.topup = TopUpPolicy(
            self.settings, self.identity, self.balances, self.executor, clock=self.clock
        )
        self._health_check = HealthCheck(
            self.registry,
            self.balances,
            network=self.settings.network,
            network_id=self.settings.network_id,
        )

    async def _smoke_check(self) -> WalletState:
        """Query admin balances once; failure degrades instead of aborting."""
        try:
            token_balance = await self.balances.admin_token_balance()
            native_balance = await self.balances.admin_balance()
        except Exception as e:
            logger.error(f"Error initializing wallet: {e}")
            logger.warning("AdminWallet running in degraded state")
            return WalletState.DEGRADED

        logger.success(
            f"AdminWallet ready\n"
            f"  Account: {mask_address(self.account.address)}\n"
            f"  Network: {self.settings.network} ({self.settings.network_id})\n"
            f"  Token balance: {token_balance}\n"
            f"  Native balance: {native_balance}"
        )
        return WalletState.READY

    # ========== Identity ==========

    async def whitelist(self, address: str, external_id: str) -> TransactionReceipt:
        self._require_ready()
        return await self.identity.whitelist(address, external_id)

    async def blacklist(self, address: str) -> TransactionReceipt:
        self._require_ready()
        return await self.identity.blacklist(address)

    async def is_verified(self, address: str) -> bool:
        self._require_ready()
        return await self.identity.is_verified(address)

    # ========== Top-up ==========

    async def top_up(
        self,
        address: str,
        last_topping: datetime | None = None,
        force: bool = False,
    ) -> PendingTransaction:
        self._require_ready()
        return await self.topup.top_up(address, last_topping, force)

    async def evaluate_top_up(
        self,
        address: str,
        last_topping: datetime | None = None,
        force: bool = False,
    ) -> TopUpDecision:
        """Dry run of top_up: the decision without a transfer."""
        self._require_ready()
        return await self.topup.decide(address, last_topping, force)

    # ========== Balances ==========

    async def address_balance(self, address: str) -> int:
        self._require_ready()
        return await self.balances.address_balance(address)

    async def admin_balance(self) -> str:
        self._require_ready()
        return await self.balances.admin_balance()

    # ========== Health / cleanup ==========

    async def health_check(self) -> dict[str, Any]:
        """Current state, bound contracts and admin balances."""
        if self._health_check is None:
            return {
                "state": self._state.value,
                "ready": False,
                "address": self.address,
                "network": self.settings.network,
                "network_id": self.settings.network_id,
                "contracts": {},
                "balances": {},
            }
        report = await self._health_check.health_check()
        report["state"] = self._state.value
        report["ready"] = self.is_ready
        return report

    async def close(self) -> None:
        """
        Close persistent transport connections and drop the account.

        An injected web3 instance is kept (minus the admin signer) so the
        wallet can be initialized again on it.
        """
        if self.web3 is not None:
            await self._provider_selector.disconnect(self.web3)
            if self._owns_web3:
                self.web3 = None
            elif self.account is not None:
                self.web3.middleware_onion.remove(SIGNER_MIDDLEWARE_NAME)
        self.account = None
        self.registry = None
        self.executor = None
        self.identity = None
        self.balances = None
        self.topup = None
        self._health_check = None
        self._state = WalletState.UNINITIALIZED
        logger.info("AdminWallet closed")
