"""
Contract Registry - address resolution and binding of the admin contracts.

For each contract kind the address comes from the deployment manifest entry
for the configured network name, falling back to the address embedded in
the ABI artifact for the configured network id. This lets the same code run
against a pinned deployment or a fresh local/test network.

Manifest entries use the deployment's contract names (Settings.manifest_keys,
e.g. Token is "GoodDollar"); an entry under the kind name is accepted too.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from eth_utils import is_address, to_checksum_address
from loguru import logger
from web3 import AsyncWeb3
from web3.contract import AsyncContract

from admin_wallet.config.settings import Settings
from admin_wallet.utils.exceptions import InitializationError

from .account_initializer import SigningAccount
from .artifacts import ContractArtifact, load_artifact


class ContractKind(str, Enum):
    """Contracts the admin wallet binds to. Values are artifact names."""

    IDENTITY = "Identity"
    TOKEN = "Token"
    REDEMPTION = "Redemption"
    RESERVE = "Reserve"


@dataclass(frozen=True)
class ContractBinding:
    """Contract handle with the admin account's default transaction options."""

    kind: ContractKind
    abi: list[dict[str, Any]]
    address: str
    from_address: str
    gas: int
    gas_price: int
    contract: AsyncContract

    @property
    def default_options(self) -> dict[str, Any]:
        """Options sent with every transaction on this contract."""
        return {
            "from": self.from_address,
            "gas": self.gas,
            "gasPrice": self.gas_price,
        }

    @property
    def functions(self) -> Any:
        return self.contract.functions


def load_artifacts(contracts_dir: Path) -> dict[ContractKind, ContractArtifact]:
    """Load the artifact for every contract kind from a directory."""
    return {kind: load_artifact(contracts_dir, kind.value) for kind in ContractKind}


class ContractRegistry:
    """
    Resolves and binds the identity, token, redemption and reserve contracts.

    Features:
    - Manifest-first address resolution with artifact network-id fallback
    - Checksummed addresses
    - Bindings created once and shared read-only
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        account: SigningAccount,
        settings: Settings,
        manifest: dict[str, dict[str, str]],
        artifacts: dict[ContractKind, ContractArtifact],
    ) -> None:
        """
        Initialize contract registry.

        Args:
            web3: AsyncWeb3 instance
            account: Admin account, default sender for every binding
            settings: Application settings (network name/id, gas)
            manifest: Deployment manifest, network name -> contract -> address
            artifacts: ABI artifact per contract kind
        """
        self.web3 = web3
        self.account = account
        self.network = settings.network
        self.network_id = settings.network_id
        self.gas = settings.contract_gas_limit
        self.gas_price = AsyncWeb3.to_wei(settings.gas_price_gwei, "gwei")
        self.manifest_keys = settings.manifest_keys
        self.manifest = manifest
        self.artifacts = artifacts
        self._bindings: dict[ContractKind, ContractBinding] = {}

    def resolve_address(self, kind: ContractKind) -> str:
        """
        Resolve the deployed address of a contract.

        Args:
            kind: Contract kind

        Returns:
            Checksummed address

        Raises:
            InitializationError: If neither the manifest nor the artifact
                has a valid address
        """
        artifact = self.artifacts.get(kind)
        if artifact is None:
            raise InitializationError(f"No ABI artifact for {kind.value}")

        entries = self.manifest.get(self.network, {})
        manifest_key = self.manifest_keys.get(kind.value, kind.value)
        address = entries.get(manifest_key) or entries.get(kind.value)
        source = f"manifest[{self.network}]"
        if not address:
            address = artifact.address_for(self.network_id)
            source = f"artifact networks[{self.network_id}]"

        if not address:
            raise InitializationError(
                f"No address for {kind.value} on network "
                f"'{self.network}' (id {self.network_id})"
            )
        if not is_address(address):
            raise InitializationError(
                f"Invalid address for {kind.value} from {source}: {address}"
            )

        logger.debug(f"{kind.value} resolved from {source}: {address}")
        return to_checksum_address(address)

    def bind(self, kind: ContractKind) -> ContractBinding:
        """Resolve and bind one contract."""
        address = self.resolve_address(kind)
        abi = self.artifacts[kind].abi
        binding = ContractBinding(
            kind=kind,
            abi=abi,
            address=address,
            from_address=self.account.address,
            gas=self.gas,
            gas_price=self.gas_price,
            contract=self.web3.eth.contract(address=address, abi=abi),
        )
        self._bindings[kind] = binding
        return binding

    def bind_all(self) -> dict[ContractKind, ContractBinding]:
        """
        Bind every contract kind.

        Raises:
            InitializationError: On the first contract that cannot be resolved
        """
        for kind in ContractKind:
            self.bind(kind)

        logger.info(
            "Contracts bound: "
            + ", ".join(f"{k.value}={b.address}" for k, b in self._bindings.items())
        )
        return dict(self._bindings)

    @property
    def is_bound(self) -> bool:
        return len(self._bindings) == len(ContractKind)

    def get(self, kind: ContractKind) -> ContractBinding:
        """
        Get a bound contract.

        Raises:
            InitializationError: If the contract was not bound yet
        """
        try:
            return self._bindings[kind]
        except KeyError:
            raise InitializationError(f"{kind.value} contract is not bound") from None

    @property
    def identity(self) -> ContractBinding:
        return self.get(ContractKind.IDENTITY)

    @property
    def token(self) -> ContractBinding:
        return self.get(ContractKind.TOKEN)

    @property
    def redemption(self) -> ContractBinding:
        return self.get(ContractKind.REDEMPTION)

    @property
    def reserve(self) -> ContractBinding:
        return self.get(ContractKind.RESERVE)

    def addresses(self) -> dict[str, str]:
        """Bound addresses by contract name."""
        return {kind.value: b.address for kind, b in self._bindings.items()}
