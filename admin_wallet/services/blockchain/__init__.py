"""
Blockchain services module.

Provides the admin wallet and its components: transport selection, admin
account, contract bindings, transaction execution, identity operations,
balances and the top-up policy.
"""

from .account_initializer import AccountInitializer, SigningAccount
from .admin_wallet import AdminWallet, WalletState
from .artifacts import ContractArtifact, load_artifact, load_deployment_manifest
from .balance_operations import BalanceQuery
from .contract_registry import ContractBinding, ContractKind, ContractRegistry
from .identity_gateway import IdentityGateway
from .provider_selector import ProviderSelector
from .topup_policy import TopUpDecision, TopUpPolicy, TopUpReason
from .transaction_executor import (
    PendingTransaction,
    TransactionExecutor,
    TransactionReceipt,
)


__all__ = [
    "AccountInitializer",
    "AdminWallet",
    "BalanceQuery",
    "ContractArtifact",
    "ContractBinding",
    "ContractKind",
    "ContractRegistry",
    "IdentityGateway",
    "PendingTransaction",
    "ProviderSelector",
    "SigningAccount",
    "TopUpDecision",
    "TopUpPolicy",
    "TopUpReason",
    "TransactionExecutor",
    "TransactionReceipt",
    "WalletState",
    "load_artifact",
    "load_deployment_manifest",
]
