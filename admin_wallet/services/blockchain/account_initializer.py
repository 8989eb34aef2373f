"""
Admin account initialization.

This module handles:
- Deriving the admin account from a raw private key
- Deriving the admin account from a mnemonic (first of 10 HD addresses)
- Registering the account as the default signer on the Web3 instance
"""

from eth_account import Account
from eth_account.datastructures import SignedTransaction
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from loguru import logger
from web3 import AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from admin_wallet.config.constants import HD_ADDRESS_COUNT, HD_BASE_PATH
from admin_wallet.config.settings import Settings
from admin_wallet.utils.exceptions import InitializationError
from admin_wallet.utils.security import mask_address


SIGNER_MIDDLEWARE_NAME = "admin_signer"


class SigningAccount:
    """
    The single administrative account.

    Key material stays inside the wrapped LocalAccount; callers only get
    the address and a signing method.
    """

    def __init__(
        self,
        account: LocalAccount,
        hd_accounts: tuple[LocalAccount, ...] = (),
    ) -> None:
        self._account = account
        self._hd_accounts = hd_accounts
        self.address = to_checksum_address(account.address)

    @property
    def hd_addresses(self) -> tuple[str, ...]:
        """Addresses derived from the mnemonic (empty for a raw key)."""
        return tuple(to_checksum_address(a.address) for a in self._hd_accounts)

    @property
    def signers(self) -> list[LocalAccount]:
        """Accounts registered with the signing middleware."""
        extra = [a for a in self._hd_accounts if a.address != self._account.address]
        return [self._account, *extra]

    def sign_transaction(self, transaction: dict) -> SignedTransaction:
        """Sign a fully built transaction dict."""
        return self._account.sign_transaction(transaction)

    def __repr__(self) -> str:
        return f"SigningAccount({mask_address(self.address)})"


class AccountInitializer:
    """
    Produces exactly one SigningAccount from settings.

    Private key takes precedence over mnemonic. With neither configured,
    initialization fails instead of proceeding with an undefined signer.
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize account initializer.

        Args:
            settings: Application settings containing the admin credentials
        """
        self.settings = settings

    def load_account(self) -> SigningAccount:
        """
        Derive the admin account from configured credentials.

        Returns:
            SigningAccount

        Raises:
            InitializationError: If no credential is configured or it is malformed
        """
        if self.settings.private_key:
            return self._from_private_key(self.settings.private_key)
        if self.settings.mnemonic:
            return self._from_mnemonic(self.settings.mnemonic)
        raise InitializationError(
            "No admin credentials configured: set PRIVATE_KEY or MNEMONIC"
        )

    def initialize(self, w3: AsyncWeb3) -> SigningAccount:
        """
        Derive the admin account and install it as the default signer.

        Args:
            w3: AsyncWeb3 instance to register the signer on

        Returns:
            SigningAccount
        """
        account = self.load_account()

        w3.middleware_onion.inject(
            SignAndSendRawMiddlewareBuilder.build(account.signers),
            name=SIGNER_MIDDLEWARE_NAME,
            layer=0,
        )
        w3.eth.default_account = account.address

        logger.info(f"Admin account ready: {mask_address(account.address)}")
        return account

    def _from_private_key(self, private_key: str) -> SigningAccount:
        try:
            account = Account.from_key(private_key)
        except Exception as e:
            # SECURITY: never echo the key itself
            raise InitializationError(
                f"Malformed PRIVATE_KEY: {type(e).__name__}"
            ) from e

        logger.debug(f"Initialized by private key: {mask_address(account.address)}")
        return SigningAccount(account)

    def _from_mnemonic(self, mnemonic: str) -> SigningAccount:
        Account.enable_unaudited_hdwallet_features()
        try:
            hd_accounts = tuple(
                Account.from_mnemonic(mnemonic, account_path=f"{HD_BASE_PATH}/{index}")
                for index in range(HD_ADDRESS_COUNT)
            )
        except Exception as e:
            raise InitializationError(
                f"Malformed MNEMONIC: {type(e).__name__}"
            ) from e

        admin = hd_accounts[0]
        logger.debug(
            f"Initialized by mnemonic: {mask_address(admin.address)} "
            f"({len(hd_accounts)} HD addresses)"
        )
        return SigningAccount(admin, hd_accounts)
