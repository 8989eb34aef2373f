"""
Tests for admin account initialization.

Covers:
- Private key and mnemonic derivation
- Credential precedence
- Missing / malformed credentials
- Signer middleware registration
"""

from unittest.mock import MagicMock

import pytest

from admin_wallet.services.blockchain import AccountInitializer
from admin_wallet.services.blockchain.account_initializer import SIGNER_MIDDLEWARE_NAME
from admin_wallet.utils.exceptions import InitializationError
from tests.fakes import ADMIN_ADDRESS, ADMIN_KEY, TEST_MNEMONIC, USER_ADDRESS, make_settings


class TestLoadAccount:
    """Credential handling."""

    def test_private_key(self):
        account = AccountInitializer(make_settings()).load_account()

        assert account.address == ADMIN_ADDRESS
        assert account.hd_addresses == ()
        assert len(account.signers) == 1

    def test_private_key_without_prefix(self):
        settings = make_settings(private_key=ADMIN_KEY[2:])
        assert AccountInitializer(settings).load_account().address == ADMIN_ADDRESS

    def test_mnemonic_derives_ten_addresses(self):
        settings = make_settings(private_key=None, mnemonic=TEST_MNEMONIC)

        account = AccountInitializer(settings).load_account()

        assert account.address == ADMIN_ADDRESS
        assert len(account.hd_addresses) == 10
        assert account.hd_addresses[0] == ADMIN_ADDRESS
        assert account.hd_addresses[1] == USER_ADDRESS
        assert len(set(account.hd_addresses)) == 10
        assert len(account.signers) == 10

    def test_private_key_wins_over_mnemonic(self):
        other_key = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
        settings = make_settings(private_key=other_key, mnemonic=TEST_MNEMONIC)

        account = AccountInitializer(settings).load_account()

        assert account.address == USER_ADDRESS
        assert account.hd_addresses == ()

    def test_no_credentials(self):
        settings = make_settings(private_key=None, mnemonic=None)
        with pytest.raises(InitializationError, match="No admin credentials"):
            AccountInitializer(settings).load_account()

    def test_malformed_private_key_not_echoed(self):
        settings = make_settings(private_key="0xdeadbeef")

        with pytest.raises(InitializationError) as exc_info:
            AccountInitializer(settings).load_account()

        assert "Malformed PRIVATE_KEY" in str(exc_info.value)
        assert "deadbeef" not in str(exc_info.value)

    def test_malformed_mnemonic(self):
        settings = make_settings(private_key=None, mnemonic="not a valid phrase")
        with pytest.raises(InitializationError, match="Malformed MNEMONIC"):
            AccountInitializer(settings).load_account()

    def test_repr_masks_address(self):
        account = AccountInitializer(make_settings()).load_account()
        assert repr(account) == "SigningAccount(0xf39F...2266)"


class TestInitialize:
    """Signer registration on the Web3 instance."""

    def test_registers_signer_and_default_account(self):
        w3 = MagicMock()

        account = AccountInitializer(make_settings()).initialize(w3)

        w3.middleware_onion.inject.assert_called_once()
        _, kwargs = w3.middleware_onion.inject.call_args
        assert kwargs["name"] == SIGNER_MIDDLEWARE_NAME
        assert kwargs["layer"] == 0
        assert w3.eth.default_account == account.address

    def test_failure_leaves_web3_untouched(self):
        w3 = MagicMock()
        settings = make_settings(private_key=None, mnemonic=None)

        with pytest.raises(InitializationError):
            AccountInitializer(settings).initialize(w3)

        w3.middleware_onion.inject.assert_not_called()

    def test_signs_transactions(self):
        account = AccountInitializer(make_settings()).load_account()

        signed = account.sign_transaction(
            {
                "to": USER_ADDRESS,
                "value": 1,
                "gas": 21000,
                "gasPrice": 10**9,
                "nonce": 0,
                "chainId": 42,
            }
        )

        assert signed.raw_transaction
