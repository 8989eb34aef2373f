"""
Tests for the AdminWallet lifecycle.

Covers:
- State transitions on successful and failed initialization
- Degraded state when the smoke check fails
- Operations refused before initialization and after close
- Health report
"""

import pytest
from eth_utils import to_checksum_address

from admin_wallet.services.blockchain import AdminWallet, ContractKind, WalletState
from admin_wallet.services.blockchain.account_initializer import SIGNER_MIDDLEWARE_NAME
from admin_wallet.utils.exceptions import InitializationError
from tests.fakes import (
    ADMIN_ADDRESS,
    CONTRACT_ADDRESSES,
    TEST_MNEMONIC,
    USER_ADDRESS,
    make_artifacts,
    make_settings,
)


class TestInitialize:
    """Startup sequence."""

    @pytest.mark.asyncio
    async def test_ready(self, chain, wallet_factory):
        wallet = wallet_factory()
        assert wallet.state is WalletState.UNINITIALIZED
        assert not wallet.is_ready

        state = await wallet.initialize()

        assert state is WalletState.READY
        assert wallet.is_ready
        assert wallet.address == ADMIN_ADDRESS
        assert wallet.registry.is_bound
        assert chain.web3.eth.default_account == ADMIN_ADDRESS

    @pytest.mark.asyncio
    async def test_mnemonic_account(self, wallet_factory):
        wallet = wallet_factory(make_settings(private_key=None, mnemonic=TEST_MNEMONIC))

        await wallet.initialize()

        assert wallet.address == ADMIN_ADDRESS
        assert wallet.account.hd_addresses[1] == USER_ADDRESS

    @pytest.mark.asyncio
    async def test_manifest_address_used(self, wallet_factory):
        wallet = wallet_factory(manifest={"test": {"Token": "0x" + "12" * 20}})

        await wallet.initialize()

        assert wallet.registry.token.address == to_checksum_address("0x" + "12" * 20)
        assert wallet.registry.identity.address == to_checksum_address(
            CONTRACT_ADDRESSES[ContractKind.IDENTITY]
        )

    @pytest.mark.asyncio
    async def test_degraded_when_smoke_check_fails(self, chain, wallet_factory):
        chain.fail_calls = ConnectionError("token contract unreachable")
        wallet = wallet_factory()

        state = await wallet.initialize()

        assert state is WalletState.DEGRADED
        assert wallet.is_ready

        # Serving continues once the node recovers
        chain.fail_calls = None
        await wallet.whitelist(USER_ADDRESS, "did:1")
        assert await wallet.is_verified(USER_ADDRESS)

    @pytest.mark.asyncio
    async def test_missing_credentials_fail(self, wallet_factory):
        wallet = wallet_factory(make_settings(private_key=None, mnemonic=None))

        with pytest.raises(InitializationError, match="No admin credentials"):
            await wallet.initialize()

        assert wallet.state is WalletState.FAILED
        assert not wallet.is_ready

    @pytest.mark.asyncio
    async def test_unresolved_contract_fails(self, wallet_factory):
        wallet = wallet_factory(artifacts=make_artifacts(addresses={}))

        with pytest.raises(InitializationError):
            await wallet.initialize()

        assert wallet.state is WalletState.FAILED

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, wallet_factory, monkeypatch):
        wallet = wallet_factory()

        def broken():
            raise RuntimeError("boom")

        monkeypatch.setattr(wallet, "_bind_contracts", broken)

        with pytest.raises(InitializationError, match="boom"):
            await wallet.initialize()

        assert wallet.state is WalletState.FAILED

    @pytest.mark.asyncio
    async def test_initialize_twice(self, wallet):
        assert await wallet.initialize() is WalletState.READY

    @pytest.mark.asyncio
    async def test_loads_bundled_artifacts(self, chain):
        # Bundled artifacts carry no network addresses, so a manifest is required
        manifest = {
            "test": {kind.value: address for kind, address in CONTRACT_ADDRESSES.items()}
        }
        wallet = AdminWallet(make_settings(), manifest=manifest, web3=chain.web3)

        state = await wallet.initialize()

        assert state is WalletState.READY
        names = {entry.get("name") for entry in wallet.registry.identity.abi}
        assert "whiteListUser" in names


class TestNotReady:
    """Operations before initialize / after close."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("whitelist", (USER_ADDRESS, "did:1")),
            ("blacklist", (USER_ADDRESS,)),
            ("is_verified", (USER_ADDRESS,)),
            ("top_up", (USER_ADDRESS,)),
            ("evaluate_top_up", (USER_ADDRESS,)),
            ("address_balance", (USER_ADDRESS,)),
            ("admin_balance", ()),
        ],
    )
    async def test_refused_before_initialize(self, chain, wallet_factory, method, args):
        wallet = wallet_factory()

        with pytest.raises(InitializationError, match="not initialized"):
            await getattr(wallet, method)(*args)

        assert chain.submitted == []

    @pytest.mark.asyncio
    async def test_refused_after_failure(self, wallet_factory):
        wallet = wallet_factory(make_settings(private_key=None))
        with pytest.raises(InitializationError):
            await wallet.initialize()

        with pytest.raises(InitializationError, match="failed"):
            await wallet.is_verified(USER_ADDRESS)

    @pytest.mark.asyncio
    async def test_close(self, chain, wallet):
        await wallet.close()

        assert wallet.state is WalletState.UNINITIALIZED
        assert wallet.address is None
        # Injected web3 is kept, only the admin signer is removed
        assert wallet.web3 is chain.web3
        chain.web3.middleware_onion.remove.assert_called_once_with(SIGNER_MIDDLEWARE_NAME)
        with pytest.raises(InitializationError):
            await wallet.admin_balance()


    @pytest.mark.asyncio
    async def test_reinitialize_on_injected_web3(self, chain, wallet):
        await wallet.whitelist(USER_ADDRESS, "did:1")
        await wallet.close()

        assert await wallet.initialize() is WalletState.READY
        assert wallet.web3 is chain.web3
        assert await wallet.is_verified(USER_ADDRESS)

    @pytest.mark.asyncio
    async def test_close_drops_built_web3(self):
        wallet = AdminWallet(make_settings())
        wallet._init_provider()
        assert wallet.web3 is not None

        await wallet.close()

        assert wallet.web3 is None


class TestHealthCheck:
    """Health report."""

    @pytest.mark.asyncio
    async def test_ready_report(self, chain, wallet):
        chain.balances[ADMIN_ADDRESS] = 10**18
        chain.token_balances[ADMIN_ADDRESS] = 500

        report = await wallet.health_check()

        assert report["state"] == "ready"
        assert report["ready"] is True
        assert report["address"] == ADMIN_ADDRESS
        assert report["network"] == "test"
        assert report["network_id"] == 42
        assert report["contracts"]["Identity"] == to_checksum_address(
            CONTRACT_ADDRESSES[ContractKind.IDENTITY]
        )
        assert report["balances"] == {"native": "1", "token": 500}

    @pytest.mark.asyncio
    async def test_balance_failures_reported_as_none(self, chain, wallet):
        chain.fail_balance = ConnectionError("down")
        chain.fail_calls = ConnectionError("down")

        report = await wallet.health_check()

        assert report["balances"] == {"native": None, "token": None}
        assert len(report["contracts"]) == 4

    @pytest.mark.asyncio
    async def test_uninitialized_report(self, wallet_factory):
        report = await wallet_factory().health_check()

        assert report["state"] == "uninitialized"
        assert report["ready"] is False
        assert report["contracts"] == {}
