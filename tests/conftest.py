"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Keep a developer's .env credentials out of the tests
os.environ.pop("PRIVATE_KEY", None)
os.environ.pop("MNEMONIC", None)
os.environ.setdefault("ENVIRONMENT", "production")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
import pytest_asyncio

from admin_wallet.config.settings import Settings
from admin_wallet.services.blockchain import AdminWallet, SigningAccount
from tests.fakes import FakeChain, make_artifacts, make_settings


@pytest.fixture
def chain(monkeypatch):
    """In-memory chain recording every transaction the admin signs."""
    fake = FakeChain()
    original = SigningAccount.sign_transaction

    def recording(self, transaction):
        signed = original(self, transaction)
        fake.signed[bytes(signed.raw_transaction)] = dict(transaction)
        return signed

    monkeypatch.setattr(SigningAccount, "sign_transaction", recording)
    return fake


@pytest.fixture
def settings():
    """Production settings with the test admin key."""
    return make_settings()


@pytest.fixture
def artifacts():
    return make_artifacts()


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def wallet_factory(chain, artifacts, now):
    """Build AdminWallet instances bound to the in-memory chain."""

    def factory(settings: Settings | None = None, **kwargs: Any) -> AdminWallet:
        kwargs.setdefault("manifest", {})
        kwargs.setdefault("artifacts", artifacts)
        kwargs.setdefault("clock", lambda: now)
        return AdminWallet(settings or make_settings(), web3=chain.web3, **kwargs)

    return factory


@pytest_asyncio.fixture
async def wallet(wallet_factory):
    """Initialized AdminWallet on the in-memory chain."""
    admin_wallet = wallet_factory()
    await admin_wallet.initialize()
    return admin_wallet
