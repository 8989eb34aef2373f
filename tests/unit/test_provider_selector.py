"""
Tests for Web3 transport selection.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider
from web3.providers.persistent import PersistentConnectionProvider

from admin_wallet.config.settings import WEBSOCKET_TRANSPORT
from admin_wallet.services.blockchain import ProviderSelector
from admin_wallet.utils.exceptions import InitializationError
from tests.fakes import make_settings


class TestSelectProvider:
    """Transport construction."""

    def test_http_default(self):
        settings = make_settings(
            http_web3_provider="https://kovan.infura.io/v3/", infura_key="key123"
        )

        provider = ProviderSelector(settings).select_provider()

        assert isinstance(provider, AsyncHTTPProvider)
        assert provider.endpoint_uri == "https://kovan.infura.io/v3/key123"

    def test_websocket(self):
        settings = make_settings(
            web3_transport=WEBSOCKET_TRANSPORT,
            websocket_web3_provider="ws://node.example:8546",
        )

        provider = ProviderSelector(settings).select_provider()

        assert isinstance(provider, WebSocketProvider)

    def test_unknown_transport_uses_http(self):
        selector = ProviderSelector(make_settings(web3_transport="Ipc"))
        assert isinstance(selector.select_provider(), AsyncHTTPProvider)

    def test_build_web3(self):
        w3 = ProviderSelector(make_settings()).build_web3()
        assert isinstance(w3, AsyncWeb3)
        assert isinstance(w3.provider, AsyncHTTPProvider)


class TestConnect:
    """Persistent connection handling."""

    @pytest.mark.asyncio
    async def test_http_connect_is_noop(self):
        selector = ProviderSelector(make_settings())
        w3 = selector.build_web3()

        await selector.connect(w3)
        await selector.disconnect(w3)

    @pytest.mark.asyncio
    async def test_persistent_provider_connected(self):
        provider = MagicMock(spec=PersistentConnectionProvider)
        provider.connect = AsyncMock()
        provider.disconnect = AsyncMock()
        w3 = MagicMock()
        w3.provider = provider
        selector = ProviderSelector(make_settings(web3_transport=WEBSOCKET_TRANSPORT))

        await selector.connect(w3)
        await selector.disconnect(w3)

        provider.connect.assert_awaited_once()
        provider.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_failure_is_initialization_error(self):
        provider = MagicMock(spec=PersistentConnectionProvider)
        provider.connect = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        w3 = MagicMock()
        w3.provider = provider
        selector = ProviderSelector(make_settings(web3_transport=WEBSOCKET_TRANSPORT))

        with pytest.raises(InitializationError, match="Cannot connect"):
            await selector.connect(w3)
