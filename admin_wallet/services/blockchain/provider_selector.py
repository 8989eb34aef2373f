"""
Web3 transport selection.

Chooses WebSocket or HTTP transport from settings and builds the AsyncWeb3
instance used by the rest of the wallet. No retry or health check happens
here: an unreachable HTTP node surfaces later as call-level errors.
"""

from aiohttp import ClientTimeout
from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider
from web3.middleware import ExtraDataToPOAMiddleware
from web3.providers.persistent import PersistentConnectionProvider

from admin_wallet.config.settings import WEBSOCKET_TRANSPORT, Settings
from admin_wallet.utils.exceptions import InitializationError
from admin_wallet.utils.security import mask_url


class ProviderSelector:
    """
    Builds the configured Web3 transport.

    - WebSocket: WebSocketProvider at WEBSOCKET_WEB3_PROVIDER
    - HttpProvider (default): AsyncHTTPProvider at HTTP_WEB3_PROVIDER + INFURA_KEY
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def transport(self) -> str:
        return self.settings.web3_transport

    def select_provider(self) -> AsyncHTTPProvider | WebSocketProvider:
        """
        Construct the transport handle.

        Returns:
            Provider instance, not yet connected for WebSocket
        """
        if self.transport == WEBSOCKET_TRANSPORT:
            url = self.settings.websocket_web3_provider
            provider = WebSocketProvider(url)
        else:
            url = self.settings.http_provider_url
            provider = AsyncHTTPProvider(
                url,
                request_kwargs={
                    "timeout": ClientTimeout(total=self.settings.rpc_timeout)
                },
            )

        logger.debug(
            f"Selected {type(provider).__name__} transport at {mask_url(url)}"
        )
        return provider

    def build_web3(self) -> AsyncWeb3:
        """Build AsyncWeb3 on the selected transport with POA block support."""
        w3 = AsyncWeb3(self.select_provider())
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        return w3

    async def connect(self, w3: AsyncWeb3) -> None:
        """
        Open persistent (WebSocket) connections.

        HTTP providers are stateless and skipped.

        Raises:
            InitializationError: If the WebSocket connection cannot be opened
        """
        provider = w3.provider
        if not isinstance(provider, PersistentConnectionProvider):
            return

        try:
            await provider.connect()
        except Exception as e:
            logger.error(f"Failed to open WebSocket transport: {e}")
            raise InitializationError(
                f"Cannot connect to {mask_url(self.settings.websocket_web3_provider)}"
            ) from e
        logger.info("✅ WebSocket provider connected")

    async def disconnect(self, w3: AsyncWeb3) -> None:
        """Close persistent connections; no-op for HTTP."""
        provider = w3.provider
        if isinstance(provider, PersistentConnectionProvider):
            await provider.disconnect()
