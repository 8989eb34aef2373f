"""
Transaction executor.

Uniform call pattern for every contract interaction:
- read-only: invoke, await, return the decoded value
- mutating: build with default options, sign, submit, await the receipt
- native transfer: submit and return a pending handle

Failures are logged with operation context and re-raised, network and
contract failures as TransportError. There is no retry: one attempt per
call, the caller owns retry policy.

Nonce assignment and submission run under one asyncio.Lock, so at most one
submission per account is in flight and waiters are served in FIFO order.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, NoReturn

from loguru import logger
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContractFunction
from web3.exceptions import TimeExhausted

from admin_wallet.config.constants import BLOCKCHAIN_RECEIPT_TIMEOUT
from admin_wallet.utils.exceptions import TransportError, is_transport_error
from admin_wallet.utils.security import mask_tx_hash

from .account_initializer import SigningAccount
from .nonce_manager import NonceManager


@dataclass(frozen=True)
class TransactionReceipt:
    """Outcome of a mined transaction. Logs are passed through undecoded."""

    success: bool
    tx_hash: str
    block_number: int | None = None
    gas_used: int | None = None
    logs: tuple[Any, ...] = field(default_factory=tuple)

    @classmethod
    def from_web3(cls, receipt: Any) -> "TransactionReceipt":
        return cls(
            success=receipt["status"] == 1,
            tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
            logs=tuple(receipt.get("logs") or ()),
        )


@dataclass
class PendingTransaction:
    """Submitted transaction that may not be mined yet."""

    tx_hash: str
    to: str
    value: int
    _web3: AsyncWeb3 = field(repr=False)
    _timeout: float = field(default=BLOCKCHAIN_RECEIPT_TIMEOUT, repr=False)

    async def wait(self) -> TransactionReceipt:
        """
        Wait for the receipt.

        Raises:
            TransportError: On timeout or revert
        """
        try:
            receipt = await self._web3.eth.wait_for_transaction_receipt(
                self.tx_hash, timeout=self._timeout
            )
        except TimeExhausted as e:
            logger.warning(
                f"Transaction {mask_tx_hash(self.tx_hash)} not mined "
                f"after {self._timeout}s - may still be pending"
            )
            raise TransportError(f"Receipt timeout for {self.tx_hash}") from e

        result = TransactionReceipt.from_web3(receipt)
        if not result.success:
            raise TransportError(f"Transaction {self.tx_hash} reverted")
        return result


def _format_context(context: dict[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in context.items())


class TransactionExecutor:
    """
    Executes contract calls and transfers for the admin account.

    Handles:
    - Nonce sequencing through NonceManager
    - Local signing with the SigningAccount
    - Receipt waiting and revert detection
    - Error normalization and logging
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        account: SigningAccount,
        receipt_timeout: float = BLOCKCHAIN_RECEIPT_TIMEOUT,
    ) -> None:
        """
        Initialize transaction executor.

        Args:
            web3: AsyncWeb3 instance
            account: Admin signing account, sender of every transaction
            receipt_timeout: Seconds to wait for a mined receipt
        """
        self.web3 = web3
        self.account = account
        self.receipt_timeout = receipt_timeout
        self.nonce_manager = NonceManager(web3, account.address)
        self._submit_lock = asyncio.Lock()
        self._chain_id: int | None = None

    def _fail(self, label: str, error: Exception, context: dict[str, Any]) -> NoReturn:
        details = _format_context(context)
        logger.error(f"Error {label}: {error}" + (f" ({details})" if details else ""))
        if is_transport_error(error):
            raise TransportError(f"{label} failed: {error}") from error
        raise error

    async def call(
        self,
        label: str,
        function: AsyncContractFunction,
        **context: Any,
    ) -> Any:
        """
        Run a read-only contract call.

        Args:
            label: Operation name for logs
            function: Bound contract function
            **context: Values logged on failure

        Returns:
            Decoded return value
        """
        try:
            return await function.call({"from": self.account.address})
        except Exception as e:
            self._fail(label, e, context)

    async def transact(
        self,
        label: str,
        function: AsyncContractFunction,
        options: dict[str, Any],
        **context: Any,
    ) -> TransactionReceipt:
        """
        Submit a state-changing contract call and wait for its receipt.

        Args:
            label: Operation name for logs
            function: Bound contract function
            options: Default options (from, gas, gasPrice)
            **context: Values logged with the outcome

        Returns:
            TransactionReceipt of a successful transaction

        Raises:
            TransportError: If submission fails, the receipt times out, or
                the transaction reverts
        """
        try:
            tx_hash = await self._submit(
                lambda nonce: function.build_transaction({**options, "nonce": nonce})
            )
            receipt = await PendingTransaction(
                tx_hash=tx_hash,
                to=function.address,
                value=0,
                _web3=self.web3,
                _timeout=self.receipt_timeout,
            ).wait()
        except Exception as e:
            self._fail(label, e, context)

        logger.debug(
            f"{label} mined: {mask_tx_hash(receipt.tx_hash)} "
            f"block={receipt.block_number} gas_used={receipt.gas_used}"
        )
        return receipt

    async def send_value(
        self,
        label: str,
        to: str,
        value: int,
        gas: int,
        gas_price: int,
        **context: Any,
    ) -> PendingTransaction:
        """
        Submit a native-currency transfer from the admin account.

        Does not wait for the transaction to be mined.

        Returns:
            PendingTransaction handle
        """

        async def build(nonce: int) -> dict[str, Any]:
            return {
                "from": self.account.address,
                "to": to,
                "value": value,
                "gas": gas,
                "gasPrice": gas_price,
                "nonce": nonce,
                "chainId": await self._get_chain_id(),
            }

        try:
            tx_hash = await self._submit(build)
        except Exception as e:
            self._fail(label, e, context)

        logger.debug(f"{label} submitted: {mask_tx_hash(tx_hash)} value={value}")
        return PendingTransaction(
            tx_hash=tx_hash,
            to=to,
            value=value,
            _web3=self.web3,
            _timeout=self.receipt_timeout,
        )

    async def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self.web3.eth.chain_id
        return self._chain_id

    async def _submit(self, build) -> str:
        """
        Assign a nonce, build, sign and send one transaction.

        Args:
            build: Coroutine function taking the nonce and returning the tx dict

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        async with self._submit_lock:
            nonce = await self.nonce_manager.next_nonce()
            try:
                transaction = await build(nonce)
                signed = self.account.sign_transaction(transaction)
                tx_hash = await self.web3.eth.send_raw_transaction(
                    signed.raw_transaction
                )
            except BaseException:
                # Node state is unknown after a failed or cancelled submission
                self.nonce_manager.reset()
                raise
            self.nonce_manager.mark_used(nonce)

        return AsyncWeb3.to_hex(tx_hash)
