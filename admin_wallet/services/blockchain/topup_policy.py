"""
Top-up policy.

Decides whether and how much native currency to send to a user so they can
pay transaction fees:
1. Rate limit - at most one top-up per whole day outside development
2. Eligibility - forced, or the address is whitelisted
3. Deficit - cap minus current balance, sent only when the scaled deficit
   reaches the minimum ratio

Nothing is persisted: the caller supplies the last top-up time.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from loguru import logger
from web3 import AsyncWeb3

from admin_wallet.config.constants import TOPUP_MIN_DAYS
from admin_wallet.config.settings import Settings
from admin_wallet.utils.datetime_utils import ensure_utc, utc_now
from admin_wallet.utils.exceptions import (
    NoTopUpNeededError,
    NotVerifiedError,
    RateLimitError,
)
from admin_wallet.utils.security import mask_address

from .balance_operations import BalanceQuery
from .identity_gateway import IdentityGateway, checksum_or_raise
from .transaction_executor import PendingTransaction, TransactionExecutor


class TopUpReason(str, Enum):
    ELIGIBLE = "eligible"
    RATE_LIMITED = "rate_limited"
    NOT_VERIFIED = "not_verified"
    NO_TOPPING_NEEDED = "no_topping_needed"


@dataclass(frozen=True)
class TopUpDecision:
    """Result of evaluating a top-up request. Computed per call, never stored."""

    eligible: bool
    amount_to_send: int
    reason: TopUpReason


class TopUpPolicy:
    """
    Rate-limited, threshold-gated native currency top-ups.
    """

    def __init__(
        self,
        settings: Settings,
        identity: IdentityGateway,
        balances: BalanceQuery,
        executor: TransactionExecutor,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize top-up policy.

        Args:
            settings: Application settings (environment, cap, threshold, gas)
            identity: Identity gateway for verification checks
            balances: Balance query for the target's current balance
            executor: Transaction executor for the transfer
            clock: Returns the current aware UTC datetime
        """
        self.identity = identity
        self.balances = balances
        self.executor = executor
        self.clock = clock

        self.rate_limited = not settings.is_development
        self.cap_wei = AsyncWeb3.to_wei(settings.topup_cap_gwei, "gwei")
        self.scale = Decimal(settings.topup_scale)
        self.min_ratio = Decimal(str(settings.topup_min_ratio))
        self.gas = settings.transfer_gas_limit
        self.gas_price = AsyncWeb3.to_wei(settings.gas_price_gwei, "gwei")

    def days_since(self, last_topping: datetime | None) -> int:
        """Whole days between last_topping (default: one day ago) and now."""
        now = self.clock()
        if last_topping is None:
            last_topping = now - timedelta(days=1)
        return (now - ensure_utc(last_topping)).days

    def needs_topping(self, deficit: int) -> bool:
        """Check the scaled deficit against the minimum ratio."""
        return Decimal(deficit) / self.scale >= self.min_ratio

    async def decide(
        self,
        address: str,
        last_topping: datetime | None = None,
        force: bool = False,
    ) -> TopUpDecision:
        """
        Evaluate a top-up request without sending anything.

        Args:
            address: User address
            last_topping: Time of the previous top-up (default: one day ago)
            force: Skip the verification check

        Returns:
            TopUpDecision
        """
        address = checksum_or_raise(address)

        days_ago = self.days_since(last_topping)
        if self.rate_limited and days_ago < TOPUP_MIN_DAYS:
            return TopUpDecision(False, 0, TopUpReason.RATE_LIMITED)

        is_verified = force or await self.identity.is_verified(address)
        if not is_verified:
            return TopUpDecision(False, 0, TopUpReason.NOT_VERIFIED)

        user_balance = await self.balances.address_balance(address)
        deficit = self.cap_wei - user_balance
        logger.debug(
            f"TopWallet {mask_address(address)}: "
            f"balance={user_balance} deficit={deficit} force={force}"
        )
        if not self.needs_topping(deficit):
            return TopUpDecision(False, 0, TopUpReason.NO_TOPPING_NEEDED)

        return TopUpDecision(True, deficit, TopUpReason.ELIGIBLE)

    async def top_up(
        self,
        address: str,
        last_topping: datetime | None = None,
        force: bool = False,
    ) -> PendingTransaction:
        """
        Send the user's deficit from the admin account.

        Returns:
            PendingTransaction for the transfer

        Raises:
            RateLimitError: Previous top-up less than a day ago
            NotVerifiedError: Address not whitelisted and force not set
            NoTopUpNeededError: Deficit below threshold
            TransportError: Network or contract failure
        """
        try:
            decision = await self.decide(address, last_topping, force)

            if decision.reason is TopUpReason.RATE_LIMITED:
                raise RateLimitError("Daily limit reached")
            if decision.reason is TopUpReason.NOT_VERIFIED:
                raise NotVerifiedError(f"User not verified: {address}")
            if decision.reason is TopUpReason.NO_TOPPING_NEEDED:
                raise NoTopUpNeededError("User doesn't need topping")

            target = checksum_or_raise(address)
            pending = await self.executor.send_value(
                "topWallet",
                to=target,
                value=decision.amount_to_send,
                gas=self.gas,
                gas_price=self.gas_price,
                address=mask_address(target),
            )
        except Exception as e:
            logger.error(f"Error topWallet for {mask_address(str(address))}: {e}")
            raise

        logger.info(
            f"Topped up {mask_address(target)} with {decision.amount_to_send} wei"
        )
        return pending
