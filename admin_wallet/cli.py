#!/usr/bin/env python3
"""
Command line interface for the admin wallet.

Usage:
    python -m admin_wallet status
    python -m admin_wallet whitelist 0xADDRESS external-id
    python -m admin_wallet blacklist 0xADDRESS
    python -m admin_wallet verify 0xADDRESS
    python -m admin_wallet balance [0xADDRESS]
    python -m admin_wallet top-up 0xADDRESS [--force] [--last-topping 2024-01-01T00:00:00]

Configuration comes from environment variables / .env (see Settings).
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any

from loguru import logger

from admin_wallet.config.settings import Settings
from admin_wallet.services.blockchain import AdminWallet
from admin_wallet.utils.exceptions import AdminWalletError, InitializationError
from admin_wallet.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="admin_wallet",
        description="Administrative wallet for the identity/token network",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Show wallet state, contracts and balances")

    whitelist = commands.add_parser("whitelist", help="Whitelist an address")
    whitelist.add_argument("address")
    whitelist.add_argument("external_id")

    blacklist = commands.add_parser("blacklist", help="Blacklist an address")
    blacklist.add_argument("address")

    verify = commands.add_parser("verify", help="Check if an address is whitelisted")
    verify.add_argument("address")

    balance = commands.add_parser(
        "balance", help="Native balance of an address (wei) or of the admin (ether)"
    )
    balance.add_argument("address", nargs="?")

    top_up = commands.add_parser("top-up", help="Top up an address's native balance")
    top_up.add_argument("address")
    top_up.add_argument(
        "--force", action="store_true", help="Skip the verification check"
    )
    top_up.add_argument(
        "--last-topping",
        type=datetime.fromisoformat,
        default=None,
        help="ISO-8601 time of the previous top-up (default: one day ago)",
    )
    top_up.add_argument(
        "--wait", action="store_true", help="Wait for the transfer to be mined"
    )

    return parser


async def run_command(wallet: AdminWallet, args: argparse.Namespace) -> Any:
    """Dispatch one parsed command to the wallet."""
    if args.command == "status":
        return await wallet.health_check()

    if args.command == "whitelist":
        receipt = await wallet.whitelist(args.address, args.external_id)
        return {"tx_hash": receipt.tx_hash, "block_number": receipt.block_number}

    if args.command == "blacklist":
        receipt = await wallet.blacklist(args.address)
        return {"tx_hash": receipt.tx_hash, "block_number": receipt.block_number}

    if args.command == "verify":
        return {"address": args.address, "verified": await wallet.is_verified(args.address)}

    if args.command == "balance":
        if args.address:
            return {"address": args.address, "wei": await wallet.address_balance(args.address)}
        return {"address": wallet.address, "ether": await wallet.admin_balance()}

    if args.command == "top-up":
        pending = await wallet.top_up(
            args.address, last_topping=args.last_topping, force=args.force
        )
        result: dict[str, Any] = {
            "tx_hash": pending.tx_hash,
            "to": pending.to,
            "value": pending.value,
        }
        if args.wait:
            receipt = await pending.wait()
            result["block_number"] = receipt.block_number
        return result

    raise ValueError(f"Unknown command: {args.command}")


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """
    Initialize the wallet, run the command, print JSON.

    Returns:
        Process exit code
    """
    wallet = AdminWallet(settings)
    try:
        try:
            await wallet.initialize()
        except InitializationError:
            if args.command != "status":
                raise
        result = await run_command(wallet, args)
    except (AdminWalletError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(json.dumps({"error": str(e), "type": type(e).__name__}))
        return 1
    finally:
        await wallet.close()

    print(json.dumps(result, indent=2, default=str))
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = Settings()
    setup_logging(settings)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
