"""
Services.

Blockchain operations of the admin wallet.
"""

from admin_wallet.services.blockchain import AdminWallet, WalletState


__all__ = ["AdminWallet", "WalletState"]
