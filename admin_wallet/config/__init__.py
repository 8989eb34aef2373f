"""
Configuration.

Settings loaded from the environment and blockchain constants.
"""

from admin_wallet.config.settings import Settings


__all__ = ["Settings"]
