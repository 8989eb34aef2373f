"""
Admin wallet for a blockchain identity/token network.

Whitelists and blacklists identities, reports verification status and
balances, and tops up users' native balance under rate and threshold limits.
"""

__version__ = "0.1.0"
