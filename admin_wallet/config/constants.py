"""
Blockchain constants.

Fee parameters, top-up limits and timeouts used by the admin wallet.
Values here are defaults; Settings can override most of them.
"""

# ========================================================================
# GAS
# ========================================================================

# 1 Gwei = 10^9 Wei
DEFAULT_GAS_PRICE_GWEI = 1
DEFAULT_CONTRACT_GAS_LIMIT = 500000  # whitelist/blacklist and other contract calls
DEFAULT_TRANSFER_GAS_LIMIT = 100000  # plain native-currency transfer

# ========================================================================
# TOP-UP POLICY
# ========================================================================

# Target balance a verified user is topped up to
TOPUP_CAP_GWEI = 1_000_000
# Deficit is divided by this before comparing to the minimum ratio
TOPUP_SCALE = 1_000_000
TOPUP_MIN_RATIO = "0.75"
# Minimum whole days between two top-ups of the same address
TOPUP_MIN_DAYS = 1

# ========================================================================
# HD WALLET
# ========================================================================

HD_BASE_PATH = "m/44'/60'/0'/0"
HD_ADDRESS_COUNT = 10  # addresses derived from a mnemonic, index 0 is admin

# ========================================================================
# TIMEOUTS (seconds)
# ========================================================================

BLOCKCHAIN_RPC_TIMEOUT = 30  # HTTP provider request timeout
BLOCKCHAIN_RECEIPT_TIMEOUT = 120  # wait for a mined receipt

# Max pending transactions over confirmed before warning
NONCE_STUCK_THRESHOLD = 5

DEVELOPMENT_ENVIRONMENT = "development"

# ========================================================================
# DEPLOYMENT MANIFEST
# ========================================================================

# Contract kind -> key of its entry in the deployment manifest
DEFAULT_MANIFEST_KEYS = {
    "Identity": "Identity",
    "Token": "GoodDollar",
    "Redemption": "RedemptionFunctional",
    "Reserve": "GoodDollarReserve",
}
