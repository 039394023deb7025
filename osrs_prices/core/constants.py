"""
Library-wide constants for the OSRS Wiki prices client.

Centralizes endpoint, timeout and identifier values so the client, config
and CLI agree on them.
"""

# =============================================================================
# Endpoint
# =============================================================================

# Real-time prices API run by the RuneScape Wiki
PRICES_ENDPOINT = "https://prices.runescape.wiki/api/v1"

# The Wiki asks every consumer to send a descriptive User-Agent
DEFAULT_USER_AGENT = "osrs-prices/1.0 (GitHub: osrs-prices)"


# =============================================================================
# Network Timeouts (seconds)
# =============================================================================

# Default timeout for API requests
API_TIMEOUT_DEFAULT = 10


# =============================================================================
# Connection Pool
# =============================================================================

POOL_CONNECTIONS = 4
POOL_MAXSIZE = 10


# =============================================================================
# Response Reading
# =============================================================================

# Chunk size used while streaming response bodies (bytes)
BODY_CHUNK_SIZE = 64 * 1024


# =============================================================================
# Item Identifiers
# =============================================================================

# Item ids are carried as 16-bit signed integers
ITEM_ID_MIN = -32768
ITEM_ID_MAX = 32767

# Prices, volumes and timestamps are carried as 64-bit signed integers
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
