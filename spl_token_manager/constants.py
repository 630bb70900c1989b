"""Constants used throughout the SPL token manager.

This module defines common constants to avoid duplication and ensure consistency.
"""

# Solana program IDs
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

# Public cluster endpoints (one network per process)
CLUSTER_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}
DEFAULT_CLUSTER = "devnet"

LAMPORTS_PER_SOL = 1_000_000_000

# Commitment levels ordered from weakest to strongest
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")

# Value used for history entries whose mint cannot be determined
UNKNOWN_MINT = "unknown"
