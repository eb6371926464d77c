"""
PoX-4 Contract Configuration - PROTOCOL CONSTANTS ONLY

This file contains values that are fixed by the stacking protocol itself:
- Default burnchain timing (used until set-burnchain-parameters is called)
- Pox address version bounds
- Signer signature topics and SIP-018 domain strings
- Unsigned integer range of the hosting chain

Per-instance values (contract identifier, chain id, liquid supply, current
burn height) are supplied by the execution environment at runtime.
"""

# =============================================================================
# BURNCHAIN TIMING DEFAULTS
# =============================================================================
# Active until the one-time burnchain configuration is written.

DEFAULT_FIRST_BURNCHAIN_BLOCK_HEIGHT: int = 0
DEFAULT_PREPARE_CYCLE_LENGTH: int = 50
DEFAULT_REWARD_CYCLE_LENGTH: int = 1050
DEFAULT_FIRST_POX4_REWARD_CYCLE: int = 0

# Largest value a uint can hold on the hosting chain (u128)
UINT_MAX: int = 2 ** 128 - 1

# =============================================================================
# STACKING PARAMETERS
# =============================================================================

MIN_POX_REWARD_CYCLES: int = 1
MAX_POX_REWARD_CYCLES: int = 12

# Stacking minimum = liquid supply / threshold
STACKING_THRESHOLD_25: int = 20000

# =============================================================================
# POX ADDRESS VERSIONS
# =============================================================================
# 0x00 p2pkh, 0x01 p2sh, 0x02 p2sh-p2wpkh, 0x03 p2sh-p2wsh, 0x04 p2wpkh
# 0x05 p2wsh, 0x06 p2tr

MAX_ADDRESS_VERSION: int = 6
MAX_ADDRESS_VERSION_BUFF_20: int = 4
MAX_ADDRESS_VERSION_BUFF_32: int = 6

HASHBYTES_LEN_20: int = 20
HASHBYTES_LEN_32: int = 32

# Compressed secp256k1 public key
SIGNER_KEY_LEN: int = 33
# r (32) || s (32) || recovery id (1)
SIGNER_SIG_LEN: int = 65

# =============================================================================
# SIGNER SIGNATURE TOPICS
# =============================================================================

TOPIC_STACK_STX: bytes = b"stack-stx"
TOPIC_AGG_COMMIT: bytes = b"agg-commit"

# =============================================================================
# SIP-018 STRUCTURED DATA DOMAIN
# =============================================================================

SIP018_MSG_PREFIX: bytes = bytes.fromhex("534950303138")  # "SIP018"
SIGNER_DOMAIN_NAME: bytes = b"pox-4-signer"
SIGNER_DOMAIN_VERSION: bytes = b"1.0.0"

CHAIN_ID_MAINNET: int = 1
CHAIN_ID_TESTNET: int = 2147483648

DEFAULT_CONTRACT_ID: bytes = b"ST000000000000000000002AMW42H.pox-4"

# =============================================================================
# HOST DEFAULTS
# =============================================================================
# Liquid supply giving a stacking minimum of 125,000 STX (125000000000 ustx)

DEFAULT_LIQUID_USTX: int = 2_500_000_000_000_000
