"""
PoX-4 Datum Types - Shared Data Structures for the Stacking Core

This file contains the canonical tuple definitions used across all PoX-4
modules. All modules MUST import these types so that the stacker-info view,
reward-set slots and the signer message hash stay consistent.

CRITICAL: SignerKeyMessage and SignerDomain are CBOR-encoded to build the
signer message hash. Any change to their fields or CONSTR_IDs invalidates every
signature produced against the previous layout.
"""
from dataclasses import field
from typing import Dict, List, Tuple, Union

from opshin.prelude import *

import pox4_contract_config as cfg


# =============================================================================
# OPTION TYPES
# =============================================================================

@dataclass
class SomePrincipal(PlutusData):
    """An optional principal that is present."""
    CONSTR_ID = 0
    principal: bytes


@dataclass
class NoPrincipal(PlutusData):
    """An optional principal that is absent."""
    CONSTR_ID = 1


OptionalPrincipal = Union[SomePrincipal, NoPrincipal]


@dataclass
class SomeBurnHeight(PlutusData):
    """An optional burn height that is present."""
    CONSTR_ID = 0
    height: int


@dataclass
class NoBurnHeight(PlutusData):
    """An optional burn height that is absent (no expiry)."""
    CONSTR_ID = 1


OptionalBurnHeight = Union[SomeBurnHeight, NoBurnHeight]


# =============================================================================
# POX ADDRESS
# =============================================================================

@dataclass
class PoxAddress(PlutusData):
    """
    Versioned, hash-based payout address on the burnchain.

    Fields:
        version: 1-byte address version (0x00 - 0x06)
        hashbytes: 20-byte hash for versions 0-4, 32-byte hash for 5-6
    """
    CONSTR_ID = 0
    version: bytes              # 1 byte
    hashbytes: bytes            # 20 or 32 bytes


# =============================================================================
# BURNCHAIN CONFIGURATION
# =============================================================================

@dataclass
class BurnchainConfig(PlutusData):
    """
    Burnchain timing parameters - written at most once.

    Fields:
        first_burnchain_block_height: Height at which reward cycle 0 begins
        prepare_cycle_length: Blocks in the prepare phase of each cycle
        reward_cycle_length: Blocks per reward cycle (> prepare_cycle_length)
        first_pox4_reward_cycle: First reward cycle handled by this contract
        configured: 0 = defaults in effect, 1 = parameters set (immutable)
    """
    CONSTR_ID = 0
    first_burnchain_block_height: int
    prepare_cycle_length: int
    reward_cycle_length: int
    first_pox4_reward_cycle: int
    configured: int             # 0 = unset, 1 = configured


def default_burnchain_config() -> BurnchainConfig:
    return BurnchainConfig(
        first_burnchain_block_height=cfg.DEFAULT_FIRST_BURNCHAIN_BLOCK_HEIGHT,
        prepare_cycle_length=cfg.DEFAULT_PREPARE_CYCLE_LENGTH,
        reward_cycle_length=cfg.DEFAULT_REWARD_CYCLE_LENGTH,
        first_pox4_reward_cycle=cfg.DEFAULT_FIRST_POX4_REWARD_CYCLE,
        configured=0,
    )


# =============================================================================
# STACKER RECORD (stacking-state)
# =============================================================================

@dataclass
class StackerRecord(PlutusData):
    """
    Per-principal stacking commitment.

    Only visible through get-stacker-info while the current reward cycle lies
    in [first_reward_cycle, first_reward_cycle + lock_period).

    Fields:
        pox_addr: Payout address for every cycle of the lock
        first_reward_cycle: First cycle the lock participates in
        lock_period: Number of cycles locked (1-12)
        delegated_to: Delegate principal, NoPrincipal for direct stacking
        reward_set_indexes: Slot index in each cycle's reward set, in cycle order
        auth_id: Signer authorization id consumed by this lock
    """
    CONSTR_ID = 0
    pox_addr: PoxAddress
    first_reward_cycle: int
    lock_period: int
    delegated_to: OptionalPrincipal
    reward_set_indexes: List[int]
    auth_id: int


# =============================================================================
# REWARD SET SLOT
# =============================================================================

@dataclass
class RewardSetEntry(PlutusData):
    """
    One slot of a reward cycle's reward set.

    Fields:
        pox_addr: Payout address for the slot
        signer: 33-byte compressed signer public key
        stacker: Principal that owns the slot (NoPrincipal for pooled slots)
        total_ustx: Amount locked in this slot
    """
    CONSTR_ID = 0
    pox_addr: PoxAddress
    signer: bytes               # 33 bytes
    stacker: OptionalPrincipal
    total_ustx: int


# =============================================================================
# CALLER ALLOWANCE
# =============================================================================

@dataclass
class AllowanceRecord(PlutusData):
    """Allowance for a calling contract, optionally expiring at a burn height."""
    CONSTR_ID = 0
    until_burn_ht: OptionalBurnHeight


# =============================================================================
# SIGNER AUTHORIZATION
# =============================================================================

@dataclass
class SignerDomain(PlutusData):
    """SIP-018 domain, scoped to one contract instance."""
    CONSTR_ID = 0
    name: bytes
    version: bytes
    chain_id: int
    contract_id: bytes


@dataclass
class SignerKeyMessage(PlutusData):
    """Canonical payload a signer key signs (or pre-registers)."""
    CONSTR_ID = 0
    pox_addr: PoxAddress
    reward_cycle: int
    topic: bytes
    period: int
    max_amount: int
    auth_id: int


@dataclass
class SignerAuthorizationKey(PlutusData):
    """Canonical payload plus the signer key: identifies one consumable permission."""
    CONSTR_ID = 1
    pox_addr: PoxAddress
    reward_cycle: int
    topic: bytes
    period: int
    signer_key: bytes           # 33 bytes
    max_amount: int
    auth_id: int


# =============================================================================
# RECEIPTS
# =============================================================================

@dataclass
class StackStxReceipt(PlutusData):
    """Success value of stack-stx."""
    CONSTR_ID = 0
    stacker: bytes
    lock_amount: int
    signer_key: bytes
    unlock_burn_height: int


# =============================================================================
# CONTRACT STATE
# =============================================================================

@dataclass
class PoxState:
    """
    Persistent storage of one PoX-4 contract instance.

    Maps:
        stacking_state: stacker -> StackerRecord
        reward_cycle_pox_address_list: cycle -> ordered reward-set slots
        reward_cycle_total_stacked: cycle -> total ustx across slots
        allowance_contract_callers: (sender, contract_caller) -> AllowanceRecord
        signer_key_authorizations: authorization key digest -> 0/1 enabled
        used_signer_key_authorizations: authorization key digest -> 1 once consumed
    """
    contract_id: bytes = cfg.DEFAULT_CONTRACT_ID
    chain_id: int = cfg.CHAIN_ID_TESTNET
    burnchain: BurnchainConfig = field(default_factory=default_burnchain_config)
    stacking_state: Dict[bytes, StackerRecord] = field(default_factory=dict)
    reward_cycle_pox_address_list: Dict[int, List[RewardSetEntry]] = field(default_factory=dict)
    reward_cycle_total_stacked: Dict[int, int] = field(default_factory=dict)
    allowance_contract_callers: Dict[Tuple[bytes, bytes], AllowanceRecord] = field(default_factory=dict)
    signer_key_authorizations: Dict[bytes, int] = field(default_factory=dict)
    used_signer_key_authorizations: Dict[bytes, int] = field(default_factory=dict)


@dataclass
class TxContext:
    """
    Execution context supplied by the hosting chain for one call.

    Fields:
        sender: Root transaction sender (tx-sender)
        contract_caller: Immediate caller; equals sender for a direct call
        burn_height: Current burnchain block height
        liquid_ustx: Liquid token supply, source of the stacking minimum
    """
    sender: bytes
    contract_caller: bytes
    burn_height: int
    liquid_ustx: int

    def is_direct_call(self) -> bool:
        return self.sender == self.contract_caller
