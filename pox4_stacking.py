"""
PoX-4 Stacking - Stacker ledger and stacking eligibility.

Manages direct stacking commitments. Each commitment locks an amount for
`lock_period` consecutive reward cycles starting at the next cycle, and
registers one reward-set slot per locked cycle.

Operations:
- get-stacker-info: Computed view of a stacker's commitment (only while active)
- check-pox-addr-version / check-pox-addr-hashbytes / check-pox-lock-period
- get-stacking-minimum: Threshold derived from the liquid supply
- can-stack-stx / minimal-can-stack-stx: Eligibility gates
- stack-stx: Lock funds (requires caller allowance + signer authorization)

Every check of stack-stx runs before the first write, so a failing call leaves
no partial state behind even without the host's rollback.
"""
import logging
from typing import Optional

import pox4_contract_config as cfg
from pox4_allowance import check_caller_allowed
from pox4_burnchain import (
    burn_height_to_reward_cycle,
    current_pox_reward_cycle,
    reward_cycle_to_burn_height,
)
from pox4_datum_types import (
    NoPrincipal,
    PoxAddress,
    PoxState,
    SomePrincipal,
    StackerRecord,
    StackStxReceipt,
    TxContext,
)
from pox4_errors import (
    ERR_INVALID_SIGNER_KEY,
    ERR_INVALID_START_BURN_HEIGHT,
    ERR_STACKING_ALREADY_STACKED,
    ERR_STACKING_INVALID_AMOUNT,
    ERR_STACKING_INVALID_LOCK_PERIOD,
    ERR_STACKING_INVALID_POX_ADDRESS,
    ERR_STACKING_PERMISSION_DENIED,
    ERR_STACKING_THRESHOLD_NOT_MET,
    PoxError,
)
from pox4_reward_set import add_pox_addr_to_reward_cycles
from pox4_signer_auth import consume_signer_key_authorization

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def stacker_window_active(record: StackerRecord, reward_cycle: int) -> bool:
    """Check if `reward_cycle` lies in the record's lock window."""
    return record.first_reward_cycle <= reward_cycle < record.first_reward_cycle + record.lock_period


def stacker_expired(record: StackerRecord, reward_cycle: int) -> bool:
    """Check if the lock window ended before `reward_cycle`."""
    return record.first_reward_cycle + record.lock_period <= reward_cycle


def get_stacker_info(state: PoxState, ctx: TxContext, stacker: bytes) -> Optional[StackerRecord]:
    """Stacker's commitment while the current cycle is inside its lock window, else None."""
    record = state.stacking_state.get(stacker)
    if record is None:
        return None
    if not stacker_window_active(record, current_pox_reward_cycle(state, ctx)):
        return None
    return record


# =============================================================================
# VALIDATORS
# =============================================================================

def check_pox_addr_version(version: bytes) -> bool:
    """Check if `version` is a supported 1-byte address version."""
    if len(version) != 1:
        return False
    return version[0] <= cfg.MAX_ADDRESS_VERSION


def check_pox_addr_hashbytes(version: bytes, hashbytes: bytes) -> bool:
    """
    Check if `hashbytes` has the exact length required by `version`.

    Versions 0-4 (p2pkh, p2sh, p2sh-p2wpkh, p2sh-p2wsh, p2wpkh) carry 20 bytes,
    versions 5-6 (p2wsh, p2tr) carry 32 bytes.
    """
    if not check_pox_addr_version(version):
        return False
    if version[0] <= cfg.MAX_ADDRESS_VERSION_BUFF_20:
        return len(hashbytes) == cfg.HASHBYTES_LEN_20
    if version[0] <= cfg.MAX_ADDRESS_VERSION_BUFF_32:
        return len(hashbytes) == cfg.HASHBYTES_LEN_32
    return False


def check_pox_lock_period(lock_period: int) -> bool:
    return cfg.MIN_POX_REWARD_CYCLES <= lock_period <= cfg.MAX_POX_REWARD_CYCLES


def valid_pox_addr(pox_addr: PoxAddress) -> bool:
    return check_pox_addr_version(pox_addr.version) and check_pox_addr_hashbytes(pox_addr.version, pox_addr.hashbytes)


def get_stacking_minimum(ctx: TxContext) -> int:
    """Minimum amount a single stacker must lock."""
    return ctx.liquid_ustx // cfg.STACKING_THRESHOLD_25


# =============================================================================
# ELIGIBILITY
# =============================================================================

def minimal_can_stack_stx(
    state: PoxState,
    ctx: TxContext,
    pox_addr: PoxAddress,
    amount_ustx: int,
    first_reward_cycle: int,
    num_cycles: int,
) -> bool:
    """
    Lock period and address checks with a positive-amount check in place of
    the stacking threshold.

    `state`, `ctx` and `first_reward_cycle` are part of the call shape but do
    not affect the outcome.
    """
    if not check_pox_lock_period(num_cycles):
        raise PoxError(ERR_STACKING_INVALID_LOCK_PERIOD)
    if not valid_pox_addr(pox_addr):
        raise PoxError(ERR_STACKING_INVALID_POX_ADDRESS)
    if amount_ustx <= 0:
        raise PoxError(ERR_STACKING_INVALID_AMOUNT)
    return True


def can_stack_stx(
    state: PoxState,
    ctx: TxContext,
    pox_addr: PoxAddress,
    amount_ustx: int,
    first_reward_cycle: int,
    num_cycles: int,
) -> bool:
    """Full eligibility gate: lock period, then pox address, then stacking minimum."""
    if not check_pox_lock_period(num_cycles):
        raise PoxError(ERR_STACKING_INVALID_LOCK_PERIOD)
    if not valid_pox_addr(pox_addr):
        raise PoxError(ERR_STACKING_INVALID_POX_ADDRESS)
    if amount_ustx < get_stacking_minimum(ctx):
        raise PoxError(ERR_STACKING_THRESHOLD_NOT_MET)
    return True


# =============================================================================
# STACK-STX
# =============================================================================

def stack_stx(
    state: PoxState,
    ctx: TxContext,
    amount_ustx: int,
    pox_addr: PoxAddress,
    start_burn_ht: int,
    lock_period: int,
    signer_sig: Optional[bytes],
    signer_key: bytes,
    max_amount: int,
    auth_id: int,
) -> StackStxReceipt:
    """
    Lock `amount_ustx` of ctx.sender for `lock_period` cycles starting next cycle.

    `start_burn_ht` must fall in the current reward cycle. The signer key must
    authorize topic "stack-stx" for the current cycle and `lock_period`, either
    by `signer_sig` or by a prior registration.
    """
    stacker = ctx.sender

    # Lock starts at the next reward cycle
    first_reward_cycle = current_pox_reward_cycle(state, ctx) + 1
    specified_reward_cycle = burn_height_to_reward_cycle(state, start_burn_ht) + 1
    if specified_reward_cycle != first_reward_cycle:
        raise PoxError(ERR_INVALID_START_BURN_HEIGHT)

    # Direct call or allowed contract caller
    if not check_caller_allowed(state, ctx):
        raise PoxError(ERR_STACKING_PERMISSION_DENIED)

    # A pending (not yet started) commitment also counts as stacked
    existing = state.stacking_state.get(stacker)
    if existing is not None and not stacker_expired(existing, first_reward_cycle - 1):
        raise PoxError(ERR_STACKING_ALREADY_STACKED)

    can_stack_stx(state, ctx, pox_addr, amount_ustx, first_reward_cycle, lock_period)

    if len(signer_key) != cfg.SIGNER_KEY_LEN:
        raise PoxError(ERR_INVALID_SIGNER_KEY)

    # Fatal abort on overflow must happen before any write
    unlock_burn_height = reward_cycle_to_burn_height(state, first_reward_cycle + lock_period)

    consume_signer_key_authorization(
        state,
        pox_addr,
        first_reward_cycle - 1,
        cfg.TOPIC_STACK_STX,
        lock_period,
        signer_sig,
        signer_key,
        amount_ustx,
        max_amount,
        auth_id,
    )

    reward_set_indexes = add_pox_addr_to_reward_cycles(
        state,
        pox_addr,
        first_reward_cycle,
        lock_period,
        amount_ustx,
        SomePrincipal(principal=stacker),
        signer_key,
    )

    state.stacking_state[stacker] = StackerRecord(
        pox_addr=pox_addr,
        first_reward_cycle=first_reward_cycle,
        lock_period=lock_period,
        delegated_to=NoPrincipal(),
        reward_set_indexes=reward_set_indexes,
        auth_id=auth_id,
    )
    logger.info(
        "stack-stx: stacker=%s amount=%d cycles=%d-%d unlock=%d",
        stacker.hex(), amount_ustx, first_reward_cycle, first_reward_cycle + lock_period - 1, unlock_burn_height,
    )

    return StackStxReceipt(
        stacker=stacker,
        lock_amount=amount_ustx,
        signer_key=signer_key,
        unlock_burn_height=unlock_burn_height,
    )
