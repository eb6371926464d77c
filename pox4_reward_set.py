"""
PoX-4 Reward Set - per-cycle reward-set slots and totals.

Each locked commitment appends one slot to the reward set of every cycle in its
lock window. Slots are never merged: two stackers paying out to the same pox
address occupy two distinct indexes.
"""
from typing import List, Optional

from pox4_datum_types import (
    PoxAddress,
    PoxState,
    RewardSetEntry,
    OptionalPrincipal,
)
from pox4_errors import require


# =============================================================================
# READ-ONLY
# =============================================================================

def get_reward_set_size(state: PoxState, reward_cycle: int) -> int:
    """Number of slots in the reward set of `reward_cycle` (0 if none)."""
    return len(state.reward_cycle_pox_address_list.get(reward_cycle, []))


def get_total_ustx_stacked(state: PoxState, reward_cycle: int) -> int:
    """Total amount locked across all slots of `reward_cycle`."""
    return state.reward_cycle_total_stacked.get(reward_cycle, 0)


def get_reward_set_pox_address(state: PoxState, reward_cycle: int, index: int) -> Optional[RewardSetEntry]:
    """Slot `index` of `reward_cycle`, or None if out of range."""
    slots = state.reward_cycle_pox_address_list.get(reward_cycle, [])
    if 0 <= index < len(slots):
        return slots[index]
    return None


# =============================================================================
# MUTATING (called by the stacker ledger only)
# =============================================================================

def add_pox_addr_to_ith_reward_cycle(
    state: PoxState,
    reward_cycle: int,
    pox_addr: PoxAddress,
    amount_ustx: int,
    stacker: OptionalPrincipal,
    signer: bytes,
) -> int:
    """Append one slot to `reward_cycle` and return its index."""
    slots = state.reward_cycle_pox_address_list.setdefault(reward_cycle, [])
    index = len(slots)
    slots.append(RewardSetEntry(
        pox_addr=pox_addr,
        signer=signer,
        stacker=stacker,
        total_ustx=amount_ustx,
    ))
    state.reward_cycle_total_stacked[reward_cycle] = get_total_ustx_stacked(state, reward_cycle) + amount_ustx
    return index


def add_pox_addr_to_reward_cycles(
    state: PoxState,
    pox_addr: PoxAddress,
    first_reward_cycle: int,
    num_cycles: int,
    amount_ustx: int,
    stacker: OptionalPrincipal,
    signer: bytes,
) -> List[int]:
    """
    Add a slot to every cycle in [first_reward_cycle, first_reward_cycle + num_cycles).

    Returns the slot index in each cycle, in cycle order.
    """
    require(num_cycles > 0, "Must lock at least one cycle")
    indexes = []
    for i in range(num_cycles):
        indexes.append(add_pox_addr_to_ith_reward_cycle(
            state,
            first_reward_cycle + i,
            pox_addr,
            amount_ustx,
            stacker,
            signer,
        ))
    return indexes
