"""
PoX-4 Burnchain - Configuration Store and Cycle Clock.

The configuration store holds the burnchain timing parameters. They can be
written exactly once; until then the protocol defaults are in effect.

The cycle clock maps burn heights to reward cycles and back. Reward cycles are
never stored: they are always derived from a height and the configuration.

Out-of-domain inputs (a height before the first burnchain block, negative
uints, results beyond UINT_MAX) abort the calling transaction with PoxAbort.
They are not typed errors.
"""
import logging

import pox4_contract_config as cfg
from pox4_datum_types import BurnchainConfig, PoxState, TxContext
from pox4_errors import ERR_NOT_ALLOWED, PoxError, require

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION STORE
# =============================================================================

def get_burnchain_config(state: PoxState) -> BurnchainConfig:
    return state.burnchain


def set_burnchain_parameters(
    state: PoxState,
    first_burn_height: int,
    prepare_cycle_length: int,
    reward_cycle_length: int,
    begin_pox4_reward_cycle: int,
) -> bool:
    """
    Write the burnchain timing parameters. Succeeds exactly once.

    Any later call raises ERR_NOT_ALLOWED and leaves the stored parameters
    untouched, whatever the arguments.
    """
    if state.burnchain.configured == 1:
        raise PoxError(ERR_NOT_ALLOWED)

    require(first_burn_height >= 0, "First burn height must be a uint")
    require(begin_pox4_reward_cycle >= 0, "First pox-4 reward cycle must be a uint")
    require(prepare_cycle_length > 0, "Prepare cycle length must be positive")
    require(reward_cycle_length > prepare_cycle_length, "Reward cycle must be longer than prepare phase")

    state.burnchain = BurnchainConfig(
        first_burnchain_block_height=first_burn_height,
        prepare_cycle_length=prepare_cycle_length,
        reward_cycle_length=reward_cycle_length,
        first_pox4_reward_cycle=begin_pox4_reward_cycle,
        configured=1,
    )
    logger.info(
        "Burnchain parameters set: first=%d prepare=%d cycle=%d pox4-start=%d",
        first_burn_height, prepare_cycle_length, reward_cycle_length, begin_pox4_reward_cycle,
    )
    return True


# =============================================================================
# CYCLE CLOCK
# =============================================================================

def burn_height_to_reward_cycle(state: PoxState, height: int) -> int:
    """Reward cycle containing `height`: (height - first) // cycle_length."""
    first = state.burnchain.first_burnchain_block_height
    require(height >= 0, "Burn height must be a uint")
    require(height >= first, "Burn height precedes first burnchain block")
    return (height - first) // state.burnchain.reward_cycle_length


def reward_cycle_to_burn_height(state: PoxState, cycle: int) -> int:
    """First burn height of `cycle`."""
    require(cycle >= 0, "Reward cycle must be a uint")
    height = state.burnchain.first_burnchain_block_height + cycle * state.burnchain.reward_cycle_length
    require(height <= cfg.UINT_MAX, "Burn height overflows uint")
    return height


def current_pox_reward_cycle(state: PoxState, ctx: TxContext) -> int:
    return burn_height_to_reward_cycle(state, ctx.burn_height)
