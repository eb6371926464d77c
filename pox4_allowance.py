"""
PoX-4 Caller Allowances.

A stacker may allow a calling contract to act on its behalf, optionally until
a burn height. A direct call (contract_caller == sender) is always allowed.
Expired allowances simply stop matching; nothing removes them.
"""
import logging
from typing import Optional

from pox4_datum_types import (
    AllowanceRecord,
    NoBurnHeight,
    PoxState,
    SomeBurnHeight,
    TxContext,
)
from pox4_errors import ERR_STACKING_PERMISSION_DENIED, PoxError, require

logger = logging.getLogger(__name__)


def get_allowance_contract_callers(state: PoxState, sender: bytes, calling_contract: bytes) -> Optional[AllowanceRecord]:
    return state.allowance_contract_callers.get((sender, calling_contract))


def check_caller_allowed(state: PoxState, ctx: TxContext) -> bool:
    """True for a direct call, or an allowance that has not expired."""
    if ctx.is_direct_call():
        return True
    record = get_allowance_contract_callers(state, ctx.sender, ctx.contract_caller)
    if record is None:
        return False
    until = record.until_burn_ht
    if isinstance(until, SomeBurnHeight):
        return until.height >= ctx.burn_height
    return True


def allow_contract_caller(
    state: PoxState,
    ctx: TxContext,
    calling_contract: bytes,
    until_burn_ht: Optional[int] = None,
) -> bool:
    """Allow `calling_contract` to call on behalf of ctx.sender. Must be called directly."""
    if not ctx.is_direct_call():
        raise PoxError(ERR_STACKING_PERMISSION_DENIED)

    if until_burn_ht is None:
        until = NoBurnHeight()
    else:
        require(until_burn_ht >= 0, "Expiry height must be a uint")
        until = SomeBurnHeight(height=until_burn_ht)

    state.allowance_contract_callers[(ctx.sender, calling_contract)] = AllowanceRecord(until_burn_ht=until)
    logger.debug("Allowed caller %s for %s until %s", calling_contract, ctx.sender.hex(), until_burn_ht)
    return True


def disallow_contract_caller(state: PoxState, ctx: TxContext, calling_contract: bytes) -> bool:
    """Revoke an allowance. Returns whether one existed. Must be called directly."""
    if not ctx.is_direct_call():
        raise PoxError(ERR_STACKING_PERMISSION_DENIED)
    removed = state.allowance_contract_callers.pop((ctx.sender, calling_contract), None)
    logger.debug("Disallowed caller %s for %s", calling_contract, ctx.sender.hex())
    return removed is not None
