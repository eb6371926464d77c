"""
Helpers shared by the PoX-4 test modules: test accounts, signing and stacking.
"""
from dataclasses import dataclass
from typing import Optional

import pox4_contract_config as cfg
from pox4_burnchain import current_pox_reward_cycle
from pox4_datum_types import PoxAddress
from pox4_host import PoxHost
from pox4_signer_auth import get_signer_key_message_hash, sign_signer_key_message
from pox4_stacking import stack_stx


@dataclass
class Stacker:
    principal: bytes
    signer_private_key: bytes
    signer_key: bytes
    pox_addr: PoxAddress
    auth_id: int


def sign(host: PoxHost, private_key: bytes, pox_addr: PoxAddress, reward_cycle: int,
         topic: bytes, period: int, max_amount: int, auth_id: int) -> bytes:
    msg_hash = get_signer_key_message_hash(host.state, pox_addr, reward_cycle, topic, period, max_amount, auth_id)
    return sign_signer_key_message(private_key, msg_hash)


def stack(host: PoxHost, stacker: Stacker, amount: int, lock_period: int,
          max_amount: Optional[int] = None, pox_addr: Optional[PoxAddress] = None,
          use_signature: bool = True, start_burn_ht: Optional[int] = None):
    """Stack as `stacker` (direct call), signing for the current reward cycle."""
    if max_amount is None:
        max_amount = amount
    if pox_addr is None:
        pox_addr = stacker.pox_addr
    if start_burn_ht is None:
        start_burn_ht = host.burn_height
    signature = None
    if use_signature:
        reward_cycle = current_pox_reward_cycle(host.state, host.context(stacker.principal))
        signature = sign(host, stacker.signer_private_key, pox_addr, reward_cycle,
                         cfg.TOPIC_STACK_STX, lock_period, max_amount, stacker.auth_id)
    return host.call_public(
        stack_stx,
        stacker.principal,
        amount,
        pox_addr,
        start_burn_ht,
        lock_period,
        signature,
        stacker.signer_key,
        max_amount,
        stacker.auth_id,
    )
