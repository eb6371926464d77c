"""
PoX-4 Host - in-process execution environment for the stacking contract.

Supplies what the hosting chain normally provides:
- Current burn height (advanced by mining blocks)
- Transaction sender / contract caller identities
- Liquid supply (source of the stacking minimum)
- Atomic transactions: any failing call restores the contract state to
  exactly what it was before the call

Execution is strictly sequential. Every public call is mined into its own
block, whether it commits or rolls back.
"""
import copy
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import pox4_contract_config as cfg
from pox4_datum_types import PoxState, TxContext
from pox4_errors import PoxAbort, PoxError, require

logger = logging.getLogger(__name__)


class PoxHost:
    """Single PoX-4 contract instance plus the chain state it observes."""

    def __init__(
        self,
        burn_height: int = 0,
        liquid_ustx: int = cfg.DEFAULT_LIQUID_USTX,
        contract_id: bytes = cfg.DEFAULT_CONTRACT_ID,
        chain_id: int = cfg.CHAIN_ID_TESTNET,
    ):
        require(burn_height >= 0, "Burn height must be a uint")
        self.burn_height = burn_height
        self.liquid_ustx = liquid_ustx
        self.state = PoxState(contract_id=contract_id, chain_id=chain_id)

    def context(self, sender: bytes, contract_caller: Optional[bytes] = None) -> TxContext:
        """Context for a call at the current burn height. Direct call when no caller given."""
        return TxContext(
            sender=sender,
            contract_caller=sender if contract_caller is None else contract_caller,
            burn_height=self.burn_height,
            liquid_ustx=self.liquid_ustx,
        )

    def mine_empty_blocks(self, count: int = 1) -> int:
        require(count >= 0, "Block count must be a uint")
        self.burn_height += count
        return self.burn_height

    @contextmanager
    def transaction(self, sender: bytes, contract_caller: Optional[bytes] = None) -> Iterator[TxContext]:
        """
        Run a block of contract calls atomically.

        On any exception the state is restored and the exception propagates
        to the caller. The block is mined either way.
        """
        ctx = self.context(sender, contract_caller)
        snapshot = copy.deepcopy(self.state)
        try:
            yield ctx
        except PoxError as e:
            self.state = snapshot
            logger.warning("Transaction rolled back at height %d: %s", ctx.burn_height, e.name)
            raise
        except PoxAbort as e:
            self.state = snapshot
            logger.warning("Transaction aborted at height %d: %s", ctx.burn_height, e)
            raise
        except Exception:
            self.state = snapshot
            logger.exception("Transaction failed at height %d", ctx.burn_height)
            raise
        else:
            logger.debug("Transaction committed at height %d", ctx.burn_height)
        finally:
            self.mine_empty_blocks(1)

    def call_public(self, fn: Callable, sender: bytes, *args, contract_caller: Optional[bytes] = None):
        """Call `fn(state, ctx, *args)` inside a transaction."""
        with self.transaction(sender, contract_caller) as ctx:
            return fn(self.state, ctx, *args)

    def call_read_only(self, fn: Callable, sender: bytes, *args, contract_caller: Optional[bytes] = None):
        """Call `fn(state, ctx, *args)` against the live state without mining."""
        return fn(self.state, self.context(sender, contract_caller), *args)
