"""
PoX-4 typed errors and fatal aborts.

Recoverable failures are raised as PoxError carrying the integer code the
contract returns to its caller. Fatal aborts (out-of-domain heights, uint
overflow, invalid burnchain parameters) are raised as PoxAbort. They are NOT
PoxErrors and have no code: they abort the whole transaction.
"""

ERR_STACKING_INVALID_LOCK_PERIOD = 2
ERR_STACKING_ALREADY_STACKED = 3
ERR_STACKING_PERMISSION_DENIED = 9
ERR_STACKING_THRESHOLD_NOT_MET = 11
ERR_STACKING_INVALID_POX_ADDRESS = 13
ERR_STACKING_INVALID_AMOUNT = 18
ERR_NOT_ALLOWED = 19
ERR_INVALID_START_BURN_HEIGHT = 24
ERR_INVALID_SIGNER_KEY = 32
ERR_INVALID_SIGNATURE_PUBKEY = 35
ERR_INVALID_SIGNATURE_RECOVER = 36
ERR_INVALID_REWARD_CYCLE = 37
ERR_SIGNER_AUTH_AMOUNT_TOO_HIGH = 38
ERR_SIGNER_AUTH_USED = 39

ERROR_NAMES = {
    value: name
    for name, value in list(globals().items())
    if name.startswith("ERR_")
}


class PoxError(Exception):
    """A typed, inspectable contract error."""

    def __init__(self, code: int):
        self.code = code
        self.name = ERROR_NAMES.get(code, "ERR_UNKNOWN")
        super().__init__(f"{self.name} ({code})")


class PoxAbort(Exception):
    """Fatal abort of the calling transaction."""


def require(condition: bool, message: str) -> None:
    """Abort with `message` unless `condition` holds."""
    if not condition:
        raise PoxAbort(message)
