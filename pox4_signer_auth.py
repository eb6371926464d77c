"""
PoX-4 Signer Authorization - one-time signer-key permissions.

A signer key authorizes a stacking operation in one of two ways:

1. A secp256k1 signature over the SIP-018 hash of the canonical payload.
2. A prior registration (set-signer-key-authorization) of the same payload,
   made by the principal that owns the signer key.

Both paths reduce to the same authorization key (payload + signer key). That
key can be consumed exactly once, ever. Once consumed, every later
verification of the identical tuple fails with ERR_SIGNER_AUTH_USED, even with
a fresh valid signature.

Message hash:
    domain_hash = sha256(cbor(SignerDomain))
    message_hash = sha256(SIP018_PREFIX || domain_hash || sha256(cbor(SignerKeyMessage)))
"""
import logging
from hashlib import sha256
from typing import Optional

from Crypto.Hash import RIPEMD160
from py_ecc.secp256k1.secp256k1 import ecdsa_raw_recover, ecdsa_raw_sign, privtopub

import pox4_contract_config as cfg
from pox4_burnchain import current_pox_reward_cycle
from pox4_allowance import check_caller_allowed
from pox4_datum_types import (
    PoxAddress,
    PoxState,
    SignerAuthorizationKey,
    SignerDomain,
    SignerKeyMessage,
    TxContext,
)
from pox4_errors import (
    ERR_INVALID_REWARD_CYCLE,
    ERR_INVALID_SIGNATURE_PUBKEY,
    ERR_INVALID_SIGNATURE_RECOVER,
    ERR_INVALID_SIGNER_KEY,
    ERR_NOT_ALLOWED,
    ERR_SIGNER_AUTH_AMOUNT_TOO_HIGH,
    ERR_SIGNER_AUTH_USED,
    ERR_STACKING_INVALID_LOCK_PERIOD,
    PoxError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# KEY HELPERS
# =============================================================================

def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256, the principal hash of a public key."""
    return RIPEMD160.new(sha256(data).digest()).digest()


def compress_public_key(x: int, y: int) -> bytes:
    """33-byte SEC1 compressed encoding of a curve point."""
    prefix = b"\x03" if y & 1 else b"\x02"
    return prefix + x.to_bytes(32, "big")


def signer_public_key(private_key: bytes) -> bytes:
    """Compressed public key for a 32-byte private key."""
    x, y = privtopub(private_key)
    return compress_public_key(x, y)


def signer_principal(signer_key: bytes) -> bytes:
    """Standard principal owning `signer_key`."""
    if len(signer_key) != cfg.SIGNER_KEY_LEN:
        raise PoxError(ERR_INVALID_SIGNER_KEY)
    return hash160(signer_key)


# =============================================================================
# MESSAGE HASHING
# =============================================================================

def signer_domain_hash(state: PoxState) -> bytes:
    domain = SignerDomain(
        name=cfg.SIGNER_DOMAIN_NAME,
        version=cfg.SIGNER_DOMAIN_VERSION,
        chain_id=state.chain_id,
        contract_id=state.contract_id,
    )
    return sha256(domain.to_cbor()).digest()


def get_signer_key_message_hash(
    state: PoxState,
    pox_addr: PoxAddress,
    reward_cycle: int,
    topic: bytes,
    period: int,
    max_amount: int,
    auth_id: int,
) -> bytes:
    """32-byte hash a signer key signs to authorize the given payload."""
    message = SignerKeyMessage(
        pox_addr=pox_addr,
        reward_cycle=reward_cycle,
        topic=topic,
        period=period,
        max_amount=max_amount,
        auth_id=auth_id,
    )
    structured_hash = sha256(message.to_cbor()).digest()
    return sha256(cfg.SIP018_MSG_PREFIX + signer_domain_hash(state) + structured_hash).digest()


def signer_authorization_key(
    pox_addr: PoxAddress,
    reward_cycle: int,
    topic: bytes,
    period: int,
    signer_key: bytes,
    max_amount: int,
    auth_id: int,
) -> bytes:
    """Digest identifying one consumable permission (shared by both satisfaction paths)."""
    key = SignerAuthorizationKey(
        pox_addr=pox_addr,
        reward_cycle=reward_cycle,
        topic=topic,
        period=period,
        signer_key=signer_key,
        max_amount=max_amount,
        auth_id=auth_id,
    )
    return sha256(key.to_cbor()).digest()


# =============================================================================
# SIGNATURES
# =============================================================================

def sign_signer_key_message(private_key: bytes, message_hash: bytes) -> bytes:
    """65-byte recoverable signature: r || s || recovery id."""
    v, r, s = ecdsa_raw_sign(message_hash, private_key)
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v - 27])


def recover_signer_key(message_hash: bytes, signature: bytes) -> Optional[bytes]:
    """Compressed public key that produced `signature`, or None if unrecoverable."""
    if len(signature) != cfg.SIGNER_SIG_LEN:
        return None
    recovery_id = signature[64]
    # py_ecc only recovers from r as the x coordinate (ids 0 and 1)
    if recovery_id > 1:
        return None
    r = int.from_bytes(signature[0:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    try:
        point = ecdsa_raw_recover(message_hash, (27 + recovery_id, r, s))
    except ValueError:
        return None
    # False when r is not the x coordinate of a curve point, or r/s is zero
    if not point:
        return None
    x, y = point
    # Point at infinity
    if x == 0 and y == 0:
        return None
    return compress_public_key(x, y)


# =============================================================================
# VERIFY / CONSUME
# =============================================================================

def _check_signer_key_sig(
    state: PoxState,
    pox_addr: PoxAddress,
    reward_cycle: int,
    topic: bytes,
    period: int,
    signer_sig: Optional[bytes],
    signer_key: bytes,
    amount: int,
    max_amount: int,
    auth_id: int,
) -> bytes:
    """Run every verification step; return the authorization key on success."""
    if amount > max_amount:
        raise PoxError(ERR_SIGNER_AUTH_AMOUNT_TOO_HIGH)

    auth_key = signer_authorization_key(pox_addr, reward_cycle, topic, period, signer_key, max_amount, auth_id)
    if state.used_signer_key_authorizations.get(auth_key, 0) == 1:
        raise PoxError(ERR_SIGNER_AUTH_USED)

    if signer_sig is not None:
        msg_hash = get_signer_key_message_hash(state, pox_addr, reward_cycle, topic, period, max_amount, auth_id)
        recovered = recover_signer_key(msg_hash, signer_sig)
        if recovered is None:
            raise PoxError(ERR_INVALID_SIGNATURE_RECOVER)
        if recovered != signer_key:
            raise PoxError(ERR_INVALID_SIGNATURE_PUBKEY)
    elif state.signer_key_authorizations.get(auth_key, 0) != 1:
        raise PoxError(ERR_NOT_ALLOWED)

    return auth_key


def verify_signer_key_sig(
    state: PoxState,
    pox_addr: PoxAddress,
    reward_cycle: int,
    topic: bytes,
    period: int,
    signer_sig: Optional[bytes],
    signer_key: bytes,
    amount: int,
    max_amount: int,
    auth_id: int,
) -> bool:
    """
    Check that a signer key authorizes this operation. Read-only.

    Order: amount cap, already used, then the signature (if given) or the
    prior registration (if not).
    """
    _check_signer_key_sig(
        state, pox_addr, reward_cycle, topic, period,
        signer_sig, signer_key, amount, max_amount, auth_id,
    )
    return True


def consume_signer_key_authorization(
    state: PoxState,
    pox_addr: PoxAddress,
    reward_cycle: int,
    topic: bytes,
    period: int,
    signer_sig: Optional[bytes],
    signer_key: bytes,
    amount: int,
    max_amount: int,
    auth_id: int,
) -> bool:
    """Verify, then mark the authorization key used. Irreversible."""
    auth_key = _check_signer_key_sig(
        state, pox_addr, reward_cycle, topic, period,
        signer_sig, signer_key, amount, max_amount, auth_id,
    )
    state.used_signer_key_authorizations[auth_key] = 1
    logger.info(
        "Signer authorization consumed: topic=%s cycle=%d period=%d auth_id=%d signer=%s",
        topic.decode("ascii", "replace"), reward_cycle, period, auth_id, signer_key.hex(),
    )
    return True


# =============================================================================
# PRE-REGISTRATION
# =============================================================================

def set_signer_key_authorization(
    state: PoxState,
    ctx: TxContext,
    pox_addr: PoxAddress,
    period: int,
    reward_cycle: int,
    topic: bytes,
    signer_key: bytes,
    allowed: bool,
    max_amount: int,
    auth_id: int,
) -> bool:
    """
    Register (or disable) an authorization without a signature.

    Only the principal owning `signer_key` may call this, directly or through
    an allowed contract caller. Never touches the used flag.
    """
    if not check_caller_allowed(state, ctx):
        raise PoxError(ERR_NOT_ALLOWED)
    if signer_principal(signer_key) != ctx.sender:
        raise PoxError(ERR_NOT_ALLOWED)
    if period < 1:
        raise PoxError(ERR_STACKING_INVALID_LOCK_PERIOD)
    if reward_cycle < current_pox_reward_cycle(state, ctx):
        raise PoxError(ERR_INVALID_REWARD_CYCLE)

    auth_key = signer_authorization_key(pox_addr, reward_cycle, topic, period, signer_key, max_amount, auth_id)
    state.signer_key_authorizations[auth_key] = 1 if allowed else 0
    logger.info(
        "Signer authorization %s: topic=%s cycle=%d period=%d auth_id=%d signer=%s",
        "enabled" if allowed else "disabled",
        topic.decode("ascii", "replace"), reward_cycle, period, auth_id, signer_key.hex(),
    )
    return allowed
