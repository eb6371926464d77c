"""
Shared fixtures for PoX-4 tests.

Three stackers with fixed signer keys. Each stacker's principal is the hash160
of its signer public key, so a stacker may pre-register authorizations for its
own key.
"""
import pytest

from helpers import Stacker
from pox4_datum_types import PoxAddress
from pox4_host import PoxHost
from pox4_signer_auth import hash160, signer_public_key
from pox4_stacking import get_stacking_minimum


SIGNER_PRIVATE_KEYS = [
    bytes.fromhex("7287ba251d44a4d3fd9276c88ce34c5c52a038955511cccaf77e61068649c178"),
    bytes.fromhex("530d9f61984c888536871c6573073bdfc0058896dc1adfe9a6a10dfacadc2091"),
    bytes.fromhex("d655b2523bcd65e34889725c73064feb17ceb796831c0e111ba1a552b0f31b39"),
]

POX_ADDRESSES = [
    PoxAddress(version=b"\x00", hashbytes=bytes.fromhex("a5180cc1ff6050df53f0ab9f4f0d8fc1b3f3fd8f")),
    PoxAddress(version=b"\x01", hashbytes=bytes.fromhex("3816b7d0b8b3fd9b36ac2f3b9f6a2f5f1e6b8a4c")),
    PoxAddress(version=b"\x04", hashbytes=bytes.fromhex("3ab6927f67d7224d3c7e7d3154ab1cb4e1f2a6c0")),
]


@pytest.fixture
def host():
    return PoxHost()


@pytest.fixture
def stackers():
    out = []
    for i, private_key in enumerate(SIGNER_PRIVATE_KEYS):
        signer_key = signer_public_key(private_key)
        out.append(Stacker(
            principal=hash160(signer_key),
            signer_private_key=private_key,
            signer_key=signer_key,
            pox_addr=POX_ADDRESSES[i],
            auth_id=i + 1,
        ))
    return out


@pytest.fixture
def stacking_amount(host):
    """1.2x the stacking minimum."""
    return get_stacking_minimum(host.context(b"anyone")) * 12 // 10
