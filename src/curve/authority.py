"""Custodial address derivation and invocation-scoped signing capabilities.

The custodial holding account of a market is not a keypair: its address is
sha256(state_identity || bump || program_id || salt), and only this program,
given the same (state_identity, bump), can sign on its behalf. Signing is
modelled as a capability object that is revoked when the handler that
acquired it returns.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from contextlib import contextmanager

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.constants import DERIVATION_SALT
from src.curve.errors import AddressMismatch


def derive(program_id: Pubkey, state_identity: Pubkey, bump: int) -> Pubkey:
    """Custodial address for a market's state record and discriminator byte."""
    if not 0 <= bump <= 255:
        raise AddressMismatch(f"bump must be a single byte, got {bump}")
    digest = hashlib.sha256(
        bytes(state_identity) + bytes([bump]) + bytes(program_id) + DERIVATION_SALT
    ).digest()
    return Pubkey.from_bytes(digest)


def verify_custodial(
    program_id: Pubkey, state_identity: Pubkey, bump: int, supplied: Pubkey
) -> Pubkey:
    expected = derive(program_id, state_identity, bump)
    if expected != supplied:
        raise AddressMismatch(f"custodial account {supplied} does not match derived {expected}")
    return expected


def find_bump(program_id: Pubkey, state_identity: Pubkey, custodial: Pubkey) -> int:
    """Recover the discriminator byte that derives ``custodial``, scanning 255..0."""
    for bump in range(255, -1, -1):
        if derive(program_id, state_identity, bump) == custodial:
            return bump
    raise AddressMismatch(f"custodial account {custodial} is not derived from {state_identity}")


class SignerCapability:
    """Authority to sign custody operations for one address.

    Valid only inside the ``with`` block that produced it; cannot be pickled
    or copied out of the invocation.
    """

    __slots__ = ("_address", "_live")

    def __init__(self, address: Pubkey) -> None:
        self._address = address
        self._live = True

    def __repr__(self) -> str:
        state = "live" if self._live else "revoked"
        return f"SignerCapability({self._address}, {state})"

    def __reduce__(self):
        raise TypeError("SignerCapability cannot be serialized")

    def __copy__(self):
        raise TypeError("SignerCapability cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SignerCapability cannot be copied")

    @property
    def address(self) -> Pubkey:
        return self._address

    @property
    def is_live(self) -> bool:
        return self._live

    def revoke(self) -> None:
        self._live = False


@contextmanager
def acquire_authority(
    program_id: Pubkey, state_identity: Pubkey, bump: int
) -> Iterator[SignerCapability]:
    """Derive the custodial address and hold its signing capability for the block."""
    capability = SignerCapability(derive(program_id, state_identity, bump))
    try:
        yield capability
    finally:
        capability.revoke()


@contextmanager
def record_signer(state_identity: Pubkey) -> Iterator[SignerCapability]:
    """Let a program-owned state record sign for itself.

    Callers must have validated ownership of the record (``check_record``).
    """
    capability = SignerCapability(state_identity)
    try:
        yield capability
    finally:
        capability.revoke()
