"""Fixed-layout codec for the BondingCurveState record.

Layout (97 bytes, little-endian, no padding):
  0       initialized         (u8 bool)
  1:9     token_reserve       (u64 LE)
  9:41    token_mint          (Pubkey 32b)
  41:49   collateral_reserve  (u64 LE)
  49:81   collateral_mint     (Pubkey 32b)
  81:89   total_supply        (u64 LE)
  89:97   migration_threshold (u64 LE)

Consumers never index the buffer themselves: ``read_state`` validates size
and ownership and returns an immutable snapshot, ``write_field`` rewrites
exactly one field in place.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.constants import U64_MAX
from src.curve.errors import ArithmeticOverflow, InvalidLayout

if TYPE_CHECKING:
    from src.host.accounts import AccountHandle

STATE_FORMAT = "<BQ32sQ32sQQ"
STATE_LEN = struct.calcsize(STATE_FORMAT)

# field name -> (offset, struct format)
FIELD_LAYOUT: dict[str, tuple[int, str]] = {
    "initialized": (0, "<B"),
    "token_reserve": (1, "<Q"),
    "token_mint": (9, "32s"),
    "collateral_reserve": (41, "<Q"),
    "collateral_mint": (49, "32s"),
    "total_supply": (81, "<Q"),
    "migration_threshold": (89, "<Q"),
}

_U64_FIELDS = {"token_reserve", "collateral_reserve", "total_supply", "migration_threshold"}
_KEY_FIELDS = {"token_mint", "collateral_mint"}


@dataclass(frozen=True)
class BondingCurveState:
    """Decoded snapshot of one market's state record."""

    initialized: bool
    token_reserve: int
    token_mint: Pubkey
    collateral_reserve: int
    collateral_mint: Pubkey
    total_supply: int
    migration_threshold: int

    @property
    def k(self) -> int:
        """Constant-product invariant (unbounded; callers check u64 range)."""
        return self.token_reserve * self.collateral_reserve

    def with_reserves(self, token_reserve: int, collateral_reserve: int) -> BondingCurveState:
        return replace(self, token_reserve=token_reserve, collateral_reserve=collateral_reserve)

    def pack(self) -> bytes:
        for name in _U64_FIELDS:
            _check_u64(name, getattr(self, name))
        return struct.pack(
            STATE_FORMAT,
            1 if self.initialized else 0,
            self.token_reserve,
            bytes(self.token_mint),
            self.collateral_reserve,
            bytes(self.collateral_mint),
            self.total_supply,
            self.migration_threshold,
        )

    @classmethod
    def unpack(cls, raw: bytes) -> BondingCurveState:
        if len(raw) != STATE_LEN:
            raise InvalidLayout(f"state record must be {STATE_LEN} bytes, got {len(raw)}")
        (
            initialized,
            token_reserve,
            token_mint,
            collateral_reserve,
            collateral_mint,
            total_supply,
            migration_threshold,
        ) = struct.unpack(STATE_FORMAT, raw)
        return cls(
            initialized=initialized != 0,
            token_reserve=token_reserve,
            token_mint=Pubkey.from_bytes(token_mint),
            collateral_reserve=collateral_reserve,
            collateral_mint=Pubkey.from_bytes(collateral_mint),
            total_supply=total_supply,
            migration_threshold=migration_threshold,
        )


def _check_u64(name: str, value: int) -> None:
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflow(f"{name}={value} does not fit in u64")


def check_record(account: AccountHandle, program_id: Pubkey) -> None:
    """Reject a record whose size or owning program is not ours."""
    if account.data_len != STATE_LEN:
        raise InvalidLayout(
            f"state account {account.key} has {account.data_len} bytes, expected {STATE_LEN}"
        )
    if account.owner != program_id:
        raise InvalidLayout(f"state account {account.key} is owned by {account.owner}")


def read_state(account: AccountHandle, program_id: Pubkey) -> BondingCurveState:
    check_record(account, program_id)
    return BondingCurveState.unpack(bytes(account.data))


def encode_field(name: str, value: int | bool | Pubkey) -> bytes:
    """Encode one field's value into its fixed-width slot."""
    try:
        _offset, fmt = FIELD_LAYOUT[name]
    except KeyError:
        raise InvalidLayout(f"unknown state field: {name}") from None

    if name in _KEY_FIELDS:
        raw = bytes(value)  # type: ignore[arg-type]
        if len(raw) != 32:
            raise InvalidLayout(f"{name} must be 32 bytes, got {len(raw)}")
        return struct.pack(fmt, raw)
    if name == "initialized":
        return struct.pack(fmt, 1 if value else 0)

    _check_u64(name, int(value))  # type: ignore[arg-type]
    return struct.pack(fmt, int(value))  # type: ignore[arg-type]


def write_field(
    account: AccountHandle,
    program_id: Pubkey,
    name: str,
    value: int | bool | Pubkey,
) -> None:
    """Rewrite exactly the bytes of one field, leaving the rest untouched."""
    check_record(account, program_id)
    payload = encode_field(name, value)
    offset, _fmt = FIELD_LAYOUT[name]
    account.write(offset, payload)


def write_state(account: AccountHandle, program_id: Pubkey, state: BondingCurveState) -> None:
    check_record(account, program_id)
    account.write(0, state.pack())
