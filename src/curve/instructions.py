"""Instruction wire format: one opcode byte followed by a fixed-width payload.

  0x00 Initialize  bump (u8)
  0x01 Buy         bump (u8), amount (u64 LE)
  0x02 Sell        amount (u64 LE)
  0x03 Migrate     -

Trailing bytes beyond the payload are ignored.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from loguru import logger

from src.curve.errors import TruncatedInstruction, UnknownOpcode


class Opcode(IntEnum):
    INITIALIZE = 0
    BUY = 1
    SELL = 2
    MIGRATE = 3


@dataclass(frozen=True)
class Initialize:
    bump: int

    def encode(self) -> bytes:
        return struct.pack("<BB", Opcode.INITIALIZE, self.bump)


@dataclass(frozen=True)
class Buy:
    bump: int
    amount: int

    def encode(self) -> bytes:
        return struct.pack("<BBQ", Opcode.BUY, self.bump, self.amount)


@dataclass(frozen=True)
class Sell:
    amount: int

    def encode(self) -> bytes:
        return struct.pack("<BQ", Opcode.SELL, self.amount)


@dataclass(frozen=True)
class Migrate:
    def encode(self) -> bytes:
        return struct.pack("<B", Opcode.MIGRATE)


Instruction = Initialize | Buy | Sell | Migrate

# opcode -> payload struct format
_PAYLOADS: dict[Opcode, str] = {
    Opcode.INITIALIZE: "<B",
    Opcode.BUY: "<BQ",
    Opcode.SELL: "<Q",
    Opcode.MIGRATE: "<",
}


def decode_instruction(data: bytes) -> Instruction:
    """Decode raw instruction bytes. Pure; no side effects."""
    if not data:
        raise TruncatedInstruction("empty instruction data")

    try:
        opcode = Opcode(data[0])
    except ValueError:
        raise UnknownOpcode(f"unknown opcode 0x{data[0]:02x}") from None

    fmt = _PAYLOADS[opcode]
    needed = struct.calcsize(fmt)
    payload = data[1:]
    if len(payload) < needed:
        raise TruncatedInstruction(
            f"{opcode.name} needs {needed} payload bytes, got {len(payload)}"
        )

    fields = struct.unpack_from(fmt, payload, 0)
    logger.debug(f"[ROUTER] {opcode.name} {fields}")

    if opcode is Opcode.INITIALIZE:
        return Initialize(bump=fields[0])
    if opcode is Opcode.BUY:
        return Buy(bump=fields[0], amount=fields[1])
    if opcode is Opcode.SELL:
        return Sell(amount=fields[0])
    return Migrate()
