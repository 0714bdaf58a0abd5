"""Account handles as delivered by the host to one program invocation.

A handle couples an identity with its owning program, its access flags and
the raw byte buffer backing it. Writes go through ``write()`` so read-only
handles cannot be mutated by mistake.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.errors import AccountNotWritable, InvalidLayout


@dataclass
class AccountHandle:
    key: Pubkey
    owner: Pubkey
    data: bytearray = field(default_factory=bytearray)
    is_writable: bool = False
    is_signer: bool = False

    def __repr__(self) -> str:
        flags = ("w" if self.is_writable else "-") + ("s" if self.is_signer else "-")
        return f"AccountHandle(key={self.key}, owner={self.owner}, len={len(self.data)}, {flags})"

    @property
    def data_len(self) -> int:
        return len(self.data)

    def write(self, offset: int, payload: bytes) -> None:
        """Overwrite ``payload`` at ``offset``. Never grows the buffer."""
        if not self.is_writable:
            raise AccountNotWritable(f"account {self.key} is read-only")
        end = offset + len(payload)
        if offset < 0 or end > len(self.data):
            raise InvalidLayout(
                f"write [{offset}:{end}] out of bounds for {len(self.data)}-byte account {self.key}"
            )
        self.data[offset:end] = payload

    def snapshot(self) -> bytes:
        return bytes(self.data)

    def restore(self, saved: bytes) -> None:
        self.data[:] = saved
