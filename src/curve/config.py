"""Process-wide program identity, fixed once when the runtime is built."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from config.settings import Settings


@dataclass(frozen=True)
class ProgramConfig:
    """Identity of this program and of the token custody subsystem it calls."""

    program_id: Pubkey
    token_program_id: Pubkey

    @classmethod
    def from_settings(cls, settings: Settings) -> ProgramConfig:
        return cls(
            program_id=Pubkey.from_string(settings.curve_program_id),
            token_program_id=Pubkey.from_string(settings.token_program_id),
        )
