"""Program entry point: decode one instruction and run exactly one handler."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve import handlers
from src.curve.instructions import Buy, Initialize, Migrate, Sell, decode_instruction

if TYPE_CHECKING:
    from src.curve.authority import SignerCapability
    from src.curve.config import ProgramConfig
    from src.host.accounts import AccountHandle
    from src.host.custody import TokenCustody


@dataclass(frozen=True)
class InvocationContext:
    """Everything one handler invocation may touch."""

    config: ProgramConfig
    accounts: Sequence[AccountHandle]
    custody: TokenCustody

    def signers(self, *capabilities: SignerCapability) -> frozenset[Pubkey]:
        """Outer-transaction signers plus the addresses of live capabilities."""
        keys = {account.key for account in self.accounts if account.is_signer}
        keys.update(cap.address for cap in capabilities if cap.is_live)
        return frozenset(keys)


def process_instruction(
    config: ProgramConfig,
    accounts: Sequence[AccountHandle],
    data: bytes,
    custody: TokenCustody,
) -> None:
    """Run one instruction. Raises a ``CurveProgramError`` or ``CustodyError`` on failure."""
    instruction = decode_instruction(data)
    ctx = InvocationContext(config=config, accounts=accounts, custody=custody)

    if isinstance(instruction, Initialize):
        handlers.initialize(ctx, instruction.bump)
    elif isinstance(instruction, Buy):
        handlers.buy(ctx, instruction.bump, instruction.amount)
    elif isinstance(instruction, Sell):
        handlers.sell(ctx, instruction.amount)
    elif isinstance(instruction, Migrate):
        handlers.migrate(ctx)
