"""In-process host: runs one instruction with all-or-nothing commit.

Every account buffer and the custody ledger are snapshotted before the
program runs. On any exception, including ones raised by a custody backend
itself, they are restored and the original exception is re-raised, so no
partial change is observable.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from loguru import logger

from src.curve.config import ProgramConfig
from src.curve.processor import process_instruction
from src.host.accounts import AccountHandle
from src.host.custody import TokenCustody


class SnapshottingCustody(TokenCustody, Protocol):
    def snapshot(self) -> object: ...

    def restore(self, saved: object) -> None: ...


class ProgramRuntime:
    def __init__(self, config: ProgramConfig, custody: SnapshottingCustody) -> None:
        self._config = config
        self._custody = custody
        self._invocations = 0
        self._failures = 0

    def __repr__(self) -> str:
        return f"ProgramRuntime(program_id={self._config.program_id})"

    @property
    def config(self) -> ProgramConfig:
        return self._config

    @property
    def custody(self) -> SnapshottingCustody:
        return self._custody

    @property
    def invocations(self) -> int:
        return self._invocations

    @property
    def failures(self) -> int:
        return self._failures

    def invoke(self, data: bytes, accounts: Sequence[AccountHandle]) -> None:
        """Execute one instruction atomically. Re-raises any failure after rollback."""
        self._invocations += 1
        saved_accounts = [(account, account.snapshot()) for account in accounts]
        saved_custody = self._custody.snapshot()

        try:
            process_instruction(self._config, accounts, data, self._custody)
        except BaseException as e:
            self._failures += 1
            for account, saved in saved_accounts:
                account.restore(saved)
            self._custody.restore(saved_custody)
            logger.warning(f"[RUNTIME] Invocation #{self._invocations} rolled back: {type(e).__name__}: {e}")
            raise

        logger.debug(f"[RUNTIME] Invocation #{self._invocations} committed")
