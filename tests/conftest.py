"""Shared test fixtures."""

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.config import ProgramConfig
from src.curve.instructions import Initialize
from src.host.custody import InMemoryTokenLedger
from src.host.market import MarketAccounts, Trader, create_market, open_trader
from src.host.runtime import ProgramRuntime

PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")


@pytest.fixture
def program_config() -> ProgramConfig:
    return ProgramConfig(program_id=PROGRAM_ID, token_program_id=TOKEN_PROGRAM_ID)


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


@pytest.fixture
def runtime(program_config: ProgramConfig, ledger: InMemoryTokenLedger) -> ProgramRuntime:
    return ProgramRuntime(program_config, ledger)


@pytest.fixture
def market(program_config: ProgramConfig, ledger: InMemoryTokenLedger) -> MarketAccounts:
    """A market whose state record is allocated but not yet initialized."""
    return create_market(program_config, ledger, bump=254)


@pytest.fixture
def live_market(runtime: ProgramRuntime, market: MarketAccounts) -> MarketAccounts:
    """A market after a successful Initialize."""
    runtime.invoke(Initialize(bump=market.bump).encode(), market.initialize_accounts())
    return market


@pytest.fixture
def trader(ledger: InMemoryTokenLedger, market: MarketAccounts) -> Trader:
    return open_trader(ledger, market, collateral=1_000)
