"""Wiring for a simulated market: account handles plus matching custody records.

Used by the simulation script and the test suite to build account sets in
the exact order each instruction expects.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.authority import derive
from src.curve.config import ProgramConfig
from src.curve.state import STATE_LEN
from src.host.accounts import AccountHandle
from src.host.custody import InMemoryTokenLedger

# Owner tag for executable program accounts (BPF loader v3)
LOADER_ID = Pubkey.from_string("BPFLoaderUpgradeab1e11111111111111111111111")


@dataclass
class Trader:
    wallet: AccountHandle
    token_account: AccountHandle


@dataclass
class MarketAccounts:
    state: AccountHandle
    token_mint: AccountHandle
    collateral_mint: AccountHandle
    custodial: AccountHandle
    venue: AccountHandle
    token_program: AccountHandle
    bump: int

    def initialize_accounts(self) -> list[AccountHandle]:
        return [self.state, self.token_mint, self.custodial, self.collateral_mint]

    def trade_accounts(self, trader: Trader) -> list[AccountHandle]:
        return [
            self.state,
            trader.wallet,
            trader.token_account,
            self.token_mint,
            self.custodial,
            self.collateral_mint,
            self.token_program,
        ]

    def migrate_accounts(self) -> list[AccountHandle]:
        return [self.state, self.venue, self.token_program]


def create_market(config: ProgramConfig, ledger: InMemoryTokenLedger, *, bump: int = 255) -> MarketAccounts:
    """Allocate a zero-filled state record and register both mints with custody.

    The token mint's authority is the custodial address, so only the program
    (holding the derived capability) can mint.
    """
    token_program_id = config.token_program_id
    state_key = Pubkey.new_unique()
    custodial_key = derive(config.program_id, state_key, bump)
    token_mint_key = Pubkey.new_unique()
    collateral_mint_key = Pubkey.new_unique()
    venue_key = Pubkey.new_unique()

    ledger.register_mint(token_mint_key, authority=custodial_key)
    ledger.register_mint(collateral_mint_key, authority=None)
    ledger.open_account(venue_key, owner=venue_key, mint=collateral_mint_key)
    # Collateral held under the state record itself, paid out by Migrate
    ledger.open_account(state_key, owner=state_key, mint=collateral_mint_key)

    return MarketAccounts(
        state=AccountHandle(
            key=state_key,
            owner=config.program_id,
            data=bytearray(STATE_LEN),
            is_writable=True,
        ),
        token_mint=AccountHandle(key=token_mint_key, owner=token_program_id, is_writable=True),
        collateral_mint=AccountHandle(key=collateral_mint_key, owner=token_program_id),
        custodial=AccountHandle(key=custodial_key, owner=token_program_id, is_writable=True),
        venue=AccountHandle(key=venue_key, owner=token_program_id, is_writable=True),
        token_program=AccountHandle(key=token_program_id, owner=LOADER_ID),
        bump=bump,
    )


def open_trader(
    ledger: InMemoryTokenLedger, market: MarketAccounts, *, collateral: int = 0
) -> Trader:
    """Create a signing wallet with a token account pre-funded with collateral."""
    wallet_key = Pubkey.new_unique()
    token_account_key = Pubkey.new_unique()
    ledger.open_account(token_account_key, owner=wallet_key, mint=market.token_mint.key)
    if collateral:
        ledger.deposit(token_account_key, market.collateral_mint.key, collateral)

    return Trader(
        wallet=AccountHandle(key=wallet_key, owner=Pubkey.default(), is_signer=True, is_writable=True),
        token_account=AccountHandle(
            key=token_account_key,
            owner=market.token_mint.owner,
            is_writable=True,
        ),
    )
