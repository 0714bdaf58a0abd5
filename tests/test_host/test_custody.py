"""Tests for the in-memory token custody ledger."""

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.constants import U64_MAX
from src.host.custody import InMemoryTokenLedger
from src.host.exceptions import (
    AccountAlreadyExists,
    AccountFrozen,
    AccountNotFound,
    InsufficientFunds,
    MissingAuthority,
    SupplyOverflow,
)

MINT = Pubkey.new_unique()
MINT_AUTHORITY = Pubkey.new_unique()
ALICE = Pubkey.new_unique()
BOB = Pubkey.new_unique()
ALICE_ACCOUNT = Pubkey.new_unique()
BOB_ACCOUNT = Pubkey.new_unique()


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    ledger = InMemoryTokenLedger()
    ledger.register_mint(MINT, authority=MINT_AUTHORITY)
    ledger.open_account(ALICE_ACCOUNT, owner=ALICE, mint=MINT)
    ledger.open_account(BOB_ACCOUNT, owner=BOB, mint=MINT)
    ledger.deposit(ALICE_ACCOUNT, MINT, 100)
    return ledger


# ── create_account ─────────────────────────────────────────────────────


class TestCreateAccount:
    def test_requires_address_signature(self, ledger):
        address = Pubkey.new_unique()
        with pytest.raises(MissingAuthority):
            ledger.create_account(address, ALICE, MINT, signers=frozenset())
        assert not ledger.has_account(address)

    def test_creates_with_owner_and_mint(self, ledger):
        address = Pubkey.new_unique()
        ledger.create_account(address, ALICE, MINT, signers={address})
        account = ledger.account(address)
        assert account.owner == ALICE
        assert account.mint == MINT
        assert ledger.balance_of(address, MINT) == 0

    def test_existing_account_rejected(self, ledger):
        with pytest.raises(AccountAlreadyExists):
            ledger.create_account(ALICE_ACCOUNT, ALICE, MINT, signers={ALICE_ACCOUNT})

    def test_unknown_mint_rejected(self, ledger):
        address = Pubkey.new_unique()
        with pytest.raises(AccountNotFound):
            ledger.create_account(address, ALICE, Pubkey.new_unique(), signers={address})


# ── transfer ───────────────────────────────────────────────────────────


class TestTransfer:
    def test_moves_balance(self, ledger):
        ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 40, mint=MINT, signers={ALICE})
        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 60
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 40

    def test_zero_transfer_allowed(self, ledger):
        ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 0, mint=MINT, signers={ALICE})
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 0

    def test_wrong_authority(self, ledger):
        with pytest.raises(MissingAuthority):
            ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, BOB, 1, mint=MINT, signers={BOB})

    def test_authority_must_sign(self, ledger):
        with pytest.raises(MissingAuthority, match="did not sign"):
            ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 1, mint=MINT, signers=frozenset())

    def test_insufficient_funds_changes_nothing(self, ledger):
        with pytest.raises(InsufficientFunds):
            ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 101, mint=MINT, signers={ALICE})
        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 100
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 0

    def test_frozen_destination(self, ledger):
        ledger.freeze(BOB_ACCOUNT)
        with pytest.raises(AccountFrozen):
            ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 1, mint=MINT, signers={ALICE})

    def test_unknown_destination(self, ledger):
        with pytest.raises(AccountNotFound):
            ledger.transfer(ALICE_ACCOUNT, Pubkey.new_unique(), ALICE, 1, mint=MINT, signers={ALICE})

    def test_destination_overflow(self, ledger):
        ledger.deposit(BOB_ACCOUNT, MINT, U64_MAX)
        with pytest.raises(SupplyOverflow):
            ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 1, mint=MINT, signers={ALICE})
        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 100

    def test_other_mint_held_in_same_account(self, ledger):
        other = Pubkey.new_unique()
        ledger.register_mint(other, authority=None)
        ledger.deposit(ALICE_ACCOUNT, other, 5)
        ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 5, mint=other, signers={ALICE})
        assert ledger.balance_of(BOB_ACCOUNT, other) == 5
        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 100


# ── mint_to / burn ─────────────────────────────────────────────────────


class TestMintAndBurn:
    def test_mint_increases_supply(self, ledger):
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, 25, signers={MINT_AUTHORITY})
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 25
        assert ledger.supply_of(MINT) == 25

    def test_mint_requires_mint_authority(self, ledger):
        with pytest.raises(MissingAuthority):
            ledger.mint_to(MINT, BOB_ACCOUNT, ALICE, 25, signers={ALICE})

    def test_mint_without_authority_is_fixed_supply(self, ledger):
        fixed = Pubkey.new_unique()
        ledger.register_mint(fixed, authority=None)
        with pytest.raises(MissingAuthority, match="no mint authority"):
            ledger.mint_to(fixed, BOB_ACCOUNT, ALICE, 1, signers={ALICE})

    def test_mint_supply_overflow(self, ledger):
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, U64_MAX, signers={MINT_AUTHORITY})
        with pytest.raises(SupplyOverflow):
            ledger.mint_to(MINT, ALICE_ACCOUNT, MINT_AUTHORITY, 1, signers={MINT_AUTHORITY})

    def test_burn_reduces_supply(self, ledger):
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, 25, signers={MINT_AUTHORITY})
        ledger.burn(BOB_ACCOUNT, MINT, BOB, 10, signers={BOB})
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 15
        assert ledger.supply_of(MINT) == 15

    def test_burn_more_than_held(self, ledger):
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, 5, signers={MINT_AUTHORITY})
        with pytest.raises(InsufficientFunds):
            ledger.burn(BOB_ACCOUNT, MINT, BOB, 6, signers={BOB})

    def test_burn_from_frozen(self, ledger):
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, 5, signers={MINT_AUTHORITY})
        ledger.freeze(BOB_ACCOUNT)
        with pytest.raises(AccountFrozen):
            ledger.burn(BOB_ACCOUNT, MINT, BOB, 1, signers={BOB})


# ── snapshot / restore ─────────────────────────────────────────────────


class TestSnapshot:
    def test_restore_undoes_changes(self, ledger):
        saved = ledger.snapshot()
        ledger.transfer(ALICE_ACCOUNT, BOB_ACCOUNT, ALICE, 40, mint=MINT, signers={ALICE})
        ledger.mint_to(MINT, BOB_ACCOUNT, MINT_AUTHORITY, 7, signers={MINT_AUTHORITY})

        ledger.restore(saved)

        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 100
        assert ledger.balance_of(BOB_ACCOUNT, MINT) == 0
        assert ledger.supply_of(MINT) == 0

    def test_snapshot_is_isolated_from_later_changes(self, ledger):
        saved = ledger.snapshot()
        ledger.deposit(ALICE_ACCOUNT, MINT, 1)
        ledger.restore(saved)
        ledger.deposit(ALICE_ACCOUNT, MINT, 1)
        ledger.restore(saved)
        assert ledger.balance_of(ALICE_ACCOUNT, MINT) == 100
