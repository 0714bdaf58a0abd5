"""Token custody subsystem: the interface the curve program calls, plus an
in-memory ledger that implements it for simulation and tests.

Every operation is synchronous and either fully applied or raises a
``CustodyError`` without side effects. ``signers`` is the set of identities
that authorized the call (outer signers plus any live program capability).
"""

from __future__ import annotations

import copy
from collections.abc import Set
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.curve.constants import U64_MAX
from src.host.exceptions import (
    AccountAlreadyExists,
    AccountFrozen,
    AccountNotFound,
    InsufficientFunds,
    MissingAuthority,
    SupplyOverflow,
)


class TokenCustody(Protocol):
    def create_account(
        self, address: Pubkey, owner: Pubkey, mint: Pubkey, *, signers: Set[Pubkey]
    ) -> None: ...

    def transfer(
        self,
        source: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        mint: Pubkey,
        signers: Set[Pubkey],
    ) -> None: ...

    def mint_to(
        self,
        mint: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        signers: Set[Pubkey],
    ) -> None: ...

    def burn(
        self,
        source: Pubkey,
        mint: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        signers: Set[Pubkey],
    ) -> None: ...


@dataclass
class HoldingAccount:
    """A custody account. Holds balances per mint; ``mint`` is the one it was opened for."""

    owner: Pubkey
    mint: Pubkey
    balances: dict[Pubkey, int] = field(default_factory=dict)
    frozen: bool = False


@dataclass
class MintRecord:
    authority: Pubkey | None
    supply: int = 0


@dataclass
class _LedgerSnapshot:
    accounts: dict[Pubkey, HoldingAccount]
    mints: dict[Pubkey, MintRecord]


class InMemoryTokenLedger:
    """Reference custody backend with u64-checked balances and supply."""

    def __init__(self) -> None:
        self._accounts: dict[Pubkey, HoldingAccount] = {}
        self._mints: dict[Pubkey, MintRecord] = {}

    def __repr__(self) -> str:
        return f"InMemoryTokenLedger(accounts={len(self._accounts)}, mints={len(self._mints)})"

    # ── Setup helpers (not part of the program-facing interface) ──────

    def register_mint(self, mint: Pubkey, authority: Pubkey | None) -> None:
        self._mints[mint] = MintRecord(authority=authority)

    def open_account(self, address: Pubkey, owner: Pubkey, mint: Pubkey) -> None:
        if address in self._accounts:
            raise AccountAlreadyExists(f"account {address} already exists")
        self._accounts[address] = HoldingAccount(owner=owner, mint=mint)

    def deposit(self, address: Pubkey, mint: Pubkey, amount: int) -> None:
        """Credit ``amount`` of ``mint`` from outside the system (faucet)."""
        account = self._account(address)
        account.balances[mint] = self._credit(account.balances.get(mint, 0), amount)

    def freeze(self, address: Pubkey) -> None:
        self._account(address).frozen = True

    def has_account(self, address: Pubkey) -> bool:
        return address in self._accounts

    def account(self, address: Pubkey) -> HoldingAccount:
        return self._account(address)

    def balance_of(self, address: Pubkey, mint: Pubkey) -> int:
        return self._account(address).balances.get(mint, 0)

    def mint(self, mint: Pubkey) -> MintRecord:
        return self._mint(mint)

    def supply_of(self, mint: Pubkey) -> int:
        return self._mint(mint).supply

    def snapshot(self) -> _LedgerSnapshot:
        return _LedgerSnapshot(copy.deepcopy(self._accounts), copy.deepcopy(self._mints))

    def restore(self, saved: _LedgerSnapshot) -> None:
        self._accounts = copy.deepcopy(saved.accounts)
        self._mints = copy.deepcopy(saved.mints)

    # ── TokenCustody ──────────────────────────────────────────────────

    def create_account(
        self, address: Pubkey, owner: Pubkey, mint: Pubkey, *, signers: Set[Pubkey]
    ) -> None:
        self._mint(mint)
        if address not in signers:
            raise MissingAuthority(f"creating {address} requires its signature")
        self.open_account(address, owner, mint)
        logger.debug(f"[CUSTODY] Created {address} owner={owner} mint={mint}")

    def transfer(
        self,
        source: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        mint: Pubkey,
        signers: Set[Pubkey],
    ) -> None:
        src = self._account(source)
        dst = self._account(destination)
        self._authorize(src.owner, authority, signers)
        if src.frozen or dst.frozen:
            raise AccountFrozen(f"transfer {source} -> {destination} touches a frozen account")

        src_balance = src.balances.get(mint, 0)
        if src_balance < amount:
            raise InsufficientFunds(f"{source} holds {src_balance} of {mint}, needs {amount}")
        new_dst = self._credit(dst.balances.get(mint, 0), amount)

        src.balances[mint] = src_balance - amount
        dst.balances[mint] = new_dst
        logger.debug(f"[CUSTODY] Transfer {amount} {mint} {source} -> {destination}")

    def mint_to(
        self,
        mint: Pubkey,
        destination: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        signers: Set[Pubkey],
    ) -> None:
        record = self._mint(mint)
        dst = self._account(destination)
        if record.authority is None:
            raise MissingAuthority(f"mint {mint} has no mint authority")
        self._authorize(record.authority, authority, signers)
        if dst.frozen:
            raise AccountFrozen(f"destination {destination} is frozen")

        new_supply = self._credit(record.supply, amount)
        new_balance = self._credit(dst.balances.get(mint, 0), amount)

        record.supply = new_supply
        dst.balances[mint] = new_balance
        logger.debug(f"[CUSTODY] Minted {amount} {mint} -> {destination}")

    def burn(
        self,
        source: Pubkey,
        mint: Pubkey,
        authority: Pubkey,
        amount: int,
        *,
        signers: Set[Pubkey],
    ) -> None:
        record = self._mint(mint)
        src = self._account(source)
        self._authorize(src.owner, authority, signers)
        if src.frozen:
            raise AccountFrozen(f"source {source} is frozen")

        balance = src.balances.get(mint, 0)
        if balance < amount or record.supply < amount:
            raise InsufficientFunds(f"{source} holds {balance} of {mint}, burning {amount}")

        src.balances[mint] = balance - amount
        record.supply -= amount
        logger.debug(f"[CUSTODY] Burned {amount} {mint} from {source}")

    # ── Internals ─────────────────────────────────────────────────────

    def _account(self, address: Pubkey) -> HoldingAccount:
        try:
            return self._accounts[address]
        except KeyError:
            raise AccountNotFound(f"no custody account {address}") from None

    def _mint(self, mint: Pubkey) -> MintRecord:
        try:
            return self._mints[mint]
        except KeyError:
            raise AccountNotFound(f"no mint {mint}") from None

    @staticmethod
    def _authorize(expected: Pubkey, authority: Pubkey, signers: Set[Pubkey]) -> None:
        if authority != expected:
            raise MissingAuthority(f"authority {authority} is not {expected}")
        if authority not in signers:
            raise MissingAuthority(f"authority {authority} did not sign")

    @staticmethod
    def _credit(balance: int, amount: int) -> int:
        result = balance + amount
        if result > U64_MAX:
            raise SupplyOverflow(f"{balance} + {amount} overflows u64")
        return result
