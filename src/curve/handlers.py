"""Instruction handlers: Initialize, Buy, Sell, Migrate.

Each handler validates the whole account set and prices the trade before it
writes anything. Reserve updates are computed from the values read once at
the start of the handler, then written, then custody operations are issued.
A failing custody call aborts the invocation; rollback of the earlier writes
is the host's atomic commit, not the handler's job.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from src.curve.authority import (
    acquire_authority,
    find_bump,
    record_signer,
    verify_custodial,
)
from src.curve.constants import (
    MIGRATION_FEE,
    MIGRATION_THRESHOLD,
    SEED_COLLATERAL_RESERVE,
    SEED_TOKEN_RESERVE,
    TOTAL_SUPPLY,
)
from src.curve.errors import (
    AccountAlreadyInitialized,
    AddressMismatch,
    InvalidAmount,
    NotEnoughAccounts,
    OwnerMismatch,
    UninitializedAccount,
)
from src.curve.pricing import checked_add, checked_sub, cost_to_buy, refund_for_sell
from src.curve.state import BondingCurveState, read_state, write_field, write_state

if TYPE_CHECKING:
    from src.curve.processor import InvocationContext
    from src.host.accounts import AccountHandle


def _expect_accounts(
    accounts: Sequence[AccountHandle], count: int, instruction: str
) -> Sequence[AccountHandle]:
    if len(accounts) != count:
        raise NotEnoughAccounts(f"{instruction} expects {count} accounts, got {len(accounts)}")
    return accounts


def _load_initialized(ctx: InvocationContext, state_account: AccountHandle) -> BondingCurveState:
    state = read_state(state_account, ctx.config.program_id)
    if not state.initialized:
        raise UninitializedAccount(f"state account {state_account.key} is not initialized")
    return state


def _check_token_program(ctx: InvocationContext, token_program: AccountHandle) -> None:
    if token_program.key != ctx.config.token_program_id:
        raise AddressMismatch(f"{token_program.key} is not the token program")


def _check_token_owned(token_program: AccountHandle, *accounts: AccountHandle) -> None:
    for account in accounts:
        if account.owner != token_program.key:
            raise OwnerMismatch(f"{account.key} is owned by {account.owner}, not the token program")


def _check_mints(
    state: BondingCurveState, token_mint: AccountHandle, collateral_mint: AccountHandle
) -> None:
    if token_mint.key != state.token_mint:
        raise AddressMismatch(f"token mint {token_mint.key} != bound {state.token_mint}")
    if collateral_mint.key != state.collateral_mint:
        raise AddressMismatch(
            f"collateral mint {collateral_mint.key} != bound {state.collateral_mint}"
        )


def _write_reserves(
    ctx: InvocationContext, state_account: AccountHandle, token_reserve: int, collateral_reserve: int
) -> None:
    program_id = ctx.config.program_id
    write_field(state_account, program_id, "token_reserve", token_reserve)
    write_field(state_account, program_id, "collateral_reserve", collateral_reserve)


def initialize(ctx: InvocationContext, bump: int) -> None:
    """Seed a fresh market and open its custodial holding account."""
    state_account, token_mint, custodial, collateral_mint = _expect_accounts(
        ctx.accounts, 4, "Initialize"
    )
    program_id = ctx.config.program_id

    if read_state(state_account, program_id).initialized:
        raise AccountAlreadyInitialized(f"state account {state_account.key} already initialized")
    verify_custodial(program_id, state_account.key, bump, custodial.key)

    write_state(
        state_account,
        program_id,
        BondingCurveState(
            initialized=True,
            token_reserve=SEED_TOKEN_RESERVE,
            token_mint=token_mint.key,
            collateral_reserve=SEED_COLLATERAL_RESERVE,
            collateral_mint=collateral_mint.key,
            total_supply=TOTAL_SUPPLY,
            migration_threshold=MIGRATION_THRESHOLD,
        ),
    )

    with acquire_authority(program_id, state_account.key, bump) as authority:
        ctx.custody.create_account(
            custodial.key,
            authority.address,
            token_mint.key,
            signers=ctx.signers(authority),
        )

    logger.info(f"[CURVE] Initialized market {state_account.key} custodial={custodial.key}")


def buy(ctx: InvocationContext, bump: int, amount: int) -> None:
    (
        state_account,
        buyer,
        buyer_token,
        token_mint,
        custodial,
        collateral_mint,
        token_program,
    ) = _expect_accounts(ctx.accounts, 7, "Buy")
    program_id = ctx.config.program_id

    verify_custodial(program_id, state_account.key, bump, custodial.key)
    state = _load_initialized(ctx, state_account)
    _check_token_program(ctx, token_program)
    _check_token_owned(token_program, buyer_token, custodial)
    _check_mints(state, token_mint, collateral_mint)

    total_cost = cost_to_buy(state.token_reserve, state.collateral_reserve, amount)
    new_token_reserve = checked_add(state.token_reserve, amount)
    new_collateral_reserve = checked_add(state.collateral_reserve, total_cost)

    _write_reserves(ctx, state_account, new_token_reserve, new_collateral_reserve)

    ctx.custody.transfer(
        buyer_token.key,
        custodial.key,
        buyer.key,
        total_cost,
        mint=state.collateral_mint,
        signers=ctx.signers(),
    )
    with acquire_authority(program_id, state_account.key, bump) as authority:
        ctx.custody.mint_to(
            state.token_mint,
            buyer_token.key,
            authority.address,
            amount,
            signers=ctx.signers(authority),
        )

    logger.debug(
        f"[CURVE] Buy {amount} for {total_cost} on {state_account.key}: "
        f"reserves {new_token_reserve}/{new_collateral_reserve}"
    )


def sell(ctx: InvocationContext, amount: int) -> None:
    (
        state_account,
        seller,
        seller_token,
        token_mint,
        custodial,
        collateral_mint,
        token_program,
    ) = _expect_accounts(ctx.accounts, 7, "Sell")
    program_id = ctx.config.program_id

    state = _load_initialized(ctx, state_account)
    _check_token_program(ctx, token_program)
    _check_token_owned(token_program, seller_token, custodial)
    _check_mints(state, token_mint, collateral_mint)
    bump = find_bump(program_id, state_account.key, custodial.key)

    refund = refund_for_sell(state.token_reserve, state.collateral_reserve, amount)
    if refund > state.collateral_reserve - SEED_COLLATERAL_RESERVE:
        raise InvalidAmount(
            f"sell of {amount} refunds {refund} from collateral reserve "
            f"{state.collateral_reserve}, below the seed floor {SEED_COLLATERAL_RESERVE}"
        )
    new_token_reserve = checked_sub(state.token_reserve, amount)
    new_collateral_reserve = checked_sub(state.collateral_reserve, refund)

    _write_reserves(ctx, state_account, new_token_reserve, new_collateral_reserve)

    ctx.custody.burn(
        seller_token.key,
        state.token_mint,
        seller.key,
        amount,
        signers=ctx.signers(),
    )
    with acquire_authority(program_id, state_account.key, bump) as authority:
        ctx.custody.transfer(
            custodial.key,
            seller_token.key,
            authority.address,
            refund,
            mint=state.collateral_mint,
            signers=ctx.signers(authority),
        )

    logger.debug(
        f"[CURVE] Sell {amount} for {refund} on {state_account.key}: "
        f"reserves {new_token_reserve}/{new_collateral_reserve}"
    )


def migrate(ctx: InvocationContext) -> None:
    """Hand collected collateral (minus the fee) to the liquidity venue.

    Below the threshold this is a successful no-op, so callers may poll.
    """
    state_account, venue, token_program = _expect_accounts(ctx.accounts, 3, "Migrate")

    state = _load_initialized(ctx, state_account)
    _check_token_program(ctx, token_program)

    if state.token_reserve < state.migration_threshold:
        logger.debug(
            f"[CURVE] Migrate no-op for {state_account.key}: "
            f"{state.token_reserve} < {state.migration_threshold}"
        )
        return

    collected = checked_sub(state.collateral_reserve, SEED_COLLATERAL_RESERVE)
    payout = checked_sub(collected, MIGRATION_FEE)
    logger.info(f"[CURVE] Migrating {payout} collateral to venue {venue.key}")

    with record_signer(state_account.key) as signer:
        ctx.custody.transfer(
            state_account.key,
            venue.key,
            state_account.key,
            payout,
            mint=state.collateral_mint,
            signers=ctx.signers(signer),
        )
