"""Read-only market snapshot for display and monitoring."""

from decimal import Decimal

from pydantic import BaseModel

from src.curve.constants import MIGRATION_FEE, SEED_COLLATERAL_RESERVE
from src.curve.state import BondingCurveState


class CurveSnapshot(BaseModel):
    """Derived view of one market's curve state."""

    token_reserve: int
    collateral_reserve: int
    spot_price: Decimal
    collected: int
    is_migratable: bool
    migration_payout: int | None = None  # None = Migrate would be a no-op or fail

    model_config = {"frozen": True}


def snapshot_from_state(state: BondingCurveState) -> CurveSnapshot:
    spot_price = Decimal(0)
    if state.token_reserve > 0:
        spot_price = Decimal(state.collateral_reserve) / Decimal(state.token_reserve)

    collected = max(state.collateral_reserve - SEED_COLLATERAL_RESERVE, 0)
    is_migratable = state.token_reserve >= state.migration_threshold

    payout: int | None = None
    if is_migratable and collected >= MIGRATION_FEE:
        payout = collected - MIGRATION_FEE

    return CurveSnapshot(
        token_reserve=state.token_reserve,
        collateral_reserve=state.collateral_reserve,
        spot_price=spot_price,
        collected=collected,
        is_migratable=is_migratable,
        migration_payout=payout,
    )
