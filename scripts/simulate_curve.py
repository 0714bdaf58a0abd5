"""Simulate a bonding-curve market in memory.

Runs Initialize, N buys and M sells from one trader, then Migrate,
logging a CurveSnapshot after each committed step.

Usage:
    python scripts/simulate_curve.py --buys 5 --amount 1000000 --sells 2
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402

from config.settings import settings  # noqa: E402
from src.curve.config import ProgramConfig  # noqa: E402
from src.curve.errors import CurveProgramError  # noqa: E402
from src.curve.instructions import Buy, Initialize, Migrate, Sell  # noqa: E402
from src.curve.quote import snapshot_from_state  # noqa: E402
from src.curve.state import read_state  # noqa: E402
from src.host.custody import InMemoryTokenLedger  # noqa: E402
from src.host.exceptions import CustodyError  # noqa: E402
from src.host.market import create_market, open_trader  # noqa: E402
from src.host.runtime import ProgramRuntime  # noqa: E402
from src.utils.logger import setup_logger  # noqa: E402


def run_simulation(*, buys: int, sells: int, amount: int, collateral: int) -> int:
    """Returns the number of failed invocations."""
    config = ProgramConfig.from_settings(settings)
    ledger = InMemoryTokenLedger()
    runtime = ProgramRuntime(config, ledger)
    market = create_market(config, ledger)
    trader = open_trader(ledger, market, collateral=collateral)

    steps = [("initialize", Initialize(bump=market.bump).encode(), market.initialize_accounts())]
    steps += [
        (f"buy #{i + 1}", Buy(bump=market.bump, amount=amount).encode(), market.trade_accounts(trader))
        for i in range(buys)
    ]
    steps += [
        (f"sell #{i + 1}", Sell(amount=amount).encode(), market.trade_accounts(trader))
        for i in range(sells)
    ]
    steps.append(("migrate", Migrate().encode(), market.migrate_accounts()))

    for label, data, accounts in steps:
        try:
            runtime.invoke(data, accounts)
        except (CurveProgramError, CustodyError) as e:
            logger.error(f"[SIM] {label} failed: {type(e).__name__}: {e}")
            continue
        snap = snapshot_from_state(read_state(market.state, config.program_id))
        logger.info(
            f"[SIM] {label}: reserves {snap.token_reserve}/{snap.collateral_reserve} "
            f"price={snap.spot_price:.3E} collected={snap.collected} "
            f"migratable={snap.is_migratable}"
        )

    tokens = ledger.balance_of(trader.token_account.key, market.token_mint.key)
    left = ledger.balance_of(trader.token_account.key, market.collateral_mint.key)
    logger.info(
        f"[SIM] Done: {runtime.invocations} invocations, {runtime.failures} failed; "
        f"trader holds {tokens} tokens and {left} collateral"
    )
    return runtime.failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate a bonding-curve market")
    parser.add_argument("--buys", type=int, default=3)
    parser.add_argument("--sells", type=int, default=1)
    parser.add_argument("--amount", type=int, default=1_000_000, help="Tokens per trade")
    parser.add_argument("--collateral", type=int, default=1_000_000, help="Trader starting collateral")
    args = parser.parse_args()

    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    run_simulation(buys=args.buys, sells=args.sells, amount=args.amount, collateral=args.collateral)


if __name__ == "__main__":
    main()
