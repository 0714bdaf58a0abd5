"""Constant-product pricing over u64 reserves.

Python integers never wrap, so every intermediate value is range-checked
against u64 explicitly. Division floors, which rounds in the curve's favor:
buyers pay slightly more, sellers receive slightly less. Replicas depend on
this rounding, so it must not be "improved".
"""

from src.curve.constants import U64_MAX
from src.curve.errors import ArithmeticOverflow, InvalidAmount, InvalidState


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U64_MAX:
        raise ArithmeticOverflow(f"{a} + {b} overflows u64")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"{a} - {b} underflows u64")
    return a - b


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > U64_MAX:
        raise ArithmeticOverflow(f"{a} * {b} overflows u64")
    return result


def cost_to_buy(token_reserve: int, collateral_reserve: int, amount: int) -> int:
    """Collateral a buyer pays for ``amount`` tokens.

    new_collateral = floor(k / (token_reserve + amount)); the cost is the
    drop from the current collateral reserve.
    """
    if amount <= 0:
        raise InvalidAmount("buy amount must be positive")

    k = checked_mul(token_reserve, collateral_reserve)
    new_token_reserve = checked_add(token_reserve, amount)
    new_collateral_reserve = k // new_token_reserve

    if new_collateral_reserve > collateral_reserve:
        raise InvalidAmount(
            f"post-buy collateral {new_collateral_reserve} exceeds reserve {collateral_reserve}"
        )
    return collateral_reserve - new_collateral_reserve


def refund_for_sell(token_reserve: int, collateral_reserve: int, amount: int) -> int:
    """Collateral returned to a seller of ``amount`` tokens.

    Selling the whole token reserve (or more) is rejected: it would divide by
    zero and drain the curve below its operable floor.
    """
    if amount <= 0:
        raise InvalidAmount("sell amount must be positive")
    if amount >= token_reserve:
        raise InvalidAmount(f"sell amount {amount} must be below token reserve {token_reserve}")

    k = checked_mul(token_reserve, collateral_reserve)
    new_token_reserve = token_reserve - amount
    new_collateral_reserve = k // new_token_reserve

    if new_collateral_reserve < collateral_reserve:
        raise InvalidState(
            f"post-sell collateral {new_collateral_reserve} below reserve {collateral_reserve}"
        )
    return new_collateral_reserve - collateral_reserve
