"""
Fixed-point integer primitives.

Amounts are native unsigned 64-bit integers. Products are formed one width up
(128 bits) and checked back into the native width, so an intermediate can never
silently wrap. The ``*_wide`` variants do the same one level higher (128-bit
operands, 256-bit product) for the quadratic terms of the curve.
"""
from launchpad_core.common.errors import DivisionByZero, MathOverflow


PRECISION = 1_000_000_000
BPS_DENOMINATOR = 10_000

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
U256_MAX = (1 << 256) - 1


def _check_width(value: int, limit: int, what: str) -> int:
    if value < 0 or value > limit:
        raise MathOverflow(f"{what} {value} does not fit in {limit.bit_length()} bits.")
    return value


def _mul_div(a: int, b: int, c: int, limit: int, wide_limit: int, round_up: bool) -> int:
    _check_width(a, limit, "Operand")
    _check_width(b, limit, "Operand")
    _check_width(c, limit, "Divisor")
    if c == 0:
        raise DivisionByZero(f"mul_div({a}, {b}, 0)")

    product = _check_width(a * b, wide_limit, "Product")
    quotient, remainder = divmod(product, c)
    if round_up and remainder:
        quotient += 1
    return _check_width(quotient, limit, "Result")


def mul_div(a: int, b: int, c: int) -> int:
    """(a * b) // c with a 128-bit intermediate; the result must fit 64 bits."""
    return _mul_div(a, b, c, U64_MAX, U128_MAX, round_up=False)


def mul_div_up(a: int, b: int, c: int) -> int:
    """Same as mul_div, rounding the quotient up."""
    return _mul_div(a, b, c, U64_MAX, U128_MAX, round_up=True)


def mul_div_wide(a: int, b: int, c: int) -> int:
    """(a * b) // c with a 256-bit intermediate; the result must fit 128 bits."""
    return _mul_div(a, b, c, U128_MAX, U256_MAX, round_up=False)


def bps(amount: int, basis_points: int) -> int:
    """Portion of 'amount' expressed in basis points, rounded down."""
    return mul_div(amount, basis_points, BPS_DENOMINATOR)


def sqrt(x: int) -> int:
    """
    Integer square root by Newton's method over the wide (256-bit) domain.
    Exact for perfect squares, floor otherwise.
    """
    _check_width(x, U256_MAX, "Radicand")
    if x < 2:
        return x

    # Start above the root so the iteration decreases monotonically.
    z = 1 << ((x.bit_length() + 1) // 2)
    y = (z + x // z) // 2
    while y < z:
        z = y
        y = (z + x // z) // 2
    return z


def to_native(value: int) -> int:
    """Narrows a wide value back into the native 64-bit width."""
    return _check_width(value, U64_MAX, "Value")
