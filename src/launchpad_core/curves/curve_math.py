from launchpad_core.common.errors import DivisionByZero, InvalidInput, MathOverflow
from launchpad_core.common.math import (
    PRECISION,
    U64_MAX,
    U128_MAX,
    mul_div,
    mul_div_wide,
    sqrt,
    to_native,
)


# Largest supply whose square still fits the 128-bit intermediate.
MAX_SAFE_SUPPLY = sqrt(U128_MAX)


class CurveMath:
    """
    Stateless arithmetic for the linear-price bonding curve.

    The spot price grows linearly with supply:
        price(s) = b + m*s / P

    so the reserve needed to mint from 0 to s is the quadratic area
        area(s) = b*s + m*s² / (2P)

    where b is the base price, m the slope and P the fixed-point PRECISION.
    Every rounding step favours the pool: areas round down when computing what a
    buyer receives and the inverse floors the supply, so a buy followed by a sell
    of the same tokens can never return more than was paid in.
    """

    @staticmethod
    def price(supply: int, base_price: int, slope: int) -> int:
        """Spot price at 'supply', PRECISION-scaled."""
        return to_native(base_price + mul_div(slope, supply, PRECISION))

    @staticmethod
    def curve_area(supply: int, base_price: int, slope: int) -> int:
        """Reserve cost to mint from 0 to 'supply'."""
        if supply < 0:
            raise InvalidInput(f"Supply must be non-negative, got {supply}.")
        if supply > MAX_SAFE_SUPPLY:
            raise MathOverflow(f"Supply {supply} exceeds MAX_SAFE_SUPPLY.")

        linear_term = base_price * supply
        slope_term = mul_div_wide(slope, supply * supply, 2 * PRECISION)
        return to_native(linear_term + slope_term)

    @staticmethod
    def supply_from_area(area: int, base_price: int, slope: int) -> int:
        """
        Inverse of curve_area: the largest supply whose area does not exceed 'area'.

        Solves (m / 2P)*s² + b*s - area = 0 with PRECISION folded into the
        discriminant to keep integer precision:
            s = (sqrt(P²b² + 2P*m*area) - P*b) / m
        """
        if area < 0 or area > U64_MAX:
            raise InvalidInput(f"Area {area} is outside the native range.")

        if slope == 0:
            if base_price == 0:
                raise DivisionByZero("Curve with zero base price and zero slope has no inverse.")
            return area // base_price

        scaled_base = PRECISION * base_price
        discriminant = scaled_base * scaled_base + 2 * PRECISION * slope * area
        root = sqrt(discriminant)
        if root < scaled_base:
            raise InvalidInput("Square root of the discriminant is below the base price term.")

        return to_native((root - scaled_base) // slope)

    @staticmethod
    def cost_between(start: int, end: int, base_price: int, slope: int) -> int:
        """Reserve needed to move supply from 'start' up to 'end'."""
        if end < start:
            raise InvalidInput(f"End supply {end} is below start supply {start}.")
        return (CurveMath.curve_area(end, base_price, slope)
                - CurveMath.curve_area(start, base_price, slope))

    @staticmethod
    def tokens_out(reserve_in: int, current_supply: int, base_price: int, slope: int) -> int:
        """
        Tokens minted along the curve for 'reserve_in' at 'current_supply'.
        Returns 0 when the input is too small to move the supply by one unit.
        """
        if reserve_in < 0:
            raise InvalidInput(f"Reserve input must be non-negative, got {reserve_in}.")

        start_area = CurveMath.curve_area(current_supply, base_price, slope)
        target_area = start_area + reserve_in
        if target_area > U64_MAX:
            raise MathOverflow(f"Target area {target_area} does not fit in 64 bits.")

        new_supply = CurveMath.supply_from_area(target_area, base_price, slope)
        if new_supply <= current_supply:
            return 0
        return new_supply - current_supply

    @staticmethod
    def reserve_out(tokens_in: int, current_supply: int, base_price: int, slope: int) -> int:
        """Reserve released by burning 'tokens_in' back down the curve."""
        if tokens_in < 0:
            raise InvalidInput(f"Token input must be non-negative, got {tokens_in}.")
        if tokens_in > current_supply:
            raise InvalidInput(f"Cannot sell {tokens_in} tokens from a supply of {current_supply}.")
        return CurveMath.cost_between(current_supply - tokens_in, current_supply, base_price, slope)
