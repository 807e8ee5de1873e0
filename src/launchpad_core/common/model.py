from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from launchpad_core.common.enums import OrderSide
from launchpad_core.common.math import U64_MAX


@dataclass(frozen=True)
class CurveParameters:
    """Fixed-point parameters of the linear price function, both scaled by PRECISION."""
    base_price: int
    slope: int

    def __post_init__(self):
        if self.base_price < 0:
            raise ValueError("Base price must be non-negative.")
        if self.slope < 0:
            raise ValueError("Slope must be non-negative.")
        if self.base_price > U64_MAX or self.slope > U64_MAX:
            raise ValueError("Curve parameters must fit in 64 bits.")
        if self.base_price == 0 and self.slope == 0:
            raise ValueError("A curve needs a non-zero base price or slope.")


@dataclass
class TokenMetadata:
    """Display information for the project asset."""
    name: str
    symbol: str
    decimals: int = 6
    description: Optional[str] = None
    icon_url: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Token name is required.")
        if not self.symbol:
            raise ValueError("Token symbol is required.")
        if self.decimals < 0:
            raise ValueError("Decimals must be non-negative.")


@dataclass
class TradeResult:
    """Outcome of an executed buy or sell."""
    side: OrderSide
    token_amount: int
    gross_reserve: int
    platform_fee: int
    creator_fee: int
    net_reserve: int
    new_supply: int
    new_price: int
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def average_price(self) -> Decimal:
        """Net reserve per whole token moved, in reserve units (not PRECISION-scaled)."""
        if self.token_amount == 0:
            return Decimal("0")
        return Decimal(self.net_reserve) / Decimal(self.token_amount)


@dataclass
class TradeEstimate:
    """Quote for a trade at the current pool state; nothing is executed."""
    side: OrderSide
    token_amount: int
    gross_reserve: int
    platform_fee: int
    creator_fee: int
    net_reserve: int
    price_before: int
    price_after: int

    @property
    def price_impact_bps(self) -> int:
        if self.price_before == 0:
            return 0
        delta = abs(self.price_after - self.price_before)
        return delta * 10_000 // self.price_before


@dataclass
class CreationReceipt:
    """How the creation payment and the freshly minted supply were split."""
    pool_id: str
    minted_supply: int
    platform_allocation: int
    creation_fee: int
    refund: int
    treasury: str
