import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from launchpad_core.common.errors import GraduationNotReady
from launchpad_core.pool.config import AdminCap, PlatformConfig, require_admin
from launchpad_core.pool.events import EventBus, Graduated
from launchpad_core.pool.trading_pool import TradingPool


logger = logging.getLogger(__name__)


@dataclass
class MigrationTicket:
    """Everything an external exchange adapter needs to seed liquidity for a graduated pool."""
    pool_id: str
    asset_type: str
    symbol: str
    reserve_amount: int
    token_amount: int
    final_price: int
    market_cap: int
    timestamp: datetime = field(default_factory=datetime.now)


class GraduationManager:
    """
    Retires a pool from the curve once it is ready to graduate.

    Graduation is only allowed with the platform AdminCap and only when
    check_graduation_ready() holds. The pool is marked graduated first, which
    shuts trading, and then both balances are drained in full; the resulting
    ticket is handed to whatever performs the migration.
    """

    def __init__(self, config: PlatformConfig, event_bus: Optional[EventBus] = None):
        self.config = config
        self._event_bus = event_bus

    def graduate(self, pool: TradingPool, cap: AdminCap) -> MigrationTicket:
        require_admin(cap, self.config.id)
        if not pool.check_graduation_ready(self.config):
            raise GraduationNotReady(
                f"Pool {pool.symbol} is not ready: market cap {pool.market_cap()} "
                f"(threshold {self.config.graduation_threshold}), reserve {pool.reserve_balance} "
                f"(minimum {self.config.min_graduation_liquidity})."
            )

        final_price = pool.price()
        market_cap = pool.market_cap()
        pool.set_graduated(cap)
        reserve_amount = pool.extract_reserve(cap)
        token_amount = pool.extract_unsold(cap)

        ticket = MigrationTicket(
            pool_id=pool.id,
            asset_type=pool.asset_type,
            symbol=pool.symbol,
            reserve_amount=reserve_amount,
            token_amount=token_amount,
            final_price=final_price,
            market_cap=market_cap,
        )
        logger.info("Pool %s graduated with %s reserve and %s tokens", pool.id, reserve_amount, token_amount)

        bus = self._event_bus or pool.event_bus
        bus.emit(Graduated(
            pool_id=pool.id,
            symbol=pool.symbol,
            reserve_extracted=reserve_amount,
            tokens_extracted=token_amount,
            market_cap=market_cap,
        ))
        return ticket
