from typing import List

from launchpad_core.common.enums import Badge
from launchpad_core.pool.config import PlatformConfig
from launchpad_core.pool.trading_pool import TradingPool


LOW_CREATOR_FEE_BPS = 100
ACTIVE_TRADING_MIN_TRADES = 100


def compute_badges(pool: TradingPool, config: PlatformConfig) -> List[Badge]:
    """
    Cosmetic trust signals derived from read-only pool and platform state.
    Badges are recomputed on every call; nothing here writes back.
    """
    badges = []
    if pool.minting_authority_revoked:
        badges.append(Badge.FIXED_SUPPLY)

    if pool.creator_fee_bps == 0:
        badges.append(Badge.ZERO_CREATOR_FEE)
    elif pool.creator_fee_bps <= LOW_CREATOR_FEE_BPS:
        badges.append(Badge.LOW_CREATOR_FEE)

    if pool.trade_count >= ACTIVE_TRADING_MIN_TRADES:
        badges.append(Badge.ACTIVE_TRADING)

    if pool.graduated:
        badges.append(Badge.GRADUATED)
    elif pool.config_id == config.id and pool.check_graduation_ready(config):
        badges.append(Badge.GRADUATION_READY)

    return badges
