import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from launchpad_core.common.errors import FeeTooHigh, InvalidConfig, Unauthorized
from launchpad_core.common.math import BPS_DENOMINATOR, U64_MAX
from launchpad_core.common.model import CurveParameters


logger = logging.getLogger(__name__)

MAX_TRADING_FEE_BPS = 500
MAX_CREATOR_FEE_BPS = 500

DEFAULT_TOTAL_SUPPLY = 1_000_000_000_000
DEFAULT_BASE_PRICE = 1
DEFAULT_SLOPE = 10_000

_ISSUER = object()


class AdminCap:
    """
    Opaque capability proving administrative rights over one platform config.
    Only init_platform can issue one; holding the object is the authorization.
    """
    __slots__ = ("_config_id",)

    def __init__(self, config_id: str, _issuer: object = None):
        if _issuer is not _ISSUER:
            raise TypeError("AdminCap can only be issued by init_platform().")
        self._config_id = config_id

    @property
    def config_id(self) -> str:
        return self._config_id

    def __repr__(self):
        return f"AdminCap(config_id={self._config_id!r})"


def require_admin(cap: Any, config_id: str):
    """Raises Unauthorized unless 'cap' is an AdminCap bound to 'config_id'."""
    if not isinstance(cap, AdminCap) or cap.config_id != config_id:
        raise Unauthorized("A matching AdminCap is required for this operation.")


@dataclass
class PlatformConfig:
    """
    Platform-wide settings read by every pool. Only the holder of the matching
    AdminCap may change them after init_platform().
    """
    treasury: str = "treasury"
    trading_fee_bps: int = 100
    creation_fee: int = 0
    platform_allocation_bps: int = 0
    graduation_threshold: int = 1_000_000_000
    min_graduation_liquidity: int = 100_000_000_000_000_000
    token_total_supply: int = DEFAULT_TOTAL_SUPPLY
    curve: CurveParameters = field(
        default_factory=lambda: CurveParameters(base_price=DEFAULT_BASE_PRICE, slope=DEFAULT_SLOPE)
    )
    paused: bool = False
    id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self):
        if not self.treasury:
            raise InvalidConfig("Treasury address is required.")
        if not 0 <= self.trading_fee_bps <= MAX_TRADING_FEE_BPS:
            raise FeeTooHigh(f"Trading fee must be between 0 and {MAX_TRADING_FEE_BPS} bps.")
        if self.creation_fee < 0 or self.creation_fee > U64_MAX:
            raise InvalidConfig("Creation fee must fit in 64 bits and be non-negative.")
        if not 0 <= self.platform_allocation_bps < BPS_DENOMINATOR:
            raise InvalidConfig(f"Platform allocation must be below {BPS_DENOMINATOR} bps.")
        if not 0 < self.token_total_supply <= U64_MAX:
            raise InvalidConfig("Token total supply must be positive and fit in 64 bits.")
        if self.graduation_threshold < 0 or self.min_graduation_liquidity < 0:
            raise InvalidConfig("Graduation thresholds must be non-negative.")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformConfig":
        """
        Builds a config from a plain mapping, e.g. parsed JSON. Unknown keys are
        rejected so typos never fall back to defaults silently.
        """
        data = dict(data)
        curve_data = data.pop("curve", None)
        allowed = {
            "treasury", "trading_fee_bps", "creation_fee", "platform_allocation_bps",
            "graduation_threshold", "min_graduation_liquidity", "token_total_supply", "paused",
        }
        unknown = set(data) - allowed
        if unknown:
            raise InvalidConfig(f"Unknown config keys: {sorted(unknown)}")
        if curve_data is not None:
            data["curve"] = CurveParameters(
                base_price=int(curve_data.get("base_price", DEFAULT_BASE_PRICE)),
                slope=int(curve_data.get("slope", DEFAULT_SLOPE)),
            )
        return cls(**data)

    def set_platform_paused(self, cap: AdminCap, paused: bool):
        require_admin(cap, self.id)
        self.paused = paused
        logger.info("Platform %s paused=%s", self.id, paused)

    def update_fees(self, cap: AdminCap, trading_fee_bps: Optional[int] = None,
                    creation_fee: Optional[int] = None):
        require_admin(cap, self.id)
        if trading_fee_bps is not None:
            if not 0 <= trading_fee_bps <= MAX_TRADING_FEE_BPS:
                raise FeeTooHigh(f"Trading fee must be between 0 and {MAX_TRADING_FEE_BPS} bps.")
            self.trading_fee_bps = trading_fee_bps
        if creation_fee is not None:
            if creation_fee < 0 or creation_fee > U64_MAX:
                raise InvalidConfig("Creation fee must fit in 64 bits and be non-negative.")
            self.creation_fee = creation_fee
        logger.info("Platform %s fees updated: trading=%s bps, creation=%s",
                    self.id, self.trading_fee_bps, self.creation_fee)

    def update_graduation(self, cap: AdminCap, graduation_threshold: int, min_graduation_liquidity: int):
        require_admin(cap, self.id)
        if graduation_threshold < 0 or min_graduation_liquidity < 0:
            raise InvalidConfig("Graduation thresholds must be non-negative.")
        self.graduation_threshold = graduation_threshold
        self.min_graduation_liquidity = min_graduation_liquidity


def _issue(config: PlatformConfig) -> Tuple[PlatformConfig, AdminCap]:
    cap = AdminCap(config.id, _issuer=_ISSUER)
    logger.info("Platform %s initialised (treasury=%s)", config.id, config.treasury)
    return config, cap


def init_platform(**kwargs) -> Tuple[PlatformConfig, AdminCap]:
    """
    Creates the platform configuration and the one AdminCap that controls it.
    Keyword arguments are forwarded to PlatformConfig.
    """
    return _issue(PlatformConfig(**kwargs))


def load_platform(data: Dict[str, Any]) -> Tuple[PlatformConfig, AdminCap]:
    """Same as init_platform, from a plain mapping such as a parsed JSON file."""
    return _issue(PlatformConfig.from_dict(data))
