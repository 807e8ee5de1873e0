import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from launchpad_core.common.enums import EventType, OrderSide, WithdrawalAsset


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolCreated:
    pool_id: str
    asset_type: str
    name: str
    symbol: str
    creator: str
    total_supply: int
    platform_allocation: int
    creator_fee_bps: int
    timestamp: datetime = field(default_factory=datetime.now)
    event_type: EventType = EventType.POOL_CREATED


@dataclass(frozen=True)
class Trade:
    pool_id: str
    side: OrderSide
    trader: Optional[str]
    token_amount: int
    reserve_amount: int
    platform_fee: int
    creator_fee: int
    price_after: int
    circulating_after: int
    timestamp: datetime = field(default_factory=datetime.now)
    event_type: EventType = EventType.TRADE


@dataclass(frozen=True)
class PauseChanged:
    pool_id: str
    paused: bool
    timestamp: datetime = field(default_factory=datetime.now)
    event_type: EventType = EventType.PAUSE_CHANGED


@dataclass(frozen=True)
class EmergencyWithdrawal:
    pool_id: str
    asset: WithdrawalAsset
    amount: int
    timestamp: datetime = field(default_factory=datetime.now)
    event_type: EventType = EventType.EMERGENCY_WITHDRAWAL


@dataclass(frozen=True)
class Graduated:
    pool_id: str
    symbol: str
    reserve_extracted: int
    tokens_extracted: int
    market_cap: int
    timestamp: datetime = field(default_factory=datetime.now)
    event_type: EventType = EventType.GRADUATED


Subscriber = Callable[[Any], None]


class EventBus:
    """
    Best-effort fan-out of structured event records. A failing subscriber is
    logged and skipped; it never affects the operation that emitted the event.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber):
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event: Any):
        if logger.isEnabledFor(logging.INFO):
            logger.info("%s %s", event.event_type, event_to_dict(event))
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber %r failed on %s", callback, event.event_type)


class EventRecorder:
    """Subscriber that keeps every event in memory, in emission order."""

    def __init__(self):
        self.events: List[Any] = []

    def __call__(self, event: Any):
        self.events.append(event)

    def of_type(self, event_type: EventType) -> List[Any]:
        return [e for e in self.events if e.event_type == event_type]


def event_to_dict(event: Any) -> Dict[str, Any]:
    """JSON-friendly representation of an event record."""
    data = asdict(event)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, (EventType, OrderSide, WithdrawalAsset)):
            data[key] = value.name
    return data


default_bus = EventBus()
