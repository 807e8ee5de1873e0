import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from launchpad_core.common.enums import EventType
from launchpad_core.pool.events import EventBus


logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    pool_id: str
    asset_type: str
    name: str
    symbol: str
    creator: str
    created_at: datetime
    graduated: bool = False
    graduated_at: Optional[datetime] = None


class PoolRegistry:
    """
    Discovery index fed from pool events. The core never waits on it; it is
    attached to an EventBus and simply ignores events it has no use for.
    """

    def __init__(self):
        self._entries: Dict[str, RegistryEntry] = {}
        self._by_symbol: Dict[str, List[str]] = {}

    def attach(self, bus: EventBus):
        bus.subscribe(self.handle)

    def handle(self, event: Any):
        if event.event_type == EventType.POOL_CREATED:
            self._register(event)
        elif event.event_type == EventType.GRADUATED:
            self._mark_graduated(event)

    def _register(self, event):
        entry = RegistryEntry(
            pool_id=event.pool_id,
            asset_type=event.asset_type,
            name=event.name,
            symbol=event.symbol,
            creator=event.creator,
            created_at=event.timestamp,
        )
        self._entries[event.pool_id] = entry
        self._by_symbol.setdefault(event.symbol.upper(), []).append(event.pool_id)
        logger.debug("Registered pool %s (%s)", event.pool_id, event.symbol)

    def _mark_graduated(self, event):
        entry = self._entries.get(event.pool_id)
        if entry is None:
            logger.warning("Graduation for unknown pool %s", event.pool_id)
            return
        entry.graduated = True
        entry.graduated_at = event.timestamp

    def get(self, pool_id: str) -> Optional[RegistryEntry]:
        return self._entries.get(pool_id)

    def find_by_symbol(self, symbol: str) -> List[RegistryEntry]:
        return [self._entries[pid] for pid in self._by_symbol.get(symbol.upper(), [])]

    def active(self) -> List[RegistryEntry]:
        return [e for e in self._entries.values() if not e.graduated]

    def graduated(self) -> List[RegistryEntry]:
        return [e for e in self._entries.values() if e.graduated]

    def __len__(self):
        return len(self._entries)

    def __contains__(self, pool_id):
        return pool_id in self._entries
