from launchpad_core.collaborators.registry import PoolRegistry
from launchpad_core.common.model import TokenMetadata
from launchpad_core.pool.authority import MintingAuthority
from launchpad_core.pool.config import init_platform
from launchpad_core.pool.events import EventBus, Graduated, PauseChanged
from launchpad_core.pool.trading_pool import TradingPool


def _create(config, bus, symbol):
    pool, _ = TradingPool.create(
        config, MintingAuthority(symbol), TokenMetadata(symbol.title(), symbol), "creator", 0, 0, event_bus=bus
    )
    return pool


def test_registry_records_creations():
    config, _ = init_platform()
    bus = EventBus()
    registry = PoolRegistry()
    registry.attach(bus)

    frog = _create(config, bus, "FROG")
    moon = _create(config, bus, "MOON")

    assert len(registry) == 2
    assert frog.id in registry
    entry = registry.get(moon.id)
    assert entry.symbol == "MOON"
    assert entry.asset_type == "MOON"
    assert entry.creator == "creator"
    assert not entry.graduated


def test_find_by_symbol_is_case_insensitive():
    config, _ = init_platform()
    bus = EventBus()
    registry = PoolRegistry()
    registry.attach(bus)

    first = _create(config, bus, "FROG")
    second = _create(config, bus, "FROG")

    found = registry.find_by_symbol("frog")
    assert [e.pool_id for e in found] == [first.id, second.id]
    assert registry.find_by_symbol("NOPE") == []


def test_graduation_moves_entry():
    config, _ = init_platform()
    bus = EventBus()
    registry = PoolRegistry()
    registry.attach(bus)
    pool = _create(config, bus, "FROG")

    bus.emit(Graduated(pool_id=pool.id, symbol="FROG", reserve_extracted=1, tokens_extracted=2, market_cap=3))

    assert registry.get(pool.id).graduated
    assert registry.get(pool.id).graduated_at is not None
    assert registry.active() == []
    assert [e.pool_id for e in registry.graduated()] == [pool.id]


def test_unknown_graduation_and_other_events_are_ignored():
    registry = PoolRegistry()
    registry.handle(Graduated(pool_id="ghost", symbol="X", reserve_extracted=0, tokens_extracted=0, market_cap=0))
    registry.handle(PauseChanged(pool_id="ghost", paused=True))
    assert len(registry) == 0


def test_registry_failure_does_not_break_trading():
    config, _ = init_platform(trading_fee_bps=0)
    bus = EventBus()

    def broken_registry(event):
        raise ConnectionError("registry unreachable")

    bus.subscribe(broken_registry)
    pool = _create(config, bus, "FROG")
    result = pool.buy(config, 1_000_000)

    assert result.token_amount > 0
    assert pool.trade_count == 1
