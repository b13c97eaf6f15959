"""
Engine Runtime

Process-wide engine, coordinator and keeper used by the API.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from shared.trailguard_core.registry import EngineRegistry
from shared.trailguard_core.trailing_stop_engine import TrailingStopEngine
from trailguard_prime.api.config import settings
from trailguard_prime.core.config_manager import ConfigManager
from trailguard_prime.core.coordinator import OrderCoordinator
from trailguard_prime.core.event_bus import EventBus
from trailguard_prime.core.keeper import KeeperService
from trailguard_prime.plugins.ledger.paper_ledger import PaperLedger

logger = logging.getLogger("TRAILGUARD_Runtime")


@dataclass
class EngineRuntime:
    """Wired service graph."""

    config: ConfigManager
    registry: EngineRegistry
    engine: TrailingStopEngine
    ledger: PaperLedger
    event_bus: EventBus
    coordinator: OrderCoordinator
    keeper: KeeperService


def build_runtime(config: Optional[ConfigManager] = None) -> EngineRuntime:
    """Wire a runtime from configuration (settings.CONFIG_PATH when not given)."""
    if config is None:
        config = ConfigManager()
        if settings.CONFIG_PATH:
            if not config.load(settings.CONFIG_PATH):
                raise RuntimeError(f"Failed to load config: {settings.CONFIG_PATH}")
        else:
            config.load_dict({"engine": {"admin": settings.ADMIN_ID}})

    errors = config.validate()
    if errors:
        raise RuntimeError(f"Invalid configuration: {'; '.join(errors)}")

    registry = config.build_registry()
    engine = TrailingStopEngine(registry=registry)
    ledger = PaperLedger()
    event_bus = EventBus()
    coordinator = OrderCoordinator(engine, ledger, event_bus)
    keeper = KeeperService(
        coordinator,
        keeper_id=config.keeper.keeper_id,
        interval_sec=config.keeper.interval_sec,
    )

    return EngineRuntime(
        config=config,
        registry=registry,
        engine=engine,
        ledger=ledger,
        event_bus=event_bus,
        coordinator=coordinator,
        keeper=keeper,
    )


# Global runtime instance
_runtime: Optional[EngineRuntime] = None


def get_runtime() -> EngineRuntime:
    """Get the global runtime."""
    global _runtime
    if _runtime is None:
        _runtime = build_runtime()
    return _runtime


async def init_runtime():
    """Start the event bus and, when enabled, the keeper."""
    runtime = get_runtime()
    await runtime.event_bus.start()
    if settings.KEEPER_ENABLED:
        await runtime.keeper.start()
    logger.info(f"Runtime started: feeds={runtime.registry.list_feeds()}")


async def close_runtime():
    """Stop background services and drop the runtime."""
    global _runtime
    if _runtime:
        await _runtime.keeper.stop()
        await _runtime.event_bus.stop()
        _runtime = None
