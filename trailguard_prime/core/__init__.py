# TRAILGUARD PRIME Core Infrastructure
"""
Core services around the trailing-stop engine.

Modules:
    event_bus: Async event-driven communication
    config_manager: Configuration management
    coordinator: Settlement coordination and event forwarding
    keeper: Periodic stop updates
    replay: Historical price replay
"""

from .event_bus import EventBus, Event, EventType
from .config_manager import ConfigManager
from .coordinator import OrderCoordinator
from .keeper import KeeperService
from .replay import ManualClock, ReplayConfig, StopReplay

__all__ = [
    "EventBus",
    "Event",
    "EventType",
    "ConfigManager",
    "OrderCoordinator",
    "KeeperService",
    "ManualClock",
    "ReplayConfig",
    "StopReplay",
]
