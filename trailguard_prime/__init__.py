# TRAILGUARD PRIME - Trailing Stop Services
"""
TRAILGUARD PRIME: services around the trailing-stop pricing engine.

Core Components:
    - Event Bus: Async pub/sub communication
    - Order Coordinator: Settlement guard and ledger transfers
    - Keeper: Periodic stop updates
    - Replay: Backtesting over historical prices

Example:
    from trailguard_prime import ConfigManager, OrderCoordinator

    config = ConfigManager("config/paper.yaml")
    registry = config.build_registry()

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

from trailguard_prime.core.event_bus import EventBus, Event, EventType
from trailguard_prime.core.config_manager import ConfigManager
from trailguard_prime.core.coordinator import OrderCoordinator
from trailguard_prime.core.keeper import KeeperService

__version__ = "1.0.0"

__all__ = [
    "EventBus",
    "Event",
    "EventType",
    "ConfigManager",
    "OrderCoordinator",
    "KeeperService",
]
