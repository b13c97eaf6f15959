# TRAILGUARD_FEAT: config-manager-001
"""
TRAILGUARD PRIME - Configuration Manager
========================================

Centralized configuration for the trailing-stop services.

Features:
- YAML/JSON configuration loading
- Environment variable overrides (TRAILGUARD_ENGINE__ADMIN=ops)
- Configuration validation against engine bounds
- Builds the injected EngineRegistry

Example config:

    mode: paper
    engine:
      admin: ops
      default_heartbeat_sec: 14400
      heartbeats: {"ETH/USD": 3600}
      operators: [risk-desk]
      routers: [router-1]
    orders:
      update_frequency_sec: 60
      twap_window_sec: 900
    keeper:
      interval_sec: 60
      keeper_id: keeper-1
    feeds:
      - {feed_id: "ETH/USD", decimals: 8, price: 2000.0}

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from shared.trailguard_core.constants import (
    DEFAULT_ORACLE_HEARTBEAT_SEC,
    MAX_PRICE_DEVIATION_BPS,
    MAX_SLIPPAGE_BPS,
    MAX_TRAILING_DISTANCE_BPS,
    MAX_TWAP_WINDOW_SEC,
    MIN_TRAILING_DISTANCE_BPS,
    MIN_TWAP_WINDOW_SEC,
)
from shared.trailguard_core.oracle_adapter import Clock, system_clock
from shared.trailguard_core.registry import EngineRegistry

logger = logging.getLogger("TRAILGUARD_ConfigManager")


@dataclass
class EngineConfig:
    """Global engine configuration."""

    admin: str = "admin"
    default_heartbeat_sec: int = DEFAULT_ORACLE_HEARTBEAT_SEC
    heartbeats: Dict[str, int] = field(default_factory=dict)
    operators: List[str] = field(default_factory=list)
    routers: List[str] = field(default_factory=list)


@dataclass
class OrderDefaults:
    """Defaults applied to order parameters not supplied by the caller."""

    trailing_distance_bps: int = 200
    update_frequency_sec: int = 60
    max_slippage_bps: int = 100
    max_price_deviation_bps: int = 500
    twap_window_sec: int = 900


@dataclass
class KeeperConfig:
    """Keeper loop configuration."""

    interval_sec: float = 60.0
    keeper_id: str = "keeper"


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""

    log_level: str = "INFO"


@dataclass
class FeedConfig:
    """Paper price feed definition."""

    feed_id: str
    decimals: int = 8
    price: float = 0.0


@dataclass
class SystemConfig:
    """Complete system configuration."""

    mode: str = "paper"  # paper, live
    engine: EngineConfig = field(default_factory=EngineConfig)
    orders: OrderDefaults = field(default_factory=OrderDefaults)
    keeper: KeeperConfig = field(default_factory=KeeperConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    feeds: List[FeedConfig] = field(default_factory=list)


class ConfigManager:
    """
    Configuration manager for TRAILGUARD PRIME.

    Example:
        config_manager = ConfigManager()
        config_manager.load("config/paper.yaml")

        window = config_manager.get("orders.twap_window_sec")
        registry = config_manager.build_registry()
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path
        self._config: SystemConfig = SystemConfig()
        self._raw_config: Dict[str, Any] = {}
        self._loaded_at: Optional[datetime] = None
        self._env_prefix = "TRAILGUARD_"

        if config_path:
            self.load(config_path)

        logger.info("ConfigManager initialized")

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load configuration from file.

        Args:
            path: Path to config file (YAML or JSON)

        Returns:
            True if loaded successfully
        """
        path = Path(path)

        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return False

        try:
            with open(path, "r") as f:
                if path.suffix in [".yaml", ".yml"]:
                    self._raw_config = yaml.safe_load(f) or {}
                elif path.suffix == ".json":
                    self._raw_config = json.load(f)
                else:
                    logger.error(f"Unsupported config format: {path.suffix}")
                    return False

            self._apply_env_overrides()
            self._parse_config()

            self._config_path = path
            self._loaded_at = datetime.now(timezone.utc)
            logger.info(f"Configuration loaded from: {path}")
            return True

        except (OSError, yaml.YAMLError, json.JSONDecodeError, TypeError, ValueError) as e:
            logger.error(f"Failed to load config: {e}")
            return False

    def load_dict(self, raw: Dict[str, Any]) -> None:
        """Load configuration from an in-memory mapping."""
        self._raw_config = dict(raw)
        self._apply_env_overrides()
        self._parse_config()
        self._loaded_at = datetime.now(timezone.utc)

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for key, value in os.environ.items():
            if key.startswith(self._env_prefix):
                config_key = key[len(self._env_prefix):].lower().replace("__", ".")
                self._set_nested(config_key, self._parse_value(value))

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _set_nested(self, key: str, value: Any) -> None:
        """Set a nested config value using dot notation."""
        parts = key.split(".")
        current = self._raw_config

        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def _parse_config(self) -> None:
        """Parse raw config into structured config."""
        raw = self._raw_config
        defaults = SystemConfig()

        self._config = SystemConfig(mode=raw.get("mode", "paper"))

        if "engine" in raw:
            e = raw["engine"] or {}
            self._config.engine = EngineConfig(
                admin=str(e.get("admin", defaults.engine.admin)),
                default_heartbeat_sec=int(
                    e.get("default_heartbeat_sec", defaults.engine.default_heartbeat_sec)
                ),
                heartbeats={str(k): int(v) for k, v in (e.get("heartbeats") or {}).items()},
                operators=list(e.get("operators") or []),
                routers=list(e.get("routers") or []),
            )

        if "orders" in raw:
            o = raw["orders"] or {}
            d = defaults.orders
            self._config.orders = OrderDefaults(
                trailing_distance_bps=int(o.get("trailing_distance_bps", d.trailing_distance_bps)),
                update_frequency_sec=int(o.get("update_frequency_sec", d.update_frequency_sec)),
                max_slippage_bps=int(o.get("max_slippage_bps", d.max_slippage_bps)),
                max_price_deviation_bps=int(
                    o.get("max_price_deviation_bps", d.max_price_deviation_bps)
                ),
                twap_window_sec=int(o.get("twap_window_sec", d.twap_window_sec)),
            )

        if "keeper" in raw:
            k = raw["keeper"] or {}
            self._config.keeper = KeeperConfig(
                interval_sec=float(k.get("interval_sec", defaults.keeper.interval_sec)),
                keeper_id=str(k.get("keeper_id", defaults.keeper.keeper_id)),
            )

        if "monitoring" in raw:
            m = raw["monitoring"] or {}
            self._config.monitoring = MonitoringConfig(
                log_level=str(m.get("log_level", defaults.monitoring.log_level)),
            )

        self._config.feeds = [
            FeedConfig(
                feed_id=str(f["feed_id"]),
                decimals=int(f.get("decimals", 8)),
                price=float(f.get("price", 0.0)),
            )
            for f in raw.get("feeds") or []
        ]

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Dot-notation key (e.g., "orders.twap_window_sec")
            default: Default value if not found
        """
        parts = key.split(".")
        current = self._raw_config

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only)."""
        self._set_nested(key, value)
        self._parse_config()

    @property
    def config(self) -> SystemConfig:
        return self._config

    @property
    def engine(self) -> EngineConfig:
        return self._config.engine

    @property
    def orders(self) -> OrderDefaults:
        return self._config.orders

    @property
    def keeper(self) -> KeeperConfig:
        return self._config.keeper

    @property
    def monitoring(self) -> MonitoringConfig:
        return self._config.monitoring

    @property
    def is_paper(self) -> bool:
        return self._config.mode == "paper"

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        cfg = self._config

        if cfg.mode not in ["paper", "live"]:
            errors.append("mode must be 'paper' or 'live'")

        if not cfg.engine.admin:
            errors.append("engine.admin must be set")

        if cfg.engine.default_heartbeat_sec <= 0:
            errors.append("engine.default_heartbeat_sec must be > 0")

        for feed_id, heartbeat in cfg.engine.heartbeats.items():
            if heartbeat <= 0:
                errors.append(f"engine.heartbeats.{feed_id} must be > 0")

        o = cfg.orders
        if not MIN_TRAILING_DISTANCE_BPS <= o.trailing_distance_bps <= MAX_TRAILING_DISTANCE_BPS:
            errors.append(
                f"orders.trailing_distance_bps must be in "
                f"[{MIN_TRAILING_DISTANCE_BPS}, {MAX_TRAILING_DISTANCE_BPS}]"
            )
        if o.update_frequency_sec < 0:
            errors.append("orders.update_frequency_sec must be >= 0")
        if not 0 <= o.max_slippage_bps <= MAX_SLIPPAGE_BPS:
            errors.append(f"orders.max_slippage_bps must be in [0, {MAX_SLIPPAGE_BPS}]")
        if not 0 <= o.max_price_deviation_bps <= MAX_PRICE_DEVIATION_BPS:
            errors.append(
                f"orders.max_price_deviation_bps must be in [0, {MAX_PRICE_DEVIATION_BPS}]"
            )
        if not MIN_TWAP_WINDOW_SEC <= o.twap_window_sec <= MAX_TWAP_WINDOW_SEC:
            errors.append(
                f"orders.twap_window_sec must be in [{MIN_TWAP_WINDOW_SEC}, {MAX_TWAP_WINDOW_SEC}]"
            )

        if cfg.keeper.interval_sec <= 0:
            errors.append("keeper.interval_sec must be > 0")

        if cfg.monitoring.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            errors.append("monitoring.log_level must be DEBUG, INFO, WARNING or ERROR")

        for feed in cfg.feeds:
            if feed.price <= 0:
                errors.append(f"feeds.{feed.feed_id}.price must be > 0")
            if not 0 <= feed.decimals <= 36:
                errors.append(f"feeds.{feed.feed_id}.decimals must be in [0, 36]")

        if cfg.mode == "live" and cfg.feeds:
            errors.append("paper feeds are not allowed in live mode")

        return errors

    def build_registry(self, clock: Clock = system_clock) -> EngineRegistry:
        """
        Build the engine registry from configuration.

        In paper mode, configured feeds are registered as PaperPriceFeeds
        stamped by `clock`.
        """
        from trailguard_prime.plugins.feeds.paper_feed import PaperPriceFeed

        e = self._config.engine
        registry = EngineRegistry(
            admin=e.admin,
            default_heartbeat_sec=e.default_heartbeat_sec,
            operators=e.operators,
            routers=e.routers,
        )

        for feed_id, heartbeat in e.heartbeats.items():
            registry.set_heartbeat(e.admin, feed_id, heartbeat)

        if self.is_paper:
            for feed_cfg in self._config.feeds:
                feed = PaperPriceFeed(feed_cfg.feed_id, decimals=feed_cfg.decimals, clock=clock)
                feed.set_price(feed_cfg.price)
                registry.register_feed(e.admin, feed)

        return registry

    def get_info(self) -> Dict[str, Any]:
        """Get configuration info."""
        return {
            "path": str(self._config_path) if self._config_path else None,
            "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            "mode": self._config.mode,
            "feeds": [f.feed_id for f in self._config.feeds],
            "validation_errors": self.validate(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "EngineConfig",
    "OrderDefaults",
    "KeeperConfig",
    "MonitoringConfig",
    "FeedConfig",
    "SystemConfig",
    "ConfigManager",
]
