"""
TRAILGUARD v1.0 - Engine Registry
==================================

Global, rarely-changed configuration shared by every order:
    - Oracle heartbeat table (per feed id)
    - Feed directory (feed id -> feed handle)
    - Swap-router allow-list
    - Operator set (may remove any order)

The registry is injected into the engine rather than living as a module
global. Reads are open; every write requires the admin identity.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from .constants import DEFAULT_ORACLE_HEARTBEAT_SEC
from .exceptions import ConfigurationInvalidError, UnauthorizedError
from .oracle_adapter import PriceFeed

logger = logging.getLogger("TRAILGUARD_Registry")


class EngineRegistry:
    """
    Privileged-write / many-reader configuration object.

    Example:
        registry = EngineRegistry(admin="ops")
        registry.register_feed("ops", eth_usd_feed)
        registry.set_heartbeat("ops", "ETH/USD", 3600)

        registry.heartbeat_for("ETH/USD")   # 3600
        registry.heartbeat_for("BTC/USD")   # default (4h)
    """

    def __init__(
        self,
        admin: str,
        default_heartbeat_sec: int = DEFAULT_ORACLE_HEARTBEAT_SEC,
        operators: Optional[Iterable[str]] = None,
        routers: Optional[Iterable[str]] = None,
    ):
        if not admin:
            raise ConfigurationInvalidError("Registry admin must be set", field="admin")
        if default_heartbeat_sec <= 0:
            raise ConfigurationInvalidError(
                f"Default heartbeat must be positive: {default_heartbeat_sec}",
                field="default_heartbeat_sec",
                value=default_heartbeat_sec,
            )

        self._admin = admin
        self._default_heartbeat_sec = default_heartbeat_sec
        self._heartbeats: Dict[str, int] = {}
        self._feeds: Dict[str, PriceFeed] = {}
        self._routers: Set[str] = set(routers or [])
        self._operators: Set[str] = set(operators or [])

        logger.info(
            f"EngineRegistry initialized: admin={admin}, "
            f"default_heartbeat={default_heartbeat_sec}s, "
            f"routers={len(self._routers)}, operators={len(self._operators)}"
        )

    @property
    def admin(self) -> str:
        """Identity allowed to write."""
        return self._admin

    def _require_admin(self, caller: Optional[str]) -> None:
        if caller != self._admin:
            logger.warning(f"Registry write rejected for caller={caller}")
            raise UnauthorizedError(
                f"Caller {caller} may not modify the registry",
                caller=caller,
            )

    # ==================== Heartbeats ====================

    def set_heartbeat(self, caller: str, feed_id: str, heartbeat_sec: int) -> None:
        """Set the staleness heartbeat for one feed."""
        self._require_admin(caller)
        if heartbeat_sec <= 0:
            raise ConfigurationInvalidError(
                f"Heartbeat must be positive: {heartbeat_sec}",
                field="heartbeat_sec",
                value=heartbeat_sec,
            )
        self._heartbeats[feed_id] = heartbeat_sec
        logger.info(f"Heartbeat set: {feed_id} -> {heartbeat_sec}s")

    def heartbeat_for(self, feed_id: str) -> int:
        """Heartbeat for a feed, falling back to the default."""
        return self._heartbeats.get(feed_id, self._default_heartbeat_sec)

    # ==================== Feeds ====================

    def register_feed(self, caller: str, feed: PriceFeed) -> None:
        """Add a feed to the directory."""
        self._require_admin(caller)
        if not isinstance(feed, PriceFeed):
            raise ConfigurationInvalidError(
                f"Object does not implement the price feed interface: {feed!r}",
                field="feed",
            )
        self._feeds[feed.feed_id] = feed
        logger.info(f"Feed registered: {feed.feed_id} (decimals={feed.decimals()})")

    def get_feed(self, feed_id: str) -> Optional[PriceFeed]:
        """Look up a feed by id."""
        return self._feeds.get(feed_id)

    def list_feeds(self) -> List[str]:
        """Registered feed ids."""
        return sorted(self._feeds)

    # ==================== Routers ====================

    def allow_router(self, caller: str, router: str) -> None:
        """Add a swap router to the allow-list."""
        self._require_admin(caller)
        self._routers.add(router)
        logger.info(f"Router allowed: {router}")

    def revoke_router(self, caller: str, router: str) -> None:
        """Remove a swap router from the allow-list."""
        self._require_admin(caller)
        self._routers.discard(router)
        logger.info(f"Router revoked: {router}")

    def is_router_allowed(self, router: str) -> bool:
        return router in self._routers

    # ==================== Operators ====================

    def add_operator(self, caller: str, operator: str) -> None:
        self._require_admin(caller)
        self._operators.add(operator)
        logger.info(f"Operator added: {operator}")

    def remove_operator(self, caller: str, operator: str) -> None:
        self._require_admin(caller)
        self._operators.discard(operator)
        logger.info(f"Operator removed: {operator}")

    def is_operator(self, identity: Optional[str]) -> bool:
        return identity is not None and (identity in self._operators or identity == self._admin)

    def get_info(self) -> Dict[str, Any]:
        """Get registry summary."""
        return {
            "admin": self._admin,
            "default_heartbeat_sec": self._default_heartbeat_sec,
            "heartbeats": dict(self._heartbeats),
            "feeds": self.list_feeds(),
            "routers": sorted(self._routers),
            "operators": sorted(self._operators),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "EngineRegistry",
]
