"""
Tests for Engine Registry
=========================

Tests admin-gated writes and open reads of global configuration.
"""

import pytest

from shared.trailguard_core.constants import DEFAULT_ORACLE_HEARTBEAT_SEC
from shared.trailguard_core.exceptions import ConfigurationInvalidError, UnauthorizedError
from shared.trailguard_core.registry import EngineRegistry


class TestConstruction:
    """Tests for registry construction."""

    def test_admin_required(self):
        with pytest.raises(ConfigurationInvalidError):
            EngineRegistry(admin="")

    def test_default_heartbeat_must_be_positive(self):
        with pytest.raises(ConfigurationInvalidError):
            EngineRegistry(admin="admin", default_heartbeat_sec=0)


class TestWrites:
    """Tests for privileged writes."""

    def test_admin_sets_heartbeat(self, registry):
        registry.set_heartbeat("admin", "ETH/USD", 3600)
        assert registry.heartbeat_for("ETH/USD") == 3600
        assert registry.heartbeat_for("BTC/USD") == DEFAULT_ORACLE_HEARTBEAT_SEC

    def test_non_admin_rejected(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.set_heartbeat("ops", "ETH/USD", 3600)
        with pytest.raises(UnauthorizedError):
            registry.allow_router("mallory", "router-2")

    def test_non_positive_heartbeat_rejected(self, registry):
        with pytest.raises(ConfigurationInvalidError):
            registry.set_heartbeat("admin", "ETH/USD", 0)

    def test_register_rejects_non_feed(self, registry):
        with pytest.raises(ConfigurationInvalidError):
            registry.register_feed("admin", object())

    def test_router_allow_and_revoke(self, registry):
        registry.allow_router("admin", "router-2")
        assert registry.is_router_allowed("router-2")
        registry.revoke_router("admin", "router-2")
        assert not registry.is_router_allowed("router-2")

    def test_operators(self, registry):
        registry.add_operator("admin", "desk")
        assert registry.is_operator("desk")
        registry.remove_operator("admin", "desk")
        assert not registry.is_operator("desk")


class TestReads:
    """Tests for open reads."""

    def test_admin_counts_as_operator(self, registry):
        assert registry.is_operator("admin")
        assert not registry.is_operator(None)

    def test_feed_directory(self, registry, feed):
        assert registry.get_feed("ETH/USD") is feed
        assert registry.get_feed("BTC/USD") is None
        assert registry.list_feeds() == ["ETH/USD"]

    def test_info(self, registry):
        info = registry.get_info()
        assert info["admin"] == "admin"
        assert info["routers"] == ["router-1"]
        assert info["operators"] == ["ops"]
