"""
Tests for Configuration Manager
===============================

Tests file loading, environment overrides, validation and registry building.
"""

import json
import os

import pytest

from trailguard_prime.core.config_manager import ConfigManager
from trailguard_prime.core.replay import ManualClock

PAPER_YAML = """
mode: paper
engine:
  admin: ops
  default_heartbeat_sec: 14400
  heartbeats:
    ETH/USD: 3600
  operators: [risk-desk]
  routers: [router-1]
orders:
  twap_window_sec: 600
keeper:
  interval_sec: 30
  keeper_id: keeper-1
feeds:
  - {feed_id: "ETH/USD", decimals: 8, price: 2000.0}
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TRAILGUARD_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "paper.yaml"
    path.write_text(PAPER_YAML)
    return path


class TestLoading:
    """Tests for configuration loading."""

    def test_load_yaml(self, config_file):
        manager = ConfigManager()
        assert manager.load(config_file)

        assert manager.engine.admin == "ops"
        assert manager.engine.heartbeats == {"ETH/USD": 3600}
        assert manager.orders.twap_window_sec == 600
        assert manager.orders.trailing_distance_bps == 200
        assert manager.keeper.keeper_id == "keeper-1"
        assert manager.config.feeds[0].feed_id == "ETH/USD"
        assert manager.is_paper

    def test_load_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"mode": "paper", "engine": {"admin": "root"}}))

        manager = ConfigManager(path)
        assert manager.engine.admin == "root"

    def test_missing_file(self, tmp_path):
        assert not ConfigManager().load(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("mode = 'paper'")
        assert not ConfigManager().load(path)

    def test_get_dot_notation(self, config_file):
        manager = ConfigManager(config_file)
        assert manager.get("keeper.interval_sec") == 30
        assert manager.get("keeper.missing", "x") == "x"

    def test_set_reparses(self, config_file):
        manager = ConfigManager(config_file)
        manager.set("orders.trailing_distance_bps", 300)
        assert manager.orders.trailing_distance_bps == 300


class TestEnvOverrides:
    """Tests for TRAILGUARD_ environment overrides."""

    def test_override_nested_value(self, config_file, monkeypatch):
        monkeypatch.setenv("TRAILGUARD_ORDERS__TWAP_WINDOW_SEC", "1200")
        monkeypatch.setenv("TRAILGUARD_ENGINE__ADMIN", "root")

        manager = ConfigManager(config_file)

        assert manager.orders.twap_window_sec == 1200
        assert manager.engine.admin == "root"

    def test_override_applies_to_dict_load(self, monkeypatch):
        monkeypatch.setenv("TRAILGUARD_MODE", "live")
        manager = ConfigManager()
        manager.load_dict({"mode": "paper"})
        assert not manager.is_paper


class TestValidation:
    """Tests for configuration validation."""

    def test_valid_config(self, config_file):
        assert ConfigManager(config_file).validate() == []

    def test_out_of_range_order_defaults(self):
        manager = ConfigManager()
        manager.load_dict({
            "orders": {"trailing_distance_bps": 5, "twap_window_sec": 60, "max_slippage_bps": 5001},
        })

        errors = manager.validate()
        assert any("trailing_distance_bps" in e for e in errors)
        assert any("twap_window_sec" in e for e in errors)
        assert any("max_slippage_bps" in e for e in errors)

    @pytest.mark.parametrize("slippage", [0, 5000])
    def test_slippage_bounds_accepted(self, slippage):
        manager = ConfigManager()
        manager.load_dict({"orders": {"max_slippage_bps": slippage}})

        assert not any("max_slippage_bps" in e for e in manager.validate())

    def test_bad_mode_and_feed(self):
        manager = ConfigManager()
        manager.load_dict({"mode": "demo", "feeds": [{"feed_id": "X", "price": 0}]})

        errors = manager.validate()
        assert "mode must be 'paper' or 'live'" in errors
        assert "feeds.X.price must be > 0" in errors

    def test_live_mode_rejects_paper_feeds(self):
        manager = ConfigManager()
        manager.load_dict({"mode": "live", "feeds": [{"feed_id": "X", "price": 1}]})
        assert "paper feeds are not allowed in live mode" in manager.validate()


class TestBuildRegistry:
    """Tests for registry construction."""

    def test_registry_from_config(self, config_file):
        clock = ManualClock(1_700_000_000)
        registry = ConfigManager(config_file).build_registry(clock=clock)

        assert registry.admin == "ops"
        assert registry.is_operator("risk-desk")
        assert registry.is_router_allowed("router-1")
        assert registry.heartbeat_for("ETH/USD") == 3600
        assert registry.heartbeat_for("BTC/USD") == 14400

        feed = registry.get_feed("ETH/USD")
        reading = feed.latest_price()
        assert reading.raw_price == 2000 * 10 ** 8
        assert reading.updated_at == 1_700_000_000

    def test_live_mode_skips_paper_feeds(self):
        manager = ConfigManager()
        manager.load_dict({"mode": "live", "feeds": [{"feed_id": "ETH/USD", "price": 2000}]})
        assert manager.build_registry().list_feeds() == []
