"""Tests for venue file loading and settings."""

import pytest

from pricer.config import (
    CycleGuard,
    PricingConfig,
    Settings,
    build_pricing_config,
    load_venue_set,
)
from pricer.errors import ConfigurationError
from pricer.handlers.stablecoin import StablecoinHandler
from pricer.routing.registry import HandlerRegistry
from tests.helpers import DAI, OHM, USDC
from tests.helpers.constants import OHM_DAI_V2_POOL

VENUES = {
    "network": "ethereum",
    "venues": [
        {"kind": "stablecoin", "tokens": [DAI, USDC]},
        {"kind": "uniswap_v2", "pool": OHM_DAI_V2_POOL, "tokens": [OHM, DAI]},
    ],
}


class TestLoadVenueSet:
    def test_loads_file(self, venues_file) -> None:
        venue_set = load_venue_set(venues_file(VENUES))

        assert venue_set.network == "ethereum"
        assert len(venue_set.venues) == 2

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_venue_set(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "venues.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_venue_set(path)

    def test_invalid_venue(self, venues_file) -> None:
        path = venues_file({"network": "x", "venues": [{"kind": "uniswap_v2", "pool": "0x1"}]})

        with pytest.raises(ConfigurationError, match="Invalid venue file"):
            load_venue_set(path)


class TestBuildPricingConfig:
    def test_handlers_in_file_order(self, venues_file, reader) -> None:
        config = build_pricing_config(load_venue_set(venues_file(VENUES)), reader)

        assert [h.get_id() for h in config.handlers] == ["stablecoin", OHM_DAI_V2_POOL]
        assert config.network == "ethereum"
        assert config.reader is reader
        assert config.cycle_guard is CycleGuard.PATH

    def test_custom_registry(self, venues_file, reader) -> None:
        with pytest.raises(ConfigurationError, match="No handler registered"):
            build_pricing_config(
                load_venue_set(venues_file(VENUES)), reader, registry=HandlerRegistry()
            )


class TestPricingConfig:
    def test_rejects_non_positive_depth(self) -> None:
        with pytest.raises(ConfigurationError, match="max_depth"):
            PricingConfig(handlers=(), max_depth=0)

    def test_rejects_duplicate_ids(self, reader) -> None:
        handlers = (StablecoinHandler(reader, [DAI]), StablecoinHandler(reader, [USDC]))

        with pytest.raises(ConfigurationError, match="Duplicate venue ids"):
            PricingConfig(handlers=handlers)

    def test_handler_by_id(self, reader) -> None:
        pegs = StablecoinHandler(reader, [DAI], handler_id="pegs")
        config = PricingConfig(handlers=(pegs,))

        assert config.handler_by_id("pegs") is pegs
        assert config.handler_by_id("missing") is None


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in (
            "PRICER_RPC_URL",
            "PRICER_VENUES_FILE",
            "PRICER_CYCLE_GUARD",
            "PRICER_MAX_DEPTH",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings == Settings()
        assert settings.cycle_guard is CycleGuard.PATH
        assert settings.max_depth == 32

    def test_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("PRICER_RPC_URL", "http://localhost:8545")
        monkeypatch.setenv("PRICER_VENUES_FILE", "/etc/pricer/venues.json")
        monkeypatch.setenv("PRICER_CYCLE_GUARD", "POOL")
        monkeypatch.setenv("PRICER_MAX_DEPTH", "8")

        settings = Settings.from_env()

        assert settings.rpc_url == "http://localhost:8545"
        assert settings.venues_file == "/etc/pricer/venues.json"
        assert settings.cycle_guard is CycleGuard.POOL
        assert settings.max_depth == 8

    def test_invalid_cycle_guard(self, monkeypatch) -> None:
        monkeypatch.setenv("PRICER_CYCLE_GUARD", "none")

        with pytest.raises(ConfigurationError, match="PRICER_CYCLE_GUARD"):
            Settings.from_env()
