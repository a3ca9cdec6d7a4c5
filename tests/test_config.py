"""
Config tests — defaults, JSON loading, env var lookup, validation.
"""
import json
from pathlib import Path

import pytest

from poimap.config import CONFIG_ENV, MapConfig, config_from_dict, load_config
from poimap.geo.poi import Coordinate


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    return monkeypatch


class TestMapConfig:

    def test_defaults(self, clean_env):
        cfg = load_config()
        assert cfg.initial_center == Coordinate(52.3676, 4.9041)
        assert (cfg.initial_zoom, cfg.min_zoom, cfg.max_zoom, cfg.focus_zoom) == (13, 1, 20, 15)
        assert cfg.search_provider == "mock"

    def test_bad_zoom_bounds(self):
        with pytest.raises(ValueError):
            MapConfig(min_zoom=10, max_zoom=5)

    @pytest.mark.parametrize("kwargs", [
        {"max_zoom": 25},
        {"min_zoom": 0},
        {"focus_zoom": 21},
        {"min_zoom": 5, "focus_zoom": 3},
        {"max_zoom": 12, "focus_zoom": 15},
    ])
    def test_zoom_outside_hard_range(self, kwargs):
        with pytest.raises(ValueError):
            MapConfig(**kwargs)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            MapConfig(search_provider="bing")


class TestLoadConfig:

    def test_from_file(self, tmp_path, clean_env):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({
            "initial_center": {"lat": 48.8566, "lng": 2.3522},
            "initial_zoom": 11,
            "search_provider": "nominatim",
            "poi_file": "paris.json",
        }), encoding="utf-8")
        cfg = load_config(path)
        assert cfg.initial_center == Coordinate(48.8566, 2.3522)
        assert cfg.initial_zoom == 11
        assert cfg.search_provider == "nominatim"
        assert cfg.poi_file == Path("paris.json")

    def test_from_env(self, tmp_path, clean_env):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"focus_zoom": 17}), encoding="utf-8")
        clean_env.setenv(CONFIG_ENV, str(path))
        assert load_config().focus_zoom == 17

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            config_from_dict({"zoom_level": 3})


class TestCommandLine:

    def test_overrides(self, clean_env):
        from poimap.app import apply_overrides, parse_args

        args, remaining = parse_args(["--search", "nominatim", "--locate", "ip",
                                      "--log-level", "DEBUG", "-platform", "offscreen"])
        cfg = apply_overrides(load_config(args.config), args)
        assert (cfg.search_provider, cfg.geolocation_provider, cfg.log_level) == (
            "nominatim", "ip", "DEBUG")
        assert remaining == ["-platform", "offscreen"]

    def test_build_providers(self):
        from poimap.app import build_providers
        from poimap.providers.ip_geolocation import IpGeolocationProvider
        from poimap.providers.mock import MockSearchProvider

        search, locate = build_providers(MapConfig(geolocation_provider="ip"))
        assert isinstance(search, MockSearchProvider)
        assert isinstance(locate, IpGeolocationProvider)
