"""
POI map — desktop entry point.

    python -m poimap.app [--config FILE] [--pois FILE]
                         [--search mock|nominatim] [--locate mock|ip]
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from PyQt5 import QtCore, QtWidgets

from .config import GEOLOCATION_PROVIDERS, SEARCH_PROVIDERS, MapConfig, load_config
from .engine.viewport import ViewportEngine
from .gui.map_widget import PoiMapWidget
from .logger import setup_logging
from .providers.base import GeolocationProvider, SearchProvider
from .providers.ip_geolocation import IpGeolocationProvider
from .providers.json_source import JsonPoiSource
from .providers.mock import MockGeolocationProvider, MockSearchProvider
from .providers.nominatim import NominatimSearchProvider
from .store.poi_store import PoiStore

log = logging.getLogger(__name__)


def build_providers(cfg: MapConfig) -> Tuple[SearchProvider, GeolocationProvider]:
    """Instantiate the search and geolocation providers named in *cfg*."""
    if cfg.search_provider == "nominatim":
        search: SearchProvider = NominatimSearchProvider(
            url=cfg.nominatim_url,
            user_agent=cfg.user_agent,
            timeout=cfg.http_timeout_s,
        )
    else:
        search = MockSearchProvider()

    if cfg.geolocation_provider == "ip":
        locate: GeolocationProvider = IpGeolocationProvider(
            url=cfg.ip_geolocation_url,
            timeout=cfg.http_timeout_s,
        )
    else:
        locate = MockGeolocationProvider()
    return search, locate


def parse_args(argv: Optional[List[str]] = None) -> Tuple[argparse.Namespace, List[str]]:
    parser = argparse.ArgumentParser(description="Interactive POI map")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (default: $POIMAP_CONFIG or built-in defaults).",
    )
    parser.add_argument(
        "--pois",
        type=Path,
        default=None,
        help="JSON file with the POI collection (default: bundled Amsterdam sample).",
    )
    parser.add_argument(
        "--search",
        choices=SEARCH_PROVIDERS,
        default=None,
        help="Search provider.",
    )
    parser.add_argument(
        "--locate",
        choices=GEOLOCATION_PROVIDERS,
        default=None,
        help="Geolocation provider.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING...).",
    )
    return parser.parse_known_args(argv)


def apply_overrides(cfg: MapConfig, args: argparse.Namespace) -> MapConfig:
    if args.pois is not None:
        cfg.poi_file = args.pois
    if args.search is not None:
        cfg.search_provider = args.search
    if args.locate is not None:
        cfg.geolocation_provider = args.locate
    if args.log_level is not None:
        cfg.log_level = args.log_level
    return cfg


def main() -> None:
    args, remaining = parse_args()
    cfg = apply_overrides(load_config(args.config), args)
    setup_logging(cfg.log_level)

    sys.argv = sys.argv[:1] + remaining
    app = QtWidgets.QApplication(sys.argv)
    app.setStyle("Fusion")

    search, locate = build_providers(cfg)
    engine = ViewportEngine(PoiStore(), search, locate, config=cfg)
    engine.load_from(JsonPoiSource(cfg.poi_file))
    log.info("Providers: search=%s, geolocation=%s",
             cfg.search_provider, cfg.geolocation_provider)

    win = QtWidgets.QMainWindow()
    win.setWindowTitle("POI Map")
    win.setCentralWidget(PoiMapWidget(engine, share_base_url=cfg.share_base_url))
    win.resize(1200, 800)
    win.show()

    def _sigint_handler(*_args):
        log.info("SIGINT received — shutting down...")
        win.close()

    signal.signal(signal.SIGINT, _sigint_handler)
    signal.signal(signal.SIGTERM, _sigint_handler)

    # Qt's event loop blocks Python signal delivery; wake it periodically
    _sig_timer = QtCore.QTimer()
    _sig_timer.timeout.connect(lambda: None)
    _sig_timer.start(200)

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
