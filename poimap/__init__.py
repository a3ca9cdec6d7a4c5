"""
poimap — interactive POI map viewport.

Entry point: python -m poimap.app

Provides:
- Geo projection of lat/lng onto the map surface (geo/)
- POI store and category filter (store/)
- Selection, search and geolocation controllers (controllers/)
- Viewport engine publishing immutable map snapshots (engine/)
- Search / geolocation / POI data providers (providers/)
- PyQt5 host view (gui/)
"""

__version__ = "0.1.0"
