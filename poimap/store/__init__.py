"""In-memory POI storage and category filtering."""
