"""History stores for module snapshots and per-version history rows."""
