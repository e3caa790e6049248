"""Infrastructure adapters: persistence and realtime channels."""
