"""Core configuration and cross-cutting utilities."""
