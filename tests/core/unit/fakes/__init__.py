"""Shared test helpers: resource builders for orchestration events."""
