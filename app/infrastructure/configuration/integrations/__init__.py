"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.tracker import TrackerSettings

__all__ = [
    "TrackerSettings",
]
