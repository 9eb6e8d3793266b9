"""Project tracker integration package."""

from .client import TrackerApiClient

__all__ = ["TrackerApiClient"]
