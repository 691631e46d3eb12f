"""Spypoint trail-camera photo sync."""

__version__ = "0.1.0"
