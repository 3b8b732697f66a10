"""Trail Engine - elevation profiles and map marker clustering for hiking routes."""

__version__ = "0.1.0"
__version_date__ = "2026-10-19"
