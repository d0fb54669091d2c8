"""Fixture statistics and team-name resolution for round panels."""

__version__ = "0.3.0"
