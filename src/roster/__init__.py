"""Roster: People and Roles administration."""

__version__ = "1.0.0"
