"""Persistence implementations for roster_auth."""
