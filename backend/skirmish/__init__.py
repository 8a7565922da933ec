"""Skirmish: turn-based combat engine and API."""
