"""Guildhall: quest assignment and mission resolution for a guild simulation."""
