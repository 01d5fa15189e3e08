"""Dominance ranking and diversity metrics."""
