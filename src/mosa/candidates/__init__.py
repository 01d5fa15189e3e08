"""Candidate solutions, populations and objective capabilities."""
