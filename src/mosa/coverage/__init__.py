"""Objective coverage bookkeeping."""
