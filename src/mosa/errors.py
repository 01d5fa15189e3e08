"""Exception hierarchy for the search engine."""

from __future__ import annotations


class MosaError(Exception):
    """Base for all search engine exceptions."""


class ConfigurationError(MosaError, ValueError):
    """Inconsistent wiring of a search instance. Raised at construction."""


class RankingInvariantError(MosaError, RuntimeError):
    """A ranking pass produced fronts that are not disjoint or not exhaustive."""


class TransportError(MosaError):
    """Cross-instance delivery failed."""
