"""mosa - many-objective sorting search with cooperative migration."""

__all__ = ["EvolutionLoop", "SearchConfig", "run_cooperative"]
__version__ = "0.3.0"


def __getattr__(name: str):
    """Lazy imports - avoid loading numpy until the engine is used."""
    if name == "SearchConfig":
        from mosa.config import SearchConfig

        return SearchConfig
    if name == "EvolutionLoop":
        from mosa.evolution.loop import EvolutionLoop

        return EvolutionLoop
    if name == "run_cooperative":
        from mosa.runner import run_cooperative

        return run_cooperative
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
