"""Resampling engine: backends, replicate loop and summaries."""

from ..exceptions import ConfigurationError
from .base import ResamplingBackend
from .options import InferenceOptions, CONF_TYPES
from .simulation import SimulationBackend, SimulationDraws
from .bootstrap import BootBackend, BootSamples, RsampleBackend, Bootstraps, Split
from .fwb import FWBBackend, FWBWeights, WEIGHT_TYPES, draw_weights
from .replicate import ReplicateSet, run_replicates, evaluate_replicate, align
from .summary import summarize, replicate_se, hdi_interval

BACKEND_REGISTRY = {
    "simulation": SimulationBackend,
    "boot": BootBackend,
    "rsample": RsampleBackend,
    "fwb": FWBBackend,
}


def get_backend(name: str, **kwargs) -> ResamplingBackend:
    """
    Get a resampling backend by name.

    Args:
        name: Backend name. Available:
              - 'simulation': coefficient draws from N(b, V)
              - 'boot': case-resampling bootstrap (strata=)
              - 'rsample': bootstrap splits with out-of-bag sets (strata=)
              - 'fwb': fractional weighted bootstrap (wtype=)
        **kwargs: Backend options

    Returns:
        Backend instance
    """
    if name not in BACKEND_REGISTRY:
        raise ConfigurationError(
            f"Unknown method: {name}. Available: {list(BACKEND_REGISTRY.keys())}"
        )
    try:
        return BACKEND_REGISTRY[name](**kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Invalid options for method='{name}': {e}") from e


__all__ = [
    "ResamplingBackend",
    "InferenceOptions",
    "CONF_TYPES",
    "SimulationBackend",
    "SimulationDraws",
    "BootBackend",
    "BootSamples",
    "RsampleBackend",
    "Bootstraps",
    "Split",
    "FWBBackend",
    "FWBWeights",
    "WEIGHT_TYPES",
    "draw_weights",
    "ReplicateSet",
    "run_replicates",
    "evaluate_replicate",
    "align",
    "summarize",
    "replicate_se",
    "hdi_interval",
    "BACKEND_REGISTRY",
    "get_backend",
]
