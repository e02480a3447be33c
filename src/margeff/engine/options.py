"""Configuration of the replicate summary step."""

from dataclasses import dataclass

from ..exceptions import ConfigurationError

CONF_TYPES = ("perc", "norm", "basic", "hdi")


@dataclass(frozen=True)
class InferenceOptions:
    """
    Settings threaded into the summary of a replicate set.

    Attributes:
        conf_level: Confidence level of the intervals
        conf_type: Interval type:
                   - 'perc': quantiles of the replicates
                   - 'norm': estimate ± z × replicate SD
                   - 'basic': 2 × estimate - quantiles
                   - 'hdi': shortest interval holding conf_level of the replicates
        min_replicates: Fewest successful replicates that still give a summary
    """

    conf_level: float = 0.95
    conf_type: str = "perc"
    min_replicates: int = 2

    def __post_init__(self):
        if not 0 < self.conf_level < 1:
            raise ConfigurationError(f"conf_level must be in (0, 1), got {self.conf_level}")
        if self.conf_type not in CONF_TYPES:
            raise ConfigurationError(
                f"Unknown conf_type: {self.conf_type}. Available: {list(CONF_TYPES)}"
            )
        if self.min_replicates < 2:
            raise ConfigurationError(f"min_replicates must be at least 2, got {self.min_replicates}")
