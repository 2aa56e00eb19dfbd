"""
Cell group engine configuration.

``EngineConfig`` parameterises a ``GroupEngine``: the default integration
step, the event binning policy and the diagnostic switches.

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from neurite.config.base import BaseConfig
from neurite.errors import ConfigurationError, validate_positive
from neurite.events.binning import BinningKind
from neurite.global_config import GlobalConfig


@dataclass
class EngineConfig(BaseConfig):
    """Configuration for one cell group engine.

    Attributes:
        dt_ms: Default maximum integration step (ms), used when ``advance``
            is called without an explicit ``dt``.

        binning_policy: How synaptic event times are quantized before they
            are handed to the lowered cell. Accepts a ``BinningKind`` or its
            name ("none", "regular", "following").

        bin_interval_ms: Bin width (ms) for the regular and following
            policies. Ignored for "none".

        debug: When True, the advance loop checks the lowered cell state
            after every step and logs a warning if it is unphysical.

        balance_morphologies: When True, lowered cells rebalance each
            cell's branch tree before building their solver structures.
    """

    dt_ms: float = GlobalConfig.DEFAULT_DT_MS
    binning_policy: Union[BinningKind, str] = BinningKind.NONE
    bin_interval_ms: float = 0.0
    debug: bool = GlobalConfig.DEBUG_CHECKS
    balance_morphologies: bool = True

    def __post_init__(self) -> None:
        super().__post_init__()
        validate_positive(self.dt_ms, "dt_ms")
        if isinstance(self.binning_policy, str):
            try:
                self.binning_policy = BinningKind(self.binning_policy.lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown binning policy '{self.binning_policy}'. "
                    f"Choose from: {[k.value for k in BinningKind]}"
                ) from None
        validate_positive(self.bin_interval_ms, "bin_interval_ms", allow_zero=True)
        if self.binning_policy is not BinningKind.NONE and self.bin_interval_ms <= 0:
            raise ConfigurationError(
                f"bin_interval_ms must be positive for {self.binning_policy.value} binning, "
                f"got {self.bin_interval_ms}"
            )

    def to_dict(self) -> dict:
        """Return a dict representation of the configuration."""
        data = self.__dict__.copy()
        data["binning_policy"] = self.binning_policy.value
        return data
