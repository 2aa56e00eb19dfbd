"""
Configuration for Neurite.

    from neurite.config import EngineConfig

    config = EngineConfig(dt_ms=0.025, binning_policy="regular", bin_interval_ms=0.1)
"""

from neurite.config.base import BaseConfig
from neurite.config.engine_config import EngineConfig
from neurite.global_config import GlobalConfig

__all__ = [
    "BaseConfig",
    "EngineConfig",
    "GlobalConfig",
]
