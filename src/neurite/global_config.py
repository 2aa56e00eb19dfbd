"""Global configuration constants for Neurite."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GlobalConfig:
    """Global configuration constants for Neurite.

    This module centralizes constants that affect every cell group, such as
    the default integration step and the default for diagnostic checks.
    """

    DEFAULT_DT_MS = 0.025
    """Default maximum integration step in milliseconds (0.025 ms)."""

    DEBUG_CHECKS: bool = False  # Set to True to warn whenever a solver leaves physical bounds
    """Default for ``EngineConfig.debug``."""

    PHYSICAL_VOLTAGE_BOUNDS: tuple = (-1000.0, 1000.0)
    """Membrane voltages (mV) outside this range are reported as unphysical."""
