"""
Base Configuration Classes.

Every lowered cell keeps its state in torch tensors, so every config that
builds one carries the placement and precision of those tensors.

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import torch

from neurite.errors import ConfigurationError

# Precisions a solver state may use; half precision loses spike timing
_STATE_DTYPES = {
    "float32": torch.float32,
    "float64": torch.float64,
}


@dataclass
class BaseConfig:
    """Tensor placement shared by configs that build solver state."""

    device: str = "cpu"
    """Device holding the state tensors: 'cpu', 'cuda', 'cuda:0', etc."""

    dtype: str = "float64"
    """Precision of voltage and input tensors: 'float32' or 'float64'.
    Cell clocks are always kept in float64."""

    def __post_init__(self) -> None:
        if self.dtype not in _STATE_DTYPES:
            raise ConfigurationError(
                f"Unsupported state dtype '{self.dtype}'. "
                f"Choose from: {sorted(_STATE_DTYPES)}"
            )

    def get_torch_device(self) -> torch.device:
        return torch.device(self.device)

    def get_torch_dtype(self) -> torch.dtype:
        return _STATE_DTYPES[self.dtype]

    def tensor_options(self) -> Dict[str, Any]:
        """Keyword arguments for torch factory functions."""
        return {"device": self.get_torch_device(), "dtype": self.get_torch_dtype()}
