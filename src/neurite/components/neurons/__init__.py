"""
Neuron back ends.

    from neurite.components.neurons import LIFLoweredCell, LIFCellDescription, LIFCellConfig
"""

from neurite.components.neurons.lif_cell import (
    LIFCellConfig,
    LIFCellDescription,
    LIFLoweredCell,
    LIFProbe,
)

__all__ = [
    "LIFCellConfig",
    "LIFCellDescription",
    "LIFLoweredCell",
    "LIFProbe",
]
