"""Shared test fixtures and configuration."""

import pytest
import torch
import numpy as np

from neurite.components.neurons.lif_cell import LIFCellConfig, LIFCellDescription
from neurite.core.recipe import ProbeInfo, Recipe
from neurite.typing import CellMember


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure reproducible tests by setting all random seeds.

    This fixture runs automatically for every test to ensure deterministic behavior.
    """
    torch.manual_seed(42)
    np.random.seed(42)


class LIFRecipe(Recipe):
    """Recipe of identical LIF cells.

    Every cell has ``num_targets`` targets, ``num_sources`` detectors and two
    probes: index 0 reads the voltage, index 1 the delivered input.
    """

    def __init__(self, n_cells, num_targets=1, num_sources=1, params=None, morphology=()):
        self.n_cells = n_cells
        self._num_targets = num_targets
        self._num_sources = num_sources
        self.params = params or {}
        self.morphology = morphology

    def num_cells(self):
        return self.n_cells

    def get_cell_description(self, gid):
        return LIFCellDescription(
            morphology=self.morphology,
            params=self.params.get(gid, LIFCellConfig()),
        )

    def num_sources(self, gid):
        return self._num_sources

    def num_targets(self, gid):
        return self._num_targets

    def num_probes(self, gid):
        return 2

    def get_probe(self, probe_id):
        address = "voltage" if probe_id.index == 0 else "input"
        return ProbeInfo(id=probe_id, tag=f"{address}@{probe_id.gid}", address=address)


@pytest.fixture
def lif_recipe():
    """Factory for ``LIFRecipe`` instances."""
    return LIFRecipe


@pytest.fixture
def recorder():
    """Sampler callback that stores (probe_id, tag, record) triples."""

    class Recorder:
        def __init__(self):
            self.samples = []

        def __call__(self, probe_id, tag, count, records):
            assert count == len(records) == 1
            for record in records:
                self.samples.append((probe_id, tag, record))

        def for_probe(self, probe_id: CellMember):
            return [record for pid, _, record in self.samples if pid == probe_id]

    return Recorder()
