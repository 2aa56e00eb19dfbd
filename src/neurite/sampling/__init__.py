"""
Sampling: schedules and sampler associations.

    from neurite.sampling import RegularSchedule, all_probes

    group.add_sampler("soma_v", all_probes, RegularSchedule(0.0, 0.1), recorder)
"""

from neurite.sampling.sampler_map import (
    SamplerAssociation,
    SamplerRegistry,
    SamplingPolicy,
    all_probes,
    one_probe,
    probes_on_cell,
)
from neurite.sampling.schedule import (
    ExplicitSchedule,
    PoissonSchedule,
    RegularSchedule,
    Schedule,
)

__all__ = [
    "Schedule",
    "RegularSchedule",
    "ExplicitSchedule",
    "PoissonSchedule",
    "SamplerAssociation",
    "SamplerRegistry",
    "SamplingPolicy",
    "all_probes",
    "one_probe",
    "probes_on_cell",
]
