# presat_library/simulators/__init__.py
from .presaturation_simulator import (
    ProfilePoint,
    initial_magnetization,
    simulate_one_offset,
    sweep_offsets,
    iter_profile,
    run_sweep,
    PresaturationSimulator
)
from .profile_validator import analyze_saturation_profile, SaturationMetrics

__all__ = [
    'ProfilePoint',
    'initial_magnetization',
    'simulate_one_offset',
    'sweep_offsets',
    'iter_profile',
    'run_sweep',
    'PresaturationSimulator',
    'analyze_saturation_profile',
    'SaturationMetrics'
]
