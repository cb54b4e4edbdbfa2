# presat_library/rf_pulses/__init__.py
from . import slp
from .slp import ShapedPulseWaveform, generate_slp_waveform, build_waveform

__all__ = [
    'slp',
    'ShapedPulseWaveform',
    'generate_slp_waveform',
    'build_waveform'
]
