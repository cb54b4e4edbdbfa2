# presat_library/rf_pulses/slp/__init__.py
from .slp_pulse import ShapedPulseWaveform, generate_slp_waveform, build_waveform

__all__ = [
    'ShapedPulseWaveform',
    'generate_slp_waveform',
    'build_waveform'
]
