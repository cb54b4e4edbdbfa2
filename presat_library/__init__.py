# presat_library/__init__.py
# Main init for the library
from . import core
from . import rf_pulses
from . import simulators
from . import config_io

# Key entry points at the top level
from .core.parameters import SimulationParameters
from .rf_pulses.slp import build_waveform
from .simulators import run_sweep, PresaturationSimulator
