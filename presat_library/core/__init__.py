# presat_library/core/__init__.py

from .constants import (
    EQUILIBRIUM_MZ,
    ROTATION_TOLERANCE_RAD_S,
    CONFIG_FORMAT_VERSION,
    DEFAULT_CONFIG_FILENAME,
    PROFILE_LINE_FORMAT
)
from .parameters import SimulationParameters
from .bloch_sim import (
    apply_relaxation,
    rotation_matrix,
    apply_rotation,
    advance_one_pulse
)

__all__ = [
    # constants
    'EQUILIBRIUM_MZ',
    'ROTATION_TOLERANCE_RAD_S',
    'CONFIG_FORMAT_VERSION',
    'DEFAULT_CONFIG_FILENAME',
    'PROFILE_LINE_FORMAT',
    # parameters
    'SimulationParameters',
    # bloch_sim
    'apply_relaxation',
    'rotation_matrix',
    'apply_rotation',
    'advance_one_pulse'
]
