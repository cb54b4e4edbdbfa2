# presat_library/core/constants.py
# Equilibrium z magnetization; the profile is reported relative to it
EQUILIBRIUM_MZ = 1.0
# Effective rotation frequencies (rad/s) at or below this value are treated as null
ROTATION_TOLERANCE_RAD_S = 1.0e-5

# Version tag expected as the first value of a configuration file
CONFIG_FORMAT_VERSION = 2
# Configuration file used when none is given on the command line
DEFAULT_CONFIG_FILENAME = "presat.xml"

# Output format of one profile line: offset (Hz) and residual Mz
PROFILE_LINE_FORMAT = "%9.3f\t%9.6f"
