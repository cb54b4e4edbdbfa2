# File: presat_library/config_io/parameter_loader.py
import json
import os

import yaml

from presat_library.core.constants import CONFIG_FORMAT_VERSION
from presat_library.core.parameters import SimulationParameters
from presat_library.config_io.xml_values import read_config_values, ValueCursor


def _check_version(version):
    if version != CONFIG_FORMAT_VERSION:
        raise ValueError(f"Bad version of data file. Expected {CONFIG_FORMAT_VERSION}, got {version}")


def parse_positional_parameters(values):
    """
    Builds SimulationParameters from configuration values read in a fixed order:
    version, T1, T2, offset steps, offset min, offset max, shift count, the shifts,
    presaturation duration, shaped pulse duration, elementary pulse count,
    substeps per pulse, RF field intensity.

    The version is checked before anything else is read.

    Args:
        values (sequence of str): Values as returned by read_config_values.

    Returns:
        SimulationParameters

    Raises:
        ValueError: On version mismatch, missing value or unparsable value.
    """
    cursor = ValueCursor(values)
    _check_version(cursor.next_int("version"))

    T1 = cursor.next_float("T1")
    T2 = cursor.next_float("T2")
    offset_steps = cursor.next_int("nnu0")
    offset_min_hz = cursor.next_float("nu0min")
    offset_max_hz = cursor.next_float("nu0max")
    shift_count = cursor.next_int("nshift")
    if shift_count < 1:
        raise ValueError(f"nshift must be at least 1, got {shift_count}")
    shifts_hz = [cursor.next_float(f"shift {i + 1}") for i in range(shift_count)]

    return SimulationParameters(
        T1=T1,
        T2=T2,
        offset_steps=offset_steps,
        offset_min_hz=offset_min_hz,
        offset_max_hz=offset_max_hz,
        modulation_shifts_hz=shifts_hz,
        presaturation_duration_s=cursor.next_float("d1"),
        shaped_pulse_duration_s=cursor.next_float("bigpulse"),
        num_elementary_pulses=cursor.next_int("npulse"),
        substeps_per_pulse=cursor.next_int("nsubstep"),
        field_amplitude_hz=cursor.next_float("nu1"),
    )


# Keys of a YAML/JSON configuration and the type each value must have
_NAMED_FIELDS = [
    ('T1', float),
    ('T2', float),
    ('offset_steps', int),
    ('offset_min_hz', float),
    ('offset_max_hz', float),
    ('presaturation_duration_s', float),
    ('shaped_pulse_duration_s', float),
    ('num_elementary_pulses', int),
    ('substeps_per_pulse', int),
    ('field_amplitude_hz', float),
]


def _as_number(value, kind, name):
    # bool is an int subclass, but never a valid numeric setting
    if isinstance(value, bool):
        raise ValueError(f"Cannot read {name} as a number: {value!r}")
    if kind is int:
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, (int, str)):
            try:
                return int(value)
            except ValueError:
                pass
        raise ValueError(f"Cannot read {name} as an integer: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Cannot read {name} as a number: {value!r}") from None


def parse_named_parameters(config):
    """
    Builds SimulationParameters from a mapping (e.g. a loaded YAML or JSON document).

    Expected keys: version, T1, T2, offset_steps, offset_min_hz, offset_max_hz,
    modulation_shifts_hz (list), presaturation_duration_s, shaped_pulse_duration_s,
    num_elementary_pulses, substeps_per_pulse, field_amplitude_hz.
    """
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping of parameter names to values.")
    if 'version' not in config:
        raise ValueError("Configuration is missing required key: version")
    _check_version(_as_number(config['version'], int, 'version'))

    kwargs = {}
    for name, kind in _NAMED_FIELDS:
        if name not in config:
            raise ValueError(f"Configuration is missing required key: {name}")
        kwargs[name] = _as_number(config[name], kind, name)

    shifts = config.get('modulation_shifts_hz')
    if shifts is None:
        raise ValueError("Configuration is missing required key: modulation_shifts_hz")
    if not isinstance(shifts, (list, tuple)):
        shifts = [shifts]
    kwargs['modulation_shifts_hz'] = [_as_number(s, float, 'modulation_shifts_hz') for s in shifts]

    return SimulationParameters(**kwargs)


def load_parameters(filename):
    """
    Loads SimulationParameters from a configuration file.

    .yaml/.yml and .json files hold named parameters; any other file is read as
    an XML document whose values are taken positionally.
    """
    extension = os.path.splitext(str(filename))[1].lower()
    if extension in ('.yaml', '.yml'):
        with open(filename, 'r') as f:
            return parse_named_parameters(yaml.safe_load(f))
    if extension == '.json':
        with open(filename, 'r') as f:
            return parse_named_parameters(json.load(f))
    return parse_positional_parameters(read_config_values(filename))


def parameters_to_dict(params):
    """Named-configuration mapping of params, loadable again with parse_named_parameters."""
    config = {'version': CONFIG_FORMAT_VERSION}
    for name, _ in _NAMED_FIELDS:
        config[name] = getattr(params, name)
    config['modulation_shifts_hz'] = list(params.modulation_shifts_hz)
    return config
