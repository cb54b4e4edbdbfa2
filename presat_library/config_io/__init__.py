# presat_library/config_io/__init__.py
from .xml_values import read_config_values, ValueCursor
from .parameter_loader import (
    parse_positional_parameters,
    parse_named_parameters,
    load_parameters,
    parameters_to_dict
)

__all__ = [
    # xml_values
    'read_config_values',
    'ValueCursor',
    # parameter_loader
    'parse_positional_parameters',
    'parse_named_parameters',
    'load_parameters',
    'parameters_to_dict'
]
