import torch
import numpy as np
from scipy.io import loadmat, savemat
import argparse
import sys
import xml.etree.ElementTree as ET
import yaml

from presat_library.core.constants import DEFAULT_CONFIG_FILENAME, PROFILE_LINE_FORMAT
from presat_library.config_io import load_parameters
from presat_library.simulators import PresaturationSimulator
from export_tools import ProfileExporter

# ---- MATLAB / NumPy Interoperability ----

def save_profile_mat(filename, profile_points, waveform=None):
    """
    Save a presaturation profile (and optionally its shaped pulse) to a MATLAB .mat file.
    Args:
        filename (str): Output .mat file.
        profile_points (sequence): ProfilePoints or (offset_hz, residual_mz) pairs.
        waveform (ShapedPulseWaveform): If given, field_x, field_y and dt are saved too.
    """
    profile = np.asarray(profile_points, dtype=np.float64).reshape(-1, 2)
    save_dict = {'offset_hz': profile[:, 0], 'mz': profile[:, 1]}
    if waveform is not None:
        save_dict['field_x'] = np.asarray(waveform.field_x)
        save_dict['field_y'] = np.asarray(waveform.field_y)
        save_dict['dt'] = np.array([waveform.elementary_pulse_duration_s])
    savemat(filename, save_dict)

def load_mat_profile(filename, to_torch=False, device='cpu'):
    """
    Load a profile saved by save_profile_mat.
    Returns:
        tuple: (offset_hz, mz) as 1D numpy arrays or torch tensors.
    """
    mat = loadmat(filename)
    # MATLAB stores vectors as 2D rows
    offset_hz = np.ravel(mat['offset_hz'])
    mz = np.ravel(mat['mz'])
    if to_torch:
        return torch.from_numpy(offset_hz).to(device), torch.from_numpy(mz).to(device)
    return offset_hz, mz

def format_profile(profile_points):
    """
    Yield one text line per profile point: offset (Hz, 3 decimals) and residual Mz
    (6 decimals), separated by a tab.
    """
    for offset_hz, mz in profile_points:
        yield PROFILE_LINE_FORMAT % (offset_hz, mz)

# ---- Command-Line Interface (CLI) ----

def build_parser():
    parser = argparse.ArgumentParser(
        prog="presat",
        description="Multiple presaturation profile calculator (Bloch equations, shaped SLP pulses)"
    )
    parser.add_argument('config', nargs='?', default=DEFAULT_CONFIG_FILENAME,
                        help=f"XML, YAML or JSON parameter file. Default is {DEFAULT_CONFIG_FILENAME}")
    parser.add_argument('--check', action='store_true', help="Print the parameters read and exit")
    parser.add_argument('--device', type=str, default='cpu', help="PyTorch device")
    parser.add_argument('--chunk-size', type=int, default=None, help="Offsets simulated per batch")
    parser.add_argument('--matlab', type=str, help="Save the profile and pulse shape as a .mat file")
    parser.add_argument('--export-waveform', type=str, help="Write the shaped pulse as a text file")
    parser.add_argument('--plot', type=str, help="Save a figure of the profile to this file")
    parser.add_argument('--verbose', action='store_true', help="Verbose output")
    return parser

def run_cli(argv=None):
    args = build_parser().parse_args(argv)

    try:
        params = load_parameters(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ET.ParseError, yaml.YAMLError) as e:
        print(f"Error: cannot parse {args.config}: {e}", file=sys.stderr)
        return 1

    if args.check:
        for line in params.summary_lines():
            print(line)
        return 0

    if args.verbose:
        print(f"Loaded configuration from {args.config}", file=sys.stderr)

    try:
        simulator = PresaturationSimulator(params, device=args.device,
                                           chunk_size=args.chunk_size, verbose=args.verbose)
        points = simulator.run_sweep()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in format_profile(points):
        print(line)

    try:
        export_results(args, params, points, simulator.waveform)
    except OSError as e:
        print(f"Error: cannot write output: {e}", file=sys.stderr)
        return 1

    return 0

def export_results(args, params, points, waveform):
    """Writes the optional .mat file, pulse shape and figure requested on the command line."""
    # Save .mat if requested
    if args.matlab:
        save_profile_mat(args.matlab, points, waveform)
        if args.verbose:
            print(f"Saved .mat file: {args.matlab}", file=sys.stderr)

    if args.export_waveform:
        ProfileExporter(points, waveform).export_waveform_txt(args.export_waveform)
        if args.verbose:
            print(f"Exported pulse shape to {args.export_waveform}", file=sys.stderr)

    if args.plot:
        # matplotlib is only needed for figures
        from analysis_tools import ProfileAnalysis
        analysis = ProfileAnalysis(points, waveform, shifts_hz=params.modulation_shifts_hz)
        fig = analysis.plot_profile(show=False)
        fig.savefig(args.plot, dpi=150, bbox_inches="tight")
        if args.verbose:
            print(f"Saved profile figure: {args.plot}", file=sys.stderr)

def main():
    sys.exit(run_cli())

if __name__ == '__main__':
    if sys.argv[0].endswith('interop_and_cli.py'):
        main()
