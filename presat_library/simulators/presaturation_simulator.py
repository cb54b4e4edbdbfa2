"""Simulator of multiple presaturation profiles with shaped (SLP) pulses."""
import math
import sys
from typing import List, NamedTuple

import torch
from presat_library.core.bloch_sim import advance_one_pulse
from presat_library.rf_pulses.slp import build_waveform


class ProfilePoint(NamedTuple):
    """One point of a presaturation profile."""
    offset_hz: float
    residual_mz: float


def initial_magnetization(params, num_offsets=None, device='cpu', dtype=torch.float64):
    """
    Thermal equilibrium magnetization (0, 0, M0), shape (3,) or (num_offsets, 3).
    """
    shape = (3,) if num_offsets is None else (num_offsets, 3)
    M = torch.zeros(shape, dtype=dtype, device=torch.device(device))
    M[..., 2] = params.equilibrium_mz
    return M


def simulate_one_offset(omega0, waveform, params, device='cpu', dtype=torch.float64):
    """
    Applies the presaturation RF field during the whole presaturation period to
    nuclei whose resonance offset is omega0, starting from equilibrium.

    The shaped pulse is repeated params.repeat_count times and every elementary
    pulse is handed to advance_one_pulse in order.

    Args:
        omega0 (float or array-like): Resonance offset(s) in rad/s. A 1D sequence
            simulates one independent trajectory per entry.
        waveform (ShapedPulseWaveform): Shaped pulse shared by all trajectories.
        params (SimulationParameters): Simulation parameters.
        device (str, optional): PyTorch device. Defaults to 'cpu'.
        dtype (torch.dtype, optional): Floating point type. Defaults to torch.float64.

    Returns:
        torch.Tensor: Final magnetization, shape (3,) for a scalar omega0,
                      (N, 3) for N offsets.
    """
    omega0 = torch.as_tensor(omega0, dtype=dtype, device=torch.device(device))
    if omega0.ndim > 1:
        raise ValueError("omega0 must be a scalar or a 1D sequence of offsets.")
    if len(waveform) != params.num_elementary_pulses:
        raise ValueError(f"Waveform has {len(waveform)} elementary pulses, "
                         f"parameters expect {params.num_elementary_pulses}.")

    num_offsets = None if omega0.ndim == 0 else omega0.shape[0]
    M = initial_magnetization(params, num_offsets, device=device, dtype=dtype)

    for _ in range(params.repeat_count):
        for pulse_index in range(params.num_elementary_pulses):
            M = advance_one_pulse(M, waveform, pulse_index, omega0, params)
    return M


def sweep_offsets(params):
    """
    Offsets of the sweep in Hz and in rad/s, from offset_min_hz to offset_max_hz.

    Both values are advanced by constant increments rather than recomputed, so
    the last offset may differ from offset_max_hz by accumulated rounding.

    Returns:
        tuple: (offsets_hz, omegas_rad_s), two lists of params.num_offsets floats.
    """
    d_nu0 = params.offset_increment_hz
    d_om0 = 2 * math.pi * d_nu0
    nu0 = params.offset_min_hz
    om0 = 2 * math.pi * nu0

    offsets_hz, omegas_rad_s = [], []
    for _ in range(params.num_offsets):
        offsets_hz.append(nu0)
        omegas_rad_s.append(om0)
        nu0 += d_nu0
        om0 += d_om0
    return offsets_hz, omegas_rad_s


def iter_profile(params, waveform, chunk_size=None, device='cpu', dtype=torch.float64):
    """
    Yields the ProfilePoints of the sweep in increasing-offset order.

    Offsets are simulated chunk_size at a time as one batch of independent
    trajectories; points are yielded as soon as their chunk is done.

    Args:
        params (SimulationParameters): Simulation parameters.
        waveform (ShapedPulseWaveform): Shaped pulse shared by all offsets.
        chunk_size (int, optional): Offsets per batch. None simulates them all at once.
        device (str, optional): PyTorch device. Defaults to 'cpu'.
        dtype (torch.dtype, optional): Floating point type. Defaults to torch.float64.
    """
    if chunk_size is not None and chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}.")

    offsets_hz, omegas_rad_s = sweep_offsets(params)
    step = chunk_size or len(offsets_hz)
    for start in range(0, len(offsets_hz), step):
        stop = start + step
        M_final = simulate_one_offset(omegas_rad_s[start:stop], waveform, params,
                                      device=device, dtype=dtype)
        for offset_hz, mz in zip(offsets_hz[start:stop], M_final[:, 2].tolist()):
            yield ProfilePoint(offset_hz, mz)


def run_sweep(params, waveform, chunk_size=None, device='cpu', dtype=torch.float64) -> List[ProfilePoint]:
    """
    Calculates the presaturation profile: one ProfilePoint per offset,
    params.offset_steps + 1 points from offset_min_hz to offset_max_hz.
    """
    return list(iter_profile(params, waveform, chunk_size=chunk_size, device=device, dtype=dtype))


class PresaturationSimulator:
    """
    Calculates multiple presaturation profiles for a nucleus whose resonance offset
    is swept while a shaped multi-frequency pulse is applied.

    The shaped pulse is built once from the parameters and shared by all offsets.
    """
    def __init__(self, params, device: str = 'cpu', chunk_size: int = None, verbose: bool = False):
        """
        Initializes the PresaturationSimulator.

        Args:
            params (SimulationParameters): Simulation parameters.
            device (str, optional): PyTorch device ('cpu' or 'cuda'). Defaults to 'cpu'.
            chunk_size (int, optional): Offsets simulated per batch. Defaults to all.
            verbose (bool, optional): If True, prints progress information. Defaults to False.
        """
        self.params = params
        self.device = torch.device(device)
        self.dtype = torch.float64
        self.chunk_size = chunk_size
        self.verbose = verbose
        self.waveform = build_waveform(params)

        self._log(f"Shaped pulse: {params.shift_count} modulation(s), {params.num_elementary_pulses} elementary pulses "
                  f"of {params.elementary_pulse_duration_s*1e6:.2f} us, nu1={params.field_amplitude_hz:.2f} Hz.")
        self._log(f"Presaturation: {params.repeat_count} shaped pulse(s), {params.substeps_per_pulse} substep(s) per pulse.")

    def simulate_offset_hz(self, offset_hz):
        """Final magnetization (3,) for a single resonance offset given in Hz."""
        return simulate_one_offset(2 * math.pi * offset_hz, self.waveform, self.params,
                                   device=self.device, dtype=self.dtype)

    def iter_profile(self):
        self._log(f"Sweeping {self.params.num_offsets} offset(s) from {self.params.offset_min_hz:.3f} "
                  f"to {self.params.offset_max_hz:.3f} Hz.")
        return iter_profile(self.params, self.waveform, chunk_size=self.chunk_size,
                            device=self.device, dtype=self.dtype)

    def run_sweep(self) -> List[ProfilePoint]:
        points = list(self.iter_profile())
        self._log(f"Profile complete: {len(points)} point(s).")
        return points

    def _log(self, message):
        if self.verbose:
            print(f"[PresaturationSimulator] {message}", file=sys.stderr)
