# presat_library/core/parameters.py
import math
from dataclasses import dataclass, field
from typing import Tuple

from presat_library.core.constants import EQUILIBRIUM_MZ, ROTATION_TOLERANCE_RAD_S


@dataclass(frozen=True)
class SimulationParameters:
    """
    All the problem-related parameters of one presaturation profile calculation.

    The presaturation period (presaturation_duration_s) is cut into repetitions of a
    shaped pulse (shaped_pulse_duration_s), itself made of num_elementary_pulses
    elementary pulses. The evolution during each elementary pulse is cut into
    substeps_per_pulse substeps. The resonance offset of the studied nucleus goes
    from offset_min_hz to offset_max_hz (both included) in offset_steps increments.

    Args:
        T1 (float): Longitudinal relaxation time (s).
        T2 (float): Transverse relaxation time (s).
        offset_steps (int): Number of offset increments (offset_steps + 1 offsets).
        offset_min_hz (float): First resonance offset (Hz).
        offset_max_hz (float): Last resonance offset (Hz).
        modulation_shifts_hz (tuple): Modulation frequencies of the shaped pulse (Hz).
        presaturation_duration_s (float): Duration of the presaturation period, d1 (s).
        shaped_pulse_duration_s (float): Duration of one shaped pulse (s).
        num_elementary_pulses (int): Number of elementary pulses per shaped pulse.
        substeps_per_pulse (int): Number of calculation substeps per elementary pulse.
        field_amplitude_hz (float): Total RF field intensity nu1 (Hz).
        equilibrium_mz (float, optional): Equilibrium z magnetization. Defaults to 1.0.
        rotation_tolerance_rad_s (float, optional): Rotation speed considered as null.
            Defaults to 1e-5 rad/s.
    """
    T1: float
    T2: float
    offset_steps: int
    offset_min_hz: float
    offset_max_hz: float
    modulation_shifts_hz: Tuple[float, ...]
    presaturation_duration_s: float
    shaped_pulse_duration_s: float
    num_elementary_pulses: int
    substeps_per_pulse: int
    field_amplitude_hz: float
    equilibrium_mz: float = EQUILIBRIUM_MZ
    rotation_tolerance_rad_s: float = field(default=ROTATION_TOLERANCE_RAD_S, repr=False)

    def __post_init__(self):
        # Lists from config loaders are frozen into a tuple
        object.__setattr__(self, 'modulation_shifts_hz', tuple(float(s) for s in self.modulation_shifts_hz))

        for name in ('T1', 'T2', 'offset_min_hz', 'offset_max_hz', 'presaturation_duration_s',
                     'shaped_pulse_duration_s', 'field_amplitude_hz', 'equilibrium_mz',
                     'rotation_tolerance_rad_s'):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number, got {getattr(self, name)}.")
        if not all(math.isfinite(s) for s in self.modulation_shifts_hz):
            raise ValueError(f"modulation_shifts_hz must be finite, got {self.modulation_shifts_hz}.")

        if self.T1 <= 0 or self.T2 <= 0:
            raise ValueError(f"T1 and T2 must be positive, got T1={self.T1}, T2={self.T2}.")
        if self.offset_steps < 0:
            raise ValueError(f"offset_steps must be non-negative, got {self.offset_steps}.")
        if len(self.modulation_shifts_hz) == 0:
            raise ValueError("At least one modulation shift is required.")
        if self.presaturation_duration_s < 0:
            raise ValueError(f"presaturation_duration_s cannot be negative, got {self.presaturation_duration_s}.")
        if self.shaped_pulse_duration_s <= 0:
            raise ValueError(f"shaped_pulse_duration_s must be positive, got {self.shaped_pulse_duration_s}.")
        if self.num_elementary_pulses < 1:
            raise ValueError(f"num_elementary_pulses must be at least 1, got {self.num_elementary_pulses}.")
        if self.substeps_per_pulse < 1:
            raise ValueError(f"substeps_per_pulse must be at least 1, got {self.substeps_per_pulse}.")

    @property
    def R1(self) -> float:
        return 1.0 / self.T1

    @property
    def R2(self) -> float:
        return 1.0 / self.T2

    @property
    def shift_count(self) -> int:
        return len(self.modulation_shifts_hz)

    @property
    def elementary_pulse_duration_s(self) -> float:
        return self.shaped_pulse_duration_s / self.num_elementary_pulses

    @property
    def repeat_count(self) -> int:
        """Number of shaped pulses that fit in the presaturation period, rounded half away from zero."""
        # The remainder of d1 that is not a whole shaped pulse is not simulated
        return int(math.floor(self.presaturation_duration_s / self.shaped_pulse_duration_s + 0.5))

    @property
    def offset_increment_hz(self) -> float:
        if self.offset_steps == 0:
            return 0.0
        return (self.offset_max_hz - self.offset_min_hz) / self.offset_steps

    @property
    def num_offsets(self) -> int:
        return self.offset_steps + 1

    @property
    def field_amplitude_rad_s(self) -> float:
        return 2 * math.pi * self.field_amplitude_hz

    def summary_lines(self):
        """Human readable listing of the parameters, in configuration file order."""
        lines = [
            f"T1: {self.T1:.3f}",
            f"T2: {self.T2:.3f}",
            f"nnu0: {self.offset_steps}",
            f"nu0min: {self.offset_min_hz:.3f}",
            f"nu0max: {self.offset_max_hz:.3f}",
            f"nshift: {self.shift_count}",
        ]
        for i, shift in enumerate(self.modulation_shifts_hz):
            lines.append(f"shift {i + 1}: {shift:.3f}")
        lines += [
            f"d1: {self.presaturation_duration_s:.3f}",
            f"bigpulse: {self.shaped_pulse_duration_s:.3f}",
            f"npulse: {self.num_elementary_pulses}",
            f"nsubstep: {self.substeps_per_pulse}",
            f"nu1: {self.field_amplitude_hz:.3f}",
        ]
        return lines
