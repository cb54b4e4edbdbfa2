# File: presat_library/rf_pulses/slp/slp_pulse.py
import numpy as np


class ShapedPulseWaveform:
    """
    In-phase (x) and quadrature (y) components of a shaped presaturation pulse,
    one value per elementary pulse, in rad/s.

    The arrays are made read-only so that one waveform can be shared by every
    offset trajectory of a sweep.
    """
    def __init__(self, field_x, field_y, elementary_pulse_duration_s):
        field_x = np.array(field_x, dtype=np.float64)
        field_y = np.array(field_y, dtype=np.float64)
        if field_x.ndim != 1 or field_y.ndim != 1:
            raise ValueError("field_x and field_y must be 1D arrays.")
        if field_x.shape != field_y.shape:
            raise ValueError(f"field_x and field_y must have the same length, got {len(field_x)} and {len(field_y)}.")
        if field_x.size == 0:
            raise ValueError("A shaped pulse needs at least one elementary pulse.")
        if elementary_pulse_duration_s <= 0:
            raise ValueError("elementary_pulse_duration_s must be positive.")
        field_x.flags.writeable = False
        field_y.flags.writeable = False
        self.field_x = field_x
        self.field_y = field_y
        self.elementary_pulse_duration_s = float(elementary_pulse_duration_s)

    @property
    def num_pulses(self):
        return self.field_x.size

    def time_vector_s(self):
        """Start time of each elementary pulse (s)."""
        return np.arange(self.num_pulses) * self.elementary_pulse_duration_s

    def as_complex(self):
        """B1 field as a complex array field_x + i*field_y (rad/s)."""
        return self.field_x + 1j * self.field_y

    def __len__(self):
        return self.num_pulses

    def __repr__(self):
        return (f"ShapedPulseWaveform(num_pulses={self.num_pulses}, "
                f"elementary_pulse_duration_s={self.elementary_pulse_duration_s:.3e})")


def generate_slp_waveform(shifts_hz, elementary_pulse_duration_s, num_elementary_pulses,
                          total_amplitude_rad_s):
    """
    Generates a shifted laminar pulse (SLP) for multiple presaturation.

    The RF field intensity is split equally between the modulations. Each modulation
    contributes a phase-ramped unit phasor whose phase starts at 0 and advances by
    2*pi*shift*elementary_pulse_duration_s after each elementary pulse.

    Args:
        shifts_hz (sequence of float): Modulation frequencies (Hz), at least one.
        elementary_pulse_duration_s (float): Duration of one elementary pulse (s).
        num_elementary_pulses (int): Number of elementary pulses in the shaped pulse.
        total_amplitude_rad_s (float): Total RF field intensity (rad/s).

    Returns:
        ShapedPulseWaveform: x and y components of the shaped pulse (rad/s).
    """
    shifts_hz = np.atleast_1d(np.asarray(shifts_hz, dtype=np.float64))
    if shifts_hz.size == 0:
        raise ValueError("At least one modulation shift is required.")
    if num_elementary_pulses < 1:
        raise ValueError("num_elementary_pulses must be at least 1.")
    if elementary_pulse_duration_s <= 0:
        raise ValueError("elementary_pulse_duration_s must be positive.")

    per_shift_amplitude = total_amplitude_rad_s / shifts_hz.size
    pulse_indices = np.arange(num_elementary_pulses)

    field_x = np.zeros(num_elementary_pulses, dtype=np.float64)
    field_y = np.zeros(num_elementary_pulses, dtype=np.float64)
    for shift in shifts_hz:
        dphi = 2 * np.pi * shift * elementary_pulse_duration_s
        phi = pulse_indices * dphi
        field_x += np.cos(phi)
        field_y += np.sin(phi)

    # The same intensity applies to every modulation, so both components are scaled once
    field_x *= per_shift_amplitude
    field_y *= per_shift_amplitude

    return ShapedPulseWaveform(field_x, field_y, elementary_pulse_duration_s)


def build_waveform(params):
    """
    Generates the SLP waveform described by a SimulationParameters instance.
    """
    return generate_slp_waveform(
        params.modulation_shifts_hz,
        params.elementary_pulse_duration_s,
        params.num_elementary_pulses,
        params.field_amplitude_rad_s,
    )
