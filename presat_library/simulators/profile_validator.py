# File: presat_library/simulators/profile_validator.py
# Saturation metrics of a presaturation profile: how well the targeted
# frequencies are saturated and how much the rest of the spectrum is spared.

import numpy as np


class SaturationMetrics:
    """
    A class to hold validation metrics of a presaturation profile.
    """
    def __init__(self):
        self.residual_mz_at_shifts = {}
        self.min_residual_mz = None
        self.offset_of_min_hz = None
        self.mean_mz_outside_bands = None
        # Add more metrics as needed

    def __str__(self):
        metrics_str = []
        for shift_hz, mz in self.residual_mz_at_shifts.items():
            metrics_str.append(f"Residual Mz at {shift_hz:.1f} Hz: {mz:.6f}")
        if self.min_residual_mz is not None:
            metrics_str.append(f"Minimum residual Mz: {self.min_residual_mz:.6f} at {self.offset_of_min_hz:.1f} Hz")
        if self.mean_mz_outside_bands is not None:
            metrics_str.append(f"Mean Mz outside saturation bands: {self.mean_mz_outside_bands:.6f}")

        return "\n".join(metrics_str) if metrics_str else "No metrics calculated."


def analyze_saturation_profile(profile_points, shifts_hz, band_hz=None):
    """
    Analyzes a presaturation profile around the modulation frequencies of the shaped pulse.

    Args:
        profile_points (sequence): ProfilePoints or (offset_hz, residual_mz) pairs.
        shifts_hz (sequence of float): Targeted modulation frequencies (Hz).
        band_hz (float, optional): Full width of the band around each shift that counts
            as saturated. Offsets farther than band_hz/2 from every shift are "outside".
            If None, the mean outside the bands is not calculated.

    Returns:
        SaturationMetrics: residual Mz at the offset nearest each shift, profile minimum
                           and mean Mz outside the saturation bands.
    """
    metrics = SaturationMetrics()
    if len(profile_points) == 0:
        return metrics

    profile = np.asarray(profile_points, dtype=np.float64)
    if profile.ndim != 2 or profile.shape[1] != 2:
        raise ValueError("profile_points must be a sequence of (offset_hz, residual_mz) pairs.")
    offsets_hz = profile[:, 0]
    mz = profile[:, 1]

    for shift_hz in shifts_hz:
        nearest = np.argmin(np.abs(offsets_hz - shift_hz))
        metrics.residual_mz_at_shifts[float(shift_hz)] = float(mz[nearest])

    idx_min = np.argmin(mz)
    metrics.min_residual_mz = float(mz[idx_min])
    metrics.offset_of_min_hz = float(offsets_hz[idx_min])

    if band_hz is not None:
        if band_hz < 0:
            raise ValueError("band_hz cannot be negative.")
        outside = np.ones_like(offsets_hz, dtype=bool)
        for shift_hz in shifts_hz:
            outside &= np.abs(offsets_hz - shift_hz) > band_hz / 2
        if np.any(outside):
            metrics.mean_mz_outside_bands = float(np.mean(mz[outside]))

    return metrics
