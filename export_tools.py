import torch
import numpy as np

from presat_library.core.constants import PROFILE_LINE_FORMAT

class ProfileExporter:
    """
    Export presaturation profiles and shaped pulses to text files.
    Supported: profile .txt (offset/Mz columns), pulse shape .txt (B1x/B1y columns)
    """
    def __init__(self, profile_points, waveform=None):
        """
        Args:
            profile_points (sequence, torch.Tensor or np.ndarray): (offset_hz, residual_mz) pairs.
            waveform (ShapedPulseWaveform): Shaped pulse (optional).
        """
        if isinstance(profile_points, torch.Tensor):
            profile_points = profile_points.detach().cpu().numpy()
        self.profile = np.asarray(profile_points, dtype=np.float64).reshape(-1, 2)
        self.waveform = waveform

    def export_profile_txt(self, filename, header=True):
        """
        Export the profile, one tab-separated line per offset (offset in Hz, residual Mz).
        """
        with open(filename, 'w') as f:
            if header:
                f.write("# Presaturation profile\n")
                f.write("# Columns: Offset (Hz), Residual Mz (M0 units)\n")
            for offset_hz, mz in self.profile:
                f.write(PROFILE_LINE_FORMAT % (offset_hz, mz) + "\n")

    def export_waveform_txt(self, filename):
        """
        Export the shaped pulse: columns for B1x, B1y (Hz) and elementary pulse duration (us).
        """
        if self.waveform is None:
            raise ValueError("No waveform to export.")
        b1x_hz = self.waveform.field_x / (2 * np.pi)
        b1y_hz = self.waveform.field_y / (2 * np.pi)
        dwell_us = self.waveform.elementary_pulse_duration_s * 1e6
        with open(filename, 'w') as f:
            f.write("# Shaped presaturation pulse\n")
            f.write("# Columns: B1x (Hz), B1y (Hz), Duration (us)\n")
            for bx, by in zip(b1x_hz, b1y_hz):
                f.write(f"{bx:.6e}\t{by:.6e}\t{dwell_us:.3f}\n")
