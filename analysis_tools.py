import numpy as np
import matplotlib.pyplot as plt

from presat_library.simulators.profile_validator import analyze_saturation_profile

class ProfileAnalysis:
    """
    Analysis and visualization tools for presaturation profiles and their shaped pulses.
    """

    def __init__(self, profile_points, waveform=None, shifts_hz=None):
        """
        Args:
            profile_points (sequence): ProfilePoints or (offset_hz, residual_mz) pairs.
            waveform (ShapedPulseWaveform): Shaped pulse that produced the profile (optional).
            shifts_hz (sequence of float): Modulation frequencies to mark on plots (optional).
        """
        profile = np.asarray(profile_points, dtype=np.float64).reshape(-1, 2)
        self.offset_hz = profile[:, 0]
        self.mz = profile[:, 1]
        self.waveform = waveform
        self.shifts_hz = list(shifts_hz) if shifts_hz is not None else []

    def metrics(self, band_hz=None):
        """Saturation metrics of the profile at the modulation frequencies."""
        return analyze_saturation_profile(np.column_stack([self.offset_hz, self.mz]),
                                          self.shifts_hz, band_hz=band_hz)

    def plot_profile(self, show=True):
        """Plot residual Mz against resonance offset, with the modulation frequencies marked."""
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.plot(self.offset_hz, self.mz, color="#2C7BB6", lw=1.8, label='Residual $M_z$')
        for i, shift in enumerate(self.shifts_hz):
            ax.axvline(shift, color="#D7191C", lw=1.0, ls='--', alpha=0.7,
                       label='Modulation frequency' if i == 0 else None)
        ax.axhline(0, color='black', lw=0.5, alpha=0.4)
        ax.set_xlabel('Offset (Hz)')
        ax.set_ylabel('$M_z / M_0$')
        ax.set_title('Presaturation Profile')
        ax.legend(loc='lower right', fontsize=9)
        ax.grid(True, ls='--', alpha=0.35)
        fig.tight_layout()
        if show:
            plt.show()
        return fig

    def plot_waveform(self, show=True):
        """Plot the x and y components of the shaped pulse."""
        if self.waveform is None:
            raise ValueError("No waveform to plot.")
        t = self.waveform.time_vector_s() * 1e3  # ms
        fig, ax = plt.subplots(2, 1, sharex=True, figsize=(10, 4))
        ax[0].plot(t, self.waveform.field_x / (2 * np.pi), label='$B_{1x}$')
        ax[0].set_ylabel('$B_{1x}$ (Hz)')
        ax[0].set_title('Shaped Pulse')
        ax[1].plot(t, self.waveform.field_y / (2 * np.pi), label='$B_{1y}$', color="#E63946")
        ax[1].set_ylabel('$B_{1y}$ (Hz)')
        ax[1].set_xlabel('Time (ms)')
        fig.tight_layout()
        if show:
            plt.show()
        return fig
