import math
import torch
from presat_library.core.constants import EQUILIBRIUM_MZ


def apply_relaxation(M, dt, R1, R2, M0=EQUILIBRIUM_MZ):
    """
    Applies T1 and T2 relaxation to magnetization M over time dt.
    Uses the exact solution of the relaxation-only Bloch equations, so the
    result does not depend on how dt is cut.

    Args:
        M (array-like or torch.Tensor): Magnetization [Mx, My, Mz], shape (..., 3).
        dt (float): Time interval in seconds.
        R1 (float): Longitudinal relaxation rate (1/s).
        R2 (float): Transverse relaxation rate (1/s).
        M0 (float): Equilibrium magnetization, defaults to 1.0.

    Returns:
        torch.Tensor: New magnetization, same shape as M.
    """
    M = torch.as_tensor(M, dtype=torch.float64) if not isinstance(M, torch.Tensor) else M

    if M.ndim == 0 or M.shape[-1] != 3:
        raise ValueError("M must have a last dimension of size 3.")
    if dt < 0:
        raise ValueError("dt cannot be negative.")

    E1 = math.exp(-R1 * dt)
    E2 = math.exp(-R2 * dt)

    M_new_x = M[..., 0] * E2
    M_new_y = M[..., 1] * E2
    M_new_z = M0 + (M[..., 2] - M0) * E1  # recovery toward M0 along z

    return torch.stack([M_new_x, M_new_y, M_new_z], dim=-1)


def rotation_matrix(axis, angle):
    """
    Builds the rotation matrix for a rotation of `angle` radians about a unit `axis`
    with Rodrigues' rotation formula:
        R = cos(a) I + sin(a) [k]x + (1 - cos(a)) k k^T

    The axis is not normalized here; callers pass unit vectors.

    Args:
        axis (torch.Tensor): Unit rotation axis, shape (..., 3).
        angle (torch.Tensor or float): Rotation angle(s), shape (...).

    Returns:
        torch.Tensor: Rotation matrices, shape (..., 3, 3).
    """
    axis = torch.as_tensor(axis, dtype=torch.float64) if not isinstance(axis, torch.Tensor) else axis
    angle = torch.as_tensor(angle, dtype=axis.dtype, device=axis.device)

    kx, ky, kz = axis[..., 0], axis[..., 1], axis[..., 2]
    cos_a = torch.cos(angle)
    sin_a = torch.sin(angle)
    one_minus_cos = 1 - cos_a

    row_x = torch.stack([cos_a + kx * kx * one_minus_cos,
                         kx * ky * one_minus_cos - kz * sin_a,
                         kx * kz * one_minus_cos + ky * sin_a], dim=-1)
    row_y = torch.stack([ky * kx * one_minus_cos + kz * sin_a,
                         cos_a + ky * ky * one_minus_cos,
                         ky * kz * one_minus_cos - kx * sin_a], dim=-1)
    row_z = torch.stack([kz * kx * one_minus_cos - ky * sin_a,
                         kz * ky * one_minus_cos + kx * sin_a,
                         cos_a + kz * kz * one_minus_cos], dim=-1)
    return torch.stack([row_x, row_y, row_z], dim=-2)


def apply_rotation(R, M):
    """
    Applies rotation matrices R (..., 3, 3) to magnetization vectors M (..., 3).
    """
    return torch.matmul(R, M.unsqueeze(-1)).squeeze(-1)


def advance_one_pulse(M, waveform, pulse_index, omega0, params):
    """
    Transforms magnetization M over one elementary pulse of the shaped pulse.

    Precession and relaxation are treated sequentially over params.substeps_per_pulse
    substeps: each substep rotates M about the effective field, then relaxes it.
    When the effective rotation frequency is not above params.rotation_tolerance_rad_s
    only relaxation is applied, over the full elementary pulse.

    Args:
        M (torch.Tensor): Magnetization before the pulse, shape (3,) or (N, 3).
        waveform (ShapedPulseWaveform): Shaped pulse, provides field_x and field_y (rad/s).
        pulse_index (int): Index of the elementary pulse within the shaped pulse.
        omega0 (float or torch.Tensor): Resonance offset(s) in rad/s, scalar or shape (N,).
        params (SimulationParameters): Relaxation rates, timing and tolerance.

    Returns:
        torch.Tensor: Magnetization after the pulse, same shape as M.
    """
    om1x = float(waveform.field_x[pulse_index])
    om1y = float(waveform.field_y[pulse_index])
    omega0 = torch.as_tensor(omega0, dtype=M.dtype, device=M.device)

    # Effective rotation frequency, norm of (om1x, om1y, omega0)
    om1 = torch.full_like(omega0, math.hypot(om1x, om1y))
    omeff = torch.hypot(omega0, om1)
    rotating = omeff > params.rotation_tolerance_rad_s

    if not bool(torch.any(rotating)):
        return apply_relaxation(M, params.elementary_pulse_duration_s,
                                params.R1, params.R2, params.equilibrium_mz)

    nsubstep = params.substeps_per_pulse
    dt = params.elementary_pulse_duration_s / nsubstep
    angle = omeff * dt

    # Null rows get a dummy norm; their result is replaced below
    norm = torch.where(rotating, omeff, torch.ones_like(omeff))
    axis = torch.stack([torch.full_like(omega0, om1x),
                        torch.full_like(omega0, om1y),
                        omega0], dim=-1) / norm.unsqueeze(-1)
    R = rotation_matrix(axis, angle)

    M_new = M
    for _ in range(nsubstep):
        M_new = apply_relaxation(apply_rotation(R, M_new), dt,
                                 params.R1, params.R2, params.equilibrium_mz)

    if bool(torch.all(rotating)):
        return M_new
    M_relaxed = apply_relaxation(M, params.elementary_pulse_duration_s,
                                 params.R1, params.R2, params.equilibrium_mz)
    return torch.where(rotating.unsqueeze(-1), M_new, M_relaxed)
