# File: presat_library/tests/test_presaturation_simulator.py
import contextlib
import io
import math
import unittest
import numpy as np
import torch
from presat_library.core.parameters import SimulationParameters
from presat_library.rf_pulses.slp import build_waveform, generate_slp_waveform
from presat_library.simulators.presaturation_simulator import (
    ProfilePoint,
    initial_magnetization,
    simulate_one_offset,
    sweep_offsets,
    iter_profile,
    run_sweep,
    PresaturationSimulator
)


def make_params(**overrides):
    # Short T2: a targeted offset reaches its near-zero steady state well within d1
    settings = dict(
        T1=1.0, T2=0.01,
        offset_steps=8, offset_min_hz=-500.0, offset_max_hz=500.0,
        modulation_shifts_hz=(0.0,),
        presaturation_duration_s=0.1,
        shaped_pulse_duration_s=0.01,
        num_elementary_pulses=20,
        substeps_per_pulse=5,
        field_amplitude_hz=25.0,
    )
    settings.update(overrides)
    return SimulationParameters(**settings)


class TestSimulationParameters(unittest.TestCase):

    def test_derived_quantities(self):
        params = make_params()
        self.assertAlmostEqual(params.R1, 1.0)
        self.assertAlmostEqual(params.R2, 100.0)
        self.assertAlmostEqual(params.elementary_pulse_duration_s, 5e-4)
        self.assertEqual(params.num_offsets, 9)
        self.assertAlmostEqual(params.offset_increment_hz, 125.0)
        self.assertAlmostEqual(params.field_amplitude_rad_s, 2 * math.pi * 25.0)

    def test_repeat_count_rounds_to_nearest(self):
        self.assertEqual(make_params(presaturation_duration_s=0.1).repeat_count, 10)
        self.assertEqual(make_params(presaturation_duration_s=0.024).repeat_count, 2)
        self.assertEqual(make_params(presaturation_duration_s=0.026).repeat_count, 3)
        self.assertEqual(make_params(presaturation_duration_s=0.004).repeat_count, 0)

    def test_single_offset_has_null_increment(self):
        params = make_params(offset_steps=0, offset_min_hz=42.0, offset_max_hz=100.0)
        self.assertEqual(params.offset_increment_hz, 0.0)
        self.assertEqual(params.num_offsets, 1)

    def test_shifts_are_frozen(self):
        params = make_params(modulation_shifts_hz=[-10, 10])
        self.assertEqual(params.modulation_shifts_hz, (-10.0, 10.0))
        self.assertEqual(params.shift_count, 2)

    def test_invalid_parameters(self):
        invalid = [
            dict(T1=0.0),
            dict(T2=-1.0),
            dict(offset_steps=-1),
            dict(modulation_shifts_hz=()),
            dict(presaturation_duration_s=-0.1),
            dict(shaped_pulse_duration_s=0.0),
            dict(num_elementary_pulses=0),
            dict(substeps_per_pulse=0),
            dict(T1=float("nan")),
            dict(T2=float("inf")),
            dict(offset_min_hz=float("-inf")),
            dict(offset_max_hz=float("nan")),
            dict(modulation_shifts_hz=(0.0, float("nan"))),
            dict(presaturation_duration_s=float("inf")),
            dict(shaped_pulse_duration_s=float("nan")),
            dict(field_amplitude_hz=float("inf")),
        ]
        for overrides in invalid:
            with self.assertRaises(ValueError, msg=str(overrides)):
                make_params(**overrides)


class TestSweepOffsets(unittest.TestCase):

    def test_offsets_from_min_to_max(self):
        offsets_hz, omegas = sweep_offsets(make_params())
        self.assertEqual(offsets_hz, [-500.0, -375.0, -250.0, -125.0, 0.0, 125.0, 250.0, 375.0, 500.0])
        for nu0, om0 in zip(offsets_hz, omegas):
            self.assertAlmostEqual(om0, 2 * math.pi * nu0, places=9)

    def test_single_offset(self):
        offsets_hz, omegas = sweep_offsets(make_params(offset_steps=0, offset_min_hz=-30.0))
        self.assertEqual(offsets_hz, [-30.0])
        self.assertEqual(len(omegas), 1)

    def test_accumulated_offsets_stay_close_to_max(self):
        offsets_hz, _ = sweep_offsets(make_params(offset_steps=1000, offset_min_hz=-1.0, offset_max_hz=1.0))
        self.assertEqual(len(offsets_hz), 1001)
        self.assertAlmostEqual(offsets_hz[-1], 1.0, places=9)
        self.assertTrue(np.all(np.diff(offsets_hz) > 0))


class TestSimulateOneOffset(unittest.TestCase):

    def test_initial_magnetization(self):
        params = make_params()
        self.assertTrue(torch.equal(initial_magnetization(params),
                                    torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64)))
        self.assertEqual(initial_magnetization(params, 4).shape, (4, 3))

    def test_no_presaturation_leaves_equilibrium(self):
        params = make_params(presaturation_duration_s=0.0)
        waveform = build_waveform(params)
        M = simulate_one_offset(0.0, waveform, params)
        self.assertTrue(torch.equal(M, initial_magnetization(params)))

    def test_no_field_on_resonance_stays_at_equilibrium(self):
        params = make_params(field_amplitude_hz=0.0)
        M = simulate_one_offset(0.0, build_waveform(params), params)
        self.assertTrue(torch.equal(M, initial_magnetization(params)))

    def test_no_field_off_resonance_stays_at_equilibrium(self):
        params = make_params(field_amplitude_hz=0.0)
        M = simulate_one_offset(2 * math.pi * 300.0, build_waveform(params), params)
        self.assertTrue(torch.allclose(M, initial_magnetization(params), atol=1e-12))

    def test_without_field_relaxation_recovers_equilibrium(self):
        params = make_params(T1=1.0, T2=1.0, offset_steps=0, offset_min_hz=0.0, offset_max_hz=0.0,
                             field_amplitude_hz=0.0, presaturation_duration_s=0.05)
        profile = run_sweep(params, build_waveform(params))
        self.assertEqual(len(profile), 1)
        self.assertEqual(profile[0].offset_hz, 0.0)
        self.assertAlmostEqual(profile[0].residual_mz, 1.0, places=12)

    def test_longer_presaturation_never_raises_mz_on_resonance(self):
        # 2*om1 < R2 - R1: the on-resonance approach to steady state does not overshoot
        previous = None
        for d1 in [0.0, 0.01, 0.02, 0.05, 0.1, 0.2, 0.4]:
            params = make_params(T1=0.2, T2=0.01, field_amplitude_hz=4.0, presaturation_duration_s=d1)
            mz = simulate_one_offset(0.0, build_waveform(params), params)[2].item()
            if previous is not None:
                self.assertLessEqual(mz, previous + 1e-12)
            previous = mz
        self.assertLess(previous, 0.5)

    def test_target_is_saturated(self):
        params = make_params()
        M = simulate_one_offset(0.0, build_waveform(params), params)
        self.assertLess(abs(M[2].item()), 0.02)

    def test_far_offset_is_spared(self):
        params = make_params()
        M = simulate_one_offset(2 * math.pi * 2000.0, build_waveform(params), params)
        self.assertGreater(M[2].item(), 0.9)

    def test_magnetization_never_grows(self):
        params = make_params(T2=0.5, field_amplitude_hz=60.0, modulation_shifts_hz=(-120.0, 80.0))
        waveform = build_waveform(params)
        omegas = [2 * math.pi * nu0 for nu0 in (-300.0, -120.0, 0.0, 80.0, 310.0)]
        M = simulate_one_offset(omegas, waveform, params)
        self.assertTrue(torch.all(torch.linalg.norm(M, dim=-1) <= 1.0 + 1e-12))

    def test_batch_matches_single_offsets(self):
        params = make_params(modulation_shifts_hz=(-250.0, 250.0))
        waveform = build_waveform(params)
        omegas = [0.0, 2 * math.pi * 250.0, 2 * math.pi * -90.0]
        M_batch = simulate_one_offset(omegas, waveform, params)
        for i, om0 in enumerate(omegas):
            M_single = simulate_one_offset(om0, waveform, params)
            self.assertTrue(torch.allclose(M_batch[i], M_single, atol=1e-12))

    def test_waveform_length_must_match(self):
        params = make_params()
        waveform = generate_slp_waveform([0.0], params.elementary_pulse_duration_s, 7,
                                         params.field_amplitude_rad_s)
        with self.assertRaises(ValueError):
            simulate_one_offset(0.0, waveform, params)

    def test_offsets_must_be_one_dimensional(self):
        params = make_params()
        with self.assertRaises(ValueError):
            simulate_one_offset([[0.0, 1.0]], build_waveform(params), params)


class TestProfile(unittest.TestCase):

    def setUp(self):
        # 250 Hz over a 20 ms shaped pulse: a whole number of modulation cycles
        self.params = make_params(modulation_shifts_hz=(-250.0, 250.0), presaturation_duration_s=0.2,
                                  shaped_pulse_duration_s=0.02, num_elementary_pulses=40)
        self.waveform = build_waveform(self.params)

    def test_profile_points(self):
        profile = run_sweep(self.params, self.waveform)
        self.assertEqual(len(profile), self.params.num_offsets)
        self.assertIsInstance(profile[0], ProfilePoint)
        self.assertEqual(profile[0].offset_hz, -500.0)
        self.assertAlmostEqual(profile[-1].offset_hz, 500.0)
        for point in profile:
            self.assertLessEqual(abs(point.residual_mz), 1.0)

    def test_both_targets_saturated(self):
        profile = {p.offset_hz: p.residual_mz for p in run_sweep(self.params, self.waveform)}
        self.assertLess(abs(profile[-250.0]), 0.05)
        self.assertLess(abs(profile[250.0]), 0.05)
        # Between the two targets the magnetization is mostly preserved
        self.assertGreater(profile[0.0], 0.8)

    def test_profile_of_real_field_is_symmetric(self):
        mz = np.array([p.residual_mz for p in run_sweep(self.params, self.waveform)])
        self.assertTrue(np.allclose(mz, mz[::-1], atol=1e-9))

    def test_chunked_profile_matches_single_batch(self):
        whole = run_sweep(self.params, self.waveform)
        for chunk_size in [1, 2, 4, 100]:
            chunked = run_sweep(self.params, self.waveform, chunk_size=chunk_size)
            self.assertEqual([p.offset_hz for p in chunked], [p.offset_hz for p in whole])
            self.assertTrue(np.allclose([p.residual_mz for p in chunked],
                                        [p.residual_mz for p in whole], atol=1e-12))

    def test_profile_is_streamed(self):
        points = iter_profile(self.params, self.waveform, chunk_size=3)
        first = next(points)
        self.assertEqual(first.offset_hz, -500.0)
        self.assertEqual(len(list(points)), self.params.num_offsets - 1)

    def test_invalid_chunk_size(self):
        with self.assertRaises(ValueError):
            run_sweep(self.params, self.waveform, chunk_size=0)


class TestModulationSense(unittest.TestCase):

    def residual_mz(self, params, offset_hz):
        return simulate_one_offset(2 * math.pi * offset_hz, build_waveform(params), params)[2].item()

    def test_single_shift_saturates_its_own_side(self):
        params = make_params(modulation_shifts_hz=(100.0,))
        self.assertLess(self.residual_mz(params, 100.0), 0.05)
        self.assertGreater(self.residual_mz(params, -100.0), 0.6)

    def test_phase_restarts_with_every_shaped_pulse(self):
        # The modulation phase starts at 0 on each repetition of the shaped pulse.
        # With half a cycle per 10 ms pulse the field flips sign at every repetition.
        whole_cycle = make_params(modulation_shifts_hz=(100.0,), presaturation_duration_s=0.2)
        half_cycle = make_params(modulation_shifts_hz=(50.0,), presaturation_duration_s=0.2)
        self.assertLess(self.residual_mz(whole_cycle, 100.0), 0.05)
        self.assertGreater(self.residual_mz(half_cycle, 50.0), 0.2)


class TestPresaturationSimulator(unittest.TestCase):

    def test_simulator_matches_functional_sweep(self):
        params = make_params(offset_steps=4)
        simulator = PresaturationSimulator(params, chunk_size=2)
        profile = simulator.run_sweep()
        expected = run_sweep(params, build_waveform(params))
        self.assertEqual(len(profile), 5)
        for point, ref in zip(profile, expected):
            self.assertEqual(point.offset_hz, ref.offset_hz)
            self.assertAlmostEqual(point.residual_mz, ref.residual_mz, places=12)

    def test_single_offset_in_hz(self):
        params = make_params(offset_steps=2, offset_min_hz=-250.0, offset_max_hz=250.0)
        simulator = PresaturationSimulator(params)
        profile = simulator.run_sweep()
        M = simulator.simulate_offset_hz(250.0)
        self.assertEqual(M.shape, (3,))
        self.assertAlmostEqual(M[2].item(), profile[-1].residual_mz, places=12)

    def test_verbose_logs_to_stderr(self):
        params = make_params(offset_steps=1)
        stderr = io.StringIO()
        stdout = io.StringIO()
        with contextlib.redirect_stderr(stderr), contextlib.redirect_stdout(stdout):
            PresaturationSimulator(params, verbose=True).run_sweep()
        self.assertIn("[PresaturationSimulator]", stderr.getvalue())
        self.assertEqual(stdout.getvalue(), "")

    def test_quiet_by_default(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            PresaturationSimulator(make_params(offset_steps=1)).run_sweep()
        self.assertEqual(stderr.getvalue(), "")


if __name__ == '__main__':
    unittest.main()
