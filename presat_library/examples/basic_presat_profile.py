# presat_library/examples/basic_presat_profile.py
"""
Example script demonstrating a double presaturation with a shifted laminar pulse.
This script shows how to:
1. Describe the simulation with SimulationParameters.
2. Build the shaped pulse and sweep the resonance offset.
3. Check how well the two targeted frequencies are saturated.
"""
from presat_library.core.parameters import SimulationParameters
from presat_library.simulators import PresaturationSimulator, analyze_saturation_profile


def run_basic_presat_example():
    # 1. Two signals to saturate, at -250 Hz and +250 Hz
    params = SimulationParameters(
        T1=2.0, T2=1.0,
        offset_steps=100, offset_min_hz=-500.0, offset_max_hz=500.0,
        modulation_shifts_hz=(-250.0, 250.0),
        presaturation_duration_s=1.0,
        shaped_pulse_duration_s=0.05,
        num_elementary_pulses=250,
        substeps_per_pulse=4,
        field_amplitude_hz=25.0,
    )

    # 2. Sweep
    simulator = PresaturationSimulator(params, verbose=True)
    profile = simulator.run_sweep()
    print(f"Simulated {len(profile)} offsets.")

    # 3. Residual magnetization at the targets
    metrics = analyze_saturation_profile(profile, params.modulation_shifts_hz, band_hz=50.0)
    print("Saturation Metrics:")
    print(metrics)


if __name__ == "__main__":
    run_basic_presat_example()
