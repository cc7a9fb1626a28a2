"""
generate_sample_data.py — Create synthetic spindle telemetry snapshots.

Writes JSON files in the combined edge-endpoint shape (FFT raw_data, vibration
channels, tachometer R1) with known harmonic signatures, so the diagnosis
pipeline can be verified without a live spindle.

Usage:
    python generate_sample_data.py

Outputs:
    examples/sample_data/healthy_spindle.json
    examples/sample_data/unbalance_spindle.json
    examples/sample_data/misalignment_spindle.json
    examples/sample_data/looseness_spindle.json
"""

import json
import os

import numpy as np

N_BINS = 1024
N_SAMPLES = 2000
SAMPLE_RATE = 1000.0


def generate_spectrum(
    rpm: float,
    harmonic_amps: tuple[float, float, float],
    noise_floor: float = 0.01,
    seed: int = 42,
) -> list[float]:
    """
    FFT magnitude spectrum (bin i = i Hz) with peaks at the 1x/2x/3x
    shaft harmonics on top of a noise floor.
    """
    rng = np.random.default_rng(seed)
    spectrum = np.abs(rng.normal(0, noise_floor, N_BINS))
    o1 = int(rpm // 60)
    for order, amp in enumerate(harmonic_amps, 1):
        center = order * o1
        for offset, weight in ((-1, 0.4), (0, 1.0), (1, 0.4)):
            idx = center + offset
            if 0 <= idx < N_BINS:
                spectrum[idx] += amp * weight
    return [round(float(v), 6) for v in spectrum]


def generate_vibration(
    rpm: float,
    peak_mm_s: float,
    noise_level: float = 0.05,
    seed: int = 42,
) -> list[float]:
    """Time-domain velocity signal (mm/s) dominated by the 1x component."""
    rng = np.random.default_rng(seed)
    t = np.arange(N_SAMPLES) / SAMPLE_RATE
    f1 = rpm / 60.0
    signal = peak_mm_s * np.sin(2 * np.pi * f1 * t)
    signal += rng.normal(0, noise_level, N_SAMPLES)
    return [round(float(v), 5) for v in signal]


def build_snapshot(
    rpm: float,
    harmonic_amps: tuple[float, float, float],
    peaks_mm_s: tuple[float, float, float],
    metadata: dict,
    seed: int,
) -> dict:
    return {
        "R1": rpm,
        "raw_data": {
            f"F{ch}": generate_spectrum(rpm, harmonic_amps, seed=seed + ch)
            for ch in (1, 2, 3)
        },
        "vibration": [{
            f"V{ch}": generate_vibration(rpm, peaks_mm_s[ch - 1], seed=seed + 10 + ch)
            for ch in (1, 2, 3)
        }],
        "metadata": metadata,
    }


SCENARIOS = {
    "healthy_spindle": dict(
        rpm=1800.0,
        harmonic_amps=(0.03, 0.02, 0.01),
        peaks_mm_s=(0.6, 0.5, 0.4),
        metadata={
            "description": "Healthy spindle, all harmonics at noise level",
            "expected_fault": "NoFaultCondition",
            "expected_severity_class_1": "Good",
        },
    ),
    "unbalance_spindle": dict(
        rpm=1800.0,
        harmonic_amps=(5.0, 1.0, 0.2),
        peaks_mm_s=(2.2, 1.4, 0.9),
        metadata={
            "description": "Spindle with rotor unbalance, decreasing 1x > 2x > 3x",
            "expected_fault": "Unbalance",
            "expected_severity_class_1": "Satisfactory",
        },
    ),
    "misalignment_spindle": dict(
        rpm=1500.0,
        harmonic_amps=(1.2, 3.4, 0.8),
        peaks_mm_s=(4.8, 3.1, 2.0),
        metadata={
            "description": "Coupled spindle with parallel misalignment, dominant 2x",
            "expected_fault": "ParallelMisalignment",
            "expected_severity_class_1": "Unsatisfactory",
        },
    ),
    "looseness_spindle": dict(
        rpm=1200.0,
        harmonic_amps=(0.9, 1.1, 2.6),
        peaks_mm_s=(8.3, 6.0, 5.1),
        metadata={
            "description": "Spindle housing with extreme looseness, dominant 3x",
            "expected_fault": "ExtremeLooseness",
            "expected_severity_class_1": "Unacceptable",
        },
    ),
}


def main():
    out_dir = os.path.join(os.path.dirname(__file__), "sample_data")
    os.makedirs(out_dir, exist_ok=True)

    for seed, (name, scenario) in enumerate(SCENARIOS.items(), start=42):
        snapshot = build_snapshot(seed=seed * 100, **scenario)
        path = os.path.join(out_dir, f"{name}.json")
        with open(path, "w") as f:
            json.dump(snapshot, f)
        print(f"Created {name}.json (rpm={scenario['rpm']:.0f}, "
              f"expected {scenario['metadata']['expected_fault']})")

    print(f"\nAll sample data files saved to: {out_dir}")


if __name__ == "__main__":
    main()
