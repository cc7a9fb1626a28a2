"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the spindle diagnostics test suite.
"""
import os

import numpy as np
import pytest

os.environ.setdefault("SPINDLE_DEFAULT_MACHINE_CLASS", "1")
os.environ.setdefault("SPINDLE_TOP_PEAKS", "3")
os.environ.setdefault("SPINDLE_LOG_LEVEL", "WARNING")


def make_spectrum(peaks: dict[int, float], n_bins: int = 1024) -> np.ndarray:
    """Zero spectrum with the given {bin: amplitude} peaks."""
    spectrum = np.zeros(n_bins)
    for idx, amp in peaks.items():
        spectrum[idx] = amp
    return spectrum


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def unbalance_spectrum() -> np.ndarray:
    """RPM 1800 → harmonics at bins 30 / 60 / 90 with a decreasing pattern."""
    return make_spectrum({30: 5.0, 60: 1.0, 90: 0.2})


@pytest.fixture
def vibration_channels() -> dict:
    return {
        "V1": [0.1, -0.9, 0.5],
        "V2": [-3.2, 1.0, 2.0],
        "V3": [0.4, 0.4, -0.2],
    }


@pytest.fixture
def combined_payload(unbalance_spectrum, vibration_channels) -> dict:
    """FFT, vibration and tachometer payloads merged in one object."""
    return {
        "R1": 1800,
        "raw_data": {
            "F1": unbalance_spectrum.tolist(),
            "F2": [0.0] * 200,
            "F3": [0.0] * 200,
        },
        "vibration": [vibration_channels],
    }


@pytest.fixture
def clean_store():
    from spindle_diagnostics_mcp.data_store import store
    for data_id in store.list_ids():
        store.remove(data_id)
    yield store
    for data_id in store.list_ids():
        store.remove(data_id)
