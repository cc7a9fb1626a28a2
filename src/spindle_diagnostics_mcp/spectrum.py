"""
Spectrum summaries for FFT snapshots.

The FFT service delivers magnitudes with bin ``i`` at roughly ``i`` Hz.
The first bins carry DC and low-frequency drift, so summaries only look at
the usable band: bins 10 .. 1009.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from .harmonics import to_magnitudes

BAND_START_BIN = 10
BAND_BINS = 1000
DEFAULT_TOP_PEAKS = 3


def usable_band(spectrum: Sequence[Any] | NDArray | None) -> list[dict]:
    """
    Non-zero points of the usable band as ``{frequency_hz, amplitude}``.

    Zero bins are dropped, matching what is worth plotting.
    """
    mags = to_magnitudes(spectrum)[BAND_START_BIN:BAND_START_BIN + BAND_BINS]
    nonzero = np.flatnonzero(mags)
    return [
        {"frequency_hz": int(i) + BAND_START_BIN, "amplitude": float(mags[i])}
        for i in nonzero
    ]


def top_peaks(
    spectrum: Sequence[Any] | NDArray | None,
    n: int = DEFAULT_TOP_PEAKS,
) -> list[dict]:
    """
    The ``n`` largest bins of the usable band, largest first.

    Ties keep ascending frequency order.
    """
    mags = to_magnitudes(spectrum)[BAND_START_BIN:BAND_START_BIN + BAND_BINS]
    if mags.size == 0 or n <= 0:
        return []
    order = np.argsort(-mags, kind="stable")[:n]
    return [
        {"frequency_hz": int(i) + BAND_START_BIN, "amplitude": round(float(mags[i]), 6)}
        for i in order
    ]


def summarize_spectrum(
    spectrum: Sequence[Any] | NDArray | None,
    top_n: int = DEFAULT_TOP_PEAKS,
) -> dict:
    """Compact summary: top peaks plus band statistics, no full arrays."""
    mags = to_magnitudes(spectrum)
    band = mags[BAND_START_BIN:BAND_START_BIN + BAND_BINS]
    summary = {
        "top_peaks": top_peaks(mags, top_n),
        "total_bins": int(mags.size),
        "band_bins": int(band.size),
        "band_nonzero_bins": int(np.count_nonzero(band)),
    }
    if band.size:
        summary["band_range_hz"] = [BAND_START_BIN, BAND_START_BIN + int(band.size) - 1]
        summary["max_amplitude"] = round(float(np.max(band)), 6)
    return summary
