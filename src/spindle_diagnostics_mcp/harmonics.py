"""
Shaft-harmonic helpers shared by the fault classifier.

Spectra arrive as plain sequences where bin ``i`` sits at roughly ``i`` Hz.
Entries are parsed leniently: anything that is not a finite number reads
as 0, so a half-broken payload still yields a verdict.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidArgumentError

# Half-width of the search window around each harmonic bin
HARMONIC_WINDOW_BINS = 5


@dataclass(frozen=True)
class HarmonicSet:
    """Expected bin locations of the 1x / 2x / 3x shaft harmonics."""
    o1: int
    o2: int
    o3: int

    def to_dict(self) -> dict:
        return {"o1": self.o1, "o2": self.o2, "o3": self.o3}


@dataclass(frozen=True)
class HarmonicAmplitudes:
    """Peak spectrum value found around each harmonic."""
    v1_max: float
    v2_max: float
    v3_max: float

    def rounded(self, ndigits: int = 5) -> HarmonicAmplitudes:
        return HarmonicAmplitudes(
            v1_max=round(self.v1_max, ndigits),
            v2_max=round(self.v2_max, ndigits),
            v3_max=round(self.v3_max, ndigits),
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.v1_max, self.v2_max, self.v3_max)

    def to_dict(self) -> dict:
        return {"v1_max": self.v1_max, "v2_max": self.v2_max, "v3_max": self.v3_max}


def parse_number(value: Any) -> float:
    """Lenient float conversion: anything unparseable or non-finite is 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def to_magnitudes(values: Sequence[Any] | NDArray | None) -> NDArray[np.float64]:
    """
    Coerce a raw sequence into a float array of absolute magnitudes.

    None, strings that do not parse, nested sequences, NaN and infinities
    all become 0.
    """
    if values is None:
        return np.zeros(0, dtype=np.float64)
    if isinstance(values, (list, tuple)):
        # Parse entry by entry; nested sequences read as 0.
        out = np.fromiter((parse_number(v) for v in values), dtype=np.float64, count=len(values))
        out[~np.isfinite(out)] = 0.0
        return np.abs(out)
    arr = np.asarray(values)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    if np.issubdtype(arr.dtype, np.number) and not np.issubdtype(arr.dtype, np.complexfloating):
        out = arr.astype(np.float64)
    else:
        out = np.fromiter((parse_number(v) for v in arr), dtype=np.float64, count=arr.size)
    out[~np.isfinite(out)] = 0.0
    return np.abs(out)


def harmonic_orders(rpm: float) -> HarmonicSet:
    """
    Convert a shaft speed in RPM into the 1x/2x/3x harmonic bins.

    Raises:
        InvalidArgumentError: rpm is not a number, or is negative, NaN or infinite.
    """
    try:
        rpm_f = float(rpm)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"rpm must be a number, got {rpm!r}") from None
    if not math.isfinite(rpm_f) or rpm_f < 0:
        raise InvalidArgumentError(f"rpm must be a finite non-negative number, got {rpm!r}")
    o1 = int(math.floor(rpm_f / 60.0))
    return HarmonicSet(o1=o1, o2=2 * o1, o3=3 * o1)


def windowed_max(
    spectrum: Sequence[Any] | NDArray,
    center: int,
    radius: int = HARMONIC_WINDOW_BINS,
) -> float:
    """
    Largest magnitude in ``spectrum[center - radius : center + radius]``
    (inclusive both ends), with the window clamped to the array bounds.

    Returns 0.0 for an empty spectrum or a window that falls entirely
    outside it.
    """
    mags = to_magnitudes(spectrum)
    start = max(0, center - radius)
    end = min(len(mags) - 1, center + radius)
    if end < start:
        return 0.0
    return max(0.0, float(np.max(mags[start:end + 1])))


def harmonic_amplitudes(
    spectrum: Sequence[Any] | NDArray,
    harmonics: HarmonicSet,
    radius: int = HARMONIC_WINDOW_BINS,
) -> HarmonicAmplitudes:
    """Windowed peak at each of the three harmonic bins of ``spectrum``."""
    mags = to_magnitudes(spectrum)
    return HarmonicAmplitudes(
        v1_max=windowed_max(mags, harmonics.o1, radius),
        v2_max=windowed_max(mags, harmonics.o2, radius),
        v3_max=windowed_max(mags, harmonics.o3, radius),
    )
