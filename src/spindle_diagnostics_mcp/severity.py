"""
ISO 10816 vibration severity classification.

Maps a peak velocity amplitude (mm/s) onto one of four tiers using the
threshold triple of the selected machine class:

    Class I    small machines
    Class II   medium machines
    Class III  large machines on rigid foundations
    Class IV   large machines on soft foundations
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidArgumentError
from .harmonics import parse_number, to_magnitudes


class MachineClass(str, Enum):
    I = "1"
    II = "2"
    III = "3"
    IV = "4"


class SeverityStatus(str, Enum):
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    UNSATISFACTORY = "Unsatisfactory"
    UNACCEPTABLE = "Unacceptable"


@dataclass(frozen=True)
class ClassThresholds:
    """Upper bounds (mm/s, inclusive) of the three lower tiers."""
    good: float
    satisfactory: float
    unsatisfactory: float

    def to_dict(self) -> dict:
        return {
            "good": self.good,
            "satisfactory": self.satisfactory,
            "unsatisfactory": self.unsatisfactory,
        }


ISO_10816_CLASS_THRESHOLDS: dict[MachineClass, ClassThresholds] = {
    MachineClass.I: ClassThresholds(good=1.12, satisfactory=2.80, unsatisfactory=7.10),
    MachineClass.II: ClassThresholds(good=1.80, satisfactory=4.50, unsatisfactory=11.2),
    MachineClass.III: ClassThresholds(good=2.80, satisfactory=7.10, unsatisfactory=18.0),
    MachineClass.IV: ClassThresholds(good=4.50, satisfactory=11.2, unsatisfactory=28.0),
}

MACHINE_CLASS_LABELS: dict[MachineClass, str] = {
    MachineClass.I: "Class I - Small machines",
    MachineClass.II: "Class II - Medium machines",
    MachineClass.III: "Class III - Large rigid foundation",
    MachineClass.IV: "Class IV - Large soft foundation",
}

# Semantic colour names; the rendering layer owns the exact palette.
SEVERITY_COLORS: dict[SeverityStatus, str] = {
    SeverityStatus.GOOD: "emerald",
    SeverityStatus.SATISFACTORY: "lime",
    SeverityStatus.UNSATISFACTORY: "orange",
    SeverityStatus.UNACCEPTABLE: "red",
}

# Samples scanned per channel when extracting the peak amplitude
PEAK_SAMPLE_LIMIT = 1000

CHANNEL_KEYS = ("V1", "V2", "V3")
ALL_CHANNELS = "all"


@dataclass(frozen=True)
class SeverityVerdict:
    status: SeverityStatus
    color: str
    amplitude_mm_s: float
    machine_class: MachineClass

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "color": self.color,
            "amplitude_mm_s": round(self.amplitude_mm_s, 3),
            "machine_class": self.machine_class.value,
            "machine_class_label": MACHINE_CLASS_LABELS[self.machine_class],
            "thresholds": ISO_10816_CLASS_THRESHOLDS[self.machine_class].to_dict(),
        }


def parse_machine_class(machine_class: Any) -> MachineClass:
    """
    Accept a MachineClass, "1".."4", 1..4 or a roman numeral "I".."IV".

    Raises:
        InvalidArgumentError: for anything else.
    """
    if isinstance(machine_class, MachineClass):
        return machine_class
    key = str(machine_class).strip()
    for mc in MachineClass:
        if key == mc.value or key.upper() == mc.name:
            return mc
    valid = ", ".join(mc.value for mc in MachineClass)
    raise InvalidArgumentError(
        f"Unknown machine class {machine_class!r}. Expected one of: {valid} (or I..IV)."
    )


def classify_severity(amplitude: float, machine_class: Any) -> SeverityVerdict:
    """
    Classify vibration severity per ISO 10816.

    Only the magnitude of ``amplitude`` matters. A value equal to a
    threshold belongs to the lower tier.

    Args:
        amplitude: Peak vibration velocity in mm/s.
        machine_class: MachineClass or "1".."4".

    Raises:
        InvalidArgumentError: machine_class is not one of the four classes.
    """
    mc = parse_machine_class(machine_class)
    thresholds = ISO_10816_CLASS_THRESHOLDS[mc]
    value = abs(parse_number(amplitude))

    if value <= thresholds.good:
        status = SeverityStatus.GOOD
    elif value <= thresholds.satisfactory:
        status = SeverityStatus.SATISFACTORY
    elif value <= thresholds.unsatisfactory:
        status = SeverityStatus.UNSATISFACTORY
    else:
        status = SeverityStatus.UNACCEPTABLE

    return SeverityVerdict(
        status=status,
        color=SEVERITY_COLORS[status],
        amplitude_mm_s=value,
        machine_class=mc,
    )


# ---------------------------------------------------------------------------
# Peak amplitude extraction
# ---------------------------------------------------------------------------

def channel_peak(
    samples: Sequence[Any] | NDArray | None,
    limit: int = PEAK_SAMPLE_LIMIT,
) -> float:
    """Largest absolute value within the first ``limit`` samples (0 if none)."""
    mags = to_magnitudes(samples)[:limit]
    if mags.size == 0:
        return 0.0
    return float(np.max(mags))


def _channel_key(channel: Any) -> str:
    key = str(channel).strip().upper()
    if key.startswith("V"):
        key = key[1:]
    if key in ("1", "2", "3"):
        return f"V{key}"
    raise InvalidArgumentError(
        f"Unknown channel {channel!r}. Expected '1', '2', '3' or '{ALL_CHANNELS}'."
    )


def peak_amplitude(
    channels: Mapping[str, Sequence[Any] | NDArray | None] | None,
    channel: Any = ALL_CHANNELS,
    limit: int = PEAK_SAMPLE_LIMIT,
) -> float:
    """
    Peak amplitude used for severity classification.

    Args:
        channels: Mapping with up to three sample arrays under 'V1'..'V3'.
        channel: '1', '2', '3' to use a single channel, or 'all' for the
            largest of the three per-channel peaks.
        limit: Samples scanned per channel.

    Raises:
        InvalidArgumentError: channel is not a known selector.
    """
    channels = channels or {}
    if str(channel).strip().lower() == ALL_CHANNELS:
        return max(channel_peak(channels.get(k), limit) for k in CHANNEL_KEYS)
    return channel_peak(channels.get(_channel_key(channel)), limit)


def classify_channel_severity(
    channels: Mapping[str, Sequence[Any] | NDArray | None] | None,
    machine_class: Any,
    channel: Any = ALL_CHANNELS,
    limit: int = PEAK_SAMPLE_LIMIT,
) -> SeverityVerdict:
    """Extract the peak for ``channel`` and classify it."""
    return classify_severity(peak_amplitude(channels, channel, limit), machine_class)

