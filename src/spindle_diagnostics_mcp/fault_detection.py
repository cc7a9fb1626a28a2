"""
Harmonic-order fault classification for rotating spindles.

The shaft speed fixes where the 1x, 2x and 3x harmonics fall in the FFT
magnitude spectrum. The peak amplitude around each of those bins gives an
ordered triple (v1, v2, v3) that is matched against a rule table:

    - No fault          (all harmonics negligible)
    - Unbalance         (decreasing 1x > 2x > 3x)
    - Bent rotor        (1x above 2x, weak 3x)
    - Angular misalignment
    - Parallel misalignment / misalignment (2x dominant)
    - Extreme looseness (3x dominant)
    - Normal            (no rule matched)

Rules are evaluated in order and the first match wins; they overlap, so the
order is part of the contract.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from numpy.typing import NDArray

from .harmonics import (
    HARMONIC_WINDOW_BINS,
    HarmonicAmplitudes,
    HarmonicSet,
    harmonic_amplitudes,
    harmonic_orders,
)

logger = logging.getLogger(__name__)


class FaultType(str, Enum):
    NO_FAULT_CONDITION = "NoFaultCondition"
    UNBALANCE = "Unbalance"
    BENT_ROTOR = "BentRotor"
    ANGULAR_MISALIGNMENT = "AngularMisalignment"
    PARALLEL_MISALIGNMENT = "ParallelMisalignment"
    MISALIGNMENT = "Misalignment"
    EXTREME_LOOSENESS = "ExtremeLooseness"
    NORMAL = "Normal"


class Confidence(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


FAULT_DESCRIPTIONS: dict[FaultType, str] = {
    FaultType.NO_FAULT_CONDITION: (
        "All harmonic amplitudes are very low, indicating normal operating "
        "condition with minimal vibration."
    ),
    FaultType.UNBALANCE: (
        "Decreasing harmonic pattern with dominant 1x vibration indicates "
        "static or dynamic unbalance."
    ),
    FaultType.BENT_ROTOR: (
        "Dominant 1x vibration with low 3x harmonic suggests a bent rotor shaft."
    ),
    FaultType.ANGULAR_MISALIGNMENT: (
        "Decreasing harmonic pattern with significant 3x component indicates "
        "angular misalignment."
    ),
    FaultType.PARALLEL_MISALIGNMENT: (
        "Dominant 2x vibration indicates parallel misalignment between coupled shafts."
    ),
    FaultType.MISALIGNMENT: (
        "Dominant 2x vibration pattern suggests general misalignment condition."
    ),
    FaultType.EXTREME_LOOSENESS: (
        "Dominant 3x vibration indicates extreme looseness in mechanical connections."
    ),
    FaultType.NORMAL: (
        "Vibration pattern appears normal or does not match common fault signatures."
    ),
}

# Amplitude below which every harmonic is treated as noise
NO_FAULT_LIMIT = 0.1
# Split between a "weak" and a "significant" 3x component
THIRD_HARMONIC_LIMIT = 0.5


@dataclass(frozen=True)
class FaultRule:
    fault_type: FaultType
    confidence: Confidence
    matches: Callable[[float, float, float], bool]


# Evaluated top to bottom. ANGULAR_MISALIGNMENT is shadowed by UNBALANCE
# (its condition implies v1 > v2 > v3) and never fires.
FAULT_RULES: tuple[FaultRule, ...] = (
    FaultRule(
        FaultType.NO_FAULT_CONDITION, Confidence.HIGH,
        lambda v1, v2, v3: v1 < NO_FAULT_LIMIT and v2 < NO_FAULT_LIMIT and v3 < NO_FAULT_LIMIT,
    ),
    FaultRule(
        FaultType.UNBALANCE, Confidence.HIGH,
        lambda v1, v2, v3: v1 > v2 > v3,
    ),
    FaultRule(
        FaultType.BENT_ROTOR, Confidence.HIGH,
        lambda v1, v2, v3: v1 > v2 and v3 < THIRD_HARMONIC_LIMIT,
    ),
    FaultRule(
        FaultType.ANGULAR_MISALIGNMENT, Confidence.HIGH,
        lambda v1, v2, v3: v1 > v2 > v3 and v3 > THIRD_HARMONIC_LIMIT,
    ),
    FaultRule(
        FaultType.PARALLEL_MISALIGNMENT, Confidence.HIGH,
        lambda v1, v2, v3: v2 > v1 and v1 >= v3,
    ),
    FaultRule(
        FaultType.MISALIGNMENT, Confidence.HIGH,
        lambda v1, v2, v3: v2 > v1 and v2 > v3,
    ),
    FaultRule(
        FaultType.EXTREME_LOOSENESS, Confidence.HIGH,
        lambda v1, v2, v3: v3 > v1 and v3 > v2,
    ),
)

FALLBACK_FAULT = (FaultType.NORMAL, Confidence.MEDIUM)


@dataclass(frozen=True)
class FaultVerdict:
    """Result of one harmonic fault classification."""
    fault_type: FaultType
    confidence: Confidence
    description: str
    rpm: float
    harmonics: HarmonicSet
    amplitudes: HarmonicAmplitudes
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict:
        return {
            "fault_type": self.fault_type.value,
            "confidence": self.confidence.value,
            "description": self.description,
            "rpm": self.rpm,
            "harmonics": self.harmonics.to_dict(),
            "amplitudes": self.amplitudes.to_dict(),
            "timestamp": self.timestamp,
        }


def match_fault_rule(v1: float, v2: float, v3: float) -> tuple[FaultType, Confidence]:
    """Return the first rule in FAULT_RULES that matches the triple."""
    for rule in FAULT_RULES:
        if rule.matches(v1, v2, v3):
            return rule.fault_type, rule.confidence
    return FALLBACK_FAULT


def classify_harmonic_fault(
    rpm: float,
    spectrum: Sequence[Any] | NDArray,
    window_bins: int = HARMONIC_WINDOW_BINS,
) -> FaultVerdict:
    """
    Classify a fault from one FFT magnitude spectrum and the shaft speed.

    Args:
        rpm: Shaft speed in revolutions per minute (finite, >= 0).
        spectrum: FFT magnitudes indexed by frequency bin (bin i ≈ i Hz).
        window_bins: Half-width of the search window around each harmonic.

    Returns:
        FaultVerdict. Empty or all-zero spectra give NoFaultCondition.

    Raises:
        InvalidArgumentError: rpm is negative or not finite.
    """
    harmonics = harmonic_orders(rpm)
    amplitudes = harmonic_amplitudes(spectrum, harmonics, radius=window_bins)
    fault_type, confidence = match_fault_rule(*amplitudes.as_tuple())

    logger.debug(
        "rpm=%s harmonics=%s amplitudes=%s -> %s (%s)",
        rpm, harmonics.to_dict(), amplitudes.to_dict(),
        fault_type.value, confidence.value,
    )
    return FaultVerdict(
        fault_type=fault_type,
        confidence=confidence,
        description=FAULT_DESCRIPTIONS[fault_type],
        rpm=rpm,
        harmonics=harmonics,
        amplitudes=amplitudes.rounded(5),
    )


def classify_fault(
    rpm: float,
    spectrum_f1: Sequence[Any] | NDArray,
    spectrum_f2: Optional[Sequence[Any] | NDArray] = None,
    spectrum_f3: Optional[Sequence[Any] | NDArray] = None,
) -> FaultVerdict:
    """
    Classify a fault from the three-channel FFT snapshot.

    All three harmonic amplitudes are read from channel F1. F2 and F3 are
    accepted so callers can pass a whole snapshot, but they do not take
    part in the decision.
    """
    return classify_harmonic_fault(rpm, spectrum_f1)
