"""
Markdown rendering of a combined spindle diagnosis.
"""

from __future__ import annotations

from typing import Optional

from .fault_detection import Confidence, FaultVerdict
from .severity import MACHINE_CLASS_LABELS, SeverityStatus, SeverityVerdict

_CONFIDENCE_ICONS = {
    Confidence.HIGH: "🔴",
    Confidence.MEDIUM: "🟡",
    Confidence.LOW: "🟢",
}

_STATUS_ICONS = {
    SeverityStatus.GOOD: "🟢",
    SeverityStatus.SATISFACTORY: "🟡",
    SeverityStatus.UNSATISFACTORY: "🟠",
    SeverityStatus.UNACCEPTABLE: "🔴",
}


def _split_camel(name: str) -> str:
    out = [name[0]] if name else []
    for ch in name[1:]:
        if ch.isupper():
            out.append(" ")
        out.append(ch)
    return "".join(out)


def generate_diagnosis_summary(
    fault: Optional[FaultVerdict] = None,
    severity: Optional[SeverityVerdict] = None,
    peaks: Optional[list[dict]] = None,
    machine_context: str = "",
) -> str:
    """
    Create a human-readable diagnosis summary.

    Args:
        fault: Harmonic fault verdict.
        severity: ISO 10816 severity verdict.
        peaks: Top spectral peaks ({frequency_hz, amplitude}).
        machine_context: Free text describing the machine.

    Returns:
        Formatted markdown string.
    """
    lines = ["## Spindle Diagnosis Summary\n"]

    if machine_context:
        lines.append(f"**Machine:** {machine_context}\n")

    if severity is not None:
        icon = _STATUS_ICONS[severity.status]
        label = MACHINE_CLASS_LABELS[severity.machine_class]
        lines.append(
            f"**Vibration Severity (ISO 10816):** {severity.status.value} {icon} "
            f"— {severity.amplitude_mm_s:.2f} mm/s — {label}\n"
        )

    if fault is not None:
        icon = _CONFIDENCE_ICONS[fault.confidence]
        lines.append("### Harmonic Fault Analysis\n")
        lines.append(
            f"#### {_split_camel(fault.fault_type.value)} "
            f"[{fault.confidence.value.upper()}] {icon}\n"
        )
        lines.append(f"{fault.description}\n")
        lines.append(f"Shaft speed: {fault.rpm:g} RPM\n")
        lines.append("| Order | Bin (Hz) | Peak amplitude |")
        lines.append("|---|---|---|")
        h, a = fault.harmonics, fault.amplitudes
        for order, bin_hz, amp in (
            ("1x", h.o1, a.v1_max),
            ("2x", h.o2, a.v2_max),
            ("3x", h.o3, a.v3_max),
        ):
            lines.append(f"| {order} | {bin_hz} | {amp:.5f} |")
        lines.append("")

    if peaks:
        lines.append("### Dominant Spectral Peaks\n")
        for i, p in enumerate(peaks, 1):
            lines.append(f"{i}. {p['frequency_hz']} Hz — {p['amplitude']:.4f}")
        lines.append("")

    return "\n".join(lines)
