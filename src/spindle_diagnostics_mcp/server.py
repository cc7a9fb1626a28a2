"""
Spindle Diagnostics MCP Server.

Exposes harmonic fault classification and ISO 10816 severity assessment
via the Model Context Protocol, so that a client can diagnose spindle
telemetry (FFT spectra, raw vibration channels, tachometer RPM) polled
from the edge endpoints or loaded from files.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import settings
from .data_store import TelemetrySnapshot, store
from .fault_detection import FALLBACK_FAULT, FAULT_DESCRIPTIONS, FAULT_RULES, classify_fault
from .report import generate_diagnosis_summary
from .severity import (
    ALL_CHANNELS,
    ISO_10816_CLASS_THRESHOLDS,
    MACHINE_CLASS_LABELS,
    MachineClass,
    classify_severity,
    parse_machine_class,
    peak_amplitude,
)
from .spectrum import summarize_spectrum, top_peaks, usable_band

# Configure logging to stderr (required for STDIO MCP servers)
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("spindle-diagnostics-mcp")

mcp = FastMCP(
    "spindle-diagnostics",
    instructions=(
        "Rule-based diagnostics for machine-tool spindles.\n\n"
        "FAULT CLASSIFICATION reads the 1x/2x/3x shaft harmonics from the F1 "
        "FFT magnitude spectrum (bin i ≈ i Hz) and maps them to unbalance, "
        "bent rotor, misalignment, looseness or no-fault.\n\n"
        "SEVERITY maps the peak vibration velocity (mm/s) to an ISO 10816 "
        "tier for machine class I-IV.\n\n"
        "Load telemetry with load_telemetry or store_telemetry and pass the "
        "returned data_id to the analysis tools. Small ad-hoc arrays may be "
        "passed inline."
    ),
)


# ── Helpers ───────────────────────────────────────────────────────────────

def _resolve_snapshot(data_id: str | None) -> TelemetrySnapshot | None:
    if data_id is None:
        return None
    snap = store.get(data_id)
    if snap is None:
        available = store.list_ids()
        raise ValueError(
            f"data_id '{data_id}' not found in store. "
            f"Available: {available or '(empty, use load_telemetry first)'}."
        )
    return snap


def _resolve_class(machine_class: str | None) -> MachineClass:
    return parse_machine_class(
        settings.DEFAULT_MACHINE_CLASS if machine_class is None else machine_class
    )


def _resolve_rpm(rpm: float | None, snap: TelemetrySnapshot | None) -> float:
    if rpm is not None:
        return rpm
    if snap is not None and snap.rpm is not None:
        return snap.rpm
    raise ValueError("rpm is required (no tachometer reading stored with this data_id).")


# ── Telemetry store tools ─────────────────────────────────────────────────

@mcp.tool()
def load_telemetry(file_path: str, data_id: str | None = None) -> dict:
    """
    Load a JSON telemetry snapshot into the server-side store.
    Returns a data_id and compact summary; raw arrays never enter the
    conversation context.

    The file may hold an FFT payload ({"raw_data": {"F1": [...], ...}}),
    a vibration payload ([{"V1": [...], "V2": [...], "V3": [...]}]),
    a tachometer payload ({"R1": rpm}) or an object combining them.

    Args:
        file_path: Absolute path to the .json file.
        data_id: Optional human-readable ID. Defaults to the file stem.
    """
    try:
        did, summary = store.load_from_file(file_path, data_id)
        return {"data_id": did, **summary}
    except (OSError, ValueError) as e:
        logger.warning("load_telemetry failed for %s: %s", file_path, e)
        return {"error": str(e)}


@mcp.tool()
def store_telemetry(payload: dict | list, data_id: str | None = None) -> dict:
    """
    Store an inline telemetry payload (same shapes as load_telemetry).

    Args:
        payload: Endpoint JSON body.
        data_id: Optional ID. Auto-generated if omitted.
    """
    did = store.put_payload(payload, data_id)
    return {"data_id": did, **store.get(did).summary()}


@mcp.tool()
def list_stored_telemetry() -> dict:
    """
    List all snapshots currently held in the server-side store with their
    channel sizes, RPM and per-channel vibration peaks.
    """
    entries = store.list_entries()
    return {"count": len(entries), "telemetry": entries}


@mcp.tool()
def remove_telemetry(data_id: str) -> dict:
    """Drop a snapshot from the store."""
    return {"data_id": data_id, "removed": store.remove(data_id)}


# ── Classification tools ──────────────────────────────────────────────────

@mcp.tool()
def classify_harmonic_fault(
    rpm: float | None = None,
    data_id: str | None = None,
    spectrum_f1: list[float] | None = None,
    spectrum_f2: list[float] | None = None,
    spectrum_f3: list[float] | None = None,
) -> dict:
    """
    Classify the spindle fault from the 1x/2x/3x shaft harmonics.

    Harmonic bins are floor(rpm/60) and its 2x / 3x multiples; the peak
    within ±5 bins of each is matched against the fault rule table.
    Only channel F1 is consulted.

    Provide **data_id** (preferred) or **spectrum_f1** inline.

    Args:
        rpm: Shaft speed in RPM. Defaults to the stored tachometer reading.
        data_id: Reference to a stored snapshot (from load_telemetry).
        spectrum_f1: FFT magnitudes of channel F1 (bin i ≈ i Hz).
        spectrum_f2: FFT magnitudes of channel F2 (accepted, unused).
        spectrum_f3: FFT magnitudes of channel F3 (accepted, unused).
    """
    try:
        snap = _resolve_snapshot(data_id)
        rpm_value = _resolve_rpm(rpm, snap)
        if snap is not None:
            f1, f2, f3 = (snap.spectrum(c) for c in ("F1", "F2", "F3"))
        elif spectrum_f1 is not None:
            f1, f2, f3 = spectrum_f1, spectrum_f2, spectrum_f3
        else:
            raise ValueError("Provide either data_id (preferred) or spectrum_f1.")
        verdict = classify_fault(rpm_value, f1, f2, f3)
    except ValueError as e:
        return {"error": str(e)}
    result = verdict.to_dict()
    if data_id:
        result["data_id"] = data_id
    return result


@mcp.tool()
def assess_vibration_severity(
    amplitude: float | None = None,
    data_id: str | None = None,
    samples: dict[str, list[float]] | None = None,
    channel: str = ALL_CHANNELS,
    machine_class: str | None = None,
) -> dict:
    """
    Classify vibration severity per ISO 10816.

    Give either an explicit peak **amplitude** (mm/s), or vibration channels
    (stored via **data_id**, or inline **samples** keyed 'V1'..'V3'); the
    peak is then the largest absolute value in the first samples of the
    selected channel, or across all three channels for 'all'.

    Args:
        amplitude: Peak velocity in mm/s (sign ignored).
        data_id: Reference to a stored snapshot.
        samples: Inline channels {"V1": [...], "V2": [...], "V3": [...]}.
        channel: '1', '2', '3' or 'all'.
        machine_class: '1'..'4' (ISO class I-IV). Defaults to the server setting.
    """
    try:
        mc = _resolve_class(machine_class)
        if amplitude is None:
            snap = _resolve_snapshot(data_id)
            channels = snap.vibration if snap is not None else samples
            if channels is None:
                raise ValueError("Provide amplitude, data_id or samples.")
            amplitude = peak_amplitude(channels, channel, settings.PEAK_SAMPLE_LIMIT)
        verdict = classify_severity(amplitude, mc)
    except ValueError as e:
        return {"error": str(e)}
    result = verdict.to_dict()
    result["channel"] = channel
    return result


@mcp.tool()
def spectrum_peaks(
    data_id: str | None = None,
    spectrum: list[float] | None = None,
    channel: str = "F1",
    top_n: int | None = None,
    include_band: bool = False,
) -> dict:
    """
    Summarise an FFT spectrum: dominant peaks in the usable band
    (10 - 1009 Hz) plus bin counts. The full array is only returned
    with include_band, as the non-zero band points.

    Args:
        data_id: Reference to a stored snapshot.
        spectrum: Inline FFT magnitudes (bin i ≈ i Hz).
        channel: FFT channel of the stored snapshot ('F1','F2','F3').
        top_n: Number of peaks. Defaults to the server setting.
        include_band: Also return the non-zero {frequency_hz, amplitude}
            points of the usable band (for charting).
    """
    try:
        snap = _resolve_snapshot(data_id)
        if snap is not None:
            mags: Any = snap.spectrum(channel)
        elif spectrum is not None:
            mags = spectrum
        else:
            raise ValueError("Provide either data_id (preferred) or spectrum.")
    except ValueError as e:
        return {"error": str(e)}
    summary = summarize_spectrum(mags, top_n or settings.TOP_PEAKS)
    if include_band:
        summary["band"] = usable_band(mags)
    if data_id:
        summary["data_id"] = data_id
        summary["channel"] = channel.upper()
    return summary


@mcp.tool()
def diagnose_spindle(
    data_id: str,
    rpm: float | None = None,
    channel: str = ALL_CHANNELS,
    machine_class: str | None = None,
    machine_context: str = "",
) -> dict:
    """
    Run the complete diagnosis on a stored snapshot: harmonic fault
    classification (F1), ISO 10816 severity from the vibration channels,
    dominant spectral peaks, and a markdown summary.

    Args:
        data_id: Reference to a stored snapshot.
        rpm: Shaft speed override. Defaults to the stored tachometer reading.
        channel: Vibration channel for severity ('1','2','3','all').
        machine_class: '1'..'4'. Defaults to the server setting.
        machine_context: Free text describing the machine (for the report).
    """
    try:
        snap = _resolve_snapshot(data_id)
        mc = _resolve_class(machine_class)
        rpm_value = _resolve_rpm(rpm, snap)
        fault = classify_fault(rpm_value, snap.spectrum("F1"))
        severity = classify_severity(
            peak_amplitude(snap.vibration, channel, settings.PEAK_SAMPLE_LIMIT), mc,
        )
    except ValueError as e:
        return {"error": str(e)}
    peaks = top_peaks(snap.spectrum("F1"), settings.TOP_PEAKS)
    logger.info(
        "Diagnosed '%s': %s / %s", data_id, fault.fault_type.value, severity.status.value,
    )
    return {
        "data_id": data_id,
        "fault": fault.to_dict(),
        "severity": severity.to_dict(),
        "top_peaks": peaks,
        "report_markdown": generate_diagnosis_summary(
            fault, severity, peaks, machine_context,
        ),
    }


# ── Reference tools ───────────────────────────────────────────────────────

@mcp.tool()
def list_machine_classes() -> dict:
    """ISO 10816 machine classes with their velocity thresholds (mm/s)."""
    return {
        "classes": [
            {
                "machine_class": mc.value,
                "label": MACHINE_CLASS_LABELS[mc],
                **ISO_10816_CLASS_THRESHOLDS[mc].to_dict(),
            }
            for mc in MachineClass
        ],
        "default": settings.DEFAULT_MACHINE_CLASS,
    }


@mcp.tool()
def list_fault_rules() -> dict:
    """The harmonic fault rules in evaluation order (first match wins)."""
    return {
        "rules": [
            {
                "order": i,
                "fault_type": rule.fault_type.value,
                "confidence": rule.confidence.value,
                "description": FAULT_DESCRIPTIONS[rule.fault_type],
            }
            for i, rule in enumerate(FAULT_RULES, 1)
        ],
        "fallback": {
            "fault_type": FALLBACK_FAULT[0].value,
            "confidence": FALLBACK_FAULT[1].value,
            "description": FAULT_DESCRIPTIONS[FALLBACK_FAULT[0]],
        },
    }
