"""
classify_fault.py — Harmonic fault and ISO 10816 severity from stdin JSON.

Runs both classifiers without starting the MCP server.

Input (via stdin JSON):
{
    "rpm": 1800,
    "raw_data": {"F1": [...], "F2": [...], "F3": [...]},
    "vibration": {"V1": [...], "V2": [...], "V3": [...]},
    "channel": "all",
    "machine_class": "2"
}

"amplitude" may replace "vibration" to classify a known peak directly.

Output: JSON with the fault verdict, the severity verdict and top peaks.
"""

import json
import sys

from spindle_diagnostics_mcp.data_store import parse_payload
from spindle_diagnostics_mcp.errors import InvalidArgumentError
from spindle_diagnostics_mcp.fault_detection import classify_fault
from spindle_diagnostics_mcp.severity import classify_severity, peak_amplitude
from spindle_diagnostics_mcp.spectrum import top_peaks


def classify(data: dict) -> dict:
    snap = parse_payload(data)
    rpm = data.get("rpm", snap.rpm if snap.rpm is not None else 0)
    machine_class = data.get("machine_class", "1")
    channel = data.get("channel", "all")

    if "amplitude" in data:
        amplitude = data["amplitude"]
    else:
        amplitude = peak_amplitude(snap.vibration, channel)

    fault = classify_fault(rpm, snap.spectrum("F1"), snap.spectrum("F2"), snap.spectrum("F3"))
    severity = classify_severity(amplitude, machine_class)

    return {
        "fault": fault.to_dict(),
        "iso_10816": severity.to_dict(),
        "top_peaks": top_peaks(snap.spectrum("F1")),
    }


if __name__ == "__main__":
    data = json.load(sys.stdin)
    try:
        result = classify(data)
    except InvalidArgumentError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(2)
    print(json.dumps(result, indent=2))
