"""
Server-side store for spindle telemetry snapshots.

Snapshots are kept in memory on the MCP server side, so spectra and raw
vibration arrays never need to transit through the conversation context.
Clients only see compact summaries and verdicts.

A snapshot is parsed from the JSON bodies the edge endpoints return:

    FFT        {"raw_data": {"F1": [...], "F2": [...], "F3": [...]}}
    Vibration  [{"V1": [...], "V2": [...], "V3": [...]}]   (or the bare object)
    RPM        {"R1": 1480}

A single JSON object may combine all three. Missing or malformed parts
become empty arrays / no RPM; they are not errors.

Usage:
    data_id, summary = store.load_from_file("spindle_01.json")
    snap = store.get(data_id)
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidArgumentError
from .harmonics import parse_number, to_magnitudes
from .severity import CHANNEL_KEYS, channel_peak

logger = logging.getLogger(__name__)

FFT_CHANNEL_KEYS = ("F1", "F2", "F3")


@dataclass
class TelemetrySnapshot:
    """FFT spectra, raw vibration channels and shaft speed from one poll."""
    spectra: dict[str, NDArray[np.float64]] = field(default_factory=dict)
    vibration: dict[str, NDArray[np.float64]] = field(default_factory=dict)
    rpm: Optional[float] = None
    created_at: float = field(default_factory=time.time)
    metadata: dict = field(default_factory=dict)

    def spectrum(self, channel: str = "F1") -> NDArray[np.float64]:
        key = channel.strip().upper()
        if not key.startswith("F"):
            key = f"F{key}"
        if key not in FFT_CHANNEL_KEYS:
            raise InvalidArgumentError(f"Unknown FFT channel '{channel}'. Expected F1, F2 or F3.")
        return self.spectra.get(key, np.zeros(0))

    def summary(self) -> dict:
        """Return a compact summary (no raw data)."""
        return {
            "rpm": self.rpm,
            "fft_channels": {
                k: int(self.spectra[k].size) for k in FFT_CHANNEL_KEYS if k in self.spectra
            },
            "vibration_channels": {
                k: {
                    "n_samples": int(self.vibration[k].size),
                    "peak": round(channel_peak(self.vibration[k]), 6),
                }
                for k in CHANNEL_KEYS if k in self.vibration
            },
            "metadata": self.metadata,
        }


def _channel_arrays(source: Any, keys: tuple[str, ...]) -> dict[str, NDArray[np.float64]]:
    if not isinstance(source, dict):
        return {}
    return {
        k: to_magnitudes(source[k]) if k.startswith("F") else _raw_samples(source[k])
        for k in keys
        if isinstance(source.get(k), (list, tuple))
    }


def _raw_samples(values: Any) -> NDArray[np.float64]:
    # Time-domain samples keep their sign.
    return np.fromiter((parse_number(v) for v in values), dtype=np.float64)


def parse_payload(payload: Any) -> TelemetrySnapshot:
    """
    Build a snapshot from one (or a merge of several) endpoint payloads.
    """
    snap = TelemetrySnapshot()

    vib_source: Any = payload
    if isinstance(payload, list):
        vib_source = payload[0] if payload else None
    elif isinstance(payload, dict):
        if isinstance(payload.get("vibration"), (list, dict)):
            vib = payload["vibration"]
            vib_source = vib[0] if isinstance(vib, list) and vib else vib
        raw = payload.get("raw_data")
        snap.spectra = _channel_arrays(raw, FFT_CHANNEL_KEYS)
        if "R1" in payload:
            snap.rpm = parse_number(payload["R1"])
        elif "rpm" in payload:
            snap.rpm = parse_number(payload["rpm"])

    snap.vibration = _channel_arrays(vib_source, CHANNEL_KEYS)
    return snap


class TelemetryStore:
    """Simple in-memory store for telemetry snapshots."""

    def __init__(self) -> None:
        self._entries: dict[str, TelemetrySnapshot] = {}

    def put(
        self,
        data_id: str,
        snapshot: TelemetrySnapshot,
    ) -> str:
        """Store a snapshot. Returns the data_id."""
        self._entries[data_id] = snapshot
        logger.info("Stored telemetry '%s'", data_id)
        return data_id

    def put_payload(self, payload: Any, data_id: str | None = None) -> str:
        """Parse an endpoint payload and store it, auto-generating an ID if needed."""
        snapshot = parse_payload(payload)
        if data_id is None:
            raw = json.dumps(payload, sort_keys=True, default=str).encode()[:1024]
            h = hashlib.md5(raw).hexdigest()[:8]
            data_id = f"tel_{h}_{int(time.time()) % 100000}"
        return self.put(data_id, snapshot)

    def get(self, data_id: str) -> TelemetrySnapshot | None:
        return self._entries.get(data_id)

    def remove(self, data_id: str) -> bool:
        removed = self._entries.pop(data_id, None) is not None
        if removed:
            logger.info("Removed telemetry '%s'", data_id)
        return removed

    def list_ids(self) -> list[str]:
        return list(self._entries.keys())

    def list_entries(self) -> list[dict]:
        """Return summaries of all stored snapshots."""
        return [
            {"data_id": k, **v.summary()}
            for k, v in self._entries.items()
        ]

    def load_from_file(
        self,
        file_path: str,
        data_id: str | None = None,
    ) -> tuple[str, dict]:
        """
        Load a JSON telemetry file directly into the store.
        Returns (data_id, summary_dict).
        """
        p = Path(file_path)
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported file format: {p.suffix}")
        with p.open(encoding="utf-8") as fh:
            payload = json.load(fh)

        if data_id is None:
            data_id = p.stem.replace(" ", "_")
        snapshot = parse_payload(payload)
        snapshot.metadata["source_file"] = p.name
        self.put(data_id, snapshot)
        return data_id, snapshot.summary()


# Shared by every tool in this server
store = TelemetryStore()
