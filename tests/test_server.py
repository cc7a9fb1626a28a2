"""
tests/test_server.py
────────────────────
Tests for the MCP tool functions (called directly, without a transport).
"""
import json

import pytest

from spindle_diagnostics_mcp import server


@pytest.fixture
def stored(clean_store, combined_payload):
    server.store_telemetry(combined_payload, data_id="spindle")
    return "spindle"


class TestTelemetryTools:
    def test_store_and_list(self, stored):
        listing = server.list_stored_telemetry()
        assert listing["count"] == 1
        assert listing["telemetry"][0]["data_id"] == "spindle"

    def test_load_telemetry(self, clean_store, tmp_path, combined_payload):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps(combined_payload))
        result = server.load_telemetry(str(path))
        assert result["data_id"] == "snap"
        assert result["rpm"] == 1800.0

    def test_load_telemetry_missing_file(self, clean_store, tmp_path):
        result = server.load_telemetry(str(tmp_path / "nope.json"))
        assert "error" in result

    def test_remove(self, stored):
        assert server.remove_telemetry(stored)["removed"] is True
        assert server.list_stored_telemetry()["count"] == 0


class TestClassifyHarmonicFaultTool:
    def test_from_store_uses_stored_rpm(self, stored):
        result = server.classify_harmonic_fault(data_id=stored)
        assert result["fault_type"] == "Unbalance"
        assert result["harmonics"] == {"o1": 30, "o2": 60, "o3": 90}
        assert result["data_id"] == stored

    def test_rpm_override(self, stored):
        # At 600 RPM the harmonics sit at 10/20/30: only the 3x window sees a peak
        result = server.classify_harmonic_fault(rpm=600, data_id=stored)
        assert result["fault_type"] == "ExtremeLooseness"

    def test_inline_spectrum(self, unbalance_spectrum):
        result = server.classify_harmonic_fault(rpm=1800, spectrum_f1=unbalance_spectrum.tolist())
        assert result["fault_type"] == "Unbalance"

    def test_missing_rpm(self, clean_store, unbalance_spectrum):
        result = server.classify_harmonic_fault(spectrum_f1=unbalance_spectrum.tolist())
        assert "error" in result

    def test_unknown_data_id(self, clean_store):
        result = server.classify_harmonic_fault(rpm=1800, data_id="ghost")
        assert "not found" in result["error"]

    def test_negative_rpm(self, unbalance_spectrum):
        result = server.classify_harmonic_fault(rpm=-1, spectrum_f1=unbalance_spectrum.tolist())
        assert "error" in result

    def test_no_spectrum(self):
        assert "error" in server.classify_harmonic_fault(rpm=1800)


class TestAssessVibrationSeverityTool:
    def test_explicit_amplitude(self):
        result = server.assess_vibration_severity(amplitude=-5.0, machine_class="2")
        assert result["status"] == "Unsatisfactory"

    def test_default_class(self):
        result = server.assess_vibration_severity(amplitude=1.12)
        assert result["machine_class"] == "1"
        assert result["status"] == "Good"

    def test_from_store(self, stored):
        result = server.assess_vibration_severity(data_id=stored, channel="all")
        assert result["amplitude_mm_s"] == 3.2
        assert result["status"] == "Unsatisfactory"

    def test_single_channel_from_store(self, stored):
        result = server.assess_vibration_severity(data_id=stored, channel="1")
        assert result["status"] == "Good"

    def test_inline_samples(self, vibration_channels):
        result = server.assess_vibration_severity(
            samples=vibration_channels, channel="2", machine_class="3",
        )
        assert result["status"] == "Satisfactory"

    def test_bad_class(self):
        assert "error" in server.assess_vibration_severity(amplitude=1.0, machine_class="7")

    def test_nothing_to_assess(self):
        assert "error" in server.assess_vibration_severity()


class TestSpectrumPeaksTool:
    def test_from_store(self, stored):
        result = server.spectrum_peaks(data_id=stored)
        assert [p["frequency_hz"] for p in result["top_peaks"]] == [30, 60, 90]
        assert result["channel"] == "F1"

    def test_inline(self):
        result = server.spectrum_peaks(spectrum=[0.0] * 10 + [1.0, 3.0, 2.0], top_n=2)
        assert result["top_peaks"] == [
            {"frequency_hz": 11, "amplitude": 3.0},
            {"frequency_hz": 12, "amplitude": 2.0},
        ]

    def test_band_points(self):
        result = server.spectrum_peaks(spectrum=[9.0] * 10 + [0.0, 3.0, 2.0], include_band=True)
        assert result["band"] == [
            {"frequency_hz": 11, "amplitude": 3.0},
            {"frequency_hz": 12, "amplitude": 2.0},
        ]

    def test_band_omitted_by_default(self, stored):
        assert "band" not in server.spectrum_peaks(data_id=stored)

    def test_bad_channel(self, stored):
        assert "error" in server.spectrum_peaks(data_id=stored, channel="F9")


class TestDiagnoseSpindleTool:
    def test_full_diagnosis(self, stored):
        result = server.diagnose_spindle(stored, machine_context="Milling spindle")
        assert result["fault"]["fault_type"] == "Unbalance"
        assert result["severity"]["status"] == "Unsatisfactory"
        assert len(result["top_peaks"]) == 3
        assert "Milling spindle" in result["report_markdown"]

    def test_class_override(self, stored):
        result = server.diagnose_spindle(stored, machine_class="4")
        assert result["severity"]["status"] == "Good"

    def test_unknown_id(self, clean_store):
        assert "error" in server.diagnose_spindle("ghost")


class TestReferenceTools:
    def test_machine_classes(self):
        result = server.list_machine_classes()
        assert [c["machine_class"] for c in result["classes"]] == ["1", "2", "3", "4"]
        assert result["classes"][0]["good"] == 1.12

    def test_fault_rules(self):
        result = server.list_fault_rules()
        assert result["rules"][0]["fault_type"] == "NoFaultCondition"
        assert result["fallback"]["fault_type"] == "Normal"
