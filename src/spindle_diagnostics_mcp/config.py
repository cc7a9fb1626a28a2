"""
Server configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    # Logging (always to stderr; stdout carries the MCP stdio stream)
    LOG_LEVEL: str = os.getenv("SPINDLE_LOG_LEVEL", "INFO").upper()

    # ISO 10816 class used when a tool call does not name one
    DEFAULT_MACHINE_CLASS: str = os.getenv("SPINDLE_DEFAULT_MACHINE_CLASS", "1")

    # Spectral peaks reported per summary
    TOP_PEAKS: int = int(os.getenv("SPINDLE_TOP_PEAKS", "3"))

    # Samples scanned per channel for the severity peak
    PEAK_SAMPLE_LIMIT: int = int(os.getenv("SPINDLE_PEAK_SAMPLE_LIMIT", "1000"))


settings = Settings()
