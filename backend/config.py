"""Flare Backend — Configuration & Constants"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from backend/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)

# ── API Keys ──
GOOGLE_MAPS_API_KEY = os.environ.get("GOOGLE_MAPS_API_KEY", "")
GEMINI_API_KEY = os.environ.get("VITE_GEMINI_API_KEY", "") or os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-pro-002")

# ── Snapshot storage ──
DATA_DIR = Path(os.environ.get("FLARE_DATA_DIR", Path(__file__).resolve().parent.parent / "data"))
STORE_KEY = os.environ.get("FLARE_STORE_KEY", "alertsKey")

# ── Bottom sheet ──
VIEWPORT_HEIGHT = float(os.environ.get("FLARE_VIEWPORT_HEIGHT", "844"))
SHEET_MIN_FRACTION = 0.51
SHEET_MAX_FRACTION = 0.93

# Sheet background fades from marian blue (collapsed) to space cadet (expanded)
SHEET_LIGHT_RGB = (54, 68, 115)
SHEET_DARK_RGB = (26, 28, 56)

# ── Map ──
# Default user region (Miami); place searches are biased to ~10km around it
DEFAULT_REGION = {"lat": 25.7602, "lng": -80.1959, "span_deg": 0.045}

# Risk band → map marker tint
MARKER_COLORS = {
    "CRITICAL": "red",      # reported within a day
    "ELEVATED": "orange",   # within a week
    "MODERATE": "yellow",   # within a month
    "LOW": "gray",          # within three months
    "NONE": "clear",
}
