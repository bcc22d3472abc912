"""
Readiness Engine - Configuration
Tuning knobs read from the environment with production defaults.
"""
import os

# Undo grace period after a decision is applied (seconds)
UNDO_WINDOW_SECONDS = int(os.getenv("READINESS_UNDO_WINDOW_SECONDS", "30"))

# Display polling interval for the undo countdown (seconds)
UNDO_POLL_SECONDS = int(os.getenv("READINESS_UNDO_POLL_SECONDS", "1"))

# Prefix lengths for ranked display lists
TOP_STATIONS_LIMIT = int(os.getenv("READINESS_TOP_STATIONS_LIMIT", "8"))
TOP_BLOCKERS_LIMIT = int(os.getenv("READINESS_TOP_BLOCKERS_LIMIT", "5"))

LOG_LEVEL = os.getenv("READINESS_LOG_LEVEL", "INFO")

# Comma-separated list, "*" allows all origins
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("READINESS_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
