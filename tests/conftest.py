from __future__ import annotations

import os

# Settings are read once at import time; point persistence at an in-memory
# database and keep the background clock off before any app module loads.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_CLOCK_ENABLED", "0")
os.environ.setdefault("POSE_FRAME_STRIDE", "3")
