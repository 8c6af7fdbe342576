"""
#WHERE
    Imported by weaver.py, every generator module, main.py, and tests:
    single source of truth for defaults and hard limits.

#WHAT
    Centralised constants used across 3+ modules.  Edit here, not in
    individual module files.

#INPUT / #OUTPUT
    Pure constants, no I/O.
"""

import math

# ── Generation defaults ──────────────────────────────────────────────────

DEFAULT_PARTICLE_COUNT: int = 5000
DEFAULT_SPHERE_RADIUS: float = 2.0
DEFAULT_MODEL_SCALE: float = 1.0
DEFAULT_SURFACE_COUNT: int = 1000    # raycast placement when no target given

# One ceiling for extraction, element budget and resampling.
DEFAULT_MAX_VERTICES: int = 15000

# ── Sampling ─────────────────────────────────────────────────────────────

GOLDEN_ANGLE: float = math.pi * (3.0 - math.sqrt(5.0))   # radians
MAX_REJECTION_ATTEMPTS: int = 64     # per point, sphere volume / torus
JITTER_AMPLITUDE: float = 0.01       # full width of upsample jitter, per axis
SURFACE_ATTEMPT_FACTOR: int = 10     # raycast attempts = factor * count

# ── Appearance ───────────────────────────────────────────────────────────

DEFAULT_PARTICLE_SIZE: float = 1.0
DEFAULT_PARTICLE_COLOR: str = "#4fc3f7"
MIN_PARTICLE_SIZE: float = 0.01
VELOCITY_SPREAD: float = 0.02        # drift velocities in ±spread/2

# ── Animation ────────────────────────────────────────────────────────────

DEFAULT_ANIMATION_SPEED: float = 1.0
DEFAULT_ANIMATION_RADIUS: float = 0.1
DEFAULT_MOUSE_INFLUENCE: float = 1.0
DEFAULT_MOUSE_RADIUS: float = 2.0
POINTER_FORCE_SCALE: float = 0.1

# ── Connections ──────────────────────────────────────────────────────────

DEFAULT_CONNECTION_DISTANCE: float = 1.0

# ── Resources ────────────────────────────────────────────────────────────

DEFAULT_CACHE_CAPACITY: int = 10
SUPPORTED_MODEL_FORMATS: tuple[str, ...] = (".gltf", ".glb")
MEMORY_WARNING_MB: float = 100.0
