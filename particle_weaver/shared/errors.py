"""
#WHERE
    Raised by every generator module and weaver.py; caught by main.py
    and asserted in tests.

#WHAT
    Typed error hierarchy for particle generation.  Generation-time
    failures abort the request; the per-tick path never raises.

#INPUT
    Human-readable message (plus limits for CeilingExceeded).

#OUTPUT
    Exception instances.
"""

from typing import Optional


class ParticleWeaverError(Exception):
    """Base class for all generation errors."""


class InvalidRequest(ParticleWeaverError, ValueError):
    """Missing, contradictory or out-of-range generation parameters."""


class EmptyGeometry(ParticleWeaverError):
    """No extractable vertices."""


class NoGeometry(EmptyGeometry):
    """Empty mesh set handed to the surface sampler."""


class CeilingExceeded(ParticleWeaverError):
    def __init__(self, message: str, requested: Optional[int] = None, limit: Optional[int] = None):
        super().__init__(message)
        self.requested = requested
        self.limit = limit


class DegenerateInput(ParticleWeaverError, ValueError):
    """Input the distribution math cannot handle (e.g. zero-size bounds)."""


class GenerationCancelled(ParticleWeaverError):
    """The caller signalled cancellation mid-generation."""
