"""
Room and envelope detection orchestrators.
"""

from .models import Attempt, AttemptStatus, DetectionResult, EnvelopeResult

__all__ = [
    "Attempt",
    "AttemptStatus",
    "DetectionResult",
    "EnvelopeResult",
]
