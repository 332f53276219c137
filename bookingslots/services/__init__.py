"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, RecordSourceProtocol

__all__ = ["AvailabilityService", "RecordSourceProtocol"]
