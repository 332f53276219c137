"""
Adapters layer - Access to records owned by external collaborators.
"""

from .json_store import JsonRecordStore

__all__ = ["JsonRecordStore"]
