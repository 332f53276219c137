"""
Availability computation for a multi-member, multi-location booking platform.
"""

__version__ = "0.1.0"
