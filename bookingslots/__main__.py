#!/usr/bin/env python3
"""
Convenience entry point for running bookingslots directly.

Usage: python -m bookingslots [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
