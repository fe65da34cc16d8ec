#!/usr/bin/env python3
"""
Convenience entry point for running clinic-availability from a checkout.

Usage: python availability.py [command] [options]
"""

from clinic_availability.cli.app import app

if __name__ == "__main__":
    app()
