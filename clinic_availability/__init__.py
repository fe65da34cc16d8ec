"""
Availability resolution engine for the clinic administration console.
"""

__version__ = "0.1.0"
