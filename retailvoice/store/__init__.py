"""
Data Store Module.

Single source of truth for the current stations, reviews and version marker.
"""
