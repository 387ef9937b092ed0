"""
Lightsurvey - field survey tooling for street-lighting infrastructure.

This package parses KMZ/KML survey maps into map-ready geometry and
records surveyor routes from live device positions.
"""

__version__ = "0.1.0"
