"""
Shared fixtures for Lightsurvey tests.
"""

import io
import zipfile
from typing import Callable, Dict, Union

import pytest

SURVEY_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>Survey Jl. Sudirman</name>
    <Folder>
      <name>Tiang</name>
      <Placemark>
        <name>Tiang 01</name>
        <Point><coordinates>106.8456,-6.2088,10</coordinates></Point>
      </Placemark>
      <Placemark>
        <name>Tiang 02</name>
        <Point><coordinates>106.8460,-6.2090</coordinates></Point>
      </Placemark>
    </Folder>
    <Placemark>
      <name>Blok A</name>
      <Polygon>
        <outerBoundaryIs>
          <LinearRing>
            <coordinates>
              106.80,-6.20,0 106.81,-6.20,0 106.81,-6.21,0 106.80,-6.20,0
            </coordinates>
          </LinearRing>
        </outerBoundaryIs>
      </Polygon>
    </Placemark>
    <Placemark>
      <name>Jalur Kabel</name>
      <LineString>
        <coordinates>106.845,-6.208 106.846,-6.209 106.847,-6.210</coordinates>
      </LineString>
    </Placemark>
  </Document>
</kml>
"""


@pytest.fixture
def survey_kml() -> str:
    """A namespaced KML document with two points, one polygon and one line."""
    return SURVEY_KML


@pytest.fixture
def make_kmz() -> Callable[..., bytes]:
    """
    Build KMZ archive bytes in memory.

    Usage:
        make_kmz({"doc.kml": kml_text, "files/photo.jpg": b"..."})
    """

    def _make(entries: Dict[str, Union[str, bytes]]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, content in entries.items():
                zf.writestr(name, content)
        return buffer.getvalue()

    return _make


@pytest.fixture
def survey_kmz(make_kmz: Callable[..., bytes]) -> bytes:
    """KMZ archive holding the survey document and one photo."""
    return make_kmz({"doc.kml": SURVEY_KML, "files/tiang01.jpg": b"\xff\xd8\xff\xe0fake"})
