"""
KMZ parsing module.

Extracts the KML document from a KMZ (zipped KML) archive held in memory.
"""

import io
import logging
import zipfile
import zlib
from pathlib import PurePosixPath
from typing import Any, Dict, List

from lightsurvey.core.errors import ArchiveError, NoKmlFoundError

from .geometry import ParseResult
from .kml_parser import KMLParser

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp"}


class KMZParser:
    """
    Parse KMZ archives by extracting and parsing the contained KML.

    The first entry whose name ends in ``.kml`` (case-insensitive, in the
    archive's directory order) is the document; any other KML entries are
    ignored.
    """

    def extract(self, data: bytes) -> str:
        """
        Extract the KML text from a KMZ archive.

        Args:
            data: Raw archive bytes

        Returns:
            Text of the first .kml entry

        Raises:
            ArchiveError: If the bytes are not a ZIP archive
            NoKmlFoundError: If the archive holds no .kml entry
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
                for info in zf.infolist():
                    if info.is_dir() or not info.filename.lower().endswith(".kml"):
                        continue

                    logger.info(f"Extracting KML file: {info.filename}")
                    raw = zf.read(info)
                    return raw.decode("utf-8-sig", errors="replace")

        except (zipfile.BadZipFile, zlib.error) as e:
            logger.error(f"Invalid ZIP file: {e}")
            raise ArchiveError(
                f"Invalid KMZ file: {e}", details={"size": len(data)}
            ) from e

        logger.error("No KML files found in KMZ archive")
        raise NoKmlFoundError("KML file not found in KMZ archive")

    def parse(self, data: bytes) -> ParseResult:
        """
        Extract and parse the KML document of a KMZ archive.

        Args:
            data: Raw archive bytes

        Returns:
            ParseResult of the contained KML
        """
        return KMLParser().parse(self.extract(data))

    def list_contents(self, data: bytes) -> Dict[str, Any]:
        """
        List all files in a KMZ archive without extracting.

        Args:
            data: Raw archive bytes

        Returns:
            Dictionary with kml, image and other entries plus totals

        Raises:
            ArchiveError: If the bytes are not a ZIP archive
        """
        kml_files: List[Dict[str, Any]] = []
        image_files: List[Dict[str, Any]] = []
        other_files: List[Dict[str, Any]] = []
        total_size = 0

        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue

                    entry = {"name": info.filename, "size": info.file_size}
                    total_size += info.file_size
                    extension = PurePosixPath(info.filename).suffix.lower()

                    if extension == ".kml":
                        kml_files.append(entry)
                    elif extension in IMAGE_EXTENSIONS:
                        image_files.append(entry)
                    else:
                        other_files.append(entry)

        except zipfile.BadZipFile as e:
            logger.error(f"Invalid ZIP file: {e}")
            raise ArchiveError(f"Invalid KMZ file: {e}") from e

        return {
            "kml_files": kml_files,
            "image_files": image_files,
            "other_files": other_files,
            "total_files": len(kml_files) + len(image_files) + len(other_files),
            "total_size": total_size,
        }


def extract_kml_text(data: bytes) -> str:
    """
    Convenience function to extract the KML document of a KMZ archive.

    Args:
        data: Raw archive bytes

    Returns:
        KML text
    """
    return KMZParser().extract(data)


def parse_kmz_bytes(data: bytes) -> ParseResult:
    """
    Convenience function to parse a KMZ archive.

    Args:
        data: Raw archive bytes

    Returns:
        ParseResult
    """
    return KMZParser().parse(data)
