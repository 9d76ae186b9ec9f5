"""
Photo Place Renamer Package

Renames photos by sequence number, capture date and place name.
Extracts GPS coordinates and timestamps from EXIF metadata, reverse
geocodes coordinates through a persistent cache, and previews or applies
the resulting renames.
"""

__version__ = "1.0.0"
__author__ = "Photo Place Renamer Team"

from .metadata_extractor import MetadataExtractor, CaptureRecord, CoordinatePair
from .geocode_cache import GeocodeCache
from .geocoder import PlaceResolver, ResolutionMarker
from .rename_planner import RenamePlanner, NamingSegment
from .rename_executor import RenameExecutor
from .logger import Logger

__all__ = [
    "MetadataExtractor",
    "CaptureRecord",
    "CoordinatePair",
    "GeocodeCache",
    "PlaceResolver",
    "ResolutionMarker",
    "RenamePlanner",
    "NamingSegment",
    "RenameExecutor",
    "Logger"
]
