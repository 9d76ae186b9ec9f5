"""
Rename planning for photo files.

A new file stem is composed from an ordered list of optional segments
(sequence number, original stem, capture date, place name). Planning is
pure: nothing here touches the filesystem except ``find_conflicts``,
which only looks.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence

from .geocoder import PlaceResult, ResolutionMarker
from .metadata_extractor import CaptureRecord

INVALID_NAME_CHARS = '<>:"/\\|?*'
SEPARATOR = '_'

logger = logging.getLogger(__name__)


class NamingSegment(Enum):
    SEQUENCE = "sequence"
    ORIGINAL_STEM = "original"
    DATE = "date"
    PLACE = "place"


# 0001_2023.08.14 12.30.00_Kraków
SEQUENCE_GRAMMAR = (NamingSegment.SEQUENCE, NamingSegment.DATE, NamingSegment.PLACE)
# IMG_1234_Kraków
ORIGINAL_GRAMMAR = (NamingSegment.ORIGINAL_STEM, NamingSegment.PLACE)

GRAMMARS = {
    'sequence': SEQUENCE_GRAMMAR,
    'original': ORIGINAL_GRAMMAR,
}


class RenamePlanEntry(NamedTuple):
    """One planned rename: the directory and extension are kept."""
    source: Path
    stem: str
    suffix: str

    @property
    def target(self) -> Path:
        return self.source.with_name(self.stem + self.suffix)

    @property
    def unchanged(self) -> bool:
        return self.target == self.source


def sanitize_name_part(part: str) -> str:
    """Replace characters that cannot appear in a file name."""
    for char in INVALID_NAME_CHARS:
        part = part.replace(char, '_')
    return part.strip()


def place_name(place: Optional[PlaceResult]) -> Optional[str]:
    """The place segment text, or None for markers and missing places."""
    if place is None or isinstance(place, ResolutionMarker):
        return None
    name = sanitize_name_part(place)
    if not name:
        logger.warning(f"Resolved place name {place!r} is blank, leaving it out of the file name")
        return None
    return name


class RenamePlanner:
    """
    Builds new file stems from capture records and resolved places.
    """

    def __init__(self, segments: Sequence[NamingSegment] = SEQUENCE_GRAMMAR):
        if not segments:
            raise ValueError("Naming grammar needs at least one segment")
        self.segments = tuple(segments)

    def plan(self, index: int, record: CaptureRecord, place: Optional[PlaceResult],
             original_stem: str = '') -> str:
        """
        Compose the new stem of a file.

        Args:
            index: 1-based position of the file in the input order
            record: Normalized metadata of the file
            place: Resolved place, a marker, or None without coordinates
            original_stem: Current stem of the file

        Returns:
            New file stem
        """
        parts = []
        for segment in self.segments:
            if segment is NamingSegment.SEQUENCE:
                parts.append('%04d' % index)
            elif segment is NamingSegment.ORIGINAL_STEM:
                if original_stem:
                    parts.append(original_stem)
            elif segment is NamingSegment.DATE:
                if record.creation_date is not None:
                    parts.append(record.creation_date)
            elif segment is NamingSegment.PLACE:
                name = place_name(place)
                if name is not None:
                    parts.append(name)

        if not parts:
            return original_stem
        return SEPARATOR.join(parts)

    def plan_entry(self, index: int, path: Path, record: CaptureRecord,
                   place: Optional[PlaceResult]) -> RenamePlanEntry:
        """Plan the rename of ``path``, keeping its directory and extension."""
        path = Path(path)
        stem = self.plan(index, record, place, original_stem=path.stem)
        return RenamePlanEntry(source=path, stem=stem, suffix=path.suffix)


def find_conflicts(plan: Mapping[Path, RenamePlanEntry]) -> Dict[Path, List[Path]]:
    """
    Find targets that cannot be renamed to safely.

    A target conflicts when more than one entry claims it, or when a file
    already exists there that is not itself being renamed by the plan.

    Returns:
        Mapping of conflicting target to the sources that claim it
    """
    claims: Dict[Path, List[Path]] = {}
    for entry in plan.values():
        if entry.unchanged:
            continue
        claims.setdefault(entry.target, []).append(entry.source)

    conflicts = {}
    for target, sources in claims.items():
        if len(sources) > 1:
            conflicts[target] = sources
        elif target.exists():
            occupant = plan.get(target)
            if occupant is None or occupant.unchanged:
                conflicts[target] = sources
    return conflicts
