"""
Geocoding module for resolving GPS coordinates to place names.

Coordinates are resolved with the Google Geocoding API, asking only for
the municipality level (administrative_area_level_3). Every outcome,
including a failure to find a place, is remembered in the persistent
cache so that a position is looked up at most once.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

import requests

from .geocode_cache import GeocodeCache
from .metadata_extractor import CoordinatePair

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DEFAULT_LANGUAGE = "pl"
DEFAULT_RESULT_TYPE = "administrative_area_level_3"

# Google statuses of a request that was answered normally
ANSWERED_STATUSES = ('OK', 'ZERO_RESULTS')


class ResolutionMarker(str, Enum):
    """Cached outcome of a lookup that produced no usable place name."""
    UNKNOWN_STRUCTURE = "unknown structure"
    NOT_FOUND = "not found"


PlaceResult = Union[str, ResolutionMarker]


def from_cached_value(value: str) -> PlaceResult:
    """Restore a cached string to a place name or a marker."""
    for marker in ResolutionMarker:
        if value == marker.value:
            return marker
    return value


def _parse_response(json_text: str) -> Optional[Dict[str, Any]]:
    """Decode a geocoding response, or None if it does not have the expected shape."""
    try:
        data = json.loads(json_text)
    except ValueError:
        return None

    if not isinstance(data, dict) or not isinstance(data.get('results'), list):
        return None

    for result in data['results']:
        if not isinstance(result, dict) or not isinstance(result.get('address_components'), list):
            return None
        for component in result['address_components']:
            if not isinstance(component, dict) or not isinstance(component.get('types'), list):
                return None

    return data


def find_place_name(json_text: str, result_type: str = DEFAULT_RESULT_TYPE) -> PlaceResult:
    """
    Find the place name in a geocoding response body.

    The first address component, in result order then component order,
    typed both "political" and ``result_type`` wins. Its long name is
    used, falling back to the short name.

    Args:
        json_text: Response body
        result_type: Administrative level to look for

    Returns:
        Place name, ``NOT_FOUND`` if no component matches or the body does
        not parse, ``UNKNOWN_STRUCTURE`` if the match has no name at all
    """
    data = _parse_response(json_text)
    if data is None:
        return ResolutionMarker.NOT_FOUND

    status = data.get('status')
    if status is not None and status not in ANSWERED_STATUSES:
        logger.warning(f"Geocoding service returned {status}: {data.get('error_message', 'no message')}")

    for result in data['results']:
        for component in result['address_components']:
            types = component['types']
            if 'political' not in types or result_type not in types:
                continue

            long_name = component.get('long_name')
            if isinstance(long_name, str):
                return long_name
            short_name = component.get('short_name')
            if isinstance(short_name, str):
                return short_name
            return ResolutionMarker.UNKNOWN_STRUCTURE

    return ResolutionMarker.NOT_FOUND


class PlaceResolver:
    """
    Resolves coordinates to place names through the persistent cache.

    The network is consulted only on a cache miss, and the answer is
    cached before it is returned. Transport failures propagate.
    """

    def __init__(self, api_key: str, cache: GeocodeCache,
                 session: Optional[requests.Session] = None,
                 language: str = DEFAULT_LANGUAGE,
                 result_type: str = DEFAULT_RESULT_TYPE):
        """
        Initialize the resolver.

        Args:
            api_key: Google Geocoding API key
            cache: Cache shared across the whole run
            session: HTTP session, a new one by default
            language: Language of returned place names
            result_type: Administrative level to ask for
        """
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key
        self.cache = cache
        self.session = session if session is not None else requests.Session()
        self.language = language
        self.result_type = result_type

        self._cache_hits = 0
        self._cache_misses = 0

    def build_url(self, key: str) -> str:
        return (f"{GEOCODE_URL}?latlng={key}&language={self.language}"
                f"&result_type={self.result_type}&key={self.api_key}")

    def resolve(self, coordinates: CoordinatePair) -> PlaceResult:
        """
        Resolve coordinates to a place name or a resolution marker.

        Args:
            coordinates: Position to resolve

        Returns:
            Place name or ResolutionMarker

        Raises:
            requests.RequestException: If the request cannot be sent
        """
        key = coordinates.key

        cached = self.cache.get(key)
        if cached is not None:
            self._cache_hits += 1
            self.logger.debug(f"Cache hit for {key}: {cached}")
            return from_cached_value(cached)

        self._cache_misses += 1
        self.logger.info(f"Looking up {key}")

        response = self.session.get(self.build_url(key))
        if response.status_code >= 400:
            self.logger.warning(f"Geocoding request for {key} returned HTTP {response.status_code}")

        place = find_place_name(response.text, self.result_type)
        if isinstance(place, ResolutionMarker):
            self.logger.warning(f"No place for {key}: {place.value}")
            self.cache.put(key, place.value)
        else:
            self.logger.info(f"Resolved {key} -> {place}")
            self.cache.put(key, place)
        return place

    def get_cache_stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary with hit/miss counts and the hit rate
        """
        total_requests = self._cache_hits + self._cache_misses
        hit_rate = (self._cache_hits / total_requests * 100) if total_requests > 0 else 0

        return {
            'cache_hits': self._cache_hits,
            'cache_misses': self._cache_misses,
            'total_requests': total_requests,
            'hit_rate_percent': round(hit_rate, 1),
            'cache_size': len(self.cache),
        }
