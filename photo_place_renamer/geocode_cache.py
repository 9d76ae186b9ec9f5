"""
Persistent cache of reverse geocoding results.

The cache file is a JSON document of the form
``{"latlon": {"<lat,lon 6dp>": "<place or marker>"}}``. It is loaded once
at the start of a run and written once at the end, before any file is
renamed.
"""

import json
import logging
import os
import stat
import sys
import tempfile
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

CACHE_FILE_NAME = "cache.json"

# Applied to a new cache file, minus the umask
DEFAULT_FILE_MODE = 0o666


def default_cache_path() -> Path:
    """Location of the cache file: next to the running program."""
    return Path(sys.argv[0]).resolve().parent / CACHE_FILE_NAME


class GeocodeCache:
    """
    Durable mapping from canonical coordinate key to place name or marker.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.logger = logging.getLogger(__name__)
        self.path = Path(path) if path is not None else default_cache_path()
        self._entries: Dict[str, str] = {}

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "GeocodeCache":
        """
        Load the cache from disk.

        A missing, unreadable or malformed file yields an empty cache.
        """
        cache = cls(path)
        try:
            with open(cache.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            cache.logger.info(f"No geocoding cache at {cache.path}, starting empty")
            return cache
        except (OSError, ValueError) as e:
            cache.logger.warning(f"Ignoring unreadable geocoding cache {cache.path}: {e}")
            return cache

        entries = data.get('latlon') if isinstance(data, dict) else None
        if not isinstance(entries, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in entries.items()
        ):
            cache.logger.warning(f"Ignoring malformed geocoding cache {cache.path}")
            return cache

        cache._entries = dict(entries)
        cache.logger.info(f"Loaded {len(cache._entries)} cached locations from {cache.path}")
        return cache

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str):
        self._entries[key] = value

    def save(self):
        """
        Write the cache to disk.

        The document is written to a temporary file in the same directory
        and moved over the cache file, keeping the permission bits of the
        file it replaces. Errors propagate to the caller.
        """
        payload = json.dumps({'latlon': self._entries}, indent=2, ensure_ascii=False)
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix='.cache-', suffix='.json', dir=str(directory))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        self.logger.info(f"Saved {len(self._entries)} cached locations to {self.path}")

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return DEFAULT_FILE_MODE & ~umask

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
