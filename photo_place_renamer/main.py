"""
Main entry point for the photo place renamer.

This module orchestrates a run: load the geocoding cache, extract and
resolve every file, save the cache, then print the rename plan and, in
apply mode, rename the files.
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Tuple, Union

import requests

from .geocode_cache import GeocodeCache
from .geocoder import PlaceResolver, ResolutionMarker
from .logger import Logger
from .metadata_extractor import MetadataExtractor
from .rename_executor import RenameExecutor, scan_directory
from .rename_planner import GRAMMARS, RenamePlanEntry, RenamePlanner

APPLY_TOKEN = "wykonaj"


class PhotoRenamer:
    """
    Main application class that orchestrates a rename run.

    Files are processed strictly one after another; the cache is shared
    by all of them and written once, before any rename happens.
    """

    def __init__(self, api_key: str, cache: GeocodeCache, naming: str = 'sequence',
                 session: Optional[requests.Session] = None,
                 logger: Optional[Logger] = None, out: Optional[TextIO] = None):
        """
        Initialize the renamer.

        Args:
            api_key: Google Geocoding API key
            cache: Loaded geocoding cache
            naming: Naming grammar, one of GRAMMARS
            session: HTTP session used for geocoding
            logger: Logging configuration, created on demand
            out: Stream for the plan and summary, stdout by default
        """
        self.logger = logger if logger is not None else Logger()
        self.log = self.logger.get_logger(__name__)
        self.out = out

        self.cache = cache
        self.metadata_extractor = MetadataExtractor()
        self.resolver = PlaceResolver(api_key, cache, session=session)
        self.planner = RenamePlanner(GRAMMARS[naming])

        self.unresolved: List[Tuple[Path, str]] = []

    def build_plan(self, source_dir: Union[str, Path]) -> Dict[Path, RenamePlanEntry]:
        """
        Extract, resolve and plan every file in ``source_dir``.

        Args:
            source_dir: Directory holding the photos

        Returns:
            Rename plan keyed by source path, in input order
        """
        files = scan_directory(source_dir)
        self.log.info(f"Found {len(files)} files in {source_dir}")

        plan: Dict[Path, RenamePlanEntry] = {}
        self.unresolved = []

        progress_bar = self.logger.create_progress_bar(len(files), "Reading files")

        for index, file_path in enumerate(files, start=1):
            record = self.metadata_extractor.extract(file_path)

            place = None
            if record.coordinates is not None:
                place = self.resolver.resolve(record.coordinates)
                if isinstance(place, ResolutionMarker):
                    self.unresolved.append((file_path, place.value))
            elif record.metadata_found:
                self.unresolved.append((file_path, "no coordinates"))
            else:
                self.unresolved.append((file_path, "no metadata"))

            plan[file_path] = self.planner.plan_entry(index, file_path, record, place)

            if progress_bar:
                progress_bar.update(1)

        if progress_bar:
            progress_bar.close()

        return plan

    def print_summary(self):
        out = self.out if self.out is not None else sys.stdout
        print(f"Files without place: {len(self.unresolved)}", file=out)
        for file_path, reason in self.unresolved:
            print(f"\t{file_path} ({reason})", file=out)

    def run(self, source_dir: Union[str, Path], apply_changes: bool = False) -> int:
        """
        Run the whole pipeline.

        Args:
            source_dir: Directory holding the photos
            apply_changes: Rename files; otherwise only preview

        Returns:
            Number of files renamed
        """
        plan = self.build_plan(source_dir)

        self.cache.save()

        executor = RenameExecutor(apply_changes=apply_changes, out=self.out)
        renamed = executor.apply(plan)
        self.print_summary()

        stats = self.resolver.get_cache_stats()
        self.logger.log_run_summary(
            total_files=len(plan),
            renamed_files=renamed,
            unresolved_files=len(self.unresolved),
            cache_hits=stats['cache_hits'],
            cache_misses=stats['cache_misses'],
            applied=apply_changes,
        )
        return renamed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="photo-place-renamer",
        description="Rename photos by sequence number, capture date and place name",
        epilog=f"Files are only renamed when the third argument is '{APPLY_TOKEN}'.",
    )
    parser.add_argument('input_directory', help='Directory holding the photos')
    parser.add_argument('api_key', help='Google Geocoding API key')
    parser.add_argument('apply_token', nargs='?', default=None,
                        help=f"'{APPLY_TOKEN}' to rename files, anything else previews")
    parser.add_argument('--naming', choices=sorted(GRAMMARS), default='sequence',
                        help='Naming grammar (default: sequence)')
    parser.add_argument('--log-level', default='WARNING',
                        help='Logging level (default: WARNING)')
    parser.add_argument('--log-file', default=None, help='Also log to this file')
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point for the application."""
    args = parse_args(argv)
    apply_changes = args.apply_token == APPLY_TOKEN

    logger = Logger(args.log_level, args.log_file)
    log = logger.get_logger(__name__)

    try:
        cache = GeocodeCache.load()
        renamer = PhotoRenamer(args.api_key, cache, naming=args.naming, logger=logger)
        renamer.run(args.input_directory, apply_changes=apply_changes)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        log.error(f"Run aborted: {e}")
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
