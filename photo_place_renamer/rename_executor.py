"""
Rename execution for photo files.

This module lists the input files and carries out (or only prints) a
fully computed rename plan.
"""

import logging
import sys
from pathlib import Path
from typing import List, Mapping, Optional, TextIO, Union

from .rename_planner import RenamePlanEntry, find_conflicts


class RenameConflictError(Exception):
    """The plan cannot be applied without overwriting a file."""


def scan_directory(source_dir: Union[str, Path]) -> List[Path]:
    """
    List the files to rename, sorted by name.

    Only regular, non-hidden files directly inside ``source_dir`` are
    returned.

    Raises:
        NotADirectoryError: If ``source_dir`` is not a directory
    """
    source_path = Path(source_dir)
    if not source_path.is_dir():
        raise NotADirectoryError(f"Input directory does not exist: {source_dir}")

    files = [
        path for path in source_path.iterdir()
        if path.is_file() and not path.name.startswith('.')
    ]
    return sorted(files, key=lambda p: p.name)


class RenameExecutor:
    """
    Prints a rename plan and, in apply mode, performs it.
    """

    def __init__(self, apply_changes: bool = False, out: Optional[TextIO] = None):
        """
        Initialize the executor.

        Args:
            apply_changes: Rename files; otherwise only preview
            out: Stream the plan is printed to, stdout by default
        """
        self.logger = logging.getLogger(__name__)
        self.apply_changes = apply_changes
        self.out = out

    def print_plan(self, plan: Mapping[Path, RenamePlanEntry]):
        out = self.out if self.out is not None else sys.stdout
        for entry in plan.values():
            line = f"{entry.source} -> {entry.target}"
            if entry.unchanged:
                line += " (unchanged)"
            print(line, file=out)

    def apply(self, plan: Mapping[Path, RenamePlanEntry]) -> int:
        """
        Print the plan and rename the files in apply mode.

        Args:
            plan: Rename plan keyed by source path

        Returns:
            Number of files renamed

        Raises:
            RenameConflictError: If the plan would overwrite a file (apply mode,
                raised before the first rename)
            OSError: If a rename fails
        """
        conflicts = find_conflicts(plan)
        if conflicts and not self.apply_changes:
            for target, sources in conflicts.items():
                self.logger.warning(
                    f"Conflicting target {target} claimed by {', '.join(str(s) for s in sources)}"
                )

        self.print_plan(plan)

        if not self.apply_changes:
            self.logger.info("Preview mode, no files renamed")
            return 0

        if conflicts:
            target, sources = next(iter(conflicts.items()))
            raise RenameConflictError(
                f"{len(conflicts)} conflicting target(s), e.g. {target} "
                f"claimed by {', '.join(str(s) for s in sources)}"
            )

        renamed = 0
        for entry in self._order_renames(plan):
            if entry.target.exists():
                raise FileExistsError(f"Target already exists: {entry.target}")
            entry.source.rename(entry.target)
            self.logger.info(f"RENAMED: {entry.source} -> {entry.target}")
            renamed += 1
        return renamed

    def _order_renames(self, plan: Mapping[Path, RenamePlanEntry]) -> List[RenamePlanEntry]:
        """
        Order renames so that a file is moved away before another takes its name.

        Raises:
            RenameConflictError: If the renames form a cycle
        """
        pending = [entry for entry in plan.values() if not entry.unchanged]
        occupied = {entry.source for entry in pending}
        ordered = []

        while pending:
            deferred = []
            for entry in pending:
                if entry.target in occupied:
                    deferred.append(entry)
                    continue
                ordered.append(entry)
                occupied.discard(entry.source)
                occupied.add(entry.target)

            if len(deferred) == len(pending):
                raise RenameConflictError(
                    "Renames form a cycle: " + ', '.join(str(e.source) for e in deferred)
                )
            pending = deferred

        return ordered
