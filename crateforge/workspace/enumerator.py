from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from crateforge.config.types import DEFAULT_MANIFEST

from .types import ProjectUnit, WorkspaceUnreadable


class Workspace:
    """Immediate sub-directories of a root, as project units.

    Iteration re-lists the root every time, so the same object can be walked
    more than once. Hidden entries are left out and names are sorted, matching
    what a shell ``*/`` glob would expand to.
    """

    def __init__(self, root: str | Path, manifest_name: str = DEFAULT_MANIFEST):
        self.root = Path(root)
        self.manifest_name = manifest_name

    def __iter__(self) -> Iterator[ProjectUnit]:
        return self.candidates()

    def candidates(self) -> Iterator[ProjectUnit]:
        for name in self._list_dirs():
            path = self.root / name
            manifest = path / self.manifest_name
            yield ProjectUnit(path, manifest, manifest.is_file())

    def units(self, *, require_manifest: bool) -> Iterator[ProjectUnit]:
        for unit in self.candidates():
            if require_manifest and not unit.has_manifest:
                continue
            yield unit

    def partition(
        self, *, require_manifest: bool
    ) -> tuple[tuple[ProjectUnit, ...], tuple[ProjectUnit, ...]]:
        """List the root once and split it into (eligible, skipped) units."""
        eligible: list[ProjectUnit] = []
        skipped: list[ProjectUnit] = []
        for unit in self.candidates():
            if require_manifest and not unit.has_manifest:
                skipped.append(unit)
            else:
                eligible.append(unit)
        return tuple(eligible), tuple(skipped)

    def _list_dirs(self) -> list[str]:
        if not self.root.exists():
            raise WorkspaceUnreadable(self.root, "no such directory")

        if not self.root.is_dir():
            raise WorkspaceUnreadable(self.root, "not a directory")

        try:
            with os.scandir(self.root) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if not entry.name.startswith(".") and entry.is_dir()
                ]
        except OSError as exc:
            raise WorkspaceUnreadable(self.root, exc.strerror or str(exc)) from exc

        return sorted(names)
