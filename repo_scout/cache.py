"""Short-lived cache of the remote project structure."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from attrs import define, field

from repo_scout.interfaces import RemoteReader
from repo_scout.models import DirectoryEntry, FileEntry, ProjectStructure

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


@define(slots=False)
class ProjectStructureCache:
    """Memoizes ``reader.list_files("")`` for ``ttl`` seconds.

    Reader failures propagate unchanged; the previous snapshot, if any,
    stays in place but is not served once expired.
    """

    reader: RemoteReader
    ttl: float = DEFAULT_TTL_SECONDS
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _snapshot: Optional[ProjectStructure] = field(init=False, default=None)
    _expiry: float = field(init=False, default=0.0)

    async def get(self) -> ProjectStructure:
        now = self.clock()
        if self._snapshot is not None and now < self._expiry:
            logger.debug("Using cached project structure")
            return self._snapshot

        entries = await self.reader.list_files("")
        structure = ProjectStructure()
        for entry in entries:
            kind = entry.get("type")
            if kind == "file":
                structure.files.append(
                    FileEntry(name=entry["name"], path=entry["path"], size=entry.get("size"))
                )
            elif kind == "dir":
                structure.directories.append(DirectoryEntry(name=entry["name"], path=entry["path"]))

        self._snapshot = structure
        self._expiry = now + self.ttl
        logger.info(
            "Project structure retrieved: %d files, %d dirs",
            len(structure.files),
            len(structure.directories),
        )
        return structure

    def invalidate(self) -> None:
        self._snapshot = None
        self._expiry = 0.0

    @property
    def cached(self) -> Optional[ProjectStructure]:
        return self._snapshot


__all__ = ["ProjectStructureCache", "DEFAULT_TTL_SECONDS"]
