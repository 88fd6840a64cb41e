"""Default rule set for spotting problems in a project's top-level layout."""
from __future__ import annotations

import json
import logging
from typing import Iterable, List

from attrs import define, field

from repo_scout.interfaces import RemoteReader
from repo_scout.models import Issue, ProjectStructure

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_FILES = ("package.json", "README.md", "Dockerfile")
DEFAULT_FORBIDDEN_FILES = (".env",)


def _as_tuple(values: Iterable[str]) -> tuple:
    return tuple(str(value) for value in values)


@define(slots=True)
class ProjectDetector:
    """Flags missing critical files, committed secrets and stale dependencies."""

    reader: RemoteReader
    required_files: tuple = field(default=DEFAULT_REQUIRED_FILES, converter=_as_tuple)
    forbidden_files: tuple = field(default=DEFAULT_FORBIDDEN_FILES, converter=_as_tuple)

    async def detect(self, structure: ProjectStructure) -> List[Issue]:
        names = set(structure.file_names())
        issues: List[Issue] = []

        for required in self.required_files:
            if required not in names:
                issues.append(
                    Issue(
                        type="missing_file",
                        severity="high",
                        file=required,
                        message=f"Critical file missing: {required}",
                    )
                )

        for forbidden in self.forbidden_files:
            if forbidden in names:
                issues.append(
                    Issue(
                        type="security",
                        severity="critical",
                        file=forbidden,
                        message=f"{forbidden} file should not be committed",
                    )
                )

        if "package.json" in names:
            issue = await self._check_dependencies()
            if issue is not None:
                issues.append(issue)

        logger.info("Project scan completed: %d issues found", len(issues))
        return issues

    async def _check_dependencies(self):
        try:
            manifest = json.loads(await self.reader.read_file("package.json"))
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to parse package.json: %s", exc)
            return None
        if isinstance(manifest, dict) and manifest.get("dependencies"):
            return Issue(
                type="warning",
                severity="medium",
                file="package.json",
                message="Review and update dependencies periodically",
            )
        return None


__all__ = ["ProjectDetector", "DEFAULT_REQUIRED_FILES", "DEFAULT_FORBIDDEN_FILES"]
