"""Scanner agent: periodic project scans that end in a single latest report."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Tuple

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from attrs import define, field

from repo_scout.cache import ProjectStructureCache
from repo_scout.errors import ScanError
from repo_scout.interfaces import Detector, IssueReporter, RemoteReader, Responder
from repo_scout.models import (
    FileAnalysis,
    FileEntry,
    Issue,
    ProjectAnalysis,
    ProjectStructure,
    Recommendation,
    Report,
)
from repo_scout.runner.models import utc_now

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go")
ISSUE_LABELS = ("ai-detected", "needs-review", "auto-generated")
SCAN_JOB_ID = "repo-scout-scan"

_LANGUAGES = (
    (".tsx", "tsx"),
    (".ts", "typescript"),
    (".jsx", "jsx"),
    (".py", "python"),
    (".java", "java"),
    (".go", "go"),
)

RECOMMENDATION_PROMPT = """Based on these project issues, suggest 3 actionable fixes:

{issues}

For each suggestion provide:
1. What to fix
2. Why it's important
3. How to implement (brief)"""


def language_for(filename: str) -> str:
    for suffix, language in _LANGUAGES:
        if filename.endswith(suffix):
            return language
    return "javascript"


def _as_tuple(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(str(value) for value in values)


@define(slots=False)
class ScannerAgent:
    """Runs scan cycles and keeps the most recent report.

    A cycle fetches the structure (cached), detects issues, asks the
    responder to analyse up to ``analyze_limit`` source files, derives
    recommendations and, when ``auto_fix`` is on and issues were found, files
    an issue. Only the first two steps can fail the scan.
    """

    cache: ProjectStructureCache
    detector: Detector
    reader: RemoteReader
    responder: Responder
    issue_reporter: Optional[IssueReporter] = None
    auto_fix: bool = False
    interval: float = 3600.0
    analyze_limit: int = 5
    source_extensions: Tuple[str, ...] = field(default=DEFAULT_SOURCE_EXTENSIONS, converter=_as_tuple)
    repository: str = ""
    branch: str = "main"
    _scheduler: Optional[AsyncIOScheduler] = field(init=False, default=None)
    _job_id: Optional[str] = field(init=False, default=None)
    _last_report: Optional[Report] = field(init=False, default=None)

    @property
    def is_scanning(self) -> bool:
        return self._job_id is not None

    def get_last(self) -> Optional[Report]:
        return self._last_report

    async def detect_issues(self) -> List[Issue]:
        _, issues = await self._detect()
        return issues

    async def _detect(self) -> Tuple[ProjectStructure, List[Issue]]:
        try:
            structure = await self.cache.get()
            issues = list(await self.detector.detect(structure))
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Scan failed: %s", exc)
            raise ScanError(str(exc) or exc.__class__.__name__) from exc
        return structure, issues

    async def perform_scan(self) -> Report:
        started = time.perf_counter()
        logger.info("Starting project scan...")

        structure, issues = await self._detect()
        analysis = await self.analyze_project(structure)
        recommendations = await self.generate_recommendations(issues)

        report = Report(
            timestamp=utc_now(),
            duration_ms=int((time.perf_counter() - started) * 1000),
            structure=structure,
            issues=issues,
            analysis=analysis,
            recommendations=recommendations,
        )
        self._last_report = report
        logger.info("Scan completed in %dms: %d issues found", report.duration_ms, len(issues))

        if self.auto_fix and issues:
            await self.create_issue_from_scan(report)
        return report

    def source_files(self, structure: ProjectStructure) -> List[FileEntry]:
        return [entry for entry in structure.files if entry.name.endswith(self.source_extensions)]

    async def analyze_project(self, structure: ProjectStructure) -> ProjectAnalysis:
        analysis = ProjectAnalysis()
        for entry in self.source_files(structure)[: self.analyze_limit]:
            try:
                content = await self.reader.read_file(entry.path)
                result = await self.responder.analyze_code(content, language_for(entry.name))
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Failed to analyze %s: %s", entry.name, exc)
                continue
            analysis.files.append(FileAnalysis(name=entry.name, path=entry.path, analysis=result))
        return analysis

    async def generate_recommendations(self, issues: List[Issue]) -> List[Recommendation]:
        if not issues:
            return [
                Recommendation(
                    priority="low",
                    suggestion="Keep code reviewed regularly",
                    reason="No critical issues found",
                )
            ]

        issues_text = "\n".join(f"- [{issue.severity}] {issue.message}" for issue in issues)
        try:
            response = await self.responder.generate(RECOMMENDATION_PROMPT.format(issues=issues_text))
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Failed to generate recommendations: %s", exc)
            return []
        return [
            Recommendation(
                priority="high",
                suggestion=response,
                reason="AI-generated recommendations based on scan",
            )
        ]

    async def create_issue_from_scan(self, report: Report) -> None:
        """File the report as an issue; failures are logged and dropped."""
        if self.issue_reporter is None:
            logger.warning("Auto-fix enabled but no issue reporter configured")
            return
        title = f"AI Scanner: Issues Detected ({report.timestamp.date().isoformat()})"
        try:
            issue = await self.issue_reporter.file_issue(title, self.format_issue_body(report), ISSUE_LABELS)
            number = issue.get("number") if isinstance(issue, Mapping) else None
            logger.info("Created issue #%s from scan", number)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Failed to create issue for %s: %s", self.repository or "repository", exc)

    def format_issue_body(self, report: Report) -> str:
        lines = ["## AI Scanner Report", ""]
        lines.append(f"**Repository:** {self.repository}")
        lines.append(f"**Branch:** {self.branch}")
        lines.append("")

        if report.issues:
            lines.append("### Issues Found")
            for issue in report.issues:
                lines.append(f"- **[{issue.severity}]** {issue.message}")
                lines.append(f"  - File: `{issue.file}`")
                lines.append(f"  - Type: {issue.type}")
                lines.append("")
        else:
            lines.extend(["### No Critical Issues Found", ""])

        if report.recommendations:
            lines.append("### Recommendations")
            for recommendation in report.recommendations:
                lines.append(f"- **[{recommendation.priority}]** {recommendation.suggestion}")
                lines.append("")

        if report.analysis.files:
            lines.append("### Code Analysis")
            for analysed in report.analysis.files:
                lines.append(f"- **{analysed.name}**: Analyzed successfully")
            lines.append("")

        lines.append("---")
        lines.append(f"_Scanned at: {report.timestamp.isoformat()}_")
        lines.append(f"_Scan duration: {report.duration_ms}ms_")
        lines.append("_By: AI Scanner Agent_")
        return "\n".join(lines)

    def start_periodic(self, interval: Optional[float] = None) -> None:
        """Scan now and then every ``interval`` seconds. Needs a running loop."""
        if self._job_id is not None:
            logger.warning("Scanning already active")
            return
        seconds = self.interval if interval is None else float(interval)
        if seconds <= 0:
            raise ValueError("scan interval must be positive")

        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone="UTC", event_loop=asyncio.get_running_loop())
        self._scheduler.add_job(
            self._scheduled_scan,
            trigger="interval",
            seconds=seconds,
            id=SCAN_JOB_ID,
            name="repo-scout-scan",
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
        )
        self._job_id = SCAN_JOB_ID
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info("Starting periodic scanning every %.0fs", seconds)

    def stop_periodic(self) -> None:
        """Cancel future scans; a scan already running is left to finish."""
        if self._job_id is None:
            return
        if self._scheduler is not None and self._scheduler.get_job(self._job_id):
            self._scheduler.remove_job(self._job_id)
        self._job_id = None
        logger.info("Periodic scanning stopped")

    def shutdown(self) -> None:
        """Stop scanning and tear down the scheduler, cancelling in-flight jobs."""
        self.stop_periodic()
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    async def _scheduled_scan(self) -> None:
        try:
            await self.perform_scan()
        except ScanError as exc:
            logger.error("Periodic scan failed, retrying next interval: %s", exc)


__all__ = ["ScannerAgent", "language_for", "DEFAULT_SOURCE_EXTENSIONS", "ISSUE_LABELS"]
