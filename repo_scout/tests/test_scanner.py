"""Tests for the scanner agent."""
from __future__ import annotations

import asyncio
import logging

import pytest
from attrs import asdict
from conftest import MISSING_README, FakeDetector, FakeReader, FakeReporter, FakeResponder

from repo_scout.agents.scanner import ISSUE_LABELS, ScannerAgent, language_for
from repo_scout.cache import ProjectStructureCache
from repo_scout.errors import RemoteError, ScanError


def run(coro):
    return asyncio.run(coro)


def make_scanner(reader=None, detector=None, responder=None, reporter=None, **kwargs) -> ScannerAgent:
    reader = reader or FakeReader(files={"server.js": "console.log('hi')"})
    return ScannerAgent(
        cache=ProjectStructureCache(reader),
        detector=detector or FakeDetector(),
        reader=reader,
        responder=responder or FakeResponder(),
        issue_reporter=reporter,
        repository="NLarchive/my-webapp-hf",
        **kwargs,
    )


def test_clean_scan_recommends_regular_review() -> None:
    scanner = make_scanner()
    report = run(scanner.perform_scan())

    assert [asdict(item) for item in report.recommendations] == [
        {
            "priority": "low",
            "suggestion": "Keep code reviewed regularly",
            "reason": "No critical issues found",
        }
    ]
    assert report.issues == []
    assert report.duration_ms >= 0
    assert scanner.get_last() is report


def test_issues_produce_one_ai_recommendation() -> None:
    responder = FakeResponder(reply="1. Add a README")
    scanner = make_scanner(detector=FakeDetector([MISSING_README]), responder=responder)
    report = run(scanner.perform_scan())

    assert len(report.recommendations) == 1
    recommendation = report.recommendations[0]
    assert recommendation.priority == "high"
    assert recommendation.suggestion == "1. Add a README"
    assert "- [high] Critical file missing: README.md" in responder.prompts[0]


def test_recommendation_failure_degrades_to_empty_list() -> None:
    responder = FakeResponder(error=RuntimeError("quota"))
    scanner = make_scanner(detector=FakeDetector([MISSING_README]), responder=responder)
    report = run(scanner.perform_scan())
    assert report.recommendations == []


def test_structure_failure_raises_scan_error_and_stores_nothing() -> None:
    scanner = make_scanner(reader=FakeReader(error=RemoteError("timeout")))
    with pytest.raises(ScanError, match="timeout"):
        run(scanner.perform_scan())
    assert scanner.get_last() is None


def test_detector_failure_raises_scan_error() -> None:
    scanner = make_scanner(detector=FakeDetector(error=ValueError("bad rules")))
    with pytest.raises(ScanError):
        run(scanner.perform_scan())
    assert scanner.get_last() is None


def test_analysis_covers_first_source_files_and_skips_failures() -> None:
    entries = [
        {"name": f"mod{index}.py", "path": f"pkg/mod{index}.py", "type": "file"} for index in range(7)
    ]
    entries.append({"name": "notes.txt", "path": "notes.txt", "type": "file"})
    files = {f"pkg/mod{index}.py": "x = 1" for index in range(7) if index != 2}
    reader = FakeReader(entries=entries, files=files)
    responder = FakeResponder()
    scanner = make_scanner(reader=reader, responder=responder)

    report = run(scanner.perform_scan())

    assert [item.name for item in report.analysis.files] == ["mod0.py", "mod1.py", "mod3.py", "mod4.py"]
    assert reader.read_calls == [f"pkg/mod{index}.py" for index in range(5)]
    assert responder.analyzed == ["python"] * 4


def test_auto_fix_files_an_issue_when_problems_found() -> None:
    reporter = FakeReporter()
    scanner = make_scanner(detector=FakeDetector([MISSING_README]), reporter=reporter, auto_fix=True)
    run(scanner.perform_scan())

    assert len(reporter.filed) == 1
    filed = reporter.filed[0]
    assert filed["title"].startswith("AI Scanner: Issues Detected (")
    assert filed["labels"] == list(ISSUE_LABELS)
    assert "**[high]** Critical file missing: README.md" in filed["body"]
    assert "**Repository:** NLarchive/my-webapp-hf" in filed["body"]


def test_auto_fix_skips_clean_scans_and_disabled_flag() -> None:
    reporter = FakeReporter()
    run(make_scanner(reporter=reporter, auto_fix=True).perform_scan())
    run(make_scanner(detector=FakeDetector([MISSING_README]), reporter=reporter).perform_scan())
    assert reporter.filed == []


def test_issue_filing_failure_does_not_fail_the_scan() -> None:
    scanner = make_scanner(
        detector=FakeDetector([MISSING_README]),
        reporter=FakeReporter(error=RemoteError("forbidden", status=403)),
        auto_fix=True,
    )
    report = run(scanner.perform_scan())
    assert scanner.get_last() is report



class StringReporter:
    async def file_issue(self, title, body, labels=()):
        return "filed"


def test_unexpected_issue_confirmation_does_not_fail_the_scan() -> None:
    scanner = make_scanner(detector=FakeDetector([MISSING_README]), reporter=StringReporter(), auto_fix=True)
    report = run(scanner.perform_scan())
    assert scanner.get_last() is report
    assert report.issues == [MISSING_README]

def test_detect_issues_wraps_failures() -> None:
    scanner = make_scanner(detector=FakeDetector([MISSING_README]))
    assert run(scanner.detect_issues()) == [MISSING_README]

    broken = make_scanner(reader=FakeReader(error=RemoteError("offline")))
    with pytest.raises(ScanError, match="offline"):
        run(broken.detect_issues())


def test_periodic_scanning_runs_immediately_and_is_idempotent(caplog) -> None:
    async def scenario() -> None:
        detector = FakeDetector()
        scanner = make_scanner(detector=detector)
        try:
            scanner.start_periodic(3600)
            assert scanner.is_scanning
            with caplog.at_level(logging.WARNING, logger="repo_scout.agents.scanner"):
                scanner.start_periodic(3600)
            assert "Scanning already active" in caplog.text

            for _ in range(50):
                if scanner.get_last() is not None:
                    break
                await asyncio.sleep(0.02)
            assert scanner.get_last() is not None
            assert detector.calls == 1

            scanner.stop_periodic()
            scanner.stop_periodic()
            assert not scanner.is_scanning
        finally:
            scanner.shutdown()

    run(scenario())


class FlakyDetector(FakeDetector):
    async def detect(self, structure):
        self.calls += 1
        if self.calls == 1:
            raise RemoteError("rate limited", status=403)
        return []


class GatedDetector(FakeDetector):
    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def detect(self, structure):
        self.calls += 1
        self.entered.set()
        await self.gate.wait()
        return []


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def test_periodic_scan_repeats_after_a_failed_tick() -> None:
    async def scenario() -> None:
        detector = FlakyDetector()
        scanner = make_scanner(detector=detector)
        try:
            scanner.start_periodic(0.05)
            await wait_until(lambda: detector.calls >= 2 and scanner.get_last() is not None)
        finally:
            scanner.shutdown()
        assert scanner.get_last().issues == []

    run(scenario())


def test_stop_periodic_lets_the_running_scan_finish() -> None:
    async def scenario() -> None:
        detector = GatedDetector()
        scanner = make_scanner(detector=detector)
        try:
            scanner.start_periodic(3600)
            await asyncio.wait_for(detector.entered.wait(), timeout=2.0)

            scanner.stop_periodic()
            assert not scanner.is_scanning
            assert scanner.get_last() is None

            detector.gate.set()
            await wait_until(lambda: scanner.get_last() is not None)
        finally:
            scanner.shutdown()
        assert detector.calls == 1

    run(scenario())


def test_non_positive_interval_is_rejected() -> None:
    async def scenario() -> None:
        scanner = make_scanner()
        with pytest.raises(ValueError):
            scanner.start_periodic(0)
        assert not scanner.is_scanning

    run(scenario())


@pytest.mark.parametrize(
    "filename, language",
    [
        ("app.ts", "typescript"),
        ("App.tsx", "tsx"),
        ("App.jsx", "jsx"),
        ("main.py", "python"),
        ("Main.java", "java"),
        ("main.go", "go"),
        ("index.js", "javascript"),
    ],
)
def test_language_for(filename, language) -> None:
    assert language_for(filename) == language
