"""Tests for the documentation generator prompts."""
from __future__ import annotations

import asyncio

from conftest import FakeReader, FakeResponder
from repo_scout.agents.docs import FILE_EXCERPT_CHARS, DocGenerator
from repo_scout.cache import ProjectStructureCache


def run(coro):
    return asyncio.run(coro)


def build(files=None):
    reader = FakeReader(files=files or {})
    responder = FakeResponder(reply="docs")
    return DocGenerator(cache=ProjectStructureCache(reader), reader=reader, responder=responder), responder


def test_project_docs_lists_files_and_directories() -> None:
    docs, responder = build()

    async def scenario() -> str:
        structure = await docs.cache.get()
        return await docs.project_docs(structure)

    assert run(scenario()) == "docs"
    prompt = responder.prompts[0]
    assert "- Files: README.md, Dockerfile, package.json, server.js" in prompt
    assert "- Directories: src" in prompt


def test_file_docs_truncates_content() -> None:
    docs, responder = build(files={"server.js": "x" * (FILE_EXCERPT_CHARS + 500)})
    run(docs.file_docs("server.js"))

    prompt = responder.prompts[0]
    assert prompt.startswith("Analyze this javascript file")
    assert "x" * FILE_EXCERPT_CHARS + "\n```" in prompt
    assert "x" * (FILE_EXCERPT_CHARS + 1) not in prompt


def test_readme_mentions_key_files_only() -> None:
    docs, responder = build()
    run(docs.readme())

    key_line = responder.prompts[0].splitlines()[-1]
    assert key_line == "Key files in project: README.md, Dockerfile, package.json"
