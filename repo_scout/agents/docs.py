"""Documentation generator built on the responder."""
from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath

from attrs import define

from repo_scout.cache import ProjectStructureCache
from repo_scout.interfaces import RemoteReader, Responder
from repo_scout.models import ProjectStructure

logger = logging.getLogger(__name__)

FILE_EXCERPT_CHARS = 2000
_KEY_FILES = re.compile(r"package\.json|\.env\.example|Dockerfile|docker-compose", re.IGNORECASE)

_DOC_LANGUAGES = {
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "jsx",
    ".tsx": "tsx",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


@define(slots=True)
class DocGenerator:
    cache: ProjectStructureCache
    reader: RemoteReader
    responder: Responder

    async def project_docs(self, structure: ProjectStructure) -> str:
        prompt = (
            "Generate concise documentation for this project structure. Include:\n"
            "1. Project overview\n"
            "2. Directory structure explanation\n"
            "3. Key files purpose\n"
            "4. How to get started\n\n"
            "Project structure:\n"
            f"- Files: {', '.join(entry.name for entry in structure.files)}\n"
            f"- Directories: {', '.join(entry.name for entry in structure.directories)}"
        )
        return await self.responder.generate(prompt)

    async def file_docs(self, path: str) -> str:
        content = await self.reader.read_file(path)
        language = _DOC_LANGUAGES.get(PurePosixPath(path).suffix, "text")
        prompt = (
            f"Analyze this {language} file and generate:\n"
            "1. Purpose/Summary\n"
            "2. Key functions or exports\n"
            "3. Dependencies\n"
            "4. Usage example (if applicable)\n\n"
            f"Code:\n```{language}\n{content[:FILE_EXCERPT_CHARS]}\n```"
        )
        logger.debug("Generating documentation for %s", path)
        return await self.responder.generate(prompt)

    async def readme(self) -> str:
        structure = await self.cache.get()
        key_files = [
            entry.name
            for entry in structure.files
            if _KEY_FILES.search(entry.name) or entry.name.endswith(".md")
        ]
        prompt = (
            "Create a professional README.md for this project. Include:\n"
            "1. Project title and description\n"
            "2. Features\n"
            "3. Prerequisites\n"
            "4. Installation steps\n"
            "5. Configuration (with example .env)\n"
            "6. Running the application\n"
            "7. API documentation\n"
            "8. Architecture overview\n"
            "9. Contributing\n"
            "10. License\n\n"
            f"Key files in project: {', '.join(key_files)}"
        )
        return await self.responder.generate(prompt)


__all__ = ["DocGenerator"]
