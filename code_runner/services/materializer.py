"""Writes submitted code and stdin content into a workspace."""

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from code_runner.errors import ValidationError, WorkspaceError
from code_runner.models.language import Language
from code_runner.services.workspace import Workspace

SOURCE_EXTENSIONS: Dict[Language, str] = {
    Language.JAVA: "java",
    Language.PYTHON: "py",
    Language.JAVASCRIPT: "js",
    Language.C: "c",
    Language.CPP: "cpp",
    Language.CSHARP: "cs",
}

DEFAULT_STEM = "Program"
INPUT_FILE_NAME = "input.txt"

# First "class <Identifier>" in the source names the Java file
JAVA_CLASS_PATTERN = re.compile(r"class\s+([a-zA-Z_$][a-zA-Z\d_$]*)")

JAVA_CLASS_MISSING = "Invalid Java code. Class name is missing."


@dataclass(frozen=True)
class MaterializedSource:
    source_path: Path
    input_path: Optional[Path] = None


def source_file_name(language: Language, code: str) -> str:
    """
    Resolve the file name the toolchain expects for this language.

    Raises:
        ValidationError: for Java code without a class declaration
    """
    extension = SOURCE_EXTENSIONS[language]

    if language is Language.JAVA:
        match = JAVA_CLASS_PATTERN.search(code)
        if not match:
            raise ValidationError(JAVA_CLASS_MISSING, "", response_code=400)
        return f"{match.group(1)}.{extension}"

    return f"{DEFAULT_STEM}.{extension}"


def _write_text(path: Path, content: str) -> None:
    # newline="" keeps the code byte-for-byte as submitted
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


class SourceMaterializer:
    """Places the program and its optional input file inside a workspace."""

    async def materialize(
        self,
        workspace: Workspace,
        code: str,
        language: str,
        input_lines: Optional[List[str]] = None,
    ) -> MaterializedSource:
        resolved = Language.parse(language)
        source_path = workspace.path / source_file_name(resolved, code)

        try:
            await asyncio.to_thread(_write_text, source_path, code)

            input_path = None
            if input_lines:
                input_path = workspace.path / INPUT_FILE_NAME
                await asyncio.to_thread(_write_text, input_path, "\n".join(input_lines))
        except OSError as e:
            raise WorkspaceError(f"Could not write sources to {workspace.path}: {e}") from e

        return MaterializedSource(source_path=source_path, input_path=input_path)
