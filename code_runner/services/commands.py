"""Per-language compile-and-run command templates.

Commands are argument lists handed straight to the process spawner; no shell
parses them, so workspace paths never need quoting.
"""

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from code_runner.core.config import Settings
from code_runner.models.language import Language

BINARY_NAME = "program"
ASSEMBLY_NAME = "Program.exe"


@dataclass(frozen=True)
class Toolchain:
    """Executable names for each external compiler or runtime."""

    python: str = "python3"
    node: str = "node"
    javac: str = "javac"
    java: str = "java"
    gcc: str = "gcc"
    gxx: str = "g++"
    mcs: str = "mcs"
    mono: str = "mono"

    @classmethod
    def from_settings(cls, settings: Settings) -> "Toolchain":
        return cls(
            python=settings.PYTHON_COMMAND,
            node=settings.NODE_COMMAND,
            javac=settings.JAVAC_COMMAND,
            java=settings.JAVA_COMMAND,
            gcc=settings.GCC_COMMAND,
            gxx=settings.GXX_COMMAND,
            mcs=settings.MCS_COMMAND,
            mono=settings.MONO_COMMAND,
        )


@dataclass(frozen=True)
class ExecutionCommand:
    """
    Ordered steps run like `step1 && step2`.

    Only the final step reads stdin from `stdin_path`.
    """

    steps: Tuple[Tuple[str, ...], ...]
    cwd: Path
    stdin_path: Optional[Path] = None

    def render(self, step: Optional[int] = None) -> str:
        """Shell-like rendering, for logs only."""
        steps = self.steps if step is None else self.steps[step:step + 1]
        rendered = " && ".join(shlex.join(argv) for argv in steps)
        if self.stdin_path is not None and (step is None or step == len(self.steps) - 1):
            rendered += f" < {shlex.quote(str(self.stdin_path))}"
        return rendered


@dataclass
class CommandSynthesizer:
    toolchain: Toolchain = field(default_factory=Toolchain)

    def synthesize(
        self,
        language: str,
        source_path: Path,
        input_path: Optional[Path] = None,
    ) -> ExecutionCommand:
        """
        Map a language and its workspace files to a command.

        Raises:
            ValidationError: for an unsupported language
        """
        resolved = Language.parse(language)
        workspace = source_path.parent
        source = str(source_path)
        tc = self.toolchain

        steps: List[List[str]]
        if resolved is Language.JAVA:
            steps = [
                [tc.javac, source],
                [tc.java, "-cp", str(workspace), source_path.stem],
            ]
        elif resolved is Language.PYTHON:
            steps = [[tc.python, source]]
        elif resolved is Language.JAVASCRIPT:
            steps = [[tc.node, source]]
        elif resolved in (Language.C, Language.CPP):
            compiler = tc.gcc if resolved is Language.C else tc.gxx
            binary = str(workspace / BINARY_NAME)
            steps = [[compiler, source, "-o", binary], [binary]]
        else:
            assembly = str(workspace / ASSEMBLY_NAME)
            steps = [[tc.mcs, source, f"-out:{assembly}"], [tc.mono, assembly]]

        return ExecutionCommand(
            steps=tuple(tuple(argv) for argv in steps),
            cwd=workspace,
            stdin_path=input_path,
        )
